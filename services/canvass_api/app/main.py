import logging

from fastapi import FastAPI

from services.canvass_api.app.dependencies import get_settings
from services.canvass_api.app.errors import CanvassError, canvass_error_handler
from services.canvass_api.app.routers import addresses, assignments, options, territories, visits


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(title="Canvass API", version="0.1.0")
    app.add_exception_handler(CanvassError, canvass_error_handler)
    app.include_router(territories.router, tags=["territories"])
    app.include_router(addresses.router, tags=["addresses"])
    app.include_router(visits.router, tags=["visits"])
    app.include_router(assignments.router, tags=["assignments"])
    app.include_router(options.router, tags=["options"])
    return app


app = create_app()
