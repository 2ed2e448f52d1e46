#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.canvass_api.app.config import load_settings
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


def main() -> int:
    settings = load_settings()
    repository = CanvassRepository(settings.database_url)
    try:
        repository.create_schema()
        target = repository.engine.url.render_as_string(hide_password=True)
    finally:
        repository.dispose()
    print(f"[DONE] canvass schema initialized on {target}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
