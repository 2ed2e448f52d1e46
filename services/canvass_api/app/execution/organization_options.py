from __future__ import annotations

from typing import Any, Dict, List, get_args
from uuid import uuid4

from packages.address_pipeline.normalize import normalize_place_name
from services.canvass_api.app.dependencies import Actor
from services.canvass_api.app.models.option_models import OptionCreateRequest, OptionListKey
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


def option_value(label: str) -> str:
    value = normalize_place_name(label).replace(" ", "_")
    return value or f"option_{uuid4().hex[:6]}"


def grouped_options(repository: CanvassRepository, actor: Actor) -> Dict[str, List[dict[str, Any]]]:
    grouped: Dict[str, List[dict[str, Any]]] = {key: [] for key in get_args(OptionListKey)}
    for option in repository.list_options(actor.organization_id):
        grouped.setdefault(option["list_key"], []).append(option)
    return grouped


def save_option(repository: CanvassRepository, actor: Actor, payload: OptionCreateRequest) -> dict[str, Any]:
    # Saving an existing value relabels it and reactivates it.
    return repository.upsert_option(
        actor.organization_id,
        payload.list_key,
        payload.value or option_value(payload.label),
        payload.label,
        payload.sort or 0,
    )
