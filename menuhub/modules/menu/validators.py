"""Menu validators — reject invalid staged attributes before any state changes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from menuhub.exceptions import ValidationException
from menuhub.modules.menu.schemas import CatalogItemCreate, CatalogItemUpdate


def _details(error: ValidationError) -> list[dict]:
    details = []
    for err in error.errors():
        field_path = ".".join(str(loc) for loc in err.get("loc", ())) or "(root)"
        details.append({"field": field_path, "message": err.get("msg", "")})
    return details


def parse_item_create(data: CatalogItemCreate | Mapping[str, Any]) -> CatalogItemCreate:
    """Coerce *data* into a validated :class:`CatalogItemCreate`.

    Raises :class:`ValidationException` with per-field detail on failure.
    """
    if isinstance(data, CatalogItemCreate):
        return data
    try:
        return CatalogItemCreate.model_validate(dict(data))
    except ValidationError as exc:
        raise ValidationException("Menu item attributes are invalid", details=_details(exc)) from exc


def parse_item_changes(data: CatalogItemUpdate | Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial update and return only the fields that were set.

    Explicit ``None`` values are dropped; an update that sets nothing is rejected.
    """
    if not isinstance(data, CatalogItemUpdate):
        try:
            data = CatalogItemUpdate.model_validate(dict(data))
        except ValidationError as exc:
            raise ValidationException(
                "Menu item changes are invalid", details=_details(exc)
            ) from exc

    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if not changes:
        raise ValidationException("No changes supplied")
    return changes
