# Overview: Lookups over the permission definitions, keyed by code.

from __future__ import annotations

from .definitions import PERMISSION_DEFINITIONS


_DEFINITIONS_BY_CODE = {perm[0]: perm for perm in PERMISSION_DEFINITIONS}


def get_all_permission_codes() -> list[str]:
    return list(_DEFINITIONS_BY_CODE)


def get_permissions_by_category(category: str) -> list[tuple]:
    """Definitions in a category; the category name is case-insensitive."""
    category = category.upper()
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == category]


def get_permission_definition(code: str) -> dict | None:
    """JSON-ready definition for a code, or None when the code is unknown."""
    perm = _DEFINITIONS_BY_CODE.get(code)
    if perm is None:
        return None
    code, name, description, category = perm
    return {"code": code, "name": name, "description": description, "category": category}


def validate_permission_code(code: str) -> bool:
    return isinstance(code, str) and code in _DEFINITIONS_BY_CODE
