# Overview: Utility functions for loading and validating role tables.

import json

from ..validation import ValidationError
from .categories import Action, Module, Role


def validate_role_table(raw: dict) -> dict:
    """
    Normalize a {role: {module: [actions]}} mapping into frozensets.

    Unknown roles, modules or actions are rejected rather than ignored so a
    typo in a configuration file cannot silently widen or narrow access.
    Roles and modules missing from the mapping get no actions.
    """
    if not isinstance(raw, dict):
        raise ValidationError("Role table must be an object keyed by role")

    table = {}
    for role, modules in raw.items():
        role = Role.LEGACY_ALIASES.get(role, role)
        if role not in Role.ALL:
            raise ValidationError(f"Unknown role in role table: {role}")
        if not isinstance(modules, dict):
            raise ValidationError(f"Modules for role {role} must be an object")

        role_perms = {}
        for module, actions in modules.items():
            if module not in Module.ALL:
                raise ValidationError(f"Unknown module in role table: {module}")
            if not isinstance(actions, (list, tuple, set, frozenset)):
                raise ValidationError(f"Actions for {role}/{module} must be a list")
            unknown = [a for a in actions if a not in Action.ALL]
            if unknown:
                raise ValidationError(f"Unknown actions for {role}/{module}: {', '.join(map(str, unknown))}")
            role_perms[module] = frozenset(actions)
        table[role] = role_perms
    return table


def load_role_table(path: str) -> dict:
    """Read a role table from a JSON file."""
    with open(path, encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Role table {path} is not valid JSON: {exc}")
    return validate_role_table(raw)
