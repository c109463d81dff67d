# Overview: Role-based authorization over the static role -> module -> actions table.

"""
Permission Checking

DESIGN PRINCIPLES:
- Fail closed: deny by default, require an explicit grant in the table
- Total: allows() answers for any input and never raises
- Pure: no I/O after construction
- Mutating services call require() before touching anything
"""

from __future__ import annotations

import logging

from ..permissions import DEFAULT_ROLE_PERMISSIONS, Action, Module, Role, load_role_table

logger = logging.getLogger(__name__)


class AuthorizationDenied(Exception):
    """Raised when the acting role lacks the permission; nothing was changed."""

    def __init__(self, role, module: str, action: str):
        super().__init__(f"Role {role or 'anonymous'} may not {action} in {module}")
        self.role = role
        self.module = module
        self.action = action


class AuthorizationPolicy:
    def __init__(self, table: dict | None = None):
        source = DEFAULT_ROLE_PERMISSIONS if table is None else table
        # Copy so later edits to the source mapping cannot change decisions.
        self._table = {
            role: {module: frozenset(actions) for module, actions in modules.items()}
            for role, modules in source.items()
        }

    @classmethod
    def from_file(cls, path: str) -> "AuthorizationPolicy":
        return cls(load_role_table(path))

    def allows(self, role, module, action) -> bool:
        """True only when the table explicitly grants action on module to role."""
        if not isinstance(role, str) or not isinstance(module, str) or not isinstance(action, str):
            return False
        role = Role.LEGACY_ALIASES.get(role, role)
        return action in self._table.get(role, {}).get(module, frozenset())

    def require(self, actor, module: str, action: str) -> None:
        """
        Raise AuthorizationDenied unless actor's role allows action on module.

        actor is an Employee (or anything with a .role); None is denied.
        """
        role = getattr(actor, "role", None)
        if not self.allows(role, module, action):
            logger.warning(
                "Authorization denied: actor=%s role=%s module=%s action=%s",
                getattr(actor, "id", None), role, module, action,
            )
            raise AuthorizationDenied(role, module, action)

    def permissions_for(self, role) -> dict[str, list[str]]:
        """{module: [actions]} for every module, empty lists where nothing is granted."""
        return {
            module: [a for a in Action.ALL if self.allows(role, module, a)]
            for module in Module.ALL
        }
