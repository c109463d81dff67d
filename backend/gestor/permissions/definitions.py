# Overview: Built-in role -> module -> actions table.
# Pairs that are not listed deny every action for that module.

from .categories import Action, Module, Role

_CRUD = frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE})

_POS_FULL = frozenset({Action.VIEW, Action.CREATE, Action.APPLY_DISCOUNT, Action.ADD_FREE_ITEM})


# -- MANAGER: full access --

MANAGER_PERMISSIONS = {
    Module.INVENTORY: _CRUD | {Action.MANAGE_STOCK, Action.AUDIT},
    Module.POINT_OF_SALE: _POS_FULL,
    Module.CUSTOMERS: _CRUD,
    Module.SUPPLIERS: _CRUD,
    Module.EMPLOYEES: _CRUD,
    Module.EXPENSES: frozenset({Action.VIEW, Action.CREATE, Action.DELETE}),
    Module.SETTINGS: frozenset({Action.VIEW, Action.EDIT}),
    Module.SALES_HISTORY: frozenset({Action.VIEW, Action.DELETE}),
    Module.REPORTING_TOOLS: frozenset({Action.VIEW}),
    Module.STOREFRONT: frozenset({Action.VIEW}),
}


# -- ADMIN: operations, no ledger audit and no sales history deletion --

ADMIN_PERMISSIONS = {
    **MANAGER_PERMISSIONS,
    Module.INVENTORY: _CRUD | {Action.MANAGE_STOCK},
    Module.SALES_HISTORY: frozenset({Action.VIEW}),
}


# -- SALES: point of sale and customers --

SALES_PERMISSIONS = {
    Module.INVENTORY: frozenset({Action.VIEW}),
    Module.POINT_OF_SALE: frozenset({Action.VIEW, Action.CREATE}),
    Module.CUSTOMERS: frozenset({Action.VIEW, Action.CREATE, Action.EDIT}),
    Module.SALES_HISTORY: frozenset({Action.VIEW}),
    Module.REPORTING_TOOLS: frozenset({Action.VIEW}),
    Module.STOREFRONT: frozenset({Action.VIEW}),
}


# -- WAREHOUSE: stock movements only --

WAREHOUSE_PERMISSIONS = {
    Module.INVENTORY: frozenset({Action.VIEW, Action.MANAGE_STOCK}),
    Module.SUPPLIERS: frozenset({Action.VIEW}),
}


DEFAULT_ROLE_PERMISSIONS = {
    Role.MANAGER: MANAGER_PERMISSIONS,
    Role.ADMIN: ADMIN_PERMISSIONS,
    Role.SALES: SALES_PERMISSIONS,
    Role.WAREHOUSE: WAREHOUSE_PERMISSIONS,
}
