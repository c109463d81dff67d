# Overview: Closed enumerations of roles, modules and actions used by the role table.


class Role:
    """Employee roles, from widest to narrowest scope."""
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
    SALES = "SALES"
    WAREHOUSE = "WAREHOUSE"

    ALL = (MANAGER, ADMIN, SALES, WAREHOUSE)
    LEGACY_ALIASES = {
        "GERENTE_GENERAL": MANAGER,
        "ADMINISTRADOR": ADMIN,
        "VENDEDOR": SALES,
        "BODEGUERO": WAREHOUSE,
    }


class Module:
    """Functional areas subject to authorization."""
    INVENTORY = "inventory"
    POINT_OF_SALE = "point-of-sale"
    CUSTOMERS = "customers"
    SUPPLIERS = "suppliers"
    EMPLOYEES = "employees"
    EXPENSES = "expenses"
    SETTINGS = "settings"
    SALES_HISTORY = "sales-history"
    REPORTING_TOOLS = "reporting-tools"
    STOREFRONT = "storefront"

    ALL = (
        INVENTORY, POINT_OF_SALE, CUSTOMERS, SUPPLIERS, EMPLOYEES,
        EXPENSES, SETTINGS, SALES_HISTORY, REPORTING_TOOLS, STOREFRONT,
    )


class Action:
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    MANAGE_STOCK = "manage-stock"
    AUDIT = "audit"
    APPLY_DISCOUNT = "apply-discount"
    ADD_FREE_ITEM = "add-free-item"

    ALL = (VIEW, CREATE, EDIT, DELETE, MANAGE_STOCK, AUDIT, APPLY_DISCOUNT, ADD_FREE_ITEM)
