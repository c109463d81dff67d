"""
Built-in data used when a collection has never been persisted.

Seeded employees carry legacy plaintext passwords on purpose: the first
successful login of each one upgrades the stored value to a digest
(see CredentialService.login).
"""

_OPEN = {"isOpen": True, "open": "09:00", "close": "18:00"}
_CLOSED = {"isOpen": False, "open": "09:00", "close": "13:00"}

SEED_DATA = {
    "products": [
        {
            "id": "1",
            "name": "Gaming Laptop Xtreme",
            "description": "RTX 4060, 16GB RAM, 512GB SSD",
            "price": 1250.0,
            "cost": 950.0,
            "stock": 5,
            "minStock": 2,
            "category": "Electronics",
            "supplierId": "s1",
            "measurementUnit": "UNIT",
            "measurementValue": 1,
        },
        {
            "id": "2",
            "name": "Cola 500ml",
            "description": "Original cola soft drink",
            "price": 1.5,
            "cost": 0.8,
            "stock": 48,
            "minStock": 12,
            "category": "Beverages",
            "supplierId": "s1",
            "measurementUnit": "ML",
            "measurementValue": 500,
        },
        {
            "id": "3",
            "name": "Premium Long Grain Rice",
            "description": "1kg bag, top quality",
            "price": 2.2,
            "cost": 1.1,
            "stock": 100,
            "minStock": 20,
            "category": "Groceries",
            "supplierId": "s2",
            "measurementUnit": "KG",
            "measurementValue": 1,
        },
    ],
    "suppliers": [
        {"id": "s1", "name": "Central Distribution", "contactName": "Carlos Ruiz",
         "phone": "555-0101", "email": "sales@centraldist.com"},
        {"id": "s2", "name": "Global Imports", "contactName": "Ana Campos",
         "phone": "555-0202", "email": "ana@globalimport.com"},
    ],
    "customers": [
        {"id": "c1", "name": "General Public", "taxId": "00000000",
         "email": "", "phone": "", "address": ""},
        {"id": "c2", "name": "Example Company Ltd.", "taxId": "20123456789",
         "email": "contact@company.com", "phone": "555-9000", "address": "100 Business Ave"},
    ],
    "employees": [
        {"id": "e1", "name": "Main Manager", "role": "MANAGER", "phone": "999-000-000",
         "email": "admin@system.local", "password": "admin@123*"},
        {"id": "e2", "name": "Store Clerk 1", "role": "SALES", "phone": "999-111-111",
         "email": "clerk@system.local", "password": "user@123*"},
    ],
    "sales": [],
    "expenses": [],
    "quotations": [],
    "inventory_logs": [],
    "config": {
        "name": "My Local Business",
        "taxId": "123456789001",
        "address": "123 Main Street",
        "phone": "555-0000",
        "email": "contact@business.local",
        "receiptMessage": "Thank you for your purchase!",
        "currencySymbol": "$",
        "theme": "light",
        "language": "en",
        "openingHours": {
            "monday": _OPEN,
            "tuesday": _OPEN,
            "wednesday": _OPEN,
            "thursday": _OPEN,
            "friday": _OPEN,
            "saturday": _CLOSED | {"isOpen": True},
            "sunday": _CLOSED,
        },
    },
}
