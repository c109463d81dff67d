# Overview: Wires the store, lock, policy and ledger into the services used by routes and the CLI.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from .auth_service import CredentialService
from .backup_service import BackupService
from .catalog_service import CatalogService
from .concurrency import WriterLock
from .employee_service import EmployeeService
from .inventory_service import InventoryLedger
from .permission_service import AuthorizationPolicy
from .reporting_service import ReportingService
from .session_service import SessionService
from .settings_service import SettingsService
from .store_service import KeyedStore
from .transaction_service import TransactionFacade

EXTENSION_KEY = "gestor"


@dataclass
class Services:
    store: KeyedStore
    lock: WriterLock
    policy: AuthorizationPolicy
    ledger: InventoryLedger
    credentials: CredentialService
    facade: TransactionFacade
    employees: EmployeeService
    catalog: CatalogService
    settings: SettingsService
    backups: BackupService
    reports: ReportingService
    sessions: SessionService


def build_services(
    session,
    config,
    *,
    lock: WriterLock | None = None,
    policy: AuthorizationPolicy | None = None,
    seed: dict | None = None,
) -> Services:
    """
    Build every service over one SQLAlchemy session.

    config is any mapping with the keys of gestor.config.Config (a Flask
    app.config works). Services that share a lock serialize their writes.
    """
    store = KeyedStore(
        session,
        config.get("STORE_NAMESPACE", "gp_db"),
        write_attempts=config.get("WRITE_RETRY_ATTEMPTS", 3),
        seed=seed,
    )
    lock = lock or WriterLock(config.get("WRITE_LOCK_TIMEOUT_SECONDS", 10.0))

    if policy is None:
        policy = load_policy(config)
    ledger = InventoryLedger(config.get("NEGATIVE_STOCK_POLICY", "reject"))
    credentials = CredentialService(
        store,
        lock,
        salt=config["CREDENTIAL_SALT"],
        rounds=config.get("CREDENTIAL_KDF_ROUNDS", 50),
    )

    return Services(
        store=store,
        lock=lock,
        policy=policy,
        ledger=ledger,
        credentials=credentials,
        facade=TransactionFacade(store, lock, policy, ledger),
        employees=EmployeeService(store, lock, policy, credentials),
        catalog=CatalogService(store, lock, policy),
        settings=SettingsService(store, lock, policy),
        backups=BackupService(store, lock, policy),
        reports=ReportingService(store, policy),
        sessions=SessionService(store, ttl_hours=config.get("SESSION_TTL_HOURS", 12)),
    )


def get_services() -> Services:
    """Services bound to the current app's database session."""
    from ..extensions import db

    state = current_app.extensions[EXTENSION_KEY]
    return build_services(db.session, current_app.config, lock=state["lock"], policy=state["policy"])


def load_policy(config) -> AuthorizationPolicy:
    table_path = config.get("ROLE_PERMISSIONS_FILE")
    return AuthorizationPolicy.from_file(table_path) if table_path else AuthorizationPolicy()
