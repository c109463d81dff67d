# Overview: Flask CLI command groups for bootstrap, backup, inventory and permission inspection.

# backend/gestor/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Idempotent: creates tables and persists the built-in data for every collection never written.
#
# Backup:
# - python -m flask backup export --output backup.json
#   Write the whole store as one JSON document (stdout when --output is omitted).
# - python -m flask backup restore backup.json --employee admin@system.local --yes
#   Replace every collection with the document's contents.
#
# Inventory:
# - python -m flask inventory import-csv products.csv --employee admin@system.local
#   All-or-nothing bulk import; failing rows are listed by row number.
# - python -m flask inventory ledger --product-id 1 --type SALE --limit 20
#   Print inventory log entries, newest first.
#
# Permission inspection:
# - python -m flask perms check SALES point-of-sale apply-discount
#   Check whether a role may perform an action on a module.

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Employee, MovementType
from .permissions import Action, Module, Role
from .services import EXTENSION_KEY, get_services
from .services.import_service import ImportRowsError, read_csv_rows
from .services.permission_service import AuthorizationDenied
from .services.store_service import Collection, StoreWriteError
from .validation import ValidationError


def _acting_employee(services, email: str) -> Employee:
    wanted = email.strip().lower()
    for employee in services.employees.list_employees():
        if (employee.email or "").strip().lower() == wanted:
            return employee
    raise click.ClickException(f"No employee with email {email}")


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create the database tables and persist built-in data.

    Collections that already exist are left untouched, so running this
    twice is harmless. Seeded employees keep plaintext passwords until
    their first login upgrades them.
    """
    click.echo("START Initializing store...")
    db.create_all()

    services = get_services()
    store = services.store
    written = []
    for collection in Collection.ALL:
        key = store.key_for(collection)
        if store.raw(key) is None:
            store.set(key, store.default_for(collection)).raise_for_error()
            written.append(collection)

    if written:
        click.echo(f"PASS Seeded: {', '.join(written)}")
    else:
        click.echo("PASS All collections already present, nothing seeded")
    click.echo(f"DONE Namespace '{store.namespace}' ready")


@click.group('backup')
def backup_group():
    """Whole-store export and restore."""


@backup_group.command('export')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), help='File to write (default: stdout)')
@with_appcontext
def export_backup(output):
    document = get_services().backups.export_document()
    text = json.dumps(document, ensure_ascii=False, indent=2)
    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(text)
        click.echo(f"PASS Backup written to {output}")
    else:
        click.echo(text)


@backup_group.command('restore')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--employee', 'email', required=True, help='Email of the employee performing the restore')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def restore_backup(path, email, yes):
    """Replace every collection with the contents of PATH."""
    if not yes:
        click.confirm("This replaces ALL stored data. Continue?", abort=True)

    with open(path, encoding="utf-8") as fh:
        try:
            document = json.load(fh)
        except json.JSONDecodeError as exc:
            raise click.ClickException(f"{path} is not valid JSON: {exc}")

    services = get_services()
    actor = _acting_employee(services, email)
    try:
        counts = services.backups.restore(actor, document)
    except (ValidationError, AuthorizationDenied, StoreWriteError) as exc:
        raise click.ClickException(str(exc))

    for key, count in counts.items():
        click.echo(f"PASS {key}: {count}")


@click.group('inventory')
def inventory_group():
    """Bulk import and ledger inspection."""


@inventory_group.command('import-csv')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--employee', 'email', required=True, help='Email of the employee performing the import')
@with_appcontext
def import_csv(path, email):
    with open(path, encoding="utf-8-sig", newline="") as fh:
        rows = read_csv_rows(fh)

    services = get_services()
    actor = _acting_employee(services, email)
    try:
        report = services.facade.bulk_import(actor, rows)
    except ImportRowsError as exc:
        for problem in exc.errors:
            click.echo(f"FAIL row {problem['row']}: {problem['error']}")
        raise click.ClickException(str(exc))
    except (ValidationError, AuthorizationDenied, StoreWriteError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"PASS Imported {len(report.created)} products ({report.entries_logged} ledger entries)")


@inventory_group.command('ledger')
@click.option('--product-id', help='Only entries for this product')
@click.option('--type', 'entry_type', type=click.Choice(MovementType.ALL, case_sensitive=False))
@click.option('--limit', type=int, default=50, show_default=True)
@with_appcontext
def show_ledger(product_id, entry_type, limit):
    entries = get_services().facade.list_inventory_logs(
        product_id=product_id,
        entry_type=entry_type.upper() if entry_type else None,
        limit=limit,
    )
    if not entries:
        click.echo("No entries")
        return
    for e in entries:
        click.echo(f"{e.date}  {e.type:<10} {e.quantity:>+10g}  {e.product_name} [{e.product_id}]  by {e.user_name}")


@click.group('perms')
def perms_group():
    """Role table inspection."""


@perms_group.command('check')
@click.argument('role')
@click.argument('module', type=click.Choice(Module.ALL))
@click.argument('action', type=click.Choice(Action.ALL))
@with_appcontext
def check_permission(role, module, action):
    role = Role.LEGACY_ALIASES.get(role, role)
    policy = current_app.extensions[EXTENSION_KEY]["policy"]
    if policy.allows(role, module, action):
        click.echo(f"ALLOW {role} may {action} in {module}")
    else:
        click.echo(f"DENY  {role} may not {action} in {module}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(backup_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(perms_group)
