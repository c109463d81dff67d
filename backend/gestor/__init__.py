# backend/gestor/__init__.py
import logging

from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    # Overrides must land before db.init_app, which reads the database URI.
    if test_config:
        app.config.update(test_config)

    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if isinstance(level, int):
        app.logger.setLevel(level)
        logging.getLogger(__name__).setLevel(level)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .services import EXTENSION_KEY, load_policy
    from .services.concurrency import WriterLock
    from .services.inventory_service import StockPolicy

    if app.config["NEGATIVE_STOCK_POLICY"] not in StockPolicy.ALL:
        raise ValueError(f"NEGATIVE_STOCK_POLICY must be one of {', '.join(StockPolicy.ALL)}")

    # One writer lock per app: every request thread serializes its writes on it.
    app.extensions[EXTENSION_KEY] = {
        "lock": WriterLock(app.config["WRITE_LOCK_TIMEOUT_SECONDS"]),
        "policy": load_policy(app.config),
    }

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.products import products_bp
    from .routes.inventory import inventory_bp
    from .routes.sales import sales_bp, quotations_bp
    from .routes.employees import employees_bp
    from .routes.catalog import suppliers_bp, customers_bp, expenses_bp
    from .routes.settings import settings_bp, permissions_bp
    from .routes.backup import backup_bp
    from .routes.imports import imports_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(quotations_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(permissions_bp)
    app.register_blueprint(backup_bp)
    app.register_blueprint(imports_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in app.config.get("CORS_ALLOWED_ORIGINS", ()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
