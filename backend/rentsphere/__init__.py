import os

import pymysql
pymysql.install_as_MySQLdb()
from flask import Flask
from flask_cors import CORS

from .config import DevConfig
from .extensions import db, migrate, jwt, ma
from .utils.errors import register_error_handlers
from .api import listings_bp, rental_requests_bp, users_bp
from .commands import register_commands
from .scheduler import Scheduler
from .services.delivery_simulation_service import run_all_simulations
from .services.payment_expiry_service import expire_unpaid_requests
from .services.return_monitor_service import check_overdue_returns


def _build_scheduler(app: Flask) -> Scheduler:
    scheduler = Scheduler(app)
    scheduler.schedule("delivery-simulation", run_all_simulations, app.config["DELIVERY_SIMULATION_INTERVAL_SECONDS"])
    scheduler.schedule("return-overdue-monitor", check_overdue_returns, app.config["RETURN_MONITOR_INTERVAL_SECONDS"])
    scheduler.schedule("payment-expiry", expire_unpaid_requests, app.config["PAYMENT_EXPIRY_INTERVAL_SECONDS"])
    return scheduler


def create_app(config_class=DevConfig) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    origins = [o.strip() for o in str(app.config.get("CORS_ORIGINS", "")).split(",") if o.strip()]
    CORS(
        app,
        resources={r"/api/*": {"origins": origins or "*"}},
        supports_credentials=True,
    )

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)

    # Blueprints
    app.register_blueprint(listings_bp, url_prefix="/api/listings")
    app.register_blueprint(rental_requests_bp, url_prefix="/api/rental-requests")
    app.register_blueprint(users_bp, url_prefix="/api/users")

    register_error_handlers(app)
    register_commands(app)

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "service": "rentsphere-backend"}

    # With the debug reloader only the child process runs the tasks
    reloader_parent = app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true"
    if app.config.get("BACKGROUND_TASKS_ENABLED") and not app.testing and not reloader_parent:
        scheduler = _build_scheduler(app)
        scheduler.start()
        app.extensions["rentsphere_scheduler"] = scheduler

    return app
