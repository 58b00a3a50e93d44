"""
Application factory and global configuration.

Creates the Flask app, configures logging and rate limiting, builds the
storage/notification collaborators, registers blueprints and CLI commands,
and starts the background reminder scheduler. This file keeps startup/config
concerns together and avoids domain logic here.
"""

from __future__ import annotations
import logging
import os
from typing import Optional

from flask import Flask, Response
from flask_wtf.csrf import CSRFProtect
from dotenv import load_dotenv  # <-- ensure .env is loaded for local dev

from .extensions import limiter
from .routes.plants import plants_bp
from .routes.tasks import tasks_bp
from .routes.photos import photos_bp
from .routes.notifications import notifications_bp
from .services.registry import CompanionServices, build_services, init_services
from .services.storage import create_key_value_store

API_PREFIX = "/api/v1"


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    logging.getLogger(__name__).setLevel(level)
    app.logger.setLevel(level)


def _start_reminder_scheduler(app: Flask, services: CompanionServices, scheduler) -> None:
    """
    Start the background scheduler that owns reminder notification jobs.

    Reminders are recomputed once at startup and then daily, in addition to
    the recompute that follows every plant change made through the API.
    """
    try:
        scheduler.add_job(
            func=services.refresh_reminders,
            trigger="cron",
            hour=app.config["REMINDER_REFRESH_HOUR"],
            minute=app.config["REMINDER_REFRESH_MINUTE"],
            id="daily_reminder_refresh",
            name="Daily Care Reminder Refresh",
            replace_existing=True,
        )
        scheduler.start()
        app.logger.info(
            "[Scheduler] Daily reminder refresh scheduled for "
            f"{app.config['REMINDER_REFRESH_HOUR']:02d}:{app.config['REMINDER_REFRESH_MINUTE']:02d}"
        )

        # Shutdown scheduler gracefully on app exit
        import atexit
        atexit.register(lambda: scheduler.shutdown(wait=False))

        services.refresh_reminders()
    except Exception as e:
        app.logger.warning(f"[Scheduler] Failed to initialize reminder scheduler: {e}")


def create_app(services: Optional[CompanionServices] = None) -> Flask:
    """
    Build the Flask app.

    Args:
        services: Pre-built collaborators (tests pass in-memory fakes). When
            omitted, storage comes from STORAGE_BACKEND and notifications
            are registered on an APScheduler BackgroundScheduler.
    """
    # override=False so production env vars are not overwritten by a stale .env file
    load_dotenv(override=False)

    app = Flask(__name__)

    # Allow APP_CONFIG to override (e.g., plant_companion.config.DevConfig)
    cfg_path = os.getenv("APP_CONFIG", "plant_companion.config.ProdConfig")
    try:
        app.config.from_object(cfg_path)
    except (ImportError, AttributeError) as e:
        app.logger.warning(f"Could not load config object {cfg_path}: {e}")
        app.config.from_object("plant_companion.config.ProdConfig")

    _configure_logging(app)

    limiter.init_app(app)
    if not app.config.get("RATELIMIT_ENABLED", True):
        limiter.enabled = False

    if not app.secret_key:
        app.secret_key = app.config.get("SECRET_KEY", "")

    # Keep payload keys in insertion order
    app.json.sort_keys = False

    # The JSON API uses the X-Requested-With header check instead of form tokens
    csrf = CSRFProtect(app)

    scheduler = None
    if services is None:
        from apscheduler.schedulers.background import BackgroundScheduler
        from .services.notifications import SchedulerNotifier

        scheduler = BackgroundScheduler()
        services = build_services(
            create_key_value_store(app),
            SchedulerNotifier(scheduler),
            cache_ttl_seconds=app.config.get("PLANT_CACHE_TTL_SECONDS", 300),
        )
    init_services(app, services)

    @app.after_request
    def apply_security_headers(resp: Response) -> Response:
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["X-Frame-Options"] = "DENY"
        return resp

    # Blueprints
    for blueprint in (plants_bp, tasks_bp, photos_bp, notifications_bp):
        csrf.exempt(blueprint)
        app.register_blueprint(blueprint, url_prefix=API_PREFIX)

    if scheduler is not None and app.config.get("REMINDER_SCHEDULER_ENABLED", True) and not app.config.get("TESTING", False):
        _start_reminder_scheduler(app, services, scheduler)

    # Register CLI commands
    from .cli import clear_data_command, list_tasks_command, schedule_reminders_command
    app.cli.add_command(list_tasks_command)
    app.cli.add_command(schedule_reminders_command)
    app.cli.add_command(clear_data_command)

    return app
