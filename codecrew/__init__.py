"""Flask application factory."""

from __future__ import annotations

from datetime import timedelta
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, Response, jsonify
from flask_session import Session
import redis
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .config import Settings
from .errors import APIError
from .extensions import cors, db
from .utils.logs import setup_logging

logger = logging.getLogger(__name__)


def _resolve_database_uri(app: Flask, settings: Settings) -> str:
    """Return the SQLAlchemy URL, defaulting to SQLite in the instance folder."""

    database_uri = settings.database_url
    if not database_uri:
        if settings.is_production:
            raise RuntimeError("DATABASE_URL is required in production.")
        default_sqlite_path = Path(app.instance_path) / "codecrew.db"
        default_sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        database_uri = f"sqlite:///{default_sqlite_path}"

    if database_uri.startswith("sqlite:///"):
        sqlite_path = database_uri.replace("sqlite:///", "", 1)
        if sqlite_path and sqlite_path != ":memory:":
            Path(sqlite_path).expanduser().parent.mkdir(parents=True, exist_ok=True)

    if database_uri.startswith("postgres://"):
        database_uri = database_uri.replace("postgres://", "postgresql://", 1)

    if settings.database_sslmode and "sslmode=" not in database_uri:
        separator = "&" if "?" in database_uri else "?"
        database_uri = f"{database_uri}{separator}sslmode={settings.database_sslmode}"

    return database_uri


def _configure_sessions(app: Flask, settings: Settings) -> None:
    cookie_secure = settings.session_cookie_secure
    if cookie_secure is None:
        cookie_secure = settings.is_production

    app.config.update(
        SESSION_PERMANENT=True,
        PERMANENT_SESSION_LIFETIME=timedelta(days=settings.session_lifetime_days),
        SESSION_COOKIE_SECURE=cookie_secure,
        SESSION_COOKIE_SAMESITE=settings.session_cookie_samesite,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_NAME=settings.session_cookie_name,
        SESSION_USE_SIGNER=False,
    )

    if settings.redis_url:
        app.config["SESSION_TYPE"] = "redis"
        app.config["SESSION_REDIS"] = redis.from_url(settings.redis_url)
        logger.info("app.sessions.redis")
    else:
        app.config.update(
            SESSION_TYPE="sqlalchemy",
            SESSION_SQLALCHEMY=db,
            SESSION_SQLALCHEMY_TABLE="sessions",
        )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(APIError)
    def handle_api_error(exc: APIError) -> tuple[Response, int]:
        db.session.rollback()
        return jsonify({"msg": exc.message}), exc.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc: IntegrityError) -> tuple[Response, int]:
        db.session.rollback()
        logger.info("app.integrity_error", extra={"detail": str(exc.orig)})
        return jsonify({"msg": "Duplicate value entered, please choose another value"}), 400

    @app.errorhandler(404)
    def handle_not_found(exc: HTTPException) -> tuple[Response, int]:
        return jsonify({"msg": "Route does not exist"}), 404

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception) -> tuple[Response, int]:
        if isinstance(exc, HTTPException):
            return jsonify({"msg": exc.description}), exc.code or 500
        db.session.rollback()
        logger.exception("app.unhandled_error")
        return jsonify({"msg": "Something went wrong, try again later"}), 500


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Configure and return the Flask application."""

    load_dotenv()
    settings = settings or Settings()
    setup_logging(settings.log_level)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["SECRET_KEY"] = settings.secret_key

    _configure_sessions(app, settings)

    app.config["SQLALCHEMY_DATABASE_URI"] = _resolve_database_uri(app, settings)
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {"pool_pre_ping": True}
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)

    # Ensure models are registered with SQLAlchemy before any table creation.
    from . import models  # noqa: F401

    db.init_app(app)

    # Fail fast on cold starts when the production database is unreachable.
    if settings.is_production:
        try:
            with app.app_context():
                connection = db.engine.connect()
                connection.close()
        except SQLAlchemyError as exc:  # pragma: no cover - network dependent
            raise RuntimeError("Database connectivity failed at startup") from exc

    if "sessions" in db.metadata.tables:
        db.metadata.remove(db.metadata.tables["sessions"])

    Session(app)

    if not settings.is_production:
        with app.app_context():
            db.create_all()

    cors.init_app(
        app,
        resources={rf"{settings.api_prefix}/*": {"origins": settings.allowed_origins}},
        supports_credentials=True,
    )

    from .routes import blueprints

    for blueprint in blueprints:
        app.register_blueprint(blueprint, url_prefix=f"{settings.api_prefix}{blueprint.url_prefix}")

    @app.route("/")
    def index() -> Response:
        return jsonify({"msg": "Code Crew API - Hackathon Collaboration Platform"})

    @app.route("/health")
    def health() -> Response:
        return jsonify({"status": "ok"})

    _register_error_handlers(app)

    from .cli import register_commands

    register_commands(app)

    from .services.maintenance import MaintenanceWorker

    worker = MaintenanceWorker(app, settings.maintenance_interval_seconds)
    app.extensions["codecrew.maintenance"] = worker
    try:
        worker.start()
    except RuntimeError:  # pragma: no cover - thread start failure
        logger.warning("app.maintenance.start_failed", exc_info=True)

    logger.info(
        "app.created",
        extra={"env": settings.flask_env, "api_prefix": settings.api_prefix},
    )
    return app
