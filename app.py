import logging
import uuid

from flask import Flask, g, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

import models  # noqa: F401 - registers tables on db.metadata
from config import Config
from extensions import db, limiter, migrate
from routes.auth_routes import auth_bp
from routes.fee_routes import fee_bp
from routes.payment_routes import payment_bp
from routes.report_routes import report_bp
from routes.student_routes import student_bp
from utils.errors import FeeDeskError


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(FeeDeskError)
    def _domain_error(exc: FeeDeskError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def _store_error(exc: SQLAlchemyError):
        # Anything the store throws on a write path lands here; the write did not happen
        db.session.rollback()
        app.logger.exception("Store failure (request %s)", getattr(g, "request_id", "-"))
        return jsonify({"error": "Failed to save changes. Please try again."}), 500

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    _configure_logging(app)

    # Trust reverse proxy headers for scheme/host when enabled
    if app.config.get("TRUST_PROXY", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)  # type: ignore[method-assign]

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Assign a per-request correlation id for tracing
    @app.before_request
    def _assign_request_id():
        g.request_id = uuid.uuid4().hex[:16]

    @app.after_request
    def _set_security_headers(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        resp.headers.setdefault("X-Request-ID", getattr(g, "request_id", ""))
        # HSTS only when cookies marked secure (implies HTTPS)
        if app.config.get("SESSION_COOKIE_SECURE", False):
            resp.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return resp

    _register_error_handlers(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(student_bp)
    app.register_blueprint(fee_bp)
    app.register_blueprint(payment_bp)
    app.register_blueprint(report_bp)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "app": app.config.get("APP_NAME")})

    if app.config.get("AUTO_CREATE_TABLES", False):
        with app.app_context():
            db.create_all()

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
