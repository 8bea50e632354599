# app.py
import logging

from flask import Flask, jsonify
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError

from config import Config
from extensions import db
from services.errors import LifecycleError

# ---- blueprints ----
from routes.auth import auth_bp
from routes.project import project_bp
from routes.application import application_bp
from routes.user import user_bp


def _register_error_handlers(app):
    @app.errorhandler(LifecycleError)
    def handle_lifecycle_error(err):
        db.session.rollback()
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(err):
        db.session.rollback()
        app.logger.exception("storage failure")
        return jsonify({"msg": "storage unavailable", "code": "storage_error"}), 500

    @app.errorhandler(404)
    def handle_not_found(err):
        return jsonify({"msg": "Route not found"}), 404


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ---- extensions ----
    db.init_app(app)
    from models.user import User  # noqa: F401
    from models.project import Project, ProjectMaterial  # noqa: F401
    from models.application import Application  # noqa: F401

    JWTManager(app)
    Migrate(app, db)

    # ---- CORS ----
    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": app.config["CORS_ORIGINS"],
                "supports_credentials": True,
                "allow_headers": ["Content-Type", "Authorization"],
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            }
        },
    )

    # ---- blueprints ----
    app.register_blueprint(auth_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(application_bp)
    app.register_blueprint(user_bp)

    _register_error_handlers(app)

    # ---- health ----
    @app.get("/")
    def health():
        return jsonify({"status": "ok"})

    return app
