from __future__ import annotations

import logging
import os

import click
from flask import Flask

from .extensions import db, migrate, csrf
from .views.api import api_bp
from .views.play import play_bp
from .views.pools import pools_bp
from .views.public import public_bp


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__)

    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///santapool.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Optional explicit Fernet key for recipients; derived from SECRET_KEY otherwise
    app.config["ASSIGNMENT_ENC_KEY"] = os.environ.get("ASSIGNMENT_ENC_KEY", "").strip()

    # Randomized search attempts before the draw gives up
    app.config["SANTA_DRAW_MAX_ATTEMPTS"] = int(os.environ.get("SANTA_DRAW_MAX_ATTEMPTS", "100"))
    app.config["SANTA_LOG_LEVEL"] = os.environ.get("SANTA_LOG_LEVEL", "INFO").upper()

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["SANTA_LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    # Blueprints
    app.register_blueprint(public_bp)
    app.register_blueprint(pools_bp)
    app.register_blueprint(play_bp)
    app.register_blueprint(api_bp)

    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables (use `flask db upgrade` once migrations exist)."""
        db.create_all()
        click.echo("Initialized the database.")

    return app
