"""
Flask application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from blueprints.captcha import init_captcha
from config import AppSettings
from errors import register_error_handlers
from infrastructure.http_client import HttpClient
from shared.logging import setup_logging


def create_app(
    settings: Optional[AppSettings] = None,
    http_client: Optional[HttpClient] = None,
) -> Flask:
    """Create and return a Flask application with the captcha integration."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, production=settings.is_production)

    app = Flask(__name__)
    if settings.secret_key:
        app.secret_key = settings.secret_key
    app.config["APP_SETTINGS"] = settings

    # remote_addr only reflects X-Forwarded-For when proxies are declared
    if settings.trusted_proxy_count:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=settings.trusted_proxy_count)

    register_error_handlers(app)
    init_captcha(app, settings.captcha, http_client=http_client)

    return app
