from functools import wraps

from flask import Flask, current_app, g, request
from markupsafe import Markup

from config import CaptchaSettings
from dependencies import build_captcha, build_http_client
from errors import CaptchaFailedError
from infrastructure.captcha.recaptcha import InvisibleReCaptcha
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

EXTENSION_KEY = "captcha"


def init_captcha(app: Flask, settings: CaptchaSettings, http_client=None) -> None:
    """Register the captcha integration on ``app``.

    One HttpClient is shared by the whole app; the InvisibleReCaptcha itself is
    built per request so widget ids restart at 1 on every page.
    """
    if http_client is None:
        http_client = build_http_client(settings)
    app.extensions[EXTENSION_KEY] = {"settings": settings, "http_client": http_client}

    def render_captcha(lang=None):
        return Markup(get_captcha().render(lang))

    app.jinja_env.globals["captcha"] = render_captcha

    @app.context_processor
    def inject_captcha_site_key():
        return dict(captcha_site_key=settings.recaptcha_site_key)

    if not settings.recaptcha_secret_key:
        log.warning("recaptcha_secret_not_configured")


def close_captcha(app: Flask) -> None:
    http_client: HttpClient = app.extensions[EXTENSION_KEY]["http_client"]
    http_client.close()


def get_captcha() -> InvisibleReCaptcha:
    """Return the InvisibleReCaptcha for the current request."""
    if "captcha" not in g:
        ext = current_app.extensions[EXTENSION_KEY]
        g.captcha = build_captcha(ext["settings"], ext["http_client"])
    return g.captcha


def captcha_required(view):
    """Reject the request with a 400 unless it carries a valid captcha token.

    An unreachable verification service surfaces as CaptchaTransportError (503).
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not get_captcha().verify_request(request):
            raise CaptchaFailedError("Invalid captcha, please try again")
        return view(*args, **kwargs)

    return wrapper
