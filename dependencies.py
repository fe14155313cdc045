"""
Captcha providers built from settings.

Kept separate from the Flask integration so scripts and tests can build an
InvisibleReCaptcha without an application context.
"""

from __future__ import annotations

from config import CaptchaSettings
from infrastructure.captcha.recaptcha import InvisibleReCaptcha
from infrastructure.http_client import HttpClient


def build_http_client(settings: CaptchaSettings) -> HttpClient:
    """Return an HttpClient using the configured verification timeout."""
    return HttpClient(timeout=settings.recaptcha_timeout)


def build_captcha(
    settings: CaptchaSettings, http_client: HttpClient
) -> InvisibleReCaptcha:
    """Return a fresh InvisibleReCaptcha (render counter at zero).

    The caller owns ``http_client`` and closes it; instances never do.
    """
    return InvisibleReCaptcha(
        settings.recaptcha_site_key,
        settings.recaptcha_secret_key,
        settings.options(),
        client=http_client,
    )
