"""Invisible reCAPTCHA (v2) renderer and verifier.

Produces the markup that mounts invisible widgets on a page and hijacks the
enclosing form's submit, and checks the resulting token against Google's
siteverify endpoint.

A network failure is not the same as a rejected token: ``verify`` returns
``False`` only when Google answered "no" and raises a CaptchaError when it
could not be asked. ``check`` folds both into a VerificationOutcome.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from config import DEFAULT_POLYFILL_URL
from errors import CaptchaError, CaptchaResponseError, CaptchaTransportError
from infrastructure.captcha.protocol import VerificationOutcome
from infrastructure.http_client import HttpClient
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

API_URI = "https://www.google.com/recaptcha/api.js"
VERIFY_URI = "https://www.google.com/recaptcha/api/siteverify"

# Form/query field the widget posts its token under
RESPONSE_FIELD = "g-recaptcha-response"

DEBUG_ELEMENTS = ("_submitForm", "_captchaForm", "_captchaSubmit")

DEFAULT_TIMEOUT = 5


class InvisibleReCaptcha:
    def __init__(
        self,
        site_key: str,
        secret_key: str,
        options: Optional[Mapping[str, Any]] = None,
        client: Optional[HttpClient] = None,
    ) -> None:
        self._site_key = site_key
        self._secret_key = secret_key
        self._rendered_times = 0
        self.set_options(options)
        if client is None:
            client = HttpClient(timeout=self.get_option("timeout", DEFAULT_TIMEOUT))
        self._client = client

    # ── Configuration ────────────────────────────────────────────────────────

    @property
    def site_key(self) -> str:
        return self._site_key

    @property
    def secret_key(self) -> str:
        return self._secret_key

    @property
    def options(self) -> dict[str, Any]:
        return self._options

    def set_options(self, options: Optional[Mapping[str, Any]]) -> None:
        self._options = dict(options or {})

    def set_option(self, key: str, value: Any) -> None:
        self._options[key] = value

    def get_option(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    @property
    def client(self) -> HttpClient:
        return self._client

    @client.setter
    def client(self, client: HttpClient) -> None:
        self._client = client

    @property
    def rendered_times(self) -> int:
        return self._rendered_times

    # ── Rendering ────────────────────────────────────────────────────────────

    def captcha_script_url(self, lang: Optional[str] = None) -> str:
        """Widget loader URL, with ``&hl=<lang>`` appended when a language is given."""
        api = f"{API_URI}?onload=_captchaCallback&render=explicit"
        return f"{api}&hl={quote(lang, safe='-_')}" if lang else api

    @property
    def polyfill_url(self) -> str:
        return self.get_option("polyfill_url", DEFAULT_POLYFILL_URL)

    def render(self, lang: Optional[str] = None) -> str:
        """Polyfill, one widget container and the footer wiring.

        Each call emits a new container and repeats the footer script.
        """
        html = self.render_polyfill()
        html += self.render_captcha_html()
        html += self.render_footer_js(lang)
        return html

    def render_polyfill(self) -> str:
        return f'<script src="{self.polyfill_url}"></script>\n'

    def render_captcha_html(self) -> str:
        html = ""
        if self._rendered_times == 0:
            html += self._init_render_captcha_html()
        else:
            self._rendered_times += 1
        html += (
            f"<div class='_g-recaptcha' id='_g-recaptcha_{self._rendered_times}'></div>\n"
        )
        return html

    def _init_render_captcha_html(self) -> str:
        """Markup emitted only before the first widget on a page."""
        html = ""
        if self.get_option("hide_badge", False):
            html += "<style>.grecaptcha-badge{display:none!important}</style>\n"
        self._rendered_times += 1
        return html

    def render_footer_js(self, lang: Optional[str] = None) -> str:
        html = "<script>var _renderedTimes,_captchaCallback,_captchaForms,_submitForm,_submitBtn;</script>"
        html += "<script>var _submitAction=true,_captchaForm;</script>"
        html += f"<script>$.getScript('{self.captcha_script_url(lang)}').done(function(data,status,jqxhr){{"
        html += '_renderedTimes=$("._g-recaptcha").length;_captchaForms=$("._g-recaptcha").closest("form");'
        html += '_captchaForms.each(function(){$(this)[0].addEventListener("submit",function(e){e.preventDefault();'
        html += '_captchaForm=$(this);_submitBtn=$(this).find(":submit");grecaptcha.execute();});});'
        html += '_submitForm=function(){_submitBtn.trigger("captcha");if(_submitAction){_captchaForm.submit();}grecaptcha.reset();};'
        html += '_captchaCallback=function(){$("._g-recaptcha").each(function(index){grecaptcha.render(this,'
        html += f"{{sitekey:'{self._site_key}',size:'invisible',callback:_submitForm}});}});}}"
        html += "});</script>\n"
        return html

    def render_debug(self) -> str:
        """console.log checks that the footer script bound its globals."""
        html = ""
        for element in DEBUG_ELEMENTS:
            html += self.console_log(f'"Checking element binding of {element}..."')
            html += self.console_log(f"{element}!==undefined")
        return html

    @staticmethod
    def console_log(expression: str) -> str:
        return f"console.log({expression});"

    # ── Verification ─────────────────────────────────────────────────────────

    def verify(self, response: Optional[str], client_ip: Optional[str]) -> bool:
        """Ask siteverify whether ``response`` is a valid token.

        Returns False without a network call when no token was submitted.

        Raises:
            CaptchaTransportError: the request failed or got a non-2xx status.
            CaptchaResponseError: the body was not JSON.
        """
        if not response:
            log.debug("recaptcha_token_missing", ip_hash=hash_ip(client_ip))
            return False

        result = self._send_verify_request(
            {
                "secret": self._secret_key,
                "remoteip": client_ip,
                "response": response,
            }
        )
        success = isinstance(result, dict) and result.get("success") is True
        if not success:
            log.warning(
                "recaptcha_verification_failed",
                ip_hash=hash_ip(client_ip),
                error_codes=result.get("error-codes", [])
                if isinstance(result, dict)
                else [],
            )
        return success

    verify_response = verify

    def verify_request(self, request: Any) -> bool:
        """Verify the token carried by a werkzeug/Flask request.

        The client IP is ``remote_addr``; forwarded headers count only once
        a proxy is trusted (see create_app).
        """
        return self.verify(request.values.get(RESPONSE_FIELD), request.remote_addr)

    def check(
        self, response: Optional[str], client_ip: Optional[str]
    ) -> VerificationOutcome:
        try:
            return VerificationOutcome(success=self.verify(response, client_ip))
        except CaptchaError as e:
            return VerificationOutcome(success=False, error=e)

    def _send_verify_request(self, query: dict[str, Any]) -> Any:
        try:
            response = self._client.post(VERIFY_URI, data=query)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(
                "recaptcha_request_failed", error=str(e), error_type=type(e).__name__
            )
            raise CaptchaTransportError(
                "reCAPTCHA verification service is unavailable"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            log.error(
                "recaptcha_invalid_response",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise CaptchaResponseError(
                "reCAPTCHA verification service returned an invalid response"
            ) from e
