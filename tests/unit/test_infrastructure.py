"""Unit tests for the infrastructure layer — HttpClient and captcha factories."""

from unittest.mock import MagicMock

import httpx
import pytest

from config import CaptchaSettings
from dependencies import build_captcha, build_http_client
from infrastructure.http_client import HttpClient


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = client.post("http://example.com", data={"a": "b"})
        assert resp.status_code == 200
        client._client.post.assert_called_once_with(
            "http://example.com", data={"a": "b"}
        )
        client.close()

    def test_get_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "get", return_value=fake_resp)
        resp = client.get("http://example.com")
        assert resp.status_code == 200
        client.close()

    def test_post_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(
            client._client, "post", side_effect=httpx.ConnectTimeout("timeout")
        )
        with pytest.raises(httpx.ConnectTimeout, match="timeout"):
            client.post("http://example.com")
        client.close()

    def test_timeout_passed_to_httpx(self):
        with HttpClient(timeout=2.5) as client:
            assert client._client.timeout == httpx.Timeout(2.5)

    def test_context_manager_closes(self):
        with HttpClient() as client:
            assert client is not None
        assert client._client.is_closed

    def test_custom_transport(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(204))
        with HttpClient(transport=transport) as client:
            assert client.get("http://example.com").status_code == 204


# ── dependencies ──────────────────────────────────────────────────────────────


class TestBuildCaptcha:
    def _settings(self, **overrides) -> CaptchaSettings:
        base = dict(
            recaptcha_site_key="site",
            recaptcha_secret_key="secret",
            recaptcha_timeout=3.0,
            recaptcha_hide_badge=True,
        )
        base.update(overrides)
        return CaptchaSettings(**base)

    def test_builds_from_settings(self):
        http = MagicMock()
        captcha = build_captcha(self._settings(), http)
        assert captcha.site_key == "site"
        assert captcha.secret_key == "secret"
        assert captcha.get_option("timeout") == 3.0
        assert captcha.get_option("hide_badge") is True
        assert captcha.client is http

    def test_fresh_counter_each_build(self):
        http = MagicMock()
        settings = self._settings()
        first = build_captcha(settings, http)
        first.render_captcha_html()
        assert build_captcha(settings, http).rendered_times == 0

    def test_build_http_client_uses_timeout(self):
        client = build_http_client(self._settings(recaptcha_timeout=7.0))
        assert client.timeout == 7.0
        client.close()

    def test_client_required(self):
        with pytest.raises(TypeError):
            build_captcha(self._settings())

    def test_shared_client_left_open(self):
        http = MagicMock()
        build_captcha(self._settings(), http)
        http.close.assert_not_called()
