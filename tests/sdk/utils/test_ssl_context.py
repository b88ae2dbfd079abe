import ssl
from unittest.mock import patch

import certifi
import httpx
import pytest

from restbound._utils._ssl_context import create_ssl_context, get_httpx_client_kwargs


@pytest.fixture(autouse=True)
def clean_ssl_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SSL_CERT_FILE", "REQUESTS_CA_BUNDLE", "SSL_CERT_DIR"):
        monkeypatch.delenv(name, raising=False)


class TestCreateSslContext:
    def test_defaults_to_certifi(self):
        with patch("ssl.create_default_context") as mock_create:
            create_ssl_context()

        mock_create.assert_called_once_with(cafile=certifi.where(), capath=None)

    def test_ssl_cert_file_wins(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SSL_CERT_FILE", "/certs/a.pem")
        monkeypatch.setenv("REQUESTS_CA_BUNDLE", "/certs/b.pem")

        with patch("ssl.create_default_context") as mock_create:
            create_ssl_context()

        assert mock_create.call_args.kwargs["cafile"] == "/certs/a.pem"

    def test_paths_are_expanded(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CERTS_HOME", "/opt/certs")
        monkeypatch.setenv("REQUESTS_CA_BUNDLE", "$CERTS_HOME/bundle.pem")
        monkeypatch.setenv("SSL_CERT_DIR", "$CERTS_HOME/dir")

        with patch("ssl.create_default_context") as mock_create:
            create_ssl_context()

        mock_create.assert_called_once_with(
            cafile="/opt/certs/bundle.pem", capath="/opt/certs/dir"
        )

    def test_returns_context(self):
        assert isinstance(create_ssl_context(), ssl.SSLContext)


class TestHttpxClientKwargs:
    def test_timeout(self):
        kwargs = get_httpx_client_kwargs(5)

        assert kwargs["timeout"] == httpx.Timeout(5)
        assert kwargs["follow_redirects"] is True
        assert isinstance(kwargs["verify"], ssl.SSLContext)

    def test_default_timeout(self):
        assert get_httpx_client_kwargs()["timeout"] == httpx.Timeout(30.0)
