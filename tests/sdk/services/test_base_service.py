import httpx
import pytest
from pytest_httpx import HTTPXMock

from restbound import (
    BaseUrlMissingError,
    ClientSettings,
    Config,
    RecoveryContext,
    RecoveryHandler,
    RequestSpec,
)
from restbound._services._base_service import BaseService
from restbound._utils import QueryBuilder
from restbound._utils.constants import HEADER_USER_AGENT
from restbound.translators import HttpContent


class KeepResponse(RecoveryHandler):
    """Declines every response by handing it back."""

    def __init__(self) -> None:
        self.calls = 0

    def can_handle(self, response: httpx.Response) -> bool:
        return True

    def recover(self, context: RecoveryContext) -> httpx.Response:
        self.calls += 1
        return context.response


@pytest.fixture
def service(config: Config, settings: ClientSettings) -> BaseService:
    return BaseService(config=config, settings=settings)


class TestBaseService:
    def test_init_base_service(self, service: BaseService, base_url: str):
        assert service is not None
        assert service.base_url == base_url

    def test_base_service_default_headers(self, service: BaseService, secret: str):
        assert service.default_headers["Accept"] == "application/json"
        assert service.default_headers["Authorization"] == f"Bearer {secret}"
        assert service.default_headers[HEADER_USER_AGENT] == "restbound-python"

    def test_no_authorization_without_secret(self, base_url: str):
        service = BaseService(Config(base_url=base_url))

        assert "Authorization" not in service.default_headers

    def test_accept_follows_default_media_type(self, config: Config):
        service = BaseService(
            config, ClientSettings(default_media_type="application/xml")
        )

        assert service.default_headers["Accept"] == "application/xml"

    def test_base_url_from_given_client(self):
        client = httpx.Client(base_url="https://client.example.com")

        service = BaseService(Config(), client=client)

        assert service.base_url.rstrip("/") == "https://client.example.com"
        client.close()

    @pytest.mark.anyio
    async def test_base_url_from_given_async_client(self):
        async_client = httpx.AsyncClient(base_url="https://async.example.com")

        service = BaseService(Config(), async_client=async_client)

        assert service.base_url.rstrip("/") == "https://async.example.com"
        await async_client.aclose()

    class TestBuildRequest:
        def test_relative_path(self, service: BaseService, base_url: str):
            request = service.build_request(RequestSpec(method="GET", path="/users/1"))

            assert request.method == "GET"
            assert request.url == f"{base_url}/users/1"

        def test_absolute_path_ignores_base_url(self, service: BaseService):
            request = service.build_request(
                RequestSpec(method="GET", path="https://other.example.com/ping")
            )

            assert request.url == "https://other.example.com/ping"

        def test_default_args_are_merged(self, service: BaseService, base_url: str):
            service.default_args.set("api-version", "2").set("page", 1)

            request = service.build_request(
                RequestSpec(path="/items", query=QueryBuilder().set("page", 5))
            )

            assert request.url == f"{base_url}/items?api-version=2&page=5"

        def test_cookies_become_one_header(self, service: BaseService):
            request = service.build_request(
                RequestSpec(path="/me", cookies={"a": "1", "b": "2"})
            )

            assert request.headers["Cookie"] == "a=1; b=2"

        def test_content_and_headers(self, service: BaseService):
            request = service.build_request(
                RequestSpec(method="POST", path="/notes", headers={"X-Trace": "t-1"}),
                HttpContent(b"hello", "text/plain"),
            )

            assert request.content == b"hello"
            assert request.headers["Content-Type"] == "text/plain"
            assert request.headers["X-Trace"] == "t-1"
            assert request.headers["Authorization"] == "Bearer secret"

        def test_timeout(self, service: BaseService):
            request = service.build_request(RequestSpec(path="/slow", timeout=5))

            assert request.extensions["timeout"]["read"] == 5

        @pytest.mark.anyio
        async def test_given_async_client_headers(self, config: Config):
            async_client = httpx.AsyncClient(headers={"X-Tenant": "acme"})
            service = BaseService(config, async_client=async_client)

            sync_request = service.build_request(RequestSpec(path="/users"))
            async_request = service.build_request(
                RequestSpec(path="/users", headers={"X-Tenant": "other"}),
                for_async=True,
            )
            plain_request = service.build_request(
                RequestSpec(path="/users"), for_async=True
            )

            assert "X-Tenant" not in sync_request.headers
            assert async_request.headers["X-Tenant"] == "other"
            assert plain_request.headers["X-Tenant"] == "acme"
            assert plain_request.headers["Authorization"] == "Bearer secret"
            assert plain_request.headers[HEADER_USER_AGENT] == "restbound-python"
            await async_client.aclose()

        def test_missing_base_url(self):
            service = BaseService(Config())

            with pytest.raises(BaseUrlMissingError):
                service.build_request(RequestSpec(path="/users"))

        def test_missing_base_url_with_absolute_path(self):
            service = BaseService(Config())

            request = service.build_request(RequestSpec(path="http://localhost:8080/x"))

            assert request.url == "http://localhost:8080/x"

    class TestSendWithRecovery:
        def test_simple_request(
            self,
            httpx_mock: HTTPXMock,
            service: BaseService,
            base_url: str,
            secret: str,
        ):
            httpx_mock.add_response(
                url=f"{base_url}/endpoint", status_code=200, json={"test": "test"}
            )

            request = service.build_request(RequestSpec(path="/endpoint"))
            response, recovered = service.send_with_recovery(request)

            sent_request = httpx_mock.get_request()
            if sent_request is None:
                raise Exception("No request was sent")

            assert sent_request.method == "GET"
            assert sent_request.url == f"{base_url}/endpoint"
            assert sent_request.headers[HEADER_USER_AGENT] == "restbound-python"
            assert sent_request.headers["Authorization"] == f"Bearer {secret}"

            assert response.status_code == 200
            assert response.json() == {"test": "test"}
            assert recovered is False

        def test_failed_response_without_recovery_handler(
            self, httpx_mock: HTTPXMock, service: BaseService, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/endpoint", status_code=503)

            request = service.build_request(RequestSpec(path="/endpoint"))
            response, recovered = service.send_with_recovery(request)

            assert response.status_code == 503
            assert recovered is False

        def test_handler_returning_same_response_ends_recovery(
            self, httpx_mock: HTTPXMock, config: Config, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/endpoint", status_code=503)
            handler = KeepResponse()
            service = BaseService(
                config,
                ClientSettings(max_recovery_attempts=None).with_handlers(handler),
            )

            request = service.build_request(RequestSpec(path="/endpoint"))
            response, recovered = service.send_with_recovery(request)

            assert response.status_code == 503
            assert recovered is False
            assert handler.calls == 1
            assert len(httpx_mock.get_requests()) == 1

        @pytest.mark.anyio
        async def test_handler_returning_same_response_ends_recovery_async(
            self, httpx_mock: HTTPXMock, config: Config, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/endpoint", status_code=503)
            handler = KeepResponse()
            service = BaseService(
                config,
                ClientSettings(max_recovery_attempts=None).with_handlers(handler),
            )

            request = service.build_request(RequestSpec(path="/endpoint"))
            response, recovered = await service.send_with_recovery_async(request)

            assert response.status_code == 503
            assert recovered is False
            assert handler.calls == 1

        @pytest.mark.anyio
        async def test_simple_request_async(
            self,
            httpx_mock: HTTPXMock,
            service: BaseService,
            base_url: str,
            secret: str,
        ):
            httpx_mock.add_response(
                url=f"{base_url}/endpoint", status_code=200, json={"test": "test"}
            )

            request = service.build_request(RequestSpec(path="/endpoint"))
            response, recovered = await service.send_with_recovery_async(request)

            sent_request = httpx_mock.get_request()
            if sent_request is None:
                raise Exception("No request was sent")

            assert sent_request.headers["Authorization"] == f"Bearer {secret}"
            assert response.json() == {"test": "test"}
            assert recovered is False

    class TestClose:
        def test_owned_clients_are_closed(self, config: Config):
            service = BaseService(config)

            service.close()

            assert service._client.is_closed

        def test_given_client_is_left_open(self, config: Config):
            client = httpx.Client()
            service = BaseService(config, client=client)

            service.close()

            assert not client.is_closed
            client.close()

        @pytest.mark.anyio
        async def test_aclose(self, config: Config):
            service = BaseService(config)

            await service.aclose()

            assert service._client.is_closed
            assert service._client_async.is_closed
