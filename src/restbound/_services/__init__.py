from ._base_service import BaseService
from .api_client import ApiClient
from .client_factory import DEFAULT_CLIENT_NAME, ApiClientFactory

__all__ = [
    "ApiClient",
    "ApiClientFactory",
    "BaseService",
    "DEFAULT_CLIENT_NAME",
]
