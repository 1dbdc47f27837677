"""HTTP client and service catalog for the Pocket Network gateway."""

from .client import (
    NodeUnreachableError,
    PocketApiClient,
    PocketApiError,
    RateLimitedError,
    RpcError,
    UnauthorizedError,
    default_client,
)
from .services import BlockchainService, all_services, find_service, services_by_category, supported_methods

__all__ = [
    "PocketApiClient",
    "PocketApiError",
    "NodeUnreachableError",
    "RateLimitedError",
    "RpcError",
    "UnauthorizedError",
    "default_client",
    "BlockchainService",
    "all_services",
    "find_service",
    "services_by_category",
    "supported_methods",
]
