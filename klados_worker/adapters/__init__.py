"""Adapter layer package for Arke API integration boundaries."""

from .arke_client import ArkeApiClient, adapter_create_arke_client_factory
from .arke_errors import (
	ArkeApiConnectionError,
	ArkeApiError,
	ArkeApiTimeoutError,
	ArkeNotFoundError,
	ArkePermissionError,
	ArkeRequestError,
	ArkeServerError,
)
from .interfaces import ArkeClientFactory, ArkeClientPort

__all__ = [
	"ArkeApiClient",
	"ArkeApiConnectionError",
	"ArkeApiError",
	"ArkeApiTimeoutError",
	"ArkeClientFactory",
	"ArkeClientPort",
	"ArkeNotFoundError",
	"ArkePermissionError",
	"ArkeRequestError",
	"ArkeServerError",
	"adapter_create_arke_client_factory",
]
