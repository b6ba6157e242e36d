"""Infrastructure layer - External dependencies and implementations.

This layer contains the HTTP client for the LunarBase backend API and the
pydantic schemas used to parse its responses. It implements the BackendApi
interface consumed by the domain and application layers.
"""

from lunarconsole.infrastructure.api.base import BackendApi, ListQuery
from lunarconsole.infrastructure.api.http_client import HttpBackendApi

__all__ = [
    "BackendApi",
    "HttpBackendApi",
    "ListQuery",
]
