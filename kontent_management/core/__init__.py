"""
Core layer - Raw types, identifiers and HTTP client.

This layer provides:
- Typed dataclasses for API payloads
- Identifiers that map key schemes onto URL path fragments
- Element id metadata for typed language variant models
- Lazy continuation-token listings
- Async HTTP client with retry, auth and error handling
"""

from kontent_management.core.client import APIClient, Request, RetryPolicy, bearer_headers
from kontent_management.core.errors import (
    APIError,
    InvalidArgumentError,
    MalformedResponseError,
    ManagementError,
    MissingMetadataError,
    OperationCancelledError,
    TransientTransportError,
)
from kontent_management.core.identifiers import (
    ContentItemIdentifier,
    LanguageIdentifier,
    LanguageVariantIdentifier,
    UserIdentifier,
)
from kontent_management.core.metadata import ElementModelMapper, ElementRegistry, element, registry
from kontent_management.core.pagination import AsyncListing
from kontent_management.core.transport import HttpxTransport, Transport
from kontent_management.core.types import (
    ContentItem,
    ContentItemCreate,
    ContentItemUpsert,
    LanguageVariant,
    ListingPage,
    Reference,
    SubscriptionProject,
    SubscriptionProjectEnvironment,
    SubscriptionUser,
    TypedLanguageVariant,
    UserEnvironment,
    UserProject,
    UserRole,
)

__all__ = [
    "APIClient",
    "APIError",
    "AsyncListing",
    "ContentItem",
    "ContentItemCreate",
    "ContentItemIdentifier",
    "ContentItemUpsert",
    "ElementModelMapper",
    "ElementRegistry",
    "HttpxTransport",
    "InvalidArgumentError",
    "LanguageIdentifier",
    "LanguageVariant",
    "LanguageVariantIdentifier",
    "ListingPage",
    "MalformedResponseError",
    "ManagementError",
    "MissingMetadataError",
    "OperationCancelledError",
    "Reference",
    "Request",
    "RetryPolicy",
    "SubscriptionProject",
    "SubscriptionProjectEnvironment",
    "SubscriptionUser",
    "TransientTransportError",
    "Transport",
    "TypedLanguageVariant",
    "UserEnvironment",
    "UserIdentifier",
    "UserProject",
    "UserRole",
    "bearer_headers",
    "element",
    "registry",
]
