"""
Kontent.ai Management API client - two-layer architecture.

Layers:
- core: Raw types, identifiers, field metadata and the resilient HTTP client
- sdk: High-level ManagementClient with nice ergonomics
"""

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
from kontent_management.core.metadata import element
from kontent_management.sdk import ManagementClient

__version__ = "0.1.0"
__all__ = [
    "APIError",
    "ContentItemIdentifier",
    "InvalidArgumentError",
    "LanguageIdentifier",
    "LanguageVariantIdentifier",
    "MalformedResponseError",
    "ManagementClient",
    "ManagementError",
    "MissingMetadataError",
    "OperationCancelledError",
    "TransientTransportError",
    "UserIdentifier",
    "element",
]
