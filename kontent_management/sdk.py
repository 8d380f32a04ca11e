"""
Kontent.ai Management SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for subscription and content
management operations. Built on top of the core APIClient.
"""

import asyncio
import builtins
import os
from typing import Any, TypeVar

from kontent_management.core.client import APIClient, HeadersProvider, RetryPolicy
from kontent_management.core.errors import InvalidArgumentError
from kontent_management.core.identifiers import (
    ContentItemIdentifier,
    LanguageVariantIdentifier,
    UserIdentifier,
)
from kontent_management.core.metadata import ElementModelMapper
from kontent_management.core.pagination import AsyncListing
from kontent_management.core.transport import DEFAULT_TIMEOUT, Transport
from kontent_management.core.types import (
    ContentItem,
    ContentItemCreate,
    ContentItemUpsert,
    LanguageVariant,
    SubscriptionProject,
    SubscriptionUser,
    TypedLanguageVariant,
)

M = TypeVar("M")


def _require_identifier(identifier: Any, expected: type, name: str = "identifier") -> None:
    """Reject a missing or mistyped identifier before any request is built."""
    if identifier is None:
        raise InvalidArgumentError(f"{name} must not be None", details={"argument": name})
    if not isinstance(identifier, expected):
        raise InvalidArgumentError(
            f"{name} must be a {expected.__name__}, got {type(identifier).__name__}",
            details={"argument": name},
        )


class ManagementClient:
    """
    High-level Kontent.ai Management API client.

    Example:
        async with ManagementClient() as client:
            async for user in client.subscription.list_users():
                print(user.email)

            user = await client.subscription.get_user(UserIdentifier.by_email("a@x.com"))
            await client.subscription.deactivate_user(UserIdentifier.by_id(user.id))

            item = await client.items.get(ContentItemIdentifier.by_codename("on_roasts"))

    """

    def __init__(
        self,
        api_key: str | None = None,
        subscription_id: str | None = None,
        environment_id: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_policy: RetryPolicy | None = None,
        transport: Transport | None = None,
        headers_provider: HeadersProvider | None = None,
    ):
        """
        Initialize the Management client.

        Args:
            api_key: Management API key (or KONTENT_MANAGEMENT_API_KEY env var)
            subscription_id: Subscription ID (or KONTENT_SUBSCRIPTION_ID env var)
            environment_id: Environment ID (or KONTENT_ENVIRONMENT_ID env var)
            base_url: API base URL (or KONTENT_MANAGEMENT_BASE_URL env var)
            timeout: Request timeout in seconds
            retry_policy: Retry policy for retry-safe requests
            transport: Custom transport (httpx by default)
            headers_provider: Custom auth header provider

        """
        self._client = APIClient(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            retry_policy=retry_policy,
            transport=transport,
            headers_provider=headers_provider,
        )
        self.subscription_id = subscription_id or os.environ.get("KONTENT_SUBSCRIPTION_ID")
        self.environment_id = environment_id or os.environ.get("KONTENT_ENVIRONMENT_ID")

        # Sub-clients for different domains
        self.subscription = SubscriptionOperations(self)
        self.items = ContentItemOperations(self)
        self.variants = LanguageVariantOperations(self)

    @property
    def api(self) -> APIClient:
        """Get the underlying core APIClient."""
        return self._client

    def subscription_path(self) -> str:
        """Get the subscription path prefix."""
        if not self.subscription_id:
            raise InvalidArgumentError(
                "Subscription ID required. Set KONTENT_SUBSCRIPTION_ID env var or pass subscription_id",
            )
        return f"/subscriptions/{self.subscription_id}"

    def environment_path(self) -> str:
        """Get the environment path prefix."""
        if not self.environment_id:
            raise InvalidArgumentError(
                "Environment ID required. Set KONTENT_ENVIRONMENT_ID env var or pass environment_id",
            )
        return f"/projects/{self.environment_id}"

    async def aclose(self) -> None:
        """Close the HTTP transport owned by this client."""
        await self._client.aclose()

    async def __aenter__(self) -> "ManagementClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


# =============================================================================
# Subscription Operations
# =============================================================================


class SubscriptionOperations:
    """Operations on subscription projects and users."""

    def __init__(self, client: ManagementClient):
        self._root = client
        self._client = client.api

    def list_projects(self, cancel_event: asyncio.Event | None = None) -> AsyncListing[SubscriptionProject]:
        """
        List all projects in the subscription.

        Returns:
            AsyncListing of SubscriptionProjects, fetched lazily page by page

        """
        return self._client.paginate(
            f"{self._root.subscription_path()}/projects",
            parser=SubscriptionProject.from_dict,
            items_key="projects",
            resource="subscription project",
            cancel_event=cancel_event,
        )

    async def get_project(self, project_id: str, cancel_event: asyncio.Event | None = None) -> SubscriptionProject:
        """
        Get a subscription project by ID.

        Args:
            project_id: The project ID

        Returns:
            SubscriptionProject details

        """
        if not project_id:
            raise InvalidArgumentError("project_id must not be empty", details={"argument": "project_id"})
        return await self._client.get(
            f"{self._root.subscription_path()}/projects/{project_id}",
            SubscriptionProject.from_dict,
            resource="subscription project",
            identifier=project_id,
            cancel_event=cancel_event,
        )

    def list_users(self, cancel_event: asyncio.Event | None = None) -> AsyncListing[SubscriptionUser]:
        """
        List all users in the subscription.

        Returns:
            AsyncListing of SubscriptionUsers, fetched lazily page by page

        """
        return self._client.paginate(
            f"{self._root.subscription_path()}/users",
            parser=SubscriptionUser.from_dict,
            items_key="users",
            resource="subscription user",
            cancel_event=cancel_event,
        )

    async def get_user(
        self,
        identifier: UserIdentifier,
        cancel_event: asyncio.Event | None = None,
    ) -> SubscriptionUser:
        """
        Get a subscription user by ID or email.

        Args:
            identifier: UserIdentifier.by_id(...) or UserIdentifier.by_email(...)

        Returns:
            SubscriptionUser with project and role assignments

        Raises:
            InvalidArgumentError: If identifier is None

        """
        _require_identifier(identifier, UserIdentifier)
        return await self._client.get(
            f"{self._root.subscription_path()}/users{identifier.path}",
            SubscriptionUser.from_dict,
            resource="subscription user",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def activate_user(
        self,
        identifier: UserIdentifier,
        retry: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """
        Activate a user in all projects of the subscription.

        Args:
            identifier: The user to activate
            retry: Retry on transient failures. Off by default since activation is a command.

        """
        await self._command(identifier, "activate", retry, cancel_event)

    async def deactivate_user(
        self,
        identifier: UserIdentifier,
        retry: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """
        Deactivate a user in all projects of the subscription.

        Args:
            identifier: The user to deactivate
            retry: Retry on transient failures. Off by default since deactivation is a command.

        """
        await self._command(identifier, "deactivate", retry, cancel_event)

    async def _command(
        self,
        identifier: UserIdentifier,
        action: str,
        retry: bool,
        cancel_event: asyncio.Event | None,
    ) -> None:
        _require_identifier(identifier, UserIdentifier)
        await self._client.put(
            f"{self._root.subscription_path()}/users{identifier.path}/{action}",
            retry_safe=retry,
            resource="subscription user",
            identifier=identifier,
            cancel_event=cancel_event,
        )


# =============================================================================
# Content Item Operations
# =============================================================================


class ContentItemOperations:
    """Operations for managing content items."""

    def __init__(self, client: ManagementClient):
        self._root = client
        self._client = client.api

    def list(self, cancel_event: asyncio.Event | None = None) -> AsyncListing[ContentItem]:
        """
        List all content items in the environment.

        Returns:
            AsyncListing of ContentItems

        """
        return self._client.paginate(
            f"{self._root.environment_path()}/items",
            parser=ContentItem.from_dict,
            items_key="items",
            resource="content item",
            cancel_event=cancel_event,
        )

    async def get(
        self,
        identifier: ContentItemIdentifier,
        cancel_event: asyncio.Event | None = None,
    ) -> ContentItem:
        """
        Get a content item by ID, codename or external ID.

        Args:
            identifier: The content item identifier

        Returns:
            ContentItem

        """
        _require_identifier(identifier, ContentItemIdentifier)
        return await self._client.get(
            f"{self._root.environment_path()}/items{identifier.path}",
            ContentItem.from_dict,
            resource="content item",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def create(
        self,
        item: ContentItemCreate,
        retry: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> ContentItem:
        """
        Create a content item.

        Args:
            item: The item to create
            retry: Retry on transient failures (POST is not retried by default)

        Returns:
            Created ContentItem

        """
        if item is None:
            raise InvalidArgumentError("item must not be None", details={"argument": "item"})
        return await self._client.post(
            f"{self._root.environment_path()}/items",
            item.to_dict(),
            ContentItem.from_dict,
            retry_safe=retry,
            resource="content item",
            cancel_event=cancel_event,
        )

    async def upsert(
        self,
        identifier: ContentItemIdentifier,
        item: ContentItemUpsert,
        cancel_event: asyncio.Event | None = None,
    ) -> ContentItem:
        """
        Create or update a content item.

        Args:
            identifier: The content item identifier
            item: New item values

        Returns:
            Upserted ContentItem

        """
        _require_identifier(identifier, ContentItemIdentifier)
        if item is None:
            raise InvalidArgumentError("item must not be None", details={"argument": "item"})
        return await self._client.put(
            f"{self._root.environment_path()}/items{identifier.path}",
            item.to_dict(),
            ContentItem.from_dict,
            resource="content item",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def delete(
        self,
        identifier: ContentItemIdentifier,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """Delete a content item and all its language variants."""
        _require_identifier(identifier, ContentItemIdentifier)
        await self._client.delete(
            f"{self._root.environment_path()}/items{identifier.path}",
            resource="content item",
            identifier=identifier,
            cancel_event=cancel_event,
        )


# =============================================================================
# Language Variant Operations
# =============================================================================


class LanguageVariantOperations:
    """
    Operations for managing language variants.

    Variants can be handled as raw element lists or through typed models
    declared with ``element()`` (see kontent_management.core.metadata).
    """

    def __init__(self, client: ManagementClient, mapper: ElementModelMapper | None = None):
        self._root = client
        self._client = client.api
        self._mapper = mapper or ElementModelMapper()

    async def list_by_item(
        self,
        identifier: ContentItemIdentifier,
        cancel_event: asyncio.Event | None = None,
    ) -> builtins.list[LanguageVariant]:
        """
        List all language variants of a content item.

        Args:
            identifier: The content item identifier

        Returns:
            List of LanguageVariants

        """
        _require_identifier(identifier, ContentItemIdentifier)
        return await self._client.get(
            f"{self._root.environment_path()}/items{identifier.path}/variants",
            lambda data: [LanguageVariant.from_dict(v) for v in data],
            resource="language variant",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def get(
        self,
        identifier: LanguageVariantIdentifier,
        cancel_event: asyncio.Event | None = None,
    ) -> LanguageVariant:
        """Get a language variant with raw elements."""
        _require_identifier(identifier, LanguageVariantIdentifier)
        return await self._client.get(
            f"{self._root.environment_path()}{identifier.path}",
            LanguageVariant.from_dict,
            resource="language variant",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def get_typed(
        self,
        identifier: LanguageVariantIdentifier,
        model_type: type[M],
        cancel_event: asyncio.Event | None = None,
    ) -> TypedLanguageVariant[M]:
        """
        Get a language variant bound to a typed model.

        Raises:
            MissingMetadataError: If a field of model_type declares no element id

        """
        _require_identifier(identifier, LanguageVariantIdentifier)
        if model_type is None:
            raise InvalidArgumentError("model_type must not be None", details={"argument": "model_type"})
        # Fails before any I/O when a field has no element id
        self._mapper.validate(model_type)
        return await self._client.get(
            f"{self._root.environment_path()}{identifier.path}",
            lambda data: self._to_typed(LanguageVariant.from_dict(data), model_type),
            resource="language variant",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def upsert(
        self,
        identifier: LanguageVariantIdentifier,
        elements: builtins.list[dict[str, Any]],
        cancel_event: asyncio.Event | None = None,
    ) -> LanguageVariant:
        """
        Create or update a language variant from raw elements.

        Args:
            identifier: The language variant identifier
            elements: Element values, e.g. [{"element": {"id": ...}, "value": ...}]

        Returns:
            Upserted LanguageVariant

        """
        _require_identifier(identifier, LanguageVariantIdentifier)
        if elements is None:
            raise InvalidArgumentError("elements must not be None", details={"argument": "elements"})
        return await self._client.put(
            f"{self._root.environment_path()}{identifier.path}",
            {"elements": elements},
            LanguageVariant.from_dict,
            resource="language variant",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def upsert_typed(
        self,
        identifier: LanguageVariantIdentifier,
        model: M,
        cancel_event: asyncio.Event | None = None,
    ) -> TypedLanguageVariant[M]:
        """Create or update a language variant from a typed model."""
        _require_identifier(identifier, LanguageVariantIdentifier)
        if model is None:
            raise InvalidArgumentError("model must not be None", details={"argument": "model"})
        elements = self._mapper.to_elements(model)
        model_type = type(model)
        return await self._client.put(
            f"{self._root.environment_path()}{identifier.path}",
            {"elements": elements},
            lambda data: self._to_typed(LanguageVariant.from_dict(data), model_type),
            resource="language variant",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    async def delete(
        self,
        identifier: LanguageVariantIdentifier,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """Delete a language variant."""
        _require_identifier(identifier, LanguageVariantIdentifier)
        await self._client.delete(
            f"{self._root.environment_path()}{identifier.path}",
            resource="language variant",
            identifier=identifier,
            cancel_event=cancel_event,
        )

    def _to_typed(self, variant: LanguageVariant, model_type: type[M]) -> TypedLanguageVariant[M]:
        return TypedLanguageVariant(
            item=variant.item,
            language=variant.language,
            elements=self._mapper.from_elements(model_type, variant.elements),
            workflow_step=variant.workflow_step,
            last_modified=variant.last_modified,
        )
