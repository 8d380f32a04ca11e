"""
Core types for the Kontent.ai Management API.

These dataclasses provide type safety and IDE support for API payloads.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

# =============================================================================
# Pagination
# =============================================================================


T = TypeVar("T")
M = TypeVar("M")


@dataclass
class ListingPage(Generic[T]):
    """One page of a listing response."""

    items: list[T]
    continuation_token: str | None = None

    @property
    def has_more(self) -> bool:
        """Check if the server announced another page."""
        return bool(self.continuation_token)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        parser: Callable[[dict[str, Any]], T],
        items_key: str = "items",
    ) -> "ListingPage[T]":
        """Create from API response dict."""
        raw_items = data.get(items_key)
        if not isinstance(raw_items, list):
            raise ValueError(f"Listing response has no '{items_key}' array")

        token = data.get("continuationToken")
        if token is None:
            token = (data.get("pagination") or {}).get("continuation_token")

        return cls(items=[parser(item) for item in raw_items], continuation_token=token or None)


# =============================================================================
# Shared Types
# =============================================================================


@dataclass
class Reference:
    """Reference to another object by id, codename or external id."""

    id: str | None = None
    codename: str | None = None
    external_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reference":
        """Create from API response dict."""
        return cls(
            id=data.get("id"),
            codename=data.get("codename"),
            external_id=data.get("external_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {}
        if self.id is not None:
            result["id"] = self.id
        if self.codename is not None:
            result["codename"] = self.codename
        if self.external_id is not None:
            result["external_id"] = self.external_id
        return result


def _reference(data: dict[str, Any] | None) -> Reference | None:
    return Reference.from_dict(data) if data else None


# =============================================================================
# Subscription Types
# =============================================================================


@dataclass
class SubscriptionProjectEnvironment:
    """An environment of a subscription project."""

    id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubscriptionProjectEnvironment":
        """Create from API response dict."""
        return cls(id=data["id"], name=data.get("name", ""))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class SubscriptionProject:
    """A project under a subscription."""

    id: str
    name: str
    is_active: bool = True
    environments: list[SubscriptionProjectEnvironment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubscriptionProject":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            is_active=data.get("is_active", True),
            environments=[SubscriptionProjectEnvironment.from_dict(e) for e in data.get("environments") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_active": self.is_active,
            "environments": [e.to_dict() for e in self.environments],
        }


@dataclass
class UserRole:
    """A role a user holds in an environment."""

    id: str
    name: str = ""
    codename: str | None = None
    collection_ids: list[str] = field(default_factory=list)
    language_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRole":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            codename=data.get("codename"),
            collection_ids=data.get("collection_ids") or [],
            language_ids=data.get("language_ids") or [],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "codename": self.codename,
            "collection_ids": self.collection_ids,
            "language_ids": self.language_ids,
        }


@dataclass
class UserEnvironment:
    """A user's access to one environment."""

    id: str
    name: str = ""
    is_user_active: bool = True
    last_activity_at: str | None = None
    roles: list[UserRole] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserEnvironment":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            is_user_active=data.get("is_user_active", True),
            last_activity_at=data.get("last_activity_at"),
            roles=[UserRole.from_dict(r) for r in data.get("roles") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_user_active": self.is_user_active,
            "last_activity_at": self.last_activity_at,
            "roles": [r.to_dict() for r in self.roles],
        }


@dataclass
class UserProject:
    """A project a user belongs to."""

    id: str
    name: str = ""
    environments: list[UserEnvironment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProject":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            environments=[UserEnvironment.from_dict(e) for e in data.get("environments") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "environments": [e.to_dict() for e in self.environments],
        }


@dataclass
class SubscriptionUser:
    """A user of the subscription."""

    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    projects: list[UserProject] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubscriptionUser":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            email=data["email"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            projects=[UserProject.from_dict(p) for p in data.get("projects") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "projects": [p.to_dict() for p in self.projects],
        }


# =============================================================================
# Content Item Types
# =============================================================================


@dataclass
class ContentItem:
    """A content item (language-independent part of content)."""

    id: str
    name: str
    codename: str
    type: Reference
    collection: Reference | None = None
    external_id: str | None = None
    last_modified: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentItem":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            codename=data.get("codename", ""),
            type=Reference.from_dict(data.get("type") or {}),
            collection=_reference(data.get("collection")),
            external_id=data.get("external_id"),
            last_modified=data.get("last_modified"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "codename": self.codename,
            "type": self.type.to_dict(),
        }
        if self.collection is not None:
            result["collection"] = self.collection.to_dict()
        if self.external_id is not None:
            result["external_id"] = self.external_id
        if self.last_modified is not None:
            result["last_modified"] = self.last_modified
        return result


@dataclass
class ContentItemCreate:
    """Payload for creating a content item."""

    name: str
    type: Reference
    codename: str | None = None
    external_id: str | None = None
    collection: Reference | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {"name": self.name, "type": self.type.to_dict()}
        if self.codename is not None:
            result["codename"] = self.codename
        if self.external_id is not None:
            result["external_id"] = self.external_id
        if self.collection is not None:
            result["collection"] = self.collection.to_dict()
        return result


@dataclass
class ContentItemUpsert:
    """Payload for creating or updating a content item in place."""

    name: str
    type: Reference | None = None
    codename: str | None = None
    collection: Reference | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {"name": self.name}
        if self.type is not None:
            result["type"] = self.type.to_dict()
        if self.codename is not None:
            result["codename"] = self.codename
        if self.collection is not None:
            result["collection"] = self.collection.to_dict()
        return result


# =============================================================================
# Language Variant Types
# =============================================================================


@dataclass
class LanguageVariant:
    """A language variant with raw element values."""

    item: Reference
    language: Reference
    elements: list[dict[str, Any]] = field(default_factory=list)
    workflow_step: Reference | None = None
    last_modified: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LanguageVariant":
        """Create from API response dict."""
        return cls(
            item=Reference.from_dict(data.get("item") or {}),
            language=Reference.from_dict(data.get("language") or {}),
            elements=data.get("elements") or [],
            workflow_step=_reference(data.get("workflow_step")),
            last_modified=data.get("last_modified"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "item": self.item.to_dict(),
            "language": self.language.to_dict(),
            "elements": self.elements,
        }
        if self.workflow_step is not None:
            result["workflow_step"] = self.workflow_step.to_dict()
        if self.last_modified is not None:
            result["last_modified"] = self.last_modified
        return result


@dataclass
class TypedLanguageVariant(Generic[M]):
    """A language variant whose elements are bound to a typed model."""

    item: Reference
    language: Reference
    elements: M
    workflow_step: Reference | None = None
    last_modified: str | None = None
