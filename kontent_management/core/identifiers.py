"""
Identifiers for addressing resources by one of several key schemes.

Each identifier holds exactly one populated key and renders it as the URL
path fragment the API expects for that scheme, e.g. ``/{id}`` or
``/email/{address}``.
"""

import urllib.parse
import uuid
from dataclasses import dataclass

from kontent_management.core.errors import InvalidArgumentError


def _require(value: str | uuid.UUID | None, name: str) -> str:
    """Normalize a key value, rejecting None and blank strings."""
    if value is None:
        raise InvalidArgumentError(f"{name} must not be None", details={"argument": name})
    text = str(value)
    if not text.strip():
        raise InvalidArgumentError(f"{name} must not be empty", details={"argument": name})
    return text


def _quote(value: str) -> str:
    return urllib.parse.quote(value, safe="@")


def _validate(identifier: object, kinds: tuple[str, ...]) -> None:
    """Reject unknown key schemes and missing values on any construction path."""
    if identifier.kind not in kinds:
        raise InvalidArgumentError(
            f"{type(identifier).__name__} kind must be one of {kinds}, got {identifier.kind!r}",
            details={"argument": "kind"},
        )
    # Frozen dataclass; normalize UUIDs to text
    object.__setattr__(identifier, "value", _require(identifier.value, identifier.kind))


@dataclass(frozen=True)
class UserIdentifier:
    """Selects a subscription user by id or by email address."""

    kind: str
    value: str

    def __post_init__(self) -> None:
        _validate(self, ("id", "email"))

    @classmethod
    def by_id(cls, user_id: str | uuid.UUID | None) -> "UserIdentifier":
        return cls("id", _require(user_id, "user_id"))

    @classmethod
    def by_email(cls, email: str | None) -> "UserIdentifier":
        return cls("email", _require(email, "email"))

    @property
    def path(self) -> str:
        if self.kind == "email":
            return f"/email/{_quote(self.value)}"
        return f"/{_quote(self.value)}"

    def __str__(self) -> str:
        return f"{self.kind}:{self.value}"


@dataclass(frozen=True)
class ContentItemIdentifier:
    """Selects a content item by id, codename or external id."""

    kind: str
    value: str

    def __post_init__(self) -> None:
        _validate(self, ("id", "codename", "external_id"))

    @classmethod
    def by_id(cls, item_id: str | uuid.UUID | None) -> "ContentItemIdentifier":
        return cls("id", _require(item_id, "item_id"))

    @classmethod
    def by_codename(cls, codename: str | None) -> "ContentItemIdentifier":
        return cls("codename", _require(codename, "codename"))

    @classmethod
    def by_external_id(cls, external_id: str | None) -> "ContentItemIdentifier":
        return cls("external_id", _require(external_id, "external_id"))

    @property
    def path(self) -> str:
        if self.kind == "codename":
            return f"/codename/{_quote(self.value)}"
        if self.kind == "external_id":
            return f"/external-id/{_quote(self.value)}"
        return f"/{_quote(self.value)}"

    def __str__(self) -> str:
        return f"{self.kind}:{self.value}"


@dataclass(frozen=True)
class LanguageIdentifier:
    """Selects a language by id or codename."""

    kind: str
    value: str

    def __post_init__(self) -> None:
        _validate(self, ("id", "codename"))

    @classmethod
    def by_id(cls, language_id: str | uuid.UUID | None) -> "LanguageIdentifier":
        return cls("id", _require(language_id, "language_id"))

    @classmethod
    def by_codename(cls, codename: str | None) -> "LanguageIdentifier":
        return cls("codename", _require(codename, "codename"))

    @property
    def path(self) -> str:
        if self.kind == "codename":
            return f"/codename/{_quote(self.value)}"
        return f"/{_quote(self.value)}"

    def __str__(self) -> str:
        return f"{self.kind}:{self.value}"


@dataclass(frozen=True)
class LanguageVariantIdentifier:
    """Selects the variant of a content item in one language."""

    item: ContentItemIdentifier
    language: LanguageIdentifier

    def __post_init__(self) -> None:
        if not isinstance(self.item, ContentItemIdentifier):
            raise InvalidArgumentError("item must be a ContentItemIdentifier", details={"argument": "item"})
        if not isinstance(self.language, LanguageIdentifier):
            raise InvalidArgumentError("language must be a LanguageIdentifier", details={"argument": "language"})

    @property
    def path(self) -> str:
        return f"/items{self.item.path}/variants{self.language.path}"

    def __str__(self) -> str:
        return f"{self.item}/{self.language}"
