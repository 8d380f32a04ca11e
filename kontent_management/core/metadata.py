"""
Element id metadata for strongly typed language variant models.

A model is a dataclass whose fields are declared with ``element()``::

    @dataclass
    class Article:
        title: str | None = element("4b628214-e4fe-4fe0-b1ff-955df33e1515")
        rating: float | None = element("975bf280-fd91-488c-994c-2f04416e5ee3")

The registry resolves each field to its element id once per model type and
keeps the result for the life of the process.
"""

import dataclasses
import logging
import threading
import uuid
from typing import Any, TypeVar

from kontent_management.core.errors import InvalidArgumentError, MissingMetadataError

logger = logging.getLogger(__name__)

ELEMENT_ID_KEY = "kontent_element_id"

M = TypeVar("M")


def element(element_id: str | uuid.UUID, *, default: Any = None, **kwargs: Any) -> Any:
    """Declare a dataclass field bound to a content type element."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[ELEMENT_ID_KEY] = uuid.UUID(str(element_id))
    if "default_factory" in kwargs:
        return dataclasses.field(metadata=metadata, **kwargs)
    return dataclasses.field(default=default, metadata=metadata, **kwargs)


class ElementRegistry:
    """Process-wide cache of (model type, property) -> element id."""

    def __init__(self) -> None:
        self._entries: dict[type, dict[str, uuid.UUID | None]] = {}
        self._lock = threading.Lock()

    def _entries_for(self, model_type: type) -> dict[str, uuid.UUID | None]:
        entries = self._entries.get(model_type)
        if entries is not None:
            return entries
        if not dataclasses.is_dataclass(model_type):
            raise InvalidArgumentError(
                f"{model_type!r} is not a dataclass model",
                details={"model": getattr(model_type, "__name__", repr(model_type))},
            )
        with self._lock:
            entries = self._entries.get(model_type)
            if entries is None:
                entries = {f.name: f.metadata.get(ELEMENT_ID_KEY) for f in dataclasses.fields(model_type)}
                self._entries[model_type] = entries
                logger.debug(f"Registered {len(entries)} element mappings for {model_type.__name__}")
        return entries

    def resolve(self, model_type: type, property_name: str) -> uuid.UUID:
        """
        Get the element id declared for a model property.

        Raises:
            MissingMetadataError: If the property declares no element id

        """
        element_id = self._entries_for(model_type).get(property_name)
        if element_id is None:
            raise MissingMetadataError(model_type, property_name)
        return element_id

    def properties(self, model_type: type) -> dict[str, uuid.UUID]:
        """Resolve every field of a model, failing on the first unmapped one."""
        return {name: self.resolve(model_type, name) for name in self._entries_for(model_type)}


registry = ElementRegistry()


class ElementModelMapper:
    """Converts typed models to and from variant element lists."""

    def __init__(self, element_registry: ElementRegistry | None = None):
        self._registry = element_registry or registry

    def validate(self, model_type: type) -> None:
        """Check that every field of the model declares an element id."""
        self._registry.properties(model_type)

    def to_elements(self, model: Any) -> list[dict[str, Any]]:
        """Serialize a model into ``[{"element": {"id": ...}, "value": ...}]``."""
        mapping = self._registry.properties(type(model))
        return [
            {"element": {"id": str(element_id)}, "value": getattr(model, name)}
            for name, element_id in mapping.items()
        ]

    def from_elements(self, model_type: type[M], elements: list[dict[str, Any]]) -> M:
        """
        Build a model from variant elements, ignoring elements it does not map.

        Raises:
            ValueError: If an element entry is not an object or its id is not a UUID

        """
        values_by_id: dict[uuid.UUID, Any] = {}
        for item in elements:
            if not isinstance(item, dict):
                raise ValueError(f"Element entry must be an object, got {type(item).__name__}")
            ref = item.get("element") or {}
            if not isinstance(ref, dict):
                raise ValueError(f"Element reference must be an object, got {type(ref).__name__}")
            raw_id = ref.get("id")
            if raw_id is None:
                continue
            values_by_id[uuid.UUID(str(raw_id))] = item.get("value")

        kwargs = {}
        for name, element_id in self._registry.properties(model_type).items():
            if element_id in values_by_id:
                kwargs[name] = values_by_id[element_id]
        return model_type(**kwargs)
