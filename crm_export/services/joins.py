"""Generic reference joins used by both report builders.

A report row starts life as a plain ``dict`` (the *context*) holding the
embedded document it was exploded from. Each ``JoinSpec`` reads a reference
out of the context, looks it up in the target collection and stores either the
joined document or a single resolved display value back into the context.
Specs run in order, so later specs can follow references of earlier ones
(``product.marcaProdotto`` after ``product``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Sequence

from ..db import collections
from ..db.store import Document, StoreReader

PLACEHOLDER = "Non specificato"


class Cardinality(str, Enum):
    # exactly one match is expected; rows without it are dropped
    ONE = "one"
    # zero or one match; a miss falls back to the spec default
    OPTIONAL = "optional"


@dataclass(frozen=True)
class JoinSpec:
    name: str
    collection: str
    local_key: str
    foreign_key: str = "_id"
    cardinality: Cardinality = Cardinality.OPTIONAL
    field: str | None = None
    default: Any = None


def get_path(document: Mapping[str, Any] | None, path: str) -> Any:
    """Follow a dotted path through nested mappings."""

    current: Any = document
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def resolve_reference(document: Mapping[str, Any] | None, field: str, default: Any = PLACEHOLDER) -> Any:
    """Return ``document[field]``, or ``default`` if either one is missing."""

    if document is None:
        return default
    value = document.get(field)
    return default if value is None else value


def display_text(value: Any) -> Any:
    """Render a resolved display field as text; ``None`` stays missing."""

    if value is None or isinstance(value, str):
        return value
    return str(value)


class CollectionIndex:
    def __init__(self, documents: Iterable[Document], key: str = "_id") -> None:
        self._by_key: dict[Any, Document] = {}
        for document in documents:
            value = get_path(document, key)
            try:
                self._by_key.setdefault(value, document)
            except TypeError:
                continue

    def get(self, value: Any) -> Document | None:
        if value is None:
            return None
        try:
            return self._by_key.get(value)
        except TypeError:
            return None

    def __len__(self) -> int:
        return len(self._by_key)


class JoinExecutor:
    """Run join specs against one store snapshot, loading each collection once."""

    def __init__(self, reader: StoreReader) -> None:
        self._reader = reader
        self._indexes: dict[tuple[str, str], CollectionIndex] = {}

    def index(self, collection: str, key: str = "_id") -> CollectionIndex:
        cache_key = (collection, key)
        if cache_key not in self._indexes:
            self._indexes[cache_key] = CollectionIndex(self._reader.find(collection), key)
        return self._indexes[cache_key]

    def join(self, context: dict[str, Any], specs: Sequence[JoinSpec]) -> dict[str, Any] | None:
        for spec in specs:
            reference = get_path(context, spec.local_key)
            document = self.index(spec.collection, spec.foreign_key).get(reference)
            if document is None and spec.cardinality is Cardinality.ONE:
                return None
            if spec.field is None:
                context[spec.name] = document
            else:
                context[spec.name] = display_text(resolve_reference(document, spec.field, spec.default))
        return context

    def run(self, contexts: Iterable[dict[str, Any]], specs: Sequence[JoinSpec]) -> Iterator[dict[str, Any]]:
        for context in contexts:
            joined = self.join(context, specs)
            if joined is not None:
                yield joined


def dimension_joins(product_key: str = "product") -> tuple[JoinSpec, ...]:
    """Descriptive product attributes, each defaulting to the placeholder."""

    def dimension(name: str, collection: str, reference: str) -> JoinSpec:
        return JoinSpec(
            name=name,
            collection=collection,
            local_key=f"{product_key}.{reference}",
            field="descrizione",
            default=PLACEHOLDER,
        )

    return (
        dimension("category", collections.CATEGORY, "categoriaProdotto"),
        dimension("brand", collections.BRAND, "marcaProdotto"),
        dimension("type", collections.PRODUCT_TYPE, "tipologiaProdotto"),
        dimension("model", collections.MODEL, "modelloProdotto"),
        dimension("color", collections.COLOR, "coloreProdotto"),
        dimension("size", collections.SIZE, "tagliaProdotto"),
    )


SUPPLIER_JOIN = JoinSpec(
    name="supplier",
    collection=collections.SUPPLIER,
    local_key="supplier_id",
    field="nomeFornitore",
    default=PLACEHOLDER,
)


def explode(value: Any) -> list[Any]:
    """Items of an embedded array; a lone value counts as a one-item array."""

    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]
