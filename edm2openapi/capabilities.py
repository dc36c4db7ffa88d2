# File: edm2openapi/capabilities.py
"""
edm2openapi - Capability Resolver
==================================
Decides whether create / update / delete operations are exposed for a
collection, from the OData Capabilities vocabulary annotations:

    InsertRestrictions/Insertable
    UpdateRestrictions/Updatable
    DeleteRestrictions/Deletable

Missing annotation, missing field, or a field that is not a boolean all
mean **permitted**. Only an explicit ``False`` denies the operation, so an
unannotated model exposes full CRUD.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from edm2openapi.models import CollectionInfo

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.capabilities")

CAPABILITIES_NAMESPACE: str = "Org.OData.Capabilities.V1"


class CapabilityKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class CapabilityTerm:
    """Where a capability lives: annotation term + boolean record field."""

    term: str
    field: str

    @property
    def qualified_term(self) -> str:
        return f"{CAPABILITIES_NAMESPACE}.{self.term}"


CAPABILITY_TERMS: Dict[CapabilityKind, CapabilityTerm] = {
    CapabilityKind.INSERT: CapabilityTerm("InsertRestrictions", "Insertable"),
    CapabilityKind.UPDATE: CapabilityTerm("UpdateRestrictions", "Updatable"),
    CapabilityKind.DELETE: CapabilityTerm("DeleteRestrictions", "Deletable"),
}


def _find_annotation(collection: CollectionInfo, term: CapabilityTerm) -> Optional[Any]:
    annotations: Dict[str, Any] = collection.annotations
    if term.qualified_term in annotations:
        return annotations[term.qualified_term]
    return annotations.get(term.term)


def resolve(collection: CollectionInfo, kind: CapabilityKind) -> bool:
    """
    Is ``kind`` permitted on ``collection``?

    Defaults to True unless the restriction record carries a boolean
    ``False`` in its field.
    """
    term: CapabilityTerm = CAPABILITY_TERMS[kind]
    record: Optional[Any] = _find_annotation(collection, term)
    if not isinstance(record, Mapping):
        return True

    value: Any = record.get(term.field)
    if not isinstance(value, bool):
        if value is not None:
            logger.debug(
                "Ignoring non-boolean %s/%s on %s: %r",
                term.term,
                term.field,
                collection.name,
                value,
            )
        return True
    return value


@dataclass(frozen=True, slots=True)
class CollectionCapabilities:
    insertable: bool = True
    updatable: bool = True
    deletable: bool = True


def resolve_all(collection: CollectionInfo) -> CollectionCapabilities:
    """All three capabilities of ``collection`` at once."""
    return CollectionCapabilities(
        insertable=resolve(collection, CapabilityKind.INSERT),
        updatable=resolve(collection, CapabilityKind.UPDATE),
        deletable=resolve(collection, CapabilityKind.DELETE),
    )


__all__: List[str] = [
    "CAPABILITIES_NAMESPACE",
    "CAPABILITY_TERMS",
    "CapabilityKind",
    "CapabilityTerm",
    "CollectionCapabilities",
    "resolve",
    "resolve_all",
]
