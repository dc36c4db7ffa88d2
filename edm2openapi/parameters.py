# File: edm2openapi/parameters.py
"""
edm2openapi - Parameter Registry
=================================
Reusable parameter components (entity key path parameters, the root
identifier, the ``If-Match`` concurrency header) plus the inline OData
query options attached to read operations.

Registration is keyed by a stable scope (``<Collection>_<Property>`` for
keys), so the same key reached through several relationship chains maps to
one stored definition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.models import EdmModel, PropertyInfo, StructuredTypeInfo
from edm2openapi.typemap import is_mapped, map_primitive
from edm2openapi.utils import parameter_ref, ref_target

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.parameters")

ROOT_ID_PARAMETER_ID: str = "RootIdPathParam"
IF_MATCH_PARAMETER_ID: str = "IfMatchHeaderParam"
KEY_PARAMETER_SUFFIX: str = "KeyPathParam"

_COLLECTION_QUERY_OPTIONS: tuple = (
    ("$top", "integer"),
    ("$skip", "integer"),
    ("$filter", "string"),
    ("$select", "string"),
    ("$orderby", "string"),
    ("$expand", "string"),
)
_SINGLE_QUERY_OPTIONS: tuple = (
    ("$select", "string"),
    ("$expand", "string"),
)


class ParameterRegistry:
    """Deduplicating front-end to ``OutputDocument.parameters``."""

    def __init__(self, document: OutputDocument) -> None:
        self._document: OutputDocument = document

    @staticmethod
    def component_id(scope_key: str) -> str:
        return f"{scope_key}_{KEY_PARAMETER_SUFFIX}"

    def register(self, definition: Dict[str, Any], scope_key: str) -> str:
        """Store ``definition`` once per ``scope_key``; return its component id."""
        component_id: str = self.component_id(scope_key)
        if self._document.add_parameter(component_id, definition):
            logger.debug("Registered parameter %s", component_id)
        return component_id

    def register_shared(self, component_id: str, definition: Dict[str, Any]) -> str:
        """Store a process-wide parameter under a fixed id."""
        self._document.add_parameter(component_id, definition)
        return component_id

    def register_if_match(self) -> str:
        return self.register_shared(
            IF_MATCH_PARAMETER_ID,
            {
                "name": "If-Match",
                "in": "header",
                "required": True,
                "description": "ETag for concurrency control.",
                "schema": {"type": "string"},
            },
        )

    @staticmethod
    def ref(component_id: str) -> Dict[str, str]:
        return parameter_ref(component_id)

    def placeholder_of(self, reference: Dict[str, Any]) -> Optional[str]:
        """Parameter name behind a ``$ref`` or inline parameter object."""
        target: Optional[str] = ref_target(reference)
        if target is None:
            return reference.get("name")
        definition: Optional[Dict[str, Any]] = self._document.parameters.get(target)
        return definition.get("name") if definition is not None else None


# ---------------------------------------------------------------------------
# Key segments
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class KeyParameter:
    """One key property ready to be registered: its scope and definition."""

    property_name: str
    scope_key: str
    definition: Dict[str, Any]

    @property
    def placeholder(self) -> str:
        return self.definition["name"]

    def qualified(self, collection_name: str) -> "KeyParameter":
        """Copy whose placeholder is ``<collection>_<property>``."""
        return KeyParameter(
            property_name=self.property_name,
            scope_key=f"{self.scope_key}_Qualified",
            definition={**self.definition, "name": f"{collection_name}_{self.property_name}"},
        )


@dataclass(slots=True)
class KeySegment:
    """
    The ``(...)`` suffix that addresses a single entity, and the parameters
    its placeholders need.

    Single key: ``({id})``. Composite key: ``(a={a},b={b})``.
    """

    parameters: List[KeyParameter] = field(default_factory=list)

    @property
    def segment(self) -> str:
        if len(self.parameters) == 1:
            return f"({{{self.parameters[0].placeholder}}})"
        return "(" + ",".join(f"{p.property_name}={{{p.placeholder}}}" for p in self.parameters) + ")"

    def register(self, registry: ParameterRegistry) -> List[Dict[str, str]]:
        """Register every key parameter and return ``$ref`` objects in key order."""
        return [registry.ref(registry.register(p.definition, p.scope_key)) for p in self.parameters]

    def scoped(
        self, registry: ParameterRegistry, inherited: List[Dict[str, Any]], collection_name: str
    ) -> "KeySegment":
        """
        Variant of this segment that can follow ``inherited`` in one path.

        A key parameter whose component is already inherited is kept (the
        reference is de-duplicated later). One whose placeholder name is
        taken by a different inherited parameter is qualified with the
        collection name, so every placeholder in the path binds exactly
        one parameter.
        """
        inherited_ids: Set[str] = {t for t in (ref_target(r) for r in inherited) if t}
        taken: Set[str] = {n for n in (registry.placeholder_of(r) for r in inherited) if n}
        parameters: List[KeyParameter] = []
        for param in self.parameters:
            if registry.component_id(param.scope_key) not in inherited_ids and param.placeholder in taken:
                param = param.qualified(collection_name)
                logger.debug("Qualified key placeholder %s in %s", param.placeholder, collection_name)
            parameters.append(param)
        return KeySegment(parameters=parameters)


def key_parameter_definition(
    prop: PropertyInfo, schema: Dict[str, Any], collection_name: str
) -> Dict[str, Any]:
    return {
        "name": prop.name,
        "in": "path",
        "required": True,
        "description": f"Key: {prop.name} for {collection_name}",
        "schema": schema,
    }


def build_key_segment(
    model: EdmModel,
    entity_type: StructuredTypeInfo,
    collection_name: str,
    diagnostics: DiagnosticLog,
) -> Optional[KeySegment]:
    """
    Key segment for ``entity_type`` addressed through ``collection_name``.

    Returns None (with an error diagnostic) when the type has no key, a key
    name has no matching property, or a key property is not a mapped
    primitive; callers skip the whole subtree in that case.
    """
    key_names: List[str] = model.all_keys(entity_type)
    if not key_names:
        diagnostics.add_error(
            "UNMAPPABLE_KEY",
            f"Entity type '{entity_type.full_name}' of '{collection_name}' has no key.",
            {"type": entity_type.full_name, "collection": collection_name},
        )
        return None

    parameters: List[KeyParameter] = []
    for name in key_names:
        prop: Optional[PropertyInfo] = model.find_property(entity_type, name)
        kind: Optional[str] = prop.type.primitive_kind if prop is not None else None
        if prop is None or prop.type.collection or not is_mapped(kind):
            type_name: str = prop.type.name if prop is not None else "<missing>"
            diagnostics.add_error(
                "UNMAPPABLE_KEY",
                f"Cannot map key type '{type_name}' for '{name}' in '{collection_name}'.",
                {"type": entity_type.full_name, "collection": collection_name, "key": name},
            )
            return None

        schema: Dict[str, Any] = map_primitive(kind, max_length=prop.type.max_length)
        parameters.append(
            KeyParameter(
                property_name=name,
                scope_key=f"{collection_name}_{name}",
                definition=key_parameter_definition(prop, schema, collection_name),
            )
        )

    return KeySegment(parameters=parameters)


# ---------------------------------------------------------------------------
# Query options
# ---------------------------------------------------------------------------


def _query_parameters(options: tuple) -> List[Dict[str, Any]]:
    return [
        {"name": name, "in": "query", "required": False, "schema": {"type": type_name}}
        for name, type_name in options
    ]


def collection_query_parameters() -> List[Dict[str, Any]]:
    """``$top $skip $filter $select $orderby $expand`` for list reads."""
    return _query_parameters(_COLLECTION_QUERY_OPTIONS)


def single_query_parameters() -> List[Dict[str, Any]]:
    """``$select $expand`` for single-entity reads."""
    return _query_parameters(_SINGLE_QUERY_OPTIONS)


__all__: List[str] = [
    "ROOT_ID_PARAMETER_ID",
    "IF_MATCH_PARAMETER_ID",
    "KEY_PARAMETER_SUFFIX",
    "ParameterRegistry",
    "KeyParameter",
    "KeySegment",
    "key_parameter_definition",
    "build_key_segment",
    "collection_query_parameters",
    "single_query_parameters",
]
