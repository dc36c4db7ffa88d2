# File: edm2openapi/schemas.py
"""
edm2openapi - Schema Synthesizer
=================================
Turns entity and complex types into reusable component schemas.

``schema_for`` is idempotent: the first call for a type registers its
schema under the canonical key (qualified name with dots replaced by
underscores) and every call returns a ``$ref`` to that entry.

Recursion guard: a placeholder is stored under the key *before* the
properties are expanded. A property that refers back to a type whose
synthesis is still in progress therefore finds the key taken and gets a
``$ref`` instead of re-entering synthesis.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.models import EdmModel, EnumTypeInfo, StructuredTypeInfo, TypeRef
from edm2openapi.typemap import map_primitive
from edm2openapi.utils import schema_key, schema_ref

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.schemas")

_PLACEHOLDER_DESCRIPTION: str = "Recursion placeholder"


class SchemaRegistry:
    """
    Registers component schemas in an ``OutputDocument``.

    One registry per run; it holds no state of its own beyond references to
    the model, the document it writes into and the diagnostics log.
    """

    def __init__(
        self,
        model: EdmModel,
        document: OutputDocument,
        diagnostics: DiagnosticLog,
    ) -> None:
        self._model: EdmModel = model
        self._document: OutputDocument = document
        self._diagnostics: DiagnosticLog = diagnostics

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def register(self, structured: StructuredTypeInfo) -> str:
        """Ensure ``structured`` has a component schema; return its key."""
        key: str = schema_key(structured.full_name)
        if not self._document.add_schema(key, {"description": _PLACEHOLDER_DESCRIPTION}):
            return key

        logger.debug("Synthesizing schema %s", key)
        self._document.replace_schema(key, self._build_object_schema(structured))
        return key

    def schema_for(self, structured: StructuredTypeInfo) -> Dict[str, str]:
        """``$ref`` to the component schema of ``structured``."""
        return schema_ref(self.register(structured))

    def schema_for_type_ref(self, type_ref: Optional[TypeRef]) -> Dict[str, Any]:
        """
        Schema for an operation parameter or return type.

        ``None`` (no declared type) yields a nullable object placeholder.
        """
        if type_ref is None:
            return {"type": "object", "nullable": True, "description": "No content"}
        return self._type_ref_schema(type_ref)

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _build_object_schema(self, structured: StructuredTypeInfo) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        required: List[str] = []

        if structured.is_entity:
            required.extend(self._model.all_keys(structured))

        for prop in self._model.all_properties(structured):
            properties[prop.name] = self._type_ref_schema(prop.type)
            if not prop.type.nullable and prop.name not in required:
                required.append(prop.name)

        schema: Dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return schema

    def _type_ref_schema(self, type_ref: TypeRef) -> Dict[str, Any]:
        if type_ref.collection:
            return {"type": "array", "items": self._element_schema(type_ref.element())}
        return self._element_schema(type_ref)

    def _element_schema(self, type_ref: TypeRef) -> Dict[str, Any]:
        kind: Optional[str] = type_ref.primitive_kind
        if kind is not None:
            return map_primitive(
                kind, max_length=type_ref.max_length, diagnostics=self._diagnostics
            )

        enum_type: Optional[EnumTypeInfo] = self._model.find_enum(type_ref.name)
        if enum_type is not None:
            return {"type": "string", "enum": list(enum_type.members)}

        structured: Optional[StructuredTypeInfo] = self._model.find_type(type_ref.name)
        if structured is not None:
            return self.schema_for(structured)

        self._diagnostics.add_warning(
            "UNRESOLVED_TYPE",
            f"Type '{type_ref.name}' is not defined in the model.",
            {"type": type_ref.name},
        )
        return {"type": "object", "description": f"Unsupported type: {type_ref.name}"}


__all__: List[str] = ["SchemaRegistry"]
