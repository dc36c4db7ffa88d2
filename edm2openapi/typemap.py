# File: edm2openapi/typemap.py
"""
edm2openapi - Primitive Type Mapper
====================================
Fixed table from EDM primitive kinds to OpenAPI ``(type, format)`` pairs.

Unknown kinds never fail the run: they degrade to a plain string schema
tagged with a description naming the kind, and a warning is recorded.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.models import PrimitiveKind

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.typemap")

# ---------------------------------------------------------------------------
# Mapping table
# ---------------------------------------------------------------------------

PRIMITIVE_TYPE_MAP: Dict[str, Tuple[str, Optional[str]]] = {
    PrimitiveKind.BOOLEAN.value: ("boolean", None),
    PrimitiveKind.BYTE.value: ("integer", "int32"),
    PrimitiveKind.SBYTE.value: ("integer", "int32"),
    PrimitiveKind.INT16.value: ("integer", "int32"),
    PrimitiveKind.INT32.value: ("integer", "int32"),
    PrimitiveKind.INT64.value: ("integer", "int64"),
    PrimitiveKind.DECIMAL.value: ("number", "double"),
    PrimitiveKind.DOUBLE.value: ("number", "double"),
    PrimitiveKind.SINGLE.value: ("number", "float"),
    PrimitiveKind.DATE.value: ("string", "date"),
    PrimitiveKind.DATE_TIME_OFFSET.value: ("string", "date-time"),
    PrimitiveKind.DURATION.value: ("string", "duration"),
    PrimitiveKind.TIME_OF_DAY.value: ("string", "time"),
    PrimitiveKind.GUID.value: ("string", "uuid"),
    PrimitiveKind.STRING.value: ("string", None),
    PrimitiveKind.BINARY.value: ("string", "byte"),
    PrimitiveKind.STREAM.value: ("string", "binary"),
}


def is_mapped(kind: Optional[str]) -> bool:
    """True when ``kind`` has an entry in the mapping table."""
    return kind is not None and kind in PRIMITIVE_TYPE_MAP


def map_primitive(
    kind: str,
    *,
    max_length: Optional[int] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Dict[str, Any]:
    """
    Map a primitive kind (``"Int32"``, ``"Guid"``, ...) to a schema fragment.

    ``max_length`` is carried through for strings only.
    """
    entry: Optional[Tuple[str, Optional[str]]] = PRIMITIVE_TYPE_MAP.get(kind)
    if entry is None:
        if diagnostics is not None:
            diagnostics.add_warning(
                "UNMAPPED_PRIMITIVE",
                f"Primitive kind '{kind}' has no OpenAPI mapping; using string.",
                {"kind": kind},
            )
        else:
            logger.warning("Unmapped primitive kind '%s'; using string.", kind)
        return {"type": "string", "description": f"Unknown: {kind}"}

    type_name, fmt = entry
    schema: Dict[str, Any] = {"type": type_name}
    if fmt is not None:
        schema["format"] = fmt
    if kind == PrimitiveKind.STRING.value and max_length is not None:
        schema["maxLength"] = max_length
    return schema


__all__: List[str] = ["PRIMITIVE_TYPE_MAP", "is_mapped", "map_primitive"]
