# File: edm2openapi/utils.py
"""
edm2openapi - Utility Functions & Helpers
==========================================
Small helpers shared by the synthesizers: component reference builders,
schema-key canonicalisation, and the ``Timer`` used to profile pipeline
steps.

No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.utils")

# ---------------------------------------------------------------------------
# Component references
# ---------------------------------------------------------------------------

SCHEMA_REF_PREFIX: str = "#/components/schemas/"
PARAMETER_REF_PREFIX: str = "#/components/parameters/"
SECURITY_SCHEME_REF_PREFIX: str = "#/components/securitySchemes/"

JSON_MEDIA_TYPE: str = "application/json"
FORM_MEDIA_TYPE: str = "application/x-www-form-urlencoded"


@functools.lru_cache(maxsize=None)
def schema_key(qualified_name: str) -> str:
    """
    Canonical registry key for a structured or enum type.

    Examples:
        >>> schema_key("Microsoft.NAV.customer")
        'Microsoft_NAV_customer'
    """
    return qualified_name.replace(".", "_")


def schema_ref(key: str) -> Dict[str, str]:
    return {"$ref": f"{SCHEMA_REF_PREFIX}{key}"}


def parameter_ref(component_id: str) -> Dict[str, str]:
    return {"$ref": f"{PARAMETER_REF_PREFIX}{component_id}"}


def ref_target(reference: Dict[str, Any]) -> Optional[str]:
    """Return the component id a ``$ref`` object points at, or None for inline objects."""
    target: Any = reference.get("$ref")
    if not isinstance(target, str):
        return None
    return target.rsplit("/", 1)[-1]


def json_content(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a schema in a single ``application/json`` media-type map."""
    return {JSON_MEDIA_TYPE: {"schema": schema}}


def dedupe_references(references: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Drop repeated parameter objects, keeping first occurrence order.

    ``$ref`` objects are compared by target; inline objects by (name, in).
    """
    seen: set = set()
    result: List[Dict[str, Any]] = []
    for ref in references:
        identity: Any = ref_target(ref) or (ref.get("name"), ref.get("in"))
        if identity in seen:
            continue
        seen.add(identity)
        result.append(ref)
    return result


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("walk") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SCHEMA_REF_PREFIX",
    "PARAMETER_REF_PREFIX",
    "SECURITY_SCHEME_REF_PREFIX",
    "JSON_MEDIA_TYPE",
    "FORM_MEDIA_TYPE",
    "schema_key",
    "schema_ref",
    "parameter_ref",
    "ref_target",
    "json_content",
    "dedupe_references",
    "Timer",
]
