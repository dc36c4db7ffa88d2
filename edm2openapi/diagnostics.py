# File: edm2openapi/diagnostics.py
"""
edm2openapi - Diagnostics
==========================
Advisory findings collected while validating a model and walking it.

Nothing the engine reports here aborts a run except entries raised at the
``fatal`` level (missing root collection, missing entity container); the
generator uses those to decide the overall verdict.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.diagnostics")

_LOG_LEVELS: Dict[str, int] = {
    "fatal": logging.ERROR,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


class Diagnostic:
    """Lightweight finding descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "fatal" | "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_fatal(self) -> bool:
        return self.level == "fatal"

    @property
    def is_error(self) -> bool:
        return self.level in ("fatal", "error")

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class DiagnosticLog:
    """
    Accumulates ``Diagnostic`` instances in insertion order.

    Every entry is also forwarded to the ``edm2openapi.diagnostics`` logger
    at the matching level.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    # -- Mutation -----------------------------------------------------------

    def _add(self, level: str, code: str, message: str, context: Optional[Dict[str, Any]]) -> None:
        item: Diagnostic = Diagnostic(level, code, message, context)
        self._items.append(item)
        logger.log(_LOG_LEVELS[level], "%s: %s", code, message)

    def add_fatal(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._add("fatal", code, message, context)

    def add_error(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._add("error", code, message, context)

    def add_warning(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._add("warning", code, message, context)

    def add_info(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._add("info", code, message, context)

    def merge(self, other: "DiagnosticLog") -> None:
        """Append another log's entries without re-logging them."""
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def fatals(self) -> List[Diagnostic]:
        return [d for d in self._items if d.is_fatal]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self._items if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self._items if d.is_warning]

    @property
    def all_items(self) -> List[Diagnostic]:
        return list(self._items)

    @property
    def has_fatal(self) -> bool:
        return any(d.is_fatal for d in self._items)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(d.is_warning for d in self._items)

    def codes(self) -> List[str]:
        return [d.code for d in self._items]

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self._items if d.code == code]

    def summary(self) -> str:
        return (
            f"Diagnostics: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<DiagnosticLog {self.summary()}>"

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "fatal": "✗✗",
                "error": "✗",
                "warning": "⚠",
                "info": "ℹ",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


__all__: List[str] = ["Diagnostic", "DiagnosticLog"]
