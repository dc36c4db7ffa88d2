# File: edm2openapi/document.py
"""
edm2openapi - Output Document
==============================
The accumulator for one traversal run: paths, schemas, reusable parameters
and security definitions.

Every ``add_*`` method is idempotent. Traversal branches legitimately
converge on the same artifact, so registering an existing key is a silent
no-op that reports ``False`` rather than an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from edm2openapi.diagnostics import DiagnosticLog

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.document")

HTTP_VERBS: tuple = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


@dataclass(slots=True)
class OutputDocument:
    """
    OpenAPI-shaped result of a run.

    ``paths`` keeps insertion order, which is the order the walker
    discovered them in.
    """

    title: str = "OData Service API"
    version: str = "1.0.0"
    description: str = ""
    base_url: str = ""
    openapi_version: str = "3.0.4"

    paths: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)
    schemas: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    parameters: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    security_schemes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    security: List[Dict[str, List[str]]] = field(default_factory=list)

    actions_count: int = 0
    functions_count: int = 0
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    _operation_ids: Set[str] = field(default_factory=set)

    # -- Paths --------------------------------------------------------------

    def has_path(self, path: str) -> bool:
        return path in self.paths

    def add_path(self, path: str, operations: Dict[str, Dict[str, Any]]) -> bool:
        """Register ``path`` with its verb map; no-op when already present."""
        if path in self.paths:
            logger.debug("Path already present, skipping: %s", path)
            return False
        self.paths[path] = dict(operations)
        logger.debug("Added path %s [%s]", path, ", ".join(operations))
        return True

    def add_operation(self, path: str, verb: str, operation: Dict[str, Any]) -> bool:
        """Add one verb to ``path`` (creating the path item); no-op if the verb exists."""
        verb = verb.lower()
        if verb not in HTTP_VERBS:
            raise ValueError(f"Unsupported HTTP verb '{verb}' for path '{path}'.")
        item: Dict[str, Dict[str, Any]] = self.paths.setdefault(path, {})
        if verb in item:
            return False
        item[verb] = operation
        return True

    def unique_operation_id(self, base: str) -> str:
        """Reserve ``base`` as an operationId, suffixing ``-2``, ``-3``... on collision."""
        candidate: str = base
        counter: int = 2
        while candidate in self._operation_ids:
            candidate = f"{base}-{counter}"
            counter += 1
        self._operation_ids.add(candidate)
        return candidate

    # -- Components ---------------------------------------------------------

    def has_schema(self, key: str) -> bool:
        return key in self.schemas

    def add_schema(self, key: str, schema: Dict[str, Any]) -> bool:
        if key in self.schemas:
            return False
        self.schemas[key] = schema
        return True

    def replace_schema(self, key: str, schema: Dict[str, Any]) -> None:
        """Swap a reserved placeholder for the finished schema."""
        if key not in self.schemas:
            raise KeyError(f"Schema '{key}' was never reserved.")
        self.schemas[key] = schema

    def add_parameter(self, component_id: str, definition: Dict[str, Any]) -> bool:
        if component_id in self.parameters:
            return False
        self.parameters[component_id] = definition
        return True

    def add_security_scheme(self, name: str, scheme: Dict[str, Any]) -> bool:
        if name in self.security_schemes:
            return False
        self.security_schemes[name] = scheme
        self.security.append({name: []})
        return True

    # -- Metrics ------------------------------------------------------------

    @property
    def path_count(self) -> int:
        return len(self.paths)

    @property
    def operation_count(self) -> int:
        return sum(len(item) for item in self.paths.values())

    @property
    def schema_count(self) -> int:
        return len(self.schemas)

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    # -- Rendering hand-off -------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain mapping in OpenAPI 3 layout, ready for a YAML/JSON writer.

        Empty component tables are omitted.
        """
        components: Dict[str, Any] = {}
        if self.schemas:
            components["schemas"] = dict(self.schemas)
        if self.parameters:
            components["parameters"] = dict(self.parameters)
        if self.security_schemes:
            components["securitySchemes"] = dict(self.security_schemes)

        info: Dict[str, Any] = {"title": self.title, "version": self.version}
        if self.description:
            info["description"] = self.description

        result: Dict[str, Any] = {
            "openapi": self.openapi_version,
            "info": info,
            "servers": [{"url": self.base_url}] if self.base_url else [],
            "paths": {path: dict(item) for path, item in self.paths.items()},
            "components": components,
        }
        if self.security:
            result["security"] = [dict(req) for req in self.security]
        return result

    def __repr__(self) -> str:
        return (
            f"<OutputDocument {self.path_count} paths, {self.schema_count} schemas, "
            f"{self.parameter_count} parameters>"
        )


__all__: List[str] = ["HTTP_VERBS", "OutputDocument"]
