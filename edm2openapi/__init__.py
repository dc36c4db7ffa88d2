# File: edm2openapi/__init__.py
"""
edm2openapi - OData Entity Model to OpenAPI Generator
======================================================

Turns a parsed OData V4 entity data model into an OpenAPI 3 description by
walking the navigation graph from a single root collection (``companies``
by default) and emitting every reachable path, CRUD operation, bound and
unbound action/function, reusable parameter and component schema.

Architecture overview::

    ┌──────────────────┐     ┌──────────────────┐
    │ OpenApiGenerator │────▶│  PathGraphWalker │
    │  (generator.py)  │     │    (walker.py)   │
    └────────┬─────────┘     └────────┬─────────┘
             │                        │
      ┌──────┴─────┐     ┌────────────┼─────────────┬──────────────┐
      ▼            ▼     ▼            ▼             ▼              ▼
 ┌──────────┐ ┌────────┐ ┌──────────┐ ┌───────────┐ ┌────────────┐ ┌──────────┐
 │validators│ │ models │ │operations│ │ parameters│ │  schemas   │ │ security │
 └──────────┘ └────────┘ └──────────┘ └───────────┘ └─────┬──────┘ └──────────┘
                                                           ▼
                                     capabilities     typemap     document

Usage::

    from edm2openapi import OpenApiGenerator, GenerationConfig, EdmModel

    report = OpenApiGenerator().generate(model, GenerationConfig(auth_type="OAuth2.0"))
    print(report.summary())
    openapi = report.to_dict()

Public API:
    - OpenApiGenerator   - Pipeline orchestrator
    - PathGraphWalker    - Navigation graph traversal
    - EdmModel           - Entity data model
    - GenerationConfig   - Generation settings model
    - validate_model     - Advisory model validation
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from edm2openapi.models import (
    CollectionInfo,
    EdmModel,
    EntityContainer,
    EnumTypeInfo,
    GenerationConfig,
    Multiplicity,
    NavigationInfo,
    OperationImportInfo,
    OperationInfo,
    OperationKind,
    OperationParameterInfo,
    PrimitiveKind,
    PropertyInfo,
    StructuredKind,
    StructuredTypeInfo,
    TypeRef,
)
from edm2openapi.diagnostics import Diagnostic, DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.capabilities import CapabilityKind, CollectionCapabilities, resolve, resolve_all
from edm2openapi.typemap import map_primitive
from edm2openapi.validators import validate_model
from edm2openapi.walker import Ancestry, PathGraphWalker
from edm2openapi.generator import (
    GenerationReport,
    OpenApiGenerator,
    export_document,
    load_model_file,
    parse_raw_model,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestration
    "OpenApiGenerator",
    "GenerationReport",
    "PathGraphWalker",
    "Ancestry",
    "OutputDocument",
    # Models
    "CollectionInfo",
    "EdmModel",
    "EntityContainer",
    "EnumTypeInfo",
    "GenerationConfig",
    "Multiplicity",
    "NavigationInfo",
    "OperationImportInfo",
    "OperationInfo",
    "OperationKind",
    "OperationParameterInfo",
    "PrimitiveKind",
    "PropertyInfo",
    "StructuredKind",
    "StructuredTypeInfo",
    "TypeRef",
    # Diagnostics & validation
    "Diagnostic",
    "DiagnosticLog",
    "validate_model",
    # Capabilities & types
    "CapabilityKind",
    "CollectionCapabilities",
    "resolve",
    "resolve_all",
    "map_primitive",
    # IO
    "export_document",
    "load_model_file",
    "parse_raw_model",
    "setup_logging",
]
