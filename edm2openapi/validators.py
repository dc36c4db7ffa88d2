# File: edm2openapi/validators.py
"""
edm2openapi - Model Validators
===============================
A **pure-function validation pipeline** over the Pydantic models in
``edm2openapi.models``.

Pydantic already enforces per-object structure (non-empty names, unique
members, complex types without keys). The functions here add
**cross-reference checks**: does every type reference resolve, does every
key name a primitive property, do partners exist, is the root collection
present.

Every finding is advisory. The walker copes with each problem on its own
(skipping the affected subtree), so ``validate_model`` is run before a walk
to surface issues early; ``OpenApiGenerator(strict_validation=True)`` turns
errors into a hard failure.

Usage:
    from edm2openapi.validators import validate_model
    diagnostics = validate_model(model, config)
    print(diagnostics.format_report())
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Set

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.models import EdmModel, GenerationConfig, StructuredTypeInfo, TypeRef
from edm2openapi.typemap import is_mapped

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.validators")


def _resolves(model: EdmModel, type_ref: TypeRef) -> bool:
    if type_ref.is_primitive:
        return True
    return model.find_type(type_ref.name) is not None or model.find_enum(type_ref.name) is not None


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_type_references(model: EdmModel) -> DiagnosticLog:
    """
    Every property, navigation target, base type and operation parameter
    must name a primitive or a declared type.
    """
    result: DiagnosticLog = DiagnosticLog()

    for structured in model.types:
        owner: str = structured.full_name
        if structured.base_type and model.find_type(structured.base_type) is None:
            result.add_error(
                "UNKNOWN_BASE_TYPE",
                f"Type '{owner}' derives from unknown type '{structured.base_type}'.",
                {"type": owner, "base_type": structured.base_type},
            )
        for prop in structured.properties:
            if not _resolves(model, prop.type):
                result.add_warning(
                    "UNKNOWN_TYPE_REFERENCE",
                    f"Property '{owner}.{prop.name}' references unknown type '{prop.type.name}'.",
                    {"type": owner, "property": prop.name, "reference": prop.type.name},
                )
            elif prop.type.is_primitive and not is_mapped(prop.type.primitive_kind):
                result.add_warning(
                    "UNMAPPED_PRIMITIVE",
                    f"Property '{owner}.{prop.name}' uses unmapped primitive '{prop.type.name}'.",
                    {"type": owner, "property": prop.name, "reference": prop.type.name},
                )
        for nav in structured.navigations:
            if model.find_type(nav.target) is None:
                result.add_error(
                    "UNKNOWN_NAVIGATION_TARGET",
                    f"Navigation '{owner}/{nav.name}' targets unknown type '{nav.target}'.",
                    {"type": owner, "navigation": nav.name, "target": nav.target},
                )

    for op in model.operations:
        refs: List[TypeRef] = [p.type for p in op.parameters]
        if op.return_type is not None:
            refs.append(op.return_type)
        for ref in refs:
            if not _resolves(model, ref):
                result.add_warning(
                    "UNKNOWN_TYPE_REFERENCE",
                    f"Operation '{op.full_name}' references unknown type '{ref.name}'.",
                    {"operation": op.full_name, "reference": ref.name},
                )

    logger.debug("validate_type_references: %d issue(s).", len(result))
    return result


def validate_entity_keys(model: EdmModel) -> DiagnosticLog:
    """Entity keys must exist and resolve to single-valued mapped primitives."""
    result: DiagnosticLog = DiagnosticLog()

    for structured in model.types:
        if not structured.is_entity:
            continue
        owner: str = structured.full_name
        keys: List[str] = model.all_keys(structured)
        if not keys:
            result.add_warning(
                "MISSING_KEY",
                f"Entity type '{owner}' declares no key; it cannot be addressed by key.",
                {"type": owner},
            )
            continue
        for key_name in keys:
            prop = model.find_property(structured, key_name)
            if prop is None:
                result.add_error(
                    "UNKNOWN_KEY_PROPERTY",
                    f"Key '{key_name}' of '{owner}' is not a declared property.",
                    {"type": owner, "key": key_name},
                )
            elif prop.type.collection or not is_mapped(prop.type.primitive_kind):
                result.add_error(
                    "UNMAPPABLE_KEY",
                    f"Key '{key_name}' of '{owner}' has non-primitive type '{prop.type.name}'.",
                    {"type": owner, "key": key_name, "reference": prop.type.name},
                )

    logger.debug("validate_entity_keys: %d issue(s).", len(result))
    return result


def validate_navigations(model: EdmModel) -> DiagnosticLog:
    """Partners must be declared on the target; targets should be backed by a collection."""
    result: DiagnosticLog = DiagnosticLog()

    for structured in model.types:
        owner: str = structured.full_name
        for nav in structured.navigations:
            target: Optional[StructuredTypeInfo] = model.find_type(nav.target)
            if target is None:
                continue
            if nav.partner and model.navigation_declaring_type(target, nav.partner) is None:
                result.add_warning(
                    "UNKNOWN_PARTNER",
                    f"Partner '{nav.partner}' of '{owner}/{nav.name}' is not declared on '{nav.target}'.",
                    {"type": owner, "navigation": nav.name, "partner": nav.partner},
                )
            if structured.is_entity and model.collection_for_navigation(nav) is None:
                result.add_info(
                    "UNBACKED_NAVIGATION",
                    f"No collection backs '{owner}/{nav.name}'; it will not produce paths.",
                    {"type": owner, "navigation": nav.name},
                )

    logger.debug("validate_navigations: %d issue(s).", len(result))
    return result


def validate_collections(model: EdmModel) -> DiagnosticLog:
    """Collections must hold declared entity types."""
    result: DiagnosticLog = DiagnosticLog()

    for coll in model.collections:
        element: Optional[StructuredTypeInfo] = model.find_type(coll.entity_type)
        if element is None:
            result.add_error(
                "UNKNOWN_COLLECTION_TYPE",
                f"Collection '{coll.name}' holds unknown type '{coll.entity_type}'.",
                {"collection": coll.name, "entity_type": coll.entity_type},
            )
        elif not element.is_entity:
            result.add_error(
                "COLLECTION_NOT_ENTITY",
                f"Collection '{coll.name}' holds complex type '{coll.entity_type}'.",
                {"collection": coll.name, "entity_type": coll.entity_type},
            )

    logger.debug("validate_collections: %d issue(s).", len(result))
    return result


def validate_operations(model: EdmModel) -> DiagnosticLog:
    """Bound operations need a binding parameter; imports must reference unbound operations."""
    result: DiagnosticLog = DiagnosticLog()

    for op in model.operations:
        if op.is_bound and op.binding_parameter is None:
            result.add_error(
                "MISSING_BINDING_PARAMETER",
                f"Bound operation '{op.full_name}' declares no parameters.",
                {"operation": op.full_name},
            )

    if model.container is not None:
        for imp in model.container.operation_imports:
            target = model.find_operation(imp.operation)
            if target is None:
                result.add_error(
                    "UNKNOWN_OPERATION_IMPORT",
                    f"Import '{imp.name}' references unknown operation '{imp.operation}'.",
                    {"import": imp.name, "operation": imp.operation},
                )
            elif target.is_bound:
                result.add_error(
                    "BOUND_OPERATION_IMPORT",
                    f"Import '{imp.name}' references bound operation '{imp.operation}'.",
                    {"import": imp.name, "operation": imp.operation},
                )

    logger.debug("validate_operations: %d issue(s).", len(result))
    return result


def validate_inheritance(model: EdmModel) -> DiagnosticLog:
    """
    Detect base-type cycles by following each chain until it ends or
    repeats.
    """
    result: DiagnosticLog = DiagnosticLog()
    reported: Set[str] = set()

    for structured in model.types:
        chain: List[str] = []
        current: Optional[StructuredTypeInfo] = structured
        while current is not None and current.full_name not in chain:
            chain.append(current.full_name)
            current = model.find_type(current.base_type) if current.base_type else None
        if current is None:
            continue
        cycle: List[str] = chain[chain.index(current.full_name):]
        if frozenset(cycle) & reported:
            continue
        reported.update(cycle)
        result.add_error(
            "CIRCULAR_INHERITANCE",
            f"Circular base-type chain: {' -> '.join(cycle + [current.full_name])}.",
            {"cycle": cycle},
        )

    logger.debug("validate_inheritance: %d issue(s).", len(result))
    return result


def validate_root_collection(model: EdmModel, config: GenerationConfig) -> DiagnosticLog:
    """The configured root collection must exist and be keyed."""
    result: DiagnosticLog = DiagnosticLog()

    if model.container is None:
        result.add_error("MISSING_CONTAINER", "The model has no entity container.")
        return result

    root = model.find_collection(config.root_collection)
    if root is None:
        result.add_error(
            "MISSING_ROOT_COLLECTION",
            f"Root collection '{config.root_collection}' is not declared.",
            {"root_collection": config.root_collection},
        )
    elif root.name != config.root_collection:
        result.add_info(
            "ROOT_COLLECTION_CASE",
            f"Root collection matched case-insensitively as '{root.name}'.",
            {"root_collection": config.root_collection, "matched": root.name},
        )
    return result


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

ValidatorFn = Callable[[EdmModel], DiagnosticLog]


def validate_model(model: EdmModel, config: Optional[GenerationConfig] = None) -> DiagnosticLog:
    """
    **Master validation entry point.**

    Runs every model-level validator plus the root-collection check for
    ``config`` and returns the merged findings.
    """
    config = config or GenerationConfig()
    logger.info("Starting model validation: %r", model)

    result: DiagnosticLog = DiagnosticLog()
    validators: List[ValidatorFn] = [
        validate_type_references,
        validate_entity_keys,
        validate_navigations,
        validate_collections,
        validate_operations,
        validate_inheritance,
    ]
    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(model))
    result.merge(validate_root_collection(model, config))

    counts: Dict[str, int] = {"errors": len(result.errors), "warnings": len(result.warnings)}
    if counts["errors"]:
        logger.warning("Validation found %d error(s). %s", counts["errors"], result.summary())
    else:
        logger.info("Validation PASSED. %s", result.summary())
    return result


__all__: List[str] = [
    "validate_type_references",
    "validate_entity_keys",
    "validate_navigations",
    "validate_collections",
    "validate_operations",
    "validate_inheritance",
    "validate_root_collection",
    "validate_model",
]
