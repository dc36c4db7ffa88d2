# File: edm2openapi/walker.py
"""
edm2openapi - Path Graph Walker
================================
The traversal that discovers every path of the API description.

Starting from the root collection's item path (``/companies({companyId})``)
the walker performs a depth-first walk of the navigation graph:

    for each navigation of the current element type:
        many  → ``{base}/{nav}`` + ``{base}/{nav}({key})``, then descend
        one   → ``{base}/{nav}`` read-only, no descent

Termination over cyclic graphs rests on the ``Ancestry`` carried down each
branch by value: a path string or collection already on the chain is never
entered again, and descent stops at ``GenerationConfig.max_depth``. Sibling
branches never see each other's ancestry, so the same collection reached
from two parents yields two nested path families (paths are additive).

All run state (document, registries, caches) lives in a ``_Run`` created
per ``walk()`` call; the walker instance itself is never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from edm2openapi.capabilities import CollectionCapabilities, resolve_all
from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.models import (
    CollectionInfo,
    EdmModel,
    GenerationConfig,
    NavigationInfo,
    OperationInfo,
    StructuredTypeInfo,
)
from edm2openapi.operations import OperationSynthesizer
from edm2openapi.parameters import (
    ROOT_ID_PARAMETER_ID,
    KeySegment,
    ParameterRegistry,
    build_key_segment,
)
from edm2openapi.schemas import SchemaRegistry
from edm2openapi.security import configure_security
from edm2openapi.utils import dedupe_references

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.walker")

_READ_ONLY: CollectionCapabilities = CollectionCapabilities(
    insertable=False, updatable=False, deletable=False
)


# ---------------------------------------------------------------------------
# Traversal state
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Ancestry:
    """
    Immutable record of the current branch: visited path strings
    (case-insensitive) and the chain of collection names from the root.
    """

    paths: FrozenSet[str] = frozenset()
    collections: Tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.collections)

    def has_path(self, path: str) -> bool:
        return path.lower() in self.paths

    def has_collection(self, name: str) -> bool:
        return name in self.collections

    def extend(self, path: str, collection_name: str) -> "Ancestry":
        return Ancestry(
            paths=self.paths | {path.lower()},
            collections=self.collections + (collection_name,),
        )


@dataclass(slots=True)
class _Run:
    """Everything one ``walk()`` call mutates."""

    document: OutputDocument
    diagnostics: DiagnosticLog
    schemas: SchemaRegistry
    parameters: ParameterRegistry
    operations: OperationSynthesizer
    key_segments: Dict[Tuple[str, str], Optional[KeySegment]] = field(default_factory=dict)
    root_key: Optional[Tuple[str, str, List[Dict[str, Any]]]] = None
    emitted_operations: Set[str] = field(default_factory=set)
    reported: Set[Tuple[str, str]] = field(default_factory=set)

    def warn_once(self, code: str, subject: str, message: str, context: Dict[str, Any]) -> None:
        if (code, subject) in self.reported:
            return
        self.reported.add((code, subject))
        self.diagnostics.add_warning(code, message, context)


# ---------------------------------------------------------------------------
# Walker
# ---------------------------------------------------------------------------


class PathGraphWalker:
    """
    Generates an ``OutputDocument`` from an ``EdmModel``.

    Usage::

        walker = PathGraphWalker(model, GenerationConfig(auth_type="OAuth2.0"))
        document = walker.walk()
        document.to_dict()

    ``walk()`` may be called any number of times; runs share nothing.
    """

    def __init__(self, model: EdmModel, config: Optional[GenerationConfig] = None) -> None:
        self._model: EdmModel = model
        self._config: GenerationConfig = config or GenerationConfig()

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def walk(self, diagnostics: Optional[DiagnosticLog] = None) -> OutputDocument:
        """
        Run one traversal.

        Never raises for model problems. A missing entity container or root
        collection is recorded as a fatal diagnostic and the partial document
        (security section only) is returned.
        """
        run: _Run = self._new_run(diagnostics if diagnostics is not None else DiagnosticLog())
        config: GenerationConfig = self._config

        configure_security(
            run.document, config.auth_type, run.diagnostics, token_scope=config.token_scope
        )

        if self._model.container is None:
            run.diagnostics.add_fatal(
                "MISSING_CONTAINER", "Entity container not found in the model."
            )
            return run.document

        root: Optional[CollectionInfo] = self._model.find_collection(config.root_collection)
        root_type: Optional[StructuredTypeInfo] = (
            self._model.find_type(root.entity_type) if root is not None else None
        )
        if root is None or root_type is None:
            run.diagnostics.add_fatal(
                "MISSING_ROOT_COLLECTION",
                f"Root collection '{config.root_collection}' not found or has no entity type.",
                {"root_collection": config.root_collection},
            )
            return run.document
        logger.info("Identified root collection: '%s'", root.name)

        run.parameters.register_if_match()
        self._add_unbound_operations(run)

        root_entry: Optional[Tuple[str, List[Dict[str, Any]]]] = self._add_root_paths(
            run, root, root_type
        )
        if root_entry is not None:
            item_path, root_params = root_entry
            logger.info("Starting recursive path generation from %s", item_path)
            self._visit(run, root, root_type, item_path, root_params, Ancestry())

        self._report_unreachable_operations(run)
        logger.info(
            "Path generation complete: %d paths, %d schemas, %d parameters.",
            run.document.path_count,
            run.document.schema_count,
            run.document.parameter_count,
        )
        return run.document

    # -----------------------------------------------------------------
    # Run setup
    # -----------------------------------------------------------------

    def _new_run(self, diagnostics: DiagnosticLog) -> _Run:
        config: GenerationConfig = self._config
        document: OutputDocument = OutputDocument(
            title=config.title,
            version=config.version,
            description=config.description,
            base_url=config.base_url,
            openapi_version=config.openapi_version,
            diagnostics=diagnostics,
        )
        schemas: SchemaRegistry = SchemaRegistry(self._model, document, diagnostics)
        parameters: ParameterRegistry = ParameterRegistry(document)
        return _Run(
            document=document,
            diagnostics=diagnostics,
            schemas=schemas,
            parameters=parameters,
            operations=OperationSynthesizer(document, schemas, parameters),
        )

    def _key_segment(
        self, run: _Run, entity_type: StructuredTypeInfo, collection: CollectionInfo
    ) -> Optional[KeySegment]:
        cache_key: Tuple[str, str] = (entity_type.full_name, collection.name)
        if cache_key not in run.key_segments:
            run.key_segments[cache_key] = build_key_segment(
                self._model, entity_type, collection.name, run.diagnostics
            )
        return run.key_segments[cache_key]

    # -----------------------------------------------------------------
    # Root
    # -----------------------------------------------------------------

    def _add_root_paths(
        self, run: _Run, root: CollectionInfo, root_type: StructuredTypeInfo
    ) -> Optional[Tuple[str, List[Dict[str, Any]]]]:
        """Add ``/{root}`` and ``/{root}({key})``; return the item path and its parameters."""
        key: Optional[KeySegment] = self._key_segment(run, root_type, root)
        if key is None:
            return None

        if len(key.parameters) == 1:
            root_params: List[Dict[str, Any]] = [
                run.parameters.ref(
                    run.parameters.register_shared(
                        ROOT_ID_PARAMETER_ID, key.parameters[0].definition
                    )
                )
            ]
        else:
            root_params = key.register(run.parameters)

        capabilities: CollectionCapabilities = (
            _READ_ONLY if self._config.read_only_root else resolve_all(root)
        )
        schema_key: str = run.schemas.register(root_type)

        collection_path: str = f"/{root.name}"
        run.document.add_path(
            collection_path,
            run.operations.collection_operations(
                root,
                schema_key,
                op_id_root=root.name,
                summary_suffix=f"list of {root.name}",
                base_params=[],
                capabilities=capabilities,
            ),
        )
        self._add_bound_operations(run, root_type, collection_path, [], collection_context=True)

        item_path: str = f"{collection_path}{key.segment}"
        run.root_key = (root.name, key.segment, root_params)
        run.document.add_path(
            item_path,
            run.operations.item_operations(
                root,
                schema_key,
                op_id_root=f"{root.name}ById",
                summary_suffix=f"single {root.name} entry by key",
                base_params=[],
                key_params=root_params,
                capabilities=capabilities,
            ),
        )
        logger.info("Added root paths: %s, %s", collection_path, item_path)
        return item_path, root_params

    # -----------------------------------------------------------------
    # Recursive traversal
    # -----------------------------------------------------------------

    def _visit(
        self,
        run: _Run,
        collection: CollectionInfo,
        element_type: StructuredTypeInfo,
        base_path: str,
        inherited: List[Dict[str, Any]],
        ancestry: Ancestry,
    ) -> None:
        if ancestry.has_path(base_path):
            logger.debug("Cycle guard: %s already on this branch", base_path)
            return
        ancestry = ancestry.extend(base_path, collection.name)
        logger.debug(
            "%sProcessing entity '%s' at path '%s'",
            "  " * (ancestry.depth - 1),
            collection.name,
            base_path,
        )

        self._add_bound_operations(run, element_type, base_path, inherited, collection_context=False)

        for navigation in self._model.all_navigations(element_type):
            self._follow(run, collection, element_type, navigation, base_path, inherited, ancestry)

    def _follow(
        self,
        run: _Run,
        parent: CollectionInfo,
        parent_type: StructuredTypeInfo,
        navigation: NavigationInfo,
        base_path: str,
        inherited: List[Dict[str, Any]],
        ancestry: Ancestry,
    ) -> None:
        subject: str = f"{parent_type.full_name}/{navigation.name}"
        target_type: Optional[StructuredTypeInfo] = self._model.find_type(navigation.target)
        if target_type is None:
            run.warn_once(
                "UNRESOLVED_NAVIGATION_TYPE",
                subject,
                f"Navigation '{subject}' targets unknown type '{navigation.target}'.",
                {"navigation": subject, "target": navigation.target},
            )
            return

        child: Optional[CollectionInfo] = self._model.collection_for_navigation(navigation)
        if child is None:
            run.warn_once(
                "UNRESOLVED_NAVIGATION_TARGET",
                subject,
                f"No collection backs navigation '{subject}'; subtree skipped.",
                {"navigation": subject, "target": navigation.target},
            )
            return

        if navigation.is_many:
            self._add_nested_collection(
                run, parent, parent_type, navigation, target_type, child, base_path, inherited, ancestry
            )
        else:
            self._add_related_item(run, parent, navigation, target_type, base_path, inherited)

    def _add_nested_collection(
        self,
        run: _Run,
        parent: CollectionInfo,
        parent_type: StructuredTypeInfo,
        navigation: NavigationInfo,
        target_type: StructuredTypeInfo,
        child: CollectionInfo,
        base_path: str,
        inherited: List[Dict[str, Any]],
        ancestry: Ancestry,
    ) -> None:
        child_type: StructuredTypeInfo = self._model.find_type(child.entity_type) or target_type
        key: Optional[KeySegment] = self._key_segment(run, child_type, child)
        if key is None:
            return

        schema_key: str = run.schemas.register(target_type)
        capabilities: CollectionCapabilities = resolve_all(child)

        collection_path: str = f"{base_path}/{navigation.name}"
        if not run.document.has_path(collection_path):
            run.document.add_path(
                collection_path,
                run.operations.collection_operations(
                    child,
                    schema_key,
                    op_id_root=f"{child.name}-from-{parent.name}",
                    summary_suffix=f"under {parent.name}",
                    base_params=inherited,
                    capabilities=capabilities,
                ),
            )
        self._add_bound_operations(run, child_type, collection_path, inherited, collection_context=True)

        segment, key_refs = self._scoped_key(run, child, key, inherited)
        next_params: List[Dict[str, Any]] = dedupe_references(inherited + key_refs)
        item_path: str = f"{collection_path}{segment}"
        if not run.document.has_path(item_path):
            run.document.add_path(
                item_path,
                run.operations.item_operations(
                    child,
                    schema_key,
                    op_id_root=f"{child.name}ByKey-from-{parent.name}",
                    summary_suffix=f"by key, under {parent.name}",
                    base_params=[],
                    key_params=next_params,
                    capabilities=capabilities,
                ),
            )

        if self._model.is_logical_jump(navigation, parent_type):
            logger.debug("Logical jump %s/%s: not descending", parent.name, navigation.name)
            return
        if ancestry.has_collection(child.name):
            logger.debug("Collection '%s' already on this branch: not descending", child.name)
            return
        if ancestry.depth > self._config.max_depth:
            logger.debug("Depth limit %d reached at %s", self._config.max_depth, item_path)
            return

        self._visit(run, child, child_type, item_path, next_params, ancestry)

    @staticmethod
    def _scoped_key(
        run: _Run, child: CollectionInfo, key: KeySegment, inherited: List[Dict[str, Any]]
    ) -> Tuple[str, List[Dict[str, Any]]]:
        """Key segment text and parameter refs for ``child`` below ``inherited``."""
        if run.root_key is not None and run.root_key[0] == child.name:
            # the root collection keeps its own placeholders and refs
            return run.root_key[1], list(run.root_key[2])
        scoped: KeySegment = key.scoped(run.parameters, inherited, child.name)
        return scoped.segment, scoped.register(run.parameters)

    def _add_related_item(
        self,
        run: _Run,
        parent: CollectionInfo,
        navigation: NavigationInfo,
        target_type: StructuredTypeInfo,
        base_path: str,
        inherited: List[Dict[str, Any]],
    ) -> None:
        path: str = f"{base_path}/{navigation.name}"
        if run.document.has_path(path):
            return
        schema_key: str = run.schemas.register(target_type)
        run.document.add_path(
            path,
            run.operations.related_item_operations(
                parent, navigation, schema_key, target_type.name, inherited
            ),
        )

    # -----------------------------------------------------------------
    # Callables
    # -----------------------------------------------------------------

    def _add_bound_operations(
        self,
        run: _Run,
        entity_type: StructuredTypeInfo,
        base_path: str,
        inherited: List[Dict[str, Any]],
        *,
        collection_context: bool,
    ) -> None:
        for operation in self._model.bound_operations(entity_type, collection=collection_context):
            path: str = f"{base_path}/{operation.full_name}"
            if run.document.has_path(path):
                continue
            run.document.add_path(path, run.operations.callable_operations(operation, inherited))
            run.emitted_operations.add(operation.full_name)
            logger.debug("Added bound operation: %s", path)

    def _add_unbound_operations(self, run: _Run) -> None:
        container = self._model.container
        if container is None:
            return
        for operation_import in container.operation_imports:
            operation: Optional[OperationInfo] = self._model.find_operation(
                operation_import.operation
            )
            if operation is None or operation.is_bound:
                run.warn_once(
                    "UNRESOLVED_OPERATION_IMPORT",
                    operation_import.name,
                    f"Operation import '{operation_import.name}' does not reference "
                    f"an unbound operation ('{operation_import.operation}').",
                    {"import": operation_import.name, "operation": operation_import.operation},
                )
                continue

            path: str = f"/{operation_import.name}"
            for verb, op in run.operations.callable_operations(operation, []).items():
                run.document.add_operation(path, verb, op)
            run.emitted_operations.add(operation.full_name)
            logger.info("Added unbound operation: %s", path)

    def _report_unreachable_operations(self, run: _Run) -> None:
        for operation in self._model.operations:
            if not operation.is_bound or operation.full_name in run.emitted_operations:
                continue
            if operation.binding_parameter is None:
                message: str = f"Bound operation '{operation.full_name}' has no binding parameter."
            else:
                message = (
                    f"Bound operation '{operation.full_name}' is bound to "
                    f"'{operation.binding_parameter.type.name}', which no generated path exposes."
                )
            run.warn_once(
                "UNREACHABLE_BOUND_OPERATION",
                operation.full_name,
                message,
                {"operation": operation.full_name},
            )


__all__: List[str] = ["Ancestry", "PathGraphWalker"]
