# File: edm2openapi/models.py
"""
edm2openapi - Core Data Models
===============================
Pydantic V2 models describing the parsed entity data model (EDM) that the
engine walks, plus the ``GenerationConfig`` that steers a run.

The models are a read-only view of the entity-relationship graph handed over
by the metadata parser: structured types (entities and complex types), enum
types, navigation edges, entity sets ("collections"), bound and unbound
operations, and the entity container that ties them together.

All lookups used during traversal are O(1) dictionary hits on caches built
once by ``EdmModel`` after validation.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

EDM_NAMESPACE: str = "Edm"
COLLECTION_PREFIX: str = "Collection("


class PrimitiveKind(str, Enum):
    """EDM primitive kinds known to the type mapper."""

    BOOLEAN = "Boolean"
    BYTE = "Byte"
    SBYTE = "SByte"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    DECIMAL = "Decimal"
    DOUBLE = "Double"
    SINGLE = "Single"
    DATE = "Date"
    DATE_TIME_OFFSET = "DateTimeOffset"
    DURATION = "Duration"
    TIME_OF_DAY = "TimeOfDay"
    GUID = "Guid"
    STRING = "String"
    BINARY = "Binary"
    STREAM = "Stream"


class StructuredKind(str, Enum):
    """Entity types carry keys and live in collections; complex types do not."""

    ENTITY = "entity"
    COMPLEX = "complex"


class Multiplicity(str, Enum):
    """Target multiplicity of a navigation edge."""

    ONE = "one"
    MANY = "many"


class OperationKind(str, Enum):
    """Actions have side effects, functions must not."""

    ACTION = "action"
    FUNCTION = "function"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Type references & properties
# ---------------------------------------------------------------------------


class TypeRef(BaseModel):
    """
    A reference to a primitive, enum or structured type.

    Accepts the CSDL shorthand on input: ``"Edm.String"`` or
    ``"Collection(NS.Address)"`` are coerced into a full reference.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Qualified type name, e.g. 'Edm.Int32'.")
    nullable: bool = Field(default=True, description="Whether null is a legal value.")
    collection: bool = Field(default=False, description="Collection-valued reference.")
    max_length: Optional[int] = Field(
        default=None, ge=1, description="MaxLength facet for strings."
    )

    @model_validator(mode="before")
    @classmethod
    def _coerce_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            data = {"name": data}
        if isinstance(data, dict):
            name = data.get("name")
            if isinstance(name, str) and name.startswith(COLLECTION_PREFIX) and name.endswith(")"):
                data = dict(data)
                data["name"] = name[len(COLLECTION_PREFIX):-1]
                data["collection"] = True
        return data

    @property
    def is_primitive(self) -> bool:
        return self.name.startswith(f"{EDM_NAMESPACE}.")

    @property
    def primitive_kind(self) -> Optional[str]:
        """Kind name without the ``Edm.`` prefix, or None for non-primitives."""
        if not self.is_primitive:
            return None
        return self.name[len(EDM_NAMESPACE) + 1:]

    def element(self) -> "TypeRef":
        """The element reference of a collection (self when not a collection)."""
        if not self.collection:
            return self
        return self.model_copy(update={"collection": False})

    def __repr__(self) -> str:
        inner: str = f"Collection({self.name})" if self.collection else self.name
        return f"<TypeRef {inner}{'' if self.nullable else ' NOT NULL'}>"


class PropertyInfo(BaseModel):
    """A declared structural property of an entity or complex type."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Property name.")
    type: TypeRef = Field(..., description="Property type reference.")

    def __repr__(self) -> str:
        return f"<Property {self.name}: {self.type!r}>"


class EnumTypeInfo(BaseModel):
    """An enumeration type; members are exposed by name."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    namespace: str = Field(default="")
    members: List[str] = Field(..., min_length=1, description="Ordered member names.")

    @field_validator("members")
    @classmethod
    def _unique_members(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            dupes: List[str] = sorted({x for x in v if v.count(x) > 1})
            raise ValueError(f"Duplicate enum members detected: {dupes}")
        return v

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


# ---------------------------------------------------------------------------
# Structured types & navigation
# ---------------------------------------------------------------------------


class NavigationInfo(BaseModel):
    """A navigation edge from one structured type to another."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Navigation property name.")
    target: str = Field(..., min_length=1, description="Qualified target type name.")
    multiplicity: Multiplicity = Field(default=Multiplicity.MANY)
    partner: Optional[str] = Field(
        default=None,
        description="Name of the reverse navigation declared on the target type.",
    )

    @property
    def is_many(self) -> bool:
        return self.multiplicity == Multiplicity.MANY

    def __repr__(self) -> str:
        return f"<Navigation {self.name} ({self.multiplicity}) → {self.target}>"


class StructuredTypeInfo(BaseModel):
    """
    An entity type or complex type.

    Properties, keys and navigations declared on a base type are inherited;
    use the ``EdmModel.all_*`` helpers to see the flattened view.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    namespace: str = Field(default="")
    kind: StructuredKind = Field(default=StructuredKind.ENTITY)
    base_type: Optional[str] = Field(default=None, description="Qualified base type name.")
    properties: List[PropertyInfo] = Field(default_factory=list)
    key: List[str] = Field(default_factory=list, description="Ordered key property names.")
    navigations: List[NavigationInfo] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def is_entity(self) -> bool:
        return self.kind == StructuredKind.ENTITY

    @model_validator(mode="after")
    def _complex_types_have_no_key(self) -> "StructuredTypeInfo":
        if self.kind == StructuredKind.COMPLEX and self.key:
            raise ValueError(f"Complex type '{self.name}' must not declare key properties.")
        return self

    @model_validator(mode="after")
    def _unique_member_names(self) -> "StructuredTypeInfo":
        names: List[str] = [p.name for p in self.properties] + [n.name for n in self.navigations]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Type '{self.name}' declares duplicate members: {dupes}")
        return self

    def get_property(self, name: str) -> Optional[PropertyInfo]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def __repr__(self) -> str:
        return (
            f"<{self.kind.capitalize()}Type {self.full_name} "
            f"({len(self.properties)} props, {len(self.navigations)} navs)>"
        )


# ---------------------------------------------------------------------------
# Collections, operations, container
# ---------------------------------------------------------------------------


class CollectionInfo(BaseModel):
    """
    A named entity set.

    ``annotations`` maps a vocabulary term name to its annotation value; for
    capability restrictions the value is a record (mapping of field name to
    value).
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1, description="Qualified element type name.")
    annotations: Dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<Collection {self.name} of {self.entity_type}>"


class OperationParameterInfo(BaseModel):
    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    type: TypeRef


class OperationInfo(BaseModel):
    """
    A server-side action or function.

    When ``is_bound`` the first parameter is the binding parameter; its type
    names the entity (or collection of entities) the operation hangs off.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    namespace: str = Field(default="")
    kind: OperationKind = Field(default=OperationKind.ACTION)
    is_bound: bool = Field(default=False)
    parameters: List[OperationParameterInfo] = Field(default_factory=list)
    return_type: Optional[TypeRef] = Field(default=None)

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def is_action(self) -> bool:
        return self.kind == OperationKind.ACTION

    @property
    def binding_parameter(self) -> Optional[OperationParameterInfo]:
        if not self.is_bound or not self.parameters:
            return None
        return self.parameters[0]

    @property
    def payload_parameters(self) -> List[OperationParameterInfo]:
        """Parameters supplied by the caller (the binding one is implicit in the path)."""
        if self.is_bound:
            return self.parameters[1:]
        return list(self.parameters)

    @model_validator(mode="after")
    def _functions_return_something(self) -> "OperationInfo":
        if self.kind == OperationKind.FUNCTION and self.return_type is None:
            raise ValueError(f"Function '{self.name}' must declare a return type.")
        return self

    def __repr__(self) -> str:
        return f"<{self.kind.capitalize()} {self.full_name}{' (bound)' if self.is_bound else ''}>"


class OperationImportInfo(BaseModel):
    """Container-level import exposing an unbound operation at the service root."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    operation: str = Field(..., min_length=1, description="Qualified operation name.")


class EntityContainer(BaseModel):
    model_config = _SHARED_CONFIG

    name: str = Field(default="Container")
    collections: List[CollectionInfo] = Field(default_factory=list)
    operation_imports: List[OperationImportInfo] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_collection_names(self) -> "EntityContainer":
        names: List[str] = [c.name for c in self.collections]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate collection names: {dupes}")
        return self


# ---------------------------------------------------------------------------
# EdmModel - top-level container
# ---------------------------------------------------------------------------


class EdmModel(BaseModel):
    """
    The root model: the entire entity-relationship graph.

    Invariant: the ``_type_map`` / ``_enum_map`` / ``_operation_map`` caches
    are built once after validation and never mutated during a run.
    """

    model_config = _SHARED_CONFIG

    types: List[StructuredTypeInfo] = Field(default_factory=list)
    enum_types: List[EnumTypeInfo] = Field(default_factory=list)
    operations: List[OperationInfo] = Field(default_factory=list)
    container: Optional[EntityContainer] = Field(default=None)

    _type_map: Dict[str, StructuredTypeInfo] = {}
    _enum_map: Dict[str, EnumTypeInfo] = {}
    _operation_map: Dict[str, OperationInfo] = {}

    @model_validator(mode="after")
    def _build_lookup_maps(self) -> "EdmModel":
        self._type_map = {t.full_name: t for t in self.types}
        self._enum_map = {e.full_name: e for e in self.enum_types}
        self._operation_map = {}
        for op in self.operations:
            # Overloads share a name; the first declaration serves imports.
            self._operation_map.setdefault(op.full_name, op)
        return self

    @model_validator(mode="after")
    def _validate_unique_type_names(self) -> "EdmModel":
        names: List[str] = [t.full_name for t in self.types] + [e.full_name for e in self.enum_types]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate type names: {dupes}")
        return self

    # -- Type lookups -------------------------------------------------------

    def find_type(self, qualified_name: str) -> Optional[StructuredTypeInfo]:
        return self._type_map.get(qualified_name)

    def find_enum(self, qualified_name: str) -> Optional[EnumTypeInfo]:
        return self._enum_map.get(qualified_name)

    def find_operation(self, qualified_name: str) -> Optional[OperationInfo]:
        return self._operation_map.get(qualified_name)

    def type_chain(self, structured: StructuredTypeInfo) -> List[StructuredTypeInfo]:
        """Return ``[structured, base, base-of-base, ...]``, stopping on cycles or gaps."""
        chain: List[StructuredTypeInfo] = []
        seen: Set[str] = set()
        current: Optional[StructuredTypeInfo] = structured
        while current is not None and current.full_name not in seen:
            chain.append(current)
            seen.add(current.full_name)
            current = self.find_type(current.base_type) if current.base_type else None
        return chain

    def derives_from(self, structured: StructuredTypeInfo, qualified_name: str) -> bool:
        """True when ``structured`` is, or inherits from, ``qualified_name``."""
        return any(t.full_name == qualified_name for t in self.type_chain(structured))

    def all_properties(self, structured: StructuredTypeInfo) -> List[PropertyInfo]:
        """Declared properties including inherited ones, base type first."""
        result: List[PropertyInfo] = []
        for t in reversed(self.type_chain(structured)):
            result.extend(t.properties)
        return result

    def all_keys(self, structured: StructuredTypeInfo) -> List[str]:
        """Key names from the nearest type in the chain that declares a key."""
        for t in self.type_chain(structured):
            if t.key:
                return list(t.key)
        return []

    def all_navigations(self, structured: StructuredTypeInfo) -> List[NavigationInfo]:
        result: List[NavigationInfo] = []
        for t in reversed(self.type_chain(structured)):
            result.extend(t.navigations)
        return result

    def find_property(self, structured: StructuredTypeInfo, name: str) -> Optional[PropertyInfo]:
        for t in self.type_chain(structured):
            prop: Optional[PropertyInfo] = t.get_property(name)
            if prop is not None:
                return prop
        return None

    def navigation_declaring_type(
        self, structured: StructuredTypeInfo, navigation_name: str
    ) -> Optional[StructuredTypeInfo]:
        """The type in ``structured``'s chain that declares ``navigation_name``."""
        for t in self.type_chain(structured):
            if any(n.name == navigation_name for n in t.navigations):
                return t
        return None

    def is_logical_jump(self, navigation: NavigationInfo, owner: StructuredTypeInfo) -> bool:
        """
        A navigation is a logical jump when its partner (the reverse edge) is
        declared by a type other than ``owner``.
        """
        if navigation.partner is None:
            return False
        target: Optional[StructuredTypeInfo] = self.find_type(navigation.target)
        if target is None:
            return False
        declaring: Optional[StructuredTypeInfo] = self.navigation_declaring_type(
            target, navigation.partner
        )
        if declaring is None:
            return False
        return declaring.full_name != owner.full_name

    # -- Container lookups --------------------------------------------------

    @property
    def collections(self) -> List[CollectionInfo]:
        return list(self.container.collections) if self.container else []

    def find_collection(self, name: str) -> Optional[CollectionInfo]:
        """Exact name match first, then a case-insensitive match."""
        if self.container is None:
            return None
        for coll in self.container.collections:
            if coll.name == name:
                return coll
        lowered: str = name.lower()
        for coll in self.container.collections:
            if coll.name.lower() == lowered:
                return coll
        return None

    def collection_for_navigation(self, navigation: NavigationInfo) -> Optional[CollectionInfo]:
        """
        Resolve the collection backing a navigation: a collection named like
        the navigation, else the first collection whose element type is or
        derives from the navigation target.
        """
        if self.container is None:
            return None
        for coll in self.container.collections:
            if coll.name == navigation.name:
                return coll
        for coll in self.container.collections:
            element: Optional[StructuredTypeInfo] = self.find_type(coll.entity_type)
            if element is not None and self.derives_from(element, navigation.target):
                return coll
        return None

    def bound_operations(
        self, structured: StructuredTypeInfo, *, collection: bool
    ) -> List[OperationInfo]:
        """Operations bound to ``structured`` (single or collection binding)."""
        result: List[OperationInfo] = []
        for op in self.operations:
            binding: Optional[OperationParameterInfo] = op.binding_parameter
            if binding is None:
                continue
            if binding.type.collection != collection:
                continue
            if binding.type.name == structured.full_name:
                result.append(op)
        return result

    def __repr__(self) -> str:
        return (
            f"<EdmModel {len(self.types)} types, {len(self.enum_types)} enums, "
            f"{len(self.operations)} operations, {len(self.collections)} collections>"
        )


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Settings for one generation run.

    ``base_url`` and ``auth_type`` are the two inputs the document embeds
    verbatim; everything else has a sensible default.
    """

    model_config = _SHARED_CONFIG

    base_url: str = Field(
        default="http://localhost",
        min_length=1,
        description="Externally visible base address embedded as the server URL.",
    )
    auth_type: Optional[str] = Field(
        default=None,
        description="Authentication type token: 'OAuth2.0' or 'Basic'.",
    )
    root_collection: str = Field(
        default="companies",
        min_length=1,
        description="Name of the collection every path hangs off.",
    )
    title: str = Field(default="OData Service API", min_length=1)
    version: str = Field(default="1.0.0", min_length=1)
    description: str = Field(
        default="OpenAPI specification generated from an OData V4 entity data model."
    )
    openapi_version: str = Field(default="3.0.4")
    max_depth: int = Field(
        default=8, ge=1, le=64, description="Maximum number of entity levels descended into below the root item."
    )
    read_only_root: bool = Field(
        default=False,
        description="Expose only read operations on the root collection and item paths.",
    )
    token_scope: str = Field(
        default="https://api.businesscentral.dynamics.com/.default",
        description="Default scope advertised by the token utility path.",
    )

    @field_validator("base_url")
    @classmethod
    def _base_url_is_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got '{v}'.")
        return v.rstrip("/")


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "PrimitiveKind",
    "StructuredKind",
    "Multiplicity",
    "OperationKind",
    "TypeRef",
    "PropertyInfo",
    "EnumTypeInfo",
    "NavigationInfo",
    "StructuredTypeInfo",
    "CollectionInfo",
    "OperationParameterInfo",
    "OperationInfo",
    "OperationImportInfo",
    "EntityContainer",
    "EdmModel",
    "GenerationConfig",
]

logger.debug("edm2openapi.models loaded: %d public symbols.", len(__all__))
