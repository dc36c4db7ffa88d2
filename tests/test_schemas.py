"""
tests/test_schemas.py
Unit tests for edm2openapi.typemap and edm2openapi.schemas.

Tests cover:
- Primitive mapping table and the string fallback for unknown kinds
- Idempotent schema registration
- Self-referencing complex types
- Required lists (keys first, then non-nullable properties)
- Enum, collection-valued and unresolved property types
"""

from __future__ import annotations

import pytest

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.models import EdmModel, TypeRef
from edm2openapi.schemas import SchemaRegistry
from edm2openapi.typemap import is_mapped, map_primitive


@pytest.fixture()
def schema_document(diagnostics: DiagnosticLog) -> OutputDocument:
    return OutputDocument(diagnostics=diagnostics)


@pytest.fixture()
def registry(model: EdmModel, schema_document: OutputDocument, diagnostics: DiagnosticLog) -> SchemaRegistry:
    return SchemaRegistry(model, schema_document, diagnostics)


# ===========================================================================
# Type mapper
# ===========================================================================


class TestTypeMapper:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("Boolean", {"type": "boolean"}),
            ("Byte", {"type": "integer", "format": "int32"}),
            ("Int16", {"type": "integer", "format": "int32"}),
            ("Int64", {"type": "integer", "format": "int64"}),
            ("Decimal", {"type": "number", "format": "double"}),
            ("Single", {"type": "number", "format": "float"}),
            ("Date", {"type": "string", "format": "date"}),
            ("DateTimeOffset", {"type": "string", "format": "date-time"}),
            ("Duration", {"type": "string", "format": "duration"}),
            ("Guid", {"type": "string", "format": "uuid"}),
            ("Binary", {"type": "string", "format": "byte"}),
            ("Stream", {"type": "string", "format": "binary"}),
        ],
    )
    def test_table(self, kind: str, expected: dict) -> None:
        assert map_primitive(kind) == expected

    def test_string_carries_max_length(self) -> None:
        assert map_primitive("String", max_length=50) == {"type": "string", "maxLength": 50}

    def test_max_length_ignored_for_non_strings(self) -> None:
        assert map_primitive("Int32", max_length=50) == {"type": "integer", "format": "int32"}

    def test_unknown_kind_degrades_to_string(self, diagnostics: DiagnosticLog) -> None:
        schema = map_primitive("GeographyPoint", diagnostics=diagnostics)
        assert schema == {"type": "string", "description": "Unknown: GeographyPoint"}
        assert diagnostics.codes() == ["UNMAPPED_PRIMITIVE"]
        assert not diagnostics.has_errors

    def test_is_mapped(self) -> None:
        assert is_mapped("Guid")
        assert not is_mapped("GeographyPoint")
        assert not is_mapped(None)


# ===========================================================================
# Schema registry
# ===========================================================================


class TestSchemaRegistry:
    def test_register_is_idempotent(
        self, registry: SchemaRegistry, schema_document: OutputDocument, model: EdmModel
    ) -> None:
        customer = model.find_type("Microsoft.NAV.customer")
        first = registry.schema_for(customer)
        second = registry.schema_for(customer)
        assert first == second == {"$ref": "#/components/schemas/Microsoft_NAV_customer"}
        assert list(schema_document.schemas).count("Microsoft_NAV_customer") == 1

    def test_self_reference_becomes_ref(
        self, registry: SchemaRegistry, schema_document: OutputDocument, model: EdmModel
    ) -> None:
        key = registry.register(model.find_type("Microsoft.NAV.postalAddressType"))
        schema = schema_document.schemas[key]
        assert schema["properties"]["previousAddress"] == {
            "$ref": "#/components/schemas/Microsoft_NAV_postalAddressType"
        }
        assert "Recursion placeholder" not in str(schema)

    def test_mutual_reference_registers_each_once(
        self, schema_document: OutputDocument, diagnostics: DiagnosticLog
    ) -> None:
        model = EdmModel.model_validate(
            {
                "types": [
                    {"name": "A", "namespace": "T", "kind": "complex", "properties": [{"name": "b", "type": "T.B"}]},
                    {"name": "B", "namespace": "T", "kind": "complex", "properties": [{"name": "a", "type": "T.A"}]},
                ]
            }
        )
        key = SchemaRegistry(model, schema_document, diagnostics).register(model.find_type("T.A"))
        assert key == "T_A"
        assert list(schema_document.schemas) == ["T_A", "T_B"]
        assert schema_document.schemas["T_A"]["properties"]["b"] == {"$ref": "#/components/schemas/T_B"}
        assert schema_document.schemas["T_B"]["properties"]["a"] == {"$ref": "#/components/schemas/T_A"}
        assert "Recursion placeholder" not in str(schema_document.schemas)

    def test_nested_complex_type_registered(
        self, registry: SchemaRegistry, schema_document: OutputDocument, model: EdmModel
    ) -> None:
        registry.register(model.find_type("Microsoft.NAV.customer"))
        assert set(schema_document.schemas) == {
            "Microsoft_NAV_customer",
            "Microsoft_NAV_postalAddressType",
        }

    def test_required_keys_then_non_nullable(
        self, registry: SchemaRegistry, schema_document: OutputDocument, model: EdmModel
    ) -> None:
        key = registry.register(model.find_type("Microsoft.NAV.customer"))
        assert schema_document.schemas[key]["required"] == ["customerId", "displayName"]

    def test_keys_required_even_when_nullable(self, diagnostics: DiagnosticLog) -> None:
        model = EdmModel.model_validate(
            {
                "types": [
                    {
                        "name": "E",
                        "namespace": "T",
                        "key": ["id"],
                        "properties": [{"name": "id", "type": "Edm.Int32"}],
                    }
                ]
            }
        )
        document = OutputDocument()
        key = SchemaRegistry(model, document, diagnostics).register(model.find_type("T.E"))
        assert document.schemas[key]["required"] == ["id"]

    def test_complex_type_without_required(
        self, registry: SchemaRegistry, schema_document: OutputDocument, model: EdmModel
    ) -> None:
        key = registry.register(model.find_type("Microsoft.NAV.postalAddressType"))
        assert "required" not in schema_document.schemas[key]

    def test_enum_property(
        self, registry: SchemaRegistry, schema_document: OutputDocument, model: EdmModel
    ) -> None:
        key = registry.register(model.find_type("Microsoft.NAV.customer"))
        assert schema_document.schemas[key]["properties"]["blocked"] == {
            "type": "string",
            "enum": ["_x0020_", "Ship", "Invoice", "All"],
        }

    def test_string_max_length_property(
        self, registry: SchemaRegistry, schema_document: OutputDocument, model: EdmModel
    ) -> None:
        key = registry.register(model.find_type("Microsoft.NAV.customer"))
        assert schema_document.schemas[key]["properties"]["number"] == {
            "type": "string",
            "maxLength": 20,
        }

    def test_collection_valued_types(self, registry: SchemaRegistry) -> None:
        assert registry.schema_for_type_ref(TypeRef.model_validate("Collection(Edm.Int32)")) == {
            "type": "array",
            "items": {"type": "integer", "format": "int32"},
        }
        assert registry.schema_for_type_ref(
            TypeRef.model_validate("Collection(Microsoft.NAV.postalAddressType)")
        ) == {
            "type": "array",
            "items": {"$ref": "#/components/schemas/Microsoft_NAV_postalAddressType"},
        }

    def test_no_type(self, registry: SchemaRegistry) -> None:
        assert registry.schema_for_type_ref(None)["type"] == "object"

    def test_unresolved_type(self, registry: SchemaRegistry, diagnostics: DiagnosticLog) -> None:
        schema = registry.schema_for_type_ref(TypeRef(name="Other.Thing"))
        assert schema == {"type": "object", "description": "Unsupported type: Other.Thing"}
        assert diagnostics.codes() == ["UNRESOLVED_TYPE"]
