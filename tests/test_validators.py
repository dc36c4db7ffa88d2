"""
tests/test_validators.py
Unit tests for edm2openapi.validators.

Tests cover:
- A clean model produces no errors or warnings
- Unresolved type, base type and navigation target references
- Entity keys (missing, undeclared, non-primitive)
- Partner and collection-backing checks on navigations
- Collections, operations and operation imports
- Circular inheritance detection
- Root collection lookup (exact, case-insensitive, missing)
"""

from __future__ import annotations

from typing import Any, Dict

from edm2openapi.models import EdmModel, GenerationConfig
from edm2openapi.validators import (
    validate_collections,
    validate_entity_keys,
    validate_inheritance,
    validate_model,
    validate_navigations,
    validate_operations,
    validate_root_collection,
    validate_type_references,
)


def _types(model_dict: Dict[str, Any], name: str) -> Dict[str, Any]:
    return next(t for t in model_dict["types"] if t["name"] == name)


# ===========================================================================
# Full pipeline
# ===========================================================================


class TestValidateModel:
    def test_fixture_model_is_clean(self, model: EdmModel) -> None:
        result = validate_model(model)
        assert not result.has_errors
        assert not result.has_warnings

    def test_findings_are_merged(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "customer")["navigations"].append({"name": "ghost", "target": "Microsoft.NAV.ghost"})
        model_dict["container"]["operation_imports"].append({"name": "Nope", "operation": "Microsoft.NAV.nope"})
        result = validate_model(EdmModel.model_validate(model_dict), GenerationConfig(root_collection="tenants"))
        assert {"UNKNOWN_NAVIGATION_TARGET", "UNKNOWN_OPERATION_IMPORT", "MISSING_ROOT_COLLECTION"} <= set(
            result.codes()
        )


# ===========================================================================
# Type references
# ===========================================================================


class TestTypeReferences:
    def test_unknown_property_type(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "item")["properties"].append({"name": "vendor", "type": "Microsoft.NAV.vendor"})
        result = validate_type_references(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNKNOWN_TYPE_REFERENCE"]
        assert not result.has_errors

    def test_unmapped_primitive(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "item")["properties"].append({"name": "location", "type": "Edm.GeographyPoint"})
        result = validate_type_references(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNMAPPED_PRIMITIVE"]

    def test_unknown_base_type(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "item")["base_type"] = "Microsoft.NAV.product"
        result = validate_type_references(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNKNOWN_BASE_TYPE"]
        assert result.has_errors

    def test_unknown_operation_type(self, model_dict: Dict[str, Any]) -> None:
        model_dict["operations"][3]["return_type"] = "Microsoft.NAV.pong"
        result = validate_type_references(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNKNOWN_TYPE_REFERENCE"]
        assert result.all_items[0].context["operation"] == "Microsoft.NAV.ping"


# ===========================================================================
# Keys
# ===========================================================================


class TestEntityKeys:
    def test_missing_key_is_a_warning(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "currency")["key"] = []
        result = validate_entity_keys(EdmModel.model_validate(model_dict))
        assert result.codes() == ["MISSING_KEY"]
        assert not result.has_errors

    def test_undeclared_key_property(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "currency")["key"] = ["code", "isoCode"]
        result = validate_entity_keys(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNKNOWN_KEY_PROPERTY"]
        assert result.all_items[0].context["key"] == "isoCode"

    def test_non_primitive_key(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "customer")["key"] = ["address"]
        result = validate_entity_keys(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNMAPPABLE_KEY"]

    def test_complex_types_are_not_checked(self, model: EdmModel) -> None:
        assert len(validate_entity_keys(model)) == 0


# ===========================================================================
# Navigations and collections
# ===========================================================================


class TestNavigations:
    def test_unknown_partner(self, model_dict: Dict[str, Any]) -> None:
        _types(model_dict, "company")["navigations"][0]["partner"] = "company"
        result = validate_navigations(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNKNOWN_PARTNER"]

    def test_unbacked_navigation_is_info(self, model_dict: Dict[str, Any]) -> None:
        model_dict["container"]["collections"] = [
            c for c in model_dict["container"]["collections"] if c["name"] != "items"
        ]
        result = validate_navigations(EdmModel.model_validate(model_dict))
        assert result.codes() == ["UNBACKED_NAVIGATION"]
        assert not result.has_warnings


class TestCollections:
    def test_unknown_collection_type(self, model_dict: Dict[str, Any]) -> None:
        model_dict["container"]["collections"].append({"name": "vendors", "entity_type": "Microsoft.NAV.vendor"})
        assert validate_collections(EdmModel.model_validate(model_dict)).codes() == ["UNKNOWN_COLLECTION_TYPE"]

    def test_collection_of_complex_type(self, model_dict: Dict[str, Any]) -> None:
        model_dict["container"]["collections"].append(
            {"name": "addresses", "entity_type": "Microsoft.NAV.postalAddressType"}
        )
        assert validate_collections(EdmModel.model_validate(model_dict)).codes() == ["COLLECTION_NOT_ENTITY"]


# ===========================================================================
# Operations
# ===========================================================================


class TestOperations:
    def test_bound_without_parameters(self, model_dict: Dict[str, Any]) -> None:
        model_dict["operations"].append({"name": "orphan", "namespace": "Microsoft.NAV", "is_bound": True})
        assert validate_operations(EdmModel.model_validate(model_dict)).codes() == ["MISSING_BINDING_PARAMETER"]

    def test_import_of_bound_operation(self, model_dict: Dict[str, Any]) -> None:
        model_dict["container"]["operation_imports"].append(
            {"name": "Reset", "operation": "Microsoft.NAV.resetCache"}
        )
        assert validate_operations(EdmModel.model_validate(model_dict)).codes() == ["BOUND_OPERATION_IMPORT"]

    def test_import_of_unknown_operation(self, model_dict: Dict[str, Any]) -> None:
        model_dict["container"]["operation_imports"][0]["operation"] = "Microsoft.NAV.pong"
        assert validate_operations(EdmModel.model_validate(model_dict)).codes() == ["UNKNOWN_OPERATION_IMPORT"]


# ===========================================================================
# Inheritance
# ===========================================================================


class TestInheritance:
    def test_cycle_reported_once(self) -> None:
        model = EdmModel.model_validate(
            {
                "types": [
                    {"name": "A", "namespace": "T", "base_type": "T.B"},
                    {"name": "B", "namespace": "T", "base_type": "T.C"},
                    {"name": "C", "namespace": "T", "base_type": "T.A"},
                    {"name": "D", "namespace": "T", "base_type": "T.A"},
                ]
            }
        )
        result = validate_inheritance(model)
        assert result.codes() == ["CIRCULAR_INHERITANCE"]
        assert set(result.all_items[0].context["cycle"]) == {"T.A", "T.B", "T.C"}

    def test_linear_chain(self) -> None:
        model = EdmModel.model_validate(
            {
                "types": [
                    {"name": "A", "namespace": "T"},
                    {"name": "B", "namespace": "T", "base_type": "T.A"},
                ]
            }
        )
        assert len(validate_inheritance(model)) == 0


# ===========================================================================
# Root collection
# ===========================================================================


class TestRootCollection:
    def test_exact_match(self, model: EdmModel) -> None:
        assert len(validate_root_collection(model, GenerationConfig())) == 0

    def test_case_insensitive_match(self, model: EdmModel) -> None:
        result = validate_root_collection(model, GenerationConfig(root_collection="Companies"))
        assert result.codes() == ["ROOT_COLLECTION_CASE"]
        assert not result.has_errors

    def test_missing_root(self, model: EdmModel) -> None:
        result = validate_root_collection(model, GenerationConfig(root_collection="tenants"))
        assert result.codes() == ["MISSING_ROOT_COLLECTION"]

    def test_missing_container(self) -> None:
        model = EdmModel.model_validate({"types": []})
        assert validate_root_collection(model, GenerationConfig()).codes() == ["MISSING_CONTAINER"]
