"""
tests/test_models.py
Unit tests for edm2openapi.models: parsing shorthands, structural
validation and the lookup helpers the walker relies on.
"""

from __future__ import annotations

from typing import Any, Dict

import pytest
from pydantic import ValidationError

from edm2openapi.models import (
    EdmModel,
    GenerationConfig,
    NavigationInfo,
    StructuredTypeInfo,
    TypeRef,
)


# ===========================================================================
# TypeRef
# ===========================================================================


class TestTypeRef:
    def test_string_shorthand(self) -> None:
        ref = TypeRef.model_validate("Edm.String")
        assert ref.name == "Edm.String"
        assert ref.nullable is True
        assert ref.collection is False

    def test_collection_shorthand(self) -> None:
        ref = TypeRef.model_validate("Collection(NS.Address)")
        assert ref.name == "NS.Address"
        assert ref.collection is True
        assert ref.element().collection is False

    def test_primitive_kind(self) -> None:
        assert TypeRef(name="Edm.Guid").primitive_kind == "Guid"
        assert TypeRef(name="NS.customer").primitive_kind is None

    def test_invalid_max_length(self) -> None:
        with pytest.raises(ValidationError):
            TypeRef(name="Edm.String", max_length=0)


# ===========================================================================
# Structured types
# ===========================================================================


class TestStructuredTypes:
    def test_complex_type_rejects_key(self) -> None:
        with pytest.raises(ValidationError):
            StructuredTypeInfo(name="Address", kind="complex", key=["id"])

    def test_duplicate_member_names_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StructuredTypeInfo(
                name="X",
                properties=[{"name": "a", "type": "Edm.String"}],
                navigations=[{"name": "a", "target": "NS.Y"}],
            )

    def test_function_requires_return_type(self, model_dict: Dict[str, Any]) -> None:
        model_dict["operations"].append({"name": "f", "kind": "function"})
        with pytest.raises(ValidationError):
            EdmModel.model_validate(model_dict)

    def test_duplicate_collection_names_rejected(self, model_dict: Dict[str, Any]) -> None:
        model_dict["container"]["collections"].append(
            {"name": "companies", "entity_type": "Microsoft.NAV.company"}
        )
        with pytest.raises(ValidationError):
            EdmModel.model_validate(model_dict)


# ===========================================================================
# EdmModel lookups
# ===========================================================================


class TestEdmModelLookups:
    def test_find_type(self, model: EdmModel) -> None:
        assert model.find_type("Microsoft.NAV.customer").name == "customer"
        assert model.find_type("customer") is None

    def test_inheritance_flattening(self) -> None:
        model = EdmModel.model_validate(
            {
                "types": [
                    {
                        "name": "Base",
                        "namespace": "T",
                        "key": ["id"],
                        "properties": [{"name": "id", "type": "Edm.Int32"}],
                        "navigations": [{"name": "owner", "target": "T.Base", "multiplicity": "one"}],
                    },
                    {
                        "name": "Derived",
                        "namespace": "T",
                        "base_type": "T.Base",
                        "properties": [{"name": "extra", "type": "Edm.String"}],
                    },
                ]
            }
        )
        derived = model.find_type("T.Derived")
        assert [p.name for p in model.all_properties(derived)] == ["id", "extra"]
        assert model.all_keys(derived) == ["id"]
        assert [n.name for n in model.all_navigations(derived)] == ["owner"]
        assert model.derives_from(derived, "T.Base")

    def test_type_chain_stops_on_cycle(self) -> None:
        model = EdmModel.model_validate(
            {
                "types": [
                    {"name": "A", "namespace": "T", "base_type": "T.B"},
                    {"name": "B", "namespace": "T", "base_type": "T.A"},
                ]
            }
        )
        chain = model.type_chain(model.find_type("T.A"))
        assert [t.name for t in chain] == ["A", "B"]

    def test_find_collection_case_insensitive(self, model: EdmModel) -> None:
        assert model.find_collection("COMPANIES").name == "companies"
        assert model.find_collection("tenants") is None

    def test_collection_for_navigation_by_name(self, model: EdmModel) -> None:
        nav = NavigationInfo(name="customers", target="Microsoft.NAV.customer")
        assert model.collection_for_navigation(nav).name == "customers"

    def test_collection_for_navigation_by_type(self, model: EdmModel) -> None:
        nav = NavigationInfo(name="currency", target="Microsoft.NAV.currency", multiplicity="one")
        assert model.collection_for_navigation(nav).name == "currencies"

    def test_logical_jump(self, model: EdmModel) -> None:
        customer = model.find_type("Microsoft.NAV.customer")
        company = model.find_type("Microsoft.NAV.company")
        jump = customer.navigations[0]
        assert jump.name == "salesOrders"
        assert model.is_logical_jump(jump, customer)
        assert not model.is_logical_jump(company.navigations[1], company)

    def test_bound_operations(self, model: EdmModel) -> None:
        customer = model.find_type("Microsoft.NAV.customer")
        assert [o.name for o in model.bound_operations(customer, collection=True)] == ["countBlocked"]
        assert model.bound_operations(customer, collection=False) == []


# ===========================================================================
# GenerationConfig
# ===========================================================================


class TestGenerationConfig:
    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.root_collection == "companies"
        assert config.auth_type is None
        assert config.read_only_root is False

    def test_base_url_trailing_slash_stripped(self) -> None:
        assert GenerationConfig(base_url="https://x.example/api/").base_url == "https://x.example/api"

    def test_base_url_must_be_http(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(base_url="ftp://x.example")

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(project_name="x")

    def test_max_depth_range(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(max_depth=0)
