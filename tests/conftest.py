"""
tests/conftest.py
Shared fixtures for the edm2openapi test suite.

Models are built from plain dicts (the same shape a YAML model file has)
and validated through ``EdmModel.model_validate``. No mocking libraries are
used; file I/O happens inside pytest's ``tmp_path``.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, List

import pytest
import yaml

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.models import EdmModel, GenerationConfig
from edm2openapi.walker import PathGraphWalker

NS: str = "Microsoft.NAV"


def _q(name: str) -> str:
    return f"{NS}.{name}"


# ---------------------------------------------------------------------------
# Raw model data
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_model_dict() -> Dict[str, Any]:
    """
    A small Business Central style model:

        companies ─┬─ customers ─┬─ salesOrders   (logical jump, partner on salesOrder)
                   │             └─ currency      (single-valued)
                   ├─ salesOrders ─┬─ customer    (single-valued)
                   │               └─ salesOrderLines (composite key)
                   └─ items       (insert restricted)
    """
    return {
        "types": [
            {
                "name": "company",
                "namespace": NS,
                "key": ["companyId"],
                "properties": [
                    {"name": "companyId", "type": {"name": "Edm.Guid", "nullable": False}},
                    {"name": "name", "type": {"name": "Edm.String", "max_length": 30}},
                    {"name": "displayName", "type": "Edm.String"},
                ],
                "navigations": [
                    {"name": "customers", "target": _q("customer")},
                    {"name": "salesOrders", "target": _q("salesOrder")},
                    {"name": "items", "target": _q("item")},
                ],
            },
            {
                "name": "customer",
                "namespace": NS,
                "key": ["customerId"],
                "properties": [
                    {"name": "customerId", "type": {"name": "Edm.Guid", "nullable": False}},
                    {"name": "number", "type": {"name": "Edm.String", "max_length": 20}},
                    {"name": "displayName", "type": {"name": "Edm.String", "nullable": False}},
                    {"name": "address", "type": _q("postalAddressType")},
                    {"name": "blocked", "type": _q("blocked")},
                    {"name": "balance", "type": "Edm.Decimal"},
                ],
                "navigations": [
                    {"name": "salesOrders", "target": _q("salesOrder"), "partner": "customer"},
                    {"name": "currency", "target": _q("currency"), "multiplicity": "one"},
                ],
            },
            {
                "name": "salesOrder",
                "namespace": NS,
                "key": ["salesOrderId"],
                "properties": [
                    {"name": "salesOrderId", "type": {"name": "Edm.Guid", "nullable": False}},
                    {"name": "number", "type": "Edm.String"},
                    {"name": "orderDate", "type": "Edm.Date"},
                    {"name": "totalAmount", "type": "Edm.Decimal"},
                ],
                "navigations": [
                    {
                        "name": "customer",
                        "target": _q("customer"),
                        "multiplicity": "one",
                        "partner": "salesOrders",
                    },
                    {"name": "salesOrderLines", "target": _q("salesOrderLine")},
                ],
            },
            {
                "name": "salesOrderLine",
                "namespace": NS,
                "key": ["documentId", "sequence"],
                "properties": [
                    {"name": "documentId", "type": {"name": "Edm.Guid", "nullable": False}},
                    {"name": "sequence", "type": {"name": "Edm.Int32", "nullable": False}},
                    {"name": "description", "type": "Edm.String"},
                    {"name": "quantity", "type": "Edm.Decimal"},
                ],
            },
            {
                "name": "item",
                "namespace": NS,
                "key": ["itemId"],
                "properties": [
                    {"name": "itemId", "type": {"name": "Edm.Guid", "nullable": False}},
                    {"name": "displayName", "type": "Edm.String"},
                    {"name": "unitPrice", "type": "Edm.Decimal"},
                ],
            },
            {
                "name": "currency",
                "namespace": NS,
                "key": ["currencyId"],
                "properties": [
                    {"name": "currencyId", "type": {"name": "Edm.Guid", "nullable": False}},
                    {"name": "code", "type": "Edm.String"},
                ],
            },
            {
                "name": "postalAddressType",
                "namespace": NS,
                "kind": "complex",
                "properties": [
                    {"name": "street", "type": "Edm.String"},
                    {"name": "city", "type": "Edm.String"},
                    {"name": "previousAddress", "type": _q("postalAddressType")},
                ],
            },
        ],
        "enum_types": [
            {"name": "blocked", "namespace": NS, "members": ["_x0020_", "Ship", "Invoice", "All"]},
        ],
        "operations": [
            {
                "name": "resetCache",
                "namespace": NS,
                "kind": "action",
                "is_bound": True,
                "parameters": [{"name": "bindingParameter", "type": _q("company")}],
            },
            {
                "name": "shipAndInvoice",
                "namespace": NS,
                "kind": "action",
                "is_bound": True,
                "parameters": [{"name": "bindingParameter", "type": _q("salesOrder")}],
            },
            {
                "name": "countBlocked",
                "namespace": NS,
                "kind": "function",
                "is_bound": True,
                "parameters": [
                    {"name": "bindingParameter", "type": f"Collection({_q('customer')})"},
                    {"name": "threshold", "type": {"name": "Edm.Int32", "nullable": False}},
                ],
                "return_type": "Edm.Int32",
            },
            {
                "name": "ping",
                "namespace": NS,
                "kind": "action",
                "parameters": [{"name": "message", "type": {"name": "Edm.String", "nullable": False}}],
                "return_type": "Edm.String",
            },
        ],
        "container": {
            "name": "NAV",
            "collections": [
                {"name": "companies", "entity_type": _q("company")},
                {"name": "customers", "entity_type": _q("customer")},
                {"name": "salesOrders", "entity_type": _q("salesOrder")},
                {
                    "name": "salesOrderLines",
                    "entity_type": _q("salesOrderLine"),
                    "annotations": {
                        "Org.OData.Capabilities.V1.DeleteRestrictions": {"Deletable": False},
                    },
                },
                {
                    "name": "items",
                    "entity_type": _q("item"),
                    "annotations": {
                        "Org.OData.Capabilities.V1.InsertRestrictions": {"Insertable": False},
                    },
                },
                {"name": "currencies", "entity_type": _q("currency")},
            ],
            "operation_imports": [{"name": "Ping", "operation": _q("ping")}],
        },
    }


@pytest.fixture()
def model_dict(raw_model_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_model_dict)


@pytest.fixture()
def model(model_dict: Dict[str, Any]) -> EdmModel:
    return EdmModel.model_validate(model_dict)


@pytest.fixture()
def config() -> GenerationConfig:
    return GenerationConfig(base_url="https://api.example.com/v2.0", auth_type="OAuth2.0")


@pytest.fixture()
def document(model: EdmModel, config: GenerationConfig) -> OutputDocument:
    """The walked fixture model."""
    return PathGraphWalker(model, config).walk()


@pytest.fixture()
def model_yaml_path(model_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the model (with a config section) to a temporary YAML file."""
    path = tmp_path / "model.yaml"
    data: Dict[str, Any] = {
        "model": model_dict,
        "config": {"base_url": "https://api.example.com/v2.0", "auth_type": "Basic"},
    }
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Small edge-case models
# ---------------------------------------------------------------------------


def entity(name: str, key: str, navigations: List[Dict[str, Any]] | None = None) -> Dict[str, Any]:
    """Entity type dict in namespace ``T`` with a single Edm.Int32 key."""
    return {
        "name": name,
        "namespace": "T",
        "key": [key],
        "properties": [{"name": key, "type": {"name": "Edm.Int32", "nullable": False}}],
        "navigations": navigations or [],
    }


@pytest.fixture()
def cyclic_model() -> EdmModel:
    """R → A → B → A with no partners, so every edge would be followed."""
    return EdmModel.model_validate(
        {
            "types": [
                entity("R", "id", [{"name": "as", "target": "T.A"}]),
                entity("A", "aid", [{"name": "bs", "target": "T.B"}]),
                entity("B", "bid", [{"name": "as", "target": "T.A"}]),
            ],
            "container": {
                "collections": [
                    {"name": "rs", "entity_type": "T.R"},
                    {"name": "as", "entity_type": "T.A"},
                    {"name": "bs", "entity_type": "T.B"},
                ]
            },
        }
    )


@pytest.fixture()
def two_edge_model() -> EdmModel:
    """Root R reaches child C through two differently named edges."""
    return EdmModel.model_validate(
        {
            "types": [
                entity(
                    "R",
                    "id",
                    [
                        {"name": "cs", "target": "T.C"},
                        {"name": "otherCs", "target": "T.C"},
                    ],
                ),
                entity("C", "cid"),
            ],
            "container": {
                "collections": [
                    {"name": "R", "entity_type": "T.R"},
                    {"name": "cs", "entity_type": "T.C"},
                ]
            },
        }
    )


@pytest.fixture()
def diagnostics() -> DiagnosticLog:
    return DiagnosticLog()


@pytest.fixture()
def make_entity():
    """The ``entity`` dict builder, for tests that assemble their own models."""
    return entity
