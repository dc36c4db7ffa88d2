# File: edm2openapi/operations.py
"""
edm2openapi - Operation Synthesizer
====================================
Builds the verb → operation maps attached to each synthesized path.

Collection paths
    GET (list, full query options) always; POST iff inserts are permitted.
Item paths
    GET (``$select``/``$expand``) always; PATCH iff updates are permitted;
    DELETE iff deletes are permitted. Both writes require ``If-Match``.
Related single item
    GET only.
Callables
    Actions → POST with a JSON body built from the non-binding parameters.
    Functions → GET with one query parameter per non-binding parameter.

Every operation carries a ``default`` error response.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from edm2openapi.capabilities import CollectionCapabilities
from edm2openapi.document import OutputDocument
from edm2openapi.models import CollectionInfo, NavigationInfo, OperationInfo
from edm2openapi.parameters import (
    IF_MATCH_PARAMETER_ID,
    ParameterRegistry,
    collection_query_parameters,
    single_query_parameters,
)
from edm2openapi.schemas import SchemaRegistry
from edm2openapi.utils import json_content, schema_ref

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.operations")

ACTIONS_TAG: str = "Actions"
FUNCTIONS_TAG: str = "Functions"


def _error_response() -> Dict[str, str]:
    return {"description": "Error response"}


class OperationSynthesizer:
    """
    Produces operation objects for one run.

    Operation ids are reserved in the document as they are built, so the
    walker must only ask for operations of paths it is about to add.
    """

    def __init__(
        self,
        document: OutputDocument,
        schemas: SchemaRegistry,
        parameters: ParameterRegistry,
    ) -> None:
        self._document: OutputDocument = document
        self._schemas: SchemaRegistry = schemas
        self._parameters: ParameterRegistry = parameters

    # -----------------------------------------------------------------
    # Entity set paths
    # -----------------------------------------------------------------

    def collection_operations(
        self,
        collection: CollectionInfo,
        schema_key: str,
        *,
        op_id_root: str,
        summary_suffix: str,
        base_params: List[Dict[str, Any]],
        capabilities: CollectionCapabilities,
    ) -> Dict[str, Dict[str, Any]]:
        operations: Dict[str, Dict[str, Any]] = {}
        name: str = collection.name

        operations["get"] = {
            "tags": [name],
            "summary": f"Retrieve {name} {summary_suffix}",
            "operationId": self._document.unique_operation_id(f"Get-{op_id_root}"),
            "parameters": list(base_params) + collection_query_parameters(),
            "responses": {
                "200": {
                    "description": f"List of {name}",
                    "content": json_content(
                        {
                            "type": "object",
                            "properties": {
                                "@odata.context": {"type": "string"},
                                "value": {"type": "array", "items": schema_ref(schema_key)},
                            },
                        }
                    ),
                },
                "default": _error_response(),
            },
        }

        if capabilities.insertable:
            operations["post"] = {
                "tags": [name],
                "summary": f"Create new {name} {summary_suffix}",
                "operationId": self._document.unique_operation_id(f"Post-{op_id_root}"),
                "parameters": list(base_params),
                "requestBody": {
                    "required": True,
                    "description": f"New {name} object.",
                    "content": json_content(schema_ref(schema_key)),
                },
                "responses": {
                    "201": {
                        "description": f"{name} created.",
                        "content": json_content(schema_ref(schema_key)),
                    },
                    "default": _error_response(),
                },
            }
        return operations

    def item_operations(
        self,
        collection: CollectionInfo,
        schema_key: str,
        *,
        op_id_root: str,
        summary_suffix: str,
        base_params: List[Dict[str, Any]],
        key_params: List[Dict[str, Any]],
        capabilities: CollectionCapabilities,
    ) -> Dict[str, Dict[str, Any]]:
        operations: Dict[str, Dict[str, Any]] = {}
        name: str = collection.name
        path_params: List[Dict[str, Any]] = list(base_params) + list(key_params)
        if_match: Dict[str, str] = self._parameters.ref(IF_MATCH_PARAMETER_ID)

        operations["get"] = {
            "tags": [name],
            "summary": f"Retrieve specific {name} {summary_suffix}",
            "operationId": self._document.unique_operation_id(f"Get-{op_id_root}"),
            "parameters": list(path_params) + single_query_parameters(),
            "responses": {
                "200": {
                    "description": f"{name} retrieved.",
                    "content": json_content(schema_ref(schema_key)),
                },
                "404": {"description": "Not Found"},
                "default": _error_response(),
            },
        }

        if capabilities.updatable:
            operations["patch"] = {
                "tags": [name],
                "summary": f"Update specific {name} {summary_suffix}",
                "operationId": self._document.unique_operation_id(f"Patch-{op_id_root}"),
                "parameters": list(path_params) + [if_match],
                "requestBody": {
                    "required": True,
                    "description": f"Properties of {name} to update.",
                    "content": json_content(schema_ref(schema_key)),
                },
                "responses": {
                    "200": {
                        "description": f"{name} updated.",
                        "content": json_content(schema_ref(schema_key)),
                    },
                    "400": {"description": "Bad Request"},
                    "404": {"description": "Not Found"},
                    "409": {"description": "Conflict"},
                    "412": {"description": "Precondition Failed"},
                    "default": _error_response(),
                },
            }

        if capabilities.deletable:
            operations["delete"] = {
                "tags": [name],
                "summary": f"Delete specific {name} {summary_suffix}",
                "operationId": self._document.unique_operation_id(f"Delete-{op_id_root}"),
                "parameters": list(path_params) + [if_match],
                "responses": {
                    "204": {"description": f"{name} deleted."},
                    "404": {"description": "Not Found"},
                    "409": {"description": "Conflict"},
                    "412": {"description": "Precondition Failed"},
                    "default": _error_response(),
                },
            }
        return operations

    def related_item_operations(
        self,
        parent: CollectionInfo,
        navigation: NavigationInfo,
        schema_key: str,
        target_name: str,
        base_params: List[Dict[str, Any]],
    ) -> Dict[str, Dict[str, Any]]:
        """Read-only access to a single-valued navigation target."""
        return {
            "get": {
                "tags": [parent.name],
                "summary": f"Get related {navigation.name} for {parent.name}",
                "operationId": self._document.unique_operation_id(
                    f"Get-Related-{parent.name}-{navigation.name}"
                ),
                "parameters": list(base_params) + single_query_parameters(),
                "responses": {
                    "200": {
                        "description": f"Related {target_name} retrieved.",
                        "content": json_content(schema_ref(schema_key)),
                    },
                    "404": {"description": "Not Found"},
                    "default": _error_response(),
                },
            }
        }

    # -----------------------------------------------------------------
    # Callables
    # -----------------------------------------------------------------

    def callable_operations(
        self, operation: OperationInfo, inherited_params: List[Dict[str, Any]]
    ) -> Dict[str, Dict[str, Any]]:
        """Verb map for a bound or unbound action/function."""
        if operation.is_action:
            return {"post": self.action_operation(operation, inherited_params)}
        return {"get": self.function_operation(operation, inherited_params)}

    def action_operation(
        self, action: OperationInfo, inherited_params: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        self._document.actions_count += 1
        operation: Dict[str, Any] = {
            "tags": [ACTIONS_TAG],
            "summary": f"Execute action {action.name}",
            "operationId": self._document.unique_operation_id(f"Action-{action.full_name}"),
            "parameters": list(inherited_params),
        }

        properties: Dict[str, Any] = {}
        required: List[str] = []
        for param in action.payload_parameters:
            properties[param.name] = self._schemas.schema_for_type_ref(param.type)
            if not param.type.nullable:
                required.append(param.name)

        if properties:
            body_schema: Dict[str, Any] = {"type": "object", "properties": properties}
            if required:
                body_schema["required"] = required
            operation["requestBody"] = {"required": True, "content": json_content(body_schema)}

        responses: Dict[str, Any] = {}
        if action.return_type is None:
            responses["204"] = {
                "description": "Action executed successfully with no return content."
            }
        else:
            responses["200"] = {
                "description": "Action executed successfully.",
                "content": json_content(self._schemas.schema_for_type_ref(action.return_type)),
            }
        responses["default"] = _error_response()
        operation["responses"] = responses
        return operation

    def function_operation(
        self, function: OperationInfo, inherited_params: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        self._document.functions_count += 1
        parameters: List[Dict[str, Any]] = list(inherited_params)
        for param in function.payload_parameters:
            parameters.append(
                {
                    "name": param.name,
                    "in": "query",
                    "required": not param.type.nullable,
                    "schema": self._schemas.schema_for_type_ref(param.type),
                }
            )

        return_schema: Dict[str, Any] = self._schemas.schema_for_type_ref(function.return_type)
        return {
            "tags": [FUNCTIONS_TAG],
            "summary": f"Execute function {function.name}",
            "operationId": self._document.unique_operation_id(f"Function-{function.full_name}"),
            "parameters": parameters,
            "responses": {
                "200": {
                    "description": "Function executed successfully.",
                    "content": json_content(return_schema),
                },
                "default": _error_response(),
            },
        }


__all__: List[str] = ["ACTIONS_TAG", "FUNCTIONS_TAG", "OperationSynthesizer"]
