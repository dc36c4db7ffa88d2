# File: edm2openapi/security.py
"""
edm2openapi - Security Schemes
===============================
Maps the externally supplied authentication-type token onto a security
scheme:

    "OAuth2.0" → ``BearerAuth`` (http bearer, JWT) plus a synthesized
                 ``/GetAuthorizationToken`` utility path
    "Basic"    → ``BasicAuth`` (http basic)

Tokens are matched case-insensitively. Anything else configures no
security and records a warning.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.utils import FORM_MEDIA_TYPE, json_content

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.security")

AUTH_OAUTH2: str = "OAuth2.0"
AUTH_BASIC: str = "Basic"

BEARER_SCHEME_NAME: str = "BearerAuth"
BASIC_SCHEME_NAME: str = "BasicAuth"

TOKEN_PATH: str = "/GetAuthorizationToken"
TOKEN_REQUEST_FIELDS: tuple = ("clientId", "clientSecret", "tenantId", "grant_type", "scope")


def _token_operation(document: OutputDocument, token_scope: str) -> Dict[str, Any]:
    return {
        "tags": ["Authentication Utility"],
        "summary": "Get OAuth2.0 Access Token",
        "description": "Exchanges client credentials for an access token (client_credentials grant).",
        "operationId": document.unique_operation_id("Util-GetAuthorizationToken"),
        "requestBody": {
            "required": True,
            "content": {
                FORM_MEDIA_TYPE: {
                    "schema": {
                        "type": "object",
                        "required": list(TOKEN_REQUEST_FIELDS),
                        "properties": {
                            "clientId": {"type": "string"},
                            "clientSecret": {"type": "string", "format": "password"},
                            "tenantId": {"type": "string"},
                            "grant_type": {"type": "string", "default": "client_credentials"},
                            "scope": {"type": "string", "default": token_scope},
                        },
                    }
                }
            },
        },
        "responses": {
            "200": {
                "description": "Access token retrieved.",
                "content": json_content(
                    {
                        "type": "object",
                        "properties": {
                            "token_type": {"type": "string"},
                            "expires_in": {"type": "integer", "format": "int32"},
                            "access_token": {"type": "string"},
                        },
                    }
                ),
            },
            "400": {"description": "Bad Request."},
            "401": {"description": "Unauthorized."},
            "500": {"description": "Internal Server Error."},
        },
        # The token endpoint itself is reachable without credentials.
        "security": [],
    }


def configure_security(
    document: OutputDocument,
    auth_type: Optional[str],
    diagnostics: DiagnosticLog,
    *,
    token_scope: str,
) -> Optional[str]:
    """
    Install the scheme selected by ``auth_type``; return its name or None.
    """
    if auth_type is None:
        diagnostics.add_info("NO_AUTH_TYPE", "No authentication type given; no security applied.")
        return None

    token: str = auth_type.strip().lower()
    if token == AUTH_BASIC.lower():
        document.add_security_scheme(
            BASIC_SCHEME_NAME,
            {
                "type": "http",
                "scheme": "basic",
                "description": "Basic (user name / web service access key) authentication.",
            },
        )
        scheme_name: str = BASIC_SCHEME_NAME
    elif token == AUTH_OAUTH2.lower():
        document.add_security_scheme(
            BEARER_SCHEME_NAME,
            {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": f"Bearer token from the {TOKEN_PATH} utility endpoint.",
            },
        )
        if not document.has_path(TOKEN_PATH):
            document.add_path(TOKEN_PATH, {"post": _token_operation(document, token_scope)})
            logger.info("Added utility path: %s", TOKEN_PATH)
        scheme_name = BEARER_SCHEME_NAME
    else:
        diagnostics.add_warning(
            "UNKNOWN_AUTH_TYPE",
            f"Unknown auth type '{auth_type}'. No security applied.",
            {"auth_type": auth_type},
        )
        return None

    logger.info("Security scheme '%s' configured.", scheme_name)
    return scheme_name


__all__: List[str] = [
    "AUTH_OAUTH2",
    "AUTH_BASIC",
    "BEARER_SCHEME_NAME",
    "BASIC_SCHEME_NAME",
    "TOKEN_PATH",
    "TOKEN_REQUEST_FIELDS",
    "configure_security",
]
