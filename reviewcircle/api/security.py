from __future__ import annotations

import os
import secrets
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.openapi.utils import get_openapi

API_KEY_HEADER = "X-API-Key"
SECURITY_SCHEME = "ReviewerApiKey"

# Report endpoints that take reviewer submissions; /health stays open.
PROTECTED_OPERATIONS = {
    ("post", "/milestone-reports/pdf"),
    ("post", "/milestone-reports/preview"),
    ("post", "/milestone-reports/validate"),
}

AUTH_NOTE = (
    "Report endpoints are open unless the server sets `REVIEWCIRCLE_API_KEY`. "
    f"Once set, every submission must carry the same key in the `{API_KEY_HEADER}` header; "
    "`/health` never requires it."
)


def api_key_configured() -> str | None:
    return os.getenv("REVIEWCIRCLE_API_KEY") or os.getenv("API_KEY")


def require_api_key_if_configured(request: Request) -> None:
    expected = api_key_configured()
    if not expected:
        return

    provided = request.headers.get(API_KEY_HEADER)
    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=401, detail="Missing or invalid reviewer API key")


def _mark_protected_operations(schema: Dict[str, Any]) -> None:
    for path, methods in (schema.get("paths") or {}).items():
        for method_name, operation in methods.items():
            if (method_name.lower(), path) in PROTECTED_OPERATIONS and isinstance(operation, dict):
                operation["security"] = [{SECURITY_SCHEME: []}]


def install_openapi_api_key_security(app: FastAPI) -> None:
    """Advertise the optional reviewer key in the generated OpenAPI document."""

    def report_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=f"{app.description}\n\n{AUTH_NOTE}",
            routes=app.routes,
        )
        schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        schemes[SECURITY_SCHEME] = {"type": "apiKey", "in": "header", "name": API_KEY_HEADER}
        _mark_protected_operations(schema)

        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = report_openapi
