"""Service account status endpoint.

Reports whether Earth Engine service account credentials are configured,
without ever returning the private key.
"""

from __future__ import annotations

import json
from typing import Any

import fastapi

from eecatalog.core import config, credentials

router = fastapi.APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/status")
async def auth_status(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> dict[str, Any]:
    """Describe the configured service account.

    Args:
        settings: Application settings (injected via FastAPI Depends).

    Returns:
        Dictionary with ``configured`` and, when configured, the non-secret
        ``client_email`` and ``project_id``.

    Raises:
        HTTPException: If the configured credential is invalid (400).
    """
    try:
        key = credentials.parse_service_account(settings.ee_service_account)
    except (credentials.ServiceAccountError, json.JSONDecodeError) as exc:
        raise fastapi.HTTPException(
            status_code=400,
            detail=f"Invalid service account: {exc}",
        ) from exc

    if key is None:
        return {"configured": False, "client_email": None, "project_id": None}
    return {
        "configured": True,
        "client_email": key.client_email,
        "project_id": key.project_id,
    }
