# label_lifecycle/auth.py
"""Shared authentication dependencies."""

import secrets
import uuid
from dataclasses import dataclass

from fastapi import Header, HTTPException

from label_lifecycle.config import get_settings


@dataclass(frozen=True)
class Actor:
    """Caller identity, as resolved by the upstream session layer."""
    user_id: uuid.UUID
    organization_id: uuid.UUID


def require_cron_secret(
    authorization: str | None = Header(default=None),
) -> None:
    """Validate `Authorization: Bearer <CRON_SECRET>`. Fails closed if CRON_SECRET is not set."""
    expected = get_settings().CRON_SECRET

    if not expected:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: CRON_SECRET not configured",
        )

    provided = None
    if authorization and authorization.startswith("Bearer "):
        provided = authorization[len("Bearer "):]

    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
        )


def _parse_uuid(value: str | None, header: str) -> uuid.UUID:
    if not value:
        raise HTTPException(status_code=401, detail=f"Missing {header} header")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Invalid {header} header")


def get_current_actor(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_organization_id: str | None = Header(default=None, alias="X-Organization-Id"),
) -> Actor:
    """Identity of the signed-in user and their active organization."""
    return Actor(
        user_id=_parse_uuid(x_user_id, "X-User-Id"),
        organization_id=_parse_uuid(x_organization_id, "X-Organization-Id"),
    )
