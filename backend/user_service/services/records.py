from __future__ import annotations

import logging
from typing import Any, Dict, List

from backend.user_service.clients.supabase import SupabaseClient
from backend.user_service.errors import ServerError, UpstreamTransportError


logger = logging.getLogger(__name__)


async def fetch_user(user_id: str, client: SupabaseClient) -> List[Any]:
    """Return every ``users`` row whose id matches, possibly none."""
    try:
        response = await client.select_users(user_id)
    except UpstreamTransportError as exc:
        logger.error("user_fetch_send_failed", extra={"user_id": user_id, "error": str(exc)})
        raise ServerError(str(exc)) from exc

    if not response.ok:
        logger.error(
            "user_fetch_failed",
            extra={"user_id": user_id, "status": response.status_code},
        )
        raise ServerError(response.text)

    try:
        rows = response.json()
    except ValueError:
        logger.warning("user_fetch_body_unparseable", extra={"user_id": user_id})
        return []
    if not isinstance(rows, list):
        logger.warning("user_fetch_body_not_array", extra={"user_id": user_id})
        return []

    logger.info("user_fetched", extra={"user_id": user_id, "rows": len(rows)})
    return rows


async def update_user(
    user_id: str, patch: Dict[str, Any], client: SupabaseClient
) -> None:
    """Apply a partial update to the matching ``users`` rows.

    The patch is forwarded unchanged; PostgREST decides which columns exist.
    """
    try:
        response = await client.update_users(user_id, patch)
    except UpstreamTransportError as exc:
        logger.error("user_update_send_failed", extra={"user_id": user_id, "error": str(exc)})
        raise ServerError(str(exc)) from exc

    if not response.ok:
        logger.error(
            "user_update_failed",
            extra={"user_id": user_id, "status": response.status_code},
        )
        raise ServerError(response.text)

    logger.info("user_updated", extra={"user_id": user_id, "fields": sorted(patch)})
