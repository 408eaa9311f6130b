"""Best-effort calls that never affect turn state."""
from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from .errors import CollaboratorError

CANADA_BOUNDARIES_URL = (
    "https://raw.githubusercontent.com/codeforgermany/click_that_hood/main/public/data/canada.geojson"
)


def fetch_boundary_overlay(
    url: str,
    timeout_secs: float = 15.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> Any | None:
    """
    Fetch the static boundary document shown under every map view.

    Returns:
        The parsed JSON document, or None if it could not be loaded
    """
    if not url:
        return None
    try:
        overlay = _get_json(url, timeout_secs, transport)
    except CollaboratorError as exc:
        logger.warning("Could not load default map boundaries: {}", exc)
        return None
    logger.info("Loaded boundary overlay from {}", url)
    return overlay


def _get_json(url: str, timeout_secs: float, transport: Optional[httpx.BaseTransport]) -> Any:
    try:
        with httpx.Client(timeout=timeout_secs, transport=transport, follow_redirects=True) as client:
            resp = client.get(url)
            resp.raise_for_status()
            return resp.json()
    except httpx.HTTPError as exc:
        raise CollaboratorError(str(exc)) from exc
    except ValueError as exc:
        raise CollaboratorError(f"Invalid boundary document: {exc}") from exc
