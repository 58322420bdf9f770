"""Static opportunity catalog, read from a JSON document on every request."""

import json
import logging
from pathlib import Path
from typing import Any

from app.core.errors import ServiceError

logger = logging.getLogger(__name__)


def load_opportunities(path: Path, category: str | None = None) -> list[dict[str, Any]]:
    """
    Return the catalog's opportunities, optionally only those tagged with `category`.
    Raises ServiceError when the document cannot be read or parsed.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to load opportunities from %s: %s", path, e)
        raise ServiceError("Failed to load opportunities.") from e

    opportunities = data.get("opportunities") if isinstance(data, dict) else None
    if not isinstance(opportunities, list):
        opportunities = []

    tag = (category or "").strip()
    if tag:
        opportunities = [
            o for o in opportunities if isinstance(o, dict) and tag in (o.get("categories") or [])
        ]
    return opportunities
