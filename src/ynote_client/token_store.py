"""Access token persistence in a local JSON file."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ynote_client.models import Credentials

logger = logging.getLogger(__name__)


def load_access_token(path: Path | str) -> Credentials | None:
    """Load a saved access token, or None if there is no usable one."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
        return Credentials.from_dict(data)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Failed to load access token from {path}: {e}")
        return None


def save_access_token(path: Path | str, token: Credentials) -> None:
    """Write the access token, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        **token.to_dict(),
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    path.write_text(json.dumps(payload, indent=2))
    logger.info(f"Saved access token to {path}")
