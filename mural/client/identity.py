"""Local user token — an opaque UUID created once and kept on disk."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def load_or_create_user_id(path: str | Path) -> str:
    """Return the persisted token, creating (and saving) one on first use.

    A file holding anything other than a UUID is replaced.
    """
    token_file = Path(path)
    if token_file.exists():
        raw = token_file.read_text(encoding="utf-8").strip()
        try:
            return str(uuid.UUID(raw))
        except ValueError:
            logger.warning("Ignoring malformed user token in %s", token_file)

    token = str(uuid.uuid4())
    token_file.parent.mkdir(parents=True, exist_ok=True)
    token_file.write_text(token + "\n", encoding="utf-8")
    logger.info("Created new user token in %s", token_file)
    return token
