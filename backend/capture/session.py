"""Capture session identity.

A tracked page keeps one session id for as long as its host storage
survives, so every reconnect rejoins the same session on the relay.
"""

import logging
import random
import string
from pathlib import Path
from threading import Lock
from typing import Optional

from domain.models import SESSION_ID_PREFIX

logger = logging.getLogger(__name__)

SESSION_ID_SUFFIX_LENGTH = 9

_BASE36 = string.digits + string.ascii_lowercase


def new_session_id(rng: Optional[random.Random] = None) -> str:
    """Generate ``session_`` plus 9 random base-36 characters."""
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(_BASE36) for _ in range(SESSION_ID_SUFFIX_LENGTH))
    return SESSION_ID_PREFIX + suffix


class SessionIdStore:
    """Stand-in for the page's session storage.

    With a path, the id survives process restarts; without one it lives as
    long as the store object.
    """

    def __init__(self, path: Optional[Path] = None, rng: Optional[random.Random] = None):
        self.path = Path(path) if path is not None else None
        self._rng = rng
        self._session_id: Optional[str] = None
        self._lock = Lock()

    def get_or_create(self) -> str:
        """Return the stored id, generating and persisting one on first use."""
        with self._lock:
            if self._session_id is None:
                self._session_id = self._load() or self._create()
            return self._session_id

    def _load(self) -> Optional[str]:
        if self.path is None or not self.path.is_file():
            return None
        value = self.path.read_text(encoding="utf-8").strip()
        if not value:
            return None
        logger.info("Resuming capture session %s", value)
        return value

    def _create(self) -> str:
        session_id = new_session_id(self._rng)
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(session_id, encoding="utf-8")
        logger.info("Started capture session %s", session_id)
        return session_id
