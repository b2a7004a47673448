"""Storage for the OAuth bearer token."""

import json
import logging
import os
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStorage:
    """Holds at most one bearer token.

    Readers must re-read ``token`` for every request; it can be cleared or
    replaced between calls.
    """

    @property
    def token(self) -> Optional[str]:
        raise NotImplementedError

    @token.setter
    def token(self, value: Optional[str]) -> None:
        raise NotImplementedError


class MemoryTokenStorage(TokenStorage):
    """Keeps the token in process memory only."""

    def __init__(self, token: Optional[str] = None):
        self._lock = threading.Lock()
        self._token = token

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._token

    @token.setter
    def token(self, value: Optional[str]) -> None:
        with self._lock:
            self._token = value


class FileTokenStorage(TokenStorage):
    """Persists the token in a JSON file between runs."""

    def __init__(self, token_path: str = "token.json"):
        """Initialize file token storage.

        Args:
            token_path: Path to the token.json file
        """
        self.token_path = token_path
        self._lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            if not os.path.exists(self.token_path):
                return None
            try:
                with open(self.token_path, "r", encoding="utf-8") as token_file:
                    data = json.load(token_file)
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable token file %s: %s", self.token_path, e)
                return None
            token = data.get("token") if isinstance(data, dict) else None
            return token if isinstance(token, str) else None

    @token.setter
    def token(self, value: Optional[str]) -> None:
        with self._lock:
            if value is None:
                if os.path.exists(self.token_path):
                    os.remove(self.token_path)
                    logger.info("Removed token file %s", self.token_path)
                return

            with open(self.token_path, "w", encoding="utf-8") as token_file:
                json.dump({"token": value}, token_file)
