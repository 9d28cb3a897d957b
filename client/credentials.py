"""
Credential stores for the API client.

A store holds one immutable ``CredentialPair``. Writes swap the whole pair
under a lock, so a reader never observes a half-updated pair.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from core.models.auth import CredentialPair

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get_credentials(self) -> CredentialPair | None: ...

    def get_access_token(self) -> str | None: ...

    def get_refresh_token(self) -> str | None: ...

    def set_credentials(self, pair: CredentialPair) -> None: ...

    def clear(self) -> None: ...


class MemoryCredentialStore:
    """Keeps the credential pair for the lifetime of the process."""

    def __init__(self, pair: CredentialPair | None = None) -> None:
        self._pair = pair
        self._lock = threading.Lock()

    def get_credentials(self) -> CredentialPair | None:
        with self._lock:
            return self._pair

    def get_access_token(self) -> str | None:
        pair = self.get_credentials()
        return pair.access_token if pair else None

    def get_refresh_token(self) -> str | None:
        pair = self.get_credentials()
        return pair.refresh_token if pair else None

    def set_credentials(self, pair: CredentialPair) -> None:
        with self._lock:
            self._pair = pair

    def clear(self) -> None:
        with self._lock:
            self._pair = None


class FileCredentialStore(MemoryCredentialStore):
    """Memory store mirrored to a JSON session file so sessions survive restarts."""

    def __init__(self, session_file: Path) -> None:
        super().__init__()
        self.session_file = session_file
        self.__load_session()

    def __load_session(self) -> None:
        if not self.session_file.exists():
            return
        try:
            with self.session_file.open("r") as f:
                data = json.load(f)
            self._pair = CredentialPair.model_validate(data)
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            logger.warning(f"Discarding unreadable session file {self.session_file}: {e}")
            self._pair = None
            self.session_file.unlink(missing_ok=True)

    def __save_session(self, pair: CredentialPair) -> None:
        tmp_file = self.session_file.with_name(f"{self.session_file.name}.tmp")
        try:
            with tmp_file.open("w") as f:
                json.dump(pair.model_dump(by_alias=True), f)
            tmp_file.replace(self.session_file)
        except OSError:
            tmp_file.unlink(missing_ok=True)
            raise

    def set_credentials(self, pair: CredentialPair) -> None:
        with self._lock:
            self.__save_session(pair)
            self._pair = pair

    def clear(self) -> None:
        with self._lock:
            self._pair = None
            try:
                self.session_file.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove session file {self.session_file}: {e}")
