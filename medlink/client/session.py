# medlink/client/session.py
"""
Client-side session: bearer token plus the signed-in user.

Nothing is global. A Session is created from a store at startup
(`Session.load`) and handed to whoever needs it; `clear()` tears it down on
logout or when the API answers 401.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def read(self) -> Optional[Dict[str, Any]]: ...

    def write(self, data: Dict[str, Any]) -> None: ...

    def delete(self) -> None: ...


class FileSessionStore:
    """Persist the session as a small JSON file (0600)."""

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def read(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to parse stored session %s: %s", self.path, e)
            self.delete()
            return None
        return data if isinstance(data, dict) else None

    def write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        self.path.chmod(0o600)

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)


class MemorySessionStore:
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = data

    def read(self) -> Optional[Dict[str, Any]]:
        return self._data

    def write(self, data: Dict[str, Any]) -> None:
        self._data = dict(data)

    def delete(self) -> None:
        self._data = None


class Session:
    def __init__(self, store: SessionStore):
        self._store = store
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None

    @classmethod
    def load(cls, store: SessionStore) -> "Session":
        """Restore a previous session if the store holds a complete one."""
        session = cls(store)
        data = store.read()
        if data and data.get("token") and isinstance(data.get("user"), dict):
            session.token = data["token"]
            session.user = data["user"]
        return session

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def role(self) -> Optional[str]:
        if not self.user:
            return None
        role = self.user.get("role")
        return role.lower() if isinstance(role, str) else None

    def start(self, token: str, user: Dict[str, Any]) -> None:
        if not token or not user:
            raise ValueError("token and user are required")
        self.token, self.user = token, user
        self._store.write({"token": token, "user": user})

    def clear(self) -> None:
        self.token, self.user = None, None
        self._store.delete()
