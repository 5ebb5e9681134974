"""Identity token store.

The bearer token and the identity it belongs to form one `Session` value.
They are loaded, saved and cleared together through `SessionStore.save`, so
a token can never outlive the knowledge of whose it is.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    id: str
    name: str
    email: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v)


@dataclass(frozen=True)
class Session:
    identity: Identity
    token: str

    def to_json(self) -> dict:
        return {"user": self.identity.model_dump(), "token": self.token}

    @classmethod
    def from_json(cls, data: dict) -> "Session":
        token = data.get("token")
        if not isinstance(token, str) or not token:
            raise ValueError("session token missing")
        return cls(identity=Identity.model_validate(data.get("user")), token=token)


class SessionStore:
    """Holds the current session and mirrors it to a JSON file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path) if path is not None else None
        self._current: Optional[Session] = None

    @property
    def current(self) -> Optional[Session]:
        return self._current

    @property
    def token(self) -> Optional[str]:
        return self._current.token if self._current else None

    @property
    def identity(self) -> Optional[Identity]:
        return self._current.identity if self._current else None

    def load(self) -> Optional[Session]:
        """Read the persisted session; unreadable files mean signed out."""
        if self._path is None or not self._path.exists():
            self._current = None
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            self._current = Session.from_json(data)
        except (OSError, ValueError, TypeError, PydanticValidationError) as e:
            logger.warning(f"Discarding unreadable session file {self._path}: {e}")
            self._current = None
        return self._current

    def save(self, session: Optional[Session]) -> None:
        """The only write path: replaces both halves at once, or clears both."""
        self._current = session
        if self._path is None:
            return
        if session is None:
            self._path.unlink(missing_ok=True)
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(session.to_json()), encoding="utf-8")
        os.replace(tmp, self._path)

    def clear(self) -> None:
        self.save(None)
