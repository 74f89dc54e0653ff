import json
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlmodel import Session

from models.kv_entry import KeyValueEntry

# Well-known keys of the local device store
AUTH_TOKEN_KEY = "auth_token"
USER_PROFILE_KEY = "user"
ATTENDANCE_RECORDS_KEY = "attendance_records"


class KeyValueStore(Protocol):
    """String-keyed store holding JSON-serializable values."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class SQLModelKeyValueStore:
    """
    Key-value store persisted to the local database through SQLModel.

    Every call opens its own short-lived session; values are written as JSON
    text and decoded on read.
    """

    def __init__(self, engine):
        self.engine = engine

    def get(self, key: str) -> Optional[Any]:
        with Session(self.engine) as session:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                return None
            return json.loads(entry.value)

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with Session(self.engine) as session:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                entry = KeyValueEntry(key=key, value=payload)
            else:
                entry.value = payload
                entry.updated_at = datetime.now(timezone.utc)
            session.add(entry)
            session.commit()

    def remove(self, key: str) -> None:
        with Session(self.engine) as session:
            entry = session.get(KeyValueEntry, key)
            if entry is not None:
                session.delete(entry)
                session.commit()
