from datetime import datetime, timezone

from sqlmodel import Field, SQLModel

# Defines the Structure of the Local Device Key-Value Store


# One Row Per Key; Value Holds a JSON Document
class KeyValueEntry(SQLModel, table=True):
    __tablename__ = "kv_entry"

    key: str = Field(primary_key=True, description="Storage key, e.g. auth_token")
    value: str = Field(..., description="JSON-serialized value")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
