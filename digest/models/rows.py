"""SQLModel table models for page-digest."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def get_current_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class StoredValue(SQLModel, table=True):
    """One host-storage entry, e.g. ``openai_api_key``."""

    __tablename__ = "stored_value"

    key: str = Field(primary_key=True, description="Storage key")
    value: str = Field(description="Stored value")
    updated_at: str = Field(
        default_factory=get_current_timestamp,
        description="ISO8601 datetime - updated on every write",
    )
