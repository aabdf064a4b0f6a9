"""Direct device ingestion schemas."""

from pydantic import BaseModel, ConfigDict, field_validator


class ReadingIn(BaseModel):
    """Reading posted by a meter; parameter fields pass through unvalidated."""
    model_config = ConfigDict(extra="allow")

    mac_address: str
    reading_time: str | float | None = None

    @field_validator("mac_address")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("MAC address is required")
        return value


class ReadingStored(BaseModel):
    success: bool = True
    stored: bool
    message: str
    device_id: str
    reading_id: int | None = None
    reading_time: str


class PurgeResult(BaseModel):
    message: str
    deleted_count: int
