"""Device and MAC binding schemas."""

from pydantic import BaseModel, Field, field_validator

from powerwatch.utils.mac import is_valid_mac


class DeviceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: str = ""


class DeviceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    location: str | None = None


class DeviceOut(BaseModel):
    id: str
    name: str
    location: str = ""
    created_at: str | None = None


class BindingCreate(BaseModel):
    mac_address: str

    @field_validator("mac_address")
    @classmethod
    def _valid_mac(cls, value: str) -> str:
        if not is_valid_mac(value):
            raise ValueError("Please enter a valid MAC address (format: XX:XX:XX:XX:XX:XX)")
        return value


class BindingOut(BaseModel):
    id: int
    device_id: str
    mac_address: str
    created_at: str | None = None
