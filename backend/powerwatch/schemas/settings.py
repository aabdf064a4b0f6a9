"""Monitoring configuration schemas."""

from pydantic import BaseModel, Field, model_validator


class MonitoringConfigOut(BaseModel):
    """Current threshold configuration."""
    voltage_max: float
    voltage_min: float
    current_max: float
    pf_min: float
    notifications_enabled: bool
    email_alerts_enabled: bool
    alert_check_interval: int  # ms
    device_offline_threshold: int  # minutes
    updated_at: str | None = None


class MonitoringConfigUpdate(BaseModel):
    """Partial update — omitted fields keep their value."""
    voltage_max: float | None = Field(default=None, ge=200, le=300)
    voltage_min: float | None = Field(default=None, ge=150, le=240)
    current_max: float | None = Field(default=None, ge=1, le=100)
    pf_min: float | None = Field(default=None, ge=0.5, le=1.0)
    notifications_enabled: bool | None = None
    email_alerts_enabled: bool | None = None
    alert_check_interval: int | None = Field(default=None, ge=10_000, le=3_600_000)
    device_offline_threshold: int | None = Field(default=None, ge=5, le=1440)

    @model_validator(mode="after")
    def _voltage_order(self) -> "MonitoringConfigUpdate":
        if (
            self.voltage_min is not None
            and self.voltage_max is not None
            and self.voltage_min >= self.voltage_max
        ):
            raise ValueError("voltage_min must be less than voltage_max")
        return self


class MonitoringConfigResult(BaseModel):
    message: str
    settings: MonitoringConfigOut
