"""Constants and Enums for Honeywell Evohome integration."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

# Integration Domain
DOMAIN = "honeywell_evohome"

# Supported Platforms
PLATFORMS = ["climate", "select"]

# Keys in hass.data[DOMAIN]
DATA_HUB = "hub"

# Remote API endpoints
BASE_URL = "https://tccna.resideo.com"
API_URL = f"{BASE_URL}/WebAPI/emea/api/v1"
AUTHORIZATION_URL = f"{BASE_URL}/Auth/OAuth/Authorize"
TOKEN_URL = f"{BASE_URL}/Auth/OAuth/Token"
OAUTH_SCOPES = ["EMEA-Partner"]

# Domain-level YAML configuration keys
CONF_CLOUD_ADAPTER_URL = "cloud_adapter_url"
CONF_CLOUD_ADAPTER_CODE = "cloud_adapter_code"
CONF_TOKEN_REFRESH_INTERVAL = "token_refresh_interval"
CONF_TOKEN_REFRESH_DELAY = "token_refresh_delay"

# Per-entry option keys
CONF_CACHE_TTL = "cache_ttl"
CONF_TEMP_ROUNDING_MODE = "temp_rounding_mode"

# Events fired on the Home Assistant bus
EVENT_THERMOSTAT_MODE = f"{DOMAIN}_thermostat_mode"
EVENT_GATEWAY_LOST = f"{DOMAIN}_gateway_lost"
EVENT_GATEWAY_RESTORED = f"{DOMAIN}_gateway_restored"

# Webhook
WEBHOOK_NAME = "Honeywell Evohome"

# Warning shown on every entity while the access token cannot be refreshed
TOKEN_WARNING = "The Honeywell account token could not be refreshed, please re-authenticate the integration"

# Device capabilities
CAPABILITY_MEASURE_TEMPERATURE = "measure_temperature"
CAPABILITY_TARGET_TEMPERATURE = "target_temperature"
CAPABILITY_THERMOSTAT_MODE = "thermostat_mode"

# Active fault types signalling a low battery
THERMOSTAT_BATTERY_FAULTS = frozenset({"TempControlSystemControllerBatteryLow"})
ZONE_BATTERY_FAULTS = frozenset({"TempZoneSensorLowBattery", "TempZoneActuatorLowBattery"})

# Value reported in IndoorTemperatureStatus when the sensor has no reading
TEMPERATURE_NOT_AVAILABLE = "NotAvailable"


class DeviceKind(StrEnum):
    """Kinds of devices exposed by the integration."""

    ZONE = "zone"
    THERMOSTAT = "thermostat"


class NotificationType(StrEnum):
    """Push notification types forwarded by the cloud adapter."""

    SENSOR_STATUS = "SensorStatus"
    SETPOINT_STATUS = "SetpointStatus"
    QUICK_ACTION = "QuickAction"
    GATEWAY_LOST = "GatewayLost"
    GATEWAY_ALIVE = "GatewayAlive"


class SetpointMode(StrEnum):
    """Setpoint modes accepted by the heatSetpoint endpoint.

    - FOLLOW_SCHEDULE: Clear any manual override
    - PERMANENT_OVERRIDE: Keep the setpoint until changed again
    - TEMPORARY_OVERRIDE: Keep the setpoint until ``timeUntil``
    """

    FOLLOW_SCHEDULE = "FollowSchedule"
    PERMANENT_OVERRIDE = "PermanentOverride"
    TEMPORARY_OVERRIDE = "TemporaryOverride"


class SystemMode(StrEnum):
    """Operating modes of a temperature control system."""

    AUTO = "Auto"
    AUTO_WITH_ECO = "AutoWithEco"
    AUTO_WITH_RESET = "AutoWithReset"
    AWAY = "Away"
    CUSTOM = "Custom"
    DAY_OFF = "DayOff"
    HEATING_OFF = "HeatingOff"


class TemperatureRoundingMode(StrEnum):
    """Rounding applied to measured temperatures before they are shown."""

    NONE = "none"
    SINGLE_DECIMAL = "single_decimal"
    HALF_DEGREE = "half_degree"


class APIDefaults(BaseModel):
    """Default values for API configuration.

    Immutable configuration values for timeouts, caching and token upkeep.
    These values can be overridden per entry (cache) or in YAML (token refresh).
    """

    model_config = {"frozen": True}

    READ_TIMEOUT: int = Field(default=10, description="Timeout for read operations (GET) in seconds")
    WRITE_TIMEOUT: int = Field(default=30, description="Timeout for write operations (PUT/POST) in seconds")
    CACHE_TTL: float = Field(
        default=10.0,
        description="Time-to-live in seconds for cached location status reads",
    )
    TOKEN_REFRESH_INTERVAL: int = Field(
        default=1700,
        description="Seconds between proactive token refreshes, below the 1800s token lifetime",
    )
    TOKEN_REFRESH_DELAY: int = Field(default=30, description="Seconds before the first token refresh")
    POLLING_INTERVAL: int = Field(default=3600, description="Status polling interval per device in seconds")


# Create a default instance for easy access
API_DEFAULTS = APIDefaults()
