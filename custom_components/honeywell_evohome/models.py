"""Data models for Honeywell Evohome integration.

This module provides Pydantic models for structured data representation
with validation and type safety: device identities, the thermostat and
zone listings derived from the installation info, write payloads, cloud
adapter payloads and inbound push notifications.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from .const import NotificationType, SetpointMode, TEMPERATURE_NOT_AVAILABLE


# Base model for all Honeywell data models
class HoneywellModel(BaseModel):
    """Base model for all Honeywell Evohome data structures.

    Provides common configuration for all Pydantic models used in the
    integration. Fields may be populated either by their Python name or by
    the camelCase alias used on the wire.
    """

    model_config = {"validate_assignment": True, "populate_by_name": True}


def to_iso_timestamp(value: datetime) -> str:
    """Format a datetime the way the API expects ``timeUntil``.

    Args:
        value: Aware or naive (assumed UTC) datetime

    Returns:
        UTC ISO 8601 timestamp with millisecond precision and ``Z`` suffix.

    Example:
        >>> to_iso_timestamp(datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc))
        '2024-01-01T12:30:00.000Z'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def has_fault(faults: Iterable[dict[str, Any]] | None, fault_types: Iterable[str]) -> bool:
    """Check whether any active fault has one of the given types.

    Args:
        faults: ``activeFaults`` list from a status response
        fault_types: Fault types to look for

    Returns:
        True if at least one fault matches.
    """
    wanted = set(fault_types)
    return any(fault.get("faultType") in wanted for fault in faults or [])


class DeviceIdentity(HoneywellModel):
    """Identity of one zone or thermostat.

    A thermostat and its zones share the gateway MAC but have distinct ids.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    id: str = Field(..., description="System id (thermostat) or zone id")
    mac: str = Field(..., description="MAC address of the gateway")
    location_id: str = Field(..., alias="locationId", description="Location the device belongs to")


class SetpointCapabilities(HoneywellModel):
    """Setpoint limits of a zone."""

    min_heat_setpoint: float | None = Field(default=None, alias="minHeatSetpoint")
    max_heat_setpoint: float | None = Field(default=None, alias="maxHeatSetpoint")
    value_resolution: float | None = Field(default=None, alias="valueResolution")


class Thermostat(HoneywellModel):
    """A temperature control system as listed by ``getThermostats``."""

    id: str
    mac: str
    name: str
    postcode: str | None = None
    zones: list[dict[str, Any]] = Field(default_factory=list)
    allowed_system_modes: list[dict[str, Any]] = Field(default_factory=list, alias="allowedSystemModes")
    location_id: str = Field(..., alias="locationId")

    @property
    def identity(self) -> DeviceIdentity:
        return DeviceIdentity(id=self.id, mac=self.mac, location_id=self.location_id)

    @property
    def mode_names(self) -> list[str]:
        """Names of the system modes this thermostat accepts."""
        return [mode["systemMode"] for mode in self.allowed_system_modes if "systemMode" in mode]


class Zone(HoneywellModel):
    """A heating zone as listed by ``getZones``."""

    id: str
    mac: str
    name: str
    setpoint_capabilities: SetpointCapabilities = Field(
        default_factory=SetpointCapabilities, alias="setpointCapabilities"
    )
    location_id: str = Field(..., alias="locationId")

    @property
    def identity(self) -> DeviceIdentity:
        return DeviceIdentity(id=self.id, mac=self.mac, location_id=self.location_id)


class ZoneInformation(HoneywellModel):
    """Result of ``getZoneInformation``; either half may be missing."""

    status: dict[str, Any] | None = None
    zone: Zone | None = None


class SetpointUpdate(HoneywellModel):
    """Heat setpoint write for one zone.

    A write without ``until`` is permanent; with ``until`` it is a
    temporary override ending at that instant.
    """

    heat_setpoint_value: float
    until: datetime | None = None

    def to_api_payload(self) -> dict[str, Any]:
        """Build the PUT body.

        Example:
            >>> SetpointUpdate(heat_setpoint_value=21.5).to_api_payload()
            {'heatSetpointValue': 21.5, 'setpointMode': 'PermanentOverride'}
        """
        payload: dict[str, Any] = {
            "heatSetpointValue": self.heat_setpoint_value,
            "setpointMode": SetpointMode.PERMANENT_OVERRIDE.value,
        }
        if self.until is not None:
            payload["setpointMode"] = SetpointMode.TEMPORARY_OVERRIDE.value
            payload["timeUntil"] = to_iso_timestamp(self.until)
        return payload


class ModeUpdate(HoneywellModel):
    """System mode write for one temperature control system."""

    system_mode: str
    until: datetime | None = None

    def to_api_payload(self) -> dict[str, Any]:
        """Build the PUT body.

        Example:
            >>> ModeUpdate(system_mode="Away").to_api_payload()
            {'systemMode': 'Away', 'permanent': True}
        """
        payload: dict[str, Any] = {
            "systemMode": self.system_mode,
            "permanent": True,
        }
        if self.until is not None:
            payload["permanent"] = False
            payload["timeUntil"] = to_iso_timestamp(self.until)
        return payload


class CloudAdapterRegistration(HoneywellModel):
    """Body of the cloud adapter ``/register`` call."""

    user_id: str = Field(..., alias="UserId")
    auth_token: str = Field(..., alias="AuthToken")
    device_mac: str = Field(..., alias="DeviceMac")
    hub_id: str = Field(..., alias="HomeyId")

    def to_api_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class CloudAdapterRemoval(HoneywellModel):
    """Body of the cloud adapter ``/unregister`` call."""

    device_mac: str = Field(..., alias="DeviceMac")
    hub_id: str = Field(..., alias="HomeyId")

    def to_api_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class WebhookEvent(HoneywellModel):
    """Push notification forwarded by the cloud adapter.

    ``notification_type`` is kept as the raw string so unknown types can be
    reported instead of rejected at parse time.
    """

    notification_type: str | None = None
    mac: str | None = None
    device_id: str | None = None
    indoor_temperature: float | None = None
    indoor_temperature_status: str | None = None
    heat_setpoint: float | None = None
    quick_action: str | None = None

    @classmethod
    def from_webhook_body(cls, body: dict[str, Any]) -> WebhookEvent:
        """Create a WebhookEvent from the JSON body of a webhook call.

        Args:
            body: Decoded body ``{"properties": {...}, "data": {...}}``

        Returns:
            Parsed WebhookEvent.
        """
        properties = body.get("properties") or {}
        data = body.get("data") or {}
        return cls(
            notification_type=properties.get("NotificationType"),
            mac=properties.get("MAC"),
            device_id=properties.get("DeviceId"),
            indoor_temperature=data.get("IndoorTemperature"),
            indoor_temperature_status=data.get("IndoorTemperatureStatus"),
            heat_setpoint=data.get("HeatSetpoint"),
            quick_action=data.get("QuickAction"),
        )

    @property
    def known_type(self) -> NotificationType | None:
        """The notification type as enum, or None if unsupported."""
        try:
            return NotificationType(self.notification_type)
        except ValueError:
            return None

    @property
    def temperature_available(self) -> bool:
        """False only when the sensor explicitly reports no reading."""
        if not self.indoor_temperature_status:
            return True
        return self.indoor_temperature_status != TEMPERATURE_NOT_AVAILABLE
