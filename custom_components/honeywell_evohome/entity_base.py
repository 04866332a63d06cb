"""Base entity mixin for all Honeywell Evohome entities.

Provides the device identity, the capability set, the user-visible warning
and the push notification enrollment shared by zone and thermostat entities.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, ClassVar

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo

from .const import DOMAIN, DeviceKind
from .models import DeviceIdentity, has_fault

if TYPE_CHECKING:
    from .honeywell_api import HoneywellAPI
    from .hub import HoneywellHub
    from .models import Thermostat, Zone

_LOGGER = logging.getLogger(__name__)


def get_display_name(name: str, location_id: str, locations: Iterable[dict[str, Any]]) -> str:
    """Prefix a device name with the name of its location, when known.

    Locations may be flat (``{"locationId", "name"}``) or nested under
    ``locationInfo`` as returned by the API.
    """
    for location in locations:
        info = location.get("locationInfo", location)
        if info.get("locationId") == location_id and info.get("name"):
            return f"{info['name']} - {name}"
    return name


class HoneywellBaseEntity:
    """Mixin providing common functionality for all Honeywell entities.

    Subclasses must set ``_device``, ``_api`` and ``_hub`` in their
    constructor. Typical usage::

        class MyEntity(HoneywellBaseEntity, CoordinatorEntity, ClimateEntity):
            kind = DeviceKind.ZONE
            CAPABILITIES = frozenset({CAPABILITY_TARGET_TEMPERATURE})
    """

    kind: ClassVar[DeviceKind]
    CAPABILITIES: ClassVar[frozenset[str]] = frozenset()

    _device: Zone | Thermostat
    _api: HoneywellAPI
    _hub: HoneywellHub
    _warning: str | None = None
    _battery_low: bool | None = None
    _enroll_task: asyncio.Task | None = None

    @property
    def identity(self) -> DeviceIdentity:
        return self._device.identity

    @property
    def api(self) -> HoneywellAPI:
        return self._api

    def has_capability(self, capability: str) -> bool:
        return capability in self.CAPABILITIES

    # ------------------------------------------------------------------
    # Device info
    # ------------------------------------------------------------------

    @property
    def device_info(self) -> DeviceInfo:
        """Return device information for the entity registry."""
        return DeviceInfo(
            identifiers={(DOMAIN, self._device.id)},
            name=self._attr_name,
            manufacturer="Honeywell",
            model="Evohome zone" if self.kind is DeviceKind.ZONE else "Evohome controller",
        )

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        return {
            "device_id": self._device.id,
            "location_id": self._device.location_id,
            "battery_low": self._battery_low,
            "warning": self._warning,
        }

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @callback
    def set_warning(self, warning: str | None) -> None:
        """Show (or with None clear) a warning on the entity."""
        if warning == self._warning:
            return
        self._warning = warning
        self._async_write_state()

    def _update_battery(self, faults: list[dict[str, Any]] | None, fault_types: Iterable[str]) -> None:
        self._battery_low = has_fault(faults, fault_types)

    def _async_write_state(self) -> None:
        if self.hass is not None:
            self.async_write_ha_state()

    # ------------------------------------------------------------------
    # Push notification enrollment
    # ------------------------------------------------------------------

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        # Registration waits behind every queued one; setup does not
        self._enroll_task = self.hass.async_create_task(self._hub.async_add_device(self))

    async def async_will_remove_from_hass(self) -> None:
        if self._enroll_task is not None and not self._enroll_task.done():
            await self._enroll_task
        self._enroll_task = None
        await self._hub.async_remove_device(self)
        await super().async_will_remove_from_hass()
