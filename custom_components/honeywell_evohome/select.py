"""Select platform for Honeywell Evohome integration (system mode of each thermostat)."""
import logging
from datetime import time

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    CAPABILITY_THERMOSTAT_MODE,
    DATA_HUB,
    DOMAIN,
    EVENT_THERMOSTAT_MODE,
    THERMOSTAT_BATTERY_FAULTS,
    DeviceKind,
)
from .coordinator import HoneywellThermostatCoordinator
from .entity_base import HoneywellBaseEntity
from .infrastructure import HoneywellError
from .models import Thermostat
from .time_helper import override_until

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
):
    data = hass.data[DOMAIN][entry.entry_id]
    hub = hass.data[DOMAIN][DATA_HUB]

    async_add_entities(
        HoneywellThermostatModeSelect(coordinator, data["api"], hub, coordinator.thermostat, entry, name)
        for coordinator, name in data["thermostats"]
    )


class HoneywellThermostatModeSelect(
    HoneywellBaseEntity, CoordinatorEntity[HoneywellThermostatCoordinator], SelectEntity
):
    """Operating mode of a temperature control system."""

    kind = DeviceKind.THERMOSTAT
    CAPABILITIES = frozenset({CAPABILITY_THERMOSTAT_MODE})

    _attr_icon = "mdi:thermostat"

    def __init__(self, coordinator, api, hub, thermostat: Thermostat, entry: ConfigEntry, name: str):
        super().__init__(coordinator)
        self._api = api
        self._hub = hub
        self._device = thermostat
        self._entry = entry

        self._attr_unique_id = f"{DOMAIN}_thermostat_{thermostat.id}"
        self._attr_name = name
        self._attr_options = thermostat.mode_names
        self._attr_current_option = None

        if coordinator.data:
            self._apply_system_status(coordinator.data)

    @property
    def current_mode(self) -> str | None:
        return self._attr_current_option

    @callback
    def _handle_coordinator_update(self) -> None:
        """Handle updated data from the coordinator."""
        if self.coordinator.data:
            self._apply_system_status(self.coordinator.data)
        super()._handle_coordinator_update()

    def _apply_system_status(self, system: dict) -> None:
        mode = (system.get("systemModeStatus") or {}).get("mode")
        if mode:
            self._set_mode(mode)
        self._update_battery(system.get("activeFaults"), THERMOSTAT_BATTERY_FAULTS)

    def _set_mode(self, mode: str) -> None:
        if mode not in self._attr_options:
            self._attr_options = [*self._attr_options, mode]
        self._attr_current_option = mode

    @callback
    def set_mode(self, mode: str) -> None:
        """Show a mode reported by the system."""
        _LOGGER.debug("Update mode of %s: %s", self._device.id, mode)
        self._set_mode(mode)
        self._async_write_state()

    async def async_select_option(self, option: str) -> None:
        """Set the mode permanently and announce the change."""
        try:
            await self.async_override_mode(option)
        except HoneywellError as e:
            raise HomeAssistantError(f"Error setting mode of {self.entity_id}: {e}") from e

        self.set_mode(option)
        self.hass.bus.async_fire(
            EVENT_THERMOSTAT_MODE,
            {"entity_id": self.entity_id, "device_id": self._device.id, "mode": option},
        )

    async def async_override_mode(
        self, mode: str, time_of_day: str | time | None = None, hours: float | None = None
    ) -> None:
        """Change the mode, permanently or for a window.

        The entity state follows once the system reports the change.
        """
        until = override_until(time_of_day, hours)
        if until is None:
            _LOGGER.debug("Set mode of %s: %s", self._device.id, mode)
        else:
            _LOGGER.debug("Temporarily override mode of %s: %s until %s", self._device.id, mode, until)
        await self._api.async_set_mode(self._device.id, mode, until)
