"""Climate platform for Honeywell Evohome integration (one entity per zone)."""
import logging
from datetime import time
from typing import Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    CAPABILITY_MEASURE_TEMPERATURE,
    CAPABILITY_TARGET_TEMPERATURE,
    CONF_TEMP_ROUNDING_MODE,
    DATA_HUB,
    DOMAIN,
    ZONE_BATTERY_FAULTS,
    DeviceKind,
    TemperatureRoundingMode,
)
from .coordinator import HoneywellZoneCoordinator
from .entity_base import HoneywellBaseEntity
from .infrastructure import HoneywellError
from .models import Zone, ZoneInformation
from .temperature_helper import round_temperature, target_temperature_options
from .time_helper import override_until

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Honeywell zone climate entities."""
    data = hass.data[DOMAIN][config_entry.entry_id]
    hub = hass.data[DOMAIN][DATA_HUB]

    async_add_entities(
        HoneywellZoneClimate(coordinator, data["api"], hub, coordinator.zone, config_entry, name)
        for coordinator, name in data["zones"]
    )


class HoneywellZoneClimate(HoneywellBaseEntity, CoordinatorEntity[HoneywellZoneCoordinator], ClimateEntity):
    """A heating zone: measured temperature and a heat setpoint."""

    kind = DeviceKind.ZONE
    CAPABILITIES = frozenset({CAPABILITY_MEASURE_TEMPERATURE, CAPABILITY_TARGET_TEMPERATURE})

    _attr_hvac_modes = [HVACMode.HEAT]
    _attr_hvac_mode = HVACMode.HEAT
    _attr_supported_features = ClimateEntityFeature.TARGET_TEMPERATURE
    _attr_temperature_unit = UnitOfTemperature.CELSIUS

    def __init__(self, coordinator, api, hub, zone: Zone, entry: ConfigEntry, name: str):
        """Initialize the zone entity."""
        super().__init__(coordinator)
        self._api = api
        self._hub = hub
        self._device = zone
        self._entry = entry
        # Last measured value before rounding, re-applied when the rounding mode changes
        self._raw_temperature: Any = None

        self._attr_unique_id = f"{DOMAIN}_zone_{zone.id}"
        self._attr_name = name
        self._apply_setpoint_capabilities(zone)

        if coordinator.data:
            self._apply_zone_information(coordinator.data)

    @property
    def rounding_mode(self) -> TemperatureRoundingMode:
        return TemperatureRoundingMode(
            self._entry.options.get(CONF_TEMP_ROUNDING_MODE, TemperatureRoundingMode.NONE)
        )

    # ------------------------------------------------------------------
    # State updates (polling and push)
    # ------------------------------------------------------------------

    @callback
    def _handle_coordinator_update(self) -> None:
        """Handle updated data from the coordinator."""
        if self.coordinator.data:
            self._apply_zone_information(self.coordinator.data)
        super()._handle_coordinator_update()

    def _apply_zone_information(self, info: ZoneInformation) -> None:
        if info.zone is not None:
            self._apply_setpoint_capabilities(info.zone)

        status = info.status
        if not status:
            return
        setpoint = (status.get("setpointStatus") or {}).get("targetHeatTemperature")
        if setpoint is not None:
            self._set_target_temperature(float(setpoint))
        temperature_status = status.get("temperatureStatus") or {}
        if temperature_status.get("isAvailable"):
            self._set_measured_temperature(temperature_status.get("temperature"))
        self._update_battery(status.get("activeFaults"), ZONE_BATTERY_FAULTS)

    def _apply_setpoint_capabilities(self, zone: Zone) -> None:
        options = target_temperature_options(zone)
        if options["min"] is not None:
            self._attr_min_temp = options["min"]
        if options["max"] is not None:
            self._attr_max_temp = options["max"]
        if options["step"] is not None:
            self._attr_target_temperature_step = options["step"]

    def _set_measured_temperature(self, value: Any, rounding_mode=None) -> None:
        self._raw_temperature = value
        self._attr_current_temperature = round_temperature(value, rounding_mode or self.rounding_mode)

    def _set_target_temperature(self, value: float) -> None:
        # A pushed setpoint outside the known limits widens them
        if value > self.max_temp:
            _LOGGER.debug("Widening max temperature of %s to %s", self._device.id, value)
            self._attr_max_temp = value
        if value < self.min_temp:
            _LOGGER.debug("Widening min temperature of %s to %s", self._device.id, value)
            self._attr_min_temp = value
        self._attr_target_temperature = value

    @callback
    def set_measured_temperature(self, value: Any, rounding_mode=None) -> None:
        """Show a measured temperature, None when the sensor has no reading."""
        _LOGGER.debug("Update measured temperature of %s: %s", self._device.id, value)
        self._set_measured_temperature(value, rounding_mode)
        self._async_write_state()

    @callback
    def set_target_temperature(self, value: float) -> None:
        """Show a setpoint reported by the system."""
        _LOGGER.debug("Update target temperature of %s: %s", self._device.id, value)
        self._set_target_temperature(value)
        self._async_write_state()

    @callback
    def apply_rounding_mode(self) -> None:
        """Re-round the last measured temperature with the current option."""
        if self._raw_temperature is not None:
            self.set_measured_temperature(self._raw_temperature)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Zones only heat; there is nothing to switch."""
        if hvac_mode != HVACMode.HEAT:
            raise HomeAssistantError(f"Unsupported HVAC mode for a Honeywell zone: {hvac_mode}")

    async def async_set_temperature(self, **kwargs) -> None:
        """Set a permanent setpoint."""
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        try:
            await self.async_override_temperature(temperature)
        except HoneywellError as e:
            raise HomeAssistantError(f"Error setting temperature of {self.entity_id}: {e}") from e

    async def async_override_temperature(
        self, temperature: float, time_of_day: str | time | None = None, hours: float | None = None
    ) -> None:
        """Override the setpoint, permanently or for a window.

        Args:
            temperature: New setpoint
            time_of_day: Override until the next occurrence of this clock time
            hours: Override for this many hours (wins over ``time_of_day``)
        """
        until = override_until(time_of_day, hours)
        if until is None:
            _LOGGER.debug("Set temperature of %s: %s", self._device.id, temperature)
        else:
            _LOGGER.debug("Temporarily override temperature of %s: %s until %s", self._device.id, temperature, until)

        await self._api.async_set_temperature(self._device.id, temperature, until)
        self.set_target_temperature(temperature)

    async def async_reset_temperature(self) -> None:
        """Return the zone to its schedule."""
        await self._api.async_reset_temperature(self._device.id)
        self._api.invalidate_status(self._device.location_id)
        await self.coordinator.async_request_refresh()
