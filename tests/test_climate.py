"""Tests for Honeywell zone climate entities."""
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from homeassistant.components.climate import HVACMode
from homeassistant.exceptions import HomeAssistantError

from custom_components.honeywell_evohome.climate import HoneywellZoneClimate, async_setup_entry
from custom_components.honeywell_evohome.const import (
    CAPABILITY_MEASURE_TEMPERATURE,
    CAPABILITY_TARGET_TEMPERATURE,
    CAPABILITY_THERMOSTAT_MODE,
    DATA_HUB,
    DOMAIN,
)
from custom_components.honeywell_evohome.infrastructure.errors import RemoteRequestError
from custom_components.honeywell_evohome.models import ZoneInformation


@pytest.fixture
def climate(mock_hass, mock_coordinator, mock_api, mock_hub, zone, mock_config_entry):
    """Create a zone entity with state writes mocked."""
    entity = HoneywellZoneClimate(mock_coordinator, mock_api, mock_hub, zone, mock_config_entry, "Home - Living room")
    entity.hass = mock_hass
    entity.entity_id = "climate.home_living_room"
    entity.async_write_ha_state = MagicMock()
    return entity


class TestHoneywellZoneClimate:
    """Test HoneywellZoneClimate class."""

    def test_initialization(self, climate):
        """Test that the zone exposes its setpoint limits."""
        assert climate.unique_id == "honeywell_evohome_zone_zone-1"
        assert climate.name == "Home - Living room"
        assert climate.hvac_modes == [HVACMode.HEAT]
        assert climate.hvac_mode == HVACMode.HEAT
        assert climate.min_temp == 5.0
        assert climate.max_temp == 35.0
        assert climate.target_temperature_step == 0.5
        assert climate.current_temperature is None

    def test_capabilities(self, climate):
        """Test the capability set of a zone."""
        assert climate.has_capability(CAPABILITY_MEASURE_TEMPERATURE)
        assert climate.has_capability(CAPABILITY_TARGET_TEMPERATURE)
        assert not climate.has_capability(CAPABILITY_THERMOSTAT_MODE)

    def test_initial_state_from_coordinator(
        self, mock_coordinator, mock_api, mock_hub, zone, mock_config_entry, location_status
    ):
        """Test that the first refresh is applied on creation."""
        zone_status = location_status["gateways"][0]["temperatureControlSystems"][0]["zones"][0]
        mock_coordinator.data = ZoneInformation(status=zone_status, zone=zone)

        climate = HoneywellZoneClimate(mock_coordinator, mock_api, mock_hub, zone, mock_config_entry, "Zone")

        assert climate.current_temperature == 20.26
        assert climate.target_temperature == 21.0
        assert climate.extra_state_attributes["battery_low"] is True

    def test_unavailable_temperature_is_not_applied(self, climate, mock_coordinator, location_status):
        """Test that a status without a reading keeps the last measured value."""
        climate.set_measured_temperature(19.0)
        zone_status = location_status["gateways"][0]["temperatureControlSystems"][0]["zones"][1]
        mock_coordinator.data = ZoneInformation(status=zone_status)

        climate._handle_coordinator_update()

        assert climate.current_temperature == 19.0
        assert climate.target_temperature == 18.0
        assert climate.extra_state_attributes["battery_low"] is False

    def test_set_measured_temperature(self, climate):
        """Test pushing a measured temperature."""
        climate.set_measured_temperature(21.25)

        assert climate.current_temperature == 21.25
        climate.async_write_ha_state.assert_called_once()

    def test_set_measured_temperature_none(self, climate):
        """Test that None clears the measured temperature."""
        climate.set_measured_temperature(21.25)
        climate.set_measured_temperature(None)

        assert climate.current_temperature is None

    def test_rounding_mode(self, climate, mock_config_entry):
        """Test that measured temperatures follow the rounding option."""
        mock_config_entry.options = {"temp_rounding_mode": "half_degree"}

        climate.set_measured_temperature(20.26)
        assert climate.current_temperature == 20.5

        mock_config_entry.options = {"temp_rounding_mode": "single_decimal"}
        climate.apply_rounding_mode()
        assert climate.current_temperature == 20.3

    def test_target_temperature_widens_limits(self, climate):
        """Test that a setpoint outside the limits widens them."""
        climate.set_target_temperature(40.0)
        assert climate.max_temp == 40.0
        assert climate.target_temperature == 40.0

        climate.set_target_temperature(4.0)
        assert climate.min_temp == 4.0

    def test_warning_attribute(self, climate):
        """Test that a warning is shown and cleared."""
        climate.set_warning("token expired")
        assert climate.extra_state_attributes["warning"] == "token expired"

        climate.set_warning(None)
        assert climate.extra_state_attributes["warning"] is None
        assert climate.async_write_ha_state.call_count == 2

    def test_device_info(self, climate):
        """Test device registry info."""
        info = climate.device_info
        assert info["identifiers"] == {(DOMAIN, "zone-1")}
        assert info["manufacturer"] == "Honeywell"

    @pytest.mark.asyncio
    async def test_set_temperature(self, climate, mock_api):
        """Test that a set temperature is a permanent override."""
        await climate.async_set_temperature(temperature=22.5)

        mock_api.async_set_temperature.assert_awaited_once_with("zone-1", 22.5, None)
        assert climate.target_temperature == 22.5

    @pytest.mark.asyncio
    async def test_set_temperature_error(self, climate, mock_api):
        """Test that API failures are raised as HomeAssistantError."""
        mock_api.async_set_temperature = AsyncMock(
            side_effect=RemoteRequestError("PUT", "/temperatureZone/zone-1/heatSetpoint", 500)
        )

        with pytest.raises(HomeAssistantError):
            await climate.async_set_temperature(temperature=22.5)
        assert climate.target_temperature is None

    @pytest.mark.asyncio
    async def test_override_temperature_for_hours(self, climate, mock_api):
        """Test a temporary override."""
        await climate.async_override_temperature(19.0, hours=2)

        zone_id, value, until = mock_api.async_set_temperature.await_args.args
        assert (zone_id, value) == ("zone-1", 19.0)
        assert isinstance(until, datetime)

    @pytest.mark.asyncio
    async def test_reset_temperature(self, climate, mock_api, mock_coordinator):
        """Test that a reset refreshes the zone from the API."""
        await climate.async_reset_temperature()

        mock_api.async_reset_temperature.assert_awaited_once_with("zone-1")
        mock_api.invalidate_status.assert_called_once_with("loc-1")
        mock_coordinator.async_request_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsupported_hvac_mode(self, climate):
        """Test that only heat is accepted."""
        await climate.async_set_hvac_mode(HVACMode.HEAT)
        with pytest.raises(HomeAssistantError):
            await climate.async_set_hvac_mode(HVACMode.OFF)


@pytest.mark.asyncio
async def test_async_setup_entry(mock_hass, mock_config_entry, mock_coordinator, mock_api, mock_hub, zone):
    """Test that one entity is created per zone."""
    mock_coordinator.zone = zone
    mock_hass.data = {
        DOMAIN: {
            DATA_HUB: mock_hub,
            mock_config_entry.entry_id: {"api": mock_api, "zones": [(mock_coordinator, "Home - Living room")]},
        }
    }
    async_add_entities = MagicMock()

    await async_setup_entry(mock_hass, mock_config_entry, async_add_entities)

    entities = list(async_add_entities.call_args.args[0])
    assert len(entities) == 1
    assert entities[0].identity == zone.identity
