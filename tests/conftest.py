"""Common fixtures for Honeywell Evohome tests."""
import pytest
from unittest.mock import AsyncMock, MagicMock
from homeassistant.core import HomeAssistant
from homeassistant.config_entries import ConfigEntry

from custom_components.honeywell_evohome.models import Thermostat, Zone, ZoneInformation


@pytest.fixture
def mock_hass():
    """Create a mock Home Assistant instance."""
    hass = MagicMock(spec=HomeAssistant)
    hass.data = {}
    hass.loop = None
    hass.bus = MagicMock()
    hass.async_create_task = MagicMock()
    hass.add_job = MagicMock()
    return hass


@pytest.fixture
def mock_config_entry():
    """Create a mock config entry."""
    entry = MagicMock(spec=ConfigEntry)
    entry.entry_id = "test_entry_id"
    entry.data = {"auth_implementation": "honeywell_evohome", "token": {"access_token": "token-123"}}
    entry.options = {}
    return entry


@pytest.fixture
def mock_api():
    """Create a mock HoneywellAPI instance."""
    api = MagicMock()
    api.get_token = MagicMock(return_value={"access_token": "token-123"})
    api.async_get_user = AsyncMock(return_value={"userId": "user-1", "username": "test@example.com"})
    api.async_set_temperature = AsyncMock()
    api.async_reset_temperature = AsyncMock()
    api.async_set_mode = AsyncMock()
    api.async_refresh_token = AsyncMock()
    api.async_get_location_status = AsyncMock(return_value={})
    api.async_get_zone_information = AsyncMock(return_value=ZoneInformation())
    api.invalidate_status = MagicMock()
    return api


@pytest.fixture
def mock_hub():
    """Create a mock HoneywellHub instance."""
    hub = MagicMock()
    hub.async_add_device = AsyncMock()
    hub.async_remove_device = AsyncMock()
    hub.devices = MagicMock(return_value=[])
    hub.devices_of_kind = MagicMock(return_value=[])
    return hub


@pytest.fixture
def zone():
    """Create a zone as listed by the API."""
    return Zone(
        id="zone-1",
        mac="00:D0:2D:AA:BB:CC",
        name="Living room (1234AB)",
        setpoint_capabilities={"minHeatSetpoint": 5.0, "maxHeatSetpoint": 35.0, "valueResolution": 0.5},
        location_id="loc-1",
    )


@pytest.fixture
def thermostat():
    """Create a thermostat as listed by the API."""
    return Thermostat(
        id="sys-1",
        mac="00:D0:2D:AA:BB:CC",
        name="EvoTouch (1234AB)",
        postcode="1234AB",
        zones=[{"zoneId": "zone-1", "name": "Living room"}],
        allowed_system_modes=[
            {"systemMode": "Auto"},
            {"systemMode": "AutoWithEco"},
            {"systemMode": "Away"},
            {"systemMode": "HeatingOff"},
        ],
        location_id="loc-1",
    )


@pytest.fixture
def mock_coordinator():
    """Create a mock coordinator."""
    coordinator = MagicMock()
    coordinator.data = None
    coordinator.async_request_refresh = AsyncMock()
    coordinator.async_add_listener = MagicMock(return_value=lambda: None)
    coordinator.last_update_success = True
    return coordinator


@pytest.fixture
def location_status():
    """Location status tree with one system and one zone."""
    return {
        "locationId": "loc-1",
        "gateways": [
            {
                "gatewayId": "gw-1",
                "temperatureControlSystems": [
                    {
                        "systemId": "sys-1",
                        "systemModeStatus": {"mode": "AutoWithEco", "isPermanent": True},
                        "activeFaults": [],
                        "zones": [
                            {
                                "zoneId": "zone-1",
                                "temperatureStatus": {"temperature": 20.26, "isAvailable": True},
                                "setpointStatus": {"targetHeatTemperature": 21.0, "setpointMode": "FollowSchedule"},
                                "activeFaults": [{"faultType": "TempZoneSensorLowBattery"}],
                            },
                            {
                                "zoneId": "zone-2",
                                "temperatureStatus": {"isAvailable": False},
                                "setpointStatus": {"targetHeatTemperature": 18.0, "setpointMode": "FollowSchedule"},
                                "activeFaults": [],
                            },
                        ],
                    }
                ],
            }
        ],
    }
