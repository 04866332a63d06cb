"""Tests for Honeywell Evohome integration setup."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from homeassistant.exceptions import ConfigEntryNotReady

from custom_components.honeywell_evohome import (
    CONFIG_SCHEMA,
    async_setup_entry,
    async_unload_entry,
    async_update_options,
)
from custom_components.honeywell_evohome.const import DATA_HUB, DOMAIN, DeviceKind
from custom_components.honeywell_evohome.infrastructure.errors import RemoteRequestError

INIT = "custom_components.honeywell_evohome"


def test_config_schema_defaults():
    """Test the YAML defaults."""
    config = CONFIG_SCHEMA({DOMAIN: {"cloud_adapter_url": "https://adapter.example/api", "cloud_adapter_code": "x"}})

    assert config[DOMAIN]["token_refresh_interval"] == 1700
    assert config[DOMAIN]["token_refresh_delay"] == 30


@pytest.fixture
def setup_mocks(mock_api, zone, thermostat):
    """Patch the OAuth session, the API and the coordinators."""
    mock_api.async_get_locations = AsyncMock(
        return_value=[{"locationInfo": {"locationId": "loc-1", "name": "Home"}}]
    )
    mock_api.async_get_thermostats = AsyncMock(return_value=[thermostat])
    mock_api.async_get_zones = AsyncMock(return_value=[zone])
    mock_api.async_shutdown = AsyncMock()

    def coordinator(*args):
        instance = MagicMock()
        instance.async_config_entry_first_refresh = AsyncMock()
        return instance

    with (
        patch(
            f"{INIT}.config_entry_oauth2_flow.async_get_config_entry_implementation",
            AsyncMock(return_value=MagicMock()),
        ),
        patch(f"{INIT}.config_entry_oauth2_flow.OAuth2Session"),
        patch(f"{INIT}.HoneywellOAuthClient"),
        patch(f"{INIT}.HoneywellAPI", return_value=mock_api),
        patch(f"{INIT}.HoneywellThermostatCoordinator", side_effect=coordinator),
        patch(f"{INIT}.HoneywellZoneCoordinator", side_effect=coordinator),
    ):
        yield mock_api


@pytest.mark.asyncio
async def test_setup_entry(mock_hass, mock_config_entry, mock_hub, setup_mocks):
    """Test that devices are listed and named after their location."""
    mock_hass.data = {DOMAIN: {DATA_HUB: mock_hub}}
    mock_hass.config_entries = MagicMock()
    mock_hass.config_entries.async_forward_entry_setups = AsyncMock()

    assert await async_setup_entry(mock_hass, mock_config_entry) is True

    data = mock_hass.data[DOMAIN][mock_config_entry.entry_id]
    assert data["api"] is setup_mocks
    assert [name for _, name in data["thermostats"]] == ["Home - EvoTouch (1234AB)"]
    assert [name for _, name in data["zones"]] == ["Home - Living room (1234AB)"]
    mock_hass.config_entries.async_forward_entry_setups.assert_awaited_once()


@pytest.mark.asyncio
async def test_setup_entry_not_ready(mock_hass, mock_config_entry, mock_hub, setup_mocks):
    """Test that listing errors retry the setup later."""
    mock_hass.data = {DOMAIN: {DATA_HUB: mock_hub}}
    setup_mocks.async_get_locations = AsyncMock(side_effect=RemoteRequestError("GET", "/location", 503))

    with pytest.raises(ConfigEntryNotReady):
        await async_setup_entry(mock_hass, mock_config_entry)

    setup_mocks.async_shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_unauthorized_starts_reauth(mock_hass, mock_config_entry, mock_hub, setup_mocks):
    """Test that a 401 answer asks the user to sign in again."""
    mock_hass.data = {DOMAIN: {DATA_HUB: mock_hub}}
    mock_hass.config_entries = MagicMock()
    mock_hass.config_entries.async_forward_entry_setups = AsyncMock()
    await async_setup_entry(mock_hass, mock_config_entry)

    setup_mocks.on_request_error(RemoteRequestError("GET", "/userAccount", 500))
    mock_config_entry.async_start_reauth.assert_not_called()

    setup_mocks.on_request_error(RemoteRequestError("GET", "/userAccount", 401))
    mock_config_entry.async_start_reauth.assert_called_once_with(mock_hass)

    setup_mocks.on_request_success()
    mock_hub.clear_warnings.assert_called_once_with(setup_mocks)


@pytest.mark.asyncio
async def test_update_options(mock_hass, mock_config_entry, mock_api, mock_hub):
    """Test that option changes apply without a reload."""
    zone_entity = MagicMock()
    zone_entity.api = mock_api
    mock_hub.devices_of_kind = MagicMock(return_value=[zone_entity])
    mock_hass.data = {DOMAIN: {DATA_HUB: mock_hub, mock_config_entry.entry_id: {"api": mock_api}}}
    mock_config_entry.options = {"cache_ttl": 30, "temp_rounding_mode": "half_degree"}

    await async_update_options(mock_hass, mock_config_entry)

    mock_api.set_cache_ttl.assert_called_once_with(30)
    mock_hub.devices_of_kind.assert_called_once_with(DeviceKind.ZONE)
    zone_entity.apply_rounding_mode.assert_called_once()


@pytest.mark.asyncio
async def test_unload_entry(mock_hass, mock_config_entry, mock_api):
    """Test that unloading shuts down the API queue."""
    mock_api.async_shutdown = AsyncMock()
    mock_hass.data = {DOMAIN: {mock_config_entry.entry_id: {"api": mock_api}}}
    mock_hass.config_entries = MagicMock()
    mock_hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)

    assert await async_unload_entry(mock_hass, mock_config_entry) is True

    mock_api.async_shutdown.assert_awaited_once()
    assert mock_config_entry.entry_id not in mock_hass.data[DOMAIN]
