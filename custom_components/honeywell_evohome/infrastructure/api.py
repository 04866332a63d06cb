"""API infrastructure for Honeywell Evohome integration.

This module provides decorators for unified API method patterns, handling:
- Path and query building from the decorated method's arguments
- Routing every call through the owner's serial request queue
- Request error / success hooks

Usage:
    @api_get("/location/{location_id}/status", query={"includeTemperatureControlSystems": "true"})
    async def _async_fetch_location_status(self, response_data, location_id: str):
        return response_data

    @api_put("/temperatureZone/{zone_id}/heatSetpoint")
    async def _async_put_setpoint(self, zone_id: str, update: SetpointUpdate) -> dict:
        return update.to_api_payload()

The owning class must provide ``_queue`` (RequestQueue), ``_client``
(HoneywellOAuthClient-like object with ``async_get``/``async_put``) and the
``_handle_request_error`` / ``_handle_request_success`` hooks.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

from .errors import HoneywellError

_LOGGER = logging.getLogger(__name__)


def _bind_arguments(func: Callable, skip: int, self, args: tuple, kwargs: dict) -> dict[str, Any]:
    """Map the call's arguments to parameter names, skipping the leading ``skip`` params."""
    sig = inspect.signature(func)
    params = list(sig.parameters.values())
    bound = sig.bind_partial(*([self] + [None] * (skip - 1)), *args, **kwargs)
    bound.apply_defaults()
    skipped = {p.name for p in params[:skip]}
    return {name: value for name, value in bound.arguments.items() if name not in skipped}


def _format_query(query: dict[str, Any] | None, url_kwargs: dict[str, Any]) -> dict[str, Any] | None:
    if not query:
        return None
    return {
        key: value.format(**url_kwargs) if isinstance(value, str) else value
        for key, value in query.items()
    }


async def _run_queued(owner, method: str, path: str, call: Callable) -> Any:
    """Run a remote call on the owner's queue, invoking its hooks."""

    async def _execute():
        try:
            data = await call()
        except HoneywellError as err:
            # The hook runs before the failure propagates to the submitter
            owner._handle_request_error(err)
            raise
        owner._handle_request_success()
        return data

    _LOGGER.debug("Queueing %s %s", method, path)
    return await owner._queue.submit(_execute)


def api_get(path_template: str, *, query: dict[str, Any] | None = None):
    """Decorator for GET API endpoints.

    Args:
        path_template: Path template with placeholders (e.g., "/location/{location_id}/status").
                       Placeholders are filled from the decorated method's arguments.
        query: Optional query parameters; string values may use the same placeholders.

    The decorated method receives the decoded response as its first argument
    after ``self`` and returns the (optionally reshaped) result.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            # Skip 'self' and 'response_data' (first two params)
            url_kwargs = _bind_arguments(func, 2, self, args, kwargs)
            path = path_template.format(**url_kwargs)
            query_params = _format_query(query, url_kwargs)

            data = await _run_queued(
                self, "GET", path, lambda: self._client.async_get(path, query=query_params)
            )
            _LOGGER.debug("API GET %s returned data: %s", path, data)

            # Call the original function with the response data and remaining args/kwargs
            return await func(self, data, *args, **kwargs)

        return wrapper

    return decorator


def api_put(path_template: str):
    """Decorator for PUT API endpoints.

    Args:
        path_template: Path template with placeholders (e.g., "/temperatureZone/{zone_id}/heatSetpoint").

    The decorated method should build and return the JSON payload dict.
    The PUT itself is queued behind every previously submitted request.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            # Skip 'self' (first param)
            url_kwargs = _bind_arguments(func, 1, self, args, kwargs)
            path = path_template.format(**url_kwargs)

            # Call the decorated function to get payload
            payload = await func(self, *args, **kwargs)
            _LOGGER.debug("PUT %s payload=%s", path, payload)

            return await _run_queued(
                self, "PUT", path, lambda: self._client.async_put(path, json=payload)
            )

        return wrapper

    return decorator
