"""Bundled :class:`~pygeotraser.provider.LocationProvider` implementations."""

from pygeotraser.providers.replay import ReplayLocationProvider

__all__ = ["ReplayLocationProvider"]
