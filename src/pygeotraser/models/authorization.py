"""Location permission states and requested levels."""

from __future__ import annotations

from enum import StrEnum


class PermissionLevel(StrEnum):
    """Permission level a component asks the provider for.

    ``ALWAYS`` exceeds ``WHEN_IN_USE``.
    """

    WHEN_IN_USE = "whenInUse"
    ALWAYS = "always"


class AuthorizationState(StrEnum):
    """Device location permission state as reported by the provider."""

    UNDETERMINED = "undetermined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED_ALWAYS = "authorizedAlways"
    AUTHORIZED_WHEN_IN_USE = "authorizedWhenInUse"

    @property
    def is_denied(self) -> bool:
        """Whether the user (or policy) refused location access."""
        return self in (AuthorizationState.DENIED, AuthorizationState.RESTRICTED)

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationState.AUTHORIZED_ALWAYS, AuthorizationState.AUTHORIZED_WHEN_IN_USE)

    def satisfies(self, level: PermissionLevel) -> bool:
        """Whether this state already grants *level* (or more)."""
        if self is AuthorizationState.AUTHORIZED_ALWAYS:
            return True
        if self is AuthorizationState.AUTHORIZED_WHEN_IN_USE:
            return level is PermissionLevel.WHEN_IN_USE
        return False
