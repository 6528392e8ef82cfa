"""Feature flags derived from the featureFlags setting."""

from backoffice.flags.client import FLAGS_KEY, TIMESTAMP_KEY, FeatureFlagClient
from backoffice.flags.models import DEFAULT_FLAGS, FeatureFlagSet

__all__ = [
    "DEFAULT_FLAGS",
    "FLAGS_KEY",
    "FeatureFlagClient",
    "FeatureFlagSet",
    "TIMESTAMP_KEY",
]
