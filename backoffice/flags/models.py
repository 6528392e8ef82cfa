"""Feature flag models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backoffice.site_settings.codec import is_truthy


class FeatureFlagSet(BaseModel):
    """The feature flags derived from site settings.

    Serialised with the camelCase names the settings API uses.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    beta_features: bool = Field(default=False, alias="betaFeatures")
    new_dashboard: bool = Field(default=False, alias="newDashboard")
    advanced_reports: bool = Field(default=False, alias="advancedReports")
    enable_registration: bool = Field(default=False, alias="enableRegistration")
    enable_guest_checkout: bool = Field(default=False, alias="enableGuestCheckout")

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "FeatureFlagSet":
        """Build flags from a GET /settings payload.

        The nested ``featureFlags`` object wins; the registration and guest
        checkout toggles fall back to their legacy top-level settings.
        """
        nested = settings.get("featureFlags")
        if not isinstance(nested, dict):
            nested = {}

        def pick(name: str, legacy: bool = False) -> bool:
            if name in nested:
                return is_truthy(nested[name])
            return legacy and is_truthy(settings.get(name))

        return cls(
            betaFeatures=pick("betaFeatures"),
            newDashboard=pick("newDashboard"),
            advancedReports=pick("advancedReports"),
            enableRegistration=pick("enableRegistration", legacy=True),
            enableGuestCheckout=pick("enableGuestCheckout", legacy=True),
        )

    def is_enabled(self, name: str) -> bool:
        """Look a flag up by its camelCase or snake_case name; unknown flags are off."""
        by_alias = self.model_dump(by_alias=True)
        if name in by_alias:
            return by_alias[name]
        return self.model_dump().get(name, False)


DEFAULT_FLAGS = FeatureFlagSet()
