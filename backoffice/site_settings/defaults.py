"""Default settings catalogue seeded into an empty settings table."""

from backoffice.site_settings.models import DataType, SettingCategory, SettingEntry

_G = SettingCategory.GENERAL.value
_S = SettingCategory.SECURITY.value
_T = SettingCategory.THEME.value
_F = SettingCategory.FEATURES.value
_E = SettingCategory.EMAIL.value
_A = SettingCategory.ADVANCED.value

DEFAULT_SETTINGS: tuple[SettingEntry, ...] = (
    SettingEntry(key="siteTitle", value="My Site", category=_G, description="Website title"),
    SettingEntry(key="siteDescription", value="", category=_G, description="Website description"),
    SettingEntry(key="contactEmail", value="", category=_G, description="Public contact address"),
    SettingEntry(
        key="maintenanceMode",
        value="false",
        category=_G,
        data_type=DataType.BOOLEAN,
        description="Enable maintenance mode",
    ),
    SettingEntry(
        key="maintenanceMessage",
        value="We are performing scheduled maintenance.",
        category=_G,
        description="Banner shown while in maintenance mode",
    ),
    SettingEntry(key="logoUrl", value="", category=_T, description="Logo image URL"),
    SettingEntry(key="faviconUrl", value="", category=_T, description="Favicon URL"),
    SettingEntry(key="theme", value="system", category=_T, description="light, dark or system"),
    SettingEntry(key="primaryColor", value="#3b82f6", category=_T, description="Primary theme color"),
    SettingEntry(key="secondaryColor", value="#10b981", category=_T, description="Secondary theme color"),
    SettingEntry(key="accentColor", value="#f59e0b", category=_T, description="Accent theme color"),
    SettingEntry(
        key="featureFlags",
        value='{"betaFeatures":false,"newDashboard":false,"advancedReports":false}',
        category=_F,
        data_type=DataType.JSON,
        description="Feature flags",
    ),
    SettingEntry(
        key="enableRegistration",
        value="true",
        category=_F,
        data_type=DataType.BOOLEAN,
        description="Allow self-service registration",
    ),
    SettingEntry(
        key="enableGuestCheckout",
        value="false",
        category=_F,
        data_type=DataType.BOOLEAN,
        description="Allow orders without an account",
    ),
    SettingEntry(
        key="sessionTimeout",
        value="60",
        category=_S,
        data_type=DataType.NUMBER,
        description="Session timeout in minutes",
    ),
    SettingEntry(
        key="maxLoginAttempts",
        value="5",
        category=_S,
        data_type=DataType.NUMBER,
        description="Failed logins before lockout",
    ),
    SettingEntry(
        key="enable2FA",
        value="false",
        category=_S,
        data_type=DataType.BOOLEAN,
        description="Require two-factor authentication for admins",
    ),
    SettingEntry(
        key="auditAllActions",
        value="true",
        category=_S,
        data_type=DataType.BOOLEAN,
        description="Record every admin action in the audit log",
    ),
    SettingEntry(key="smtpHost", value="", category=_E, description="SMTP server host"),
    SettingEntry(
        key="smtpPort",
        value="587",
        category=_E,
        data_type=DataType.NUMBER,
        description="SMTP server port",
    ),
    SettingEntry(key="smtpUser", value="", category=_E, description="SMTP username"),
    SettingEntry(key="smtpPassword", value="", category=_E, description="SMTP password"),
    SettingEntry(key="fromEmail", value="", category=_E, description="Sender address"),
    SettingEntry(key="fromName", value="", category=_E, description="Sender display name"),
    SettingEntry(key="customCss", value="", category=_A, description="Extra CSS injected into pages"),
    SettingEntry(key="customJs", value="", category=_A, description="Extra JS injected into pages"),
    SettingEntry(
        key="allowedFileTypes",
        value='["jpg","png","pdf"]',
        category=_A,
        data_type=DataType.ARRAY,
        description="Upload extensions accepted by the admin console",
    ),
)
