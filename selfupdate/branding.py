"""Centralized branding constants, single source of truth for the version."""


class AppBranding:
    """Application identity constants."""

    APP_NAME = "SelfUpdate"
    VERSION = "0.1.0"

    @classmethod
    def banner(cls) -> str:
        return f"{cls.APP_NAME} v{cls.VERSION}"

    @classmethod
    def user_agent(cls) -> str:
        return f"{cls.APP_NAME}/{cls.VERSION}"
