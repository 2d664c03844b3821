"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from tally.config import (
    AuthSettings,
    BroadcastSettings,
    QuotaSettings,
    Settings,
    StorageSettings,
    VotingSettings,
)
from tally.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide
    def provide_storage_settings(self, settings: Settings) -> StorageSettings:
        """Provide storage settings."""
        return settings.storage

    @provide
    def provide_quota_settings(self, settings: Settings) -> QuotaSettings:
        """Provide quota settings."""
        return settings.quota

    @provide
    def provide_voting_settings(self, settings: Settings) -> VotingSettings:
        """Provide voting settings."""
        return settings.voting

    @provide
    def provide_broadcast_settings(self, settings: Settings) -> BroadcastSettings:
        """Provide broadcast settings."""
        return settings.broadcast
