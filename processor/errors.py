"""Exception taxonomy for the TruckersMP sync run."""


class SyncError(Exception):
    """Base class for every error that ends a sync run."""


class ConfigError(SyncError):
    """Required environment configuration is missing or invalid."""


class FetchError(SyncError):
    """Source events could not be retrieved or parsed."""


class UpstreamError(SyncError):
    """The TruckersMP API flagged its own response as an error."""


class GuildCountError(SyncError):
    """The bot is not connected to exactly one guild."""


class PlatformQueryError(SyncError):
    """Listing the guild's scheduled events failed."""


class PlatformPublishError(SyncError):
    """Creating a scheduled event failed."""

    def __init__(self, event_id: int, message: str):
        super().__init__(message)
        self.event_id = event_id


class BannerFetchError(SyncError):
    """A banner image could not be downloaded. Never fatal."""
