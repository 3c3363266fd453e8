"""Data models for TruckersMP event syncing."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from processor.errors import FetchError


@dataclass(frozen=True)
class RemoteEvent:
    """Event as published by the TruckersMP API."""
    id: int
    name: str
    departure_city: str
    start_at: str
    banner: Optional[str]
    description: str
    url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RemoteEvent':
        """
        Build a RemoteEvent from one entry of the API ``response`` list.

        Raises:
            FetchError: If a required key is missing or has the wrong type
        """
        try:
            event_id = data['id']
            if not isinstance(event_id, int) or isinstance(event_id, bool) or event_id < 0:
                raise TypeError(f"id must be a non-negative integer, got {event_id!r}")
            departure = data['departure']
            event = cls(
                id=event_id,
                name=str(data['name']),
                departure_city=str(departure['city']),
                start_at=str(data['start_at']),
                banner=data.get('banner') or None,
                description=data.get('description') or '',
                url=str(data['url'])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed event entry: {e!r}") from e
        return event


@dataclass
class SourceResponse:
    """Envelope returned by the TruckersMP events endpoints."""
    error: bool
    events: List[RemoteEvent]

    @classmethod
    def from_dict(cls, data: Any) -> 'SourceResponse':
        if not isinstance(data, dict):
            raise FetchError(f"Expected a JSON object, got {type(data).__name__}")
        if 'error' not in data or not isinstance(data.get('response'), list):
            raise FetchError("Response is missing 'error' or 'response'")
        return cls(
            error=bool(data['error']),
            events=[RemoteEvent.from_dict(item) for item in data['response']]
        )


@dataclass
class EventPayload:
    """Scheduled event ready to be created on Discord."""
    event_id: int
    name: str
    start_time: datetime
    end_time: datetime
    location: str
    description: str
    banner_url: Optional[str] = None
    image: Optional[bytes] = None


@dataclass
class SyncResult:
    """Result of sync operation."""
    fetched: int = 0
    created: int = 0
    skipped_existing: int = 0
    skipped_past: int = 0
    created_ids: List[int] = field(default_factory=list)


@dataclass
class RunOutcome:
    """Terminal outcome of one sync run."""
    success: bool
    message: str
    result: Optional[SyncResult] = None
    error_type: Optional[str] = None

    @property
    def exit_code(self) -> int:
        """Process exit code: 0 on success, 1 on any failure."""
        return 0 if self.success else 1

    @classmethod
    def failed(cls, error: Exception) -> 'RunOutcome':
        """
        Build a failed outcome from the error that ended the run.

        Args:
            error: Exception that aborted the sync

        Returns:
            RunOutcome with the error message and its type name
        """
        return cls(success=False, message=str(error), error_type=type(error).__name__)
