"""Event processor for reconciling and formatting TruckersMP events."""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from processor.marker import has_marker, make_marker
from processor.models import EventPayload, RemoteEvent, SyncResult

logger = logging.getLogger(__name__)

TMP_BASE_URL = "https://truckersmp.com"
MARKDOWN_IMAGE_REGEX = re.compile(r"!(\[[^\]]*\])?\([^)]*\)")


def merge_events(created: List[RemoteEvent],
                 attending: List[RemoteEvent]) -> List[RemoteEvent]:
    """Concatenate created and attending events, created first. No dedup."""
    return list(created) + list(attending)


def strip_markdown_images(text: str) -> str:
    """Remove every ``![alt](url)`` image reference from markdown text."""
    return MARKDOWN_IMAGE_REGEX.sub('', text)


def truncate_utf8(text: str, max_bytes: int) -> str:
    """
    Cut text so its UTF-8 encoding fits in max_bytes.

    The cut moves back to the nearest character boundary, so a multi-byte
    character is dropped whole rather than split.

    Args:
        text: Text to truncate
        max_bytes: Maximum encoded length; negative values are treated as 0

    Returns:
        Truncated text (unchanged if it already fits)
    """
    encoded = text.encode('utf-8')
    if len(encoded) <= max_bytes:
        return text
    if max_bytes <= 0:
        return ''
    # Input was valid UTF-8, so 'ignore' only drops the partial trailing char
    return encoded[:max_bytes].decode('utf-8', errors='ignore')


class EventProcessor:
    """Decides which TruckersMP events are new and formats them for Discord."""

    START_AT_FORMAT = '%Y-%m-%d %H:%M:%S'
    EVENT_DURATION = timedelta(hours=1)
    MAX_DESCRIPTION_BYTES = 1000

    def __init__(self, base_url: str = TMP_BASE_URL):
        self.base_url = base_url.rstrip('/')

    def select_new_events(
        self,
        candidates: List[RemoteEvent],
        existing_descriptions: Iterable[Optional[str]],
        now: Optional[datetime] = None,
        result: Optional[SyncResult] = None
    ) -> List[RemoteEvent]:
        """
        Pick the candidates that still need a scheduled event.

        A candidate is skipped when any existing description carries its
        marker, or when its start time is not strictly after now. Duplicate ids
        are not collapsed here; only the marker decides.

        Args:
            candidates: Merged TruckersMP events
            existing_descriptions: Descriptions of the guild's scheduled events
            now: Current instant (defaults to utcnow)
            result: Optional SyncResult whose skip counters are updated

        Returns:
            Creation candidates in input order
        """
        now = now or datetime.now(timezone.utc)
        descriptions = [d for d in existing_descriptions if d]
        selected = []

        for event in candidates:
            if any(has_marker(description, event.id) for description in descriptions):
                logger.debug(f"Event ID {event.id} already found, skipping...")
                if result is not None:
                    result.skipped_existing += 1
                continue

            if self.parse_start_time(event.start_at, now) <= now:
                logger.info(f"Skipping event {event.id} as it is in the past.")
                if result is not None:
                    result.skipped_past += 1
                continue

            selected.append(event)

        logger.info(
            f"Selected {len(selected)} new events out of "
            f"{len(candidates)} candidates"
        )
        return selected

    def parse_start_time(self, start_at: str, now: Optional[datetime] = None) -> datetime:
        """
        Parse a TruckersMP start timestamp.

        The source gives a naive ``YYYY-MM-DD HH:MM:SS`` string; it is read as
        UTC. An unparsable value becomes ``now``, which the past-event check
        then always rejects.

        Args:
            start_at: Timestamp string from the API
            now: Fallback instant (defaults to utcnow)

        Returns:
            Timezone-aware UTC datetime
        """
        try:
            parsed = datetime.strptime(start_at, self.START_AT_FORMAT)
        except (TypeError, ValueError):
            logger.warning(f"Invalid start_at value: {start_at!r}")
            return now or datetime.now(timezone.utc)
        return parsed.replace(tzinfo=timezone.utc)

    def build_description(self, event: RemoteEvent) -> str:
        """Assemble link prefix, cleaned body and marker suffix."""
        prefix = f"[See on TruckersMP]({self.base_url}{event.url})\n\n"
        suffix = f"\n\n{make_marker(event.id)}"

        body = strip_markdown_images(event.description.replace('\r', ''))
        budget = (
            self.MAX_DESCRIPTION_BYTES
            - len(prefix.encode('utf-8'))
            - len(suffix.encode('utf-8'))
        )
        body = truncate_utf8(body, budget)

        return f"{prefix}{body}{suffix}"

    def format_event(self, event: RemoteEvent, now: Optional[datetime] = None) -> EventPayload:
        """
        Convert a creation candidate into a Discord event payload.

        Args:
            event: Candidate returned by select_new_events
            now: Fallback instant for unparsable start times

        Returns:
            EventPayload without image bytes (the publisher downloads those)
        """
        start_time = self.parse_start_time(event.start_at, now)
        return EventPayload(
            event_id=event.id,
            name=event.name,
            start_time=start_time,
            end_time=start_time + self.EVENT_DURATION,
            location=event.departure_city,
            description=self.build_description(event),
            banner_url=event.banner
        )
