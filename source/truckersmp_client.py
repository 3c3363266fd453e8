"""HTTP client for the TruckersMP VTC events API."""
import logging
from typing import List

import requests

from processor.errors import FetchError, UpstreamError
from processor.event_processor import merge_events
from processor.models import RemoteEvent, SourceResponse

logger = logging.getLogger(__name__)


class TruckersMPClient:
    """Client for the events a VTC has created or is attending."""

    API_BASE_URL = "https://api.truckersmp.com"
    EVENTS_PATH = "/v2/vtc/{id}/events"
    ATTENDING_PATH = "/v2/vtc/{id}/events/attending"

    def __init__(self, vtc_id: str, timeout: int = 30, base_url: str = API_BASE_URL):
        """
        Initialize the TruckersMP client.

        Args:
            vtc_id: TruckersMP VTC identifier
            timeout: HTTP request timeout in seconds (default: 30)
            base_url: API root, overridable for testing
        """
        self.vtc_id = vtc_id
        self.timeout = timeout
        self.base_url = base_url.rstrip('/')

    def fetch_events(self) -> List[RemoteEvent]:
        """
        Fetch created and attending events and merge them.

        Returns:
            Created events followed by attending events

        Raises:
            FetchError: If either request or its parsing fails
            UpstreamError: If either response carries the error flag
        """
        created = self.fetch_created_events()
        attending = self.fetch_attending_events()

        if created.error or attending.error:
            logger.error("Error in returned data!")
            raise UpstreamError(
                f"TruckersMP reported an error (created={created.error}, "
                f"attending={attending.error})"
            )

        events = merge_events(created.events, attending.events)
        logger.info(f"We have {len(events)} events from TruckersMP.")
        return events

    def fetch_created_events(self) -> SourceResponse:
        """Fetch the events created by the VTC."""
        return self._get(self.EVENTS_PATH)

    def fetch_attending_events(self) -> SourceResponse:
        """Fetch the events the VTC is attending."""
        return self._get(self.ATTENDING_PATH)

    def _get(self, path_template: str) -> SourceResponse:
        """
        GET one events endpoint and parse the envelope.

        Args:
            path_template: Path containing an ``{id}`` placeholder

        Returns:
            Parsed SourceResponse

        Raises:
            FetchError: On transport errors, HTTP errors or bad payloads
        """
        url = self.base_url + path_template.format(id=self.vtc_id)
        logger.info(f"Fetching {url}")

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise FetchError(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise FetchError(f"Invalid JSON from {url}") from e

        return SourceResponse.from_dict(data)
