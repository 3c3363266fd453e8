"""Discord guild manager for scheduled event operations."""
import asyncio
import logging
from datetime import datetime
from typing import List, Optional

import aiohttp
import discord

from processor.errors import BannerFetchError, PlatformPublishError, PlatformQueryError
from processor.event_processor import EventProcessor
from processor.marker import find_marker_ids
from processor.models import EventPayload, RemoteEvent, SyncResult

logger = logging.getLogger(__name__)


class DiscordEventManager:
    """Manager for the scheduled events of a single guild."""

    AUDIT_REASON = "Created from TruckersMP event"

    def __init__(self, guild: discord.Guild, timeout: int = 30):
        """
        Initialize the manager.

        Args:
            guild: Guild whose scheduled events are mirrored into
            timeout: Banner download timeout in seconds (default: 30)
        """
        self.guild = guild
        self.timeout = timeout
        logger.info(f"Working on guild: {guild.id}")

    async def get_existing_descriptions(self) -> List[Optional[str]]:
        """
        Fetch the descriptions of every scheduled event in the guild.

        Returns:
            List of descriptions (None for events without one)

        Raises:
            PlatformQueryError: If Discord rejects the request
        """
        try:
            events = await self.guild.fetch_scheduled_events(with_counts=False)
        except discord.HTTPException as e:
            logger.error(f"failed to get events: {e}")
            raise PlatformQueryError(f"failed to get events: {e}") from e

        descriptions = [event.description for event in events]
        logger.info(
            f"Guild has {len(events)} scheduled events, "
            f"{len(find_marker_ids(descriptions))} mirrored from TruckersMP"
        )
        return descriptions

    async def sync_events(
        self,
        candidates: List[RemoteEvent],
        processor: EventProcessor,
        now: Optional[datetime] = None
    ) -> SyncResult:
        """
        Create a scheduled event for every candidate not yet mirrored.

        Events are created one at a time; the first failure aborts the rest.

        Args:
            candidates: Merged TruckersMP events
            processor: Processor used to reconcile and format
            now: Current instant, defaults to utcnow

        Returns:
            SyncResult with created and skipped counts

        Raises:
            PlatformQueryError: If existing events cannot be listed
            PlatformPublishError: If an event cannot be created
        """
        result = SyncResult(fetched=len(candidates))
        existing = await self.get_existing_descriptions()
        new_events = processor.select_new_events(candidates, existing, now=now, result=result)

        for event in new_events:
            payload = processor.format_event(event, now=now)
            if payload.banner_url:
                payload.image = await self.download_banner(payload.banner_url)

            await self.create_event(payload)
            result.created += 1
            result.created_ids.append(payload.event_id)

        logger.info(
            f"Sync complete: {result.created} created, "
            f"{result.skipped_existing} already mirrored, "
            f"{result.skipped_past} in the past"
        )
        return result

    async def download_banner(self, url: str) -> Optional[bytes]:
        """Download a banner image, returning None if that fails."""
        try:
            return await self._fetch_banner(url)
        except BannerFetchError as e:
            logger.warning(f"Continuing without banner: {e}")
            return None

    async def _fetch_banner(self, url: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise BannerFetchError(
                            f"Banner {url} returned HTTP {response.status}"
                        )
                    return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise BannerFetchError(f"Failed to download banner {url}: {e}") from e

    async def create_event(self, payload: EventPayload) -> discord.ScheduledEvent:
        """
        Create one external scheduled event.

        Args:
            payload: Formatted event

        Returns:
            The created ScheduledEvent

        Raises:
            PlatformPublishError: If Discord rejects the request
        """
        kwargs = {
            'name': payload.name,
            'start_time': payload.start_time,
            'end_time': payload.end_time,
            'entity_type': discord.EntityType.external,
            'privacy_level': discord.PrivacyLevel.guild_only,
            'location': payload.location,
            'description': payload.description,
            'reason': self.AUDIT_REASON
        }
        if payload.image is not None:
            kwargs['image'] = payload.image

        logger.info(f"Creating event for ID {payload.event_id}")
        try:
            return await self.guild.create_scheduled_event(**kwargs)
        except discord.HTTPException as e:
            logger.error(f"Failed to create new event {payload.event_id}: {e}")
            raise PlatformPublishError(
                payload.event_id, f"Failed to create new event {payload.event_id}: {e}"
            ) from e
