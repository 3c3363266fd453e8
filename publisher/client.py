"""Discord client that runs the sync once the gateway is ready."""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

import discord

from processor.errors import GuildCountError, SyncError
from processor.event_processor import EventProcessor
from processor.models import RemoteEvent, RunOutcome
from publisher.discord_manager import DiscordEventManager

logger = logging.getLogger(__name__)


async def run_sync(
    guilds: Sequence[discord.Guild],
    events: List[RemoteEvent],
    processor: EventProcessor,
    timeout: int = 30,
    now: Optional[datetime] = None
) -> RunOutcome:
    """
    Mirror events into the only guild the bot belongs to.

    Args:
        guilds: Guilds the bot is connected to
        events: Merged TruckersMP events
        processor: Processor used to reconcile and format
        timeout: Banner download timeout in seconds
        now: Current instant, defaults to utcnow

    Returns:
        RunOutcome describing success or the error that ended the run
    """
    try:
        if len(guilds) != 1:
            logger.error("This only functions with a bot in only one guild.")
            raise GuildCountError(f"Bot is in {len(guilds)} guilds, expected exactly 1")

        manager = DiscordEventManager(guilds[0], timeout=timeout)
        result = await manager.sync_events(events, processor, now=now)
    except SyncError as e:
        logger.error(
            f"Sync failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return RunOutcome.failed(e)

    return RunOutcome(success=True, message='Sync completed successfully', result=result)


class SyncClient(discord.Client):
    """Client that syncs on the first ready event and then disconnects."""

    def __init__(self, events: List[RemoteEvent], processor: EventProcessor,
                 timeout: int = 30, **options):
        intents = discord.Intents.none()
        intents.guilds = True
        super().__init__(intents=intents, **options)
        self.events = events
        self.processor = processor
        self.timeout = timeout
        self.outcome: Optional[RunOutcome] = None
        self._started = False

    async def on_ready(self):
        # on_ready fires again after a resume; only the first one syncs
        if self._started:
            return
        self._started = True

        logger.info(f"{self.user.name} is connected!")
        try:
            self.outcome = await run_sync(
                self.guilds, self.events, self.processor, timeout=self.timeout
            )
        except Exception as e:
            logger.error(f"Unexpected error during sync: {e}", exc_info=True)
            self.outcome = RunOutcome.failed(e)
        finally:
            await self.close()
