"""Entry point for the TruckersMP to Discord scheduled event sync."""
import json
import logging
import os
import sys
import time
from dataclasses import dataclass

import aiohttp
import discord
from dotenv import load_dotenv

from processor.errors import ConfigError, SyncError
from processor.event_processor import EventProcessor
from processor.models import RunOutcome
from publisher.client import SyncClient
from source.truckersmp_client import TruckersMPClient

logger = logging.getLogger(__name__)


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass
class SyncConfig:
    """Settings read from the environment."""
    tmp_id: str
    discord_token: str
    timeout_seconds: int = 30


def load_config() -> SyncConfig:
    """
    Read configuration from environment variables.

    Raises:
        ConfigError: If TMP_ID or DISCORD_TOKEN is missing, or the timeout
            is not an integer
    """
    tmp_id = os.environ.get('TMP_ID', '').strip()
    if not tmp_id:
        raise ConfigError('Expected a TMP ID in the environment')

    token = os.environ.get('DISCORD_TOKEN', '').strip()
    if not token:
        raise ConfigError('Expected a token in the environment')

    try:
        timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))
    except ValueError as e:
        raise ConfigError(f"TIMEOUT_SECONDS must be an integer: {e}") from e

    return SyncConfig(tmp_id=tmp_id, discord_token=token, timeout_seconds=timeout_seconds)


def run_pipeline() -> RunOutcome:
    """
    Fetch TruckersMP events and mirror them into the Discord guild.

    Returns:
        RunOutcome for the whole run
    """
    start_time = time.time()

    try:
        config = load_config()

        logger.info("Fetching events from TMP")
        source = TruckersMPClient(config.tmp_id, timeout=config.timeout_seconds)
        events = source.fetch_events()
    except SyncError as e:
        logger.error(
            f"Sync aborted before connecting to Discord: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return RunOutcome.failed(e)

    logger.info("Connecting to Discord...")
    client = SyncClient(events, EventProcessor(), timeout=config.timeout_seconds)
    try:
        client.run(config.discord_token, log_handler=None)
    except (discord.DiscordException, aiohttp.ClientError) as e:
        logger.error(
            f"Discord client failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return RunOutcome.failed(e)
    logger.info("Disconnected")

    outcome = client.outcome
    if outcome is None:
        outcome = RunOutcome(
            success=False,
            message='Disconnected before the guild was ready',
            error_type='Disconnected'
        )

    duration = time.time() - start_time
    if outcome.success:
        logger.info(
            "Sync execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'events_fetched': outcome.result.fetched,
                'events_created': outcome.result.created
            }
        )
    return outcome


def main() -> int:
    """Run one sync and return the process exit code."""
    load_dotenv()
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    return run_pipeline().exit_code


def run() -> None:
    """Console script entry point; exits with the code from main."""
    sys.exit(main())


if __name__ == '__main__':
    run()
