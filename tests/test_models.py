"""Unit tests for data models."""
from processor.errors import GuildCountError
from processor.models import RemoteEvent, RunOutcome, SyncResult


class TestRunOutcome:
    """Test cases for RunOutcome."""

    def test_success_exit_code(self):
        outcome = RunOutcome(success=True, message='ok', result=SyncResult())

        assert outcome.exit_code == 0

    def test_failed_from_error(self):
        outcome = RunOutcome.failed(GuildCountError('Bot is in 2 guilds'))

        assert outcome.success is False
        assert outcome.exit_code == 1
        assert outcome.message == 'Bot is in 2 guilds'
        assert outcome.error_type == 'GuildCountError'
        assert outcome.result is None


class TestRemoteEvent:
    """Test cases for RemoteEvent.from_dict."""

    def test_from_dict(self):
        event = RemoteEvent.from_dict({
            'id': 99,
            'name': 'Convoy',
            'departure': {'city': 'Oslo'},
            'start_at': '2030-06-01 18:00:00',
            'banner': '',
            'description': 'Drive safe',
            'url': '/events/99'
        })

        assert event.id == 99
        assert event.departure_city == 'Oslo'
        assert event.banner is None
