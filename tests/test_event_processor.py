"""Unit tests for EventProcessor."""
from datetime import datetime, timedelta, timezone

import pytest

from processor.event_processor import (
    EventProcessor,
    merge_events,
    strip_markdown_images,
    truncate_utf8,
)
from processor.models import RemoteEvent, SyncResult

NOW = datetime(2030, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_event(event_id=1, start_at='2030-06-01 13:00:00', description='Convoy', **kwargs):
    defaults = dict(
        id=event_id,
        name=f'Convoy {event_id}',
        departure_city='Berlin',
        start_at=start_at,
        banner=None,
        description=description,
        url=f'/events/{event_id}'
    )
    defaults.update(kwargs)
    return RemoteEvent(**defaults)


class TestMergeEvents:
    """Test cases for merging created and attending events."""

    def test_created_events_come_first(self):
        a, b, c, d = (make_event(i) for i in range(1, 5))

        assert merge_events([a, b], [c, d]) == [a, b, c, d]

    def test_duplicates_are_kept(self):
        a = make_event(7)

        assert merge_events([a], [a]) == [a, a]


class TestSelectNewEvents:
    """Test cases for reconciling candidates against existing events."""

    def test_unmirrored_future_event_is_selected(self):
        processor = EventProcessor()
        event = make_event(42)

        selected = processor.select_new_events([event], ['Other ### 41 ###'], now=NOW)

        assert selected == [event]

    def test_event_with_marker_is_skipped(self):
        processor = EventProcessor()
        event = make_event(42)
        result = SyncResult()

        selected = processor.select_new_events(
            [event],
            [None, 'Something\n\n### 42 ###'],
            now=NOW,
            result=result
        )

        assert selected == []
        assert result.skipped_existing == 1

    def test_marker_must_match_exactly(self):
        processor = EventProcessor()
        event = make_event(4)

        selected = processor.select_new_events([event], ['### 42 ###', '### 14 ###'], now=NOW)

        assert selected == [event]

    def test_past_event_is_skipped(self):
        processor = EventProcessor()
        result = SyncResult()

        selected = processor.select_new_events(
            [make_event(1, start_at='2020-01-01 10:00:00')], [], now=NOW, result=result
        )

        assert selected == []
        assert result.skipped_past == 1

    def test_event_starting_now_is_skipped(self):
        processor = EventProcessor()

        selected = processor.select_new_events(
            [make_event(1, start_at='2030-06-01 12:00:00')], [], now=NOW
        )

        assert selected == []

    def test_unparsable_start_is_treated_as_past(self):
        processor = EventProcessor()
        result = SyncResult()

        selected = processor.select_new_events(
            [make_event(1, start_at='next tuesday')], [], now=NOW, result=result
        )

        assert selected == []
        assert result.skipped_past == 1

    def test_duplicate_ids_already_mirrored_are_both_skipped(self):
        processor = EventProcessor()
        event = make_event(9)

        selected = processor.select_new_events([event, event], ['### 9 ###'], now=NOW)

        assert selected == []

    def test_unmirrored_duplicate_ids_are_both_selected(self):
        """Dedup is keyed by marker only, not by id collisions in the input."""
        processor = EventProcessor()
        event = make_event(9)

        selected = processor.select_new_events([event, event], [], now=NOW)

        assert selected == [event, event]

    def test_order_is_preserved(self):
        processor = EventProcessor()
        events = [make_event(3), make_event(1), make_event(2)]

        selected = processor.select_new_events(events, ['### 1 ###'], now=NOW)

        assert [e.id for e in selected] == [3, 2]


class TestParseStartTime:
    """Test cases for start time parsing."""

    def test_naive_timestamp_is_read_as_utc(self):
        processor = EventProcessor()

        parsed = processor.parse_start_time('2030-06-01 18:30:00')

        assert parsed == datetime(2030, 6, 1, 18, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize('value', ['', '2030-06-01T18:30:00Z', '2030-13-01 00:00:00'])
    def test_invalid_timestamp_falls_back_to_now(self, value):
        processor = EventProcessor()

        assert processor.parse_start_time(value, NOW) == NOW


class TestStripMarkdownImages:
    """Test cases for markdown image removal."""

    def test_image_with_alt_text(self):
        assert strip_markdown_images('Hello ![alt](http://x/y.png) world') == 'Hello  world'

    def test_image_without_alt_text(self):
        assert strip_markdown_images('A!(http://x/y.png)B') == 'AB'

    def test_links_are_kept(self):
        text = 'Route: [map](http://x/map) and more'

        assert strip_markdown_images(text) == text


class TestTruncateUtf8:
    """Test cases for byte-limited truncation."""

    def test_short_text_is_unchanged(self):
        assert truncate_utf8('abc', 10) == 'abc'

    def test_ascii_cut(self):
        assert truncate_utf8('abcdef', 4) == 'abcd'

    def test_cut_never_splits_a_character(self):
        # 'é' is two bytes, so a 5 byte budget fits only two of them
        assert truncate_utf8('éééé', 5) == 'éé'

    def test_negative_budget_gives_empty_text(self):
        assert truncate_utf8('abc', -3) == ''


class TestBuildDescription:
    """Test cases for description assembly."""

    def test_layout(self):
        processor = EventProcessor()
        event = make_event(5, description='Line one\r\nLine two ![](http://img)')

        description = processor.build_description(event)

        assert description == (
            '[See on TruckersMP](https://truckersmp.com/events/5)\n\n'
            'Line one\nLine two \n\n### 5 ###'
        )

    def test_long_ascii_description_fills_exactly_the_limit(self):
        processor = EventProcessor()
        event = make_event(5, description='a' * 5000)

        description = processor.build_description(event)

        assert len(description.encode('utf-8')) == 1000
        assert description.endswith('\n\n### 5 ###')

    @pytest.mark.parametrize('char', ['é', '€', '🚚'])
    def test_long_multibyte_description_fits_on_a_boundary(self, char):
        processor = EventProcessor()
        event = make_event(123456, description=char * 2000)

        description = processor.build_description(event)
        prefix = '[See on TruckersMP](https://truckersmp.com/events/123456)\n\n'
        suffix = '\n\n### 123456 ###'
        body = description[len(prefix):-len(suffix)]

        assert description.startswith(prefix)
        assert description.endswith(suffix)
        assert body == char * len(body)
        assert 1000 - len(char.encode('utf-8')) < len(description.encode('utf-8')) <= 1000


class TestFormatEvent:
    """Test cases for payload formatting."""

    def test_payload_fields(self):
        processor = EventProcessor()
        event = make_event(
            77,
            start_at='2030-06-02 20:00:00',
            banner='https://static.truckersmp.com/banner.png',
            departure_city='Rotterdam'
        )

        payload = processor.format_event(event, now=NOW)

        assert payload.event_id == 77
        assert payload.name == 'Convoy 77'
        assert payload.location == 'Rotterdam'
        assert payload.start_time == datetime(2030, 6, 2, 20, 0, tzinfo=timezone.utc)
        assert payload.end_time - payload.start_time == timedelta(hours=1)
        assert payload.banner_url == 'https://static.truckersmp.com/banner.png'
        assert payload.image is None
        assert payload.description.endswith('### 77 ###')
