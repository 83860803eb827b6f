from domain.models import SilenceEvent, SilenceEventKind
from domain.silence import SilenceLogParser, parse_silence_events, parse_silence_line

from conftest import EXAMPLE_DETECTION_LOG


class TestParseSilenceLine:
    def test_start_line(self):
        event = parse_silence_line("[silencedetect @ 0x55d] silence_start: 12.3456")
        assert event == SilenceEvent(SilenceEventKind.START, 12.3456)

    def test_end_line_with_duration_suffix(self):
        event = parse_silence_line("[silencedetect @ 0x55d] silence_end: 14.5 | silence_duration: 2.1544")
        assert event.kind is SilenceEventKind.END
        assert event.timestamp == 14.5

    def test_integer_timestamp(self):
        assert parse_silence_line("silence_start: 3").timestamp == 3.0

    def test_negative_start_is_clamped_to_zero(self):
        event = parse_silence_line("[silencedetect @ 0x1] silence_start: -0.00133333")
        assert event.timestamp == 0.0

    def test_unrelated_lines_are_ignored(self):
        assert parse_silence_line("size=N/A time=00:00:05.00 bitrate=N/A") is None
        assert parse_silence_line("") is None
        assert parse_silence_line("silence_duration: 0.5") is None


class TestSilenceLogParser:
    def test_events_in_arrival_order(self):
        events = parse_silence_events(EXAMPLE_DETECTION_LOG)
        assert [(e.kind.value, e.timestamp) for e in events] == [
            ("start", 2.0), ("end", 2.5), ("start", 6.0), ("end", 6.1),
        ]

    def test_feed_returns_matched_event_only(self):
        parser = SilenceLogParser()
        assert parser.feed("Stream #0:0: Audio: pcm_s16le") is None
        assert parser.feed("silence_start: 1.0") is not None
        assert len(parser.events) == 1

    def test_events_property_is_a_copy(self):
        parser = SilenceLogParser()
        parser.feed("silence_start: 1.0")
        parser.events.clear()
        assert len(parser.events) == 1

    def test_no_events(self):
        assert parse_silence_events(["nothing", "to", "see"]) == []
