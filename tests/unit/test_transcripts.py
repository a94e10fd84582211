"""Unit tests for transcript loading and WebVTT flattening."""

import uuid
from unittest.mock import MagicMock

from label_lifecycle.errors import UpstreamError
from label_lifecycle.models import Video
from label_lifecycle.services.transcripts import fetch_transcript, vtt_to_text

SAMPLE_VTT = """WEBVTT

1
00:00:00.000 --> 00:00:04.000
Hi everyone, quick walkthrough of the new billing page.

2
00:00:04.500 --> 00:00:09.000
First open settings,
then click invoices.
"""


def _video():
    video = MagicMock(spec=Video)
    video.id = uuid.uuid4()
    video.owner_id = uuid.uuid4()
    return video


class TestVttToText:
    def test_strips_header_ids_and_timings(self):
        text = vtt_to_text(SAMPLE_VTT)
        assert text == (
            "Hi everyone, quick walkthrough of the new billing page. "
            "First open settings, then click invoices."
        )

    def test_header_only_is_empty(self):
        assert vtt_to_text("WEBVTT\n\n") == ""


class TestFetchTranscript:
    def test_reads_transcript_key(self):
        video = _video()
        store = MagicMock()
        store.get_text.return_value = SAMPLE_VTT

        text = fetch_transcript(video, store)

        assert text.startswith("Hi everyone")
        store.get_text.assert_called_once_with(f"{video.owner_id}/{video.id}/transcription.vtt")

    def test_missing_object(self):
        store = MagicMock()
        store.get_text.return_value = None

        assert fetch_transcript(_video(), store) is None

    def test_empty_transcript(self):
        store = MagicMock()
        store.get_text.return_value = "WEBVTT\n"

        assert fetch_transcript(_video(), store) is None

    def test_store_error_returns_none(self):
        store = MagicMock()
        store.get_text.side_effect = UpstreamError("S3 unavailable")

        assert fetch_transcript(_video(), store) is None
