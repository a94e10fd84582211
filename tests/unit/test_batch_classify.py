# tests/unit/test_batch_classify.py
"""
Unit tests for batch and single-video classification.

Covers:
- classify_all_videos() dry run, skips, errors and budget
- classify_and_assign() seeding and conditional auto-assign
- classify_video_by_id() preconditions
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest

from label_lifecycle.errors import NotFoundError, PermissionDenied, ValidationError
from label_lifecycle.models import Video
from label_lifecycle.services.auto_assigner import AutoAssignResult
from label_lifecycle.services.batch_classify import classify_all_videos
from label_lifecycle.services.label_classifier import ClassificationResult, LabelSuggestion
from label_lifecycle.services.video_classification import (
    VideoClassificationOutcome,
    classify_and_assign,
    classify_video_by_id,
)

BATCH = "label_lifecycle.services.batch_classify"
SINGLE = "label_lifecycle.services.video_classification"

LONG_TRANSCRIPT = "In this call we go through the quarterly numbers for the sales team in detail."


def _video(name="Weekly sync", status="complete"):
    video = MagicMock(spec=Video)
    video.id = uuid.uuid4()
    video.owner_id = uuid.uuid4()
    video.organization_id = uuid.uuid4()
    video.name = name
    video.duration_seconds = 120.0
    video.ai_summary = None
    video.transcription_status = status
    return video


def _success(*assigned):
    return VideoClassificationOutcome(
        classification=ClassificationResult(
            success=True, labels=[LabelSuggestion(n, 0.9) for n in assigned]
        ),
        assignment=AutoAssignResult(assigned=list(assigned)),
    )


class TestClassifyAllVideos:
    def test_dry_run_writes_nothing(self):
        videos = [_video("A"), _video("B")]
        mock_db = MagicMock()

        with patch(f"{BATCH}.find_unclassified_videos", return_value=videos), \
             patch(f"{BATCH}.classify_and_assign") as mock_classify, \
             patch(f"{BATCH}.fetch_transcript") as mock_fetch:
            report = classify_all_videos(mock_db, dry_run=True, classifier=MagicMock(), asset_store=MagicMock())

        assert report.dry_run is True
        assert report.processed == 2
        assert [d.status for d in report.details] == ["would_classify", "would_classify"]
        mock_classify.assert_not_called()
        mock_fetch.assert_not_called()
        mock_db.commit.assert_not_called()
        mock_db.execute.assert_not_called()

    def test_classifies_with_owner_as_actor(self):
        video = _video()
        classifier = MagicMock()

        with patch(f"{BATCH}.find_unclassified_videos", return_value=[video]), \
             patch(f"{BATCH}.fetch_transcript", return_value=LONG_TRANSCRIPT), \
             patch(f"{BATCH}.classify_and_assign", return_value=_success("MEETING_RECORDING", "SALES")) as mock_classify:
            report = classify_all_videos(MagicMock(), classifier=classifier, asset_store=MagicMock())

        assert report.classified == 1
        assert report.details[0].labels == ["MEETING_RECORDING", "SALES"]
        args = mock_classify.call_args
        assert args.args[3] == video.owner_id
        assert args.kwargs["classifier"] is classifier

    def test_short_or_missing_transcript_skipped(self):
        videos = [_video("Silent"), _video("Short")]

        with patch(f"{BATCH}.find_unclassified_videos", return_value=videos), \
             patch(f"{BATCH}.fetch_transcript", side_effect=[None, "ok"]), \
             patch(f"{BATCH}.classify_and_assign") as mock_classify:
            report = classify_all_videos(MagicMock(), classifier=MagicMock(), asset_store=MagicMock())

        assert report.skipped == 2
        assert [d.reason for d in report.details] == ["No transcript", "Transcript too short"]
        mock_classify.assert_not_called()

    def test_failed_classification_counted_as_error(self):
        failed = VideoClassificationOutcome(
            classification=ClassificationResult.failure("Classification failed", "timeout", "upstream_error")
        )

        with patch(f"{BATCH}.find_unclassified_videos", return_value=[_video()]), \
             patch(f"{BATCH}.fetch_transcript", return_value=LONG_TRANSCRIPT), \
             patch(f"{BATCH}.classify_and_assign", return_value=failed):
            report = classify_all_videos(MagicMock(), classifier=MagicMock(), asset_store=MagicMock())

        assert report.errors == 1
        assert report.details[0].reason == "timeout"

    def test_exception_does_not_abort_batch(self):
        mock_db = MagicMock()

        with patch(f"{BATCH}.find_unclassified_videos", return_value=[_video("A"), _video("B")]), \
             patch(f"{BATCH}.fetch_transcript", return_value=LONG_TRANSCRIPT), \
             patch(f"{BATCH}.classify_and_assign", side_effect=[NotFoundError("gone"), _success("DEMO")]):
            report = classify_all_videos(mock_db, classifier=MagicMock(), asset_store=MagicMock())

        assert report.errors == 1
        assert report.classified == 1
        mock_db.rollback.assert_called_once()

    def test_budget_spent(self):
        with patch(f"{BATCH}.find_unclassified_videos", return_value=[_video(), _video()]), \
             patch(f"{BATCH}.classify_and_assign") as mock_classify:
            report = classify_all_videos(
                MagicMock(), classifier=MagicMock(), asset_store=MagicMock(), budget_seconds=0
            )

        assert report.skipped_for_budget == 2
        assert report.processed == 0
        mock_classify.assert_not_called()


class TestClassifyAndAssign:
    def test_seeds_then_assigns_on_success(self):
        video = _video()
        classifier = MagicMock()
        classifier.classify.return_value = ClassificationResult(success=True, labels=[LabelSuggestion("DEMO", 0.9)])

        with patch(f"{SINGLE}.seed_system_labels") as mock_seed, \
             patch(f"{SINGLE}.auto_assign", return_value=AutoAssignResult(assigned=["DEMO"])) as mock_assign:
            outcome = classify_and_assign(MagicMock(), video, LONG_TRANSCRIPT, video.owner_id, classifier=classifier)

        mock_seed.assert_called_once()
        assert mock_seed.call_args.args[1] == video.organization_id
        assert outcome.assignment.assigned == ["DEMO"]
        context = classifier.classify.call_args.args[3]
        assert context.title == "Weekly sync"
        mock_assign.assert_called_once()

    def test_no_assignment_on_failure(self):
        video = _video()
        classifier = MagicMock()
        classifier.classify.return_value = ClassificationResult.failure("x", "y", "parse_error")

        with patch(f"{SINGLE}.seed_system_labels"), \
             patch(f"{SINGLE}.auto_assign") as mock_assign:
            outcome = classify_and_assign(MagicMock(), video, LONG_TRANSCRIPT, video.owner_id, classifier=classifier)

        assert outcome.assignment is None
        mock_assign.assert_not_called()


class TestClassifyVideoById:
    def _db(self, video):
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = video
        return mock_db

    def test_missing_video(self):
        with pytest.raises(NotFoundError):
            classify_video_by_id(self._db(None), uuid.uuid4(), uuid.uuid4())

    def test_other_organization_is_not_found(self):
        video = _video()
        with pytest.raises(NotFoundError):
            classify_video_by_id(self._db(video), video.id, video.owner_id, organization_id=uuid.uuid4())

    def test_non_owner_denied(self):
        video = _video()
        with pytest.raises(PermissionDenied):
            classify_video_by_id(self._db(video), video.id, uuid.uuid4())

    def test_incomplete_transcription(self):
        video = _video(status="processing")
        with pytest.raises(ValidationError, match="not complete"):
            classify_video_by_id(self._db(video), video.id, video.owner_id)

    def test_missing_transcript(self):
        video = _video()
        store = MagicMock()
        store.get_text.return_value = None

        with pytest.raises(ValidationError, match="Could not fetch transcript"):
            classify_video_by_id(self._db(video), video.id, video.owner_id, asset_store=store)

    def test_runs_classification(self):
        video = _video()
        store = MagicMock()
        store.get_text.return_value = "WEBVTT\n\n1\n00:00:00.000 --> 00:00:02.000\nHello team\n"

        with patch(f"{SINGLE}.classify_and_assign", return_value=_success("DEMO")) as mock_run:
            outcome = classify_video_by_id(
                self._db(video), video.id, video.owner_id, organization_id=video.organization_id, asset_store=store
            )

        assert outcome.classification.success is True
        assert mock_run.call_args.args[2] == "Hello team"
