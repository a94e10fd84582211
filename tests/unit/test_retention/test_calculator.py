# tests/unit/test_retention/test_calculator.py
"""Unit tests for the retention calculator."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest


def _video(created_at=None, keep_permanently=False, expires_at=None):
    from label_lifecycle.models import Video

    video = MagicMock(spec=Video)
    video.id = uuid.uuid4()
    video.created_at = created_at or datetime(2024, 1, 1, tzinfo=UTC)
    video.keep_permanently = keep_permanently
    video.expires_at = expires_at
    return video


def _label(name, retention_days):
    from label_lifecycle.models import Label

    label = MagicMock(spec=Label)
    label.name = name
    label.retention_days = retention_days
    return label


class TestComputeExpiration:
    """Tests for compute_expiration()."""

    def test_shortest_retention_wins(self):
        """TROUBLESHOOTING (14 days) plus a never-expiring label expires in 14 days."""
        from label_lifecycle.services.retention import compute_expiration

        video = _video()
        labels = [_label("TROUBLESHOOTING", 14), _label("TECH", None)]

        result = compute_expiration(video, labels)

        assert result == datetime(2024, 1, 15, tzinfo=UTC)

    def test_picks_minimum_of_several(self):
        from label_lifecycle.services.retention import compute_expiration

        video = _video()
        labels = [_label("MEETING_RECORDING", 30), _label("STANDUP", 7), _label("DEMO", 90)]

        assert compute_expiration(video, labels) == datetime(2024, 1, 8, tzinfo=UTC)

    def test_no_labels_never_expires(self):
        from label_lifecycle.services.retention import compute_expiration

        assert compute_expiration(_video(), []) is None

    def test_only_null_retention_never_expires(self):
        from label_lifecycle.services.retention import compute_expiration

        labels = [_label("TRAINING", None), _label("SALES", None)]

        assert compute_expiration(_video(), labels) is None

    def test_keep_permanently_overrides_labels(self):
        """keep_permanently wins over any label retention."""
        from label_lifecycle.services.retention import compute_expiration

        video = _video(keep_permanently=True)

        assert compute_expiration(video, [_label("STANDUP", 7)]) is None

    def test_keeps_time_of_day(self):
        from label_lifecycle.services.retention import compute_expiration

        video = _video(created_at=datetime(2024, 3, 10, 15, 45, tzinfo=UTC))

        result = compute_expiration(video, [_label("MEETING_RECORDING", 30)])

        assert result == datetime(2024, 4, 9, 15, 45, tzinfo=UTC)

    def test_naive_created_at_treated_as_utc(self):
        from label_lifecycle.services.retention import compute_expiration

        video = _video(created_at=datetime(2024, 1, 1))

        result = compute_expiration(video, [_label("TROUBLESHOOTING", 14)])

        assert result == datetime(2024, 1, 15, tzinfo=UTC)
        assert result.tzinfo is not None


class TestUpdateVideoExpiration:
    """Tests for update_video_expiration()."""

    def test_stores_recomputed_value(self):
        from label_lifecycle.services.retention import update_video_expiration

        video = _video()
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = video
        mock_db.query.return_value.join.return_value.filter.return_value.all.return_value = [
            _label("STANDUP", 7),
        ]

        result = update_video_expiration(mock_db, video.id)

        assert result == datetime(2024, 1, 8, tzinfo=UTC)
        assert video.expires_at == result
        mock_db.add.assert_called_once_with(video)

    def test_does_not_commit(self):
        """The caller owns the transaction."""
        from label_lifecycle.services.retention import update_video_expiration

        video = _video()
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = video
        mock_db.query.return_value.join.return_value.filter.return_value.all.return_value = []

        update_video_expiration(mock_db, video.id)

        mock_db.commit.assert_not_called()

    def test_clears_expiration_when_labels_removed(self):
        from label_lifecycle.services.retention import update_video_expiration

        video = _video(expires_at=datetime(2024, 1, 8, tzinfo=UTC))
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = video
        mock_db.query.return_value.join.return_value.filter.return_value.all.return_value = []

        assert update_video_expiration(mock_db, video.id) is None
        assert video.expires_at is None

    def test_missing_video_raises(self):
        from label_lifecycle.errors import NotFoundError
        from label_lifecycle.services.retention import update_video_expiration

        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = None

        with pytest.raises(NotFoundError):
            update_video_expiration(mock_db, uuid.uuid4())


class TestIsExpired:
    """Tests for is_expired()."""

    def test_past_expiration(self):
        from label_lifecycle.services.retention import is_expired

        now = datetime(2024, 2, 1, tzinfo=UTC)
        video = _video(expires_at=now - timedelta(seconds=1))

        assert is_expired(video, now) is True

    def test_exact_boundary_is_expired(self):
        from label_lifecycle.services.retention import is_expired

        now = datetime(2024, 2, 1, tzinfo=UTC)

        assert is_expired(_video(expires_at=now), now) is True

    def test_future_expiration(self):
        from label_lifecycle.services.retention import is_expired

        now = datetime(2024, 2, 1, tzinfo=UTC)

        assert is_expired(_video(expires_at=now + timedelta(days=1)), now) is False

    def test_no_expiration(self):
        from label_lifecycle.services.retention import is_expired

        assert is_expired(_video(expires_at=None)) is False

    def test_keep_permanently_never_expires(self):
        from label_lifecycle.services.retention import is_expired

        now = datetime(2024, 2, 1, tzinfo=UTC)
        video = _video(keep_permanently=True, expires_at=now - timedelta(days=10))

        assert is_expired(video, now) is False

    def test_naive_expiration_compared_as_utc(self):
        from label_lifecycle.services.retention import is_expired

        video = _video(expires_at=datetime(2024, 1, 1))

        assert is_expired(video, datetime(2024, 1, 2, tzinfo=UTC)) is True
