# tests/unit/test_auto_assigner.py
"""
Unit tests for the auto-assigner.

Covers:
- Confidence threshold boundary
- Unknown names and labels already on the video
- Expiration recompute on every run
"""

import uuid
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from label_lifecycle.services.auto_assigner import auto_assign
from label_lifecycle.services.label_classifier import ClassificationResult, LabelSuggestion

MODULE = "label_lifecycle.services.auto_assigner"


def _label(name):
    label = MagicMock()
    label.id = uuid.uuid4()
    label.name = name
    return label


def _classification(*pairs):
    return ClassificationResult(success=True, labels=[LabelSuggestion(n, c) for n, c in pairs])


class TestAutoAssign:
    """Tests for auto_assign()."""

    def setup_method(self):
        self.video_id = uuid.uuid4()
        self.org_id = uuid.uuid4()
        self.actor_id = uuid.uuid4()
        self.labels = {name: _label(name) for name in ("DEMO", "MEETING_RECORDING", "TECH")}

    def _run(self, classification, assigned_ids=None, insert_result=True, threshold=0.75):
        mock_db = MagicMock()
        with patch(f"{MODULE}.get_labels_by_name", return_value=self.labels), \
             patch(f"{MODULE}._get_assigned_label_ids", return_value=set(assigned_ids or ())), \
             patch(f"{MODULE}._insert_assignment", return_value=insert_result) as mock_insert, \
             patch(f"{MODULE}.update_video_expiration", return_value=None) as mock_expire:
            result = auto_assign(
                mock_db, self.video_id, self.org_id, classification, self.actor_id, threshold=threshold
            )
        return result, mock_db, mock_insert, mock_expire

    def test_threshold_is_inclusive(self):
        """0.75 is assigned, 0.7499 is not."""
        classification = _classification(("DEMO", 0.75), ("MEETING_RECORDING", 0.7499))

        result, _, mock_insert, _ = self._run(classification)

        assert result.assigned == ["DEMO"]
        assert result.skipped == ["MEETING_RECORDING"]
        mock_insert.assert_called_once()
        assert mock_insert.call_args.args[1:] == (self.video_id, self.labels["DEMO"].id, self.actor_id, 0.75)

    def test_unknown_name_skipped(self):
        result, _, mock_insert, _ = self._run(_classification(("PODCAST", 0.95)))

        assert result.assigned == []
        assert result.skipped == ["PODCAST"]
        mock_insert.assert_not_called()

    def test_already_assigned_skipped(self):
        """Second run assigns nothing."""
        classification = _classification(("DEMO", 0.9), ("TECH", 0.8))
        assigned = [self.labels["DEMO"].id, self.labels["TECH"].id]

        result, _, mock_insert, _ = self._run(classification, assigned_ids=assigned)

        assert result.assigned == []
        assert result.skipped == ["DEMO", "TECH"]
        mock_insert.assert_not_called()

    def test_concurrent_insert_counts_as_skipped(self):
        result, _, _, _ = self._run(_classification(("DEMO", 0.9)), insert_result=False)

        assert result.assigned == []
        assert result.skipped == ["DEMO"]

    def test_recomputes_expiration_even_when_nothing_assigned(self):
        result, mock_db, _, mock_expire = self._run(_classification())

        mock_expire.assert_called_once_with(mock_db, self.video_id)
        mock_db.commit.assert_called_once()

    def test_returns_new_expiration(self):
        expires = datetime(2024, 1, 31, tzinfo=UTC)
        mock_db = MagicMock()
        with patch(f"{MODULE}.get_labels_by_name", return_value=self.labels), \
             patch(f"{MODULE}._get_assigned_label_ids", return_value=set()), \
             patch(f"{MODULE}._insert_assignment", return_value=True), \
             patch(f"{MODULE}.update_video_expiration", return_value=expires):
            result = auto_assign(mock_db, self.video_id, self.org_id, _classification(("MEETING_RECORDING", 0.9)), self.actor_id)

        assert result.expires_at == expires
        assert result.assigned == ["MEETING_RECORDING"]

    def test_default_threshold_from_settings(self, monkeypatch):
        monkeypatch.setenv("AUTO_ASSIGN_CONFIDENCE_THRESHOLD", "0.5")
        mock_db = MagicMock()
        with patch(f"{MODULE}.get_labels_by_name", return_value=self.labels), \
             patch(f"{MODULE}._get_assigned_label_ids", return_value=set()), \
             patch(f"{MODULE}._insert_assignment", return_value=True), \
             patch(f"{MODULE}.update_video_expiration", return_value=None):
            result = auto_assign(mock_db, self.video_id, self.org_id, _classification(("DEMO", 0.6)), self.actor_id)

        assert result.assigned == ["DEMO"]
