# tests/unit/test_promotion.py
"""
Unit tests for custom label promotion.

Covers:
- evaluate_label_for_promotion() never raising
- Normalized name validation
- promote_label_to_system() global uniqueness and per-organization isolation
"""

import json
import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from label_lifecycle.errors import ConfigurationError, UpstreamError
from label_lifecycle.llm import OracleResponse
from label_lifecycle.services.promotion import (
    PromotionEvaluation,
    evaluate_label_for_promotion,
    promote_label_to_system,
    run_promotion_pipeline,
)


def _oracle(content):
    oracle = MagicMock()
    oracle.complete.return_value = OracleResponse(content=content, model="test-model")
    return oracle


def _approved(name="CUSTOMER_INTERVIEW"):
    return PromotionEvaluation(
        should_promote=True,
        reason="Novel category",
        english_name=name,
        english_display_name="Customer Interview",
        english_description="Conversations with customers",
    )


class TestEvaluateLabelForPromotion:
    def test_approved(self):
        oracle = _oracle(json.dumps({
            "should_promote": True,
            "reason": "Distinct from existing types",
            "english_name": "customer_interview",
            "english_display_name": "Customer Interview",
            "english_description": "Recorded conversations with customers",
            "suggested_category": "content_type",
        }))

        evaluation = evaluate_label_for_promotion(
            "ENTREVISTA_CLIENTE", "Entrevista cliente", None, "content_type", oracle=oracle
        )

        assert evaluation.should_promote is True
        assert evaluation.english_name == "CUSTOMER_INTERVIEW"
        assert oracle.complete.call_args.args[0].call_type == "evaluate_label"

    def test_duplicate_rejected(self):
        oracle = _oracle(
            '```json\n{"should_promote": false, "reason": "Same as DEMO", "duplicate_of": "DEMO"}\n```'
        )

        evaluation = evaluate_label_for_promotion("WALKTHROUGH", "Walkthrough", None, "content_type", oracle=oracle)

        assert evaluation.should_promote is False
        assert evaluation.duplicate_of == "DEMO"

    def test_invalid_normalized_name_rejected(self):
        oracle = _oracle(json.dumps({"should_promote": True, "reason": "ok", "english_name": "Customer Interview!"}))

        evaluation = evaluate_label_for_promotion("X", "X", None, "content_type", oracle=oracle)

        assert evaluation.should_promote is False
        assert "Invalid normalized name" in evaluation.reason

    def test_overlong_normalized_name_rejected(self):
        oracle = _oracle(json.dumps({"should_promote": True, "reason": "ok", "english_name": "A" * 31}))

        assert evaluate_label_for_promotion("X", "X", None, "content_type", oracle=oracle).should_promote is False

    def test_unknown_category_falls_back(self):
        oracle = _oracle(json.dumps({"should_promote": False, "reason": "no", "suggested_category": "genre"}))

        evaluation = evaluate_label_for_promotion("X", "X", None, "department", oracle=oracle)

        assert evaluation.suggested_category == "department"

    def test_unconfigured_oracle(self):
        with patch("label_lifecycle.services.promotion.get_oracle", side_effect=ConfigurationError("no key")):
            evaluation = evaluate_label_for_promotion("X", "X", None, "content_type")

        assert evaluation.should_promote is False
        assert evaluation.reason == "Oracle not configured"

    def test_oracle_error(self):
        oracle = MagicMock()
        oracle.complete.side_effect = UpstreamError("rate limited")

        evaluation = evaluate_label_for_promotion("X", "X", None, "content_type", oracle=oracle)

        assert evaluation.should_promote is False
        assert evaluation.reason == "API error"

    def test_unparsable_response(self):
        evaluation = evaluate_label_for_promotion("X", "X", None, "content_type", oracle=_oracle("yes, promote it"))

        assert evaluation.should_promote is False
        assert evaluation.reason == "Evaluation failed"


class TestPromoteLabelToSystem:
    def _db(self, existing=None, org_ids=()):
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = existing
        mock_db.query.return_value.filter.return_value.distinct.return_value.all.return_value = [
            SimpleNamespace(organization_id=org_id) for org_id in org_ids
        ]
        mock_db.execute.return_value.rowcount = 1
        return mock_db

    def test_not_approved(self):
        mock_db = self._db()
        evaluation = PromotionEvaluation(should_promote=False, reason="Too specific")

        result = promote_label_to_system(mock_db, evaluation)

        assert result.promoted is False
        assert result.reason == "Too specific"
        mock_db.execute.assert_not_called()

    def test_existing_system_name_blocks_promotion(self):
        """A name that is already a system label anywhere is not promoted again."""
        mock_db = self._db(existing=SimpleNamespace(id=uuid.uuid4()), org_ids=[uuid.uuid4()])

        result = promote_label_to_system(mock_db, _approved())

        assert result.promoted is False
        assert "already exists as system label" in result.reason
        mock_db.execute.assert_not_called()

    def test_inserts_into_every_organization(self):
        org_ids = [uuid.uuid4(), uuid.uuid4(), uuid.uuid4()]
        mock_db = self._db(org_ids=org_ids)

        result = promote_label_to_system(mock_db, _approved(), original_color="#10B981", retention_days=60)

        assert result.promoted is True
        assert result.organizations == 3
        assert mock_db.execute.call_count == 3
        assert mock_db.begin_nested.call_count == 3
        mock_db.commit.assert_called_once()

    def test_rerun_counts_only_new_rows(self):
        """Organizations that already hold the name are not counted again."""
        org_ids = [uuid.uuid4(), uuid.uuid4()]
        mock_db = self._db(org_ids=org_ids)
        mock_db.execute.side_effect = [MagicMock(rowcount=0), MagicMock(rowcount=1)]

        result = promote_label_to_system(mock_db, _approved())

        assert result.promoted is True
        assert result.organizations == 1
        assert result.failed_organizations == []

    def test_failing_organization_is_skipped(self):
        org_ids = [uuid.uuid4(), uuid.uuid4()]
        mock_db = self._db(org_ids=org_ids)
        mock_db.execute.side_effect = [OperationalError("INSERT", {}, Exception("lock timeout")), MagicMock(rowcount=1)]

        result = promote_label_to_system(mock_db, _approved())

        assert result.promoted is True
        assert result.organizations == 1
        assert result.failed_organizations == [str(org_ids[0])]


class TestRunPromotionPipeline:
    def test_swallows_errors(self):
        """Background task must never raise."""
        with patch(
            "label_lifecycle.services.promotion.evaluate_label_for_promotion",
            side_effect=RuntimeError("boom"),
        ):
            run_promotion_pipeline("X", "X", None, "content_type", None, None)

    def test_rejected_label_opens_no_session(self):
        with patch(
            "label_lifecycle.services.promotion.evaluate_label_for_promotion",
            return_value=PromotionEvaluation(should_promote=False, reason="duplicate"),
        ), patch("label_lifecycle.database.session_scope") as mock_session:
            run_promotion_pipeline("X", "X", None, "content_type", None, None)

        mock_session.assert_not_called()
