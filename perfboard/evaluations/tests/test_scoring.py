from datetime import UTC
from datetime import datetime
from decimal import Decimal

from perfboard.evaluations.scoring import EvaluationRecord
from perfboard.evaluations.scoring import latest_score
from perfboard.evaluations.scoring import normalize
from perfboard.evaluations.scoring import score_team


def _eval(pk, user_id, rating, system="1-5", status="completed", when=None):
    return EvaluationRecord(
        id=pk,
        evaluatee_id=user_id,
        status=status,
        overall_rating=None if rating is None else Decimal(rating),
        scoring_system=system,
        completed_at=when,
    )


JAN = datetime(2024, 1, 15, tzinfo=UTC)
JUN = datetime(2024, 6, 15, tzinfo=UTC)


def test_latest_score_prefers_most_recent_completion():
    evaluations = [
        _eval(1, 7, "3", when=JUN),
        _eval(2, 7, "5", when=JAN),
        _eval(3, 7, "1", status="submitted", when=JUN),
        _eval(4, 8, "4", when=JUN),
    ]

    raw = latest_score(7, evaluations)

    assert raw.raw_score == Decimal(3)
    assert raw.max_score == Decimal(5)
    assert raw.evaluation_id == 1


def test_latest_score_breaks_ties_by_id_and_ignores_unrated():
    evaluations = [
        _eval(5, 7, "2", when=JUN),
        _eval(9, 7, "4", when=JUN),
        _eval(12, 7, None, when=JUN),
        _eval(3, 7, "1"),
    ]

    assert latest_score(7, evaluations).evaluation_id == 9


def test_latest_score_none_without_completed_rating():
    evaluations = [_eval(1, 7, "4", status="draft"), _eval(2, 7, None)]

    assert latest_score(7, evaluations) is None
    assert latest_score(99, []) is None


def test_undisclosed_scale_is_inferred_from_rating():
    assert latest_score(1, [_eval(1, 1, "8", system=None)]).max_score == 10
    assert latest_score(1, [_eval(1, 1, "5", system=None)]).max_score == 5
    assert latest_score(1, [_eval(1, 1, "4", system="1-10")]).max_score == 10


def test_normalize_rescales_and_clamps():
    assert normalize(Decimal(4), Decimal(5)) == Decimal("8.00")
    assert normalize(Decimal(7), Decimal(10)) == Decimal("7.00")
    assert normalize(Decimal(2), Decimal(3)) == Decimal("6.67")
    assert normalize(Decimal(12), Decimal(10)) == Decimal("10.00")
    assert normalize(Decimal(-1), Decimal(5)) == Decimal("0.00")
    assert normalize(Decimal(3), Decimal(0)) == Decimal(0)


def test_score_team_defaults_unscored_members():
    evaluations = [_eval(1, 7, "4", when=JUN)]
    salaries = {7: Decimal("1000.00")}

    scored = score_team([7, 8], evaluations, salaries, default=1)

    assert [s.user_id for s in scored] == [7, 8]
    assert scored[0].normalized_score == Decimal("8.00")
    assert scored[0].monthly_salary == Decimal("1000.00")
    assert scored[0].is_scored
    assert scored[1].normalized_score == Decimal(1)
    assert scored[1].raw_score is None
    assert scored[1].monthly_salary is None


def test_score_team_keeps_a_real_zero():
    scored = score_team([7], [_eval(1, 7, "0", when=JUN)], default=1)

    assert scored[0].normalized_score == Decimal(0)
