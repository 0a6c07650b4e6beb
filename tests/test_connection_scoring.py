import itertools

import pytest

from relmap.analysis.connection_scoring import ConnectionScorer
from relmap.config import ScoringConfig
from relmap.model.schemas import ConnectionCategory, Entity, EntityKind


@pytest.fixture
def scorer():
    return ConnectionScorer()


@pytest.mark.parametrize("category, expected", [
    (ConnectionCategory.RESPONSIBLE_FOR, 0.9),
    (ConnectionCategory.PARENT_OF, 0.8),
    (ConnectionCategory.CHILD_OF, 0.8),
    (ConnectionCategory.CONTACT_OF, 0.7),
    (ConnectionCategory.RELATED_TO, 0.5),
])
def test_base_strengths(scorer, category, expected):
    assert scorer.score(category) == pytest.approx(expected)


def test_inactive_endpoint_applies_penalty(scorer):
    assert scorer.score(ConnectionCategory.CONTACT_OF, from_active=False) == pytest.approx(0.49)
    assert scorer.score(ConnectionCategory.CONTACT_OF, to_active=False) == pytest.approx(0.49)
    # Penalty applies once even when both endpoints are inactive
    assert scorer.score(
        ConnectionCategory.CONTACT_OF, from_active=False, to_active=False
    ) == pytest.approx(0.49)


def test_completeness_bonuses_need_both_endpoints(scorer):
    assert scorer.score(
        ConnectionCategory.CONTACT_OF, from_has_email=True, to_has_email=False
    ) == pytest.approx(0.7)
    assert scorer.score(
        ConnectionCategory.CONTACT_OF, from_has_email=True, to_has_email=True
    ) == pytest.approx(0.8)
    assert scorer.score(
        ConnectionCategory.CONTACT_OF,
        from_has_email=True, to_has_email=True,
        from_has_phone=True, to_has_phone=True
    ) == pytest.approx(0.9)


def test_score_is_clamped_to_one(scorer):
    strength = scorer.score(
        ConnectionCategory.RESPONSIBLE_FOR,
        from_has_email=True, to_has_email=True,
        from_has_phone=True, to_has_phone=True
    )
    assert strength == 1.0


def test_inactive_penalty_applies_before_bonuses(scorer):
    strength = scorer.score(
        ConnectionCategory.RESPONSIBLE_FOR,
        from_active=False,
        from_has_email=True, to_has_email=True
    )
    assert strength == pytest.approx(0.9 * 0.7 + 0.1)


def test_every_input_combination_stays_in_range_and_is_deterministic(scorer):
    for category in ConnectionCategory:
        for flags in itertools.product([True, False], repeat=6):
            first = scorer.score(category, *flags)
            second = scorer.score(category, *flags)
            assert 0.0 <= first <= 1.0
            assert first == second


def test_custom_weights():
    scorer = ConnectionScorer(ScoringConfig(inactive_penalty=0.5, email_bonus=0.2))
    assert scorer.score(ConnectionCategory.RESPONSIBLE_FOR, to_active=False) == pytest.approx(0.45)
    assert scorer.score(
        ConnectionCategory.RELATED_TO, from_has_email=True, to_has_email=True
    ) == pytest.approx(0.7)


def test_unknown_category_weight_falls_back_to_default():
    config = ScoringConfig(base_strengths={"responsible_for": 0.9})
    scorer = ConnectionScorer(config)
    assert scorer.score(ConnectionCategory.CONTACT_OF) == pytest.approx(config.default_strength)


def test_score_entities_reads_flags_from_entities(scorer):
    employee = Entity(1, EntityKind.EMPLOYEE, "Ann", email="ann@ours.dk", phone="1")
    company = Entity(100, EntityKind.COMPANY, "Acme", email="info@acme.dk")
    assert scorer.score_entities(
        ConnectionCategory.RESPONSIBLE_FOR, employee, company
    ) == pytest.approx(1.0)

    company.active = False
    assert scorer.score_entities(
        ConnectionCategory.RESPONSIBLE_FOR, employee, company
    ) == pytest.approx(0.73)
