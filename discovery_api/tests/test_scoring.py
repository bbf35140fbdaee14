"""
RICE scoring
"""

import pytest

from discovery_api.features.discovery.scoring import default_rice, rescore, rice_score


def test_rice_formula():
    assert rice_score(500, 2, 50, 5) == pytest.approx(100.0)
    assert rice_score(500, 2, 50, 0) == 0.0
    assert rice_score(500, 2, 50, -1) == 0.0


def test_defaults_score_zero():
    assert default_rice() == {
        "riceReach": 0.0,
        "riceImpact": 0.25,
        "riceConfidence": 80.0,
        "riceEffort": 1.0,
        "riceScore": 0.0,
    }


def test_rescore_only_when_a_component_changes():
    existing = default_rice()

    assert rescore(existing, {"name": "x"}) is None
    assert rescore(existing, {"riceReach": None}) is None
    assert rescore(existing, {"riceReach": 100}) == pytest.approx(20.0)


def test_rescore_with_missing_stored_components():
    assert rescore({}, {"riceReach": 10}) == 0.0
    assert rescore({}, {"riceReach": 10, "riceImpact": 1, "riceConfidence": 100}) == pytest.approx(10.0)
