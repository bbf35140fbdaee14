"""RICE prioritization score for opportunities."""

from __future__ import annotations

from typing import Any, Mapping, Optional

# New opportunities start with these so their score is well-defined.
DEFAULT_RICE = {
    "riceReach": 0.0,
    "riceImpact": 0.25,
    "riceConfidence": 80.0,
    "riceEffort": 1.0,
}
RICE_FIELDS = tuple(DEFAULT_RICE)


def rice_score(reach: float, impact: float, confidence: float, effort: float) -> float:
    """reach × impact × confidence% / effort; 0 when effort is not positive."""
    if effort <= 0:
        return 0.0
    return (reach * impact * (confidence / 100)) / effort


def default_rice() -> dict[str, float]:
    values = dict(DEFAULT_RICE)
    values["riceScore"] = rice_score(
        values["riceReach"], values["riceImpact"], values["riceConfidence"], values["riceEffort"]
    )
    return values


def rescore(existing: Mapping[str, Any], changes: Mapping[str, Any]) -> Optional[float]:
    """
    New score when `changes` touches any RICE component, else None.
    Components missing from `changes` come from `existing`.
    """
    if not any(changes.get(f) is not None for f in RICE_FIELDS):
        return None

    def pick(name: str, fallback: float) -> float:
        value = changes.get(name)
        if value is None:
            value = existing.get(name)
        return float(fallback if value is None else value)

    return rice_score(
        pick("riceReach", 0.0),
        pick("riceImpact", 0.0),
        pick("riceConfidence", 0.0),
        pick("riceEffort", 1.0),
    )
