# app/domain/ranking.py
from __future__ import annotations

from typing import Iterable

from .policies import passes_filters, validate_criteria
from .signals import compute_signals, explain_signal
from .types import SIGNALS, Candidate, MatchResult, SearchCriteria, Signal, SignalWeights

LABEL_EXCELLENT = "Perfect/Excellent Match"
LABEL_GOOD = "Good Match"
LABEL_FAIR = "Fair Match"
LABEL_LOW = "Low Match"


def match_label(composite_score: float) -> str:
    if composite_score >= 85:
        return LABEL_EXCELLENT
    if composite_score >= 60:
        return LABEL_GOOD
    if composite_score >= 40:
        return LABEL_FAIR
    return LABEL_LOW


def _round_half_up(x: float) -> int:
    # round() is banker's rounding; 72.5 must not become 72.
    # Float noise is cut first so 82.4999999 still counts as 82.5.
    x = round(x, 9)
    return int(x + 0.5) if x >= 0 else -int(-x + 0.5)


def composite_score(scores: dict[Signal, float | None], weights: SignalWeights) -> int:
    """
    round(100 * sum(w_i * s_i) / sum(applicable w_i)).
    Signals scored as None are inapplicable and leave the denominator.
    """
    num = 0.0
    den = 0.0
    for s in SIGNALS:
        v = scores.get(s)
        if v is None:
            continue
        w = weights.of(s) / 100.0
        num += w * v
        den += w
    if den <= 0:
        return 0
    return max(0, min(100, _round_half_up(100.0 * num / den)))


def explain(
    scores: dict[Signal, float | None],
    weights: SignalWeights,
    *,
    reasons: dict[Signal, str] | None = None,
) -> str:
    """
    Human-debuggable explanation string, stable signal order.

    Example:
      proximity=0.80(30) 1.0 km of 5 km radius | goal_alignment=1.00(25) 2/2 goals matched | ...
    """
    bits: list[str] = []
    r = reasons or {}
    for s in SIGNALS:
        v = scores.get(s)
        head = f"{s.value}=n/a" if v is None else f"{s.value}={v:.2f}"
        head += f"({weights.of(s):g})"
        if s in r:
            head += f" {r[s]}"
        bits.append(head)
    return " | ".join(bits)


def _sort_key(pair: tuple[Candidate, int]) -> tuple[int, float, int, str]:
    cand, score = pair
    return (-score, -float(cand.rating_value or 0.0), -int(cand.review_count or 0), str(cand.id))


def rank(
    criteria: SearchCriteria,
    candidates: Iterable[Candidate],
    weights: SignalWeights,
) -> list[MatchResult]:
    """
    Pure ranking pass: filter -> score -> sort -> tie-break -> rank -> truncate.
    Same inputs always give the same ordered output.
    """
    validate_criteria(criteria)

    scored: list[tuple[Candidate, int, dict[Signal, float | None]]] = []
    for cand in candidates:
        if not passes_filters(cand, criteria):
            continue
        scores = compute_signals(cand, criteria)
        scored.append((cand, composite_score(scores, weights), scores))

    scored.sort(key=lambda t: _sort_key((t[0], t[1])))

    limit = criteria.result_limit
    if limit is not None:
        scored = scored[:limit]

    out: list[MatchResult] = []
    for i, (cand, score, scores) in enumerate(scored, start=1):
        reasons = {s: explain_signal(s, cand, criteria) for s in SIGNALS}
        out.append(
            MatchResult(
                candidate_id=cand.id,
                per_signal_score={s.value: scores[s] for s in SIGNALS},
                composite_score=score,
                rank=i,
                match_label=match_label(score),
                explain=explain(scores, weights, reasons=reasons),
            )
        )
    return out
