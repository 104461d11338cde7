"""Business logic for recommending ticket numbers from historical draws."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from super3.entities import MAX_NUMBER, MIN_NUMBER, NumberFrequency, NumberRecommendation
from super3.services.store import EntityStore


@dataclass(frozen=True)
class Signal:
    """One ranked frequency table contributing `(size - rank) * weight` points."""

    name: str
    size: int
    weight: int


WINNING_SIGNAL = Signal("winning", size=20, weight=3)
EARLY_SIGNAL = Signal("early", size=25, weight=2)
FREQUENT_SIGNAL = Signal("frequent", size=20, weight=1)


def rank_frequencies(numbers: Iterable[int], limit: int) -> list[NumberFrequency]:
    """Count in-range numbers; most frequent first, ties by ascending number."""

    counts = Counter(int(n) for n in numbers if MIN_NUMBER <= int(n) <= MAX_NUMBER)
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [NumberFrequency(number=n, frequency=f) for n, f in ordered[:limit]]


def score_signals(ranked: Iterable[tuple[Signal, list[NumberFrequency]]]) -> list[NumberRecommendation]:
    """Add up per-signal points and rank numbers by total score.

    Equal scores are ordered by ascending number.
    """

    scores: dict[int, int] = {}
    sources: dict[int, list[str]] = {}
    for signal, frequencies in ranked:
        for rank, item in enumerate(frequencies[: signal.size]):
            scores[item.number] = scores.get(item.number, 0) + (signal.size - rank) * signal.weight
            sources.setdefault(item.number, []).append(signal.name)

    ordered = sorted(scores.items(), key=lambda kv: (-kv[1], kv[0]))
    return [NumberRecommendation(number=n, score=s, sources=tuple(sources[n])) for n, s in ordered]


class RecommendationService:
    """Weighted ranking of numbers 1..90 over winners and finished draws.

    Signals:
    - winning: numbers on winning tickets (own and opponent), top 20, x3
    - early: numbers drawn within the first N draws of a game, top 25, x2
    - frequent: all drawn numbers, top 20, x1
    """

    def __init__(self, store: EntityStore, early_draw_window: int = 25) -> None:
        self._store = store
        self._early_draw_window = early_draw_window

    def has_statistical_data(self) -> bool:
        return self._store.has_statistical_data()

    def signals(self) -> list[tuple[Signal, list[NumberFrequency]]]:
        winning = [
            f
            for f in self._store.winning_number_frequencies()
            if MIN_NUMBER <= f.number <= MAX_NUMBER
        ][: WINNING_SIGNAL.size]

        sequences = self._store.finished_draw_sequences()
        early = rank_frequencies(
            (n for seq in sequences for n in seq[: self._early_draw_window]), EARLY_SIGNAL.size
        )
        frequent = rank_frequencies((n for seq in sequences for n in seq), FREQUENT_SIGNAL.size)

        return [(WINNING_SIGNAL, winning), (EARLY_SIGNAL, early), (FREQUENT_SIGNAL, frequent)]

    def recommend_with_scores(self, count: int = 7) -> list[NumberRecommendation]:
        if count <= 0:
            return []
        return score_signals(self.signals())[:count]

    def recommend_numbers(self, count: int = 7) -> list[int]:
        """Top `count` numbers by score.

        Callers should check `has_statistical_data()` first; with no history
        the result is empty.
        """

        return [r.number for r in self.recommend_with_scores(count)]
