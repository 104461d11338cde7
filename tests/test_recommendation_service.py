from __future__ import annotations

from super3.entities import NumberFrequency
from super3.services.recommendation_service import (
    EARLY_SIGNAL,
    FREQUENT_SIGNAL,
    WINNING_SIGNAL,
    RecommendationService,
    rank_frequencies,
    score_signals,
)


class FakeStore:
    def __init__(self, winning=(), sequences=()):
        self.winning = list(winning)
        self.sequences = [list(s) for s in sequences]

    def has_statistical_data(self):
        return bool(self.sequences)

    def winning_number_frequencies(self, limit=None):
        return self.winning[:limit] if limit else list(self.winning)

    def finished_draw_sequences(self):
        return self.sequences


def test_rank_frequencies_orders_by_count_then_number():
    ranked = rank_frequencies([5, 3, 5, 3, 9, 91, 0], limit=10)
    assert ranked == [
        NumberFrequency(3, 2),
        NumberFrequency(5, 2),
        NumberFrequency(9, 1),
    ]
    assert rank_frequencies([1, 2, 3], limit=2) == [NumberFrequency(1, 1), NumberFrequency(2, 1)]


def test_top_winning_number_scores_sixty():
    [top] = score_signals([(WINNING_SIGNAL, [NumberFrequency(42, 5)])])
    assert top.number == 42
    assert top.score == 60
    assert top.sources == ("winning",)


def test_scores_add_across_signals():
    ranked = [
        (WINNING_SIGNAL, [NumberFrequency(10, 3)]),
        (EARLY_SIGNAL, [NumberFrequency(10, 4), NumberFrequency(20, 2)]),
        (FREQUENT_SIGNAL, [NumberFrequency(10, 9)]),
    ]
    scores = {r.number: r for r in score_signals(ranked)}

    assert scores[10].score == 60 + 50 + 20
    assert scores[10].sources == ("winning", "early", "frequent")
    assert scores[20].score == (25 - 1) * 2


def test_equal_scores_break_ties_by_number():
    ranked = [(FREQUENT_SIGNAL, [NumberFrequency(30, 1)]), (FREQUENT_SIGNAL, [NumberFrequency(4, 1)])]
    assert [r.number for r in score_signals(ranked)] == [4, 30]


def test_early_window_limits_early_signal():
    store = FakeStore(sequences=[[1, 2, 3, 4]])
    service = RecommendationService(store, early_draw_window=2)

    signals = dict((s.name, f) for s, f in service.signals())
    assert [f.number for f in signals["early"]] == [1, 2]
    assert [f.number for f in signals["frequent"]] == [1, 2, 3, 4]


def test_recommend_numbers_uses_all_signals():
    store = FakeStore(
        winning=[NumberFrequency(90, 4), NumberFrequency(91, 9)],
        sequences=[[5, 6, 7, 8, 9, 10, 11, 12], [5, 6]],
    )
    service = RecommendationService(store)

    scored = service.recommend_with_scores(3)
    assert [(r.number, r.score) for r in scored] == [(5, 70), (6, 67), (7, 64)]
    assert service.recommend_numbers(7) == [5, 6, 7, 8, 90, 9, 10]


def test_no_history_recommends_nothing():
    service = RecommendationService(FakeStore())
    assert not service.has_statistical_data()
    assert service.recommend_numbers() == []
    assert service.recommend_with_scores(0) == []
