"""Statistics derived from game history (nothing here is persisted)."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from super3.entities import HistoryEntry, NumberFrequency
from super3.services.recommendation_service import rank_frequencies


@dataclass(frozen=True)
class SerialMargins:
    min: int = 0
    max: int = 0
    average: int = 0


@dataclass(frozen=True)
class GameStats:
    total_games: int = 0
    total_registered_games: int = 0
    total_tables_played: int = 0
    games_won: int = 0
    total_spent: float = 0.0
    total_won: float = 0.0
    net_profit: float = 0.0
    roi: float = 0.0
    win_rate: float = 0.0
    average_numbers_drawn: float = 0.0
    most_frequent_numbers: list[NumberFrequency] = field(default_factory=list)
    top_early_numbers: list[NumberFrequency] = field(default_factory=list)
    top_winning_numbers: list[NumberFrequency] = field(default_factory=list)
    winning_serial_numbers: dict[str, list[str]] = field(
        default_factory=lambda: {"player": [], "opponent": []}
    )
    serial_number_margins: SerialMargins = field(default_factory=SerialMargins)


@dataclass(frozen=True)
class BalanceSummary:
    total_spent: float = 0.0
    total_won: float = 0.0
    net_profit: float = 0.0
    total_games: int = 0
    winning_games: int = 0
    average_spent_per_game: float = 0.0
    average_won_per_game: float = 0.0
    best_game: HistoryEntry | None = None
    worst_game: HistoryEntry | None = None


def parse_serial(serial: str) -> int | None:
    """Integer value of an all-digit serial, otherwise None."""

    value = (serial or "").strip()
    return int(value) if value.isdigit() else None


def serial_margins(serials: Sequence[str]) -> SerialMargins:
    values = [v for v in (parse_serial(s) for s in serials) if v is not None]
    if not values:
        return SerialMargins()
    return SerialMargins(
        min=min(values),
        max=max(values),
        # Halves round up.
        average=math.floor(sum(values) / len(values) + 0.5),
    )


class StatisticsService:
    """Aggregate counts, money and frequency tables over history entries."""

    def __init__(
        self,
        early_draw_window: int = 25,
        most_frequent_size: int = 20,
        early_size: int = 25,
        winning_size: int = 10,
    ) -> None:
        self._early_draw_window = early_draw_window
        self._most_frequent_size = most_frequent_size
        self._early_size = early_size
        self._winning_size = winning_size

    def compute(self, history: Sequence[HistoryEntry]) -> GameStats:
        if not history:
            return GameStats()

        own = [e for e in history if not e.game.is_opponent_only_mode]
        total_games = len(own)
        total_registered = len(history)
        total_tables = sum(len(e.game.tables) for e in own)

        total_spent = sum(e.total_cost for e in history)
        total_won = sum(e.total_winnings for e in history)
        net_profit = total_won - total_spent
        games_won = sum(1 for e in own if e.total_winnings > 0)

        drawn_total = sum(len(e.game.drawn_numbers) for e in history)

        drawn = [n for e in history for n in e.game.drawn_numbers]
        early = [n for e in history for n in e.game.drawn_numbers[: self._early_draw_window]]
        winning = [n for e in history for w in e.winners for n in w.ticket.numbers]
        winning += [n for e in history for o in e.opponent_winners for n in o.numbers]

        player_serials = [
            w.ticket.serial_number for e in history for w in e.winners if w.ticket.serial_number
        ]
        opponent_serials = [
            o.serial_number for e in history for o in e.opponent_winners if o.serial_number
        ]

        return GameStats(
            total_games=total_games,
            total_registered_games=total_registered,
            total_tables_played=total_tables,
            games_won=games_won,
            total_spent=total_spent,
            total_won=total_won,
            net_profit=net_profit,
            roi=(net_profit / total_spent) if total_spent else 0.0,
            win_rate=(games_won / total_games * 100.0) if total_games else 0.0,
            average_numbers_drawn=drawn_total / total_registered,
            most_frequent_numbers=rank_frequencies(drawn, self._most_frequent_size),
            top_early_numbers=rank_frequencies(early, self._early_size),
            top_winning_numbers=rank_frequencies(winning, self._winning_size),
            winning_serial_numbers={"player": player_serials, "opponent": opponent_serials},
            serial_number_margins=serial_margins(player_serials + opponent_serials),
        )

    def balance(self, history: Sequence[HistoryEntry]) -> BalanceSummary:
        if not history:
            return BalanceSummary()

        total_spent = sum(e.total_cost for e in history)
        total_won = sum(e.total_winnings for e in history)
        total_games = len(history)
        return BalanceSummary(
            total_spent=total_spent,
            total_won=total_won,
            net_profit=total_won - total_spent,
            total_games=total_games,
            winning_games=sum(1 for e in history if e.total_winnings > 0),
            average_spent_per_game=total_spent / total_games,
            average_won_per_game=total_won / total_games,
            best_game=max(history, key=lambda e: e.net_profit),
            worst_game=min(history, key=lambda e: e.net_profit),
        )
