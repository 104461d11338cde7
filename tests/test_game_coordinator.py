from __future__ import annotations

import pytest

from super3.entities import GameType, OpponentWinnerData, Winner
from super3.errors import ConflictError, GameStateError, NotFoundError, ValidationError
from super3.services.game_coordinator import GameCoordinator, GamePhase

WINNING = (3, 7, 15, 22, 40, 61, 90)
LOSING = (1, 2, 4, 5, 6, 8, 9)


def _draw(coordinator, numbers):
    for n in numbers:
        coordinator.add_drawn_number(n)


def test_create_ticket_assigns_sequential_custom_ids(coordinator):
    first = coordinator.create_ticket()
    second = coordinator.create_ticket()

    assert (first.custom_id, second.custom_id) == ("1", "2")
    assert first.numbers == () and first.serial_number == ""
    assert not first.is_checked


def test_ticket_limit(store):
    coordinator = GameCoordinator(store, max_tickets=2)
    coordinator.create_tickets(5)

    assert len(coordinator.state.tickets) == 2
    with pytest.raises(ValidationError):
        coordinator.create_ticket()


def test_update_validates_numbers(coordinator):
    ticket = coordinator.create_ticket()
    with pytest.raises(ValidationError):
        coordinator.update_ticket(ticket.id, {"numbers": [1, 2, 3]})
    with pytest.raises(ValidationError):
        coordinator.update_ticket(ticket.id, {"numbers": [1, 1, 2, 3, 4, 5, 6]})
    with pytest.raises(NotFoundError):
        coordinator.update_ticket("missing", {"numbers": []})


def test_update_stores_sorted_numbers_and_keeps_incomplete_unchecked(coordinator, store):
    ticket = coordinator.create_ticket()
    updated = coordinator.update_ticket(ticket.id, {"numbers": [90, 3, 61, 7, 40, 15, 22], "is_checked": True})

    assert updated.numbers == WINNING
    assert updated.is_checked is False

    reloaded = store.get_ticket(ticket.id)
    assert reloaded.numbers == WINNING


def test_serial_numbers_are_unique(coordinator, make_ticket):
    first = make_ticket(WINNING, "000123")
    other = coordinator.create_ticket()

    with pytest.raises(ConflictError):
        coordinator.update_ticket(other.id, {"serial_number": "000123"})

    assert coordinator.check_serial_number_exists("000123")
    assert not coordinator.check_serial_number_exists("000123", exclude_id=first.id)
    assert not coordinator.check_serial_number_exists("")


def test_ticket_stats(coordinator, make_ticket):
    make_ticket(WINNING, "1")
    coordinator.create_ticket()

    stats = coordinator.ticket_stats()
    assert (stats.total, stats.complete, stats.incomplete, stats.checked) == (2, 1, 1, 1)
    assert stats.total_cost == pytest.approx(0.5)


def test_bulk_ticket_actions(coordinator, store, make_ticket):
    make_ticket(WINNING, "1", checked=False)
    blank = coordinator.create_ticket()

    assert coordinator.mark_all_complete_checked() == 1
    assert coordinator.uncheck_all_tickets() == 1
    assert coordinator.clear_all_identifiers() == 2
    assert coordinator.fill_all_identifiers() == 2
    assert [t.custom_id for t in coordinator.state.tickets] == ["1", "2"]

    assert coordinator.delete_incomplete_tickets() == 1
    assert blank.id not in {t.id for t in coordinator.state.tickets}

    assert coordinator.clear_all_numbers() == 1
    assert coordinator.state.tickets[0].numbers == ()
    assert coordinator.clear_all_tickets() == 1
    assert store.get_tickets() == []


def test_start_game_takes_checked_complete_tickets(coordinator, make_ticket):
    played = make_ticket(WINNING, "1")
    make_ticket(LOSING, "2", checked=False)
    coordinator.create_ticket()

    game = coordinator.start_game()

    assert coordinator.state.phase is GamePhase.ACTIVE
    assert [t.id for t in game.tables] == [played.id]
    assert game.tables_played == 1
    with pytest.raises(ConflictError):
        coordinator.start_game()


def test_draw_rules(coordinator):
    with pytest.raises(GameStateError):
        coordinator.add_drawn_number(5)

    coordinator.start_game()
    coordinator.add_drawn_number(40)
    coordinator.add_drawn_number(3)
    with pytest.raises(ConflictError):
        coordinator.add_drawn_number(3)
    with pytest.raises(ValidationError):
        coordinator.add_drawn_number(91)

    game = coordinator.remove_drawn_number(40)
    assert game.drawn_numbers == (3,)
    assert coordinator.remove_drawn_number(77).drawn_numbers == (3,)


def test_winning_ticket_detected_when_all_numbers_drawn(coordinator, make_ticket):
    winner = make_ticket(WINNING, "000123")
    make_ticket(LOSING, "000124")
    coordinator.start_game()

    _draw(coordinator, WINNING[:-1])
    assert coordinator.state.winning_tickets == ()

    _draw(coordinator, (90, 11, 12))
    assert [t.id for t in coordinator.state.winning_tickets] == [winner.id]

    coordinator.remove_drawn_number(90)
    assert coordinator.state.winning_tickets == ()


def test_finish_game_records_history(coordinator, make_ticket):
    make_ticket(WINNING, "000123")
    make_ticket(LOSING, "000124")
    coordinator.start_game()
    _draw(coordinator, WINNING)

    entry = coordinator.settle_game(main_amount=100.0)

    assert entry.total_cost == pytest.approx(0.5)
    assert entry.total_winnings == pytest.approx(100.0)
    assert entry.net_profit == pytest.approx(99.5)
    assert coordinator.state.phase is GamePhase.NO_GAME
    assert len(coordinator.state.history) == 1

    [stored] = coordinator.state.history
    assert stored.game.is_finished
    assert [w.ticket.serial_number for w in stored.winners] == ["000123"]
    assert all(t.id.startswith("snapshot_") for t in stored.game.tables)
    assert coordinator.has_statistical_data()


def test_prize_split_across_winning_tickets(coordinator, make_ticket):
    make_ticket(WINNING, "1")
    make_ticket(WINNING, "2")
    make_ticket(LOSING, "3")
    coordinator.start_game()
    _draw(coordinator, WINNING)

    entry = coordinator.settle_game(main_amount=50.0, secondary_amount=8.0, secondary_serial="3")

    main = [w for w in entry.winners if w.game_type is GameType.MAIN]
    secondary = [w for w in entry.winners if w.game_type is GameType.SECONDARY]
    assert [w.winning_amount for w in main] == [25.0, 25.0]
    assert [w.ticket.serial_number for w in secondary] == ["3"]
    assert entry.total_winnings == pytest.approx(58.0)


def test_settle_without_winners_is_rejected(coordinator, make_ticket):
    make_ticket(LOSING, "1")
    coordinator.start_game()
    _draw(coordinator, WINNING)

    with pytest.raises(ValidationError):
        coordinator.settle_game(main_amount=10.0)
    assert coordinator.state.phase is GamePhase.ACTIVE


def test_history_is_immune_to_ticket_edits(coordinator, make_ticket):
    ticket = make_ticket(WINNING, "000123")
    coordinator.start_game()
    _draw(coordinator, WINNING)
    coordinator.settle_game(main_amount=10.0)

    coordinator.update_ticket(ticket.id, {"numbers": list(LOSING), "serial_number": "999"})
    coordinator.delete_ticket(ticket.id)
    coordinator.load_data()

    [entry] = coordinator.state.history
    assert entry.game.tables[0].numbers == WINNING
    assert entry.game.tables[0].serial_number == "000123"
    assert entry.winners[0].ticket.numbers == WINNING


def test_opponent_only_game_costs_nothing(coordinator, make_ticket):
    make_ticket(WINNING, "1")
    game = coordinator.start_game(opponent_only=True)
    assert game.tables == ()

    _draw(coordinator, LOSING)
    coordinator.save_opponent_winner(
        OpponentWinnerData(numbers=LOSING, serial_number="555", winning_amount=40.0)
    )
    entry = coordinator.settle_game(
        opponent_winners=[OpponentWinnerData(game_type=GameType.SECONDARY, serial_number="556", winning_amount=2.0)]
    )

    assert entry.total_cost == 0.0
    assert entry.net_profit == 0.0
    assert entry.total_opponent_winnings == pytest.approx(42.0)
    assert {o.serial_number for o in coordinator.state.history[0].opponent_winners} == {"555", "556"}


def test_opponent_only_game_rejects_player_prizes(coordinator):
    coordinator.start_game(opponent_only=True)
    with pytest.raises(ValidationError):
        coordinator.settle_game(main_amount=5.0)


def test_fill_numbers_needs_statistics(coordinator, make_ticket):
    blank = coordinator.create_ticket()
    with pytest.raises(ValidationError):
        coordinator.fill_all_tickets_with_numbers()

    make_ticket(WINNING, "1")
    coordinator.start_game()
    _draw(coordinator, (*WINNING, 11, 12, 13))
    coordinator.settle_game(main_amount=1.0)

    assert coordinator.fill_all_tickets_with_numbers() == 1
    filled = next(t for t in coordinator.state.tickets if t.id == blank.id)
    assert len(filled.numbers) == 7
    assert list(filled.numbers) == sorted(filled.numbers)
    assert filled.numbers == tuple(sorted(coordinator.recommended_numbers()))


def test_history_deletion(coordinator, make_ticket):
    make_ticket(WINNING, "1")
    for _ in range(2):
        coordinator.start_game()
        coordinator.settle_game()

    first, second = coordinator.state.history
    coordinator.delete_history_entry(first.id)
    assert [e.id for e in coordinator.state.history] == [second.id]

    with pytest.raises(NotFoundError):
        coordinator.delete_history_entry("missing")

    coordinator.clear_game_history()
    assert coordinator.state.history == ()
    assert not coordinator.has_statistical_data()
    assert coordinator.statistics().total_games == 0


def test_load_data_restores_tickets(store, make_ticket):
    make_ticket(WINNING, "1")

    fresh = GameCoordinator(store)
    assert fresh.state.tickets == ()
    assert len(fresh.load_data().tickets) == 1


def test_edits_during_active_game_do_not_reach_history(coordinator, make_ticket):
    ticket = make_ticket(WINNING, "000123")
    coordinator.start_game()

    coordinator.update_ticket(ticket.id, {"numbers": list(LOSING)})
    _draw(coordinator, WINNING)
    assert [t.id for t in coordinator.state.winning_tickets] == [ticket.id]

    coordinator.settle_game(main_amount=10.0)

    [entry] = coordinator.state.history
    assert entry.game.tables[0].numbers == WINNING
    assert entry.winners[0].ticket.numbers == WINNING
    assert next(t for t in coordinator.state.tickets if t.id == ticket.id).numbers == LOSING


def test_finish_game_rejects_player_winners_in_opponent_only_mode(coordinator, make_ticket):
    ticket = make_ticket(WINNING, "1")
    game = coordinator.start_game(opponent_only=True)
    winner = Winner(id="w1", game_id=game.id, ticket=ticket, winning_amount=5.0)

    with pytest.raises(ValidationError):
        coordinator.finish_game([winner])
    assert coordinator.state.phase is GamePhase.ACTIVE
