import pytest
from sqlalchemy.exc import SQLAlchemyError

from wizard_scorer.core.exceptions import (
    GameNotFound, InvalidBid, InvalidPlayerCount, InvalidRound, InvalidRoundState,
    InvalidSeat, PersistenceError, PlayerNotFound, RoundNotFound, SeatsNotAssigned,
    TrickCountMismatch, TrumpSuitLocked
)
from wizard_scorer.models.bid import Bid
from wizard_scorer.models.game import Game
from wizard_scorer.models.game_player import GamePlayer
from wizard_scorer.models.game_round import Round
from wizard_scorer.services.game_service import GameService, game_service_obj
from wizard_scorer.services.player_service import player_service_obj
from wizard_scorer.services.round_service import RoundService, round_service_obj

pytestmark = pytest.mark.usefixtures("db_cleanup")


def raise_database_error(*args, **kwargs):
    raise SQLAlchemyError("database is locked")


def make_game(db, names, seats=None):
    """Create players and a seated game; returns (game_id, [player ids])."""
    player_ids = [player_service_obj.create_player(db, name).id for name in names]
    game = game_service_obj.create_game(db, player_ids)
    seating = seats or {player_id: seat for seat, player_id in enumerate(player_ids, 1)}
    game_service_obj.arrange_seats(db, game["id"], seating)
    return game["id"], player_ids


def play_round(db, game_id, round_number, bids, tricks):
    round_ = round_service_obj.create_round(db, game_id, round_number, round_number)
    round_service_obj.submit_bids(db, round_.id, bids)
    result = round_service_obj.complete_round(db, round_.id, bids, tricks)
    return round_.id, result


def game_players(db, game_id):
    return {
        gp.player_id: gp
        for gp in db.query(GamePlayer).filter(GamePlayer.game_id == game_id).all()
    }


class TestRoundLifecycle:

    def test_create_round_starts_game(self, db_session):
        game_id, _ = make_game(db_session, ["ann", "ben", "cat"])

        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)

        assert round_.status == "BIDDING"
        assert round_.trump_suit is None
        assert round_.bids == []
        game = db_session.get(Game, game_id)
        assert game.status == "IN_PROGRESS"
        assert game.started_at is not None

    def test_submit_bids_moves_round_to_playing(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)

        round_ = round_service_obj.submit_bids(db_session, round_.id, {a: 1, b: 0}, "Hearts")

        assert round_.status == "PLAYING"
        assert round_.trump_suit == "Hearts"
        bids = {bid.player_id: bid for bid in round_.bids}
        assert bids[a].bid_amount == 1
        assert bids[c].bid_amount == 0
        assert bids[a].tricks_taken is None
        assert bids[a].score is None

    def test_first_round_scores_and_advances(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])

        _, result = play_round(
            db_session, game_id, 1, {a: 1, b: 0, c: 0}, {a: 1, b: 0, c: 0}
        )

        assert result["scores"] == {a: 30, b: 20, c: 20}
        assert result["current_round"] == 2
        assert result["game_status"] == "IN_PROGRESS"
        totals = game_players(db_session, game_id)
        assert totals[a].total_score == 30
        assert totals[b].total_score == 20
        assert totals[a].position is None

    def test_last_round_completes_game(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])

        for round_number in range(1, 21):
            _, result = play_round(
                db_session, game_id, round_number,
                {a: round_number, b: 0, c: 1},
                {a: round_number, b: 0, c: 0}
            )

        assert result["game_status"] == "COMPLETED"
        game = db_session.get(Game, game_id)
        assert game.status == "COMPLETED"
        assert game.ended_at is not None
        assert game.current_round == 20
        totals = game_players(db_session, game_id)
        assert totals[a].total_score == 2500
        assert totals[b].total_score == 400
        assert totals[c].total_score == -200
        assert [totals[p].position for p in (a, b, c)] == [1, 2, 3]

    def test_tied_final_scores_rank_by_seat(self, db_session):
        names = ["ann", "ben", "cat", "dan", "eve", "fay"]
        player_ids = [player_service_obj.create_player(db_session, name).id for name in names]
        a, b, c, d, e, f = player_ids
        seats = {a: 1, f: 2, e: 3, d: 4, c: 5, b: 6}
        game = game_service_obj.create_game(db_session, player_ids)
        game_service_obj.arrange_seats(db_session, game["id"], seats)

        for round_number in range(1, 11):
            bids = {player_id: 0 for player_id in player_ids}
            bids[a] = round_number
            tricks = dict(bids)
            play_round(db_session, game["id"], round_number, bids, tricks)

        totals = game_players(db_session, game["id"])
        assert {totals[p].total_score for p in (b, c, d, e, f)} == {200}
        assert [totals[p].position for p in (a, f, e, d, c, b)] == [1, 2, 3, 4, 5, 6]

    def test_recompleting_round_is_idempotent(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        bids = {a: 1, b: 0, c: 1}
        tricks = {a: 0, b: 0, c: 1}
        round_id, first = play_round(db_session, game_id, 1, bids, tricks)

        second = round_service_obj.complete_round(db_session, round_id, bids, tricks)

        assert second["scores"] == first["scores"]
        assert second["current_round"] == 2
        assert db_session.query(Bid).filter(Bid.round_id == round_id).count() == 3
        totals = game_players(db_session, game_id)
        assert totals[a].total_score == -10
        assert totals[c].total_score == 30

    def test_correcting_earlier_round_recomputes_full_totals(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        first_round_id, _ = play_round(
            db_session, game_id, 1, {a: 1, b: 0, c: 0}, {a: 1, b: 0, c: 0}
        )
        play_round(db_session, game_id, 2, {a: 1, b: 1, c: 0}, {a: 1, b: 1, c: 0})

        result = round_service_obj.complete_round(
            db_session, first_round_id, {a: 1, b: 0, c: 0}, {a: 0, b: 1, c: 0}
        )

        assert result["scores"] == {a: -10, b: -10, c: 20}
        assert result["current_round"] == 3
        totals = game_players(db_session, game_id)
        assert totals[a].total_score == -10 + 30
        assert totals[b].total_score == -10 + 30
        assert totals[c].total_score == 20 + 20

    def test_complete_falls_back_to_submitted_bids(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)
        round_service_obj.submit_bids(db_session, round_.id, {a: 1, b: 0, c: 0})

        result = round_service_obj.complete_round(db_session, round_.id, {}, {a: 1})

        assert result["scores"] == {a: 30, b: 20, c: 20}

    def test_editing_completed_game_reranks(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ids = []
        for round_number in range(1, 21):
            round_id, _ = play_round(
                db_session, game_id, round_number,
                {a: 0, b: 0, c: 0},
                {a: round_number, b: 0, c: 0}
            )
            round_ids.append(round_id)
        ended_at = db_session.get(Game, game_id).ended_at
        assert game_players(db_session, game_id)[b].position == 1

        round_service_obj.complete_round(
            db_session, round_ids[19], {a: 20, b: 1, c: 0}, {a: 20, b: 0, c: 0}
        )

        totals = game_players(db_session, game_id)
        assert totals[b].total_score == 370
        assert totals[c].total_score == 400
        assert [totals[p].position for p in (c, b, a)] == [1, 2, 3]
        game = db_session.get(Game, game_id)
        assert game.status == "COMPLETED"
        assert game.ended_at == ended_at

    def test_finished_game_stays_on_last_round(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ids = []
        for round_number in range(1, 21):
            round_id, result = play_round(
                db_session, game_id, round_number, {a: 0, b: 0, c: 0}, {a: round_number}
            )
            round_ids.append(round_id)
        assert result["current_round"] == 20

        result = round_service_obj.complete_round(
            db_session, round_ids[0], {a: 1, b: 0, c: 0}, {a: 1}
        )

        assert result["current_round"] == 20
        assert result["game_status"] == "COMPLETED"
        state = game_service_obj.get_game_state(db_session, game_id)
        assert state["current_round"] == state["total_rounds"]
        assert state["dealer_seat"] is None
        assert state["bidding_order"] == []


class TestRoundValidation:

    def test_trick_total_must_match_cards(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)
        round_service_obj.submit_bids(db_session, round_.id, {a: 1})

        with pytest.raises(TrickCountMismatch):
            round_service_obj.complete_round(db_session, round_.id, {a: 1}, {a: 1, b: 1})
        assert db_session.query(Bid).filter(Bid.score.isnot(None)).count() == 0

    def test_total_bids_may_differ_from_cards(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)

        round_ = round_service_obj.submit_bids(db_session, round_.id, {a: 1, b: 1, c: 1})

        assert round_.status == "PLAYING"

    def test_bid_above_cards_dealt_rejected(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)

        with pytest.raises(InvalidBid):
            round_service_obj.submit_bids(db_session, round_.id, {a: 2})

    def test_bid_for_outside_player_rejected(self, db_session):
        game_id, _ = make_game(db_session, ["ann", "ben", "cat"])
        outsider = player_service_obj.create_player(db_session, "zed")
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)

        with pytest.raises(PlayerNotFound):
            round_service_obj.submit_bids(db_session, round_.id, {outsider.id: 0})

    def test_trump_suit_is_fixed_once_set(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)
        round_service_obj.submit_bids(db_session, round_.id, {a: 1}, "Spades")

        with pytest.raises(TrumpSuitLocked):
            round_service_obj.submit_bids(db_session, round_.id, {a: 0}, "Clubs")

        round_ = round_service_obj.submit_bids(db_session, round_.id, {a: 0})
        assert round_.trump_suit == "Spades"

    def test_completed_round_rejects_new_bids(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_id, _ = play_round(db_session, game_id, 1, {a: 1}, {a: 1})

        with pytest.raises(InvalidRoundState):
            round_service_obj.submit_bids(db_session, round_id, {a: 0})

    def test_round_in_bidding_cannot_complete(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)

        with pytest.raises(InvalidRoundState):
            round_service_obj.complete_round(db_session, round_.id, {a: 1}, {a: 1})

    def test_cards_must_equal_round_number(self, db_session):
        game_id, _ = make_game(db_session, ["ann", "ben", "cat"])

        with pytest.raises(InvalidRound):
            round_service_obj.create_round(db_session, game_id, 1, 2)

    def test_rounds_are_created_in_order(self, db_session):
        game_id, _ = make_game(db_session, ["ann", "ben", "cat"])
        round_service_obj.create_round(db_session, game_id, 1, 1)

        with pytest.raises(InvalidRound):
            round_service_obj.create_round(db_session, game_id, 1, 1)
        with pytest.raises(InvalidRound):
            round_service_obj.create_round(db_session, game_id, 3, 3)

    def test_first_round_needs_every_seat(self, db_session):
        player_ids = [player_service_obj.create_player(db_session, n).id for n in ["ann", "ben", "cat"]]
        game = game_service_obj.create_game(db_session, player_ids)
        game_service_obj.assign_seat(db_session, game["id"], player_ids[0], 1)

        with pytest.raises(SeatsNotAssigned):
            round_service_obj.create_round(db_session, game["id"], 1, 1)

    def test_missing_records(self, db_session):
        with pytest.raises(GameNotFound):
            round_service_obj.create_round(db_session, 999, 1, 1)
        with pytest.raises(RoundNotFound):
            round_service_obj.submit_bids(db_session, 999, {})
        with pytest.raises(RoundNotFound):
            round_service_obj.complete_round(db_session, 999, {}, {})

    def test_failed_completion_rolls_back(self, db_session, monkeypatch):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_ = round_service_obj.create_round(db_session, game_id, 1, 1)
        round_service_obj.submit_bids(db_session, round_.id, {a: 1, b: 0, c: 0})
        monkeypatch.setattr(RoundService, "recompute_standings", raise_database_error)

        with pytest.raises(PersistenceError):
            round_service_obj.complete_round(
                db_session, round_.id, {a: 1, b: 0, c: 0}, {a: 1, b: 0, c: 0}
            )

        assert db_session.query(Bid).filter(Bid.score.isnot(None)).count() == 0
        assert db_session.get(Round, round_.id).status == "PLAYING"
        assert db_session.get(Game, game_id).current_round == 1
        assert all(gp.total_score == 0 for gp in game_players(db_session, game_id).values())


class TestGameSetup:

    @pytest.mark.parametrize("count", [2, 7])
    def test_player_count_limits(self, db_session, count):
        player_ids = [player_service_obj.create_player(db_session, f"p{i}").id for i in range(count)]

        with pytest.raises(InvalidPlayerCount):
            game_service_obj.create_game(db_session, player_ids)

    def test_duplicate_players_rejected(self, db_session):
        a = player_service_obj.create_player(db_session, "ann").id
        b = player_service_obj.create_player(db_session, "ben").id

        with pytest.raises(InvalidPlayerCount):
            game_service_obj.create_game(db_session, [a, b, a])

    def test_create_game_derives_rounds(self, db_session):
        player_ids = [player_service_obj.create_player(db_session, f"p{i}").id for i in range(5)]

        game = game_service_obj.create_game(db_session, player_ids)

        assert game["status"] == "SETUP"
        assert game["total_rounds"] == 12
        assert game["current_round"] == 1
        assert all(p["total_score"] == 0 for p in game["players"])

    def test_assign_seat_unseats_previous_occupant(self, db_session):
        player_ids = [player_service_obj.create_player(db_session, n).id for n in ["ann", "ben", "cat"]]
        game = game_service_obj.create_game(db_session, player_ids)
        game_service_obj.assign_seat(db_session, game["id"], player_ids[0], 2)

        state = game_service_obj.assign_seat(db_session, game["id"], player_ids[1], 2)

        seats = {p["player_id"]: p["seat_position"] for p in state["players"]}
        assert state["status"] == "SEAT_ARRANGEMENT"
        assert seats[player_ids[0]] is None
        assert seats[player_ids[1]] == 2

    def test_seating_must_be_a_permutation(self, db_session):
        player_ids = [player_service_obj.create_player(db_session, n).id for n in ["ann", "ben", "cat"]]
        game = game_service_obj.create_game(db_session, player_ids)

        with pytest.raises(InvalidSeat):
            game_service_obj.arrange_seats(
                db_session, game["id"], {player_ids[0]: 1, player_ids[1]: 1, player_ids[2]: 2}
            )
        with pytest.raises(InvalidSeat):
            game_service_obj.arrange_seats(
                db_session, game["id"], {player_ids[0]: 1, player_ids[1]: 2, player_ids[2]: 4}
            )

    def test_failed_seat_arrangement_rolls_back(self, db_session, monkeypatch):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        monkeypatch.setattr(GameService, "_begin_seat_arrangement", raise_database_error)

        with pytest.raises(PersistenceError):
            game_service_obj.arrange_seats(db_session, game_id, {a: 3, b: 2, c: 1})

        seats = {player_id: gp.seat_position for player_id, gp in game_players(db_session, game_id).items()}
        assert seats == {a: 1, b: 2, c: 3}
        assert db_session.get(Game, game_id).status == "SEAT_ARRANGEMENT"

    def test_seats_fixed_after_play_starts(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        round_service_obj.create_round(db_session, game_id, 1, 1)

        with pytest.raises(InvalidSeat):
            game_service_obj.assign_seat(db_session, game_id, a, 2)

    def test_game_state_reports_turn_order(self, db_session):
        game_id, (a, b, c) = make_game(db_session, ["ann", "ben", "cat"])
        play_round(db_session, game_id, 1, {a: 0}, {b: 1})

        state = game_service_obj.get_game_state(db_session, game_id)

        assert state["current_round"] == 2
        assert state["dealer_seat"] == 2
        assert state["first_bidder_seat"] == 3
        assert state["bidding_order"] == [c, a, b]
        assert [r["round_number"] for r in state["rounds"]] == [1]
        assert {bid["player_name"] for bid in state["rounds"][0]["bids"]} == {"ann", "ben", "cat"}
