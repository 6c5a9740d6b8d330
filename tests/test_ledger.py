"""Wager ledger tests: placement validation, multiplier tokens, settlement."""

import pytest

from matchsim.betting.ledger import LedgerError, LedgerErrorCode, WagerLedger, parse_kind
from matchsim.models.wager import Wager, WagerKind, WagerStatus


@pytest.fixture
def ledger():
    return WagerLedger(starting_balance=1000.0)


def test_place_and_settle_opportunity_wager(ledger):
    wager = ledger.place_wager("Opportunity", "goal", 50, 4.5, "E1")
    assert isinstance(wager, Wager)
    assert wager.status is WagerStatus.PENDING
    assert wager.potential_payout == 225
    assert ledger.balance == 950

    settlement = ledger.settle("goal", "Opportunity", "E1")
    assert settlement.total_payout == 225
    assert settlement.settled_count == 1
    assert settlement.won_count == 1
    assert ledger.balance == 1175
    settled = ledger.account.find(wager.wager_id)
    assert settled.status is WagerStatus.WON
    assert settled.payout == 225


def test_losing_wager_keeps_stake_debited(ledger):
    w = ledger.place_wager(WagerKind.OPPORTUNITY, "red_card", 20, 8.0, "E2")
    settlement = ledger.settle("warning", WagerKind.OPPORTUNITY, "E2")
    assert settlement.total_payout == 0
    assert ledger.balance == 980
    assert ledger.account.find(w.wager_id).status is WagerStatus.LOST


def test_settle_is_idempotent(ledger):
    ledger.place_wager("opportunity", "goal", 50, 4.5, "E1")
    ledger.settle("goal", "opportunity", "E1")
    again = ledger.settle("goal", "opportunity", "E1")
    assert again.settled_count == 0
    assert again.total_payout == 0
    assert ledger.balance == 1175


def test_settle_only_touches_the_bound_event(ledger):
    a = ledger.place_wager("opportunity", "goal", 10, 2.0, "E1")
    b = ledger.place_wager("opportunity", "goal", 10, 2.0, "E2")
    ledger.settle("goal", "opportunity", "E1")
    assert ledger.account.find(a.wager_id).status is WagerStatus.WON
    assert ledger.account.find(b.wager_id).is_pending
    assert ledger.pending_wagers("opportunity") == [ledger.account.find(b.wager_id)]


def test_settle_continuous_leaves_opportunity_wagers(ledger):
    c = ledger.place_wager("continuous", "home", 100, 1.85)
    o = ledger.place_wager("opportunity", "home", 10, 2.0, "E1")
    settlement = ledger.settle("home", "continuous")
    assert settlement.total_payout == pytest.approx(185)
    assert ledger.account.find(c.wager_id).status is WagerStatus.WON
    assert ledger.account.find(o.wager_id).is_pending


def test_settle_unknown_kind_raises(ledger):
    with pytest.raises(ValueError):
        ledger.settle("goal", "parlay")


@pytest.mark.parametrize(
    "args, code",
    [
        (("parlay", "goal", 10, 2.0), LedgerErrorCode.INVALID_KIND),
        (("opportunity", "", 10, 2.0), LedgerErrorCode.INVALID_OUTCOME),
        (("opportunity", "goal", 0, 2.0), LedgerErrorCode.INVALID_STAKE),
        (("opportunity", "goal", -5, 2.0), LedgerErrorCode.INVALID_STAKE),
        (("opportunity", "goal", "ten", 2.0), LedgerErrorCode.INVALID_STAKE),
        (("opportunity", "goal", float("nan"), 2.0), LedgerErrorCode.INVALID_STAKE),
        (("opportunity", "goal", 1001, 2.0), LedgerErrorCode.INSUFFICIENT_FUNDS),
        (("opportunity", "goal", 10, 0), LedgerErrorCode.INVALID_ODDS),
        (("opportunity", "goal", 10, -1.5), LedgerErrorCode.INVALID_ODDS),
    ],
)
def test_place_wager_rejections_leave_account_untouched(ledger, args, code):
    before = ledger.account
    result = ledger.place_wager(*args)
    assert isinstance(result, LedgerError)
    assert result.code is code
    assert ledger.account is before


def test_validation_order_reports_first_failure(ledger):
    # Bad kind and bad stake: kind is checked first
    assert ledger.place_wager("parlay", "goal", -1, 2.0).code is LedgerErrorCode.INVALID_KIND
    # Bad stake and bad odds: stake is checked first
    assert ledger.place_wager("opportunity", "goal", 0, 0).code is LedgerErrorCode.INVALID_STAKE


def test_stake_equal_to_balance_is_accepted(ledger):
    w = ledger.place_wager("continuous", "draw", 1000, 3.5)
    assert isinstance(w, Wager)
    assert ledger.balance == 0


def test_parse_kind_is_case_insensitive():
    assert parse_kind("Opportunity") is WagerKind.OPPORTUNITY
    assert parse_kind("CONTINUOUS") is WagerKind.CONTINUOUS
    assert parse_kind(WagerKind.CONTINUOUS) is WagerKind.CONTINUOUS
    assert parse_kind("parlay") is None
    assert parse_kind(3) is None


def test_multiplier_doubles_winning_payout(ledger):
    w = ledger.place_wager("opportunity", "goal", 50, 4.5, "E1")
    assert ledger.award_multiplier() is True
    assert ledger.award_multiplier() is False  # at most one token held
    assert ledger.multiplier_tokens == 1

    boosted = ledger.apply_multiplier(w.wager_id)
    assert boosted.multiplier_applied
    assert boosted.potential_payout == 450
    assert ledger.multiplier_tokens == 0

    settlement = ledger.settle("goal", "opportunity", "E1")
    assert settlement.total_payout == 450
    assert ledger.balance == 950 + 450


def test_apply_multiplier_failures(ledger):
    w = ledger.place_wager("opportunity", "goal", 10, 2.0, "E1")
    assert ledger.apply_multiplier("W999").code is LedgerErrorCode.WAGER_NOT_FOUND
    assert ledger.apply_multiplier(w.wager_id).code is LedgerErrorCode.NO_MULTIPLIER

    ledger.award_multiplier()
    ledger.apply_multiplier(w.wager_id)
    ledger.award_multiplier()
    assert ledger.apply_multiplier(w.wager_id).code is LedgerErrorCode.ALREADY_MULTIPLIED
    assert ledger.multiplier_tokens == 1  # failed application keeps the token

    ledger.settle("goal", "opportunity", "E1")
    assert ledger.apply_multiplier(w.wager_id).code is LedgerErrorCode.WAGER_NOT_PENDING


def test_cancel_refunds_stake(ledger):
    w = ledger.place_wager("opportunity", "goal", 40, 3.0, "E1")
    assert ledger.cancel_wager(w.wager_id) == 40
    assert ledger.balance == 1000
    assert ledger.account.find(w.wager_id).status is WagerStatus.CANCELLED
    assert ledger.cancel_wager(w.wager_id).code is LedgerErrorCode.WAGER_NOT_PENDING
    assert ledger.cancel_wager("W999").code is LedgerErrorCode.WAGER_NOT_FOUND
    # Cancelled wagers are ignored by settlement
    assert ledger.settle("goal", "opportunity", "E1").settled_count == 0
    assert ledger.total_staked() == 0


def test_wager_ids_are_sequential_and_summary_lists_all(ledger):
    a = ledger.place_wager("continuous", "home", 10, 1.85)
    b = ledger.place_wager("opportunity", "goal", 10, 4.5, "E1")
    assert (a.wager_id, b.wager_id) == ("W1", "W2")
    rows = ledger.summary()
    assert [r["wager_id"] for r in rows] == ["W1", "W2"]
    assert rows[1]["status"] == "pending"
    assert ledger.total_staked() == 20
