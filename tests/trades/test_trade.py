"""
Unit tests for the trade data model.
"""

import pytest

from trade_discipline.trades.trade import (
    InvalidTradeStateError,
    TakeProfitLevel,
    Trade,
    TradeDraft,
    TradeSetup,
    TradeSide,
    TradeState,
    TradeStatus,
    TradeValidationError,
    infer_trade_side,
)


def make_setup(**overrides):
    values = dict(
        entry_price=50000.0,
        stop_loss=48000.0,
        risk_percent=2.0,
        account_size=10000.0,
        tp1=52000.0,
        tp2=55000.0,
        tp3=60000.0,
        position_size=0.1,
        risk_amount=200.0,
    )
    values.update(overrides)
    return TradeSetup(**values)


class TestTradeSide:
    @pytest.mark.parametrize("value", ["long", "LONG", " Long ", TradeSide.LONG])
    def test_parse_long(self, value):
        assert TradeSide.parse(value) is TradeSide.LONG

    def test_parse_blank_is_none(self):
        assert TradeSide.parse("") is None
        assert TradeSide.parse(None) is None

    def test_parse_unknown(self):
        with pytest.raises(TradeValidationError):
            TradeSide.parse("flat")

    def test_infer_from_first_target(self):
        assert infer_trade_side(100.0, 110.0) is TradeSide.LONG
        assert infer_trade_side(100.0, 90.0) is TradeSide.SHORT
        assert infer_trade_side(100.0, 100.0) is TradeSide.SHORT


class TestTakeProfitLevel:
    @pytest.mark.parametrize(
        "value,expected",
        [(1, TakeProfitLevel.TP1), ("tp2", TakeProfitLevel.TP2), ("TP3", TakeProfitLevel.TP3)],
    )
    def test_parse(self, value, expected):
        assert TakeProfitLevel.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(TradeValidationError, match="Unknown take-profit level"):
            TakeProfitLevel.parse("tp4")


class TestTradeDraft:
    def test_from_dict_mixed_keys(self):
        draft = TradeDraft.from_dict(
            {"entryPrice": "100.5", "stop_loss": 99, "tp1": "", "side": "short"}
        )

        assert draft.entry_price == 100.5
        assert draft.stop_loss == 99.0
        assert draft.tp1 is None
        assert draft.side is TradeSide.SHORT

    def test_from_dict_non_numeric(self):
        with pytest.raises(TradeValidationError, match="entry_price must be numeric"):
            TradeDraft.from_dict({"entryPrice": "abc"})

    def test_with_defaults_keeps_explicit_risk(self):
        draft = TradeDraft(risk_percent=1.0)
        assert draft.with_defaults(2.0) is draft
        assert TradeDraft().with_defaults(2.0).risk_percent == 2.0

    def test_from_setup(self):
        draft = TradeDraft.from_setup(make_setup(side="long"))
        assert draft.entry_price == 50000.0
        assert draft.side is TradeSide.LONG


class TestTradeSetup:
    def test_inferred_direction(self):
        assert make_setup().direction is TradeSide.LONG
        assert make_setup(tp1=45000.0).direction is TradeSide.SHORT

    def test_explicit_side_wins(self):
        setup = make_setup(side=TradeSide.SHORT)
        assert setup.direction is TradeSide.SHORT
        assert not setup.is_long

    def test_reward_to_risk(self):
        setup = make_setup()
        assert setup.risk_per_unit == 2000.0
        assert setup.reward_to_risk == 1.0

    def test_reward_to_risk_zero_distance(self):
        assert make_setup(stop_loss=50000.0).reward_to_risk == 0.0


class TestTradeStatus:
    """The constructor rejects states the lifecycle can never reach."""

    def test_planned(self):
        status = TradeStatus.planned(48000.0, 2.0)

        assert status.is_active
        assert status.current_sl == 48000.0
        assert status.trailing_stop_percent == 2.0
        assert not any((status.tp1_hit, status.tp2_hit, status.tp3_hit))

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"tp2_hit": True}, "TP2 cannot be hit before TP1"),
            ({"tp1_hit": True, "tp3_hit": True, "is_active": False}, "TP3 cannot be hit before TP2"),
            ({"tp1_hit": True, "tp2_hit": True, "tp3_hit": True}, "cannot be active"),
            ({"stopped_out": True}, "stopped-out trade cannot be active"),
            ({"trailing_stop_percent": -1.0}, "cannot be negative"),
        ],
    )
    def test_rejects_unreachable_states(self, kwargs, message):
        with pytest.raises(InvalidTradeStateError, match=message):
            TradeStatus(**kwargs)

    def test_is_hit(self):
        status = TradeStatus(tp1_hit=True)
        assert status.is_hit(TakeProfitLevel.TP1)
        assert not status.is_hit(TakeProfitLevel.TP2)


class TestTrade:
    def test_create(self):
        trade = Trade.create(make_setup(), trailing_stop_percent=2.5, symbol="ethusdt")

        assert trade.state is TradeState.PLANNED
        assert trade.symbol == "ETHUSDT"
        assert trade.status.current_sl == 48000.0
        assert trade.status.trailing_stop_percent == 2.5
        assert trade.progress_percent == 0

    def test_ids_are_unique(self):
        setup = make_setup()
        assert Trade.create(setup).id != Trade.create(setup).id

    def test_state_and_progress(self):
        trade = Trade.create(make_setup())
        status = TradeStatus(tp1_hit=True, tp2_hit=True, current_sl=50000.0)
        advanced = trade.with_status(status)

        assert advanced.state is TradeState.TP2_HIT
        assert advanced.progress_percent == 66
        assert advanced.id == trade.id

        closed = trade.with_status(
            TradeStatus(is_active=False, tp1_hit=True, tp2_hit=True, tp3_hit=True)
        )
        assert closed.state is TradeState.CLOSED
        assert closed.state.is_terminal
        assert closed.progress_percent == 100

    def test_target_price(self):
        trade = Trade.create(make_setup())
        assert trade.target_price(TakeProfitLevel.TP2) == 55000.0

    def test_summary(self):
        trade = Trade.create(make_setup(), symbol="btcusdt")
        summary = trade.get_trade_summary()

        assert summary["id"] == trade.id
        assert summary["side"] == "long"
        assert summary["state"] == "planned"
        assert summary["current_sl"] == 48000.0
        assert summary["progress_percent"] == 0
