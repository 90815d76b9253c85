"""Tests for ps_events.engine.flash_board.FlashBoard."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from src.ps_events.engine.flash_board import FLASH_VOLATILITY_BOOST, FlashBoard

START = datetime(2026, 3, 1, 20, 0, 0, tzinfo=UTC)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class TestFlashBoard:
    def test_activate_notifies(self) -> None:
        board = FlashBoard(duration_seconds=30, clock=_Clock(START))
        observer = MagicMock()
        board.on_activated(observer)
        flash = board.activate("e", "Entity E", 2.5, "clutch three")
        observer.assert_called_once_with(flash)
        assert board.multiplier_for("e") == 2.5
        assert board.volatility_factor("e") == FLASH_VOLATILITY_BOOST
        assert board.volatility_factor("f") == 1.0

    def test_reactivation_replaces(self) -> None:
        clock = _Clock(START)
        board = FlashBoard(duration_seconds=30, clock=clock)
        board.activate("e", "Entity E", 2.5, "first")
        clock.advance(20)
        board.activate("e", "Entity E", 3.0, "second")
        clock.advance(20)
        assert board.sweep() == []
        assert [f.multiplier for f in board.active()] == [3.0]

    def test_sweep_expires_at_duration(self) -> None:
        clock = _Clock(START)
        board = FlashBoard(duration_seconds=30, clock=clock)
        expired_observer = MagicMock()
        board.on_expired(expired_observer)
        board.activate("e", "Entity E", 2.5, "clutch three")

        clock.advance(29)
        assert board.sweep() == []
        clock.advance(1)
        expired = board.sweep()
        assert [f.player_id for f in expired] == ["e"]
        assert expired[0].is_active is False
        expired_observer.assert_called_once_with(expired[0])
        assert board.active() == []

    def test_expired_but_unswept_is_not_reported(self) -> None:
        clock = _Clock(START)
        board = FlashBoard(duration_seconds=10, clock=clock)
        board.activate("e", "Entity E", 2.0, "block")
        clock.advance(11)
        assert board.get("e") is None
        assert board.multiplier_for("e") is None
        assert board.volatility_factor("e") == 1.0

    def test_remaining(self) -> None:
        clock = _Clock(START)
        board = FlashBoard(duration_seconds=30, clock=clock)
        flash = board.activate("e", "Entity E", 2.0, "dunk", duration_seconds=12)
        assert flash.remaining(START + timedelta(seconds=5)) == 7.0
        assert flash.remaining(START + timedelta(seconds=60)) == 0.0

    def test_failing_observer_is_isolated(self) -> None:
        board = FlashBoard(clock=_Clock(START))
        board.on_activated(MagicMock(side_effect=RuntimeError("boom")))
        good = MagicMock()
        board.on_activated(good)
        board.activate("e", "Entity E", 2.0, "dunk")
        good.assert_called_once()
