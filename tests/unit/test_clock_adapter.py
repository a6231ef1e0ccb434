from datetime import UTC, datetime

from postlab.adapters.clock import FixedClock, SystemClock


def test_system_clock():
    clock = SystemClock()
    now = clock.now_utc()
    assert isinstance(now, datetime)
    assert now.tzinfo is not None
    diff = abs((datetime.now(UTC) - now).total_seconds())
    assert diff < 1.0


def test_fixed_clock_advance():
    clock = FixedClock(datetime(2026, 1, 1, tzinfo=UTC))
    clock.advance(minutes=5)
    assert clock.now_utc() == datetime(2026, 1, 1, 0, 5, tzinfo=UTC)
