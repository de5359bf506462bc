import threading
from datetime import date, timedelta

import pytest

from hecubot.photos import DailyQuotaCounter, QuotaState

DAY = date(2024, 3, 1)


class _Clock:
    def __init__(self, today):
        self.today = today

    def __call__(self):
        return self.today


def test_consumes_until_maximum():
    quota = DailyQuotaCounter(3, clock=_Clock(DAY))

    assert [quota.try_consume() for _ in range(4)] == [True, True, True, False]
    assert quota.state == QuotaState(3, DAY)
    assert quota.remaining() == 0


def test_last_slot_then_refusal():
    quota = DailyQuotaCounter(100, clock=_Clock(DAY), initial=QuotaState(99, DAY))

    assert quota.try_consume() is True
    assert quota.try_consume() is False
    assert quota.state.count == 100


def test_rollover_on_new_day():
    clock = _Clock(DAY)
    quota = DailyQuotaCounter(100, clock=clock, initial=QuotaState(100, DAY))
    assert quota.try_consume() is False

    clock.today = DAY + timedelta(days=1)

    assert quota.remaining() == 100
    assert quota.try_consume() is True
    assert quota.state == QuotaState(1, DAY + timedelta(days=1))


def test_stale_initial_state_rolls_over():
    quota = DailyQuotaCounter(5, clock=_Clock(DAY), initial=QuotaState(5, DAY - timedelta(days=3)))

    assert quota.try_consume() is True
    assert quota.state == QuotaState(1, DAY)


def test_invalid_maximum():
    with pytest.raises(ValueError):
        DailyQuotaCounter(0)


def test_concurrent_consumers_never_exceed_maximum():
    quota = DailyQuotaCounter(10, clock=_Clock(DAY))
    workers = 32
    barrier = threading.Barrier(workers)
    granted = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        ok = quota.try_consume()
        with lock:
            granted.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert granted.count(True) == 10
    assert quota.state.count == 10
