import threading

import pytest

from pokt_relay.session import SessionState


def test_session_starts_unknown():
    assert SessionState().current() == 0


def test_correct_overwrites_height():
    s = SessionState(5)
    s.correct(9)
    assert s.current() == 9
    # explicit correction may move backwards
    s.correct(3)
    assert s.current() == 3


@pytest.mark.parametrize("bad", [-1, "9", 1.5, True, None])
def test_correct_rejects_invalid_heights(bad):
    s = SessionState(5)
    with pytest.raises(ValueError):
        s.correct(bad)
    assert s.current() == 5


def test_concurrent_reads_see_whole_values():
    s = SessionState(0)
    seen = []

    def writer():
        for h in range(1, 500):
            s.correct(h)

    def reader():
        for _ in range(500):
            seen.append(s.current())

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert s.current() == 499
    assert all(0 <= h <= 499 for h in seen)
