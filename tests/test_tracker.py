import threading

from hecubot.tracker import RequestTracker
from hecubot.types import PendingRequest, RequestKind

CHAT = 100
USER = 7


def test_activate_is_idempotent():
    tracker = RequestTracker()

    assert tracker.activate(CHAT) is True
    assert tracker.activate(CHAT) is False
    assert tracker.is_active(CHAT)
    assert tracker.active_chats() == frozenset({CHAT})


def test_deactivate_drops_pending_requests():
    tracker = RequestTracker()
    tracker.activate(CHAT)
    tracker.begin_request(CHAT, USER, RequestKind.SAY)

    assert tracker.deactivate(CHAT) is True
    assert not tracker.is_active(CHAT)
    assert tracker.pending(CHAT) == frozenset()
    assert tracker.consume(CHAT, USER, RequestKind.SAY) is False


def test_deactivate_inactive_chat():
    assert RequestTracker().deactivate(CHAT) is False


def test_begin_request_requires_active_chat():
    tracker = RequestTracker()

    assert tracker.begin_request(CHAT, USER, RequestKind.SAY) is False
    assert not tracker.has_pending(CHAT, USER)


def test_one_pending_request_per_user():
    tracker = RequestTracker()
    tracker.activate(CHAT)

    assert tracker.begin_request(CHAT, USER, RequestKind.SAY) is True
    assert tracker.begin_request(CHAT, USER, RequestKind.PHOTO) is False
    assert tracker.begin_request(CHAT, USER + 1, RequestKind.PHOTO) is True
    assert tracker.pending(CHAT) == frozenset(
        {PendingRequest(USER, RequestKind.SAY), PendingRequest(USER + 1, RequestKind.PHOTO)}
    )


def test_consume_matches_kind():
    tracker = RequestTracker()
    tracker.activate(CHAT)
    tracker.begin_request(CHAT, USER, RequestKind.BINARY)

    assert tracker.consume(CHAT, USER, RequestKind.SAY) is False
    assert tracker.consume(CHAT, USER, RequestKind.BINARY) is True
    assert tracker.consume(CHAT, USER, RequestKind.BINARY) is False
    assert not tracker.has_pending(CHAT, USER)


def test_chats_are_independent():
    tracker = RequestTracker()
    tracker.activate(CHAT)
    tracker.activate(CHAT + 1)
    tracker.begin_request(CHAT, USER, RequestKind.SAY)

    assert not tracker.has_pending(CHAT + 1, USER)
    assert tracker.begin_request(CHAT + 1, USER, RequestKind.SAY) is True


def test_concurrent_consume_happens_exactly_once():
    tracker = RequestTracker()
    tracker.activate(CHAT)
    tracker.begin_request(CHAT, USER, RequestKind.PHOTO)

    workers = 16
    barrier = threading.Barrier(workers)
    results = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        ok = tracker.consume(CHAT, USER, RequestKind.PHOTO)
        with results_lock:
            results.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1


def test_concurrent_begin_request_admits_one():
    tracker = RequestTracker()
    tracker.activate(CHAT)

    workers = 16
    barrier = threading.Barrier(workers)
    results = []
    results_lock = threading.Lock()
    kinds = list(RequestKind)

    def worker(i):
        barrier.wait()
        ok = tracker.begin_request(CHAT, USER, kinds[i % len(kinds)])
        with results_lock:
            results.append(ok)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert len(tracker.pending(CHAT)) == 1
