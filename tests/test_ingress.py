import pytest

from sproutnet.ingress import IngressQueue, Qdisc, TrackedPacket


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


def test_enque_tracks_length_and_time():
    clock = FakeClock(500)
    queue = IngressQueue(clock)
    queue.enque(b"abc")
    clock.now = 600
    queue.enque(b"de")
    assert len(queue) == 2
    assert queue.total_length == 5
    assert queue.front() == TrackedPacket(500, b"abc")


def test_deque_is_fifo_and_updates_length():
    queue = IngressQueue(FakeClock())
    for payload in (b"one", b"two", b"three"):
        queue.enque(payload)
    assert queue.deque().contents == b"one"
    assert queue.total_length == len(b"two") + len(b"three")
    assert queue.deque().contents == b"two"
    assert queue.deque().contents == b"three"
    assert queue.is_empty()
    assert queue.total_length == 0


def test_deque_empty_returns_none():
    queue = IngressQueue(FakeClock())
    assert queue.deque() is None


def test_pop_and_front_empty_raise():
    queue = IngressQueue(FakeClock())
    with pytest.raises(IndexError):
        queue.pop()
    with pytest.raises(IndexError):
        queue.front()


def test_push_accepts_packets():
    queue = IngressQueue(FakeClock())
    queue.push(TrackedPacket(7, b"xy"))
    assert queue.pop() == TrackedPacket(7, b"xy")
    assert not queue


def test_qdisc_values():
    assert Qdisc(0) is Qdisc.CODEL
    assert Qdisc(1) is Qdisc.SPROUT