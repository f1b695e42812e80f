from sproutnet.codel import CoDel
from sproutnet.ingress import IngressQueue


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


def make(now=1000):
    clock = FakeClock(now)
    return clock, IngressQueue(clock), CoDel(clock)


def test_empty_queue_returns_none():
    _, queue, codel = make()
    assert codel.deque(queue) is None
    assert codel.drop_count == 0


def test_enque_goes_into_queue():
    _, queue, codel = make()
    codel.enque(queue, b"payload")
    assert queue.total_length == len(b"payload")
    assert codel.deque(queue).contents == b"payload"


def test_short_sojourn_never_drops():
    clock, queue, codel = make()
    payloads = [bytes([i]) * 1000 for i in range(10)]
    for payload in payloads:
        codel.enque(queue, payload)
    out = []
    while not queue.is_empty():
        clock.now += 1
        out.append(codel.deque(queue).contents)
    assert out == payloads
    assert codel.drop_count == 0


def test_small_backlog_never_drops():
    clock, queue, codel = make()
    payloads = [bytes([i]) * 40 for i in range(30)]
    for payload in payloads:
        codel.enque(queue, payload)
    out = []
    while not queue.is_empty():
        clock.now += 1000
        out.append(codel.deque(queue).contents)
    assert out == payloads
    assert codel.drop_count == 0


def test_persistent_queue_drops_and_accounts_for_every_packet():
    clock, queue, codel = make()
    payloads = [bytes([i]) * 1000 for i in range(20)]
    for payload in payloads:
        codel.enque(queue, payload)
    out = []
    while not queue.is_empty():
        clock.now += 50
        packet = codel.deque(queue)
        if packet is not None:
            out.append(packet.contents)
    assert codel.drop_count > 0
    assert len(out) + codel.drop_count == len(payloads)
    positions = [payloads.index(p) for p in out]
    assert positions == sorted(positions)


def test_empty_queue_leaves_dropping_state():
    clock, queue, codel = make()
    for i in range(20):
        codel.enque(queue, bytes([i]) * 1000)
    while not queue.is_empty():
        clock.now += 50
        codel.deque(queue)
    clock.now += 50
    assert codel.deque(queue) is None
    assert codel.dropping is False