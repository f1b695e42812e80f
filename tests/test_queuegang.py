import pytest

from sproutnet.ingress import Qdisc
from sproutnet.queuegang import QueueGang

TCP = 6
UDP = 17


def frame(protocol: int, size: int, tag: int) -> bytes:
    ip = bytearray(20)
    ip[9] = protocol
    head = bytes(12) + b"\x08\x00" + bytes(ip)
    return head + bytes([tag]) * (size - len(head))


def arp_frame(size: int, tag: int) -> bytes:
    head = bytes(12) + b"\x08\x06"
    return head + bytes([tag]) * (size - len(head))


def drain(gang: QueueGang) -> list[bytes]:
    out = []
    while not gang.is_empty():
        out.append(gang.get_next_packet())
    return out


@pytest.mark.parametrize("qdisc", [Qdisc.CODEL, Qdisc.SPROUT])
def test_new_gang_is_empty(qdisc):
    gang = QueueGang(qdisc)
    assert gang.is_empty()
    assert gang.get_next_packet() == b""


def test_single_packet_round_trip_codel():
    gang = QueueGang(Qdisc.CODEL)
    pkt = frame(UDP, 200, 1)
    gang.enque(pkt)
    assert not gang.is_empty()
    assert gang.get_next_packet() == pkt
    assert gang.is_empty()


def test_small_packets_drain_one_flow_before_the_next():
    gang = QueueGang(Qdisc.CODEL)
    a1, a2 = frame(TCP, 100, 1), frame(TCP, 100, 2)
    b1, b2 = frame(UDP, 100, 3), frame(UDP, 100, 4)
    for pkt in (a1, a2, b1, b2):
        gang.enque(pkt)
    assert drain(gang) == [a1, a2, b1, b2]


def test_large_packets_alternate_between_flows():
    gang = QueueGang(Qdisc.CODEL)
    a1, a2 = frame(TCP, 1000, 1), frame(TCP, 1000, 2)
    b1, b2 = frame(UDP, 1000, 3), frame(UDP, 1000, 4)
    for pkt in (a1, a2, b1, b2):
        gang.enque(pkt)
    assert drain(gang) == [a1, b1, a2, b2]


def test_arp_frames_form_their_own_flow():
    gang = QueueGang(Qdisc.CODEL)
    arp = arp_frame(60, 9)
    ip = frame(TCP, 60, 8)
    gang.enque(arp)
    gang.enque(ip)
    assert sorted(drain(gang)) == sorted([arp, ip])


def test_packet_larger_than_quantum_is_rejected():
    gang = QueueGang(Qdisc.CODEL)
    gang.enque(frame(TCP, QueueGang.MTU_SIZE + 66, 1))
    with pytest.raises(RuntimeError):
        gang.get_next_packet()


def test_sprout_needs_a_queue_limit():
    gang = QueueGang(Qdisc.SPROUT)
    with pytest.raises(ValueError):
        gang.enque(frame(UDP, 100, 1))


def test_sprout_drops_head_of_longest_queue_over_limit():
    gang = QueueGang(Qdisc.SPROUT)
    gang.qlimit = 150
    a1, a2, a3 = frame(UDP, 100, 1), frame(UDP, 100, 2), frame(UDP, 100, 3)
    for pkt in (a1, a2, a3):
        gang.enque(pkt)
    assert drain(gang) == [a2, a3]


def test_sprout_without_pressure_keeps_everything():
    gang = QueueGang(Qdisc.SPROUT)
    gang.qlimit = 10_000
    packets = [frame(TCP, 100, i) for i in range(5)]
    for pkt in packets:
        gang.enque(pkt)
    assert drain(gang) == packets