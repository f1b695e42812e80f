import struct

import pytest

from sproutnet.classifier import (
    ETHERTYPE_ARP,
    ETHERTYPE_IP,
    HASH_SIZE,
    ICMP_PROTOCOL_NUM,
    TCP_PROTOCOL_NUM,
    UDP_PROTOCOL_NUM,
    UNCLASSIFIED,
    get_eth_type,
    get_flow_id,
    pkt_hash,
)


def frame(ethertype, body=b""):
    return bytes(12) + struct.pack(">H", ethertype) + body


def ip_header(protocol):
    header = bytearray(20)
    header[0] = 0x45
    header[9] = protocol
    return bytes(header)


def test_eth_type():
    assert get_eth_type(frame(ETHERTYPE_IP, ip_header(6))) == ETHERTYPE_IP
    assert get_eth_type(frame(ETHERTYPE_ARP)) == ETHERTYPE_ARP


@pytest.mark.parametrize("protocol", [TCP_PROTOCOL_NUM, UDP_PROTOCOL_NUM, ICMP_PROTOCOL_NUM])
def test_ip_flow_id_is_protocol(protocol):
    assert get_flow_id(frame(ETHERTYPE_IP, ip_header(protocol) + b"data")) == protocol


def test_arp_and_other_are_unclassified():
    assert get_flow_id(frame(ETHERTYPE_ARP, bytes(28))) == UNCLASSIFIED
    assert get_flow_id(frame(0x86DD, bytes(40))) == UNCLASSIFIED


def test_short_frames_raise():
    with pytest.raises(ValueError):
        get_eth_type(b"\x00" * 10)
    with pytest.raises(ValueError):
        get_flow_id(frame(ETHERTYPE_IP, b"\x45\x00"))


def test_pkt_hash_short_packet_is_whole():
    packet = b"short packet"
    assert pkt_hash(packet) == packet


def test_pkt_hash_long_packet_takes_tail():
    packet = bytes(range(200))
    digest = pkt_hash(packet)
    assert len(digest) == HASH_SIZE
    assert packet.endswith(digest)