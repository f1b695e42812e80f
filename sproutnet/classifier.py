"""Sorting Ethernet frames into flows by their IP protocol."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

TCP_PROTOCOL_NUM = 6
UDP_PROTOCOL_NUM = 17
ICMP_PROTOCOL_NUM = 1
HASH_SIZE = 64

ETHERTYPE_IP = 0x0800
ETHERTYPE_ARP = 0x0806
UNCLASSIFIED = 0xFF

_ETH_HEADER_LEN = 14
_IP_PROTOCOL_OFFSET = 9


def get_eth_type(frame: bytes) -> int:
    """EtherType field of an Ethernet frame."""
    if len(frame) < _ETH_HEADER_LEN:
        raise ValueError(f"frame of {len(frame)} bytes is shorter than an Ethernet header")
    return int.from_bytes(frame[12:14], "big")


def get_flow_id(packet: bytes) -> int:
    """The IP protocol number of an IPv4 frame; UNCLASSIFIED for anything else."""
    eth_type = get_eth_type(packet)
    if eth_type == ETHERTYPE_ARP:
        return UNCLASSIFIED
    if eth_type == ETHERTYPE_IP:
        offset = _ETH_HEADER_LEN + _IP_PROTOCOL_OFFSET
        if len(packet) <= offset:
            raise ValueError("frame too short to hold an IP header")
        return packet[offset]
    logger.info("Some other protocol type 0x%04x", eth_type)
    return UNCLASSIFIED


def pkt_hash(packet: bytes) -> bytes:
    """The last HASH_SIZE bytes of a packet, or all of it if shorter."""
    return packet[-HASH_SIZE:] if len(packet) >= HASH_SIZE else packet