import pytest

from sproutnet.forecastpacket import ForecastPacket
from sproutnet.receiver import DeliveryForecast


def test_plain_packet_wire_format():
    assert ForecastPacket(b"hello").to_bytes() == b"\x00\x00hello"


def test_plain_packet_round_trip():
    packet = ForecastPacket.from_bytes(ForecastPacket(b"payload").to_bytes())
    assert packet.data == b"payload"
    assert packet.has_forecast() is False


def test_forecast_round_trip():
    forecast = DeliveryForecast(time=40, received_or_lost_count=2800, counts=(0, 1, 3, 5))
    original = ForecastPacket(b"data", forecast)
    decoded = ForecastPacket.from_bytes(original.to_bytes())
    assert decoded == original
    assert decoded.has_forecast() is True
    assert decoded.forecast.counts == (0, 1, 3, 5)


def test_forecast_length_prefix_matches_encoding():
    forecast = DeliveryForecast(time=1, received_or_lost_count=0, counts=(2,))
    wire = ForecastPacket(b"", forecast).to_bytes()
    encoded = forecast.to_bytes()
    assert int.from_bytes(wire[:2], "little") == len(encoded)
    assert wire[2:] == encoded


def test_empty_data_with_forecast():
    forecast = DeliveryForecast(time=5, counts=(1,))
    decoded = ForecastPacket.from_bytes(ForecastPacket(b"", forecast).to_bytes())
    assert decoded.data == b""
    assert decoded.forecast == forecast


def test_too_short_for_length_field():
    with pytest.raises(ValueError):
        ForecastPacket.from_bytes(b"\x01")


def test_truncated_forecast():
    with pytest.raises(ValueError):
        ForecastPacket.from_bytes(b"\x10\x00abc")