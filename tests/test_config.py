import pytest

from bot import config


def test_channel_id_parsed_once():
    assert config.parse_channel_id("123456789012345678") == 123456789012345678
    assert config.parse_channel_id("") is None
    assert config.parse_channel_id(None) is None


def test_bad_channel_id_stops_startup():
    with pytest.raises(SystemExit) as exc:
        config.parse_channel_id("#gym")
    assert "DISCORD_CHANNEL_ID" in str(exc.value)


def test_schedule_order():
    """Booking fires after the picker goes out, both on IST wall-clock time."""
    assert config.COLLECT_AT < config.EXECUTE_AT
    assert config.COLLECT_AT.utcoffset() == config.EXECUTE_AT.utcoffset()
