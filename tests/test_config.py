import pytest

from heic_service.config import Config, InvalidQualityError, env_flag, parse_quality


@pytest.mark.parametrize("raw, expected", [("1", 1), ("85\n", 85), ("  100 ", 100), (42, 42)])
def test_parse_quality_accepts_range(raw, expected):
    assert parse_quality(raw) == expected


@pytest.mark.parametrize("raw", ["0", "101", "-5", "abc", "", "\n", "8.5", "8_5", "\u0668\u0665", "\uff18\uff15", "85abc", None])
def test_parse_quality_rejects(raw):
    with pytest.raises(InvalidQualityError):
        parse_quality(raw)


def test_config_defaults_and_validation():
    config = Config()
    assert config.input_dir == "Photos"
    assert config.output_dir == "output"
    assert 1 <= config.quality <= 100
    with pytest.raises(InvalidQualityError):
        Config(quality=0)


@pytest.mark.parametrize("value, expected", [("1", True), ("YES", True), ("on", True), ("0", False), ("nope", False)])
def test_env_flag(monkeypatch, value, expected):
    monkeypatch.setenv("HEIC_TEST_FLAG", value)
    assert env_flag("HEIC_TEST_FLAG") is expected


def test_env_flag_default(monkeypatch):
    monkeypatch.delenv("HEIC_TEST_FLAG", raising=False)
    assert env_flag("HEIC_TEST_FLAG") is False
    assert env_flag("HEIC_TEST_FLAG", "true") is True
