import pytest

from tightening_program.program.errors import InvalidParameter, InvalidSpeedProfile
from tightening_program.program.speed_profile import DEFAULT_SPEED_PROFILE, SpeedProfile, SpeedRange


def test_default_table():
    assert DEFAULT_SPEED_PROFILE.classes() == ["8.8", "10.9", "12.9"]
    assert DEFAULT_SPEED_PROFILE.get("10.9") == SpeedRange(min_rpm=30, max_rpm=150)


def test_profile_is_read_only():
    with pytest.raises(TypeError):
        DEFAULT_SPEED_PROFILE.ranges["8.8"] = SpeedRange(1, 2)


def test_from_json_accepts_both_key_styles():
    profile = SpeedProfile.from_json('{"8.8": {"min": 40, "max": 180}, "A4-80": {"min_rpm": 15, "max_rpm": 90}}')

    assert profile.get("8.8").max_rpm == 180
    assert profile.get("A4-80").min_rpm == 15


@pytest.mark.parametrize("payload", [
    '{"8.8": {"min": 200, "max": 50}}',
    '{"8.8": {"min": 0, "max": 50}}',
    '{"8.8": {"max": 50}}',
    '{"8.8": 50}',
    '{}',
    '[1, 2]',
    'not json',
])
def test_invalid_profiles(payload):
    with pytest.raises(InvalidSpeedProfile):
        SpeedProfile.from_json(payload)


def test_unknown_class_is_invalid_parameter():
    with pytest.raises(InvalidParameter):
        DEFAULT_SPEED_PROFILE.get("4.6")


def test_merged_overrides_and_extends():
    custom = SpeedProfile.from_dict({"8.8": {"min": 60, "max": 220}, "5.6": {"min": 80, "max": 300}})
    merged = DEFAULT_SPEED_PROFILE.merged(custom)

    assert merged.get("8.8") == SpeedRange(60, 220)
    assert merged.get("12.9") == SpeedRange(20, 100)
    assert "5.6" in merged
    assert "5.6" not in DEFAULT_SPEED_PROFILE


def test_to_dict_roundtrip_shape():
    assert DEFAULT_SPEED_PROFILE.to_dict()["12.9"] == {"min": 20, "max": 100}


def test_labels_colliding_after_strip():
    with pytest.raises(InvalidSpeedProfile):
        SpeedProfile.from_dict({" 8.8": {"min": 50, "max": 200}, "8.8": {"min": 60, "max": 220}})
