import numpy as np
import pytest

from tightening_program.program.errors import InvalidParameter
from tightening_program.program.generator import generate, rundown_angle
from tightening_program.program.parameters import ProcessParameters
from tightening_program.program.quantities import NOT_APPLICABLE, Angle, Torque
from tightening_program.program.speed_profile import SpeedProfile, SpeedRange


def _params(**kw):
    base = dict(
        step_count=3,
        bolt_length=50,
        pitch=1.5,
        bolt_class="8.8",
        part_thickness=10,
        use_angle=False,
        angle_degrees=90,
        snug_torque=50,
        final_torque=100,
    )
    base.update(kw)
    return ProcessParameters(**base)


def test_scenario_a_torque_ramp():
    program = generate(_params())

    assert len(program) == 3

    rundown, mid, final = program
    assert rundown.target == Torque(0.0)
    assert rundown.angle == Angle(9600)
    assert rundown.speed_rpm == 200
    assert rundown.tolerance is NOT_APPLICABLE
    assert rundown.description == "Rundown phase (fast)"

    assert mid.step_index == 2
    assert mid.target == Torque(50.0)
    assert mid.speed_rpm == 50
    assert mid.tolerance == Torque(5.0)
    assert mid.description == "Torque step 1"

    assert final.step_index == 3
    assert final.target == Torque(100.0)
    assert final.angle is NOT_APPLICABLE
    assert final.speed_rpm == 50
    assert final.tolerance == Torque(10.0)
    assert final.description == "Final torque (slow)"


def test_scenario_b_two_steps():
    program = generate(_params(step_count=2))

    assert [s.step_index for s in program] == [1, 2]
    assert program[0].description == "Rundown phase (fast)"
    assert program[1].target == Torque(100.0)


def test_scenario_c_unknown_class():
    with pytest.raises(InvalidParameter) as exc:
        generate(_params(bolt_class="unknown"))
    assert exc.value.field == "bolt_class"


def test_scenario_d_angle_close():
    program = generate(_params(use_angle=True, angle_degrees=90, bolt_class="12.9"))

    final = program[-1]
    assert final.target == final.angle == Angle(90)
    assert str(final.target) == "90°"
    assert final.speed_rpm == 20
    assert str(final.tolerance) == "9.0°"
    assert final.description == "Final angle tightening (slow)"


def test_angle_mode_intermediate_steps_are_flat_snug():
    program = generate(_params(step_count=5, use_angle=True, snug_torque=40))

    assert [s.target for s in program[1:-1]] == [Torque(40.0)] * 3
    assert all(s.tolerance == Torque(4.0) for s in program[1:-1])


@pytest.mark.parametrize("use_angle", [False, True])
@pytest.mark.parametrize("steps", [2, 3, 4, 7, 12])
@pytest.mark.parametrize("bolt_class", ["8.8", "10.9", "12.9"])
def test_program_invariants(steps, bolt_class, use_angle):
    program = generate(_params(
        step_count=steps, bolt_class=bolt_class, final_torque=87.5,
        use_angle=use_angle, angle_degrees=60, snug_torque=35,
    ))
    profile = {"8.8": (50, 200), "10.9": (30, 150), "12.9": (20, 100)}
    lo, hi = profile[bolt_class]

    assert [s.step_index for s in program] == list(range(1, steps + 1))
    assert program[0].target == Torque(0.0)
    assert program[0].speed_rpm == hi
    assert program[-1].speed_rpm == lo
    if use_angle:
        assert program[-1].target == program[-1].angle == Angle(60)
    else:
        assert program[-1].target == Torque(87.5)

    mids = program[1:-1]
    for s in mids:
        assert s.tolerance.value == pytest.approx(s.target.value * 0.1, abs=0.006)

    targets = [s.target.value for s in mids]
    if use_angle:
        assert targets == [35.0] * len(mids)
    else:
        assert targets == sorted(targets) and len(set(targets)) == len(targets)

    speeds = [s.speed_rpm for s in program[:-1]]
    assert speeds == sorted(speeds, reverse=True)
    assert all(lo <= v <= hi for v in speeds)


def test_exact_halves_round_up():
    angle = generate(_params(step_count=2, use_angle=True, angle_degrees=12.5))
    assert str(angle[-1].tolerance) == "1.3°"

    torque = generate(_params(step_count=2, final_torque=1.25))
    assert torque[-1].tolerance == Torque(0.13)
    assert str(torque[-1].tolerance) == "0.13 Nm"


def test_numpy_scalars_are_accepted():
    program = generate(_params(
        step_count=np.int64(3),
        bolt_length=np.int64(50),
        part_thickness=np.float64(10),
        pitch=np.float64(1.5),
        final_torque=np.int64(100),
    ))

    assert [s.step_index for s in program] == [1, 2, 3]
    assert program[1].target == Torque(50.0)
    assert program[-1].tolerance == Torque(10.0)


def test_speed_rounds_half_up():
    # 200 - 1 * 150 / 4 = 162.5
    program = generate(_params(step_count=6))
    assert program[1].speed_rpm == 163


def test_rundown_angle_rounding():
    assert rundown_angle(_params(bolt_length=20, part_thickness=10, pitch=1.25)) == 2880
    assert rundown_angle(_params(bolt_length=10.5, part_thickness=10, pitch=1.0)) == 180


def test_torque_values_rounded_to_two_decimals():
    program = generate(_params(step_count=4, final_torque=100))

    assert program[1].target == Torque(33.33)
    assert str(program[2].target) == "66.67 Nm"
    assert str(program[2].tolerance) == "6.67 Nm"


def test_custom_speed_profile_is_injected():
    profile = SpeedProfile({"A2-70": SpeedRange(min_rpm=10, max_rpm=60)})
    program = generate(_params(bolt_class="A2-70"), profile)

    assert program[0].speed_rpm == 60
    assert program[-1].speed_rpm == 10

    with pytest.raises(InvalidParameter):
        generate(_params(bolt_class="8.8"), profile)


def test_generation_is_deterministic():
    assert generate(_params(step_count=6)) == generate(_params(step_count=6))
