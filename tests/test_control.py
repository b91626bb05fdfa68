import pytest

from nmcprecip.control import (
    FeedState,
    TimestepRamp,
    feed_state,
    memory_names,
    scalar_names,
    volume_weighted_ph,
)


def test_ramp_ends_at_new_timestep():
    ramp = TimestepRamp(1e-3, 2e-3, 4)
    steps = [ramp.next_step() for _ in range(4)]
    assert steps[-1] == pytest.approx(2e-3)
    assert all(a < b for a, b in zip(steps, steps[1:]))


def test_ramp_restarts_after_last_step():
    ramp = TimestepRamp(1e-3, 2e-3, 4)
    steps = [ramp.next_step() for _ in range(8)]
    assert steps[:4] == pytest.approx(steps[4:])


def test_ramp_single_step_always_new():
    ramp = TimestepRamp(0.5, 0.1, 1)
    assert [next(ramp) for _ in range(3)] == pytest.approx([0.1, 0.1, 0.1])


def test_ramp_stays_between_bounds():
    ramp = TimestepRamp(0.2, 0.1, 5)
    for _ in range(10):
        step = ramp.next_step()
        assert 0.1 <= step < 0.2 or step == pytest.approx(0.1)


def test_ramp_rejects_zero_steps():
    with pytest.raises(ValueError):
        TimestepRamp(1e-3, 2e-3, 0)


def test_volume_weighted_ph_uniform():
    assert volume_weighted_ph([11.5, 11.5, 11.5], [1.0, 2.0, 3.0]) == pytest.approx(11.5)


def test_volume_weighted_ph_within_range():
    result = volume_weighted_ph([10.0, 12.0], [1.0, 3.0])
    assert 10.0 < result < 12.0
    assert result > 11.0


def test_volume_weighted_ph_errors():
    with pytest.raises(ValueError):
        volume_weighted_ph([10.0], [1.0, 2.0])
    with pytest.raises(ValueError):
        volume_weighted_ph([10.0], [0.0])


@pytest.mark.parametrize(
    "ph, expected",
    [(12.0, FeedState.OFF), (10.0, FeedState.ON), (11.2, FeedState.HOLD)],
)
def test_feed_state(ph, expected):
    assert feed_state(ph, 11.0, 11.5) is expected


def test_feed_state_bounds_inclusive_hold():
    assert feed_state(11.0, 11.0, 11.5) is FeedState.HOLD
    assert feed_state(11.5, 11.0, 11.5) is FeedState.HOLD


def test_feed_state_rejects_inverted_range():
    with pytest.raises(ValueError):
        feed_state(11.0, 12.0, 10.0)


def test_scalar_names_order():
    names = scalar_names(3, 2)
    assert names[:6] == ("totC_Ni", "totC_Mn", "totC_Co", "totC_NH3", "totC_Na", "totC_SO4")
    assert names[6:9] == ("P1", "P2", "P3")
    assert names[9:] == ("we0", "we1", "wL0", "wL1")


def test_memory_names_layout():
    names = memory_names(2, 3)
    assert names[0] == "eqC_Ni"
    assert names[15] == "cRatio_Ni"
    assert names[18] == "n0"
    assert names[names.index("alp0"):names.index("r_p_1")] == ("alp0", "alp1", "alp2", "alp3")
    assert names[names.index("P4") + 1] == "cell_mark"
    assert names[-5:] == ("M0", "M1", "M2", "M3", "M4")
    assert len(set(names)) == len(names)


def test_memory_names_grow_with_nodes():
    assert len(memory_names(3, 3)) - len(memory_names(2, 3)) == 6
    assert len(memory_names(2, 4)) - len(memory_names(2, 3)) == 1


def test_names_reject_negative_counts():
    with pytest.raises(ValueError):
        scalar_names(-1, 2)
    with pytest.raises(ValueError):
        memory_names(2, -1)