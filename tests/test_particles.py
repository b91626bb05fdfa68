import pytest

from nmcprecip import constants as c
from nmcprecip.particles import (
    aggregation,
    aggregation_efficiency,
    breakage,
    erosion_dd,
    growth,
    nucleate_size,
    nucleation,
    parabolic_dd,
    symmetric_dd,
    uniform_dd,
)

EPS = 0.1
RHO = 998.2
MU = 1e-3
NU = MU / RHO
A_P = 1e6


@pytest.mark.parametrize("s", [0.0, 0.5, 1.0])
def test_nucleation_zero_below_saturation(s):
    assert nucleation(s) == 0.0


def test_nucleation_increases_with_supersaturation():
    values = [nucleation(s) for s in (1.5, 3.0, 10.0, 100.0)]
    assert values == sorted(values)
    assert values[0] > 0.0


def test_nucleation_limit_is_sum_of_prefactors():
    limit = 10.0**c.K_J_1 + 10.0**c.K_J_2
    assert nucleation(1e300) == pytest.approx(limit, rel=1e-2)
    assert nucleation(1e300) < limit


def test_growth_zero_below_saturation():
    assert growth(1.0, 1e-6) == 0.0
    assert growth(0.3, 1e-6) == 0.0


def test_growth_unit_excess_equals_rate_constant():
    assert growth(2.0, 1e-6) == pytest.approx(c.K_G)


def test_growth_linear_in_excess_and_size_independent():
    assert growth(3.0, 1e-6) == pytest.approx(2 * growth(2.0, 1e-6))
    assert growth(2.5, 1e-9) == growth(2.5, 1e-4)


def test_aggregation_zero_without_growth():
    assert aggregation(1.0, 1e-6, 2e-6, EPS, RHO, MU, NU, 1.0, A_P) == 0.0


def test_aggregation_zero_for_large_particles():
    assert aggregation(5.0, 3e-3, 1e-6, EPS, RHO, MU, NU, 1.0, A_P) == 0.0


def test_aggregation_zero_for_zero_size():
    assert aggregation(5.0, 0.0, 1e-6, EPS, RHO, MU, NU, 1.0, A_P) == 0.0


def test_aggregation_symmetric():
    a = aggregation(5.0, 1e-6, 3e-6, EPS, RHO, MU, NU, 1.0, A_P)
    b = aggregation(5.0, 3e-6, 1e-6, EPS, RHO, MU, NU, 1.0, A_P)
    assert a == pytest.approx(b)
    assert a > 0.0


def test_brownian_kernel_depends_only_on_size_ratio():
    a = aggregation(5.0, 1e-7, 2e-7, 0.0, RHO, MU, NU, 0.0, A_P)
    b = aggregation(5.0, 1e-6, 2e-6, 0.0, RHO, MU, NU, 0.0, A_P)
    assert a == pytest.approx(b)


def test_brownian_kernel_inverse_in_viscosity():
    a = aggregation(5.0, 1e-6, 2e-6, 0.0, RHO, MU, NU, 0.0, A_P)
    b = aggregation(5.0, 1e-6, 2e-6, 0.0, RHO, 2 * MU, NU, 0.0, A_P)
    assert a == pytest.approx(2 * b)


def test_turbulent_term_increases_kernel():
    without = aggregation(5.0, 1e-6, 2e-6, EPS, RHO, MU, NU, 0.0, A_P)
    with_turb = aggregation(5.0, 1e-6, 2e-6, EPS, RHO, MU, NU, 1.0, A_P)
    assert with_turb > without


def test_efficiency_is_one_without_turbulence():
    assert aggregation_efficiency(1e-6, 2e-6, 1e-6, 1e-10, 0.0, RHO, NU, A_P) == 1.0


def test_efficiency_bounded_and_grows_with_yield_stress():
    low = aggregation_efficiency(1e-6, 2e-6, 1.2e-6, 1e-9, EPS, RHO, NU, 1e4)
    high = aggregation_efficiency(1e-6, 2e-6, 1.2e-6, 1e-9, EPS, RHO, NU, 1e8)
    assert 0.0 < low < high <= 1.0


def test_efficiency_symmetric_in_sizes():
    a = aggregation_efficiency(1e-6, 2e-6, 1.2e-6, 1e-9, EPS, RHO, NU, A_P)
    b = aggregation_efficiency(2e-6, 1e-6, 1.2e-6, 1e-9, EPS, RHO, NU, A_P)
    assert a == pytest.approx(b)


def test_breakage_zero_for_nonpositive_size():
    assert breakage(0.0, EPS, NU) == 0.0
    assert breakage(-1e-6, EPS, NU) == 0.0


def test_breakage_linear_in_size():
    assert breakage(2e-6, EPS, NU) == pytest.approx(2 * breakage(1e-6, EPS, NU))


def test_breakage_increases_with_dissipation():
    assert breakage(1e-6, 1.0, NU) > breakage(1e-6, 0.01, NU)


@pytest.mark.parametrize("dd", [erosion_dd, symmetric_dd, uniform_dd])
def test_daughter_distributions_conserve_volume(dd):
    size = 3e-6
    assert dd(size, 3.0) == pytest.approx(size**3)


def test_daughter_count_equal_for_binary_distributions():
    size = 3e-6
    assert erosion_dd(size, 0.0) == pytest.approx(symmetric_dd(size, 0.0))
    assert uniform_dd(size, 0.0) == pytest.approx(symmetric_dd(size, 0.0))


def test_parabolic_scales_with_size_power():
    k = 2.0
    assert parabolic_dd(2e-6, k) == pytest.approx(parabolic_dd(1e-6, k) * 2.0**k)


@pytest.mark.parametrize("s", [0.5, 1.0, 10.0])
def test_nucleate_size_constant(s):
    assert nucleate_size(s) == c.X_C