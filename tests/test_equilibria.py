import math

import numpy as np
import pytest

from nmcprecip.constants import INDEX_NH3, INDEX_OH, ModelConstants, pkw
from nmcprecip.equilibria import (
    CATION_CHARGES,
    ANION_CHARGES,
    EquilibriumResult,
    SingularJacobianError,
    activity_bromley,
    equilibrium_residuals,
    pure_activity,
    solve_equilibria,
)

CONSTANTS = ModelConstants()
TOTALS = [1e-3, 1e-3, 1e-3, 0.1, 0.01, 0.003]
CATION_TOTAL = sum(TOTALS[:3])


def _initial_p(totals):
    return [-math.log10(totals[0]), -math.log10(totals[1]), -math.log10(totals[2]),
            -math.log10(totals[3]), -math.log10(totals[4])]


def _ratios(totals):
    total = sum(totals[:3])
    return [c / total for c in totals[:3]]


def test_residual_shapes():
    residuals, matrix = equilibrium_residuals(_initial_p(TOTALS), TOTALS, CATION_TOTAL, CONSTANTS)
    assert residuals.shape == (5,)
    assert matrix.shape == (5, 5)


def test_matrix_matches_finite_differences_where_exact():
    p = np.array([3.5, 3.2, 3.8, 1.2, 2.0])
    _, matrix = equilibrium_residuals(p, TOTALS, CATION_TOTAL, CONSTANTS)
    h = 1e-6
    numeric = np.zeros((5, 5))
    for col in range(5):
        up = p.copy()
        down = p.copy()
        up[col] += h
        down[col] -= h
        f_up, _ = equilibrium_residuals(up, TOTALS, CATION_TOTAL, CONSTANTS)
        f_down, _ = equilibrium_residuals(down, TOTALS, CATION_TOTAL, CONSTANTS)
        numeric[:, col] = -(f_up - f_down) / (2 * h)
    mask = np.ones((5, 5), dtype=bool)
    mask[INDEX_NH3, :3] = False
    np.testing.assert_allclose(matrix[mask], numeric[mask], rtol=1e-4, atol=1e-9)


def test_metal_rows_do_not_depend_on_hydroxide():
    p = _initial_p(TOTALS)
    residuals, matrix = equilibrium_residuals(p, TOTALS, CATION_TOTAL, CONSTANTS)
    assert [float(v) for v in matrix[:3, INDEX_OH]] == [0.0, 0.0, 0.0]
    shifted = list(p)
    shifted[INDEX_OH] += 0.5
    shifted_residuals, _ = equilibrium_residuals(shifted, TOTALS, CATION_TOTAL, CONSTANTS)
    assert [float(v) for v in shifted_residuals[:3]] == [float(v) for v in residuals[:3]]


def test_wrong_length_rejected():
    with pytest.raises(ValueError):
        equilibrium_residuals([1.0, 2.0], TOTALS, CATION_TOTAL, CONSTANTS)


def test_solution_satisfies_balances():
    result = solve_equilibria(TOTALS, _initial_p(TOTALS), CATION_TOTAL, _ratios(TOTALS), CONSTANTS)
    assert isinstance(result, EquilibriumResult)
    residuals, _ = equilibrium_residuals(result.p_concs, TOTALS, CATION_TOTAL, CONSTANTS)
    for i in range(4):
        assert abs(residuals[i]) <= 1e-4 * TOTALS[i]
    conc_oh = result.equilibrium_concs[INDEX_OH]
    assert abs(residuals[INDEX_OH]) <= 1e-4 * conc_oh


def test_solution_consistency():
    start = _initial_p(TOTALS)
    result = solve_equilibria(TOTALS, start, CATION_TOTAL, _ratios(TOTALS), CONSTANTS)
    for conc, p in zip(result.equilibrium_concs, result.p_concs):
        assert conc == pytest.approx(10.0 ** -p)
    assert result.ph == pytest.approx(-pkw(CONSTANTS.temperature) - result.p_concs[INDEX_OH])
    assert result.supersat > 0.0
    assert 1 <= result.iterations <= 200
    for i in range(3):
        assert result.equilibrium_concs[i] < TOTALS[i]
    assert start == _initial_p(TOTALS)


def test_singular_system_raises():
    p = [400.0, 400.0, 400.0, 400.0, 2.0]
    with pytest.raises(SingularJacobianError):
        solve_equilibria(TOTALS, p, CATION_TOTAL, _ratios(TOTALS), CONSTANTS)


def test_pure_activity_vanishes_at_zero_ionic_strength():
    assert pure_activity(CATION_CHARGES, ANION_CHARGES, 0.0, 0, 0) == 0.0


def test_pure_activity_negative_when_dilute():
    assert pure_activity(CATION_CHARGES, ANION_CHARGES, 1e-4, 0, 1) < 0.0


def test_activity_close_to_one_when_dilute():
    gammas = activity_bromley([1e-9] * 6, [1e-9] * 2)
    assert len(gammas) == 3
    for gamma in gammas:
        assert abs(gamma - 1.0) < 1e-2


def test_activity_below_one_at_moderate_strength():
    gammas = activity_bromley([0.01, 0.01, 0.01, 0.02, 0.001, 1e-12], [0.03, 0.01])
    for gamma in gammas:
        assert 0.0 < gamma < 1.0


def test_activity_requires_positive_ionic_strength():
    with pytest.raises(ValueError):
        activity_bromley([0.0] * 6, [0.0] * 2)


def test_activity_rejects_wrong_lengths():
    with pytest.raises(ValueError):
        activity_bromley([0.1] * 5, [0.1] * 2)