"""Ammonia complexation equilibria and Bromley activity coefficients for NMC hydroxide."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .constants import (
    A_GAMMA,
    ALPHA,
    INDEX_NA,
    INDEX_NH3,
    INDEX_OH,
    INDEX_SO4,
    MAX_ITER,
    N_ANIONS,
    N_CATIONS,
    N_COMPS,
    N_METALS,
    N_UDS_C,
    TOLERANCE,
    ModelConstants,
    pkw,
)

LN10 = math.log(10.0)

# Cation order: Ni, Mn, Co, Na, NH4, H.  Anion order: SO4, OH.
CATION_CHARGES = (2.0, 2.0, 2.0, 1.0, 1.0, 1.0)
ANION_CHARGES = (2.0, 1.0)
_HYDROXIDE = 1

_DEFAULT_CONSTANTS = ModelConstants()


class SingularJacobianError(ArithmeticError):
    """Raised when the Newton system of the speciation problem is singular."""


@dataclass(frozen=True)
class EquilibriumResult:
    """Converged speciation of one liquid composition."""

    equilibrium_concs: tuple[float, ...]
    p_concs: tuple[float, ...]
    ph: float
    supersat: float
    iterations: int


def _check_lengths(p_concs: Sequence[float], total_concs: Sequence[float]) -> None:
    if len(p_concs) != N_COMPS:
        raise ValueError(f"expected {N_COMPS} p-concentrations, got {len(p_concs)}")
    if len(total_concs) != N_UDS_C:
        raise ValueError(
            f"expected {N_UDS_C} total concentrations, got {len(total_concs)}"
        )


def equilibrium_residuals(
    p_concs: Sequence[float],
    total_concs: Sequence[float],
    cation_total_conc: float,
    constants: ModelConstants,
) -> tuple[np.ndarray, np.ndarray]:
    """Return the mass and charge balance residuals and the Newton matrix.

    Unknowns are -log10 of the free metal, free ammonia and hydroxide
    concentrations. Solving ``matrix @ step = residuals`` gives the update
    that is added to the p-concentrations.
    """
    _check_lengths(p_concs, total_concs)
    p = [float(v) for v in p_concs]
    kw = constants.kw()
    kb = constants.kb_ammonia()

    conc_oh = 10.0 ** -p[INDEX_OH]
    conc_nh3 = 10.0 ** -p[INDEX_NH3]
    conc_nh4 = kb * conc_nh3 / conc_oh

    residuals = np.zeros(N_COMPS)
    matrix = np.zeros((N_COMPS, N_COMPS))

    formation = iter(constants.complex_constants)
    f_nh3 = 0.0
    j_nh3 = 0.0
    for metal, n_complexes in enumerate(constants.complexes_per_metal):
        conc_i = 10.0 ** -p[metal]
        terms = [
            (n, next(formation) * conc_i * conc_nh3**n)
            for n in range(1, n_complexes + 1)
        ]
        f_i = sum(term for _, term in terms)
        f_nh3_i = sum(n * term for n, term in terms)
        j_nh3 += sum(n * n * term for n, term in terms)

        residuals[metal] = conc_i + f_i - total_concs[metal]
        matrix[metal, metal] = LN10 * (conc_i + f_i)
        matrix[metal, INDEX_NH3] = LN10 * f_nh3_i
        # The ammonia balance row uses the plain complex sum for metal columns.
        matrix[INDEX_NH3, metal] = LN10 * f_i
        f_nh3 += f_nh3_i

    residuals[INDEX_NH3] = conc_nh3 + conc_nh4 + f_nh3 - total_concs[INDEX_NH3]
    matrix[INDEX_NH3, INDEX_NH3] = LN10 * (conc_nh3 + conc_nh4 + j_nh3)
    matrix[INDEX_NH3, INDEX_OH] = -LN10 * conc_nh4

    residuals[INDEX_OH] = (
        conc_oh
        - (total_concs[INDEX_NA] - 2.0 * total_concs[INDEX_SO4])
        - 2.0 * cation_total_conc
        - conc_nh4
        - kw / conc_oh
    )
    matrix[INDEX_OH, INDEX_OH] = LN10 * (conc_nh4 + kw / conc_oh + conc_oh)
    matrix[INDEX_OH, INDEX_NH3] = -LN10 * conc_nh4

    return residuals, matrix


def _pure_activity(
    z_c: Sequence[float],
    z_a: Sequence[float],
    ionic_strength: float,
    j: int,
    k: int,
    b_table: Sequence[Sequence[float]],
    e_table: Sequence[Sequence[float]],
) -> float:
    nu_c = z_a[k]
    nu_a = z_c[j]
    z_by_z = (nu_c * z_c[j] ** 2 + nu_a * z_a[k] ** 2) / (nu_c + nu_a)
    sqrt_i = math.sqrt(ionic_strength)
    b = b_table[j][k]
    e = e_table[j][k]
    return (
        -A_GAMMA * z_by_z * sqrt_i / (1.0 + sqrt_i)
        + (0.06 + 0.6 * b) * z_by_z * ionic_strength
        / (1.0 + 1.5 * ionic_strength / z_by_z) ** 2
        + b * ionic_strength
        - e * ALPHA * sqrt_i * (1.0 - math.exp(-ALPHA * sqrt_i))
    )


def pure_activity(
    z_c: Sequence[float],
    z_a: Sequence[float],
    ionic_strength: float,
    j: int,
    k: int,
) -> float:
    """log10 of the activity coefficient of the pure electrolyte of cation j and anion k."""
    return _pure_activity(
        z_c,
        z_a,
        ionic_strength,
        j,
        k,
        _DEFAULT_CONSTANTS.bromley_b,
        _DEFAULT_CONSTANTS.bromley_e,
    )


def _activity_bromley(
    cation_molal: Sequence[float],
    anion_molal: Sequence[float],
    b_table: Sequence[Sequence[float]],
    e_table: Sequence[Sequence[float]],
) -> tuple[float, ...]:
    if len(cation_molal) != N_CATIONS:
        raise ValueError(f"expected {N_CATIONS} cation concentrations")
    if len(anion_molal) != N_ANIONS:
        raise ValueError(f"expected {N_ANIONS} anion concentrations")

    ionic_strength = 0.5 * (
        sum(c * z * z for c, z in zip(cation_molal, CATION_CHARGES))
        + sum(c * z * z for c, z in zip(anion_molal, ANION_CHARGES))
    )
    if ionic_strength <= 0.0:
        raise ValueError("ionic strength must be positive")

    sqrt_i = math.sqrt(ionic_strength)
    coeff = A_GAMMA * sqrt_i / (1.0 + sqrt_i)
    z_oh = ANION_CHARGES[_HYDROXIDE]

    def pure(j: int, k: int) -> float:
        return _pure_activity(
            CATION_CHARGES, ANION_CHARGES, ionic_strength, j, k, b_table, e_table
        )

    gammas = []
    for metal in range(N_METALS):
        z_m = CATION_CHARGES[metal]
        f_c = sum(
            (z_m + z_k) ** 2 * anion_molal[k] / (4.0 * ionic_strength)
            * (pure(metal, k) + coeff * z_m * z_k)
            for k, z_k in enumerate(ANION_CHARGES)
        )
        f_a = sum(
            (z_j + z_oh) ** 2 * cation_molal[j] / (4.0 * ionic_strength)
            * (pure(j, _HYDROXIDE) + coeff * z_j * z_oh)
            for j, z_j in enumerate(CATION_CHARGES)
        )
        nu_c = z_oh
        nu_a = z_m
        log_gamma = (
            -coeff * (nu_c * z_m**2 + nu_a * z_oh**2) + nu_c * f_c + nu_a * f_a
        ) / (nu_c + nu_a)
        gammas.append(10.0**log_gamma)
    return tuple(gammas)


def activity_bromley(
    cation_molal: Sequence[float], anion_molal: Sequence[float]
) -> tuple[float, ...]:
    """Mean activity coefficients of the metal hydroxides in a mixed solution."""
    return _activity_bromley(
        cation_molal,
        anion_molal,
        _DEFAULT_CONSTANTS.bromley_b,
        _DEFAULT_CONSTANTS.bromley_e,
    )


def solve_equilibria(
    total_concs: Sequence[float],
    p_concs: Sequence[float],
    cation_total_conc: float,
    cation_ratios: Sequence[float],
    constants: ModelConstants,
) -> EquilibriumResult:
    """Solve the speciation by Newton iteration starting from ``p_concs``.

    Raises SingularJacobianError when the Newton matrix cannot be factorised.
    """
    _check_lengths(p_concs, total_concs)
    p = np.array(p_concs, dtype=float)

    iterations = 0
    for iterations in range(1, MAX_ITER + 1):
        residuals, matrix = equilibrium_residuals(
            p, total_concs, cation_total_conc, constants
        )
        try:
            step = np.linalg.solve(matrix, residuals)
        except np.linalg.LinAlgError as exc:
            raise SingularJacobianError(
                "the equilibrium Jacobian is singular; no solution could be computed"
            ) from exc
        if float(np.sum(np.abs(step))) < TOLERANCE:
            break
        p += step

    equil = 10.0 ** -p
    conc_oh = float(equil[INDEX_OH])
    conc_nh4 = constants.kb_ammonia() * float(equil[INDEX_NH3]) / conc_oh
    conc_h = constants.kw() / conc_oh

    cation_molal = [float(total_concs[m]) for m in range(N_METALS)]
    cation_molal += [float(total_concs[INDEX_NA]), conc_nh4, conc_h]
    anion_molal = [float(total_concs[INDEX_SO4]), conc_oh]
    gammas = _activity_bromley(
        cation_molal, anion_molal, constants.bromley_b, constants.bromley_e
    )

    k_sp_mix = 1.0
    activity_product = 1.0
    for ratio, k_sp, conc, gamma in zip(
        cation_ratios, constants.solubility_products, equil, gammas
    ):
        k_sp_mix *= k_sp**ratio
        activity_product *= (float(conc) * gamma**3) ** ratio

    supersat = (activity_product * conc_oh * conc_oh / k_sp_mix) ** (1.0 / 3.0)
    ph = -pkw(constants.temperature) - float(p[INDEX_OH])

    return EquilibriumResult(
        equilibrium_concs=tuple(float(c) for c in equil),
        p_concs=tuple(float(v) for v in p),
        ph=ph,
        supersat=supersat,
        iterations=iterations,
    )