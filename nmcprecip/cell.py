"""Per-cell evaluation of micromixing, speciation, nucleation, growth and quadrature sources."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence

import numpy as np

from .constants import (
    EFFECTIVE_CONC,
    INDEX_NA,
    INDEX_NH3,
    INDEX_OH,
    INDEX_SO4,
    KV,
    MIX_CORR,
    MW_CRYST,
    N_COMPS,
    N_METALS,
    N_MOMENTS,
    N_NODES,
    N_UDS_C,
    N_UDS_E,
    RHO_CRYST,
    ModelConstants,
    pkb_ammonia,
    pkw,
)
from .equilibria import SingularJacobianError, solve_equilibria
from .moments import correction_factors, generate_source
from .particles import growth, nucleate_size, nucleation
from .sources import (
    SourceTerm,
    concentration_source,
    environment_source,
    moment_source,
)

_DEFAULT_CONSTANTS = ModelConstants()

_MIN_REACTING_FRACTION = 1e-4
_MIN_OH = 1e-7
_NEUTRAL_PH = 7.0
_DEFAULT_OH_GUESS = 1e-3
_GROWTH_SUPERSAT = 1.1
_RE_LOW = 0.2
_RE_HIGH = 12853.0
_C_PHI_HIGH = 2.0


@dataclass(frozen=True)
class CellInput:
    """State of one computational cell.

    ``concentrations``, ``weight_scalars`` and ``weighted_node_scalars`` are the
    transported values, i.e. already multiplied by the reacting-environment
    fraction. ``previous_equilibrium`` holds the last equilibrium
    concentrations (Ni, Mn, Co, NH3, OH) used as the Newton starting point.
    ``min_weight`` is the threshold below which the quadrature is treated as empty.
    """

    concentrations: tuple[float, ...]
    env_fractions: tuple[float, ...]
    weight_scalars: tuple[float, ...]
    weighted_node_scalars: tuple[float, ...]
    density: float
    viscosity: float
    kappa: float
    epsilon: float
    previous_equilibrium: tuple[float, ...] = (0.0,) * N_COMPS
    registered: bool = True
    min_weight: float = 0.0

    def __post_init__(self) -> None:
        expected = (
            ("concentrations", N_UDS_C),
            ("env_fractions", N_UDS_E),
            ("weight_scalars", N_NODES),
            ("weighted_node_scalars", N_NODES),
            ("previous_equilibrium", N_COMPS),
        )
        for name, size in expected:
            if len(getattr(self, name)) != size:
                raise ValueError(f"{name} must hold {size} values")
        if self.density <= 0.0:
            raise ValueError("density must be positive")
        if self.viscosity <= 0.0:
            raise ValueError("viscosity must be positive")


@dataclass(frozen=True)
class CellResult:
    """Everything the cell update produces.

    ``ph`` is None where the cell state does not fix it.
    """

    active: bool
    interrupted: bool
    gamma: float
    env_fluxes: tuple[float, ...]
    p4: float
    equilibrium_concs: tuple[float, ...]
    cation_ratios: tuple[float, ...]
    supersat: float
    ph: float | None
    nucleation_rate: float
    nucleate_size: float
    nodes: tuple[float, ...]
    weights: tuple[float, ...]
    prec_rate: float
    quadrature_sources: tuple[float, ...]
    alphas: tuple[float, ...]
    concentration_sources: tuple[SourceTerm, ...]
    environment_sources: tuple[SourceTerm, ...]
    moment_sources: tuple[SourceTerm, ...]


class _Speciation(NamedTuple):
    equilibrium_concs: tuple[float, ...]
    cation_ratios: tuple[float, ...]
    supersat: float
    ph: float | None
    interrupted: bool


def _micromixing_rate(
    kappa: float, epsilon: float, nu: float, coefficients: Sequence[float]
) -> float:
    if kappa <= 0.0 or epsilon <= 0.0:
        return 0.0
    reynolds = kappa / math.sqrt(epsilon * nu)
    if reynolds <= _RE_LOW:
        c_phi = 0.0
    elif reynolds < _RE_HIGH:
        log_re = math.log10(reynolds)
        c_phi = sum(a * log_re**i for i, a in enumerate(coefficients))
    else:
        c_phi = _C_PHI_HIGH
    return MIX_CORR * c_phi * epsilon / kappa / 2.0


def micromixing_rate(kappa: float, epsilon: float, nu: float) -> float:
    """Micromixing frequency from the turbulent Reynolds-number correlation."""
    return _micromixing_rate(
        kappa, epsilon, nu, _DEFAULT_CONSTANTS.mixing_coefficients
    )


def environment_fluxes(
    gamma: float, env_fractions: Sequence[float]
) -> tuple[float, ...]:
    """Exchange rate of each feed environment with the reacting environment."""
    return tuple(
        gamma * p * (1.0 - p) if 0.0 < p < 1.0 else 0.0 for p in env_fractions
    )


def _initial_guess(
    totals: Sequence[float], previous: Sequence[float]
) -> list[float]:
    guess = [0.0] * N_COMPS
    for metal in range(N_METALS):
        prev, total = previous[metal], totals[metal]
        guess[metal] = -math.log10(prev if 0.0 < prev < total else total)

    prev_oh = previous[INDEX_OH]
    conc_na = totals[INDEX_NA]
    if prev_oh > _MIN_OH:
        guess[INDEX_OH] = -math.log10(prev_oh)
    elif conc_na > _DEFAULT_OH_GUESS:
        guess[INDEX_OH] = -math.log10(conc_na)
    else:
        guess[INDEX_OH] = -math.log10(_DEFAULT_OH_GUESS)

    prev_nh3, total_nh3 = previous[INDEX_NH3], totals[INDEX_NH3]
    guess[INDEX_NH3] = -math.log10(
        prev_nh3 if EFFECTIVE_CONC < prev_nh3 < total_nh3 else total_nh3
    )
    return guess


def _ph_without_metals(
    totals: Sequence[float], constants: ModelConstants
) -> float | None:
    conc_na = totals[INDEX_NA]
    conc_nh3 = totals[INDEX_NH3]
    pkw_value = pkw(constants.temperature)
    if conc_na > EFFECTIVE_CONC:
        if conc_nh3 > EFFECTIVE_CONC:
            # Mixed sodium and ammonia buffer: not resolved by this model.
            return None
        if conc_na > _MIN_OH:
            return -pkw_value + math.log10(conc_na)
        return _NEUTRAL_PH
    if conc_nh3 > EFFECTIVE_CONC:
        ph = -pkw_value + 0.5 * (
            pkb_ammonia(constants.temperature) + math.log10(conc_nh3)
        )
        return max(ph, _NEUTRAL_PH)
    return _NEUTRAL_PH


def _speciate(
    totals: Sequence[float],
    previous: Sequence[float],
    constants: ModelConstants,
) -> _Speciation:
    metals = totals[:N_METALS]
    if any(c < EFFECTIVE_CONC for c in metals):
        return _Speciation(
            (0.0,) * N_COMPS,
            (0.0,) * N_METALS,
            0.0,
            _ph_without_metals(totals, constants),
            False,
        )

    cation_total = sum(metals)
    ratios = tuple(c / cation_total for c in metals)

    if totals[INDEX_NH3] > EFFECTIVE_CONC:
        guess = _initial_guess(totals, previous)
        try:
            result = solve_equilibria(totals, guess, cation_total, ratios, constants)
        except SingularJacobianError:
            return _Speciation(tuple(previous), ratios, 0.0, _NEUTRAL_PH, True)
        return _Speciation(
            result.equilibrium_concs, ratios, result.supersat, result.ph, False
        )

    equil = list(previous)
    conc_oh = totals[INDEX_NA] - 2.0 * totals[INDEX_SO4] + 2.0 * cation_total
    if conc_oh > _MIN_OH:
        k_sp_mix = math.prod(
            k**r for k, r in zip(constants.solubility_products, ratios)
        )
        conc_product = math.prod(c**r for c, r in zip(metals, ratios))
        supersat = (conc_product * conc_oh * conc_oh / k_sp_mix) ** (1.0 / 3.0)
        equil[INDEX_OH] = conc_oh
        ph = -pkw(constants.temperature) + math.log10(conc_oh)
        return _Speciation(tuple(equil), ratios, supersat, ph, False)

    equil[INDEX_OH] = _MIN_OH
    return _Speciation(tuple(equil), ratios, 0.0, _NEUTRAL_PH, False)


def _quadrature(
    cell: CellInput, p4: float, small_nodes: Sequence[float]
) -> tuple[tuple[float, ...], tuple[float, ...]]:
    weights = [w / p4 for w in cell.weight_scalars]
    weighted = [wl / p4 for wl in cell.weighted_node_scalars]
    valid = all(
        w > cell.min_weight and wl > small * cell.min_weight
        for w, wl, small in zip(weights, weighted, small_nodes)
    )
    if valid:
        return tuple(wl / w for wl, w in zip(weighted, weights)), tuple(weights)
    return tuple(small_nodes), (0.0,) * N_NODES


def _source_terms(
    cell: CellInput,
    env_conc: Sequence[float],
    fluxes: Sequence[float],
    ratios: Sequence[float],
    prec_rate: float,
    supersat: float,
    p4: float,
    quadrature_sources: Sequence[float],
) -> tuple[tuple[SourceTerm, ...], tuple[SourceTerm, ...], tuple[SourceTerm, ...]]:
    concentration = tuple(
        concentration_source(
            i,
            cell.density,
            cell.registered,
            prec_rate,
            0.0,
            ratios,
            supersat,
            cell.concentrations[i],
            fluxes,
            env_conc,
        )
        for i in range(N_UDS_C)
    )
    environment = tuple(
        environment_source(i, cell.density, cell.registered, fluxes)
        for i in range(N_UDS_E)
    )
    moment = tuple(
        moment_source(i, cell.density, p4, quadrature_sources)
        for i in range(N_MOMENTS)
    )
    return concentration, environment, moment


def _inactive_result(
    cell: CellInput,
    constants: ModelConstants,
    env_conc: Sequence[float],
    gamma: float,
    fluxes: tuple[float, ...],
    p4: float,
) -> CellResult:
    zeros_q = (0.0,) * N_MOMENTS
    ratios = (0.0,) * N_METALS
    conc, env, mom = _source_terms(
        cell, env_conc, fluxes, ratios, 0.0, 0.0, p4, zeros_q
    )
    return CellResult(
        active=False,
        interrupted=False,
        gamma=gamma,
        env_fluxes=fluxes,
        p4=p4,
        equilibrium_concs=(0.0,) * N_COMPS,
        cation_ratios=ratios,
        supersat=0.0,
        ph=None,
        nucleation_rate=0.0,
        nucleate_size=0.0,
        nodes=(0.0,) * N_NODES,
        weights=(0.0,) * N_NODES,
        prec_rate=0.0,
        quadrature_sources=zeros_q,
        alphas=zeros_q,
        concentration_sources=conc,
        environment_sources=env,
        moment_sources=mom,
    )


def evaluate_cell(
    cell: CellInput,
    constants: ModelConstants,
    env_conc: Sequence[float],
    c_adj_h: float,
    a_p: float,
) -> CellResult:
    """Update one cell: mixing, speciation, nucleation, growth and aggregation.

    ``env_conc`` holds the feed concentration of each transported species in
    the environment it enters from.
    """
    if len(env_conc) != N_UDS_C:
        raise ValueError(f"env_conc must hold {N_UDS_C} values")

    if not cell.registered:
        return _inactive_result(
            cell, constants, env_conc, 0.0, (0.0,) * N_UDS_E, 0.0
        )

    nu = cell.viscosity / cell.density
    gamma = _micromixing_rate(
        cell.kappa, cell.epsilon, nu, constants.mixing_coefficients
    )
    fluxes = environment_fluxes(gamma, cell.env_fractions)
    p4 = 1.0 - sum(cell.env_fractions)

    if p4 <= _MIN_REACTING_FRACTION:
        return _inactive_result(cell, constants, env_conc, gamma, fluxes, p4)

    totals = tuple(c / p4 for c in cell.concentrations)
    speciation = _speciate(totals, cell.previous_equilibrium, constants)
    supersat = speciation.supersat

    nucl_rate = nucleation(supersat) if supersat > 1.0 else 0.0
    nucl_size = nucleate_size(supersat)

    nodes, weights = _quadrature(cell, p4, constants.small_nodes[:N_NODES])

    if supersat > _GROWTH_SUPERSAT:
        growths = [growth(supersat, node) for node in nodes]
        dm3dt = 3.0 * sum(
            g * w * node**2 for g, w, node in zip(growths, weights, nodes)
        )
        dm3dt += nucl_rate * nucl_size**3 * correction_factors(N_MOMENTS)[3]
        prec_rate = (KV * RHO_CRYST / MW_CRYST) * dm3dt * p4
        sources_arr, alphas_arr = generate_source(
            nodes,
            weights,
            growths,
            cell.epsilon,
            nu,
            cell.viscosity,
            cell.density,
            supersat,
            nucl_rate,
            nucl_size,
            c_adj_h,
            a_p,
        )
        quad_sources = tuple(float(v) for v in np.asarray(sources_arr))
        alphas = tuple(float(v) for v in np.asarray(alphas_arr))
    else:
        prec_rate = 0.0
        quad_sources = (0.0,) * N_MOMENTS
        alphas = (0.0,) * N_MOMENTS

    conc, env, mom = _source_terms(
        cell,
        env_conc,
        fluxes,
        speciation.cation_ratios,
        prec_rate,
        supersat,
        p4,
        quad_sources,
    )

    return CellResult(
        active=True,
        interrupted=speciation.interrupted,
        gamma=gamma,
        env_fluxes=fluxes,
        p4=p4,
        equilibrium_concs=tuple(speciation.equilibrium_concs),
        cation_ratios=tuple(speciation.cation_ratios),
        supersat=supersat,
        ph=speciation.ph,
        nucleation_rate=nucl_rate,
        nucleate_size=nucl_size,
        nodes=nodes,
        weights=weights,
        prec_rate=prec_rate,
        quadrature_sources=quad_sources,
        alphas=alphas,
        concentration_sources=conc,
        environment_sources=env,
        moment_sources=mom,
    )