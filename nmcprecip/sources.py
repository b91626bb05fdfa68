"""Source terms of the transported concentration, environment and moment scalars."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .constants import N_METALS, N_UDS_C, ModelConstants

_ENV_FLUX_INDEX = ModelConstants().env_flux_index


@dataclass(frozen=True)
class SourceTerm:
    """Explicit source value and its derivative with respect to the transported scalar."""

    value: float
    derivative: float = 0.0


def concentration_source(
    uds_index: int,
    density: float,
    registered: bool,
    prec_rate: float,
    prec_rate_ds: float,
    cation_ratios: Sequence[float],
    supersat: float,
    uds_value: float,
    env_fluxes: Sequence[float],
    env_conc: Sequence[float],
) -> SourceTerm:
    """Source of a total concentration: precipitation sink plus environment feed."""
    if not 0 <= uds_index < N_UDS_C:
        raise IndexError(f"concentration index {uds_index} out of range")
    source = 0.0
    dsource = 0.0
    if registered:
        if uds_index < N_METALS:
            ratio = cation_ratios[uds_index]
            source = -prec_rate * ratio
            if uds_value > 0.0:
                dsource = -prec_rate_ds * ratio * supersat / uds_value
        source += env_fluxes[_ENV_FLUX_INDEX[uds_index]] * env_conc[uds_index]
    return SourceTerm(source * density, dsource * density)


def environment_source(
    env_index: int,
    density: float,
    registered: bool,
    env_fluxes: Sequence[float],
) -> SourceTerm:
    """Source of an environment volume fraction: loss by micromixing."""
    if not 0 <= env_index < len(env_fluxes):
        raise IndexError(f"environment index {env_index} out of range")
    if not registered:
        return SourceTerm(0.0)
    return SourceTerm(-env_fluxes[env_index] * density)


def moment_source(
    mom_index: int,
    density: float,
    react_env_p: float,
    moment_sources: Sequence[float],
) -> SourceTerm:
    """Source of a quadrature scalar scaled by density and reacting-environment fraction."""
    if not 0 <= mom_index < len(moment_sources):
        raise IndexError(f"moment index {mom_index} out of range")
    return SourceTerm(moment_sources[mom_index] * density * react_env_p)


def mass_source(oh_source: float) -> SourceTerm:
    """Mass source of the hydroxide feed."""
    return SourceTerm(oh_source)