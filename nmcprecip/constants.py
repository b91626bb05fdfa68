"""Physical constants and model parameters for NMC hydroxide co-precipitation."""

from __future__ import annotations

import math
from dataclasses import dataclass

SMALL_R = 1e-38
SMALL_CONC = 1e-14
EFFECTIVE_CONC = 1e-9
SMALL_SIZE = 1e-20
SMALL_M3 = 2e-20

N_NODES = 2
N_MOMENTS = 2 * N_NODES
N_UDS_E = 3
N_UDS_C = 6
N_COMPS = 5
N_METALS = 3
N_CATIONS = 6
N_ANIONS = 2
N_COMPLEXES_NI = 6
N_COMPLEXES_MN = 4
N_COMPLEXES_CO = 6
N_COMPLEXES = 16
MAX_ITER = 200
TOLERANCE = 1e-6

# Temperature in Kelvin
T = 298.15

SC_TURB = 1.0

# Breakage model
C_BR = 1e-6
GAMMA = 1
C_PARABOLIC_DD = 4
M_EROSION_DD = 5

# Growth rate
K_G = 2.5e-10
N_G = 1

# Nucleation rate
K_J_1 = 26.17202
B_J_1 = 301
K_J_2 = 14.8698
B_J_2 = 30
X_C = 5e-9

# Crystal properties
RHO_CRYST = 3953.0
MW_CRYST = 92.3383

# Bromley activity model (valid at 25 C)
A_GAMMA = 0.511
ALPHA = 70.0

# Micromixing
MIX_CORR = 2.85
N_CP = 7

KV = 0.523599
KB = 1.38064852e-23

# Species indices inside the equilibrium and transported-scalar vectors
INDEX_NH3 = N_METALS
INDEX_OH = N_COMPS - 1
INDEX_NA = N_UDS_C - 2
INDEX_SO4 = N_UDS_C - 1

# Initial hydroxide feed source term
INITIAL_OH_SOURCE = 0.005 * 0.9982 / 0.004 / 0.004 / 0.004 / 60.0


def _celsius(temperature: float) -> float:
    return temperature - 273.15


def pkw(temperature: float) -> float:
    """Return log10 of the water ionic product at the given temperature in Kelvin."""
    t = _celsius(temperature)
    return -0.000113 * t**2 + 0.0371 * t - 14.8


def pkb_ammonia(temperature: float) -> float:
    """Return log10 of the ammonia base dissociation constant at the temperature in Kelvin."""
    t = _celsius(temperature)
    return -0.0000422 * t**2 + 0.0038 * t - 4.82


def _pow10_all(exponents: tuple[float, ...]) -> tuple[float, ...]:
    return tuple(10.0**e for e in exponents)


@dataclass(frozen=True)
class ModelConstants:
    """Equilibrium, activity, transport and mixing parameters of the model."""

    temperature: float = T
    complexes_per_metal: tuple[int, ...] = (
        N_COMPLEXES_NI,
        N_COMPLEXES_MN,
        N_COMPLEXES_CO,
    )
    complex_constants: tuple[float, ...] = _pow10_all(
        (
            2.81, 5.08, 6.85, 8.12, 8.93, 9.08,
            1.00, 1.54, 1.70, 1.30,
            2.10, 3.67, 4.78, 5.53, 5.75, 5.14,
        )
    )
    solubility_products: tuple[float, ...] = _pow10_all((-15.22, -12.70, -14.89))
    bromley_b: tuple[tuple[float, ...], ...] = (
        (0.1056, -0.080),
        (0.1226, -0.097),
        (0.1244, -0.085),
        (-0.0204, 0.0747),
        (-0.0287, 0.0540),
        (0.0606, 0.0605),
    )
    bromley_e: tuple[tuple[float, ...], ...] = (
        (0.00524, 0.0),
        (0.00599, 0.0),
        (0.00498, 0.0),
        (0.0, 0.0),
        (0.0, 0.0),
        (0.0, 0.0),
    )
    molecular_diffusivity: tuple[float, ...] = (2e-9,) * N_UDS_C
    mixing_coefficients: tuple[float, ...] = (
        0.4093, 0.6015, 0.5851, 0.09472, -0.3903, 0.1461, -0.01604,
    )
    env_flux_index: tuple[int, ...] = (0, 0, 0, 1, 2, 0)
    small_nodes: tuple[float, ...] = (X_C * 0.9, X_C, X_C * 1.1)

    def __post_init__(self) -> None:
        if len(self.complex_constants) != sum(self.complexes_per_metal):
            raise ValueError(
                "number of complex formation constants does not match complexes per metal"
            )
        if len(self.solubility_products) != len(self.complexes_per_metal):
            raise ValueError("one solubility product is required per metal")
        if len(self.bromley_b) != len(self.bromley_e) or any(
            len(b) != len(e) for b, e in zip(self.bromley_b, self.bromley_e)
        ):
            raise ValueError("Bromley B and E tables must have the same shape")
        if self.temperature <= 0.0 or not math.isfinite(self.temperature):
            raise ValueError("temperature must be a positive finite number of Kelvin")

    def kw(self) -> float:
        """Water ionic product at this temperature."""
        return 10.0 ** pkw(self.temperature)

    def kb_ammonia(self) -> float:
        """Ammonia base dissociation constant at this temperature."""
        return 10.0 ** pkb_ammonia(self.temperature)