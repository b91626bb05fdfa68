"""Nucleation, growth, aggregation and breakage kernels for the particle population."""

from __future__ import annotations

import math

from .constants import (
    B_J_1,
    B_J_2,
    C_BR,
    C_PARABOLIC_DD,
    GAMMA,
    K_G,
    K_J_1,
    K_J_2,
    KB,
    M_EROSION_DD,
    N_G,
    SMALL_SIZE,
    T,
    X_C,
)

_AGGREGATION_SIZE_LIMIT = 2e-3


def nucleation(supersat: float) -> float:
    """Primary plus secondary nucleation rate; zero at or below saturation."""
    if supersat <= 1.0:
        return 0.0
    log_s_sq = math.log(supersat) ** 2
    return 10.0**K_J_1 * math.exp(-B_J_1 / log_s_sq) + 10.0**K_J_2 * math.exp(
        -B_J_2 / log_s_sq
    )


def growth(supersat: float, particle_size: float) -> float:
    """Size-independent growth rate; zero at or below saturation."""
    if supersat <= 1.0:
        return 0.0
    return K_G * (supersat - 1.0) ** N_G


def aggregation_efficiency(
    l1: float,
    l2: float,
    l_eq: float,
    growth_rate: float,
    epsilon: float,
    rho_liq: float,
    nu: float,
    a_p: float,
) -> float:
    """Probability that a collision between sizes l1 and l2 leads to aggregation."""
    db = math.sqrt(rho_liq / a_p) * (epsilon * nu) ** 0.25 * l_eq
    r_l = l2 / l1 if l2 > l1 else l1 / l2
    sqrt_r_l = math.sqrt(r_l * r_l - 1.0)
    f_lambda = (
        4.0
        * (1.0 + r_l - sqrt_r_l)
        / (
            (1.0 / 3.0 + r_l - sqrt_r_l)
            - (r_l - sqrt_r_l) ** 2 * (2.0 * r_l / 3.0 + sqrt_r_l / 3.0)
        )
    )
    return math.exp(-math.sqrt(epsilon / nu) * db / f_lambda / growth_rate)


def aggregation(
    supersat: float,
    l1: float,
    l2: float,
    epsilon: float,
    rho_liq: float,
    mu: float,
    nu: float,
    c_adj_h: float,
    a_p: float,
) -> float:
    """Brownian plus turbulent aggregation kernel weighted by its efficiency."""
    l_eq = SMALL_SIZE
    growth_rate = 0.0
    if l1 * l2 > 0.0:
        l_eq = l1 * l2 / math.sqrt((l1 - l2) ** 2 + l1 * l2)
        growth_rate = growth(supersat, l_eq)

    if not (
        l1 < _AGGREGATION_SIZE_LIMIT
        and l2 < _AGGREGATION_SIZE_LIMIT
        and growth_rate > 0.0
    ):
        return 0.0

    rate = (2.0 * KB * T / mu / 3.0) * (l1 / l2 + l2 / l1 + 2.0)
    rate += c_adj_h * 2.2943 * math.sqrt(epsilon / nu) * (l1 + l2) ** 3
    return rate * aggregation_efficiency(
        l1, l2, l_eq, growth_rate, epsilon, rho_liq, nu, a_p
    )


def breakage(l1: float, epsilon: float, nu: float) -> float:
    """Breakage frequency of a particle of size l1; zero for non-positive sizes."""
    if l1 <= 0.0:
        return 0.0
    kolmogorov_length = (nu**3 / epsilon) ** 0.25
    kolmogorov_time = math.sqrt(nu / epsilon)
    return C_BR * (l1 / kolmogorov_length) ** GAMMA / kolmogorov_time


def erosion_dd(l1: float, k: float) -> float:
    """k-th moment of the erosion daughter distribution."""
    return l1**k * (
        (1.0 + (M_EROSION_DD - 1) ** (k / 3.0)) / M_EROSION_DD ** (k / 3.0)
    )


def parabolic_dd(l1: float, k: float) -> float:
    """k-th moment of the parabolic daughter distribution."""
    return l1**k * (
        3.0 * C_PARABOLIC_DD / (k + 3.0)
        + (1.0 - C_PARABOLIC_DD / 2.0)
        * 18.0
        * (6.0 - k)
        / ((k + 9.0) * (k + 6.0) * (k + 3.0))
    )


def symmetric_dd(l1: float, k: float) -> float:
    """k-th moment of the symmetric daughter distribution."""
    return 2.0 ** (1.0 - k / 3.0) * l1**k


def uniform_dd(l1: float, k: float) -> float:
    """k-th moment of the uniform daughter distribution."""
    return (6.0 / (k + 3.0)) * l1**k


def nucleate_size(supersat: float) -> float:
    """Size of newly formed nuclei, constant in this model."""
    return X_C