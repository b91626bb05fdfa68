"""Direct quadrature method of moments: linear systems and source terms."""

from __future__ import annotations

from typing import NamedTuple, Sequence

import numpy as np

from .particles import aggregation


class LinearSolution(NamedTuple):
    """Quadrature sources and their sensitivities."""

    sources: np.ndarray
    dsdn: np.ndarray
    dsdphi: np.ndarray
    dsodw: np.ndarray
    dsodn: np.ndarray


def correction_factors(n_moments: int) -> np.ndarray:
    """Moment correction of a nucleate spread over 0.9, 1.0 and 1.1 of its size."""
    return np.array(
        [(0.9**k + 1.1**k + 1.0) / 3.0 for k in range(n_moments)], dtype=float
    )


def _as_pair(nodes: Sequence[float], weights: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    nodes_arr = np.asarray(nodes, dtype=float)
    weights_arr = np.asarray(weights, dtype=float)
    if nodes_arr.shape != weights_arr.shape:
        raise ValueError("nodes and weights must have the same length")
    return nodes_arr, weights_arr


def build_matrix(nodes: Sequence[float]) -> np.ndarray:
    """Coefficient matrix linking weight and weighted-node sources to moment sources."""
    lengths = np.asarray(nodes, dtype=float)
    k = np.arange(2 * lengths.size)[:, None]
    weight_cols = (1 - k) * lengths[None, :] ** k
    node_cols = k * lengths[None, :] ** np.maximum(k - 1, 0)
    return np.hstack([weight_cols, node_cols])


def build_derivative_matrix(nodes: Sequence[float], index: int) -> np.ndarray:
    """Derivative of the coefficient matrix with respect to one node."""
    lengths = np.asarray(nodes, dtype=float)
    n = lengths.size
    if not 0 <= index < n:
        raise IndexError(f"node index {index} out of range for {n} nodes")
    size = 2 * n
    matrix = np.zeros((size, size))
    k = np.arange(2, size)
    node = lengths[index]
    matrix[2:, index] = k * (1 - k) * node ** (k - 1)
    matrix[2:, index + n] = k * (k - 1) * node ** (k - 2)
    return matrix


def negative_sum(*args: float) -> float:
    """Sum of the negative arguments."""
    return sum((value for value in args if value < 0), 0.0)


def _sensitivity(
    matrix: np.ndarray, nodes: np.ndarray, weights: np.ndarray, sources: np.ndarray
) -> np.ndarray:
    n = nodes.size
    dsdn = np.zeros((2 * n, 2 * n))
    with np.errstate(divide="ignore", invalid="ignore"):
        for i, (node, weight) in enumerate(zip(nodes, weights)):
            real = np.linalg.solve(
                matrix, build_derivative_matrix(nodes, i) @ sources
            )
            dsdn[i] = real * node / weight
            dsdn[i + n] = -real / weight
    return dsdn


def solve_linear(
    nodes: Sequence[float],
    weights: Sequence[float],
    sources: Sequence[float],
    ds_dw: Sequence[Sequence[float]],
    ds_dn: Sequence[Sequence[float]],
) -> LinearSolution:
    """Turn moment sources into quadrature sources, with their sensitivities.

    ``ds_dw`` and ``ds_dn`` hold one row of moment derivatives per node.
    """
    nodes_arr, weights_arr = _as_pair(nodes, weights)
    n = nodes_arr.size
    matrix = build_matrix(nodes_arr)

    quad_sources = np.linalg.solve(matrix, np.asarray(sources, dtype=float))
    dsodw = np.linalg.solve(matrix, np.asarray(ds_dw, dtype=float).T).T
    dsodn = np.linalg.solve(matrix, np.asarray(ds_dn, dtype=float).T).T

    dsdn = _sensitivity(matrix, nodes_arr, weights_arr, quad_sources)
    dsdphi = np.zeros((2 * n, 2 * n))
    with np.errstate(divide="ignore", invalid="ignore"):
        for i, (node, weight) in enumerate(zip(nodes_arr, weights_arr)):
            dsdphi[i] = dsodw[i] - node / weight * dsodn[i]
            dsdphi[i + n] = dsodn[i] / weight

    return LinearSolution(quad_sources, dsdn, dsdphi, dsodw, dsodn)


def solve_nucleation(
    nodes: Sequence[float], weights: Sequence[float], nucl_size: float
) -> tuple[np.ndarray, np.ndarray]:
    """Quadrature sources of a unit nucleation rate and their node sensitivity."""
    nodes_arr, weights_arr = _as_pair(nodes, weights)
    n_moments = 2 * nodes_arr.size
    k = np.arange(n_moments)
    moment_sources = nucl_size**k * correction_factors(n_moments)
    matrix = build_matrix(nodes_arr)
    quad_sources = np.linalg.solve(matrix, moment_sources)
    return quad_sources, _sensitivity(matrix, nodes_arr, weights_arr, quad_sources)


def generate_source(
    nodes: Sequence[float],
    weights: Sequence[float],
    growths: Sequence[float],
    epsilon: float,
    nu: float,
    mu: float,
    rho_liq: float,
    supersat: float,
    nucl_rate: float,
    nucl_size: float,
    c_adj_h: float,
    a_p: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Quadrature sources for aggregation, growth and nucleation.

    Returns the sources of the weights followed by those of the weighted
    nodes, and the implicit aggregation coefficients in the same order.
    """
    lengths, w = _as_pair(nodes, weights)
    growth_rates = np.asarray(growths, dtype=float)
    n = lengths.size
    n_moments = 2 * n

    beta = np.array(
        [
            [
                aggregation(supersat, li, lj, epsilon, rho_liq, mu, nu, c_adj_h, a_p)
                for lj in lengths
            ]
            for li in lengths
        ]
    )

    summed = lengths[:, None] ** 3 + lengths[None, :] ** 3
    pair_weights = w[:, None] * w[None, :]
    positive = w > 0.0

    birth = np.zeros(n_moments)
    ds_dw = np.zeros((n, n_moments))
    ds_dn = np.zeros((n, n_moments))
    with np.errstate(divide="ignore", invalid="ignore"):
        for k in range(n_moments):
            exponent = k / 3.0
            birth[k] = 0.5 * np.sum(pair_weights * beta * summed**exponent)
            d_weight = np.sum(beta * w[None, :] * summed**exponent, axis=1)
            d_node = (
                np.sum(pair_weights * beta * summed ** (exponent - 1.0), axis=1)
                * k
                * lengths**2
            )
            ds_dw[:, k] = np.where(positive, d_weight, 0.0)
            ds_dn[:, k] = np.where(positive, d_node, 0.0)

    sources = solve_linear(lengths, w, birth, ds_dw, ds_dn).sources.copy()

    death = w * (beta @ w)
    sources[:n] -= death
    sources[n:] -= death * lengths

    implicit = beta @ w + np.diag(beta) * w
    alphas = np.concatenate([-implicit, -implicit])

    sources[n:] += w * growth_rates

    nucl_sources, _ = solve_nucleation(lengths, w, nucl_size)
    sources += nucl_rate * nucl_sources

    return sources, alphas


def raw_moments(
    nodes: Sequence[float], weights: Sequence[float], count: int
) -> np.ndarray:
    """The first ``count`` moments of the quadrature approximation."""
    lengths, w = _as_pair(nodes, weights)
    return np.array([float(np.sum(w * lengths**k)) for k in range(count)])