"""Equilibrium chemistry, particle kinetics, quadrature moment sources and cell evaluation for NMC hydroxide co-precipitation."""

__version__ = "0.1.0"