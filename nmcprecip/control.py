"""Time-step ramping, feed control and field naming for the precipitation model."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .constants import N_NODES, N_UDS_E

_CONCENTRATION_NAMES = (
    "totC_Ni",
    "totC_Mn",
    "totC_Co",
    "totC_NH3",
    "totC_Na",
    "totC_SO4",
)

_FIXED_MEMORY_NAMES = (
    "eqC_Ni",
    "eqC_Mn",
    "eqC_Co",
    "eqC_NH3",
    "eqC_OH",
    "superSat_0",
    "superSat_1",
    "superSat_2",
    "superSat_N",
    "pH",
    "nucRate",
    "nuclSize",
    "SMD",
    "precRate",
    "dprecRate",
    "cRatio_Ni",
    "cRatio_Mn",
    "cRatio_Co",
)

_N_STORED_MOMENTS = 5


@dataclass
class TimestepRamp:
    """Linear ramp of the time step from an old to a new value over a number of steps.

    After the last step the ramp starts over from its first step.
    """

    old_timestep: float
    new_timestep: float
    n_steps: int
    _count: int = field(default=1, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.n_steps <= 0:
            raise ValueError("the number of ramp steps must be positive")

    def next_step(self) -> float:
        """Return the time step for the current iteration and advance the ramp."""
        step = (
            self._count / self.n_steps * (self.new_timestep - self.old_timestep)
            + self.old_timestep
        )
        self._count = 1 if self._count >= self.n_steps else self._count + 1
        return step

    def __iter__(self) -> Iterator[float]:
        return self

    def __next__(self) -> float:
        return self.next_step()


class FeedState(enum.Enum):
    """Decision on the hydroxide feed taken from the average pH."""

    ON = "on"
    OFF = "off"
    HOLD = "hold"


def volume_weighted_ph(ph_values: Iterable[float], volumes: Iterable[float]) -> float:
    """Volume-weighted average pH over a set of cells."""
    ph_list = list(ph_values)
    volume_list = list(volumes)
    if len(ph_list) != len(volume_list):
        raise ValueError("one volume is required per pH value")
    total_volume = sum(volume_list)
    if total_volume <= 0.0:
        raise ValueError("total volume must be positive")
    return sum(ph * v for ph, v in zip(ph_list, volume_list)) / total_volume


def feed_state(average_ph: float, min_ph: float, max_ph: float) -> FeedState:
    """Switch the feed off above ``max_ph``, on below ``min_ph``, else keep it."""
    if min_ph > max_ph:
        raise ValueError("min_ph must not exceed max_ph")
    if average_ph > max_ph:
        return FeedState.OFF
    if average_ph < min_ph:
        return FeedState.ON
    return FeedState.HOLD


def scalar_names(n_env: int = N_UDS_E, n_nodes: int = N_NODES) -> tuple[str, ...]:
    """Names of the transported scalars in their storage order."""
    if n_env < 0 or n_nodes < 0:
        raise ValueError("counts must not be negative")
    return (
        _CONCENTRATION_NAMES
        + tuple(f"P{i + 1}" for i in range(n_env))
        + tuple(f"we{i}" for i in range(n_nodes))
        + tuple(f"wL{i}" for i in range(n_nodes))
    )


def memory_names(n_nodes: int = N_NODES, n_env: int = N_UDS_E) -> tuple[str, ...]:
    """Names of the per-cell stored fields in their storage order."""
    if n_env < 0 or n_nodes < 0:
        raise ValueError("counts must not be negative")
    return (
        _FIXED_MEMORY_NAMES
        + tuple(f"n{i}" for i in range(n_nodes))
        + tuple(f"w{i}" for i in range(n_nodes))
        + tuple(f"a{i}" for i in range(n_nodes))
        + tuple(f"b{i}" for i in range(n_nodes))
        + tuple(f"alp{i}" for i in range(2 * n_nodes))
        + tuple(f"r_p_{i + 1}" for i in range(n_env))
        + ("P4", "cell_mark", "diss-rate-liq")
        + tuple(f"M{i}" for i in range(_N_STORED_MOMENTS))
    )