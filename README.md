# nmcprecip

Models for the co-precipitation of nickel–manganese–cobalt (NMC) hydroxide
in a stirred tank, written to be evaluated cell by cell inside a CFD
workflow.

## Modules

- `nmcprecip.constants` – model parameters (sizes of the species vectors,
  kinetic and crystal constants, species indices) and `ModelConstants`, a
  frozen dataclass holding the complex formation constants, solubility
  products, Bromley tables, diffusivities, micromixing coefficients and
  the nucleate node sizes. `ModelConstants.kw()` and
  `ModelConstants.kb_ammonia()` give the water ionic product and the
  ammonia dissociation constant at its temperature; `pkw(temperature)` and
  `pkb_ammonia(temperature)` give their log10.
- `nmcprecip.equilibria` – speciation of Ni, Mn and Co with their ammonia
  complexes, ammonium and hydroxide. `equilibrium_residuals` builds the
  balances and the Newton matrix in log space; `solve_equilibria` iterates
  to convergence and returns an `EquilibriumResult` with the equilibrium
  concentrations, pH and supersaturation (using Bromley activity
  coefficients from `activity_bromley` and `pure_activity`). A singular
  Newton matrix raises `SingularJacobianError`.
- `nmcprecip.particles` – `nucleation`, `growth`, `aggregation`,
  `aggregation_efficiency`, `breakage`, the daughter distributions
  `erosion_dd`, `parabolic_dd`, `symmetric_dd`, `uniform_dd`, and
  `nucleate_size`.
- `nmcprecip.moments` – the quadrature linear systems: `build_matrix`,
  `build_derivative_matrix`, `solve_linear`, `solve_nucleation`,
  `generate_source` (aggregation, growth and nucleation sources of the
  weights and weighted nodes, plus implicit aggregation coefficients),
  `raw_moments`, `correction_factors` and `negative_sum`.
- `nmcprecip.sources` – transport source terms as `SourceTerm` values:
  `concentration_source`, `environment_source`, `moment_source` and
  `mass_source`.
- `nmcprecip.cell` – `micromixing_rate`, `environment_fluxes` and
  `evaluate_cell`, which takes a `CellInput` and returns a `CellResult`
  with mixing rates, speciation, nucleation, quadrature nodes and weights,
  precipitation rate and all source terms of the cell.
- `nmcprecip.control` – `TimestepRamp` (a linear time-step ramp that
  starts over after its last step), `volume_weighted_ph`, `feed_state`
  returning a `FeedState` (`ON`, `OFF` or `HOLD`), and `scalar_names` /
  `memory_names` giving the names of the transported scalars and stored
  fields in storage order.

## Installation

```
pip install .
```

numpy is the only runtime dependency.

## Examples

```python
from nmcprecip.constants import ModelConstants
from nmcprecip.particles import nucleation, growth

constants = ModelConstants()
print(constants.kw(), constants.kb_ammonia())

print(nucleation(5.0))       # nucleation rate at supersaturation 5
print(growth(5.0, 1e-6))     # growth rate of a 1 µm particle
```

Evaluating one cell:

```python
from nmcprecip.cell import CellInput, evaluate_cell
from nmcprecip.constants import ModelConstants

cell = CellInput(
    concentrations=(0.5, 0.2, 0.2, 0.5, 2.0, 0.9),
    env_fractions=(0.1, 0.1, 0.1),
    weight_scalars=(1e12, 1e12),
    weighted_node_scalars=(1e6, 2e6),
    density=1000.0,
    viscosity=1e-3,
    kappa=0.01,
    epsilon=0.1,
)
result = evaluate_cell(
    cell,
    ModelConstants(),
    env_conc=(1.0, 1.0, 1.0, 5.0, 4.0, 1.5),
    c_adj_h=1.0,
    a_p=1e6,
)
print(result.supersat, result.ph, result.prec_rate)
```

A time-step ramp moves from an old step size to a new one over a fixed
number of steps:

```python
from nmcprecip.control import TimestepRamp

ramp = TimestepRamp(old_timestep=1e-3, new_timestep=1e-2, n_steps=10)
steps = [ramp.next_step() for _ in range(10)]
```

The feed decision is taken from the volume-weighted pH:

```python
from nmcprecip.control import volume_weighted_ph, feed_state

ph = volume_weighted_ph([11.2, 11.6], [1.0, 3.0])
state = feed_state(ph, min_ph=11.0, max_ph=11.5)
```

## What the package does not do

- It is a library of per-cell models, not a flow solver: there is no mesh,
  transport equation solver, command-line program or result storage. The
  caller supplies cell states and applies the returned source terms.
- `feed_state` only decides whether the hydroxide feed is on, off or held;
  it does not compute a feed rate.
- When the metals are absent and both sodium and ammonia are present,
  `evaluate_cell` leaves the pH undetermined (`CellResult.ph` is `None`).

## Tests

```
pip install .[test]
pytest
```