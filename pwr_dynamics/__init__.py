"""
PWR Dynamics Package

A lumped-parameter, point-kinetics model of a 3000 MW Pressurized Water
Reactor plant for real-time operator training.

Modules:
    - constants: Physical constants and nuclear data
    - params: Frozen reactor parameter set and rod worth curve
    - state: Reactor state, control inputs and record types
    - guards: Input/state validation and saturating clamps
    - reactivity: Reactivity feedback model
    - dynamics: Right-hand side of the coupled ODE system
    - integrator: Fixed-step RK4/Euler integrator and ReactorModel
    - initial_conditions: Cold shutdown, steady and critical states
    - benchmarks: Canonical transients with pass/fail verdicts
    - actuators: Actuator slew limiting for the calling layer
"""

from .params import ReactorParams, DEFAULT_PARAMS, create_params, rod_worth_curve
from .state import (
    ReactorState,
    ControlInputs,
    ReactivityComponents,
    SimulationConfig,
    SimulationRecord,
)
from .guards import ReactorError, ValidationError, BoundsError
from .reactivity import compute_reactivity
from .dynamics import compute_derivatives
from .integrator import ReactorModel, advance
from .initial_conditions import (
    InitialCondition,
    create_cold_shutdown_state,
    create_steady_state,
    create_critical_steady_state,
    compute_critical_rod_position,
    compute_critical_power,
)
from .benchmarks import BenchmarkResult, run_all_benchmarks
from .actuators import ActuatorState, ActuatorRates

__version__ = "1.0.0"
__author__ = "Nuclear Engineering Model"

__all__ = [
    "ReactorParams",
    "DEFAULT_PARAMS",
    "create_params",
    "rod_worth_curve",
    "ReactorState",
    "ControlInputs",
    "ReactivityComponents",
    "SimulationConfig",
    "SimulationRecord",
    "ReactorError",
    "ValidationError",
    "BoundsError",
    "compute_reactivity",
    "compute_derivatives",
    "ReactorModel",
    "advance",
    "InitialCondition",
    "create_cold_shutdown_state",
    "create_steady_state",
    "create_critical_steady_state",
    "compute_critical_rod_position",
    "compute_critical_power",
    "BenchmarkResult",
    "run_all_benchmarks",
    "ActuatorState",
    "ActuatorRates",
]
