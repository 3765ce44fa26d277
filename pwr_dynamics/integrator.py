"""
Fixed-Step Integrator

Advances the reactor state by one fixed timestep. The physics is the pure
transition function ``advance(state, controls, dt) -> state``;
``ReactorModel`` is a thin owner holding the current state between calls.

The prompt neutron term makes the system stiff. Each outer step is split
into equal substeps so that no substep exceeds ``max_substep`` and the
stability parameter |λ·h| of the dominant eigenvalue λ ≈ (ρ - β)/Λ stays
below the limit of the method (2.0 for RK4, whose real-axis stability
boundary is 2.78).
"""

from functools import lru_cache
from typing import Callable, List, Optional, Union
import logging
import math

import numpy as np

from .params import ReactorParams, DEFAULT_PARAMS
from .state import (
    ReactorState,
    ControlInputs,
    ReactivityComponents,
    SimulationConfig,
    SimulationRecord,
    IDX_POWER,
    IDX_PRECURSORS,
    IDX_IODINE,
    IDX_XENON,
    IDX_DECAY_HEAT,
    STATE_SIZE,
)
from .dynamics import derivative_vector, prompt_eigenvalue
from .reactivity import compute_reactivity
from .guards import (
    BoundsError,
    ValidationError,
    assert_finite,
    validate_timestep,
    validate_controls,
    validate_initial_state,
    validate_params,
    validate_config,
    validate_state_finite,
    check_state_bounds,
    clamp_state,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = SimulationConfig()

ControlSchedule = Union[ControlInputs, Callable[[float], ControlInputs]]


@lru_cache(maxsize=16)
def _floor_vector(params: ReactorParams) -> np.ndarray:
    """Lower limits enforced after every substep (-inf where none)."""
    floors = np.full(STATE_SIZE, -np.inf)
    floors[IDX_POWER] = params.P_MIN
    floors[IDX_PRECURSORS] = 0.0
    floors[IDX_IODINE] = 0.0
    floors[IDX_XENON] = 0.0
    floors[IDX_DECAY_HEAT] = 0.0
    floors.setflags(write=False)
    return floors


def _rk4_substep(y, h, controls, params):
    k1 = derivative_vector(y, controls, params)
    k2 = derivative_vector(y + h / 2 * k1, controls, params)
    k3 = derivative_vector(y + h / 2 * k2, controls, params)
    k4 = derivative_vector(y + h * k3, controls, params)
    return y + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


def _euler_substep(y, h, controls, params):
    return y + h * derivative_vector(y, controls, params)


_STEPPERS = {
    "rk4": _rk4_substep,
    "euler": _euler_substep,
}


def substep_count(
    y: np.ndarray,
    controls: ControlInputs,
    dt: float,
    params: ReactorParams = DEFAULT_PARAMS,
    config: SimulationConfig = DEFAULT_CONFIG
) -> int:
    """
    Number of equal substeps used for an outer step of length dt.

    Depends only on the state, the controls and the configuration, so a
    replayed run takes identical substeps.
    """
    n_substeps = max(1, math.ceil(dt / config.max_substep - 1e-9))

    eigenvalue = prompt_eigenvalue(y, controls, params)
    stability_param = abs(eigenvalue * dt)
    limit = config.effective_stability_limit
    if stability_param > limit:
        n_substeps = max(n_substeps, math.ceil(stability_param / limit))

    if n_substeps > config.max_substeps:
        logger.debug(
            "Substeps capped at %d (stability parameter %.1f)",
            config.max_substeps, stability_param,
        )
        n_substeps = config.max_substeps
    return n_substeps


def advance(
    state: ReactorState,
    controls: ControlInputs,
    dt: float,
    params: ReactorParams = DEFAULT_PARAMS,
    config: SimulationConfig = DEFAULT_CONFIG
) -> ReactorState:
    """
    Advance a reactor state by exactly dt seconds.

    Args:
        state: Current state
        controls: Control inputs, held constant over the step
        dt: Timestep [s]
        params: Reactor parameters
        config: Integrator settings

    Returns:
        New state at t + dt

    Raises:
        ValidationError: If dt, a control input or the configuration is
            invalid
        BoundsError: If the new state is non-finite or out of bounds
    """
    validate_config(config)
    dt = validate_timestep(dt, config.method, params)
    validate_controls(controls, params)

    stepper = _STEPPERS[config.method]
    floors = _floor_vector(params)
    y = state.to_vector()
    n_substeps = substep_count(y, controls, dt, params, config)
    h = dt / n_substeps

    floored = 0
    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(n_substeps):
            y = stepper(y, h, controls, params)
            below = y < floors
            if below.any():
                floored += 1
                y = np.where(below, floors, y)

    if floored:
        logger.log(
            logging.WARNING if config.warn_on_clamp else logging.DEBUG,
            "t=%.3f s: floored power or concentrations in %d of %d substeps",
            state.t, floored, n_substeps,
        )

    new_state = ReactorState.from_vector(state.t + dt, y)

    try:
        validate_state_finite(new_state)
        if config.bounds_policy == "raise":
            check_state_bounds(new_state, params)
    except BoundsError as exc:
        logger.error(
            "State corruption at t=%.3f s (dt=%g, %d substeps): %s",
            new_state.t, dt, n_substeps, exc,
        )
        raise

    if config.bounds_policy == "clamp":
        new_state, _ = clamp_state(new_state, params, warn=config.warn_on_clamp)

    return new_state


class ReactorModel:
    """
    Owner of the reactor state during a simulation run.

    Holds exactly one state and replaces it on each successful step. A
    rejected step leaves the held state unchanged. Not thread-safe.

    Attributes:
        params: Frozen reactor parameters
        config: Integrator settings
    """

    def __init__(
        self,
        initial_state: ReactorState,
        params: ReactorParams = DEFAULT_PARAMS,
        config: Optional[SimulationConfig] = None
    ):
        self.params = validate_params(params)
        self.config = validate_config(config or DEFAULT_CONFIG)
        self._state = validate_initial_state(initial_state, params)

    @property
    def time(self) -> float:
        """Elapsed simulation time [s]."""
        return self._state.t

    def get_state(self) -> ReactorState:
        """Current state snapshot."""
        return self._state

    def get_reactivity(self, controls: ControlInputs) -> ReactivityComponents:
        """Reactivity breakdown of the current state; no mutation."""
        validate_controls(controls, self.params)
        return compute_reactivity(self._state, controls, self.params)

    def step(self, dt: float, controls: ControlInputs) -> ReactorState:
        """
        Advance the held state by dt.

        Args:
            dt: Timestep [s]
            controls: Control inputs

        Returns:
            The new state snapshot
        """
        self._state = advance(self._state, controls, dt, self.params, self.config)
        return self._state

    def reset(self, state: ReactorState):
        """Replace the held state, e.g. to re-initialize a run."""
        self._state = validate_initial_state(state, self.params)

    def run(
        self,
        duration: float,
        dt: float,
        controls: ControlSchedule,
        record_interval: Optional[float] = None
    ) -> List[SimulationRecord]:
        """
        Step the model for a duration and record the trajectory.

        Args:
            duration: Simulated time [s]
            dt: Timestep [s]
            controls: Fixed control inputs, or a function of time
                returning the inputs for the step starting at t
            record_interval: Sampling interval [s]; every step if None

        Returns:
            Records at the start time and at each sampling instant
        """
        duration = assert_finite(duration, "duration")
        if duration <= 0.0:
            raise ValidationError(f"duration must be positive, got {duration}")
        dt = validate_timestep(dt, self.config.method, self.params)

        schedule = controls if callable(controls) else (lambda t: controls)
        n_steps = max(1, int(round(duration / dt)))
        record_every = 1
        if record_interval is not None:
            record_interval = assert_finite(record_interval, "record_interval")
            if record_interval <= 0.0:
                raise ValidationError(
                    f"record_interval must be positive, got {record_interval}"
                )
            record_every = max(1, int(round(record_interval / dt)))

        current = schedule(self._state.t)
        records = [self._record(current)]
        for i in range(n_steps):
            current = schedule(self._state.t)
            self.step(dt, current)
            if (i + 1) % record_every == 0 or i == n_steps - 1:
                records.append(self._record(current))

        return records

    def _record(self, controls: ControlInputs) -> SimulationRecord:
        return SimulationRecord.from_state(
            self._state, controls.rod, self.get_reactivity(controls)
        )
