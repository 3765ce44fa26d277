"""
Initial-Condition Solvers

Construct the canonical starting states of a simulation run: cold
shutdown, steady operation at an arbitrary power, and critical steady
operation with the rod position solved for zero reactivity.
"""

from dataclasses import replace
from typing import NamedTuple, Optional
import logging

from scipy.optimize import brentq

from .params import ReactorParams, DEFAULT_PARAMS
from .state import (
    ReactorState,
    ControlInputs,
    NUM_PRECURSOR_GROUPS,
    NUM_DECAY_HEAT_GROUPS,
)
from .reactivity import compute_reactivity
from .dynamics import heat_removal_factor, pressurizer_target
from .guards import (
    ValidationError,
    assert_finite,
    assert_in_range,
    check_state_bounds,
    validate_controls,
    validate_params,
    validate_rod_position,
)

logger = logging.getLogger(__name__)

# Absolute tolerance of the root finders
ROOT_TOLERANCE = 1e-12
ROOT_MAX_ITERATIONS = 200


class InitialCondition(NamedTuple):
    """A starting state and the rod position it was built for."""

    state: ReactorState
    rod_position: float


def _equilibrium_state(
    power: float,
    params: ReactorParams,
    controls: ControlInputs,
    with_xenon: bool
) -> ReactorState:
    """State with all time derivatives zero at constant power."""
    removal = heat_removal_factor(controls, params)
    heat = power * params.POWER_NOMINAL
    coolant_temp = params.T_INLET + heat / (params.H_COOLANT_SINK * removal)
    fuel_temp = coolant_temp + heat / params.H_FUEL_COOLANT

    precursors = tuple(
        beta * power / (params.LAMBDA_PROMPT * lam)
        for beta, lam in zip(params.BETA_I, params.LAMBDA_I)
    )

    if with_xenon:
        iodine_yield, lambda_iodine, lambda_xenon, sigma_xenon = params.xenon_rates()
        iodine = iodine_yield * power / lambda_iodine
        xenon = lambda_iodine * iodine / (lambda_xenon + sigma_xenon * power)
    else:
        iodine = xenon = 0.0

    return ReactorState(
        t=0.0,
        power=power,
        fuel_temp=fuel_temp,
        coolant_temp=coolant_temp,
        precursors=precursors,
        iodine=iodine,
        xenon=xenon,
        decay_heat=tuple(f * power for f in params.DECAY_HEAT_FRACTIONS),
        pressurizer_pressure=pressurizer_target(coolant_temp, controls, params),
        scram_rho=params.SCRAM_REACTIVITY if controls.scram else 0.0,
    )


def create_cold_shutdown_state(params: ReactorParams = DEFAULT_PARAMS) -> InitialCondition:
    """
    Canonical "off" state.

    Rods fully inserted, power at the source-level floor, both
    temperatures at the heat sink temperature, no precursors, no fission
    products and no decay heat.

    Args:
        params: Reactor parameters

    Returns:
        InitialCondition with rod position 0
    """
    validate_params(params)
    controls = ControlInputs()
    state = ReactorState(
        t=0.0,
        power=params.P_MIN,
        fuel_temp=params.T_INLET,
        coolant_temp=params.T_INLET,
        precursors=(0.0,) * NUM_PRECURSOR_GROUPS,
        iodine=0.0,
        xenon=0.0,
        decay_heat=(0.0,) * NUM_DECAY_HEAT_GROUPS,
        pressurizer_pressure=pressurizer_target(params.T_INLET, controls, params),
        scram_rho=0.0,
    )
    return InitialCondition(state, controls.rod)


def create_steady_state(
    target_power: float,
    params: ReactorParams = DEFAULT_PARAMS,
    controls: Optional[ControlInputs] = None,
    with_xenon: bool = True
) -> InitialCondition:
    """
    Back-solve the equilibrium state at constant power.

    Precursors, temperatures, iodine/xenon, decay heat and pressurizer
    pressure are set so that every time derivative vanishes. The net
    reactivity at the given rod position need not be zero.

    Args:
        target_power: Normalized power (1.0 = rated)
        params: Reactor parameters
        controls: Demands the state is balanced for (defaults to nominal
            heat removal with rods inserted)
        with_xenon: Include equilibrium iodine and xenon

    Returns:
        InitialCondition carrying the rod position of ``controls``

    Raises:
        ValidationError: If the power is out of range or the equilibrium
            lies outside the physical bounds
    """
    validate_params(params)
    controls = validate_controls(controls or ControlInputs(), params)
    power = assert_in_range(target_power, 0.0, params.P_MAX, "target_power")
    power = max(power, params.P_MIN)

    state = _equilibrium_state(power, params, controls, with_xenon)
    check_state_bounds(state, params, ValidationError)
    return InitialCondition(state, controls.rod)


def compute_critical_rod_position(
    state: ReactorState,
    params: ReactorParams = DEFAULT_PARAMS,
    controls: Optional[ControlInputs] = None,
    target_reactivity: float = 0.0
) -> float:
    """
    Rod position giving the requested total reactivity.

    Brent's method on the monotonic rod worth curve, bracketed by the
    full rod travel.

    Args:
        state: Reactor state providing the feedback terms
        params: Reactor parameters
        controls: Remaining control inputs (boron, scram)
        target_reactivity: Total reactivity to reach [Δk/k]

    Returns:
        Rod position in [0, 1]

    Raises:
        ValidationError: If no position in travel reaches the target or
            the search does not converge
    """
    controls = controls or ControlInputs()
    target = assert_finite(target_reactivity, "target_reactivity")

    def residual(rod: float) -> float:
        rho = compute_reactivity(state, replace(controls, rod=rod), params)
        return rho.rho_total - target

    low, high = residual(0.0), residual(1.0)
    if low > 0.0 or high < 0.0:
        raise ValidationError(
            f"No rod position reaches reactivity {target:.6f}: "
            f"achievable range is [{low + target:.6f}, {high + target:.6f}]"
        )
    if low == 0.0:
        return 0.0
    if high == 0.0:
        return 1.0

    try:
        rod = brentq(
            residual, 0.0, 1.0,
            xtol=ROOT_TOLERANCE, maxiter=ROOT_MAX_ITERATIONS,
        )
    except RuntimeError as exc:
        raise ValidationError(f"Critical rod search did not converge: {exc}") from exc

    logger.debug("Rod position %.6f gives reactivity %.3g", rod, target)
    return float(rod)


def compute_critical_power(
    rod_position: float,
    params: ReactorParams = DEFAULT_PARAMS,
    controls: Optional[ControlInputs] = None,
    with_xenon: bool = False
) -> float:
    """
    Power at which a given rod position is critical.

    The power defect (temperature feedback plus equilibrium xenon) grows
    monotonically with power, so the root is bracketed by [P_MIN, P_MAX].

    Args:
        rod_position: Control rod position
        params: Reactor parameters
        controls: Remaining control inputs
        with_xenon: Include equilibrium xenon in the balance

    Returns:
        Normalized critical power

    Raises:
        ValidationError: If the rod position is not critical at any power
            in range
    """
    rod = validate_rod_position(rod_position)
    controls = replace(controls or ControlInputs(), rod=rod)

    def residual(power: float) -> float:
        state = _equilibrium_state(power, params, controls, with_xenon)
        return compute_reactivity(state, controls, params).rho_total

    low, high = residual(params.P_MIN), residual(params.P_MAX)
    if low < 0.0:
        raise ValidationError(
            f"Rod position {rod} is subcritical at zero power "
            f"(reactivity {low:.6f})"
        )
    if high > 0.0:
        raise ValidationError(
            f"Rod position {rod} is supercritical at maximum power "
            f"(reactivity {high:.6f})"
        )

    try:
        power = brentq(
            residual, params.P_MIN, params.P_MAX,
            xtol=ROOT_TOLERANCE, maxiter=ROOT_MAX_ITERATIONS,
        )
    except RuntimeError as exc:
        raise ValidationError(f"Critical power search did not converge: {exc}") from exc

    return float(power)


def create_critical_steady_state(
    target_power: float,
    params: ReactorParams = DEFAULT_PARAMS,
    with_xenon: bool = True,
    controls: Optional[ControlInputs] = None
) -> InitialCondition:
    """
    Self-sustaining steady state at the target power.

    Args:
        target_power: Normalized power (1.0 = rated)
        params: Reactor parameters
        with_xenon: Include equilibrium iodine and xenon
        controls: Demands the state is balanced for; the rod position is
            solved for

    Returns:
        InitialCondition with the critical rod position
    """
    state, _ = create_steady_state(target_power, params, controls, with_xenon)
    rod = compute_critical_rod_position(state, params, controls)
    logger.info(
        "Critical steady state at P=%.3f%s: rod position %.4f",
        state.power, " with xenon" if with_xenon else "", rod,
    )
    return InitialCondition(state, rod)
