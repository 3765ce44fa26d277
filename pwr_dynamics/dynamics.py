"""
Reactor Dynamics Equations

Right-hand side of the coupled ODE system of the lumped PWR model:

    - Six-group point kinetics
    - Fuel and coolant heat balance with secondary heat removal
    - Iodine-135 / xenon-135 chain
    - Three-group decay heat
    - First-order pressurizer pressure response
    - Scram rod insertion relaxing toward SCRAM_REACTIVITY

Point kinetics equations:
    dP/dt   = (ρ - β)/Λ · P + Σ λ_i C_i
    dC_i/dt = β_i/Λ · P - λ_i C_i
"""

from functools import lru_cache
from typing import Tuple
import numpy as np

from .params import ReactorParams, DEFAULT_PARAMS
from .reactivity import reactivity_components
from .state import (
    ReactorState,
    ControlInputs,
    IDX_POWER,
    IDX_PRECURSORS,
    IDX_FUEL_TEMP,
    IDX_COOLANT_TEMP,
    IDX_IODINE,
    IDX_XENON,
    IDX_DECAY_HEAT,
    IDX_PZR_PRESSURE,
    IDX_SCRAM_RHO,
    STATE_SIZE,
)


@lru_cache(maxsize=16)
def _group_arrays(params: ReactorParams) -> Tuple[np.ndarray, ...]:
    """Precursor and decay heat group constants as arrays."""
    betas = np.array(params.BETA_I)
    lambdas = np.array(params.LAMBDA_I)
    fractions = np.array(params.DECAY_HEAT_FRACTIONS)
    decay_lambdas = np.array(params.DECAY_HEAT_LAMBDAS)
    for array in (betas, lambdas, fractions, decay_lambdas):
        array.setflags(write=False)
    return betas, lambdas, fractions, decay_lambdas


def heat_removal_factor(controls: ControlInputs, params: ReactorParams = DEFAULT_PARAMS) -> float:
    """
    Coolant-to-sink conductance relative to the rated value.

    Loss of forced flow leaves natural circulation. The secondary side
    removes heat in proportion to feedwater demand, with a floor for
    losses and an extra path through the steam dump.
    """
    flow = 1.0 if controls.pump_on else params.NATURAL_CIRCULATION_FRACTION
    secondary = (
        params.SECONDARY_MIN_FRACTION
        + (1.0 - params.SECONDARY_MIN_FRACTION) * controls.feedwater_flow
        + params.STEAM_DUMP_GAIN * controls.steam_dump
    )
    return flow * secondary


def pressurizer_target(
    coolant_temp: float,
    controls: ControlInputs,
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """Pressure the pressurizer settles at for the given demands [MPa]."""
    return (
        params.PZR_PRESSURE_NOMINAL
        + params.PZR_HEATER_GAIN * controls.pressurizer_heater
        - params.PZR_SPRAY_GAIN * controls.pressurizer_spray
        + params.PZR_TEMPERATURE_GAIN
        * (coolant_temp - params.PZR_REFERENCE_TEMPERATURE)
    )


def derivative_vector(
    y: np.ndarray,
    controls: ControlInputs,
    params: ReactorParams = DEFAULT_PARAMS
) -> np.ndarray:
    """
    Time derivative of the packed state vector.

    Args:
        y: State vector (see state.STATE_SIZE for the layout)
        controls: Control inputs, held constant over the step
        params: Reactor parameters

    Returns:
        dy/dt with the same layout
    """
    betas, lambdas, fractions, decay_lambdas = _group_arrays(params)

    power = y[IDX_POWER]
    precursors = y[IDX_PRECURSORS]
    fuel_temp = y[IDX_FUEL_TEMP]
    coolant_temp = y[IDX_COOLANT_TEMP]
    iodine = y[IDX_IODINE]
    xenon = y[IDX_XENON]
    decay_heat = y[IDX_DECAY_HEAT]
    scram_rho = y[IDX_SCRAM_RHO]

    rho = reactivity_components(
        fuel_temp, coolant_temp, xenon, scram_rho, controls, params
    ).rho_total

    dydt = np.empty(STATE_SIZE)

    # Point kinetics
    generation_time = params.LAMBDA_PROMPT
    dydt[IDX_POWER] = (
        (rho - params.BETA_TOTAL) / generation_time * power
        + np.dot(lambdas, precursors)
    )
    dydt[IDX_PRECURSORS] = betas / generation_time * power - lambdas * precursors

    # Heat balance; decay heat replaces the prompt share it was split from
    heat = (1.0 - fractions.sum()) * power + decay_heat.sum()
    q_fuel_to_coolant = params.H_FUEL_COOLANT * (fuel_temp - coolant_temp)
    q_to_sink = (
        params.H_COOLANT_SINK
        * heat_removal_factor(controls, params)
        * (coolant_temp - params.T_INLET)
    )
    dydt[IDX_FUEL_TEMP] = (
        heat * params.POWER_NOMINAL - q_fuel_to_coolant
    ) / params.FUEL_HEAT_CAPACITY
    dydt[IDX_COOLANT_TEMP] = (
        q_fuel_to_coolant - q_to_sink
    ) / params.COOLANT_HEAT_CAPACITY

    # Iodine/xenon chain, burnup proportional to flux
    iodine_yield, lambda_iodine, lambda_xenon, sigma_xenon = params.xenon_rates()
    flux = max(power, 0.0)
    dydt[IDX_IODINE] = iodine_yield * power - lambda_iodine * iodine
    dydt[IDX_XENON] = (
        lambda_iodine * iodine - (lambda_xenon + sigma_xenon * flux) * xenon
    )

    # Decay heat groups
    dydt[IDX_DECAY_HEAT] = decay_lambdas * (fractions * power - decay_heat)

    # Pressurizer
    dydt[IDX_PZR_PRESSURE] = (
        pressurizer_target(coolant_temp, controls, params) - y[IDX_PZR_PRESSURE]
    ) / params.PZR_TAU

    # Scram rods fall in, or are withdrawn again after a reset
    scram_target = params.SCRAM_REACTIVITY if controls.scram else 0.0
    dydt[IDX_SCRAM_RHO] = (scram_target - scram_rho) / params.SCRAM_TAU

    return dydt


def compute_derivatives(
    state: ReactorState,
    controls: ControlInputs,
    params: ReactorParams = DEFAULT_PARAMS
) -> np.ndarray:
    """
    Time derivative of a reactor state.

    Args:
        state: Reactor state
        controls: Control inputs
        params: Reactor parameters

    Returns:
        dy/dt in the packed state-vector layout
    """
    return derivative_vector(state.to_vector(), controls, params)


def prompt_eigenvalue(
    y: np.ndarray,
    controls: ControlInputs,
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """
    Estimate of the dominant (prompt) eigenvalue, (ρ - β)/Λ [1/s].

    A pending scram insertion is included so the estimate covers the
    whole step.
    """
    rho = reactivity_components(
        y[IDX_FUEL_TEMP],
        y[IDX_COOLANT_TEMP],
        y[IDX_XENON],
        y[IDX_SCRAM_RHO],
        controls,
        params,
    ).rho_total
    if controls.scram:
        rho += min(params.SCRAM_REACTIVITY - y[IDX_SCRAM_RHO], 0.0)
    return (rho - params.BETA_TOTAL) / params.LAMBDA_PROMPT
