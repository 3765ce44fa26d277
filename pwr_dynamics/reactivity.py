"""
Reactivity Model

Computes the reactivity feedback components from the reactor state and
the control inputs:

    rho_ext     = W(rod) - W(rod_ref) - boron worth + scram insertion
    rho_doppler = ALPHA_FUEL * (sqrt(Tf) - sqrt(TF_REFERENCE))
    rho_mod     = ALPHA_COOLANT * (Tc - TC_REFERENCE)
    rho_xenon   = -SIGMA_F_MACRO * Xe

All functions are pure. The derivative function uses the same
component helpers, so a standalone query and the value seen by the
integrator are identical.
"""

import math

from .params import ReactorParams, DEFAULT_PARAMS, rod_worth_curve
from .state import ReactorState, ControlInputs, ReactivityComponents


def compute_boron_reactivity(
    boron_conc: float,
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """Negative reactivity of dissolved boron [Δk/k]."""
    return -params.BORON_WORTH * boron_conc


def compute_external_reactivity(
    rod: float,
    boron_conc: float = 0.0,
    scram_rho: float = 0.0,
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """
    External reactivity relative to the reference critical rod position.

    Args:
        rod: Control rod position (0 = inserted, 1 = withdrawn)
        boron_conc: Soluble boron concentration [ppm]
        scram_rho: Reactivity currently inserted by the scram rods
        params: Reactor parameters

    Returns:
        External reactivity [Δk/k]
    """
    return (
        rod_worth_curve(rod, params)
        - rod_worth_curve(params.ROD_REFERENCE, params)
        + compute_boron_reactivity(boron_conc, params)
        + scram_rho
    )


def compute_doppler_reactivity(
    fuel_temp: float,
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """
    Doppler feedback with the square-root fuel temperature dependence.

    Args:
        fuel_temp: Average fuel temperature [K]
        params: Reactor parameters

    Returns:
        Doppler reactivity [Δk/k]
    """
    # Unphysical negative temperatures are caught by the bounds check
    return params.ALPHA_FUEL * (
        math.sqrt(max(fuel_temp, 0.0)) - math.sqrt(params.TF_REFERENCE)
    )


def compute_moderator_reactivity(
    coolant_temp: float,
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """Moderator temperature feedback [Δk/k]."""
    return params.ALPHA_COOLANT * (coolant_temp - params.TC_REFERENCE)


def compute_xenon_reactivity(
    xenon: float,
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """Xenon poisoning [Δk/k]; more xenon gives more negative reactivity."""
    return -params.SIGMA_F_MACRO * xenon


def reactivity_components(
    fuel_temp: float,
    coolant_temp: float,
    xenon: float,
    scram_rho: float,
    controls: ControlInputs,
    params: ReactorParams = DEFAULT_PARAMS
) -> ReactivityComponents:
    """Reactivity breakdown from the individual state quantities."""
    rho_ext = compute_external_reactivity(
        controls.rod, controls.boron_conc, scram_rho, params
    )
    rho_doppler = compute_doppler_reactivity(fuel_temp, params)
    rho_mod = compute_moderator_reactivity(coolant_temp, params)
    rho_xenon = compute_xenon_reactivity(xenon, params)

    return ReactivityComponents(
        rho_ext=rho_ext,
        rho_doppler=rho_doppler,
        rho_mod=rho_mod,
        rho_xenon=rho_xenon,
        rho_total=rho_ext + rho_doppler + rho_mod + rho_xenon,
    )


def compute_reactivity(
    state: ReactorState,
    controls: ControlInputs,
    params: ReactorParams = DEFAULT_PARAMS
) -> ReactivityComponents:
    """
    Compute all reactivity components for a state and control inputs.

    Args:
        state: Reactor state
        controls: Control inputs
        params: Reactor parameters

    Returns:
        ReactivityComponents with rho_total equal to the sum of the parts
    """
    return reactivity_components(
        state.fuel_temp,
        state.coolant_temp,
        state.xenon,
        state.scram_rho,
        controls,
        params,
    )
