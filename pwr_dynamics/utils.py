"""
Utility Functions for Reactor Dynamics

This module provides helper functions for unit conversions, reactor
period estimates and time-series sampling.
"""

import math
from typing import Sequence
import numpy as np

from .constants import PhysicalConstants, DELAYED_NEUTRON_DATA

BETA_U235 = DELAYED_NEUTRON_DATA["beta_total"]


def delta_k_to_pcm(delta_k: float) -> float:
    """
    Convert reactivity from Δk/k to pcm.

    Args:
        delta_k: Reactivity as Δk/k

    Returns:
        Reactivity in pcm
    """
    return delta_k * 1e5


def delta_k_to_dollars(delta_k: float, beta: float = BETA_U235) -> float:
    """Convert reactivity from Δk/k to dollars."""
    return delta_k / beta


def kelvin_to_celsius(kelvin: float) -> float:
    """Convert temperature from Kelvin to Celsius."""
    return kelvin - PhysicalConstants.ZERO_CELSIUS


def calculate_period(
    reactivity: float,
    beta: float = BETA_U235,
    prompt_lifetime: float = DELAYED_NEUTRON_DATA["prompt_lifetime"],
    lambda_eff: float = 0.08
) -> float:
    """
    Calculate reactor period using one-group point kinetics.

    For small reactivities (ρ << β), the period is dominated by
    delayed neutrons:
    T ≈ (β - ρ) / (λ_eff * ρ)

    For ρ > β the reactor is prompt critical and the period becomes
    very short.

    Args:
        reactivity: Reactivity ρ (Δk/k)
        beta: Delayed neutron fraction
        prompt_lifetime: Prompt neutron generation time [s]
        lambda_eff: Effective delayed neutron decay constant [1/s]

    Returns:
        Reactor period [s], negative when subcritical
    """
    if abs(reactivity) < 1e-10:
        return float('inf')

    if reactivity >= beta:
        # Prompt supercritical
        return prompt_lifetime / (reactivity - beta)
    elif reactivity > 0:
        return (beta - reactivity) / (lambda_eff * reactivity)
    else:
        return -(beta - reactivity) / (lambda_eff * abs(reactivity))


def calculate_doubling_time(period: float) -> float:
    """
    Calculate power doubling time from reactor period.

    T_2 = T * ln(2)

    Args:
        period: Reactor period [s]

    Returns:
        Doubling time [s]
    """
    if period <= 0 or math.isinf(period):
        return float('inf')
    return period * math.log(2)


def measured_period(times: Sequence[float], powers: Sequence[float]) -> float:
    """
    Reactor period fitted to a power trace.

    Least-squares slope of ln(P) over time; T = 1 / slope.

    Args:
        times: Sample times [s]
        powers: Normalized power at those times

    Returns:
        Period [s] (inf for a flat trace, negative when falling)
    """
    t = np.asarray(times, dtype=float)
    p = np.asarray(powers, dtype=float)
    if len(t) < 2:
        return float('inf')
    slope = np.polyfit(t, np.log(p), 1)[0]
    if abs(slope) < 1e-12:
        return float('inf')
    return float(1.0 / slope)


def interpolate_linear(
    x: float,
    x_data: np.ndarray,
    y_data: np.ndarray
) -> float:
    """
    Perform linear interpolation.

    Args:
        x: Point to interpolate at
        x_data: Known x values
        y_data: Known y values

    Returns:
        Interpolated y value
    """
    return float(np.interp(x, x_data, y_data))


def format_scientific(value: float, precision: int = 3) -> str:
    """Format a number in scientific notation."""
    if value == 0:
        return "0"
    return f"{value:.{precision}e}"
