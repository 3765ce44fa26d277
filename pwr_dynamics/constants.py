"""
Physical Constants and Nuclear Data for PWR Dynamics

This module contains the fundamental constants and the nuclear data
(delayed neutrons, iodine/xenon chain, decay heat) that the lumped
point-kinetics model is built from.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PhysicalConstants:
    """Fundamental physical constants used in reactor dynamics calculations."""

    # Barn to cm² conversion
    BARN_TO_CM2: float = 1e-24

    # Zero Celsius [K]
    ZERO_CELSIUS: float = 273.15

    # Thermal neutron flux of a rated 3000 MW PWR core [n/cm²/s]
    NOMINAL_THERMAL_FLUX: float = 3.0e13


# Delayed neutron data for U-235
DELAYED_NEUTRON_DATA = {
    "groups": 6,
    "beta_total": 0.0065,  # Total delayed neutron fraction
    "betas": [0.000215, 0.001424, 0.001274, 0.002568, 0.000748, 0.000273],
    "lambdas": [0.0124, 0.0305, 0.111, 0.301, 1.14, 3.01],  # Decay constants [1/s]
    "prompt_lifetime": 1.0e-4,  # Prompt neutron generation time [s]
}


# Fission product chain responsible for xenon poisoning
FISSION_PRODUCT_DATA = {
    "Xe-135": {
        "yield": 0.061,           # Cumulative fission yield
        "sigma_a": 2.65e6,        # Absorption cross-section [barns]
        "decay_constant": 2.09e-5  # [1/s]
    },
    "I-135": {
        "yield": 0.0639,
        "sigma_a": 7.0,
        "decay_constant": 2.87e-5  # [1/s]
    }
}


# Three-group fit of fission-product decay heat after long operation.
# Fractions are of rated thermal power at shutdown.
DECAY_HEAT_DATA = {
    "groups": 3,
    "fractions": [0.030, 0.020, 0.015],
    "lambdas": [0.1, 0.01, 0.001],  # Decay constants [1/s]
}


def xenon_burnup_rate(flux: float = PhysicalConstants.NOMINAL_THERMAL_FLUX) -> float:
    """
    Xe-135 removal rate by neutron absorption at a given thermal flux.

    Args:
        flux: Thermal neutron flux [n/cm²/s]

    Returns:
        σ_a·φ [1/s]
    """
    return (
        FISSION_PRODUCT_DATA["Xe-135"]["sigma_a"]
        * PhysicalConstants.BARN_TO_CM2
        * flux
    )
