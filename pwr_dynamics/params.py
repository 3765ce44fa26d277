"""
Reactor Parameter Set

Immutable physical constants and coefficients for the lumped
point-kinetics PWR model, together with the control-rod worth curve.

The thermal constants are derived from a small set of design inputs
(rated power, temperature rises, time constants) so that overriding a
design input keeps every dependent coefficient consistent.
"""

from dataclasses import dataclass, replace
from typing import Tuple

from scipy.special import expit

from .constants import (
    DELAYED_NEUTRON_DATA,
    FISSION_PRODUCT_DATA,
    DECAY_HEAT_DATA,
    xenon_burnup_rate,
)

# Per-group parameters (precursor and decay heat groups)
GROUP_FIELDS = (
    "BETA_I",
    "LAMBDA_I",
    "DECAY_HEAT_FRACTIONS",
    "DECAY_HEAT_LAMBDAS",
)


@dataclass(frozen=True)
class ReactorParams:
    """
    Frozen parameter set of the reactor model.

    Reactivities are in Δk/k, temperatures in K, pressures in MPa and
    times in seconds. Power is normalized to the rated value.
    """

    # Point kinetics
    BETA_I: Tuple[float, ...] = tuple(DELAYED_NEUTRON_DATA["betas"])
    LAMBDA_I: Tuple[float, ...] = tuple(DELAYED_NEUTRON_DATA["lambdas"])
    LAMBDA_PROMPT: float = DELAYED_NEUTRON_DATA["prompt_lifetime"]  # [s]

    # Temperature feedback
    ALPHA_FUEL: float = -2.0e-3     # Doppler [Δk/k per sqrt(K)]
    ALPHA_COOLANT: float = -1.0e-4  # Moderator [Δk/k per K]
    TF_REFERENCE: float = 565.0     # [K]
    TC_REFERENCE: float = 565.0     # [K]

    # Control rods, boron and scram
    ROD_WORTH_MAX: float = 0.05
    ROD_REFERENCE: float = 0.25     # Rod position with zero external reactivity
    ROD_STEEPNESS: float = 6.0      # Logistic slope of the worth curve
    BORON_WORTH: float = 1.0e-4     # [Δk/k per ppm]
    BORON_MAX: float = 3000.0       # [ppm]
    SCRAM_REACTIVITY: float = -0.08
    SCRAM_TAU: float = 0.5          # [s]

    # Iodine/xenon chain (real-world rates, multiplied by XENON_ACCELERATION)
    SIGMA_F_MACRO: float = 0.05     # Reactivity per unit normalized xenon
    IODINE_DECAY: float = FISSION_PRODUCT_DATA["I-135"]["decay_constant"]
    XENON_DECAY: float = FISSION_PRODUCT_DATA["Xe-135"]["decay_constant"]
    XENON_BURNUP: float = xenon_burnup_rate()  # σ_a·φ at rated power [1/s]
    XENON_ACCELERATION: float = 200.0

    # Decay heat
    DECAY_HEAT_FRACTIONS: Tuple[float, ...] = tuple(DECAY_HEAT_DATA["fractions"])
    DECAY_HEAT_LAMBDAS: Tuple[float, ...] = tuple(DECAY_HEAT_DATA["lambdas"])

    # Thermal design inputs
    POWER_NOMINAL: float = 3.0e9          # [W]
    T_INLET: float = 565.0                # Heat sink temperature [K]
    COOLANT_RISE: float = 20.0            # Tc - T_INLET at rated power [K]
    FUEL_RISE: float = 315.0              # Tf - Tc at rated power [K]
    FUEL_TIME_CONSTANT: float = 3.0       # [s]
    COOLANT_TIME_CONSTANT: float = 11.0   # [s]
    NATURAL_CIRCULATION_FRACTION: float = 0.05
    SECONDARY_MIN_FRACTION: float = 0.05
    STEAM_DUMP_GAIN: float = 0.5

    # Pressurizer
    PZR_PRESSURE_NOMINAL: float = 15.5        # [MPa]
    PZR_REFERENCE_TEMPERATURE: float = 585.0  # [K]
    PZR_HEATER_GAIN: float = 1.0              # [MPa]
    PZR_SPRAY_GAIN: float = 1.5               # [MPa]
    PZR_TEMPERATURE_GAIN: float = 0.02        # [MPa/K]
    PZR_TAU: float = 20.0                     # [s]

    # Physical bounds of the state
    P_MIN: float = 1.0e-9
    P_MAX: float = 10.0
    TF_MIN: float = 250.0
    TF_MAX: float = 3120.0      # UO2 melting point
    TC_MIN: float = 250.0
    TC_MAX: float = 800.0
    PZR_PRESSURE_MIN: float = 0.1
    PZR_PRESSURE_MAX: float = 25.0

    # Timestep limits [s]
    DT_MIN: float = 1.0e-6
    DT_MAX_RK4: float = 0.1
    DT_MAX_EULER: float = 0.01

    def __post_init__(self):
        """Store group data as tuples so the parameter set stays hashable."""
        for name in GROUP_FIELDS:
            value = getattr(self, name)
            if isinstance(value, tuple):
                continue
            try:
                object.__setattr__(self, name, tuple(value))
            except TypeError as exc:
                from .guards import ValidationError
                raise ValidationError(
                    f"{name} must be a sequence, got {value!r}"
                ) from exc

    @property
    def BETA_TOTAL(self) -> float:
        """Total delayed neutron fraction."""
        return sum(self.BETA_I)

    @property
    def H_FUEL_COOLANT(self) -> float:
        """Fuel-to-coolant conductance [W/K]."""
        return self.POWER_NOMINAL / self.FUEL_RISE

    @property
    def H_COOLANT_SINK(self) -> float:
        """Coolant-to-secondary conductance with forced flow [W/K]."""
        return self.POWER_NOMINAL / self.COOLANT_RISE

    @property
    def FUEL_HEAT_CAPACITY(self) -> float:
        """Lumped fuel heat capacity [J/K]."""
        return self.H_FUEL_COOLANT * self.FUEL_TIME_CONSTANT

    @property
    def COOLANT_HEAT_CAPACITY(self) -> float:
        """Lumped primary coolant heat capacity [J/K]."""
        return self.H_COOLANT_SINK * self.COOLANT_TIME_CONSTANT

    @property
    def IODINE_YIELD(self) -> float:
        """Iodine production per unit power, normalized so I = 1 at rated power."""
        return self.IODINE_DECAY

    def xenon_rates(self) -> Tuple[float, float, float, float]:
        """
        Accelerated iodine/xenon rate constants.

        Returns:
            (iodine yield, λ_I, λ_Xe, σ_Xe·φ at rated power) [1/s]
        """
        a = self.XENON_ACCELERATION
        return (
            a * self.IODINE_YIELD,
            a * self.IODINE_DECAY,
            a * self.XENON_DECAY,
            a * self.XENON_BURNUP,
        )


DEFAULT_PARAMS = ReactorParams()

BETA_I = DEFAULT_PARAMS.BETA_I
BETA_TOTAL = DEFAULT_PARAMS.BETA_TOTAL
LAMBDA_I = DEFAULT_PARAMS.LAMBDA_I
LAMBDA_PROMPT = DEFAULT_PARAMS.LAMBDA_PROMPT
ALPHA_FUEL = DEFAULT_PARAMS.ALPHA_FUEL
ALPHA_COOLANT = DEFAULT_PARAMS.ALPHA_COOLANT
TF_REFERENCE = DEFAULT_PARAMS.TF_REFERENCE
TC_REFERENCE = DEFAULT_PARAMS.TC_REFERENCE
ROD_WORTH_MAX = DEFAULT_PARAMS.ROD_WORTH_MAX
SCRAM_REACTIVITY = DEFAULT_PARAMS.SCRAM_REACTIVITY
SCRAM_TAU = DEFAULT_PARAMS.SCRAM_TAU
SIGMA_F_MACRO = DEFAULT_PARAMS.SIGMA_F_MACRO


def create_params(**overrides) -> ReactorParams:
    """
    Factory function to create a validated parameter set.

    Args:
        **overrides: Field values replacing the defaults

    Returns:
        Frozen ReactorParams instance

    Raises:
        ValidationError: If a field is unknown or out of range
    """
    from .guards import ValidationError, validate_params

    try:
        params = replace(DEFAULT_PARAMS, **overrides)
    except TypeError as exc:
        raise ValidationError(f"Unknown reactor parameter: {exc}") from exc

    validate_params(params)
    return params


def rod_worth_fraction(position: float, steepness: float = 6.0) -> float:
    """
    Normalized S-shaped integral rod worth.

    A logistic curve centred at mid-travel, rescaled to be exactly 0 at
    the bottom and 1 at the top. Positions outside travel saturate.

    Args:
        position: Rod position (0 = inserted, 1 = withdrawn)
        steepness: Logistic slope

    Returns:
        Fraction of total rod worth withdrawn from the core
    """
    x = min(max(float(position), 0.0), 1.0)
    low = expit(-0.5 * steepness)
    high = expit(0.5 * steepness)
    return float((expit(steepness * (x - 0.5)) - low) / (high - low))


def rod_worth_curve(position: float, params: ReactorParams = DEFAULT_PARAMS) -> float:
    """
    Reactivity worth of the rods withdrawn to a given position.

    Monotonically increasing, bounded in [0, ROD_WORTH_MAX] and smooth,
    with the differential worth concentrated near mid-travel.

    Args:
        position: Rod position (0 = inserted, 1 = withdrawn)
        params: Reactor parameters

    Returns:
        Rod worth [Δk/k]
    """
    return params.ROD_WORTH_MAX * rod_worth_fraction(position, params.ROD_STEEPNESS)


def differential_rod_worth(position: float, params: ReactorParams = DEFAULT_PARAMS) -> float:
    """Slope of the rod worth curve [Δk/k per unit travel]."""
    k = params.ROD_STEEPNESS
    x = min(max(float(position), 0.0), 1.0)
    s = expit(k * (x - 0.5))
    span = expit(0.5 * k) - expit(-0.5 * k)
    return float(params.ROD_WORTH_MAX * k * s * (1.0 - s) / span)
