"""
Input and State Guards

Pure validation functions for timesteps, control inputs, parameters and
reactor states, plus saturating clamps for callers that prefer graceful
degradation over hard failure.

Two error kinds are raised:
    - ValidationError: an input is outside its legal domain before any
      computation takes place.
    - BoundsError: a computed state is non-finite or outside physical
      bounds after integration.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, NamedTuple, Optional, Tuple, Type
import logging
import math

import numpy as np

from .params import ReactorParams, DEFAULT_PARAMS
from .state import (
    ReactorState,
    ControlInputs,
    SimulationConfig,
    NUM_PRECURSOR_GROUPS,
    NUM_DECAY_HEAT_GROUPS,
)

logger = logging.getLogger(__name__)

INTEGRATION_METHODS = ("rk4", "euler")
BOUNDS_POLICIES = ("raise", "clamp")


class ReactorError(Exception):
    """Base class of all reactor model errors."""


class ValidationError(ReactorError, ValueError):
    """An input is outside its legal domain."""


class BoundsError(ReactorError, ArithmeticError):
    """A computed state is non-finite or outside physical bounds."""


class ClampResult(NamedTuple):
    """Outcome of a saturating clamp."""

    value: float
    clamped: bool
    original: float
    bound: Optional[str]


@dataclass
class ClampReport:
    """Fields saturated by clamp_state, keyed by field name."""

    clamped: Dict[str, ClampResult] = field(default_factory=dict)

    @property
    def any_clamped(self) -> bool:
        return bool(self.clamped)


def assert_finite(value, name: str, error_cls: Type[ReactorError] = ValidationError) -> float:
    """
    Check that a value is a finite real number.

    Args:
        value: Value to check
        name: Name used in the error message
        error_cls: Exception raised on failure

    Returns:
        The value as float
    """
    if isinstance(value, (bool, np.bool_)):
        raise error_cls(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise error_cls(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise error_cls(f"{name} must be finite, got {number}")
    return number


def assert_in_range(
    value,
    low: float,
    high: float,
    name: str,
    error_cls: Type[ReactorError] = ValidationError
) -> float:
    """Check that a value is finite and within [low, high]."""
    number = assert_finite(value, name, error_cls)
    if not low <= number <= high:
        raise error_cls(f"{name} must be in [{low}, {high}], got {number}")
    return number


def _assert_positive(value, name: str) -> float:
    number = assert_finite(value, name)
    if number <= 0.0:
        raise ValidationError(f"{name} must be positive, got {number}")
    return number


def validate_rod_position(rod) -> float:
    """Rod position must lie in [0, 1] inclusive."""
    return assert_in_range(rod, 0.0, 1.0, "rod position")


def validate_timestep(
    dt,
    method: str = "rk4",
    params: ReactorParams = DEFAULT_PARAMS
) -> float:
    """
    Check that dt is positive and below the stable ceiling of the method.

    Args:
        dt: Timestep [s]
        method: Integration method ("rk4" or "euler")
        params: Reactor parameters holding the timestep limits

    Returns:
        The timestep as float
    """
    if method not in INTEGRATION_METHODS:
        raise ValidationError(f"Unknown integration method: {method!r}")
    dt_max = params.DT_MAX_RK4 if method == "rk4" else params.DT_MAX_EULER
    dt = assert_finite(dt, "dt")
    if dt <= 0.0:
        raise ValidationError(f"dt must be positive, got {dt}")
    if dt < params.DT_MIN:
        raise ValidationError(f"dt must be at least {params.DT_MIN} s, got {dt}")
    if dt > dt_max:
        raise ValidationError(
            f"dt must not exceed {dt_max} s for {method}, got {dt}"
        )
    return dt


def validate_controls(
    controls: ControlInputs,
    params: ReactorParams = DEFAULT_PARAMS
) -> ControlInputs:
    """Check every field of the control inputs against its physical range."""
    if not isinstance(controls, ControlInputs):
        raise ValidationError(
            f"controls must be ControlInputs, got {type(controls).__name__}"
        )

    validate_rod_position(controls.rod)
    for name in ("pump_on", "scram"):
        if not isinstance(getattr(controls, name), (bool, np.bool_)):
            raise ValidationError(f"{name} must be a boolean")

    assert_in_range(controls.boron_conc, 0.0, params.BORON_MAX, "boron_conc")
    for name in (
        "pressurizer_heater",
        "pressurizer_spray",
        "steam_dump",
        "feedwater_flow",
    ):
        assert_in_range(getattr(controls, name), 0.0, 1.0, name)

    return controls


def validate_state_finite(
    state: ReactorState,
    error_cls: Type[ReactorError] = BoundsError
) -> ReactorState:
    """Check that no field of the state is NaN or infinite."""
    for f in fields(state):
        value = getattr(state, f.name)
        if isinstance(value, tuple):
            for i, item in enumerate(value):
                assert_finite(item, f"{f.name}[{i}]", error_cls)
        else:
            assert_finite(value, f.name, error_cls)
    return state


def check_state_bounds(
    state: ReactorState,
    params: ReactorParams = DEFAULT_PARAMS,
    error_cls: Type[ReactorError] = BoundsError
) -> ReactorState:
    """
    Check that the state lies within its physical bounds.

    Power must stay within [P_MIN, P_MAX], temperatures and pressure
    within their limits, and concentrations non-negative.
    """
    assert_in_range(state.power, params.P_MIN, params.P_MAX, "power", error_cls)
    assert_in_range(
        state.fuel_temp, params.TF_MIN, params.TF_MAX, "fuel_temp", error_cls
    )
    assert_in_range(
        state.coolant_temp, params.TC_MIN, params.TC_MAX, "coolant_temp", error_cls
    )
    assert_in_range(
        state.pressurizer_pressure,
        params.PZR_PRESSURE_MIN,
        params.PZR_PRESSURE_MAX,
        "pressurizer_pressure",
        error_cls,
    )

    concentrations = [("iodine", state.iodine), ("xenon", state.xenon)]
    concentrations += [(f"precursors[{i}]", c) for i, c in enumerate(state.precursors)]
    concentrations += [(f"decay_heat[{i}]", d) for i, d in enumerate(state.decay_heat)]
    for name, value in concentrations:
        if value < 0.0:
            raise error_cls(f"{name} must be non-negative, got {value}")

    return state


def validate_initial_state(
    state: ReactorState,
    params: ReactorParams = DEFAULT_PARAMS
) -> ReactorState:
    """Structural sanity of a state handed to the model."""
    if not isinstance(state, ReactorState):
        raise ValidationError(
            f"initial state must be ReactorState, got {type(state).__name__}"
        )
    if len(state.precursors) != NUM_PRECURSOR_GROUPS:
        raise ValidationError(
            f"expected {NUM_PRECURSOR_GROUPS} precursor groups, "
            f"got {len(state.precursors)}"
        )
    if len(state.decay_heat) != NUM_DECAY_HEAT_GROUPS:
        raise ValidationError(
            f"expected {NUM_DECAY_HEAT_GROUPS} decay heat groups, "
            f"got {len(state.decay_heat)}"
        )
    validate_state_finite(state, ValidationError)
    if state.t < 0.0:
        raise ValidationError(f"t must be non-negative, got {state.t}")
    check_state_bounds(state, params, ValidationError)
    if state.scram_rho > 0.0 or state.scram_rho < params.SCRAM_REACTIVITY:
        raise ValidationError(
            f"scram_rho must be in [{params.SCRAM_REACTIVITY}, 0], "
            f"got {state.scram_rho}"
        )
    return state


def validate_params(params: ReactorParams) -> ReactorParams:
    """Structural and range checks of a parameter set."""
    if not isinstance(params, ReactorParams):
        raise ValidationError(
            f"params must be ReactorParams, got {type(params).__name__}"
        )

    if len(params.BETA_I) != NUM_PRECURSOR_GROUPS:
        raise ValidationError(f"BETA_I must have {NUM_PRECURSOR_GROUPS} groups")
    if len(params.LAMBDA_I) != NUM_PRECURSOR_GROUPS:
        raise ValidationError(f"LAMBDA_I must have {NUM_PRECURSOR_GROUPS} groups")
    for i, beta in enumerate(params.BETA_I):
        if assert_finite(beta, f"BETA_I[{i}]") < 0.0:
            raise ValidationError(f"BETA_I[{i}] must be non-negative, got {beta}")
    for i, lam in enumerate(params.LAMBDA_I):
        _assert_positive(lam, f"LAMBDA_I[{i}]")
    assert_in_range(params.BETA_TOTAL, 1e-6, 0.1, "BETA_TOTAL")

    if len(params.DECAY_HEAT_FRACTIONS) != NUM_DECAY_HEAT_GROUPS:
        raise ValidationError(
            f"DECAY_HEAT_FRACTIONS must have {NUM_DECAY_HEAT_GROUPS} groups"
        )
    if len(params.DECAY_HEAT_LAMBDAS) != NUM_DECAY_HEAT_GROUPS:
        raise ValidationError(
            f"DECAY_HEAT_LAMBDAS must have {NUM_DECAY_HEAT_GROUPS} groups"
        )
    for i, frac in enumerate(params.DECAY_HEAT_FRACTIONS):
        assert_in_range(frac, 0.0, 1.0, f"DECAY_HEAT_FRACTIONS[{i}]")
    for i, lam in enumerate(params.DECAY_HEAT_LAMBDAS):
        _assert_positive(lam, f"DECAY_HEAT_LAMBDAS[{i}]")
    if sum(params.DECAY_HEAT_FRACTIONS) >= 1.0:
        raise ValidationError("decay heat fractions must sum to less than 1")

    for name in (
        "LAMBDA_PROMPT",
        "ROD_WORTH_MAX",
        "ROD_STEEPNESS",
        "SCRAM_TAU",
        "IODINE_DECAY",
        "XENON_DECAY",
        "XENON_ACCELERATION",
        "POWER_NOMINAL",
        "COOLANT_RISE",
        "FUEL_RISE",
        "FUEL_TIME_CONSTANT",
        "COOLANT_TIME_CONSTANT",
        "PZR_TAU",
        "P_MIN",
        "DT_MIN",
        "DT_MAX_RK4",
        "DT_MAX_EULER",
    ):
        _assert_positive(getattr(params, name), name)

    for name in (
        "ALPHA_FUEL",
        "ALPHA_COOLANT",
        "TF_REFERENCE",
        "TC_REFERENCE",
        "T_INLET",
        "PZR_PRESSURE_NOMINAL",
        "PZR_REFERENCE_TEMPERATURE",
    ):
        assert_finite(getattr(params, name), name)

    for name in (
        "BORON_WORTH",
        "BORON_MAX",
        "SIGMA_F_MACRO",
        "XENON_BURNUP",
        "STEAM_DUMP_GAIN",
        "PZR_HEATER_GAIN",
        "PZR_SPRAY_GAIN",
        "PZR_TEMPERATURE_GAIN",
    ):
        if assert_finite(getattr(params, name), name) < 0.0:
            raise ValidationError(f"{name} must be non-negative")

    assert_in_range(params.ROD_REFERENCE, 0.0, 1.0, "ROD_REFERENCE")
    assert_in_range(
        params.NATURAL_CIRCULATION_FRACTION, 0.0, 1.0, "NATURAL_CIRCULATION_FRACTION"
    )
    assert_in_range(params.SECONDARY_MIN_FRACTION, 0.0, 1.0, "SECONDARY_MIN_FRACTION")
    if assert_finite(params.SCRAM_REACTIVITY, "SCRAM_REACTIVITY") > 0.0:
        raise ValidationError("SCRAM_REACTIVITY must be negative or zero")

    for low, high in (
        ("P_MIN", "P_MAX"),
        ("TF_MIN", "TF_MAX"),
        ("TC_MIN", "TC_MAX"),
        ("PZR_PRESSURE_MIN", "PZR_PRESSURE_MAX"),
        ("DT_MIN", "DT_MAX_EULER"),
        ("DT_MIN", "DT_MAX_RK4"),
    ):
        if assert_finite(getattr(params, low), low) >= assert_finite(
            getattr(params, high), high
        ):
            raise ValidationError(f"{low} must be below {high}")

    return params


def validate_config(config: SimulationConfig) -> SimulationConfig:
    """Check the integrator settings."""
    if config.method not in INTEGRATION_METHODS:
        raise ValidationError(f"Unknown integration method: {config.method!r}")
    if config.bounds_policy not in BOUNDS_POLICIES:
        raise ValidationError(f"Unknown bounds policy: {config.bounds_policy!r}")
    _assert_positive(config.max_substep, "max_substep")
    _assert_positive(config.effective_stability_limit, "stability_limit")
    if not isinstance(config.max_substeps, int) or config.max_substeps < 1:
        raise ValidationError(
            f"max_substeps must be a positive integer, got {config.max_substeps!r}"
        )
    return config


def clamp(value: float, low: float, high: float) -> float:
    """Saturate a value into [low, high]."""
    return min(max(value, low), high)


def clamp_with_info(value: float, low: float, high: float) -> ClampResult:
    """
    Saturate a value into [low, high] and report what happened.

    Returns:
        ClampResult with the clamped value, whether clamping occurred,
        the original value and which bound ("min" or "max") was applied
    """
    if value < low:
        return ClampResult(low, True, value, "min")
    if value > high:
        return ClampResult(high, True, value, "max")
    return ClampResult(value, False, value, None)


def clamp_state(
    state: ReactorState,
    params: ReactorParams = DEFAULT_PARAMS,
    warn: bool = False
) -> Tuple[ReactorState, ClampReport]:
    """
    Saturate every state field into its physical bounds.

    Non-finite values are not clamped; check them with
    validate_state_finite first.

    Args:
        state: State to clamp
        params: Reactor parameters holding the bounds
        warn: Log clamped fields at WARNING instead of DEBUG

    Returns:
        (clamped state, report of the saturated fields)
    """
    report = ClampReport()
    inf = float("inf")

    def saturate(name: str, value: float, low: float, high: float) -> float:
        result = clamp_with_info(value, low, high)
        if result.clamped:
            report.clamped[name] = result
        return result.value

    updates = {
        "power": saturate("power", state.power, params.P_MIN, params.P_MAX),
        "fuel_temp": saturate(
            "fuel_temp", state.fuel_temp, params.TF_MIN, params.TF_MAX
        ),
        "coolant_temp": saturate(
            "coolant_temp", state.coolant_temp, params.TC_MIN, params.TC_MAX
        ),
        "pressurizer_pressure": saturate(
            "pressurizer_pressure",
            state.pressurizer_pressure,
            params.PZR_PRESSURE_MIN,
            params.PZR_PRESSURE_MAX,
        ),
        "iodine": saturate("iodine", state.iodine, 0.0, inf),
        "xenon": saturate("xenon", state.xenon, 0.0, inf),
        "precursors": tuple(
            saturate(f"precursors[{i}]", c, 0.0, inf)
            for i, c in enumerate(state.precursors)
        ),
        "decay_heat": tuple(
            saturate(f"decay_heat[{i}]", d, 0.0, inf)
            for i, d in enumerate(state.decay_heat)
        ),
    }

    if report.any_clamped:
        level = logging.WARNING if warn else logging.DEBUG
        for name, result in report.clamped.items():
            logger.log(
                level,
                "t=%.3f s: clamped %s from %g to %g (%s bound)",
                state.t, name, result.original, result.value, result.bound,
            )

    return replace(state, **updates), report
