"""
Benchmark Transients

A fixed catalogue of canonical transients run end-to-end through the
integrator. Each returns a labeled time series and a pass/fail verdict
against the expected envelope of the transient:

    - steady hold:    critical at P=0.5, no control change
    - rod insertion:  step insertion from rated power
    - rod withdrawal: rod 0.3 -> 0.5 over 60 s from critical
    - scram:          trip from rated power
    - pump trip:      loss of forced flow at rated power
    - rod ramp:       continuous slow withdrawal from P=0.5
    - startup:        cold shutdown to supercritical
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional
import json
import logging

import numpy as np

from .params import ReactorParams, DEFAULT_PARAMS, differential_rod_worth
from .state import ControlInputs, SimulationConfig, SimulationRecord
from .integrator import ReactorModel, ControlSchedule
from .initial_conditions import (
    InitialCondition,
    create_cold_shutdown_state,
    create_steady_state,
    create_critical_steady_state,
    compute_critical_rod_position,
    compute_critical_power,
)
from .guards import BoundsError
from .utils import (
    calculate_doubling_time,
    calculate_period,
    delta_k_to_dollars,
    delta_k_to_pcm,
    format_scientific,
    interpolate_linear,
    kelvin_to_celsius,
    measured_period,
)

logger = logging.getLogger(__name__)

DEFAULT_DT = 0.05  # [s]


@dataclass
class BenchmarkResult:
    """
    Outcome of one benchmark transient.

    Attributes:
        name: Short identifier
        description: What the transient exercises
        passed: True if every check passed
        checks: Individual pass/fail checks
        metrics: Scalar figures of merit
        records: Recorded time series
    """

    name: str
    description: str
    passed: bool
    checks: Dict[str, bool]
    metrics: Dict[str, Any]
    records: List[SimulationRecord] = field(default_factory=list, repr=False)

    def series(self, name: str) -> np.ndarray:
        """Time series of one record field."""
        return np.array([getattr(r, name) for r in self.records])

    def to_records(self) -> List[Dict[str, float]]:
        """Time series as a list of rows."""
        return [r.to_dict() for r in self.records]

    def to_dict(self, include_records: bool = True) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "description": self.description,
            "passed": self.passed,
            "checks": dict(self.checks),
            "metrics": dict(self.metrics),
        }
        if include_records:
            result["records"] = self.to_records()
        return result

    def to_json(
        self,
        filepath: Optional[str] = None,
        include_records: bool = True
    ) -> str:
        """
        Export the result to JSON.

        Args:
            filepath: Optional file path to save JSON
            include_records: Include the full time series

        Returns:
            JSON string
        """
        json_str = json.dumps(
            self.to_dict(include_records), indent=2, default=_json_default
        )

        if filepath:
            with open(filepath, 'w') as f:
                f.write(json_str)

        return json_str


def _json_default(value):
    if isinstance(value, (np.bool_, np.integer, np.floating)):
        return value.item()
    return str(value)


def _reached(t: float, instant: float, dt: float) -> bool:
    """True once a step starting at t begins at or after instant."""
    return t >= instant - 0.5 * dt


def _simulate(
    name: str,
    description: str,
    initial: InitialCondition,
    controls: ControlSchedule,
    duration: float,
    dt: float,
    params: ReactorParams,
    config: Optional[SimulationConfig],
    verdict: Callable[[BenchmarkResult], None]
) -> BenchmarkResult:
    """Run a transient and evaluate its verdict."""
    model = ReactorModel(initial.state, params, config)
    result = BenchmarkResult(name, description, False, {}, {})

    try:
        result.records = model.run(duration, dt, controls)
    except BoundsError as exc:
        logger.error("Benchmark %s aborted: %s", name, exc)
        result.checks["completed"] = False
        result.metrics["error"] = str(exc)
        result.metrics["aborted_at"] = model.time
        return result

    result.checks["completed"] = True
    verdict(result)
    result.passed = all(bool(v) for v in result.checks.values())
    logger.info("Benchmark %s: %s", name, "PASS" if result.passed else "FAIL")
    return result


def run_steady_hold(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None,
    power: float = 0.5,
    duration: float = 60.0,
    tolerance: float = 0.01
) -> BenchmarkResult:
    """Critical state with equilibrium xenon held without control changes."""
    initial = create_critical_steady_state(power, params, with_xenon=True)
    controls = ControlInputs(rod=initial.rod_position)

    def verdict(result):
        deviation = np.abs(result.series("power") - power) / power
        result.checks["final_within_tolerance"] = deviation[-1] < tolerance
        result.checks["max_within_tolerance"] = deviation.max() < tolerance
        result.metrics.update(
            rod_position=initial.rod_position,
            final_power=result.records[-1].power,
            max_relative_deviation=float(deviation.max()),
        )

    return _simulate(
        "steady_hold",
        f"Hold P={power} for {duration:.0f} s with unchanged controls",
        initial, controls, duration, dt, params, config, verdict,
    )


def run_rod_insertion(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None,
    power: float = 1.0,
    insertion: float = 0.1,
    step_time: float = 2.0,
    duration: float = 30.0
) -> BenchmarkResult:
    """Step insertion of the control rods from a critical state."""
    initial = create_critical_steady_state(power, params, with_xenon=True)
    before = ControlInputs(rod=initial.rod_position)
    after = replace(before, rod=max(initial.rod_position - insertion, 0.0))

    def schedule(t):
        return after if _reached(t, step_time, dt) else before

    def verdict(result):
        t = result.series("t")
        p = result.series("power")
        rho_ext = result.series("rho_ext")
        p_prompt = interpolate_linear(step_time + 0.2, t, p)
        later = t > step_time + 0.5 * dt

        result.checks["prompt_drop"] = p_prompt < 0.95 * power
        result.checks["stays_below_initial"] = bool(np.all(p[later] < power))
        result.checks["final_below_initial"] = p[-1] < power
        result.metrics.update(
            reactivity_step=float(rho_ext[-1] - rho_ext[0]),
            power_after_prompt_drop=p_prompt,
            final_power=float(p[-1]),
        )

    return _simulate(
        "rod_insertion",
        f"Insert rods by {insertion} at t={step_time} s from P={power}",
        initial, schedule, duration, dt, params, config, verdict,
    )


def run_rod_withdrawal(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None,
    rod_start: float = 0.3,
    rod_end: float = 0.5,
    ramp_time: float = 60.0
) -> BenchmarkResult:
    """Withdraw the rods from a critical position over a ramp."""
    power = compute_critical_power(rod_start, params, with_xenon=False)
    initial = create_steady_state(
        power, params, ControlInputs(rod=rod_start), with_xenon=False
    )

    def schedule(t):
        fraction = min((t + dt) / ramp_time, 1.0)
        return ControlInputs(rod=rod_start + (rod_end - rod_start) * fraction)

    def verdict(result):
        p = result.series("power")
        rho_ext = result.series("rho_ext")
        rho_total = result.series("rho_total")
        inserted = rho_ext[-1] - rho_ext[0]

        result.checks["power_increased"] = p[-1] > p[0]
        result.checks["feedback_compensates"] = (
            abs(rho_total[-1]) < 0.25 * abs(inserted)
        )
        result.checks["below_prompt_critical"] = rho_total.max() < params.BETA_TOTAL
        result.metrics.update(
            initial_power=float(p[0]),
            final_power=float(p[-1]),
            inserted_reactivity=float(inserted),
            inserted_reactivity_pcm=delta_k_to_pcm(float(inserted)),
            final_reactivity=float(rho_total[-1]),
            max_reactivity_dollars=delta_k_to_dollars(
                float(rho_total.max()), params.BETA_TOTAL
            ),
        )

    return _simulate(
        "rod_withdrawal",
        f"Withdraw rods {rod_start} -> {rod_end} over {ramp_time:.0f} s",
        initial, schedule, ramp_time, dt, params, config, verdict,
    )


def run_scram(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None,
    power: float = 1.0,
    scram_time: float = 1.0,
    duration: float = 60.0
) -> BenchmarkResult:
    """Scram from a critical state; power collapses to the decay heat level."""
    initial = create_critical_steady_state(power, params, with_xenon=True)
    running = ControlInputs(rod=initial.rod_position)
    tripped = replace(running, scram=True)
    window = 20.0 * params.SCRAM_TAU

    def schedule(t):
        return tripped if _reached(t, scram_time, dt) else running

    def verdict(result):
        t = result.series("t")
        p = result.series("power")
        scram_rho = result.series("scram_rho")
        after = t >= scram_time
        below = np.nonzero(after & (p < 0.05))[0]
        time_to_5pct = float(t[below[0]] - scram_time) if len(below) else float("inf")
        decay_heat = result.records[-1].decay_heat_total

        result.checks["power_below_5pct_in_window"] = time_to_5pct <= window
        result.checks["scram_reactivity_monotonic"] = bool(
            np.all(np.diff(scram_rho[after]) <= 1e-15)
        )
        result.checks["power_keeps_falling"] = (
            p[-1] < interpolate_linear(scram_time + window, t, p)
        )
        result.checks["decay_heat_dominates"] = decay_heat > p[-1]
        result.metrics.update(
            time_to_5pct=time_to_5pct,
            final_power=float(p[-1]),
            final_decay_heat=decay_heat,
            final_scram_reactivity=float(scram_rho[-1]),
        )

    return _simulate(
        "scram",
        f"Scram at t={scram_time} s from P={power}",
        initial, schedule, duration, dt, params, config, verdict,
    )


def run_pump_trip(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None,
    power: float = 1.0,
    trip_time: float = 5.0,
    observe: float = 30.0,
    duration: float = 65.0
) -> BenchmarkResult:
    """Loss of forced coolant flow at power without a scram."""
    initial = create_critical_steady_state(power, params, with_xenon=True)
    running = ControlInputs(rod=initial.rod_position)
    tripped = replace(running, pump_on=False)

    def schedule(t):
        return tripped if _reached(t, trip_time, dt) else running

    def verdict(result):
        t = result.series("t")
        tc = result.series("coolant_temp")
        window = (t >= trip_time) & (t <= trip_time + observe + 0.5 * dt)
        rise = interpolate_linear(trip_time + observe, t, tc) - interpolate_linear(
            trip_time, t, tc
        )

        result.checks["coolant_rises_monotonically"] = bool(
            np.all(np.diff(tc[window]) >= -1e-9)
        )
        result.checks["coolant_heats_up"] = rise > 1.0
        result.metrics.update(
            coolant_rise=rise,
            max_coolant_temp=float(tc.max()),
            max_coolant_temp_celsius=kelvin_to_celsius(float(tc.max())),
            final_power=result.records[-1].power,
        )

    return _simulate(
        "pump_trip",
        f"Trip the reactor coolant pumps at t={trip_time} s from P={power}",
        initial, schedule, duration, dt, params, config, verdict,
    )


def run_rod_ramp(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None,
    power: float = 0.5,
    rate: float = 0.002,
    duration: float = 60.0
) -> BenchmarkResult:
    """Continuous slow rod withdrawal from a critical state."""
    initial = create_critical_steady_state(power, params, with_xenon=True)
    rod_start = initial.rod_position

    def schedule(t):
        return ControlInputs(rod=min(rod_start + rate * (t + dt), 1.0))

    def verdict(result):
        p = result.series("power")
        rho_total = result.series("rho_total")

        result.checks["power_rises"] = p[-1] > p[0]
        result.checks["reactivity_below_half_beta"] = (
            rho_total.max() < 0.5 * params.BETA_TOTAL
        )
        result.metrics.update(
            reactivity_ramp_rate=rate * differential_rod_worth(rod_start, params),
            final_power=float(p[-1]),
            max_reactivity=float(rho_total.max()),
        )

    return _simulate(
        "rod_ramp",
        f"Withdraw rods at {rate}/s for {duration:.0f} s from P={power}",
        initial, schedule, duration, dt, params, config, verdict,
    )


def run_startup(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None,
    target_reactivity: float = 0.002,
    ramp_time: float = 60.0,
    hold_time: float = 120.0
) -> BenchmarkResult:
    """Approach to criticality from cold shutdown."""
    initial = create_cold_shutdown_state(params)
    rod_target = compute_critical_rod_position(
        initial.state, params, ControlInputs(), target_reactivity
    )

    def schedule(t):
        return ControlInputs(rod=rod_target * min((t + dt) / ramp_time, 1.0))

    def verdict(result):
        t = result.series("t")
        p = result.series("power")
        rho_total = result.series("rho_total")
        tail = t >= ramp_time + 0.5 * hold_time
        period = measured_period(t[tail], p[tail])

        result.checks["reaches_criticality"] = rho_total[0] < 0.0 < rho_total[-1]
        result.checks["power_grows_decade"] = p[-1] > 10.0 * p[0]
        result.checks["below_prompt_critical"] = rho_total.max() < params.BETA_TOTAL
        result.metrics.update(
            rod_target=rod_target,
            final_power=float(p[-1]),
            measured_period=period,
            doubling_time=calculate_doubling_time(period),
            expected_period=calculate_period(
                target_reactivity, params.BETA_TOTAL, params.LAMBDA_PROMPT
            ),
        )

    return _simulate(
        "startup",
        f"Withdraw rods from cold shutdown to +{target_reactivity} dk/k, then hold",
        initial, schedule, ramp_time + hold_time, dt, params, config, verdict,
    )


BENCHMARKS = {
    "steady_hold": run_steady_hold,
    "rod_insertion": run_rod_insertion,
    "rod_withdrawal": run_rod_withdrawal,
    "scram": run_scram,
    "pump_trip": run_pump_trip,
    "rod_ramp": run_rod_ramp,
    "startup": run_startup,
}


def run_all_benchmarks(
    params: ReactorParams = DEFAULT_PARAMS,
    dt: float = DEFAULT_DT,
    config: Optional[SimulationConfig] = None
) -> List[BenchmarkResult]:
    """Run the whole catalogue in a fixed order."""
    return [run(params, dt, config) for run in BENCHMARKS.values()]


def format_benchmark_json(
    result: BenchmarkResult,
    include_records: bool = False
) -> str:
    """JSON document of a single benchmark result."""
    return result.to_json(include_records=include_records)


def format_all_benchmarks_json(
    results: List[BenchmarkResult],
    include_records: bool = False
) -> str:
    """JSON document summarizing a set of benchmark results."""
    passed = sum(1 for r in results if r.passed)
    document = {
        "summary": {
            "total": len(results),
            "passed": passed,
            "failed": len(results) - passed,
        },
        "results": [r.to_dict(include_records) for r in results],
    }
    return json.dumps(document, indent=2, default=_json_default)


def print_benchmark_summary(results: List[BenchmarkResult]):
    """Print formatted summary of benchmark results."""
    print("=" * 70)
    print("           PWR DYNAMICS BENCHMARK SUMMARY")
    print("=" * 70)

    for result in results:
        status = "PASS" if result.passed else "FAIL"
        print(f"\n  [{status}] {result.name:<16} {result.description}")
        print("-" * 70)
        for check, ok in result.checks.items():
            print(f"    {check:<34} {'ok' if ok else 'FAILED':>10}")
        for metric, value in result.metrics.items():
            if isinstance(value, float) and 0.0 < abs(value) < 1e-3:
                print(f"    {metric:<34} {format_scientific(value):>14}")
            elif isinstance(value, float):
                print(f"    {metric:<34} {value:>14.6g}")
            else:
                print(f"    {metric:<34} {value!s:>14}")

    passed = sum(1 for r in results if r.passed)
    print("\n" + "=" * 70)
    print(f"  {passed}/{len(results)} benchmarks passed")
    print("=" * 70)
