"""
State, Control and Record Types

Value types exchanged with the simulation core: the reactor state
snapshot, the operator control inputs, the reactivity breakdown and the
per-sample records produced by a simulation run.

The integrator works on a flat state vector with the layout

    [P, C1..C6, Tf, Tc, I, Xe, D1..D3, Ppzr, rho_scram]
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional, Tuple
import numpy as np

from .utils import delta_k_to_pcm

NUM_PRECURSOR_GROUPS = 6
NUM_DECAY_HEAT_GROUPS = 3

IDX_POWER = 0
IDX_PRECURSORS = slice(1, 1 + NUM_PRECURSOR_GROUPS)
IDX_FUEL_TEMP = 7
IDX_COOLANT_TEMP = 8
IDX_IODINE = 9
IDX_XENON = 10
IDX_DECAY_HEAT = slice(11, 11 + NUM_DECAY_HEAT_GROUPS)
IDX_PZR_PRESSURE = 14
IDX_SCRAM_RHO = 15
STATE_SIZE = 16


@dataclass(frozen=True)
class ReactorState:
    """
    Immutable snapshot of the reactor state.

    Attributes:
        t: Elapsed simulation time [s]
        power: Normalized thermal power (1.0 = rated)
        fuel_temp: Average fuel temperature [K]
        coolant_temp: Average coolant/moderator temperature [K]
        precursors: Delayed-neutron precursor concentrations (power units)
        iodine: I-135 concentration (1.0 = equilibrium at rated power)
        xenon: Xe-135 concentration (same normalization)
        decay_heat: Decay heat per group (fraction of rated power)
        pressurizer_pressure: Primary pressure [MPa]
        scram_rho: Reactivity inserted by the scram rods [Δk/k]
    """

    t: float
    power: float
    fuel_temp: float
    coolant_temp: float
    precursors: Tuple[float, ...]
    iodine: float
    xenon: float
    decay_heat: Tuple[float, ...]
    pressurizer_pressure: float
    scram_rho: float = 0.0

    @property
    def decay_heat_total(self) -> float:
        """Total decay heat as a fraction of rated power."""
        return float(sum(self.decay_heat))

    @property
    def thermal_power(self) -> float:
        """Heat deposited in the fuel, fission share plus decay heat."""
        return self.power + self.decay_heat_total

    def to_vector(self) -> np.ndarray:
        """Pack the state (without time) into the integrator vector."""
        y = np.empty(STATE_SIZE)
        y[IDX_POWER] = self.power
        y[IDX_PRECURSORS] = self.precursors
        y[IDX_FUEL_TEMP] = self.fuel_temp
        y[IDX_COOLANT_TEMP] = self.coolant_temp
        y[IDX_IODINE] = self.iodine
        y[IDX_XENON] = self.xenon
        y[IDX_DECAY_HEAT] = self.decay_heat
        y[IDX_PZR_PRESSURE] = self.pressurizer_pressure
        y[IDX_SCRAM_RHO] = self.scram_rho
        return y

    @classmethod
    def from_vector(cls, t: float, y: np.ndarray) -> "ReactorState":
        """Build a snapshot from an integrator vector."""
        return cls(
            t=float(t),
            power=float(y[IDX_POWER]),
            fuel_temp=float(y[IDX_FUEL_TEMP]),
            coolant_temp=float(y[IDX_COOLANT_TEMP]),
            precursors=tuple(float(c) for c in y[IDX_PRECURSORS]),
            iodine=float(y[IDX_IODINE]),
            xenon=float(y[IDX_XENON]),
            decay_heat=tuple(float(d) for d in y[IDX_DECAY_HEAT]),
            pressurizer_pressure=float(y[IDX_PZR_PRESSURE]),
            scram_rho=float(y[IDX_SCRAM_RHO]),
        )

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class ControlInputs:
    """
    Operator and protection-system demands applied during a step.

    Attributes:
        rod: Control rod position (0 = fully inserted, 1 = fully withdrawn)
        pump_on: Forced primary coolant flow
        scram: Scram rods released (sticky, reset by the caller)
        boron_conc: Soluble boron concentration [ppm]
        pressurizer_heater: Heater demand (0-1)
        pressurizer_spray: Spray demand (0-1)
        steam_dump: Steam dump demand (0-1)
        feedwater_flow: Feedwater demand (0-1, 1 = nominal heat removal)
    """

    rod: float = 0.0
    pump_on: bool = True
    scram: bool = False
    boron_conc: float = 0.0
    pressurizer_heater: float = 0.0
    pressurizer_spray: float = 0.0
    steam_dump: float = 0.0
    feedwater_flow: float = 1.0


@dataclass(frozen=True)
class ReactivityComponents:
    """Breakdown of core reactivity [Δk/k]."""

    rho_ext: float
    rho_doppler: float
    rho_mod: float
    rho_xenon: float
    rho_total: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def in_pcm(self) -> Dict[str, float]:
        """Components converted to pcm."""
        return {
            name: delta_k_to_pcm(value) for name, value in asdict(self).items()
        }


@dataclass(frozen=True)
class SimulationRecord:
    """One recorded sample of a simulation run."""

    t: float
    power: float
    fuel_temp: float
    coolant_temp: float
    xenon: float
    iodine: float
    decay_heat_total: float
    pressurizer_pressure: float
    scram_rho: float
    rod: float
    rho_ext: float
    rho_doppler: float
    rho_mod: float
    rho_xenon: float
    rho_total: float

    @classmethod
    def from_state(
        cls,
        state: ReactorState,
        rod: float,
        reactivity: ReactivityComponents
    ) -> "SimulationRecord":
        return cls(
            t=state.t,
            power=state.power,
            fuel_temp=state.fuel_temp,
            coolant_temp=state.coolant_temp,
            xenon=state.xenon,
            iodine=state.iodine,
            decay_heat_total=state.decay_heat_total,
            pressurizer_pressure=state.pressurizer_pressure,
            scram_rho=state.scram_rho,
            rod=rod,
            **reactivity.to_dict(),
        )

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Numerical settings of the integrator.

    Attributes:
        method: "rk4" (default) or "euler"
        max_substep: Largest internal substep [s]
        stability_limit: Ceiling on |λ_prompt·h| per substep; defaults to
            2.0 for RK4 and 0.5 for Euler
        max_substeps: Upper bound on substeps per outer step
        warn_on_clamp: Log clamped values at WARNING instead of DEBUG
        bounds_policy: "raise" on out-of-bounds state, or "clamp" to
            saturate it instead
    """

    method: str = "rk4"
    max_substep: float = 0.01
    stability_limit: Optional[float] = None
    max_substeps: int = 10000
    warn_on_clamp: bool = False
    bounds_policy: str = "raise"

    @property
    def effective_stability_limit(self) -> float:
        if self.stability_limit is not None:
            return self.stability_limit
        return 2.0 if self.method == "rk4" else 0.5
