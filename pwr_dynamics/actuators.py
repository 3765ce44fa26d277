"""
Actuator Slew Limiting

Rate-limited actuator positions for the calling layer. Operator demands
move the actuators at finite speed; the resulting positions are turned
into the ControlInputs handed to the integrator once per tick. Nothing in
the physics core depends on this module.
"""

from dataclasses import dataclass, replace

from .state import ControlInputs
from .guards import ValidationError, assert_finite, clamp, validate_controls


@dataclass(frozen=True)
class ActuatorRates:
    """Maximum actuator speeds [full travel or ppm per second]."""

    ROD: float = 0.05
    BORON: float = 5.0
    PRESSURIZER_HEATER: float = 0.2
    PRESSURIZER_SPRAY: float = 0.2
    STEAM_DUMP: float = 0.1
    FEEDWATER: float = 0.1


DEFAULT_RATES = ActuatorRates()


@dataclass(frozen=True)
class ActuatorState:
    """
    Current actuator positions.

    Continuous actuators slew toward the demand; the pump breaker follows
    it at once. The scram latch stays set until reset_scram is called.
    """

    rod: float = 0.0
    boron_conc: float = 0.0
    pressurizer_heater: float = 0.0
    pressurizer_spray: float = 0.0
    steam_dump: float = 0.0
    feedwater_flow: float = 1.0
    pump_on: bool = True
    scram: bool = False

    @classmethod
    def from_controls(cls, controls: ControlInputs) -> "ActuatorState":
        """Actuators already sitting at the given control inputs."""
        validate_controls(controls)
        return cls(
            rod=controls.rod,
            boron_conc=controls.boron_conc,
            pressurizer_heater=controls.pressurizer_heater,
            pressurizer_spray=controls.pressurizer_spray,
            steam_dump=controls.steam_dump,
            feedwater_flow=controls.feedwater_flow,
            pump_on=controls.pump_on,
            scram=controls.scram,
        )

    def update(
        self,
        demand: ControlInputs,
        dt: float,
        rates: ActuatorRates = DEFAULT_RATES
    ) -> "ActuatorState":
        """
        Move every actuator toward the demand for one tick.

        Args:
            demand: Requested control inputs
            dt: Tick length [s]
            rates: Actuator speed limits

        Returns:
            The new actuator state
        """
        validate_controls(demand)
        dt = assert_finite(dt, "dt")
        if dt <= 0.0:
            raise ValidationError(f"dt must be positive, got {dt}")

        def slew(current: float, target: float, rate: float) -> float:
            limit = rate * dt
            if abs(target - current) <= limit:
                return target
            return current + clamp(target - current, -limit, limit)

        return ActuatorState(
            rod=slew(self.rod, demand.rod, rates.ROD),
            boron_conc=slew(self.boron_conc, demand.boron_conc, rates.BORON),
            pressurizer_heater=slew(
                self.pressurizer_heater,
                demand.pressurizer_heater,
                rates.PRESSURIZER_HEATER,
            ),
            pressurizer_spray=slew(
                self.pressurizer_spray,
                demand.pressurizer_spray,
                rates.PRESSURIZER_SPRAY,
            ),
            steam_dump=slew(self.steam_dump, demand.steam_dump, rates.STEAM_DUMP),
            feedwater_flow=slew(
                self.feedwater_flow, demand.feedwater_flow, rates.FEEDWATER
            ),
            pump_on=demand.pump_on,
            scram=self.scram or demand.scram,
        )

    def reset_scram(self) -> "ActuatorState":
        return replace(self, scram=False)

    def to_controls(self) -> ControlInputs:
        """Control inputs for the integrator."""
        return ControlInputs(
            rod=self.rod,
            pump_on=self.pump_on,
            scram=self.scram,
            boron_conc=self.boron_conc,
            pressurizer_heater=self.pressurizer_heater,
            pressurizer_spray=self.pressurizer_spray,
            steam_dump=self.steam_dump,
            feedwater_flow=self.feedwater_flow,
        )
