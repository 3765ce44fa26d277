"""
Tests for the initial-condition solvers.
"""

import unittest

import numpy as np

from pwr_dynamics.params import DEFAULT_PARAMS
from pwr_dynamics.state import ControlInputs
from pwr_dynamics.guards import ValidationError
from pwr_dynamics.reactivity import compute_reactivity
from pwr_dynamics.dynamics import compute_derivatives
from pwr_dynamics.initial_conditions import (
    InitialCondition,
    create_cold_shutdown_state,
    create_steady_state,
    create_critical_steady_state,
    compute_critical_rod_position,
    compute_critical_power,
)


class TestColdShutdown(unittest.TestCase):
    """Test the canonical off state."""

    def test_values(self):
        """Test fields of the cold shutdown state."""
        state, rod = create_cold_shutdown_state()
        self.assertEqual(rod, 0.0)
        self.assertEqual(state.t, 0.0)
        self.assertEqual(state.power, DEFAULT_PARAMS.P_MIN)
        self.assertEqual(state.fuel_temp, DEFAULT_PARAMS.T_INLET)
        self.assertEqual(state.coolant_temp, DEFAULT_PARAMS.T_INLET)
        self.assertEqual(state.precursors, (0.0,) * 6)
        self.assertEqual(state.decay_heat, (0.0,) * 3)
        self.assertEqual(state.iodine, 0.0)
        self.assertEqual(state.xenon, 0.0)
        self.assertEqual(state.scram_rho, 0.0)

    def test_deeply_subcritical(self):
        """Test the off state is subcritical with rods in."""
        state, rod = create_cold_shutdown_state()
        rho = compute_reactivity(state, ControlInputs(rod=rod))
        self.assertLess(rho.rho_total, 0.0)


class TestSteadyState(unittest.TestCase):
    """Test the equilibrium back-solve."""

    def test_rated_temperatures(self):
        """Test the design temperatures at rated power."""
        state, _ = create_steady_state(1.0)
        self.assertAlmostEqual(state.coolant_temp, 585.0, places=6)
        self.assertAlmostEqual(state.fuel_temp, 900.0, places=6)

    def test_precursors(self):
        """Test precursor equilibrium C_i = β_i P / (Λ λ_i)."""
        state, _ = create_steady_state(0.5)
        expected = [
            beta * 0.5 / (DEFAULT_PARAMS.LAMBDA_PROMPT * lam)
            for beta, lam in zip(DEFAULT_PARAMS.BETA_I, DEFAULT_PARAMS.LAMBDA_I)
        ]
        np.testing.assert_allclose(state.precursors, expected, rtol=1e-12)

    def test_xenon(self):
        """Test equilibrium iodine and xenon."""
        state, _ = create_steady_state(1.0)
        self.assertAlmostEqual(state.iodine, 1.0, places=9)
        self.assertGreater(state.xenon, 0.0)

        state, _ = create_steady_state(1.0, with_xenon=False)
        self.assertEqual(state.iodine, 0.0)
        self.assertEqual(state.xenon, 0.0)

    def test_only_power_derivative_nonzero(self):
        """Test every derivative but dP/dt vanishes."""
        state, rod = create_steady_state(0.7)
        derivs = compute_derivatives(state, ControlInputs(rod=rod))
        np.testing.assert_allclose(derivs[1:], 0.0, atol=1e-6)

    def test_returns_controls_rod(self):
        """Test the rod position of the given controls is carried through."""
        result = create_steady_state(0.5, controls=ControlInputs(rod=0.3))
        self.assertIsInstance(result, InitialCondition)
        self.assertEqual(result.rod_position, 0.3)

    def test_invalid_power(self):
        """Test out-of-range target powers are rejected."""
        with self.assertRaises(ValidationError):
            create_steady_state(-0.1)
        with self.assertRaises(ValidationError):
            create_steady_state(11.0)
        with self.assertRaises(ValidationError):
            create_steady_state(float("nan"))

    def test_no_forced_flow(self):
        """Test rated power without pumps has no bounded equilibrium."""
        with self.assertRaises(ValidationError):
            create_steady_state(1.0, controls=ControlInputs(pump_on=False))

    def test_zero_power(self):
        """Test zero power is floored to the source level."""
        state, _ = create_steady_state(0.0)
        self.assertEqual(state.power, DEFAULT_PARAMS.P_MIN)


class TestCriticalRodPosition(unittest.TestCase):
    """Test the rod position search."""

    def test_round_trip(self):
        """Test the solved rod position gives zero reactivity."""
        for power in (0.1, 0.5, 1.0):
            with self.subTest(power=power):
                state, rod = create_critical_steady_state(power, with_xenon=False)
                self.assertGreaterEqual(rod, 0.0)
                self.assertLessEqual(rod, 1.0)
                rho = compute_reactivity(state, ControlInputs(rod=rod))
                self.assertLess(abs(rho.rho_total), 1e-6)

    def test_xenon_needs_more_withdrawal(self):
        """Test equilibrium xenon raises the critical rod position."""
        _, rod_clean = create_critical_steady_state(1.0, with_xenon=False)
        _, rod_xenon = create_critical_steady_state(1.0, with_xenon=True)
        self.assertGreater(rod_xenon, rod_clean)

    def test_target_reactivity(self):
        """Test a nonzero reactivity target is hit."""
        state, _ = create_steady_state(0.5)
        rod = compute_critical_rod_position(state, target_reactivity=0.002)
        rho = compute_reactivity(state, ControlInputs(rod=rod))
        self.assertAlmostEqual(rho.rho_total, 0.002, places=9)

    def test_unreachable(self):
        """Test an unreachable reactivity is rejected."""
        state, _ = create_steady_state(0.5)
        with self.assertRaises(ValidationError):
            compute_critical_rod_position(state, target_reactivity=0.1)

    def test_scrammed(self):
        """Test no rod position is critical with the scram inserted."""
        state, _ = create_steady_state(
            0.5, controls=ControlInputs(scram=True), with_xenon=False
        )
        with self.assertRaises(ValidationError):
            compute_critical_rod_position(state, controls=ControlInputs(scram=True))


class TestCriticalPower(unittest.TestCase):
    """Test the power search at a fixed rod position."""

    def test_partial_withdrawal(self):
        """Test the critical power at rod 0.3 without xenon."""
        power = compute_critical_power(0.3)
        self.assertAlmostEqual(power, 0.17, delta=0.05)

        state, _ = create_steady_state(power, with_xenon=False)
        rho = compute_reactivity(state, ControlInputs(rod=0.3))
        self.assertLess(abs(rho.rho_total), 1e-9)

    def test_monotonic_in_rod(self):
        """Test more withdrawal gives a higher critical power."""
        self.assertGreater(compute_critical_power(0.4), compute_critical_power(0.3))

    def test_rods_in(self):
        """Test fully inserted rods are never critical."""
        with self.assertRaises(ValidationError):
            compute_critical_power(0.0)

    def test_invalid_rod(self):
        """Test the rod position is validated."""
        with self.assertRaises(ValidationError):
            compute_critical_power(1.5)


if __name__ == "__main__":
    unittest.main()
