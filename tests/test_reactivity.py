"""
Tests for the reactivity module.
"""

import unittest
import math

from pwr_dynamics.params import DEFAULT_PARAMS, create_params, rod_worth_curve
from pwr_dynamics.state import ControlInputs, IDX_POWER
from pwr_dynamics.reactivity import (
    compute_reactivity,
    compute_external_reactivity,
    compute_doppler_reactivity,
    compute_moderator_reactivity,
    compute_xenon_reactivity,
    compute_boron_reactivity,
)
from pwr_dynamics.dynamics import compute_derivatives
from pwr_dynamics.initial_conditions import (
    create_cold_shutdown_state,
    create_steady_state,
)


class TestReactivityComponents(unittest.TestCase):
    """Test the individual feedback terms."""

    def setUp(self):
        self.params = DEFAULT_PARAMS

    def test_zero_at_reference(self):
        """Test all components vanish at the reference conditions."""
        state = create_cold_shutdown_state().state
        controls = ControlInputs(rod=self.params.ROD_REFERENCE)
        rho = compute_reactivity(state, controls)

        self.assertAlmostEqual(rho.rho_ext, 0.0, places=15)
        self.assertAlmostEqual(rho.rho_doppler, 0.0, places=15)
        self.assertAlmostEqual(rho.rho_mod, 0.0, places=15)
        self.assertAlmostEqual(rho.rho_xenon, 0.0, places=15)
        self.assertAlmostEqual(rho.rho_total, 0.0, places=15)

    def test_doppler_square_root(self):
        """Test Doppler feedback follows sqrt(Tf)."""
        expected = self.params.ALPHA_FUEL * (math.sqrt(900.0) - math.sqrt(565.0))
        self.assertAlmostEqual(compute_doppler_reactivity(900.0), expected, places=15)
        self.assertLess(compute_doppler_reactivity(900.0), 0.0)
        self.assertGreater(compute_doppler_reactivity(400.0), 0.0)

    def test_moderator_linear(self):
        """Test moderator feedback is linear in Tc."""
        self.assertAlmostEqual(compute_moderator_reactivity(585.0), -0.002, places=12)
        self.assertAlmostEqual(compute_moderator_reactivity(565.0), 0.0, places=15)

    def test_xenon_is_poison(self):
        """Test more xenon gives more negative reactivity."""
        self.assertAlmostEqual(compute_xenon_reactivity(1.0), -0.05, places=15)
        self.assertLess(compute_xenon_reactivity(0.5), compute_xenon_reactivity(0.1))

    def test_boron_negative(self):
        """Test boron reactivity is negative and proportional."""
        self.assertAlmostEqual(compute_boron_reactivity(100.0), -0.01, places=12)
        self.assertAlmostEqual(
            compute_external_reactivity(0.5, 100.0) - compute_external_reactivity(0.5),
            -0.01,
            places=12
        )

    def test_external_relative_to_reference(self):
        """Test rod reactivity is measured from the reference position."""
        expected = rod_worth_curve(0.7) - rod_worth_curve(self.params.ROD_REFERENCE)
        self.assertAlmostEqual(compute_external_reactivity(0.7), expected, places=15)
        self.assertLess(compute_external_reactivity(0.0), 0.0)

    def test_scram_term_in_external(self):
        """Test the inserted scram reactivity is part of rho_ext."""
        self.assertAlmostEqual(
            compute_external_reactivity(0.5, scram_rho=-0.08)
            - compute_external_reactivity(0.5),
            -0.08,
            places=15
        )

    def test_parameter_override(self):
        """Test components use the given parameters."""
        params = create_params(ALPHA_COOLANT=-3e-4)
        self.assertAlmostEqual(
            compute_moderator_reactivity(575.0, params), -3e-3, places=12
        )


class TestReactivityInvariants(unittest.TestCase):
    """Test conservation and purity of the reactivity query."""

    def setUp(self):
        self.state = create_steady_state(1.0).state
        self.controls = [
            ControlInputs(rod=0.0),
            ControlInputs(rod=0.55, boron_conc=200.0),
            ControlInputs(rod=1.0, scram=True),
        ]

    def test_total_is_sum(self):
        """Test rho_total equals the sum of the components."""
        for controls in self.controls:
            rho = compute_reactivity(self.state, controls)
            parts = rho.rho_ext + rho.rho_doppler + rho.rho_mod + rho.rho_xenon
            self.assertLessEqual(
                abs(rho.rho_total - parts), 1e-9 * max(abs(rho.rho_total), 1e-12)
            )

    def test_pure(self):
        """Test repeated queries give identical results."""
        controls = ControlInputs(rod=0.6)
        first = compute_reactivity(self.state, controls)
        second = compute_reactivity(self.state, controls)
        self.assertEqual(first, second)

    def test_same_value_inside_derivatives(self):
        """Test the kinetics equation sees the same reactivity."""
        controls = ControlInputs(rod=0.6)
        rho = compute_reactivity(self.state, controls).rho_total
        dydt = compute_derivatives(self.state, controls)

        params = DEFAULT_PARAMS
        delayed = sum(
            lam * c for lam, c in zip(params.LAMBDA_I, self.state.precursors)
        )
        expected = (
            (rho - params.BETA_TOTAL) / params.LAMBDA_PROMPT * self.state.power
            + delayed
        )
        self.assertAlmostEqual(dydt[IDX_POWER], expected, places=9)

    def test_in_pcm(self):
        """Test pcm conversion of the breakdown."""
        rho = compute_reactivity(self.state, ControlInputs(rod=0.6))
        self.assertAlmostEqual(rho.in_pcm()["rho_total"], rho.rho_total * 1e5)
        self.assertEqual(set(rho.to_dict()), {
            "rho_ext", "rho_doppler", "rho_mod", "rho_xenon", "rho_total"
        })


if __name__ == "__main__":
    unittest.main()
