"""
Tests for the params module.
"""

import unittest
import dataclasses

import numpy as np

from pwr_dynamics.params import (
    ReactorParams,
    DEFAULT_PARAMS,
    BETA_TOTAL,
    SCRAM_REACTIVITY,
    create_params,
    rod_worth_curve,
    rod_worth_fraction,
    differential_rod_worth,
)
from pwr_dynamics.guards import ValidationError


class TestReactorParams(unittest.TestCase):
    """Test the frozen parameter set."""

    def setUp(self):
        self.params = ReactorParams()

    def test_beta_total(self):
        """Test total delayed fraction is the sum of the groups."""
        self.assertAlmostEqual(self.params.BETA_TOTAL, sum(self.params.BETA_I))
        self.assertAlmostEqual(BETA_TOTAL, self.params.BETA_TOTAL)

    def test_frozen(self):
        """Test parameters cannot be mutated at runtime."""
        with self.assertRaises(dataclasses.FrozenInstanceError):
            self.params.ALPHA_FUEL = 0.0

    def test_negative_feedback(self):
        """Test default feedback coefficients are stabilizing."""
        self.assertLess(self.params.ALPHA_FUEL, 0.0)
        self.assertLess(self.params.ALPHA_COOLANT, 0.0)
        self.assertLess(SCRAM_REACTIVITY, -self.params.BETA_TOTAL)

    def test_derived_thermal_constants(self):
        """Test conductances and capacities follow the design inputs."""
        p = self.params
        self.assertAlmostEqual(p.H_FUEL_COOLANT, 3.0e9 / 315.0)
        self.assertAlmostEqual(p.H_COOLANT_SINK, 3.0e9 / 20.0)
        self.assertAlmostEqual(p.FUEL_HEAT_CAPACITY, p.H_FUEL_COOLANT * 3.0)
        self.assertAlmostEqual(p.COOLANT_HEAT_CAPACITY, p.H_COOLANT_SINK * 11.0)

    def test_xenon_rates_accelerated(self):
        """Test the xenon chain rates carry the acceleration factor."""
        iodine_yield, lambda_i, lambda_xe, sigma_xe = self.params.xenon_rates()
        a = self.params.XENON_ACCELERATION
        self.assertAlmostEqual(lambda_i, a * self.params.IODINE_DECAY)
        self.assertAlmostEqual(lambda_xe, a * self.params.XENON_DECAY)
        self.assertAlmostEqual(sigma_xe, a * self.params.XENON_BURNUP)
        self.assertAlmostEqual(iodine_yield, lambda_i)


class TestCreateParams(unittest.TestCase):
    """Test the parameter factory."""

    def test_defaults(self):
        """Test factory without overrides returns the defaults."""
        self.assertEqual(create_params(), DEFAULT_PARAMS)

    def test_override(self):
        """Test overriding a field."""
        params = create_params(LAMBDA_PROMPT=2e-4)
        self.assertEqual(params.LAMBDA_PROMPT, 2e-4)
        self.assertEqual(params.ALPHA_FUEL, DEFAULT_PARAMS.ALPHA_FUEL)

    def test_real_time_xenon(self):
        """Test the xenon chain can run at real-world rates."""
        params = create_params(XENON_ACCELERATION=1.0)
        self.assertAlmostEqual(params.xenon_rates()[1], params.IODINE_DECAY)

    def test_derived_values_follow_overrides(self):
        """Test derived constants are recomputed from overridden inputs."""
        params = create_params(POWER_NOMINAL=1.5e9)
        self.assertAlmostEqual(params.H_COOLANT_SINK, 7.5e7)

    def test_unknown_field(self):
        """Test unknown parameter names are rejected."""
        with self.assertRaises(ValidationError):
            create_params(NOT_A_PARAMETER=1.0)

    def test_invalid_value(self):
        """Test out-of-range parameters are rejected."""
        with self.assertRaises(ValidationError):
            create_params(LAMBDA_PROMPT=-1e-4)
        with self.assertRaises(ValidationError):
            create_params(SCRAM_TAU=0.0)

    def test_group_data_as_lists(self):
        """Test list-valued group data are stored as tuples."""
        params = create_params(
            BETA_I=list(DEFAULT_PARAMS.BETA_I),
            DECAY_HEAT_FRACTIONS=list(DEFAULT_PARAMS.DECAY_HEAT_FRACTIONS),
        )
        self.assertIsInstance(params.BETA_I, tuple)
        self.assertIsInstance(params.DECAY_HEAT_FRACTIONS, tuple)
        self.assertEqual(params, DEFAULT_PARAMS)
        self.assertEqual(hash(params), hash(DEFAULT_PARAMS))

        params = ReactorParams(LAMBDA_I=np.array(DEFAULT_PARAMS.LAMBDA_I))
        self.assertIsInstance(params.LAMBDA_I, tuple)
        hash(params)

    def test_group_data_not_a_sequence(self):
        """Test scalar group data are rejected."""
        with self.assertRaises(ValidationError):
            create_params(DECAY_HEAT_LAMBDAS=0.1)


class TestRodWorthCurve(unittest.TestCase):
    """Test the S-shaped integral rod worth."""

    def setUp(self):
        self.params = DEFAULT_PARAMS
        self.positions = np.linspace(0.0, 1.0, 101)

    def test_end_points(self):
        """Test worth is zero fully inserted and maximal fully withdrawn."""
        self.assertAlmostEqual(rod_worth_curve(0.0), 0.0, places=12)
        self.assertAlmostEqual(
            rod_worth_curve(1.0), self.params.ROD_WORTH_MAX, places=12
        )
        self.assertAlmostEqual(rod_worth_fraction(1.0), 1.0, places=12)

    def test_monotonic(self):
        """Test worth increases with withdrawal."""
        worths = [rod_worth_curve(x) for x in self.positions]
        self.assertTrue(np.all(np.diff(worths) > 0.0))

    def test_bounded(self):
        """Test worth stays within [0, ROD_WORTH_MAX], also outside travel."""
        self.assertEqual(rod_worth_curve(-0.5), 0.0)
        self.assertAlmostEqual(rod_worth_curve(1.5), self.params.ROD_WORTH_MAX)
        for x in self.positions:
            w = rod_worth_curve(x)
            self.assertTrue(0.0 <= w <= self.params.ROD_WORTH_MAX)

    def test_not_linear(self):
        """Test the curve is S-shaped rather than linear."""
        self.assertLess(rod_worth_fraction(0.25), 0.25)
        self.assertGreater(rod_worth_fraction(0.75), 0.75)
        self.assertAlmostEqual(rod_worth_fraction(0.5), 0.5, places=12)

    def test_differential_worth_peaks_mid_travel(self):
        """Test differential worth is concentrated near mid-travel."""
        mid = differential_rod_worth(0.5)
        self.assertGreater(mid, differential_rod_worth(0.05))
        self.assertGreater(mid, differential_rod_worth(0.95))

    def test_smooth(self):
        """Test the slope matches a finite difference of the curve."""
        h = 1e-6
        for x in (0.1, 0.4, 0.8):
            slope = (rod_worth_curve(x + h) - rod_worth_curve(x - h)) / (2 * h)
            self.assertAlmostEqual(slope, differential_rod_worth(x), places=6)


if __name__ == "__main__":
    unittest.main()
