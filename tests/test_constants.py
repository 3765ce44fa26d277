"""
Tests for the constants module.
"""

import unittest

from pwr_dynamics.constants import (
    PhysicalConstants,
    DELAYED_NEUTRON_DATA,
    FISSION_PRODUCT_DATA,
    DECAY_HEAT_DATA,
    xenon_burnup_rate,
)


class TestPhysicalConstants(unittest.TestCase):
    """Test physical constants."""

    def setUp(self):
        self.constants = PhysicalConstants()

    def test_barn_conversion(self):
        """Test barn to cm² conversion factor."""
        self.assertEqual(self.constants.BARN_TO_CM2, 1e-24)

    def test_zero_celsius(self):
        """Test the Celsius offset."""
        self.assertEqual(self.constants.ZERO_CELSIUS, 273.15)

    def test_nominal_flux(self):
        """Test rated thermal flux is typical of a PWR core."""
        self.assertTrue(1e13 < self.constants.NOMINAL_THERMAL_FLUX < 1e14)


class TestDelayedNeutronData(unittest.TestCase):
    """Test delayed neutron data."""

    def test_six_groups(self):
        """Test six precursor groups are provided."""
        self.assertEqual(DELAYED_NEUTRON_DATA["groups"], 6)
        self.assertEqual(len(DELAYED_NEUTRON_DATA["betas"]), 6)
        self.assertEqual(len(DELAYED_NEUTRON_DATA["lambdas"]), 6)

    def test_beta_sum(self):
        """Test group fractions add up to the total delayed fraction."""
        self.assertAlmostEqual(
            sum(DELAYED_NEUTRON_DATA["betas"]),
            DELAYED_NEUTRON_DATA["beta_total"],
            places=4
        )

    def test_decay_constants_increasing(self):
        """Test groups are ordered from long- to short-lived."""
        lambdas = DELAYED_NEUTRON_DATA["lambdas"]
        self.assertEqual(lambdas, sorted(lambdas))

    def test_prompt_lifetime(self):
        """Test prompt generation time is typical of a thermal reactor."""
        self.assertTrue(1e-5 <= DELAYED_NEUTRON_DATA["prompt_lifetime"] <= 1e-3)


class TestFissionProductData(unittest.TestCase):
    """Test the iodine/xenon chain data."""

    def test_xenon_cross_section(self):
        """Test Xe-135 has its very large absorption cross-section."""
        self.assertTrue(FISSION_PRODUCT_DATA["Xe-135"]["sigma_a"] > 1e6)

    def test_iodine_decays_faster_than_xenon(self):
        """Test I-135 half-life (6.6 h) is shorter than Xe-135 (9.1 h)."""
        self.assertGreater(
            FISSION_PRODUCT_DATA["I-135"]["decay_constant"],
            FISSION_PRODUCT_DATA["Xe-135"]["decay_constant"]
        )

    def test_burnup_rate(self):
        """Test σ_a·φ at rated flux."""
        self.assertAlmostEqual(xenon_burnup_rate() / 7.95e-5, 1.0, places=9)

    def test_burnup_rate_scales_with_flux(self):
        """Test burnup is proportional to flux."""
        self.assertAlmostEqual(
            xenon_burnup_rate(1.5e13) / xenon_burnup_rate(3.0e13), 0.5, places=12
        )


class TestDecayHeatData(unittest.TestCase):
    """Test decay heat group data."""

    def test_three_groups(self):
        """Test three decay heat groups."""
        self.assertEqual(DECAY_HEAT_DATA["groups"], 3)
        self.assertEqual(len(DECAY_HEAT_DATA["fractions"]), 3)
        self.assertEqual(len(DECAY_HEAT_DATA["lambdas"]), 3)

    def test_total_fraction(self):
        """Test decay heat right after shutdown is a few percent of rated."""
        self.assertTrue(0.03 < sum(DECAY_HEAT_DATA["fractions"]) < 0.1)


if __name__ == "__main__":
    unittest.main()
