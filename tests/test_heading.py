#!/usr/bin/env python3
"""
Unit tests for heading providers and the heading estimator.
"""

import unittest
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from routeguide.errors import ConfigError, OrientationUnavailableError
from routeguide.math.utils import angle_difference
from routeguide.sensors import (
    HeadingEstimator,
    OrientationSample,
    AbsoluteHeadingProvider,
    AlphaRotationHeadingProvider,
    select_heading_provider,
)


class TestHeadingProviders(unittest.TestCase):
    """Test raw heading extraction."""

    def test_absolute_provider(self):
        provider = AbsoluteHeadingProvider()
        self.assertAlmostEqual(provider.raw_heading(OrientationSample(heading=370.0)), 10.0)
        self.assertIsNone(provider.raw_heading(OrientationSample(alpha=30.0)))

    def test_alpha_provider(self):
        """Alpha runs counter-clockwise."""
        provider = AlphaRotationHeadingProvider()
        self.assertAlmostEqual(provider.raw_heading(OrientationSample(alpha=90.0)), 270.0)
        self.assertEqual(provider.raw_heading(OrientationSample(alpha=0.0)), 0.0)
        self.assertIsNone(provider.raw_heading(OrientationSample(heading=30.0)))

    def test_select_provider(self):
        self.assertIsInstance(select_heading_provider("ios"), AbsoluteHeadingProvider)
        self.assertIsInstance(select_heading_provider("absolute"), AbsoluteHeadingProvider)
        self.assertIsInstance(select_heading_provider("Android"), AlphaRotationHeadingProvider)

        with self.assertRaises(ConfigError):
            select_heading_provider("magnetometer")

    def test_sample_from_dict(self):
        sample = OrientationSample.from_dict({"webkitCompassHeading": 45.0, "beta": 70.0})
        self.assertEqual(sample.heading, 45.0)
        self.assertEqual(sample.pitch, 70.0)
        self.assertEqual(sample.screen_rotation, 0.0)
        self.assertIsNotNone(sample.timestamp)


class TestHeadingEstimator(unittest.TestCase):
    """Test HeadingEstimator class."""

    def setUp(self):
        self.estimator = HeadingEstimator(smoothing_factor=0.1, deadzone_deg=2.0)

    def test_invalid_smoothing_factor(self):
        for factor in (0.0, -0.1, 1.5):
            with self.assertRaises(ValueError):
                HeadingEstimator(smoothing_factor=factor)

    def test_unavailable_before_first_sample(self):
        self.assertFalse(self.estimator.is_available)
        self.assertIsNone(self.estimator.heading)
        self.assertIsNone(self.estimator.smoothed_heading)

    def test_first_sample_applied_directly(self):
        self.assertAlmostEqual(self.estimator.process(90.0), 90.0)
        self.assertTrue(self.estimator.is_available)

    def test_converges_to_constant_input(self):
        self.estimator.process(0.0)
        for _ in range(100):
            self.estimator.process(90.0)

        self.assertAlmostEqual(self.estimator.smoothed_heading, 90.0, delta=0.5)
        self.assertAlmostEqual(self.estimator.heading, 90.0, delta=2.0)

    def test_wraps_through_north(self):
        """350 then 10 moves toward north, never back through 180."""
        self.estimator.process(350.0)
        self.estimator.process(10.0)

        smoothed = self.estimator.smoothed_heading
        self.assertAlmostEqual(smoothed, 351.97, delta=0.1)
        self.assertLess(abs(angle_difference(352.0, smoothed)), 1.0)

        for _ in range(100):
            self.estimator.process(10.0)
        self.assertLess(abs(angle_difference(10.0, self.estimator.smoothed_heading)), 0.5)

    def test_deadzone_holds_reported_heading(self):
        self.estimator.process(100.0)
        reported = self.estimator.process(101.0)

        self.assertEqual(reported, 100.0)
        self.assertAlmostEqual(self.estimator.smoothed_heading, 100.1, delta=0.01)
        self.assertEqual(self.estimator.suppressed_count, 1)

    def test_deadzone_releases_on_large_change(self):
        self.estimator.process(100.0)
        reported = self.estimator.process(140.0)
        self.assertAlmostEqual(reported, self.estimator.smoothed_heading)
        self.assertGreater(reported, 102.0)

    def test_screen_rotation(self):
        self.assertAlmostEqual(self.estimator.process(80.0, screen_rotation=90.0), 170.0)
        self.assertAlmostEqual(self.estimator.last_raw, 170.0)

    def test_calibrate_before_samples_raises(self):
        with self.assertRaises(OrientationUnavailableError):
            self.estimator.calibrate(90.0)

    def test_calibrate(self):
        self.estimator.process(80.0)

        offset = self.estimator.calibrate(90.0)

        self.assertAlmostEqual(offset, 10.0)
        self.assertAlmostEqual(self.estimator.heading, 90.0)
        self.assertAlmostEqual(self.estimator.raw_heading, 80.0)

    def test_calibrate_is_idempotent(self):
        self.estimator.process(80.0)
        first = self.estimator.calibrate(90.0)
        second = self.estimator.calibrate(90.0)

        self.assertAlmostEqual(first, second)
        self.assertAlmostEqual(self.estimator.heading, 90.0)

    def test_calibrate_across_north(self):
        self.estimator.process(350.0)
        self.assertAlmostEqual(self.estimator.calibrate(10.0), 20.0)
        self.assertAlmostEqual(self.estimator.heading, 10.0)

    def test_calibration_offset_applies_to_later_samples(self):
        self.estimator.process(80.0)
        self.estimator.calibrate(90.0)
        for _ in range(100):
            self.estimator.process(180.0)
        self.assertAlmostEqual(self.estimator.smoothed_heading, 190.0, delta=0.5)

    def test_composite_blends_toward_course_when_moving(self):
        self.estimator.process(0.0)
        self.assertAlmostEqual(self.estimator.composite_heading(3.0, 90.0), 72.0, places=6)
        self.assertAlmostEqual(self.estimator.composite_heading(1.5, 90.0), 45.0, places=6)

    def test_composite_ignores_course_when_slow(self):
        self.estimator.process(0.0)
        self.assertEqual(self.estimator.composite_heading(0.2, 90.0), 0.0)
        self.assertEqual(self.estimator.composite_heading(None, 90.0), 0.0)
        self.assertEqual(self.estimator.composite_heading(2.0, None), 0.0)

    def test_composite_without_compass(self):
        self.assertAlmostEqual(self.estimator.composite_heading(1.0, 45.0), 45.0)
        self.assertIsNone(self.estimator.composite_heading(0.1, 45.0))

    def test_statistics(self):
        self.estimator.process(10.0)
        stats = self.estimator.get_statistics()
        self.assertEqual(stats['sample_count'], 1)
        self.assertEqual(stats['heading'], 10.0)


if __name__ == '__main__':
    unittest.main()
