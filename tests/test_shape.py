# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

import math
import unittest

import numpy as np

from m2le import sim
from m2le.frames import FrameStack
from m2le.loc import moments, shape
from m2le.loc.data import Candidate


class TestMoments(unittest.TestCase):
    def test_centroid(self):
        """loc.moments.centroid"""
        w = np.zeros((5, 5))
        w[1, 3] = 3.
        w[3, 3] = 1.
        cx, cy = moments.centroid(w + 2., 2., left=10, top=20)
        self.assertAlmostEqual(cx, 13.)
        self.assertAlmostEqual(cy, 21.5)

    def test_second_moments(self):
        """loc.moments.second_moments"""
        w = np.zeros((5, 5))
        w[2, 0] = w[2, 4] = 1.
        xx, yy, xy = moments.second_moments(w, 0.)
        self.assertAlmostEqual(xx, 4.)
        self.assertAlmostEqual(yy, 0.)
        self.assertAlmostEqual(xy, 0.)

        w = np.zeros((5, 5))
        w[0, 0] = w[4, 4] = 1.
        xx, yy, xy = moments.second_moments(w, 0., 7, 3)
        self.assertAlmostEqual(xx, 4.)
        self.assertAlmostEqual(yy, 4.)
        self.assertAlmostEqual(xy, 4.)

    def test_eigenvalues(self):
        """loc.moments.eigenvalues"""
        np.testing.assert_allclose(moments.eigenvalues(1., 0.2, 0.),
                                   [1., 0.2])
        np.testing.assert_allclose(moments.eigenvalues(0.2, 1., 0.),
                                   [1., 0.2])
        # rotated by 30°
        phi = math.radians(30)
        c, s = math.cos(phi), math.sin(phi)
        xx = c * c * 1. + s * s * 0.2
        yy = s * s * 1. + c * c * 0.2
        xy = c * s * (1. - 0.2)
        l1, l2 = moments.eigenvalues(xx, yy, xy)
        np.testing.assert_allclose([l1, l2], [1., 0.2])
        np.testing.assert_allclose(math.sqrt(1 - l2 / l1), 0.894427191)

    def test_ecc_threshold(self):
        """loc.moments.ecc_threshold"""
        np.testing.assert_allclose(moments.ecc_threshold(1000., 0.9),
                                   0.26942, rtol=1e-3)
        t = moments.ecc_threshold(np.array([100., 1000., 10000.]), 0.9)
        self.assertTrue(np.all(np.diff(t) < 0))

    def test_third_threshold(self):
        """loc.moments.third_moment_threshold"""
        t = moments.third_moment_threshold(np.array([100., 1000., 10000.]),
                                           0.9)
        self.assertTrue(np.all(np.isfinite(t)))
        self.assertTrue(np.all(np.diff(t) > 0))
        self.assertTrue(np.all(t > 0))

    def test_third_scales(self):
        """loc.moments.third_sum_scale, loc.moments.third_diff_scale"""
        self.assertAlmostEqual(moments.third_sum_scale(0.), 10.246)
        self.assertAlmostEqual(moments.third_diff_scale(0.), 41.227)
        self.assertAlmostEqual(
            moments.third_sum_scale(1000.),
            10.246 + 169.7 + 17.027 + 9.3532e-4)
        self.assertAlmostEqual(
            moments.third_diff_scale(1000.),
            41.227 + 640.77 + 3.6687 + 1.7874e-3)


class TestEccentricity(unittest.TestCase):
    def test_isotropic(self):
        """loc.shape.eccentricity: isotropic Gaussian"""
        img = sim.simulate_gauss((7, 7), [[3, 3]], 100., 1.)
        ecc, major, minor = shape.eccentricity(img, 0.)
        self.assertAlmostEqual(ecc, 0., places=5)
        self.assertAlmostEqual(major, minor)

    def test_elongated(self):
        """loc.shape.eccentricity: elongated Gaussian"""
        img = sim.simulate_gauss((7, 7), [[3, 3]], 100., [2., 0.7])
        ecc, major, minor = shape.eccentricity(img, 0.)
        self.assertGreater(ecc, 0.85)
        self.assertGreater(major, minor)

        img_t = img.T.copy()
        ecc_t, major_t, minor_t = shape.eccentricity(img_t, 0.)
        self.assertAlmostEqual(ecc, ecc_t)
        self.assertAlmostEqual(major, major_t)
        self.assertAlmostEqual(minor, minor_t)


class TestShapeRejector(unittest.TestCase):
    def setUp(self):
        round_img = sim.simulate_gauss((64, 64), [[32, 32]], 500., 1.,
                                       background=10.)
        elong_img = sim.simulate_gauss((64, 64), [[32, 32]], 500.,
                                       [2., 0.7], background=10.)
        self.stack = FrameStack([round_img, elong_img])

    def test_round(self):
        """loc.shape.ShapeRejector: accept round feature"""
        rej = shape.ShapeRejector(self.stack, 0.9)
        c = Candidate(32, 32, 0)
        self.assertTrue(rej(c))
        self.assertAlmostEqual(c.ecc, 0., places=5)
        self.assertAlmostEqual(c.major_axis, c.minor_axis)
        self.assertFalse(c.rejected)

    def test_elongated(self):
        """loc.shape.ShapeRejector: reject elongated feature"""
        rej = shape.ShapeRejector(self.stack, 0.9)
        c = Candidate(32, 32, 1)
        self.assertFalse(rej(c))
        self.assertGreater(c.ecc, 0.85)

    def test_disabled(self):
        """loc.shape.ShapeRejector: disabled test still computes values"""
        rej = shape.ShapeRejector(self.stack, 0.9, disabled=True)
        c = Candidate(32, 32, 1)
        self.assertTrue(rej(c))
        self.assertGreater(c.ecc, 0.85)
        self.assertTrue(math.isfinite(c.major_axis))
        self.assertTrue(math.isfinite(c.minor_axis))
