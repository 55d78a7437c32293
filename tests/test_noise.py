# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

import unittest

import numpy as np

from m2le.loc import noise


class TestNoiseGrid(unittest.TestCase):
    def test_constant_tiles(self):
        """loc.noise.NoiseGrid: constant tiles"""
        img = np.empty((32, 48))
        vals = np.array([[5., 20., 7.], [1., 3., 100.]])
        for r in range(2):
            for c in range(3):
                img[r*16:(r+1)*16, c*16:(c+1)*16] = vals[r, c]
        g = noise.NoiseGrid(img, 2.)
        exp = vals.copy()
        exp[1, 0] = 2.  # floored at min_noise
        np.testing.assert_equal(g.tiles, exp)
        self.assertEqual(g(0, 0), 5.)
        self.assertEqual(g(47, 31), 100.)
        self.assertEqual(g(16, 15), 20.)
        self.assertEqual(g(15, 16), 2.)

    def test_median_index(self):
        """loc.noise.NoiseGrid: upper median of a full tile"""
        rs = np.random.RandomState(0)
        img = rs.permutation(256).reshape((16, 16)).astype(float)
        g = noise.NoiseGrid(img, 0.)
        np.testing.assert_equal(g.tiles, [[128.]])

    def test_partial_tiles(self):
        """loc.noise.NoiseGrid: partial tiles at the borders"""
        img = np.full((20, 20), 50.)
        img[16:, 16:] = np.arange(16).reshape((4, 4))
        img[16:, :16] = 30.
        g = noise.NoiseGrid(img, 2.)
        np.testing.assert_equal(g.tiles, [[50., 50.], [30., 8.]])

    def test_expand(self):
        """loc.noise.NoiseGrid.expand"""
        rs = np.random.RandomState(1)
        img = rs.uniform(0, 100, (37, 45))
        g = noise.NoiseGrid(img, 2.)
        self.assertEqual(g.tiles.shape, (3, 3))
        e = g.expand()
        self.assertEqual(e.shape, img.shape)
        for y in range(img.shape[0]):
            for x in range(img.shape[1]):
                self.assertEqual(e[y, x], g(x, y))


class TestLocal(unittest.TestCase):
    def test_local_noise(self):
        """loc.noise.local_noise"""
        w = np.array([[1., 2.], [3., 4.]])
        # column means: 2, 3; row means: 1.5, 3.5
        self.assertAlmostEqual(noise.local_noise(w), 1.5)
        w = np.array([[1., 10.], [1., 10.]])
        self.assertAlmostEqual(noise.local_noise(w), 1.)

    def test_photon_count(self):
        """loc.noise.photon_count"""
        w = np.array([[1., 5.], [3., 10.]])
        self.assertAlmostEqual(noise.photon_count(w, 3.), 9.)
