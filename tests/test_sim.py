# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

import unittest

import numpy as np

from m2le import sim


class TestSimulateGauss(unittest.TestCase):
    def setUp(self):
        self.shape = (50, 30)
        self.coords = np.array([[15, 10], [30, 28]])
        self.amps = np.array([1, 2])
        self.sigmas = np.array([[3, 1], [1, 2]])

    def _expected(self):
        y, x = np.indices(self.shape[::-1])
        ret = np.zeros(self.shape[::-1])
        for (xc, yc), a, (sx, sy) in zip(self.coords, self.amps,
                                         self.sigmas):
            ret += a * np.exp(-(x - xc)**2 / (2 * sx**2) -
                              (y - yc)**2 / (2 * sy**2))
        return ret

    def test_shape(self):
        """sim.simulate_gauss: output shape"""
        res = sim.simulate_gauss(self.shape, self.coords, self.amps,
                                 self.sigmas)
        self.assertEqual(res.shape, (30, 50))

    def test_values(self):
        """sim.simulate_gauss: pixel values"""
        res = sim.simulate_gauss(self.shape, self.coords, self.amps,
                                 self.sigmas)
        np.testing.assert_allclose(res, self._expected())
        self.assertAlmostEqual(res[10, 15], 1.)

    def test_background(self):
        """sim.simulate_gauss: constant background"""
        res = sim.simulate_gauss(self.shape, self.coords, self.amps,
                                 self.sigmas, background=10.)
        np.testing.assert_allclose(res, self._expected() + 10.)

    def test_broadcast(self):
        """sim.simulate_gauss: scalar amplitude and sigma"""
        res = sim.simulate_gauss((9, 9), [4, 4], 3., 1.)
        self.assertAlmostEqual(res[4, 4], 3.)
        self.assertAlmostEqual(res[4, 5], 3. * np.exp(-0.5))
        np.testing.assert_allclose(res, res.T)


if __name__ == "__main__":
    unittest.main()
