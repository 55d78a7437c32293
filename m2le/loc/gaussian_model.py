# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Pixel-integrated Gaussian model of a projected single molecule signal

The signal of a molecule is summed along one image axis, resulting in a 1D
profile. The model for the expected number of photons in element `i` of the
profile is

.. math:: \\mu_i = L b + I_0 \\frac{L \\pi w^2}{2 k^2}
    \\left(\\mathrm{erf}(u_{1,i}) - \\mathrm{erf}(u_{2,i})\\right)

with :math:`u_{1,i} = k (x_i - x_0 + a/2) / w` and
:math:`u_{2,i} = k (x_i - x_0 - a/2) / w`. :math:`L` is the number of pixels
summed per element, :math:`b` the background per pixel, :math:`k` the optical
wavenumber, :math:`a` the light-collecting length of a pixel, :math:`x_0`
the position, :math:`I_0` the intensity and :math:`w` the width.

Fit parameters are ordered (position, intensity, background, width).
"""
import math

import numpy as np
from scipy.special import erf


_two_by_sqrt_pi = 2 / math.sqrt(math.pi)


class SignalArray:
    """1D signal profile along with the positions of its elements

    Positions are in nm, measured from the outer edge of the first pixel,
    i.e., element `i` is located at ``(i + 0.5) * pixel_size``.
    """
    def __init__(self, signal, pixel_size):
        """Parameters
        ----------
        signal : array_like
            Photon counts
        pixel_size : float
            Size of a pixel in nm
        """
        self.signal = np.array(signal, dtype=float)
        self.positions = (np.arange(len(self.signal)) + 0.5) * pixel_size
        self.signal.flags.writeable = False
        self.positions.flags.writeable = False

    @classmethod
    def from_window(cls, window, axis, pixel_size):
        """Project an image region onto one axis

        Parameters
        ----------
        window : numpy.ndarray
            Photon values, indexed ``window[row, column]``
        axis : {"x", "y"}
            Axis to project onto. For "x", columns are summed.
        pixel_size : float
            Size of a pixel in nm

        Returns
        -------
        SignalArray
        """
        if axis == "x":
            return cls(window.sum(axis=0), pixel_size)
        if axis == "y":
            return cls(window.sum(axis=1), pixel_size)
        raise ValueError("`axis` has to be \"x\" or \"y\".")

    def __len__(self):
        return len(self.signal)


class GaussianModel:
    """Expected signal and its derivatives for one axis"""
    def __init__(self, length, wavenumber, aperture):
        """Parameters
        ----------
        length : int
            Number of pixels summed per signal element
        wavenumber : float
            Optical wavenumber in 1/nm
        aperture : float
            Light-collecting length of a pixel in nm
        """
        self.length = length
        self.wavenumber = wavenumber
        self.aperture = aperture
        self._c = length * math.pi / (2 * wavenumber**2)

    def _args(self, positions, position, width):
        k = self.wavenumber
        d = positions - position
        u1 = k * (d + self.aperture / 2) / width
        u2 = k * (d - self.aperture / 2) / width
        return u1, u2

    def partial_expected(self, positions, position, width):
        """Expected signal for unit intensity and no background

        Parameters
        ----------
        positions : numpy.ndarray
            Where to evaluate the model
        position, width : float
            Model parameters

        Returns
        -------
        numpy.ndarray
            Model values
        """
        u1, u2 = self._args(positions, position, width)
        return self._c * width**2 * (erf(u1) - erf(u2))

    def expected(self, positions, params):
        """Expected signal

        Parameters
        ----------
        positions : numpy.ndarray
            Where to evaluate the model
        params : Parameters
            Model parameters

        Returns
        -------
        numpy.ndarray
            Model values
        """
        return (self.length * params.background + params.intensity *
                self.partial_expected(positions, params.position,
                                      params.width))

    def derivatives(self, positions, params):
        """Expected signal and its first and second derivatives

        Mixed second derivatives are not computed.

        Parameters
        ----------
        positions : numpy.ndarray
            Where to evaluate the model
        params : Parameters
            Model parameters

        Returns
        -------
        expected : numpy.ndarray, shape(n)
            Model values
        first, second : numpy.ndarray, shape(4, n)
            Derivatives with respect to position, intensity, background,
            and width
        """
        k = self.wavenumber
        w = params.width
        i0 = params.intensity
        u1, u2 = self._args(positions, params.position, w)
        e1 = np.exp(-u1 * u1)
        e2 = np.exp(-u2 * u2)
        d = erf(u1) - erf(u2)
        ue = u2 * e2 - u1 * e1
        ue3 = u1**3 * e1 - u2**3 * e2

        partial = self._c * w * w * d
        expected = self.length * params.background + i0 * partial

        first = np.empty((4, len(positions)))
        second = np.zeros((4, len(positions)))

        first[0] = i0 * self._c * w * k * _two_by_sqrt_pi * (e2 - e1)
        first[1] = partial
        first[2] = self.length
        first[3] = i0 * self._c * (2 * w * d + w * _two_by_sqrt_pi * ue)

        second[0] = i0 * self._c * 2 * k * k * _two_by_sqrt_pi * ue
        second[3] = i0 * self._c * (2 * d + 2 * _two_by_sqrt_pi * ue -
                                    2 * _two_by_sqrt_pi * ue3)
        return expected, first, second

    def log_likelihood(self, signal, params):
        """Poisson log-likelihood (up to a constant)

        Parameters
        ----------
        signal : SignalArray
            Measured data
        params : Parameters
            Model parameters

        Returns
        -------
        float
            ``sum(s * log(mu) - mu)``
        """
        mu = self.expected(signal.positions, params)
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.sum(signal.signal * np.log(mu) - mu))

    def newton_step(self, signal, params):
        """Newton-Raphson step for maximizing the likelihood

        Each parameter is treated independently, i.e., the Hessian is
        approximated by its diagonal.

        Parameters
        ----------
        signal : SignalArray
            Measured data
        params : Parameters
            Current parameters

        Returns
        -------
        numpy.ndarray, shape(4)
            Ratio of first and second derivatives of the log-likelihood.
            Subtract this from the parameters to get closer to the maximum.
        """
        mu, first, second = self.derivatives(signal.positions, params)
        s = signal.signal
        with np.errstate(divide="ignore", invalid="ignore"):
            r = s / mu - 1
            d1 = np.sum(r * first, axis=1)
            d2 = np.sum(r * second - s * first * first / (mu * mu), axis=1)
            return d1 / d2
