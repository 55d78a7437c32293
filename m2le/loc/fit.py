# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Maximum likelihood fitting of candidate positions

The signal around a candidate is projected onto the x and y axes. Each
projection is fitted separately with a :py:class:`GaussianModel` by
maximizing the Poisson likelihood using damped Newton-Raphson iterations.
"""
import math

import numpy as np

from .gaussian_model import GaussianModel, SignalArray


fixed_width_factor = 2.3456387388762832
"""Divide by ``pixel_size * wavenumber`` to get the fixed width parameter"""

max_damping_steps = 10
"""Maximum number of times the Newton-Raphson step is halved"""


def percent_difference(a, b):
    """Relative difference of `a` and `b` w.r.t. their mean"""
    return abs(2 * (a - b) / (a + b))


class Parameters:
    """Model parameters for one axis

    Attributes
    ----------
    position : float
        Position in nm, relative to the outer edge of the fit window
    intensity : float
        Intensity factor
    background : float
        Background photons per pixel
    width : float
        Width of the PSF
    """
    __slots__ = ["position", "intensity", "background", "width"]

    def __init__(self, position, intensity, background, width):
        self.position = position
        self.intensity = intensity
        self.background = background
        self.width = width

    def __repr__(self):
        return ("Parameters(position={}, intensity={}, background={}, "
                "width={})".format(self.position, self.intensity,
                                   self.background, self.width))

    @classmethod
    def estimate(cls, signal, model, width):
        """Initial guess from the signal

        Parameters
        ----------
        signal : SignalArray
            Data
        model : GaussianModel
            Used to estimate the intensity
        width : float
            Width parameter. This is not estimated from the data.

        Returns
        -------
        Parameters
        """
        lo = signal.signal.min()
        bg = lo / model.length
        w = np.clip(signal.signal - lo, 0, None)
        with np.errstate(divide="ignore", invalid="ignore"):
            pos = (w * signal.positions).sum() / w.sum()
            partial = model.partial_expected(signal.positions, pos, width)
            intensity = (signal.signal.max() - lo) / partial.max()
        return cls(float(pos), float(intensity), float(bg), float(width))

    def copy(self):
        return Parameters(self.position, self.intensity, self.background,
                          self.width)

    def is_valid(self):
        """Check whether parameters are finite and non-negative"""
        vals = [self.position, self.intensity, self.background, self.width]
        if not all(math.isfinite(v) for v in vals):
            return False
        return self.intensity >= 0 and self.background >= 0 and self.width >= 0


class MaxLikelihoodFitter:
    """Fit :py:class:`GaussianModel` s to signal profiles"""
    def __init__(self, options, initial_noise):
        """Parameters
        ----------
        options : config.Options
            Convergence criteria, background bounds, iteration limit, and
            whether to fix the width are taken from here.
        initial_noise : float
            Background estimate before fitting. The background is not
            allowed to exceed ``initial_noise * max_noise_multiplier``.
        """
        self.pos_epsilon = options.pos_epsilon
        self.int_epsilon = options.int_epsilon / 100
        self.width_epsilon = options.width_epsilon
        self.max_iterations = options.max_iterations
        self.fixed_width = options.fixed_width
        self.min_bg = options.min_noise_bound
        self.max_bg = options.max_noise_multiplier * initial_noise

    def clamp_background(self, bg):
        """Restrict the background to the allowed range

        Values below the lower bound are raised to it. Otherwise, values
        above the upper bound are lowered to it. Thus the lower bound takes
        precedence if the upper bound is the smaller one.

        Parameters
        ----------
        bg : float
            Background value

        Returns
        -------
        float
            Clamped value
        """
        if bg < self.min_bg:
            return self.min_bg
        if bg > self.max_bg:
            return self.max_bg
        return bg

    def iterate(self, model, signal, params, likelihood):
        """Single damped Newton-Raphson iteration

        If the fit has not converged yet, `params` are updated in place.

        Parameters
        ----------
        model : GaussianModel
            Model for `signal`
        signal : SignalArray
            Data
        params : Parameters
            Current parameters
        likelihood : float
            Log-likelihood of `params`

        Returns
        -------
        converged : bool
            Whether the fit has converged
        likelihood : float
            Log-likelihood after the iteration
        """
        delta = model.newton_step(signal, params)

        coeff = 1.
        for _ in range(max_damping_steps):
            new = Parameters(
                params.position - delta[0] * coeff,
                params.intensity - delta[1] * coeff,
                self.clamp_background(params.background - delta[2] * coeff),
                (params.width if self.fixed_width
                 else params.width - delta[3] * coeff))
            new_likelihood = model.log_likelihood(signal, new)
            if new_likelihood > likelihood:
                likelihood = new_likelihood
                break
            coeff /= 2

        with np.errstate(divide="ignore", invalid="ignore"):
            converged = (abs(delta[0]) < self.pos_epsilon or
                         percent_difference(params.intensity, new.intensity) <
                         self.int_epsilon or
                         abs(delta[3]) < self.width_epsilon)
        if not converged:
            params.position = new.position
            params.intensity = new.intensity
            params.background = new.background
            params.width = new.width
        return converged, likelihood

    def fit(self, axes):
        """Fit several independent axes

        Iterate each axis until it has converged, but at most
        ``max_iterations`` times.

        Parameters
        ----------
        axes : list of tuple(GaussianModel, SignalArray, Parameters)
            Models, data and initial parameters. Parameters are updated in
            place.

        Returns
        -------
        int
            Number of iterations
        """
        likelihoods = [m.log_likelihood(s, p) for m, s, p in axes]
        done = [False] * len(axes)
        it = 0
        while it < self.max_iterations and not all(done):
            for i, (m, s, p) in enumerate(axes):
                if not done[i]:
                    done[i], likelihoods[i] = self.iterate(m, s, p,
                                                           likelihoods[i])
            it += 1
        return it


class Localizer:
    """Find the sub-pixel position of candidates

    Fitted position, intensity, background and width along both axes are
    stored in the candidate.
    """
    def __init__(self, stack, options):
        """Parameters
        ----------
        stack : FrameStack
            Image data
        options : config.Options
            Localization options
        """
        self.stack = stack
        self.options = options
        self.wavenumber = options.wavenumber
        self.aperture = options.aperture

    def initial_width(self, cand):
        """Initial width parameter of a candidate"""
        ps = self.options.pixel_size
        if self.options.fixed_width:
            return fixed_width_factor / (ps * self.wavenumber)
        return (0.5 * (cand.major_axis + cand.minor_axis) * math.sqrt(2) *
                ps * self.wavenumber)

    def __call__(self, cand):
        """Fit a candidate

        Parameters
        ----------
        cand : Candidate
            Candidate to fit

        Returns
        -------
        bool
            `True` if the fit succeeded and the results are plausible.
        """
        opts = self.options
        window, left, top = self.stack.window(cand.frame, cand.column,
                                              cand.row)
        height, width = window.shape
        if width < 4 or height < 4:
            return False

        ps = opts.pixel_size
        x_sig = SignalArray.from_window(window, "x", ps)
        y_sig = SignalArray.from_window(window, "y", ps)
        x_model = GaussianModel(height, self.wavenumber, self.aperture)
        y_model = GaussianModel(width, self.wavenumber, self.aperture)

        w = self.initial_width(cand)
        x_par = Parameters.estimate(x_sig, x_model, w)
        y_par = Parameters.estimate(y_sig, y_model, w)

        fitter = MaxLikelihoodFitter(
            opts, (x_par.background + y_par.background) / 2)
        fitter.fit([(x_model, x_sig, x_par), (y_model, y_sig, y_par)])

        if not (x_par.is_valid() and y_par.is_valid()):
            return False
        if not (0 <= x_par.position <= ps * width and
                0 <= y_par.position <= ps * height):
            return False
        if not (opts.min_width <= x_par.width <= opts.max_width and
                opts.min_width <= y_par.width <= opts.max_width):
            return False

        # positions are measured from the outer edge of the window
        cand.x = x_par.position / ps + left - 0.5
        cand.y = y_par.position / ps + top - 0.5
        cand.intensity_x = x_par.intensity
        cand.intensity_y = y_par.intensity
        cand.bg_x = x_par.background
        cand.bg_y = y_par.background
        cand.width_x = x_par.width
        cand.width_y = y_par.width
        return True
