# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Rejection of fitted candidates by third order moments

A single molecule's PSF is symmetric, hence its third order moments are
small. Overlapping molecules and other artifacts typically have large third
moments.
"""
import numpy as np

from . import moments
from .noise import local_noise, photon_count


class ThirdMomentRejector:
    """Reject candidates whose third moments are too large

    The third moments are estimated by Monte-Carlo integration. Random
    numbers for each candidate are drawn from a generator that only depends
    on the run's seed and the candidate's frame and pixel. Thus, results
    do not depend on the order in which candidates are processed.
    """
    n_samples = 5
    """Number of Monte-Carlo samples"""

    def __init__(self, stack, options, seed_sequence=None):
        """Parameters
        ----------
        stack : FrameStack
            Image data
        options : config.Options
            Localization options
        seed_sequence : numpy.random.SeedSequence or None, optional
            Entropy source. If `None`, a new, random one is created.
        """
        self.stack = stack
        self.options = options
        if seed_sequence is None:
            seed_sequence = np.random.SeedSequence()
        self.seed_sequence = seed_sequence

    def rng(self, cand):
        """Random number generator for a candidate

        Parameters
        ----------
        cand : Candidate
            Candidate

        Returns
        -------
        numpy.random.Generator
        """
        ss = np.random.SeedSequence(
            self.seed_sequence.entropy,
            spawn_key=self.seed_sequence.spawn_key + cand.key)
        return np.random.default_rng(ss)

    def __call__(self, cand):
        """Compute third moment invariants and test the candidate

        The invariants are stored in `cand`.

        Parameters
        ----------
        cand : Candidate
            Fitted candidate

        Returns
        -------
        bool
            `True` if the candidate passes.
        """
        opts = self.options
        window, left, top = self.stack.window(cand.frame, cand.column,
                                              cand.row)
        noise = local_noise(window)
        photons = photon_count(window, noise)

        alpha, beta = moments.mask_scales(
            opts.wavelength, opts.pixel_size, opts.numerical_aperture,
            (cand.width_x + cand.width_y) / 2)
        with np.errstate(divide="ignore", invalid="ignore"):
            m = moments.third_moments(window, noise, (cand.x, cand.y), alpha,
                                      beta, self.rng(cand), left, top,
                                      self.n_samples)
            s, d = moments.third_moment_invariants(*m)
            cand.third_sum = s / moments.third_sum_scale(photons)
            cand.third_diff = d / moments.third_diff_scale(photons)
            thresh = moments.third_moment_threshold(photons,
                                                    opts.third_threshold)
        if opts.third_disabled:
            return True
        return not (cand.third_diff**2 + cand.third_sum**2 >= thresh)
