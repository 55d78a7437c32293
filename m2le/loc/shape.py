# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Rejection of candidates by eccentricity"""
import numpy as np

from . import moments
from .noise import local_noise, photon_count


def eccentricity(window, noise, left=0, top=0):
    """Eccentricity of a feature from its second moments

    Parameters
    ----------
    window : numpy.ndarray
        Photon values
    noise : float
        Background level
    left, top : int, optional
        Image coordinates of the upper left pixel of `window`

    Returns
    -------
    ecc : float
        Eccentricity, ``sqrt(1 - λ2 / λ1)``
    major, minor : float
        Square roots of the eigenvalues λ1 and λ2 of the second moment
        tensor
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        l1, l2 = moments.eigenvalues(
            *moments.second_moments(window, noise, left, top))
        return np.sqrt(1 - l2 / l1), np.sqrt(l1), np.sqrt(l2)


class ShapeRejector:
    """Reject candidates which are too elongated to be single molecules

    The eccentricity threshold depends on the number of photons and the
    acceptance probability.
    """
    def __init__(self, stack, acceptance, disabled=False):
        """Parameters
        ----------
        stack : FrameStack
            Image data
        acceptance : float
            Probability of a real single molecule to pass
        disabled : bool, optional
            If `True`, compute eccentricities, but accept every candidate.
        """
        self.stack = stack
        self.acceptance = acceptance
        self.disabled = disabled

    def __call__(self, cand):
        """Compute shape descriptors and test the candidate

        Eccentricity, major and minor axis are stored in `cand`.

        Parameters
        ----------
        cand : Candidate
            Candidate to test

        Returns
        -------
        bool
            `True` if the candidate passes.
        """
        window, left, top = self.stack.window(cand.frame, cand.column,
                                              cand.row)
        noise = local_noise(window)
        with np.errstate(invalid="ignore"):
            thresh = moments.ecc_threshold(photon_count(window, noise),
                                           self.acceptance)
        cand.ecc, cand.major_axis, cand.minor_axis = eccentricity(
            window, noise, left, top)
        return self.disabled or not cand.ecc >= thresh
