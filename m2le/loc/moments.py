# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Image moments and empirical acceptance thresholds

The threshold curves and third moment scaling polynomials were calibrated
with simulated single molecule images. Their coefficients must not be
changed.
"""
import math

import numpy as np


def _coordinates(window, left, top):
    y, x = np.indices(window.shape)
    return x + left, y + top


def centroid(window, noise, left=0, top=0):
    """Background-corrected center of mass

    Parameters
    ----------
    window : numpy.ndarray
        Photon values
    noise : float
        Background level. Pixels below background are ignored.
    left, top : int, optional
        Image coordinates of the upper left pixel of `window`

    Returns
    -------
    x, y : float
        Center of mass
    """
    w = np.clip(window - noise, 0, None)
    x, y = _coordinates(window, left, top)
    total = w.sum()
    return (w * x).sum() / total, (w * y).sum() / total


def second_moments(window, noise, left=0, top=0):
    """Central second moments of the background-corrected intensity

    Parameters
    ----------
    window : numpy.ndarray
        Photon values
    noise : float
        Background level. Pixels below background are ignored.
    left, top : int, optional
        Image coordinates of the upper left pixel of `window`

    Returns
    -------
    xx, yy, xy : float
        Entries of the second moment tensor
    """
    w = np.clip(window - noise, 0, None)
    x, y = _coordinates(window, left, top)
    total = w.sum()
    cx = (w * x).sum() / total
    cy = (w * y).sum() / total
    xx = (w * x * x).sum() / total - cx * cx
    yy = (w * y * y).sum() / total - cy * cy
    xy = (w * x * y).sum() / total - cx * cy
    return xx, yy, xy


def eigenvalues(xx, yy, xy):
    """Eigenvalues of a symmetric 2x2 matrix

    Parameters
    ----------
    xx, yy, xy : float
        Matrix entries

    Returns
    -------
    float
        Larger eigenvalue
    float
        Smaller eigenvalue
    """
    trace = xx + yy
    diff = xx - yy
    spread = np.sqrt(4 * xy * xy + diff * diff)
    return (trace + spread) / 2, (trace - spread) / 2


def ecc_threshold(photons, acceptance):
    """Eccentricity threshold for a given photon count

    Parameters
    ----------
    photons : float
        Number of photons of the feature
    acceptance : float
        Probability (between 0 and 1) for a real single molecule to pass

    Returns
    -------
    float
        Threshold. Features with a larger eccentricity are rejected.
    """
    acc = 100 * acceptance
    x0h = acc - 89.952
    x0 = 61172 / (x0h * x0h + 1307.9) - 97.515
    y0 = 2.1759e-6 * acc**2.2837 + 0.082876
    ah = acc - 120.7
    a = 992.92 / (ah * ah - 35.069) + 2.9048
    return a / np.sqrt(photons - x0) + y0


def third_moment_threshold(photons, acceptance):
    """Third moment threshold for a given photon count

    Parameters
    ----------
    photons : float
        Number of photons of the feature
    acceptance : float
        Probability (between 0 and 1) for a real single molecule to pass

    Returns
    -------
    float
        Threshold for ``diff**2 + sum**2`` of the scaled third moment
        invariants
    """
    acc = 100 * acceptance
    a = 5.5801 + (-2.078e5) / ((acc - 147.95)**2 - 1909.1)
    x0 = -5135.6 + acc * (423.24 + acc * (-13.961 + acc * (
        0.22529 + acc * (-0.0017943 + acc * 5.648e-6))))
    y0 = -0.55942 + 30822 / ((acc - 183.86)**2 - 6524.8)
    return a / np.sqrt(photons - x0) + y0


def third_sum_scale(photons):
    """Expected third moment sum invariant of a single molecule"""
    return 10.246 + (0.1697 + (1.7027e-5 + 9.3532e-13 * photons) *
                     photons) * photons


def third_diff_scale(photons):
    """Expected third moment diff invariant of a single molecule"""
    return 41.227 + (0.64077 + (3.6687e-6 + 1.7874e-12 * photons) *
                     photons) * photons


_f = 0.14433756729740644  # 1 / sqrt(48)
_g = 0.25


def third_moments(window, noise, center, alpha, beta, rng, left=0, top=0,
                  n_samples=5):
    """Monte-Carlo estimate of third order Gauss-Hermite moments

    For each sample, the center is jittered by up to ±1/4 pixel in each
    direction. The background-corrected signal is projected onto the four
    third order Hermite modes weighted by a Gaussian mask around the
    jittered center. Results are averaged over all samples.

    Parameters
    ----------
    window : numpy.ndarray
        Photon values
    noise : float
        Background level
    center : tuple of float
        x and y coordinates of the feature
    alpha : float
        Inverse length scale of the Gaussian mask (1/pixel)
    beta : float
        Normalization factor
    rng : numpy.random.Generator
        Source of random numbers
    left, top : int, optional
        Image coordinates of the upper left pixel of `window`
    n_samples : int, optional
        Number of Monte-Carlo samples

    Returns
    -------
    m30, m21, m12, m03 : float
        Moments
    """
    s = window - noise
    x, y = _coordinates(window, left, top)
    jitter = (rng.random((n_samples, 2)) - 0.5) / 2

    m30 = m21 = m12 = m03 = 0.
    for dx, dy in jitter:
        x0 = (x - center[0] + dx) * alpha
        y0 = (y - center[1] + dy) * alpha
        sm = s * beta * np.exp(-(x0 * x0 + y0 * y0) / 2)
        m30 += (sm * _f * x0 * (8 * x0 * x0 - 12)).sum()
        m21 += (sm * _g * 2 * y0 * (4 * x0 * x0 - 2)).sum()
        m12 += (sm * _g * 2 * x0 * (4 * y0 * y0 - 2)).sum()
        m03 += (sm * _f * y0 * (8 * y0 * y0 - 12)).sum()
    return (m30 / n_samples, m21 / n_samples, m12 / n_samples,
            m03 / n_samples)


def third_moment_invariants(m30, m21, m12, m03):
    """Rotation invariant combinations of third moments

    Returns
    -------
    sum, diff : float
        Invariants
    """
    s = (m30 + m12)**2 + (m03 + m21)**2
    d = (3 * m12 - m30)**2 + (m03 - 3 * m21)**2
    return s, d


def mask_scales(wavelength, pixel_size, numerical_aperture, width):
    """Scaling factors of the third moment Gaussian mask

    Parameters
    ----------
    wavelength : float
        Emission wavelength in nm
    pixel_size : float
        Pixel size in nm
    numerical_aperture : float
        NA of the objective
    width : float
        Fitted width parameter of the feature

    Returns
    -------
    alpha : float
        Inverse mask size (1/pixel)
    beta : float
        Normalization factor
    """
    eff_wavelength = wavelength / (pixel_size * numerical_aperture)
    alpha = math.sqrt(8) * math.pi / (eff_wavelength * width)
    beta = math.sqrt(8 * math.pi) / (eff_wavelength * width)
    return alpha, beta
