# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Synthetic images of point emitters for testing the localization"""
import numpy as np


def simulate_gauss(shape, centers, amplitudes, sigmas, background=0.):
    """Noiseless image of Gaussian spots on a flat background

    Each spot is sampled at the pixel centers, which lie at integer
    coordinates, i.e., pixel ``img[row, column]`` is at ``x = column``,
    ``y = row``.

    Parameters
    ----------
    shape : tuple of int
        Image width and height. Note that the returned array has shape
        ``(height, width)``.
    centers : array_like, shape(n, 2)
        x and y coordinates of the spots
    amplitudes : float or array_like, shape(n)
        Peak heights above background
    sigmas : float or array_like, shape(2) or shape(n, 2)
        Widths of the spots. A single number applies to both axes of all
        spots.
    background : float, optional
        Added to every pixel

    Returns
    -------
    numpy.ndarray
    """
    centers = np.atleast_2d(np.asarray(centers, dtype=float))
    amplitudes = np.broadcast_to(amplitudes, len(centers))
    sigmas = np.broadcast_to(sigmas, centers.shape)

    x = np.arange(shape[0], dtype=float)
    y = np.arange(shape[1], dtype=float)
    # separable: outer product of 1D profiles per spot
    gx = np.exp(-(x[None, :] - centers[:, 0, None])**2 /
                (2 * sigmas[:, 0, None]**2))
    gy = np.exp(-(y[None, :] - centers[:, 1, None])**2 /
                (2 * sigmas[:, 1, None]**2))
    img = np.einsum("n,ny,nx->yx", amplitudes, gy, gx)
    return img + background
