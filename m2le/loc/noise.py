# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Estimation of the background noise level"""
import numpy as np


tile_size = 16
"""Width and height of the tiles used by :py:class:`NoiseGrid`"""


class NoiseGrid:
    """Tiled noise estimate of a frame

    The frame is divided into square tiles of :py:data:`tile_size` pixels.
    For each tile, the median (the upper one for an even number of pixels)
    of the pixel values is used as noise estimate, but not less than
    `min_noise`. Tiles at the right and bottom borders may be smaller.
    """
    def __init__(self, photons, min_noise):
        """Parameters
        ----------
        photons : numpy.ndarray
            Frame in photon units
        min_noise : float
            Lowest possible noise estimate
        """
        photons = np.asarray(photons)
        self.shape = photons.shape
        n_rows = -(-self.shape[0] // tile_size)
        n_cols = -(-self.shape[1] // tile_size)

        self.tiles = np.empty((n_rows, n_cols))
        """Noise estimate for each tile"""
        for r in range(n_rows):
            for c in range(n_cols):
                t = photons[r*tile_size:(r+1)*tile_size,
                            c*tile_size:(c+1)*tile_size]
                s = np.sort(t, axis=None)
                self.tiles[r, c] = s[len(s) // 2]
        np.maximum(self.tiles, min_noise, out=self.tiles)

    def __call__(self, x, y):
        """Noise estimate at pixel (x, y)"""
        return self.tiles[y // tile_size, x // tile_size]

    def expand(self):
        """Noise estimate for each pixel

        Returns
        -------
        numpy.ndarray
            Same shape as the frame
        """
        full = np.repeat(np.repeat(self.tiles, tile_size, axis=0),
                         tile_size, axis=1)
        return full[:self.shape[0], :self.shape[1]]


def local_noise(window):
    """Estimate the background in a small region around a feature

    This is the smallest of all row and column averages.

    Parameters
    ----------
    window : numpy.ndarray
        Photon values

    Returns
    -------
    float
        Noise estimate
    """
    return min(window.mean(axis=0).min(), window.mean(axis=1).min())


def photon_count(window, noise):
    """Sum of background-corrected photons, ignoring pixels below background

    Parameters
    ----------
    window : numpy.ndarray
        Photon values
    noise : float
        Background level

    Returns
    -------
    float
        Number of photons
    """
    return np.clip(window - noise, 0, None).sum()
