# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Detection of candidate pixels"""
import numpy as np

from .data import Candidate
from .noise import NoiseGrid


margin = 3
"""Pixels this close to the image border are never candidates"""


def lane_of(index, num_frames, num_lanes):
    """Lane responsible for a frame

    Frames are distributed in contiguous blocks.

    Parameters
    ----------
    index : int
        Position of the frame in the stack
    num_frames : int
        Number of frames in the stack
    num_lanes : int
        Number of lanes

    Returns
    -------
    int
        Lane number
    """
    return min(num_lanes * index // num_frames, num_lanes - 1)


def lane_frames(num_frames, num_lanes):
    """Frames processed by each lane

    Parameters
    ----------
    num_frames : int
        Number of frames in the stack
    num_lanes : int
        Number of lanes

    Returns
    -------
    list of list of int
        For each lane, the stack indices of its frames in ascending order
    """
    ret = [[] for _ in range(num_lanes)]
    for i in range(num_frames):
        ret[lane_of(i, num_frames, num_lanes)].append(i)
    return ret


class Finder:
    """Find pixels which are significantly brighter than the background"""
    def __init__(self, stack, snr_cutoff, min_noise):
        """Parameters
        ----------
        stack : FrameStack
            Image data
        snr_cutoff : float
            Pixels brighter than `snr_cutoff` times the local noise are
            candidates
        min_noise : float
            Lowest possible noise estimate in photons
        """
        self.stack = stack
        self.snr_cutoff = snr_cutoff
        self.min_noise = min_noise

    def find(self, index):
        """Find candidates in a single frame

        Parameters
        ----------
        index : int
            Position of the frame in the stack

        Returns
        -------
        list of Candidate
            Sorted by column, then row
        """
        photons = self.stack.photons(index)
        noise = NoiseGrid(photons, self.min_noise)

        bright = photons > noise.expand() * self.snr_cutoff
        bright[:margin, :] = False
        bright[-margin:, :] = False
        bright[:, :margin] = False
        bright[:, -margin:] = False

        # transpose to get column-major order
        cols, rows = np.nonzero(bright.T)
        return [Candidate(c, r, index, photons[r, c])
                for c, r in zip(cols, rows)]
