# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Read-only access to image stacks in photon units"""
from typing import Iterable, Optional, Tuple

import numpy as np


class FrameStack:
    """Sequence of equally shaped frames

    Pixel values are converted to photons by dividing by :py:attr:`scale`,
    which is the ratio of the data type's largest value and the camera's
    saturation point. Frames are never modified.

    Frames are indexed ``frame[row, column]``. The frame number reported for
    each frame is taken from its ``frame_no`` attribute, if present, and is
    its index in the stack otherwise.
    """
    def __init__(self, frames: Iterable[np.ndarray],
                 saturation: float = 65535.,
                 bit_depth: Optional[int] = None):
        """Parameters
        ----------
        frames
            Image data. Either a 3D array or an iterable of 2D arrays.
        saturation
            Saturation point of the camera in digital units.
        bit_depth
            Number of bits per pixel. If `None`, use 8 for 8-bit integer
            data and 16 for everything else.
        """
        self._frames = []
        self.frame_nos = []
        for i, f in enumerate(frames):
            a = np.asarray(f)
            if a.ndim != 2:
                raise ValueError("Frames have to be 2D arrays.")
            if self._frames and a.shape != self._frames[0].shape:
                raise ValueError("All frames need to have the same shape.")
            self._frames.append(a)
            self.frame_nos.append(int(getattr(f, "frame_no", i)))
        if not self._frames:
            raise ValueError("Empty `frames`")

        if bit_depth is None:
            bit_depth = 8 if self._frames[0].dtype == np.uint8 else 16
        self.max_value = 2**bit_depth - 1
        """Largest pixel value representable by the data type"""
        self.saturation = saturation
        """Camera saturation point in digital units"""
        self.scale = self.max_value / saturation
        """Divide pixel values by this to get photons"""

    def __len__(self):
        return len(self._frames)

    @property
    def height(self) -> int:
        return self._frames[0].shape[0]

    @property
    def width(self) -> int:
        return self._frames[0].shape[1]

    def photons(self, index: int) -> np.ndarray:
        """Whole frame in photon units

        Parameters
        ----------
        index
            Position of the frame in the stack

        Returns
        -------
        2D array of float
        """
        return self._frames[index] / self.scale

    def window(self, index: int, column: int, row: int, radius: int = 3
               ) -> Tuple[np.ndarray, int, int]:
        """Get the photons of a square region around a pixel

        The region is ``2 * radius + 1`` pixels wide and high, clipped at the
        image boundaries.

        Parameters
        ----------
        index
            Position of the frame in the stack
        column, row
            Center pixel
        radius
            Number of pixels on each side of the center

        Returns
        -------
        window
            Photon values, indexed ``window[row, column]``
        left, top
            Image coordinates of the upper left pixel of `window`
        """
        left = max(0, column - radius)
        right = min(self.width, column + radius + 1)
        top = max(0, row - radius)
        bottom = min(self.height, row + radius + 1)
        w = self._frames[index][top:bottom, left:right] / self.scale
        return w, left, top
