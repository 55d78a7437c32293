# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Candidate records passed through the localization pipeline"""
import math

import numpy as np
import pandas as pd

from .. import config


class Candidate:
    """Potential single molecule

    Created by the detector for a bright pixel. Each following pipeline stage
    fills in more attributes or marks the candidate as rejected.

    Sub-pixel coordinates are such that the center of pixel (column, row) is
    located at ``x = column``, ``y = row``.
    """
    __slots__ = ["column", "row", "frame", "signal", "ecc", "major_axis",
                 "minor_axis", "x", "y", "intensity_x", "intensity_y",
                 "bg_x", "bg_y", "width_x", "width_y", "third_sum",
                 "third_diff", "rejected"]

    def __init__(self, column, row, frame, signal=math.nan):
        """Parameters
        ----------
        column, row : int
            Pixel coordinates
        frame : int
            Index of the frame in the stack
        signal : float, optional
            Photon count of the pixel
        """
        self.column = int(column)
        self.row = int(row)
        self.frame = int(frame)
        self.signal = float(signal)
        for a in self.__slots__[4:-1]:
            setattr(self, a, math.nan)
        self.rejected = False

    def __repr__(self):
        return ("Candidate(column={}, row={}, frame={}, x={:.3f}, y={:.3f}, "
                "rejected={})".format(self.column, self.row, self.frame,
                                      self.x, self.y, self.rejected))

    def reject(self):
        """Mark as rejected"""
        self.rejected = True

    @property
    def key(self):
        """Identity of the candidate: (frame, column, row)"""
        return self.frame, self.column, self.row

    @property
    def distance(self):
        """Distance between the fitted position and the pixel center"""
        return math.hypot(self.x - self.column, self.y - self.row)


@config.set_columns
def to_dataframe(candidates, pixel_size, frame_nos=None, columns={}):
    """Create a DataFrame from localized candidates

    Parameters
    ----------
    candidates : iterable of Candidate
        Localization results
    pixel_size : float
        Size of a pixel in nm, used to compute coordinates in nm
    frame_nos : sequence of int or None, optional
        Map of stack index to frame number. If `None`, the stack index is
        used.

    Returns
    -------
    pandas.DataFrame
        One row per candidate.

    Other parameters
    ----------------
    columns : dict, optional
        Override default column names as defined in
        :py:attr:`config.columns`.
    """
    candidates = list(candidates)
    fields = [("x", columns["coords"][0]), ("y", columns["coords"][1]),
              ("intensity_x", columns["signal"][0]),
              ("intensity_y", columns["signal"][1]),
              ("bg_x", columns["bg"][0]), ("bg_y", columns["bg"][1]),
              ("width_x", columns["size"][0]),
              ("width_y", columns["size"][1]),
              ("ecc", columns["ecc"]),
              ("major_axis", columns["axes"][0]),
              ("minor_axis", columns["axes"][1]),
              ("third_sum", columns["third_moments"][0]),
              ("third_diff", columns["third_moments"][1])]

    data = {col: np.array([getattr(c, attr) for c in candidates],
                          dtype=float)
            for attr, col in fields}
    ret = pd.DataFrame(data)
    x_col, y_col = columns["coords"]
    xnm_col, ynm_col = columns["coords_nm"]
    ret.insert(2, xnm_col, ret[x_col] * pixel_size)
    ret.insert(3, ynm_col, ret[y_col] * pixel_size)

    frames = np.array([c.frame for c in candidates], dtype=int)
    if frame_nos is not None:
        frames = np.asarray(frame_nos, dtype=int)[frames]
    ret[columns["time"]] = frames
    return ret
