# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Removal of multiple detections of the same molecule

Bright molecules usually give rise to several candidate pixels, all of which
may be fitted successfully. Of all candidates whose footprints (square regions
around the candidate pixel) overlap, only the one with the fitted position
closest to its pixel center is kept.

Conflicts are resolved in two passes. The first pass assigns each candidate an
index and immediately emits a provisional record. A later candidate may win
against an already emitted one, which is then rejected after the fact (a
*late rejection*). The second pass, run once the first one has finished,
commits each provisional record according to the final verdict for its index.
"""
import collections
import logging

import numpy as np


_logger = logging.getLogger(__name__)

footprint_radius = 3
"""Footprints extend this many pixels in each direction"""


Provisional = collections.namedtuple("Provisional", ["index", "candidate"])
"""Record emitted by :py:meth:`DuplicateFilter.first_pass`"""


class DuplicateFilter:
    """Conflict resolution for the candidates of one lane

    Candidates have to be passed to :py:meth:`first_pass` sorted by frame.
    The conflict grid is reset whenever the frame changes, so candidates
    from different frames never conflict.

    Attributes
    ----------
    late_rejections : list of int
        Indices of candidates which were rejected after having been emitted
        as accepted, in order of occurrence
    """
    def __init__(self, width, height):
        """Parameters
        ----------
        width, height : int
            Frame size
        """
        self.width = width
        self.height = height
        self._owner = np.full((height, width), -1, dtype=int)
        self._owner_dist = np.full((height, width), np.inf)
        self._frame = None
        self._candidates = []
        self._rejected = []
        self.late_rejections = []

    def __len__(self):
        return len(self._candidates)

    def _footprint(self, cand):
        r = footprint_radius
        return (slice(max(0, cand.row - r), min(self.height, cand.row + r + 1)),
                slice(max(0, cand.column - r),
                      min(self.width, cand.column + r + 1)))

    def _reject(self, index):
        if not self._rejected[index]:
            self._rejected[index] = True
            self._candidates[index].reject()
            self.late_rejections.append(index)

    def first_pass(self, cand):
        """Resolve conflicts of a new candidate with previous ones

        Parameters
        ----------
        cand : Candidate
            New candidate

        Returns
        -------
        Provisional
            Index and candidate. Emit this downstream immediately, even if
            the candidate is already rejected.
        """
        if cand.frame != self._frame:
            self._owner.fill(-1)
            self._owner_dist.fill(np.inf)
            self._frame = cand.frame

        index = len(self._candidates)
        dist = cand.distance
        self._candidates.append(cand)
        self._rejected.append(bool(cand.rejected))

        other = self._owner[cand.row, cand.column]
        if other >= 0:
            if self._owner_dist[cand.row, cand.column] < dist:
                cand.reject()
                self._rejected[index] = True
            else:
                self._reject(other)
                fp = self._footprint(self._candidates[other])
                lost = self._owner[fp] == other
                self._owner[fp][lost] = -1
                self._owner_dist[fp][lost] = np.inf

        fp = self._footprint(cand)
        closer = self._owner_dist[fp] > dist
        self._owner[fp][closer] = index
        self._owner_dist[fp][closer] = dist

        return Provisional(index, cand)

    def is_rejected(self, index):
        """Final verdict for a provisional record

        Only meaningful after all candidates went through
        :py:meth:`first_pass`.
        """
        return self._rejected[index]

    def second_pass(self, record):
        """Commit a provisional record

        Parameters
        ----------
        record : Provisional
            Emitted by :py:meth:`first_pass`

        Returns
        -------
        Candidate or None
            The candidate if it was not rejected, else `None`.
        """
        if self._rejected[record.index]:
            return None
        return self._candidates[record.index]
