# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Concurrent localization pipeline

Frames are distributed in contiguous blocks among a number of lanes. Each
lane runs the stages

1. candidate detection,
2. eccentricity test,
3. maximum likelihood fit,
4. third moment test,
5. duplicate removal (two passes),

after which all lanes are merged into a single output channel. Every stage
is finished in all lanes before the next stage starts.
"""
import logging

import numpy as np

from ..config import Options
from ..helper import Channel, LanePool
from .dedup import DuplicateFilter
from .find import Finder, lane_frames
from .fit import Localizer
from .shape import ShapeRejector
from .third_moment import ThirdMomentRejector


_logger = logging.getLogger(__name__)


class Pipeline:
    """Localize molecules in a frame stack

    Examples
    --------
    >>> stack = FrameStack(frames)
    >>> with Pipeline(stack, Options(snr_cutoff=5.), seed=0) as p:
    ...     results = list(p.run())
    """
    def __init__(self, stack, options=None, num_lanes=None, seed=None):
        """Parameters
        ----------
        stack : FrameStack
            Image data
        options : config.Options or None, optional
            Localization options. If `None`, use defaults.
        num_lanes : int or None, optional
            Number of lanes (and worker threads). Defaults to the number of
            CPUs.
        seed : int, numpy.random.SeedSequence, or None, optional
            Seed for the Monte-Carlo estimation of third moments. Runs with
            the same seed give identical results.
        """
        self.stack = stack
        self.options = Options() if options is None else options
        self.pool = LanePool(num_lanes)
        self.num_lanes = self.pool.num_lanes
        if not isinstance(seed, np.random.SeedSequence):
            seed = np.random.SeedSequence(seed)
        self.seed_sequence = seed
        self.dedup_filters = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.pool.shutdown()

    def _run_stage(self, name, func, sources):
        ret = self.pool.run_stage(name, func, sources)
        counts = [len(o) for o in ret]
        _logger.debug("Stage \"%s\": per-lane output counts %s", name, counts)
        _logger.info("Stage \"%s\" finished with %d records.", name,
                     sum(counts))
        return ret

    @staticmethod
    def _filter(test):
        def lane_func(lane, source, sink):
            for cand in source:
                if test(cand):
                    sink.put(cand)
                else:
                    cand.reject()
        return lane_func

    def detect(self):
        """Find candidate pixels

        Returns
        -------
        list of Channel
            Candidates for each lane
        """
        finder = Finder(self.stack, self.options.snr_cutoff,
                        self.options.min_noise)

        def lane_func(lane, frames, sink):
            for f in frames:
                for cand in finder.find(f):
                    sink.put(cand)

        return self._run_stage(
            "detect", lane_func, lane_frames(len(self.stack), self.num_lanes))

    def reject_shape(self, lanes):
        """Drop candidates that are too eccentric

        Parameters
        ----------
        lanes : list of Channel
            Output of :py:meth:`detect`

        Returns
        -------
        list of Channel
            Remaining candidates for each lane
        """
        rej = ShapeRejector(self.stack, self.options.ecc_threshold,
                            self.options.ecc_disabled)
        return self._run_stage("shape", self._filter(rej), lanes)

    def localize(self, lanes):
        """Fit candidates and drop failed fits

        Parameters
        ----------
        lanes : list of Channel
            Output of :py:meth:`reject_shape`

        Returns
        -------
        list of Channel
            Fitted candidates for each lane
        """
        loc = Localizer(self.stack, self.options)
        return self._run_stage("localize", self._filter(loc), lanes)

    def reject_third_moment(self, lanes):
        """Drop candidates with large third moments

        Parameters
        ----------
        lanes : list of Channel
            Output of :py:meth:`localize`

        Returns
        -------
        list of Channel
            Remaining candidates for each lane
        """
        rej = ThirdMomentRejector(self.stack, self.options,
                                  self.seed_sequence)
        return self._run_stage("third moment", self._filter(rej), lanes)

    def deduplicate(self, lanes):
        """Remove multiple detections of the same molecule

        Parameters
        ----------
        lanes : list of Channel
            Output of :py:meth:`reject_third_moment`

        Returns
        -------
        list of Channel
            Accepted candidates for each lane
        """
        self.dedup_filters = [
            DuplicateFilter(self.stack.width, self.stack.height)
            for _ in range(self.num_lanes)]

        def first_pass(lane, source, sink):
            flt = self.dedup_filters[lane]
            for cand in source:
                sink.put(flt.first_pass(cand))

        def second_pass(lane, source, sink):
            flt = self.dedup_filters[lane]
            for rec in source:
                cand = flt.second_pass(rec)
                if cand is not None:
                    sink.put(cand)

        provisional = self._run_stage("deduplicate (1st pass)", first_pass,
                                      lanes)
        late = sum(len(f.late_rejections) for f in self.dedup_filters)
        _logger.debug("%d late rejection(s) during duplicate removal.", late)
        return self._run_stage("deduplicate (2nd pass)", second_pass,
                               provisional)

    def merge(self, lanes):
        """Combine all lanes into a single channel

        Parameters
        ----------
        lanes : list of Channel
            Output of :py:meth:`deduplicate`

        Returns
        -------
        Channel
            Closed channel containing all accepted candidates
        """
        output = Channel()

        def lane_func(lane, source, sink):
            for cand in source:
                output.put(cand)

        try:
            self.pool.run_stage("merge", lane_func, lanes)
        finally:
            output.close()
        return output

    def run(self):
        """Run all stages

        Returns
        -------
        Channel
            Closed channel containing all accepted candidates. Iterate over
            it to retrieve them. Order within a lane is preserved; lanes are
            interleaved arbitrarily.

        Raises
        ------
        StageError
            If any stage failed in any lane
        """
        _logger.info("Localizing in %d frame(s) using %d lane(s).",
                     len(self.stack), self.num_lanes)
        for line in self.options.describe():
            _logger.debug("%s", line)

        lanes = self.detect()
        lanes = self.reject_shape(lanes)
        lanes = self.localize(lanes)
        lanes = self.reject_third_moment(lanes)
        lanes = self.deduplicate(lanes)
        return self.merge(lanes)
