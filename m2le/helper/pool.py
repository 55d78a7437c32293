# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

import logging
import multiprocessing
from concurrent.futures import ThreadPoolExecutor

from .channel import Channel
from ..exceptions import StageError


_logger = logging.getLogger(__name__)

num_cpus = multiprocessing.cpu_count()


class LanePool:
    """Persistent pool of worker threads running one task per lane

    The same threads are reused for every stage. :py:meth:`run_stage` acts
    as a barrier: it returns only after all lanes have finished.

    Use as a context manager to make sure the threads are shut down.
    """
    def __init__(self, num_lanes=None):
        """Parameters
        ----------
        num_lanes : int or None, optional
            Number of lanes (and threads). Defaults to the number of CPUs.
        """
        if num_lanes is None:
            num_lanes = num_cpus
        if num_lanes < 1:
            raise ValueError("`num_lanes` has to be positive.")
        self.num_lanes = num_lanes
        self._executor = ThreadPoolExecutor(max_workers=num_lanes,
                                            thread_name_prefix="m2le-lane")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def shutdown(self):
        """Stop all worker threads"""
        self._executor.shutdown(wait=True)

    def run_stage(self, name, func, sources):
        """Run a stage in all lanes and wait for completion

        For each lane, ``func(lane, sources[lane], sink)`` is called in a
        worker thread, where `sink` is a new :py:class:`Channel`. `sink` is
        closed when `func` returns or raises.

        Parameters
        ----------
        name : str
            Name of the stage, used for logging and error reporting
        func : callable
            Lane worker function
        sources : sequence
            One input per lane, typically the channels returned by the
            previous stage.

        Returns
        -------
        list of Channel
            One closed output channel per lane

        Raises
        ------
        StageError
            If `func` raised in any lane. All lanes are allowed to finish
            before raising.
        """
        if len(sources) != self.num_lanes:
            raise ValueError("Need exactly one source per lane.")

        sinks = [Channel() for _ in range(self.num_lanes)]
        futures = [self._executor.submit(self._run_lane, name, func, lane,
                                         src, snk)
                   for lane, (src, snk) in enumerate(zip(sources, sinks))]

        errors = {}
        for lane, fut in enumerate(futures):
            exc = fut.exception()
            if exc is not None:
                errors[lane] = exc
        if errors:
            raise StageError(name, errors) from next(iter(errors.values()))
        return sinks

    @staticmethod
    def _run_lane(name, func, lane, source, sink):
        try:
            func(lane, source, sink)
        except Exception:
            _logger.exception("Stage \"%s\" failed in lane %d.", name, lane)
            raise
        finally:
            sink.close()
