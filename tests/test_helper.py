# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

import threading
import unittest

import pytest

from m2le.exceptions import StageError
from m2le.helper import Channel, ChannelClosed, LanePool


class TestChannel(unittest.TestCase):
    def test_iterate(self):
        """helper.Channel: put, close, iterate"""
        ch = Channel()
        for i in range(3):
            ch.put(i)
        self.assertEqual(len(ch), 3)
        ch.close()
        self.assertTrue(ch.closed)
        self.assertEqual(len(ch), 3)
        self.assertEqual(list(ch), [0, 1, 2])
        self.assertEqual(len(ch), 0)
        # exhausted channels stay exhausted
        self.assertEqual(list(ch), [])

    def test_put_closed(self):
        """helper.Channel: put into closed channel"""
        ch = Channel()
        ch.close()
        ch.close()
        with self.assertRaises(ChannelClosed):
            ch.put(1)
        self.assertEqual(list(ch), [])

    def test_none_is_data(self):
        """helper.Channel: `None` and other falsy items are data"""
        ch = Channel()
        ch.put(None)
        ch.put(0)
        ch.close()
        self.assertEqual(list(ch), [None, 0])

    def test_threads(self):
        """helper.Channel: producer and consumer in different threads"""
        ch = Channel()
        result = []

        def consume():
            result.extend(ch)

        t = threading.Thread(target=consume)
        t.start()
        for i in range(100):
            ch.put(i)
        ch.close()
        t.join(timeout=10)
        self.assertFalse(t.is_alive())
        self.assertEqual(result, list(range(100)))


class TestLanePool:
    def test_run_stage(self):
        """helper.LanePool.run_stage: one task per lane"""
        def double(lane, source, sink):
            for x in source:
                sink.put((lane, 2 * x))

        with LanePool(3) as pool:
            assert pool.num_lanes == 3
            out = pool.run_stage("double", double, [[1, 2], [], [3]])
            assert all(o.closed for o in out)
            assert [list(o) for o in out] == [[(0, 2), (0, 4)], [],
                                              [(2, 6)]]

            # pool can be reused
            out = pool.run_stage("double", double, [[5], [6], [7]])
            assert [list(o) for o in out] == [[(0, 10)], [(1, 12)],
                                              [(2, 14)]]

    def test_chained(self):
        """helper.LanePool.run_stage: output of one stage feeds the next"""
        def inc(lane, source, sink):
            for x in source:
                sink.put(x + 1)

        with LanePool(2) as pool:
            out = pool.run_stage("a", inc, [[0, 1], [10]])
            out = pool.run_stage("b", inc, out)
        assert [list(o) for o in out] == [[2, 3], [12]]

    def test_barrier(self):
        """helper.LanePool.run_stage: return only after all lanes finished"""
        finished = []
        ev = threading.Event()

        def work(lane, source, sink):
            if lane == 0:
                ev.wait(5)
            else:
                ev.set()
            finished.append(lane)

        with LanePool(2) as pool:
            pool.run_stage("wait", work, [None, None])
            assert sorted(finished) == [0, 1]

    def test_error(self):
        """helper.LanePool.run_stage: exceptions are raised as StageError"""
        def fail(lane, source, sink):
            sink.put(lane)
            if lane == 1:
                raise RuntimeError("boom")

        with LanePool(2) as pool:
            with pytest.raises(StageError) as exc_info:
                pool.run_stage("fail", fail, [None, None])
        err = exc_info.value
        assert err.stage == "fail"
        assert list(err.lane_errors) == [1]
        assert isinstance(err.lane_errors[1], RuntimeError)
        assert "fail" in str(err)

    def test_num_lanes(self):
        """helper.LanePool: number of lanes"""
        with pytest.raises(ValueError):
            LanePool(0)
        with LanePool(2) as pool:
            with pytest.raises(ValueError):
                pool.run_stage("x", lambda *a: None, [None])
