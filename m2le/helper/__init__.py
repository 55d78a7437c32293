# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Helper classes for concurrent processing
========================================

The :py:mod:`m2le.helper` package provides the plumbing used by the
localization pipeline:

- :py:class:`Channel`, a closable, thread-safe FIFO. Closing the channel
  marks the end of the data stream; iterating a channel yields items until
  it was closed and drained.
- :py:class:`LanePool`, a persistent pool of worker threads which runs one
  task per lane and waits for all of them to finish before returning.


Examples
--------

>>> ch = Channel()
>>> ch.put(1)
>>> ch.put(2)
>>> ch.close()
>>> list(ch)
[1, 2]

>>> def double(lane, source, sink):
...     for x in source:
...         sink.put(2 * x)
>>> with LanePool(2) as pool:
...     out = pool.run_stage("double", double, [[1, 2], [3]])
>>> [list(o) for o in out]
[[2, 4], [6]]


Programming reference
---------------------

.. autoclass:: Channel
    :members:
.. autoclass:: LanePool
    :members:
"""
from .channel import Channel, ChannelClosed  # noqa: F401
from .pool import LanePool  # noqa: F401
