# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

import queue
import threading


class ChannelClosed(RuntimeError):
    """Attempted to put an item into a closed :py:class:`Channel`"""
    pass


class Channel:
    """Closable, unbounded FIFO for passing items between threads

    Any number of threads may :py:meth:`put` items, but there must be only
    a single consumer. Once the consumer has taken the end marker, a second
    consumer would block forever. Closing the channel signals that no more
    items will follow. Iterating yields items in insertion order until the
    channel is closed and empty. The end marker itself is never handed out.
    """
    _closed_marker = object()

    def __init__(self):
        self._queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._exhausted = False

    @property
    def closed(self):
        """Whether :py:meth:`close` was called"""
        return self._closed

    def put(self, item):
        """Append an item

        Parameters
        ----------
        item
            Anything

        Raises
        ------
        ChannelClosed
            The channel was already closed.
        """
        with self._lock:
            if self._closed:
                raise ChannelClosed("Cannot put into a closed channel.")
            self._queue.put(item)

    def close(self):
        """Mark the end of the stream

        Calling this more than once has no effect.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(self._closed_marker)

    def __len__(self):
        """Number of items waiting to be retrieved"""
        n = self._queue.qsize()
        if self._closed and not self._exhausted:
            n -= 1
        return n

    def get(self):
        """Remove and return the next item, blocking if necessary

        Returns
        -------
        item
            Next item in the channel

        Raises
        ------
        StopIteration
            The channel is closed and all items have been consumed.
        """
        if self._exhausted:
            raise StopIteration
        item = self._queue.get()
        if item is self._closed_marker:
            self._exhausted = True
            raise StopIteration
        return item

    def __iter__(self):
        return self

    def __next__(self):
        return self.get()
