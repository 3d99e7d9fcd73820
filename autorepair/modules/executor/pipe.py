"""
Bounded in-process pipe between a stream producer and a line consumer.

The write side accepts text chunks of any size; the read side yields
complete lines in the order they were written. Closing the write side
ends the read side's iteration once everything written has been
drained. Closing the read side makes further writes fail with
BrokenPipeError so that a producer never blocks on a reader that left.
"""

import threading
from queue import Empty, Full, Queue
from typing import Iterator, Optional, Union

_EOF = object()


class OutputPipe:
    """Ordered, bounded chunk channel with line-oriented reading."""

    def __init__(self, maxsize: int = 64, poll_interval: float = 0.1, max_line_length: int = 65536):
        """
        Args:
            maxsize: Maximum number of chunks buffered before writers block
            poll_interval: Seconds between checks of the close/cancel flags
            max_line_length: Longest run held back waiting for a newline

        """
        self._queue: Queue = Queue(maxsize=maxsize)
        self._poll_interval = poll_interval
        self._max_line_length = max_line_length
        self._write_closed = threading.Event()
        self._read_closed = threading.Event()

    @property
    def read_closed(self) -> bool:
        return self._read_closed.is_set()

    def write(self, data: Union[str, bytes]) -> None:
        """
        Queue a chunk for the reader, blocking while the buffer is full.

        Raises:
            ValueError: If the write side is already closed
            BrokenPipeError: If the read side is closed
        """
        if self._write_closed.is_set():
            raise ValueError("write to a closed pipe")
        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")
        if not data:
            return
        self._put(data)

    def close_write(self) -> None:
        """Signal end of output. Safe to call more than once."""
        if self._write_closed.is_set():
            return
        self._write_closed.set()
        try:
            self._put(_EOF)
        except BrokenPipeError:
            pass  # nobody left to read the EOF

    def close_read(self) -> None:
        """Stop reading and discard anything still buffered. Safe to call more than once."""
        self._read_closed.set()
        while True:
            try:
                self._queue.get_nowait()
            except Empty:
                break

    def _put(self, item) -> None:
        while True:
            if self._read_closed.is_set():
                raise BrokenPipeError("pipe reader is closed")
            try:
                self._queue.put(item, timeout=self._poll_interval)
            except Full:
                continue
            # close_read() drains the queue, which can let a blocked put through
            if self._read_closed.is_set():
                raise BrokenPipeError("pipe reader is closed")
            return

    def lines(self, cancel: Optional[threading.Event] = None) -> Iterator[str]:
        """
        Yield complete lines until the write side closes.

        A trailing line without a newline is yielded once the write side
        closes. Output that runs past max_line_length without a newline is
        yielded in pieces of that length. Iteration stops early, without
        flushing, when cancel is set. The read side is closed when iteration ends for any reason.
        """
        pending = ""
        try:
            while True:
                if cancel is not None and cancel.is_set():
                    return
                try:
                    chunk = self._queue.get(timeout=self._poll_interval)
                except Empty:
                    continue

                if chunk is _EOF:
                    break

                pending += chunk
                *complete, pending = pending.split("\n")
                for line in complete:
                    yield line.rstrip("\r")
                while len(pending) >= self._max_line_length:
                    yield pending[:self._max_line_length]
                    pending = pending[self._max_line_length:]

            if pending:
                yield pending.rstrip("\r")
        finally:
            self.close_read()
