"""
Streaming output relay.

A background thread pumps the exec websocket into an OutputPipe while the
caller iterates complete lines from the other end. Failures on the remote
side are recorded on the relay and logged; they end the line sequence but
never raise into the consumer.
"""

import logging
import threading
from typing import Any, Iterator, Optional

from ..api.errors import PipeTeardownError, StreamError
from .pipe import OutputPipe

logger = logging.getLogger("autorepair.executor.relay")


class OutputRelay:
    """Relays one exec session's combined output as lines. Single use."""

    def __init__(
        self,
        handle: Any,
        cancel: Optional[threading.Event] = None,
        buffer_lines: int = 64,
        poll_interval: float = 1.0,
        teardown_timeout: float = 10.0,
        name: str = "relay",
    ):
        """
        Initialize relay.

        Args:
            handle: Exec websocket client (kubernetes.stream.ws_client.WSClient)
            cancel: Run-scoped event; setting it closes the stream and ends iteration
            buffer_lines: Pipe capacity in chunks
            poll_interval: Seconds to wait for remote data per update
            teardown_timeout: Seconds to wait for the producer thread after reading ends
            name: Label used for the producer thread and log messages
        """
        self.handle = handle
        self.cancel = cancel or threading.Event()
        self.pipe = OutputPipe(maxsize=buffer_lines)
        self.poll_interval = poll_interval
        self.teardown_timeout = teardown_timeout
        self.name = name
        self.error: Optional[BaseException] = None
        self._started = False
        self._producer = threading.Thread(
            target=self._produce, daemon=True, name=f"relay-{name}"
        )

    def lines(self) -> Iterator[str]:
        """
        Yield output lines in the order the remote command emitted them.

        Raises:
            RuntimeError: If the relay has already been started
            PipeTeardownError: If the producer thread does not stop after reading ends
        """
        if self._started:
            raise RuntimeError(f"Relay {self.name} cannot be restarted")
        self._started = True
        self._producer.start()

        try:
            yield from self.pipe.lines(self.cancel)
        finally:
            self._teardown()

    def _produce(self) -> None:
        """Pump the websocket into the pipe until the remote side closes."""
        try:
            while self.handle.is_open():
                if self.cancel.is_set():
                    logger.info(f"Relay {self.name} cancelled; closing remote stream")
                    return
                if self.pipe.read_closed:
                    logger.debug(f"Relay {self.name} reader closed before the stream ended")
                    return
                self.handle.update(timeout=self.poll_interval)
                self._forward()

            # Frames received together with the close are already buffered
            self._forward()
            self._check_returncode()

        except BrokenPipeError:
            logger.debug(f"Relay {self.name} reader closed before the stream ended")
        except Exception as e:
            self.error = e
            logger.error(f"Relay {self.name} stream failed: {e}")
        finally:
            try:
                self.handle.close()
            except Exception as e:
                logger.warning(f"Relay {self.name} failed to close remote stream: {e}")
            self.pipe.close_write()

    def _forward(self) -> None:
        if self.handle.peek_stdout():
            self.pipe.write(self.handle.read_stdout())
        if self.handle.peek_stderr():
            self.pipe.write(self.handle.read_stderr())

    def _check_returncode(self) -> None:
        try:
            returncode = self.handle.returncode
        except (TypeError, KeyError, IndexError, ValueError) as e:
            # Status frame missing or malformed
            logger.warning(f"Relay {self.name} exit status unavailable: {e}")
            return
        if returncode:
            self.error = StreamError(
                f"command exited with status {returncode}", returncode=returncode
            )
            logger.error(f"Relay {self.name} remote command exited with status {returncode}")

    def _teardown(self) -> None:
        self.pipe.close_read()
        self._producer.join(self.teardown_timeout)
        if self._producer.is_alive():
            raise PipeTeardownError(
                f"Relay {self.name} producer still running after {self.teardown_timeout}s"
            )
