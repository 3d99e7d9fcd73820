"""
Tests for OutputRelay: ordering, stream failures, cancellation and teardown.
"""

import threading

import pytest

from autorepair.modules.api import PipeTeardownError, StreamError
from autorepair.modules.executor import OutputRelay
from conftest import FakeExecStream


def _relay(stream, **kwargs):
    kwargs.setdefault("poll_interval", 0.01)
    kwargs.setdefault("teardown_timeout", 2.0)
    return OutputRelay(stream, name="db/cassandra-0", **kwargs)


@pytest.mark.exec_mock
class TestRelayOrdering:

    def test_lines_delivered_in_order(self):
        lines = [f"[2026-10-18 00:00:{i:02d}] Repair session {i}" for i in range(50)]
        stream = FakeExecStream(stdout=[l + "\n" for l in lines])
        relay = _relay(stream)

        assert list(relay.lines()) == lines
        assert relay.error is None
        assert stream.closed

    def test_lines_split_across_frames(self):
        stream = FakeExecStream(stdout=["Starting repair com", "mand #1\nRepair", " completed\n"])

        assert list(_relay(stream).lines()) == ["Starting repair command #1", "Repair completed"]

    def test_stderr_is_merged(self):
        stream = FakeExecStream(stdout=["out\n"], stderr=["err\n"])

        assert list(_relay(stream).lines()) == ["out", "err"]

    def test_small_buffer(self):
        lines = [f"line {i}" for i in range(200)]
        stream = FakeExecStream(stdout=[l + "\n" for l in lines])

        assert list(_relay(stream, buffer_lines=1).lines()) == lines

    def test_empty_output(self):
        assert list(_relay(FakeExecStream()).lines()) == []

    def test_not_restartable(self):
        relay = _relay(FakeExecStream(stdout=["a\n"]))
        list(relay.lines())

        with pytest.raises(RuntimeError):
            list(relay.lines())


@pytest.mark.exec_mock
class TestRelayErrors:

    def test_stream_error_keeps_received_lines(self):
        stream = FakeExecStream(
            stdout=["first\n", "second\n"],
            error=ConnectionResetError("websocket closed"),
            error_after=2,
        )
        relay = _relay(stream)

        assert list(relay.lines()) == ["first", "second"]
        assert isinstance(relay.error, ConnectionResetError)
        assert stream.closed

    def test_nonzero_exit_recorded(self):
        stream = FakeExecStream(stdout=["error: JMX connection refused\n"], returncode=2)
        relay = _relay(stream)

        assert list(relay.lines()) == ["error: JMX connection refused"]
        assert isinstance(relay.error, StreamError)
        assert relay.error.returncode == 2

    def test_unreadable_exit_status_is_not_an_error(self):
        class NoStatusStream(FakeExecStream):
            @property
            def returncode(self):
                raise TypeError("'NoneType' object is not subscriptable")

        relay = _relay(NoStatusStream(stdout=["ok\n"]))

        assert list(relay.lines()) == ["ok"]
        assert relay.error is None


@pytest.mark.exec_mock
class TestRelayCancellation:

    def test_cancel_closes_remote_stream(self):
        stream = FakeExecStream(stdout=["started\n"], hang=True)
        cancel = threading.Event()
        relay = _relay(stream, cancel=cancel)

        received = []
        for line in relay.lines():
            received.append(line)
            cancel.set()

        assert received == ["started"]
        assert stream.closed
        assert relay.error is None

    def test_consumer_abandoning_stops_producer(self):
        stream = FakeExecStream(stdout=["a\n"], hang=True)
        relay = _relay(stream)

        lines = relay.lines()
        assert next(lines) == "a"
        lines.close()

        assert stream.closed

    def test_stuck_producer_raises_teardown_error(self):
        release = threading.Event()
        stream = FakeExecStream(hang=True, block=release)
        cancel = threading.Event()
        relay = _relay(stream, cancel=cancel, teardown_timeout=0.05)
        threading.Timer(0.05, cancel.set).start()

        try:
            with pytest.raises(PipeTeardownError):
                list(relay.lines())
        finally:
            release.set()
