"""
Shared pytest fixtures for autorepair tests.

This module provides common fixtures including:
- FakeExecStream: Stand-in for the kubernetes exec websocket client
- ExecMocker: Records exec requests and hands out canned streams per pod
- Instance factories for building namespace snapshots
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from autorepair.config.provider import DEFAULT_ANNOTATION_KEY, RepairConfig
from autorepair.modules.api.models import Instance
from autorepair.modules.executor import RemoteCommandInvoker


# =============================================================================
# Exec Stream Mocking Infrastructure
# =============================================================================

class FakeExecStream:
    """
    Mimics kubernetes.stream.ws_client.WSClient as used by OutputRelay.

    Each update() moves the next queued stdout/stderr chunk into the read
    buffer. The stream reports closed once every chunk has been delivered,
    unless hang=True, in which case it stays open until close() is called.
    """

    def __init__(
        self,
        stdout: Sequence[str] = (),
        stderr: Sequence[str] = (),
        returncode: Optional[int] = 0,
        error: Optional[BaseException] = None,
        error_after: int = 0,
        hang: bool = False,
        block: Optional[threading.Event] = None,
    ):
        self._stdout = list(stdout)
        self._stderr = list(stderr)
        self._out_buf = ""
        self._err_buf = ""
        self._returncode = returncode
        self.error = error
        self.error_after = error_after
        self.hang = hang
        self.block = block
        self.closed = False
        self.updates = 0

    def is_open(self) -> bool:
        if self.closed:
            return False
        return self.hang or self.error is not None or bool(self._stdout or self._stderr)

    def update(self, timeout=0):
        self.updates += 1
        if self.block is not None:
            self.block.wait()
        if self.error is not None and self.updates > self.error_after:
            raise self.error
        if self._stdout:
            self._out_buf += self._stdout.pop(0)
        if self._stderr:
            self._err_buf += self._stderr.pop(0)
        if self.hang and not (self._out_buf or self._err_buf):
            time.sleep(0.005)

    def peek_stdout(self, timeout=0) -> bool:
        return bool(self._out_buf)

    def read_stdout(self, timeout=None) -> str:
        data, self._out_buf = self._out_buf, ""
        return data

    def peek_stderr(self, timeout=0) -> bool:
        return bool(self._err_buf)

    def read_stderr(self, timeout=None) -> str:
        data, self._err_buf = self._err_buf, ""
        return data

    def close(self, **kwargs):
        self.closed = True

    @property
    def returncode(self):
        if self.is_open():
            return None
        return self._returncode


@dataclass
class ExecCall:
    """Record of an exec request made during testing."""
    pod_name: str
    namespace: str
    kwargs: Dict = field(default_factory=dict)


class ExecMocker:
    """
    Replacement for kubernetes.stream.stream.

    Usage:
        def test_repair(exec_mocker):
            exec_mocker.register("cassandra-0", FakeExecStream(stdout=["done\\n"]))
            invoker = exec_mocker.invoker()
            ...
            assert exec_mocker.was_called_for("cassandra-0")
    """

    def __init__(self):
        self._streams: Dict[str, object] = {}
        self._call_history: List[ExecCall] = []

    def register(self, pod_name: str, stream) -> "ExecMocker":
        """Register a stream (or an exception to raise) for a pod."""
        self._streams[pod_name] = stream
        return self

    def register_scenario(self, pod_name: str, scenario_name: str) -> "ExecMocker":
        """
        Register a canned nodetool output scenario for a pod.

        Args:
            pod_name: Pod the scenario applies to
            scenario_name: One of the scenarios in fixtures/nodetool_output.py
        """
        from fixtures.nodetool_output import get_scenario

        return self.register(pod_name, get_scenario(scenario_name))

    def __call__(self, api_method, pod_name, namespace, **kwargs):
        self._call_history.append(ExecCall(pod_name=pod_name, namespace=namespace, kwargs=kwargs))
        stream = self._streams.get(pod_name)
        if stream is None:
            stream = FakeExecStream()
        if isinstance(stream, BaseException):
            raise stream
        return stream

    def invoker(self, command: Optional[List[str]] = None) -> RemoteCommandInvoker:
        return RemoteCommandInvoker(
            core_v1=MagicMock(),
            command=command or ["nodetool", "repair", "-pr"],
            stream_func=self,
        )

    @property
    def calls(self) -> List[ExecCall]:
        return self._call_history

    @property
    def called_pods(self) -> List[str]:
        return [c.pod_name for c in self._call_history]

    def was_called_for(self, pod_name: str) -> bool:
        return pod_name in self.called_pods


@pytest.fixture
def exec_mocker():
    return ExecMocker()


# =============================================================================
# Snapshot Factories
# =============================================================================

def make_instance(
    name: str,
    containers: Sequence[str] = ("cassandra",),
    phase: str = "Running",
    annotation: Optional[str] = "cassandra",
    namespace: str = "cassandra",
    annotation_key: str = DEFAULT_ANNOTATION_KEY,
) -> Instance:
    """Build an Instance; annotation=None leaves the autorepair annotation off."""
    annotations = {"app.kubernetes.io/name": "cassandra"}
    if annotation is not None:
        annotations[annotation_key] = annotation
    return Instance(
        name=name,
        namespace=namespace,
        phase=phase,
        annotations=annotations,
        containers=list(containers),
    )


@pytest.fixture
def scenario_instances():
    """Three pods: single-container, two-container, and one still pending."""
    return [
        make_instance("c1", containers=["cassandra"]),
        make_instance("c2", containers=["cassandra", "sidecar"]),
        make_instance("c3", containers=["cassandra"], phase="Pending"),
    ]


@pytest.fixture
def fast_config():
    """Repair config tuned so relays poll and tear down quickly."""
    return RepairConfig(poll_interval_seconds=0.01, teardown_timeout_seconds=2.0)


@pytest.fixture(autouse=True)
def reset_autorepair_logging():
    """Undo dictConfig side effects so caplog keeps seeing autorepair records."""
    yield
    for name in ("autorepair", "autorepair.output", "kubernetes", "urllib3"):
        lg = logging.getLogger(name)
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
        lg.propagate = True
        lg.setLevel(logging.NOTSET)
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "exec_mock: Tests using mocked exec websocket streams"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
