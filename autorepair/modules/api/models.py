"""
Autorepair shared data models.

These models define the structure of all data passed between
components in the autorepair system.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

POD_PHASE_RUNNING = "Running"

# Enums


class AttemptState(str, Enum):
    """State of a single repair attempt against one pod."""

    DISCOVERED = "discovered"
    TARGET_SELECTED = "target_selected"
    INVOKED = "invoked"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


_STATE_ORDER = [
    AttemptState.DISCOVERED,
    AttemptState.TARGET_SELECTED,
    AttemptState.INVOKED,
    AttemptState.STREAMING,
    AttemptState.COMPLETED,
]

TERMINAL_STATES = {AttemptState.COMPLETED, AttemptState.FAILED}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Cluster Models


class Instance(BaseModel):
    """A point-in-time view of one pod, reduced to what repair needs."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Pod name", min_length=1)
    namespace: str = Field(..., description="Namespace the pod lives in", min_length=1)
    phase: str = Field(default="Unknown", description="Pod phase as reported by Kubernetes")
    annotations: Dict[str, str] = Field(default_factory=dict)
    containers: List[str] = Field(
        default_factory=list, description="Container names in declared order"
    )

    @property
    def is_running(self) -> bool:
        return self.phase == POD_PHASE_RUNNING

    @classmethod
    def from_pod(cls, pod: Any) -> "Instance":
        """
        Build an Instance from a kubernetes.client.V1Pod.

        Args:
            pod: V1Pod (or any object with the same attribute shape)

        Returns:
            Instance
        """
        metadata = pod.metadata
        status = pod.status
        spec = pod.spec

        return cls(
            name=metadata.name,
            namespace=metadata.namespace,
            phase=(status.phase if status is not None and status.phase else "Unknown"),
            annotations=dict(metadata.annotations or {}),
            containers=[c.name for c in (spec.containers if spec is not None else None) or []],
        )


class InvocationRequest(BaseModel):
    """Describes one remote exec into a pod container."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(..., min_length=1)
    pod_name: str = Field(..., min_length=1)
    container: str = Field(..., description="Container to exec into")
    command: List[str] = Field(..., min_length=1, description="Command and its arguments")
    stdin: bool = Field(default=False)
    stdout: bool = Field(default=True)
    stderr: bool = Field(default=True)
    tty: bool = Field(
        default=True, description="Allocate a TTY so stdout and stderr arrive on one stream"
    )

    @property
    def target(self) -> str:
        return f"{self.namespace}/{self.pod_name} [{self.container}]"


# Run Models


class RepairAttempt(BaseModel):
    """
    Tracks one pod through discovered -> target_selected -> invoked ->
    streaming -> completed, or into failed from any non-terminal state.
    """

    namespace: str
    pod_name: str
    requested_container: str = ""
    container: Optional[str] = None
    state: AttemptState = AttemptState.DISCOVERED
    reason: Optional[str] = None
    stream_error: Optional[str] = None
    lines_relayed: int = 0
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def target(self) -> str:
        if self.container:
            return f"{self.namespace}/{self.pod_name} [{self.container}]"
        return f"{self.namespace}/{self.pod_name}"

    def advance(self, state: AttemptState) -> None:
        """
        Move forward to the given state.

        Raises:
            ValueError: If the attempt is terminal or the move is not forward
        """
        if self.is_terminal:
            raise ValueError(f"Attempt for {self.target} is already {self.state.value}")
        if state == AttemptState.FAILED:
            raise ValueError("Use fail() to move an attempt into the failed state")
        if _STATE_ORDER.index(state) != _STATE_ORDER.index(self.state) + 1:
            raise ValueError(f"Cannot move from {self.state.value} to {state.value}")

        self.state = state
        if state == AttemptState.COMPLETED:
            self.finished_at = _utcnow()

    def fail(self, reason: str) -> None:
        if self.is_terminal:
            raise ValueError(f"Attempt for {self.target} is already {self.state.value}")
        self.state = AttemptState.FAILED
        self.reason = reason
        self.finished_at = _utcnow()


class RunSummary(BaseModel):
    """Outcome of one pass over a namespace."""

    namespace: str
    attempts: List[RepairAttempt] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    @property
    def completed(self) -> int:
        return sum(1 for a in self.attempts if a.state == AttemptState.COMPLETED)

    @property
    def failed(self) -> int:
        return sum(1 for a in self.attempts if a.state == AttemptState.FAILED)

    @property
    def duration_seconds(self) -> float:
        end = self.finished_at or _utcnow()
        return (end - self.started_at).total_seconds()
