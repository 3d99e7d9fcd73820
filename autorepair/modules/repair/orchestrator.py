import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from autorepair.config.provider import RepairConfig
from autorepair.logging_config import OUTPUT_LOGGER

from ..api.errors import AutoRepairError, PipeTeardownError
from ..api.models import AttemptState, Instance, RepairAttempt, RunSummary
from ..executor.invoker import RemoteCommandInvoker
from ..executor.relay import OutputRelay
from ..selection import filter_eligible, select_container

logger = logging.getLogger("autorepair.repair")
output_logger = logging.getLogger(OUTPUT_LOGGER)


class RepairOrchestrator:
    """
    Runs the repair command in every eligible pod of a namespace snapshot.

    Pods are processed strictly one after another. A pod that fails at any
    step is logged and skipped; the loop always moves on to the next pod.
    The only exception is a pipe teardown failure, which stops the run.
    """

    def __init__(
        self,
        invoker: RemoteCommandInvoker,
        config: RepairConfig,
        cancel: Optional[threading.Event] = None,
        relay_factory: Callable[..., OutputRelay] = OutputRelay,
    ):
        """
        Initialize orchestrator.

        Args:
            invoker: Opens exec channels into containers
            config: Annotation key, command and relay tuning
            cancel: Run-scoped cancellation event
            relay_factory: Builds the relay for each exec session
        """
        self.invoker = invoker
        self.config = config
        self.cancel = cancel or threading.Event()
        self._relay_factory = relay_factory

    def run(self, namespace: str, instances: Iterable[Instance]) -> RunSummary:
        """
        Repair every eligible pod in the snapshot.

        Args:
            namespace: Namespace the snapshot was taken from
            instances: Pods from one listing

        Returns:
            RunSummary with one attempt per eligible pod that was started

        Raises:
            PipeTeardownError: If a relay could not be torn down
        """
        summary = RunSummary(namespace=namespace)
        logger.info(f"Starting repair run in namespace {namespace}")

        for instance, requested in filter_eligible(instances, self.config.annotation_key):
            if self.cancel.is_set():
                logger.warning("Repair run cancelled; skipping remaining pods")
                break
            summary.attempts.append(self.repair(instance, requested))

        summary.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"Repair run in namespace {namespace} finished: "
            f"{summary.completed} completed, {summary.failed} failed "
            f"in {summary.duration_seconds:.1f}s"
        )
        return summary

    def plan(self, instances: Iterable[Instance]) -> List[RepairAttempt]:
        """Select containers for every eligible pod without invoking anything."""
        attempts = []
        for instance, requested in filter_eligible(instances, self.config.annotation_key):
            attempt = RepairAttempt(
                namespace=instance.namespace,
                pod_name=instance.name,
                requested_container=requested,
            )
            try:
                self._select(attempt, instance)
                logger.info(f"Would repair {attempt.target}: {' '.join(self.config.command)}")
            except AutoRepairError as e:
                attempt.fail(str(e))
                logger.error(f"Unable to match a container in {instance.name}: {e}")
            attempts.append(attempt)
        return attempts

    def repair(self, instance: Instance, requested: str) -> RepairAttempt:
        """
        Drive one pod from discovered to completed or failed.

        Raises:
            PipeTeardownError: If the relay could not be torn down
        """
        attempt = RepairAttempt(
            namespace=instance.namespace,
            pod_name=instance.name,
            requested_container=requested,
        )

        try:
            self._select(attempt, instance)
            logger.info(f"Started repair of {attempt.target}")
            handle = self._invoke(attempt)
            self._stream(attempt, handle)
        except PipeTeardownError as e:
            attempt.fail(str(e))
            logger.critical(f"Unable to tear down output pipe for {attempt.target}: {e}")
            raise
        except AutoRepairError as e:
            attempt.fail(str(e))
            logger.error(f"Repair of {attempt.target} failed: {e}")
        except Exception as e:
            attempt.fail(f"unexpected error: {e}")
            logger.exception(f"Unexpected error repairing {attempt.target}: {e}")

        return attempt

    def _select(self, attempt: RepairAttempt, instance: Instance) -> None:
        attempt.container = select_container(instance, attempt.requested_container)
        attempt.advance(AttemptState.TARGET_SELECTED)

    def _invoke(self, attempt: RepairAttempt):
        request = self.invoker.build_request(attempt.namespace, attempt.pod_name, attempt.container)
        handle = self.invoker.invoke(request)
        attempt.advance(AttemptState.INVOKED)
        return handle

    def _stream(self, attempt: RepairAttempt, handle) -> None:
        attempt.advance(AttemptState.STREAMING)
        relay = self._relay_factory(
            handle,
            cancel=self.cancel,
            buffer_lines=self.config.pipe_buffer_lines,
            poll_interval=self.config.poll_interval_seconds,
            teardown_timeout=self.config.teardown_timeout_seconds,
            name=f"{attempt.namespace}/{attempt.pod_name}",
        )

        for line in relay.lines():
            attempt.lines_relayed += 1
            output_logger.info(f"{self.config.line_prefix}{line}")

        if self.cancel.is_set():
            attempt.fail("cancelled")
            logger.warning(f"Repair of {attempt.target} cancelled")
            return

        if relay.error is not None:
            attempt.stream_error = str(relay.error)
            attempt.fail(f"stream error: {relay.error}")
            logger.error(f"Finished repair of {attempt.target} with error: {relay.error}")
            return

        attempt.advance(AttemptState.COMPLETED)
        logger.info(
            f"Finished repair of {attempt.target} ({attempt.lines_relayed} lines of output)"
        )
