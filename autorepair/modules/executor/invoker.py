import logging
from typing import Any, Callable, List

from kubernetes.stream import stream

from ..api.errors import ExecSetupFailed
from ..api.models import InvocationRequest

logger = logging.getLogger("autorepair.executor")


class RemoteCommandInvoker:
    """Opens exec channels into pod containers through the Kubernetes API."""

    def __init__(
        self,
        core_v1: Any,
        command: List[str],
        stream_func: Callable[..., Any] = stream,
    ):
        """
        Initialize invoker.

        Args:
            core_v1: kubernetes.client.CoreV1Api
            command: Command run in every container
            stream_func: Websocket upgrade helper, kubernetes.stream.stream by default
        """
        self.core_v1 = core_v1
        self.command = list(command)
        self._stream = stream_func

    def build_request(self, namespace: str, pod_name: str, container: str) -> InvocationRequest:
        return InvocationRequest(
            namespace=namespace,
            pod_name=pod_name,
            container=container,
            command=self.command,
        )

    def invoke(self, request: InvocationRequest) -> Any:
        """
        Open the exec channel described by the request.

        The returned handle is not read from here; streaming is driven by
        OutputRelay.

        Args:
            request: Invocation to open

        Returns:
            Live websocket client for the exec session

        Raises:
            ExecSetupFailed: If the channel cannot be opened or authorized
        """
        logger.debug(f"Opening exec channel to {request.target}: {' '.join(request.command)}")

        try:
            return self._stream(
                self.core_v1.connect_get_namespaced_pod_exec,
                request.pod_name,
                request.namespace,
                container=request.container,
                command=list(request.command),
                stdin=request.stdin,
                stdout=request.stdout,
                stderr=request.stderr,
                tty=request.tty,
                _preload_content=False,
            )
        except Exception as e:
            raise ExecSetupFailed(
                request.namespace, request.pod_name, request.container, e
            ) from e
