"""Error types raised across autorepair modules."""

from typing import Optional


class AutoRepairError(Exception):
    """Base class for autorepair errors."""

    #: Fatal errors stop the whole run; the rest only abandon one pod.
    fatal = False


class ConfigurationError(AutoRepairError):
    """Configuration could not be loaded or is invalid."""

    fatal = True


class ConnectionFailed(AutoRepairError):
    """The Kubernetes API client could not be constructed."""

    fatal = True


class ScopeMissing(AutoRepairError):
    """No namespace was supplied to operate in."""

    fatal = True


class ListFailed(AutoRepairError):
    """Listing pods in the namespace failed."""

    fatal = True

    def __init__(self, namespace: str, cause: Optional[BaseException] = None):
        self.namespace = namespace
        self.cause = cause
        super().__init__(f"Unable to list pods in namespace {namespace}: {cause}")


class PipeTeardownError(AutoRepairError):
    """The local output pipe could not be torn down cleanly."""

    fatal = True


class NoSuchContainer(AutoRepairError):
    """The requested container does not exist in the pod."""

    def __init__(self, pod_name: str, requested: str, available):
        self.pod_name = pod_name
        self.requested = requested
        self.available = list(available)
        super().__init__(
            f"no such container {requested!r} in {pod_name} "
            f"(available: {', '.join(self.available) or 'none'})"
        )


class ExecSetupFailed(AutoRepairError):
    """The remote exec channel could not be opened."""

    def __init__(self, namespace: str, pod_name: str, container: str, cause=None):
        self.namespace = namespace
        self.pod_name = pod_name
        self.container = container
        self.cause = cause
        super().__init__(f"Failed to exec into {namespace}/{pod_name} [{container}]: {cause}")


class StreamError(AutoRepairError):
    """The remote command failed or its stream broke mid-run."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)
