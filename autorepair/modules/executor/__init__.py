"""
Executor Module - Black Box Interface

Purpose: Run the repair command inside a pod container and relay its output
Interface: RemoteCommandInvoker.invoke() opens the exec channel, OutputRelay.lines() streams it
Hidden: Websocket exec protocol, producer thread, bounded pipe

Can be replaced with different execution mechanisms (kubectl exec, SSH).
"""

from .invoker import RemoteCommandInvoker
from .pipe import OutputPipe
from .relay import OutputRelay

__all__ = ["OutputPipe", "OutputRelay", "RemoteCommandInvoker"]
