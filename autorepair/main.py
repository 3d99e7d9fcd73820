#!/usr/bin/env python3
"""
Cassandra Autorepair - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Connects to Kubernetes and snapshots the namespace
3. Runs one repair pass

All business logic is in the modules, following black box principles.
"""

import argparse
import logging
import logging.config as log_config
import signal
import sys
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from autorepair import __version__
from autorepair.config.provider import EnvConfigProvider
from autorepair.logging_config import get_logging_config
from autorepair.modules.api import AutoRepairError
from autorepair.modules.cluster import ClusterConnector, resolve_namespace
from autorepair.modules.executor import RemoteCommandInvoker
from autorepair.modules.repair import RepairOrchestrator

logger = logging.getLogger("autorepair")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cassandra-autorepair",
        description="Run nodetool repair in every annotated Cassandra pod of a namespace.",
    )
    parser.add_argument(
        "--namespace", "-n", help="Namespace to repair (default: $POD_NAMESPACE)"
    )
    parser.add_argument(
        "--config", help="YAML overrides file (default: $AUTOREPAIR_CONFIG)"
    )
    parser.add_argument(
        "--kubeconfig", help="kubeconfig to use instead of in-cluster credentials"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Select containers and log the plan without executing anything",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


@contextmanager
def cancel_on_signals(cancel: threading.Event) -> Iterator[None]:
    """Set the cancel event on SIGINT/SIGTERM for the duration of the block."""

    def _handler(signum, frame):
        logger.warning(f"Received {signal.Signals(signum).name}; cancelling repair run")
        cancel.set()

    previous = {
        sig: signal.signal(sig, _handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run one repair pass.

    Returns:
        Process exit code: 0 when the pass ran to the end, 1 on a fatal
        error or cancellation. Per-pod failures do not affect the exit code.
    """
    args = build_parser().parse_args(argv)
    provider = EnvConfigProvider(config_path=args.config)

    level = args.log_level or provider.get_logging_config().level
    log_config.dictConfig(get_logging_config(level))

    cancel = threading.Event()

    try:
        repair_config = provider.get_repair_config()
        cluster_config = provider.get_cluster_config()
        if args.kubeconfig:
            cluster_config.in_cluster = False
            cluster_config.kubeconfig_path = args.kubeconfig

        namespace = resolve_namespace(args.namespace, cluster_config.namespace)

        connector = ClusterConnector(
            in_cluster=cluster_config.in_cluster,
            kubeconfig_path=cluster_config.kubeconfig_path,
        )
        core_v1 = connector.connect()
        instances = connector.list_instances(namespace)

        orchestrator = RepairOrchestrator(
            RemoteCommandInvoker(core_v1, repair_config.command),
            repair_config,
            cancel=cancel,
        )

        if args.dry_run:
            orchestrator.plan(instances)
            return 0

        with cancel_on_signals(cancel):
            orchestrator.run(namespace, instances)

    except AutoRepairError as e:
        logger.error(f"Fatal: {e}")
        return 1

    return 1 if cancel.is_set() else 0


def main():
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
