import logging
from typing import Any, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from ..api.errors import ConnectionFailed, ListFailed, ScopeMissing
from ..api.models import Instance

logger = logging.getLogger("autorepair.cluster")


class ClusterConnector:
    """
    Builds the Kubernetes API client and lists pods.

    In-cluster credentials are used when running inside a pod; otherwise
    the kubeconfig file is loaded.
    """

    def __init__(self, in_cluster: bool, kubeconfig_path: Optional[str] = None):
        """
        Args:
            in_cluster: Use the service account mounted into the pod
            kubeconfig_path: kubeconfig to load when not in-cluster
        """
        self.in_cluster = in_cluster
        self.kubeconfig_path = kubeconfig_path
        self.core_v1: Optional[client.CoreV1Api] = None

    def connect(self) -> client.CoreV1Api:
        """
        Load credentials and construct the core API client.

        Returns:
            CoreV1Api carrying the transport configuration for exec

        Raises:
            ConnectionFailed: If credentials cannot be loaded
        """
        try:
            if self.in_cluster:
                logger.info("Running within cluster; using in-cluster configuration")
                config.load_incluster_config()
            else:
                logger.info(f"Not running within cluster; loading {self.kubeconfig_path}")
                config.load_kube_config(config_file=self.kubeconfig_path)
        except (config.ConfigException, OSError) as e:
            raise ConnectionFailed(f"Unable to load Kubernetes configuration: {e}") from e

        try:
            self.core_v1 = client.CoreV1Api()
        except Exception as e:
            raise ConnectionFailed(f"Failed to construct the API client: {e}") from e

        return self.core_v1

    def list_instances(self, namespace: str) -> List[Instance]:
        """
        Snapshot the pods of a namespace.

        Raises:
            ListFailed: If the API call fails
        """
        if self.core_v1 is None:
            self.connect()

        try:
            pods = self.core_v1.list_namespaced_pod(namespace)
        except (ApiException, HTTPError) as e:
            raise ListFailed(namespace, e) from e

        instances = [Instance.from_pod(pod) for pod in pods.items]
        logger.debug(f"Listed {len(instances)} pods in namespace {namespace}")
        return instances


def resolve_namespace(*candidates: Any) -> str:
    """
    Return the first non-empty namespace candidate.

    Candidates are checked in order, e.g. the --namespace flag followed by
    POD_NAMESPACE.

    Raises:
        ScopeMissing: If every candidate is empty
    """
    for candidate in candidates:
        if candidate:
            return str(candidate)
    raise ScopeMissing("Unable to detect namespace: set POD_NAMESPACE or pass --namespace")
