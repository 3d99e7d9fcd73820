from typing import Iterable, Iterator, Tuple

from ..api.errors import NoSuchContainer
from ..api.models import Instance


def select_container(instance: Instance, requested: str) -> str:
    """
    Pick the container to run the repair command in.

    A pod with a single container is unambiguous, so the requested name is
    ignored. Otherwise the requested name must match one of the pod's
    containers exactly.

    Args:
        instance: Pod to select from
        requested: Container name taken from the autorepair annotation

    Returns:
        Container name

    Raises:
        NoSuchContainer: If no container can be selected
    """
    if len(instance.containers) == 1:
        return instance.containers[0]

    for name in instance.containers:
        if name == requested:
            return requested

    raise NoSuchContainer(instance.name, requested, instance.containers)


def filter_eligible(
    instances: Iterable[Instance], annotation_key: str
) -> Iterator[Tuple[Instance, str]]:
    """
    Yield running pods that carry the autorepair annotation.

    Listing order is preserved. The annotation value is yielded alongside
    the pod as the requested container name; an empty value still counts
    as present.

    Args:
        instances: Pods from one namespace listing
        annotation_key: Annotation marking a pod for repair

    Yields:
        (instance, requested container name) pairs
    """
    for instance in instances:
        requested = instance.annotations.get(annotation_key)
        if requested is None:
            continue
        if not instance.is_running:
            continue
        yield instance, requested
