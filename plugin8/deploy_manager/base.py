"""
This defines the base class for all DeployManager types.
"""

# Standard
from typing import List, Optional, Tuple
import abc


class DeployManagerBase(abc.ABC):
    """
    Base class for deploy managers which are responsible for the point-to-point
    cluster calls made during a reconciliation pass. None of the operations
    retry: a failed write is reported back and the caller decides what to do.
    """

    @abc.abstractmethod
    def get_object_current_state(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Tuple[bool, Optional[dict]]:
        """Fetch the current state of a given object by name

        Args:
            kind:  str
                The kind of the object to fetch
            name:  str
                The full name of the object to fetch
            namespace:  Optional[str]
                The namespace to search for the object or None for
                cluster-scoped objects
            api_version:  Optional[str]
                The api_version of the resource kind to fetch

        Returns:
            success:  bool
                Whether or not the state fetch operation succeeded. A missing
                object is a success.
            current_state:  dict or None
                The dict representation of the current object's configuration,
                or None if not present
        """

    @abc.abstractmethod
    def create(self, resource_definitions: List[dict]) -> Tuple[bool, bool]:
        """Create the given resources. A resource that already exists is
        counted as a success without change.

        Args:
            resource_definitions:  list(dict)
                List of resource object dicts to create in the cluster

        Returns:
            success:  bool
                Whether or not all creates succeeded
            changed:  bool
                Whether or not any resource was actually created
        """

    @abc.abstractmethod
    def update(self, resource_definitions: List[dict]) -> Tuple[bool, bool]:
        """Replace the given resources. If a definition carries a
        metadata.resourceVersion, it is used as an optimistic concurrency
        precondition and a stale version fails the update.

        Args:
            resource_definitions:  list(dict)
                List of resource object dicts to write to the cluster

        Returns:
            success:  bool
                Whether or not all updates succeeded
            changed:  bool
                Whether or not any update resulted in changes
        """

    @abc.abstractmethod
    def delete(self, resource_definitions: List[dict]) -> Tuple[bool, bool]:
        """Delete the given resources. A resource that is not found is counted
        as a success without change.

        Args:
            resource_definitions:  list(dict)
                List of resource object dicts (only kind, apiVersion, name and
                namespace are used) to remove from the cluster

        Returns:
            success:  bool
                Whether or not all deletes succeeded
            changed:  bool
                Whether or not anything was deleted
        """

    @abc.abstractmethod
    def is_kind_available(self, kind: str, api_version: str) -> bool:
        """Determine whether the cluster serves the given kind

        Args:
            kind:  str
                The kind to look up
            api_version:  str
                The api_version of the kind

        Returns:
            available:  bool
                True if the cluster knows the kind
        """
