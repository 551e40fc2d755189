"""
The NamespacedObjectManager tracks the namespaced objects owned by a single
reconciliation unit. It fetches all of them up front once per pass, answers
existence queries from that snapshot, and knows how to delete them from the
current or a previous namespace.
"""

# Standard
from typing import Dict, List, Optional

# First Party
import alog

# Local
from .exceptions import ReconcileCancelledError, assert_cluster
from .managed_object import ManagedObject
from .session import Session

log = alog.use_channel("OBJMGR")


class NamespacedObjectManager:
    """Registry plus per-pass snapshot of the owned namespaced objects"""

    def __init__(
        self,
        session: Session,
        namespace: str,
        previous_namespace: Optional[str] = None,
    ):
        """
        Args:
            session:  Session
                The session for the current pass
            namespace:  str
                The namespace the owned objects live in
            previous_namespace:  Optional[str]
                The namespace a previous configuration deployed to, if it has
                changed
        """
        self.session = session
        self.namespace = namespace
        self.previous_namespace = previous_namespace
        self._managed_objects: List[ManagedObject] = []
        self._current: Dict[ManagedObject, Optional[dict]] = {}
        self._fetched = False

    @property
    def managed_objects(self) -> List[ManagedObject]:
        return list(self._managed_objects)

    def add_managed_object(
        self, name: str, kind: str, api_version: str
    ) -> ManagedObject:
        """Register an owned object slot. Registration order is the fetch and
        cleanup order.

        Returns:
            owned:  ManagedObject
                The handle used to query the slot
        """
        owned = ManagedObject(kind=kind, api_version=api_version, name=name)
        assert owned not in self._managed_objects, f"{owned} registered twice"
        log.debug2("Managing %s in %s", owned, self.namespace)
        self._managed_objects.append(owned)
        return owned

    @alog.logged_function(log.debug2)
    def fetch_all(self):
        """Fetch the current state of every managed object in the current
        namespace. Any failed lookup aborts the fetch.
        """
        self._current = {}
        for owned in self._managed_objects:
            success, content = self.session.get_object_current_state(
                kind=owned.kind,
                name=owned.name,
                namespace=self.namespace,
                api_version=owned.api_version,
            )
            assert_cluster(success, f"Failed to fetch {owned} in {self.namespace}")
            log.debug3("%s exists: %s", owned, content is not None)
            self._current[owned] = content
        self._fetched = True

    def exists(self, owned: ManagedObject) -> bool:
        return self.current(owned) is not None

    def current(self, owned: ManagedObject) -> Optional[dict]:
        """Get the content fetched for the given slot, or None if absent"""
        assert self._fetched, "Programming Error: fetch_all() was not called"
        assert owned in self._current, f"Programming Error: {owned} is not managed"
        return self._current[owned]

    def try_delete(self, owned: ManagedObject) -> bool:
        """Delete the object if the snapshot says it exists

        Returns:
            deleted:  bool
                True if a delete was issued
        """
        if not self.exists(owned):
            log.debug2("%s does not exist, nothing to delete", owned)
            return False
        self.session.assert_not_cancelled()
        log.info("Deleting %s from %s", owned, self.namespace)
        success, _ = self.session.deploy_manager.delete(
            [owned.reference(self.namespace)]
        )
        assert_cluster(success, f"Failed to delete {owned} from {self.namespace}")
        self._current[owned] = None
        return True

    def cleanup_previous_namespace(self) -> int:
        """Best-effort removal of every managed object from the previous
        namespace. Failures are logged and never raised.

        Returns:
            n_deleted:  int
                The number of objects deleted
        """
        if not self.previous_namespace or self.previous_namespace == self.namespace:
            log.debug2("No previous namespace to clean up")
            return 0

        n_deleted = 0
        for owned in self._managed_objects:
            try:
                success, content = self.session.get_object_current_state(
                    kind=owned.kind,
                    name=owned.name,
                    namespace=self.previous_namespace,
                    api_version=owned.api_version,
                )
                if not success:
                    log.warning(
                        "Could not look up %s in %s", owned, self.previous_namespace
                    )
                    continue
                if content is None:
                    continue
                log.info(
                    "Removing %s from previous namespace %s",
                    owned,
                    self.previous_namespace,
                )
                success, _ = self.session.deploy_manager.delete(
                    [owned.reference(self.previous_namespace)]
                )
                if success:
                    n_deleted += 1
                else:
                    log.warning(
                        "Failed to delete %s from %s", owned, self.previous_namespace
                    )
            except ReconcileCancelledError:
                raise
            except Exception as err:  # pylint: disable=broad-except
                log.warning(
                    "Error cleaning up %s from %s: %s",
                    owned,
                    self.previous_namespace,
                    err,
                )
        return n_deleted
