"""
The ClientHelper wraps the session's deploy manager with the owner-aware
create/update/delete operations used during reconciliation. It also holds the
single generic create-or-update template that every owned kind goes through.
"""

# Standard
from typing import Callable, Optional, Union
import copy

# First Party
import alog

# Local
from .change_report import ChangeReport
from .comparators import cluster_role_binding_changed, cluster_role_changed
from .deploy_manager.owner_references import update_owner_references
from .exceptions import assert_cluster
from .managed_object import ManagedObject
from .object_manager import NamespacedObjectManager
from .session import Session
from .verify_resources import verify_deployment

log = alog.use_channel("CLIENT")

# Signature shared by all comparators: changed(existing, desired, report)
CHANGED_FUNCTION = Callable[[dict, dict, ChangeReport], bool]

# A desired object, or a builder that derives it from the existing content
DESIRED_OBJECT = Union[dict, Callable[[Optional[dict]], dict]]


def _describe(obj: dict) -> str:
    metadata = obj.get("metadata", {})
    return "{}/{}/{}/{}".format(  # pylint: disable=consider-using-f-string
        metadata.get("namespace"),
        obj.get("apiVersion"),
        obj.get("kind"),
        metadata.get("name"),
    )


class ClientHelper:
    """Cluster operations on behalf of the owning FlowCollector"""

    def __init__(self, session: Session):
        self.session = session

    def get(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Optional[dict]:
        """Fetch a single object. A failed lookup raises ClusterError while a
        missing object returns None.
        """
        success, content = self.session.get_object_current_state(
            kind=kind, name=name, namespace=namespace, api_version=api_version
        )
        assert_cluster(success, f"Failed to fetch {kind}/{name} in {namespace}")
        return content

    def create_owned(self, obj: dict):
        """Create the object with a controller reference to the owner"""
        self.session.assert_not_cancelled()
        obj = copy.deepcopy(obj)
        update_owner_references(self.session.cr_manifest, obj)
        log.info("Creating %s", _describe(obj))
        success, _ = self.session.deploy_manager.create([obj])
        assert_cluster(success, f"Failed to create {_describe(obj)}")

    def update_owned(self, old: dict, new: dict):
        """Replace old with new. The resourceVersion is carried over from old
        so a concurrent write surfaces as a conflict rather than being silently
        overwritten.
        """
        self.session.assert_not_cancelled()
        new = copy.deepcopy(new)
        old_md = old.get("metadata", {})
        new_md = new.setdefault("metadata", {})
        if old_md.get("resourceVersion") is not None:
            new_md["resourceVersion"] = old_md["resourceVersion"]
        if old_md.get("ownerReferences") and not new_md.get("ownerReferences"):
            new_md["ownerReferences"] = copy.deepcopy(old_md["ownerReferences"])
        update_owner_references(self.session.cr_manifest, new)
        log.info("Updating %s", _describe(new))
        success, _ = self.session.deploy_manager.update([new])
        assert_cluster(success, f"Failed to update {_describe(new)}")

    def reconcile_cluster_role(self, desired: dict):
        self._reconcile_cluster_scoped(desired, cluster_role_changed, "ClusterRole")

    def reconcile_cluster_role_binding(self, desired: dict):
        self._reconcile_cluster_scoped(
            desired, cluster_role_binding_changed, "ClusterRoleBinding"
        )

    def check_deployment_in_progress(self, deployment: dict) -> bool:
        """Report whether a rollout of the deployment is still in progress.
        This only observes; it never writes.
        """
        name = deployment.get("metadata", {}).get("name")
        if verify_deployment(deployment):
            log.debug2("Deployment %s is ready", name)
            return False
        log.info("Deployment %s rollout in progress", name)
        return True

    ## Implementation Details ##################################################

    def _reconcile_cluster_scoped(
        self, desired: dict, changed: CHANGED_FUNCTION, report_name: str
    ):
        report = ChangeReport(report_name)
        try:
            existing = self.get(
                kind=desired["kind"],
                name=desired["metadata"]["name"],
                api_version=desired["apiVersion"],
            )
            apply_desired(self, existing, desired, changed, report)
        finally:
            report.log_if_needed()


## Generic Reconcile ###########################################################


def apply_desired(  # pylint: disable=too-many-arguments
    client: ClientHelper,
    existing: Optional[dict],
    desired: DESIRED_OBJECT,
    changed: CHANGED_FUNCTION,
    report: ChangeReport,
    on_unchanged: Optional[Callable[[dict], None]] = None,
):
    """Create, update or leave alone a single object

    Args:
        client:  ClientHelper
            The client used for the write
        existing:  Optional[dict]
            The current content or None if absent
        desired:  DESIRED_OBJECT
            The desired object, or a function building it from existing
        changed:  CHANGED_FUNCTION
            Comparator deciding whether existing must be updated
        report:  ChangeReport
            Report collecting the change reasons
        on_unchanged:  Optional[Callable[[dict], None]]
            Hook run with the existing content when no write was needed
    """
    desired_obj = desired(existing) if callable(desired) else desired
    if existing is None:
        client.create_owned(desired_obj)
    elif changed(existing, desired_obj, report):
        client.update_owned(existing, desired_obj)
    elif on_unchanged is not None:
        on_unchanged(existing)


def reconcile_owned(  # pylint: disable=too-many-arguments
    object_manager: NamespacedObjectManager,
    client: ClientHelper,
    owned: ManagedObject,
    desired: DESIRED_OBJECT,
    changed: CHANGED_FUNCTION,
    report: ChangeReport,
    on_unchanged: Optional[Callable[[dict], None]] = None,
):
    """Reconcile a namespaced slot against the object manager's snapshot"""
    existing = object_manager.current(owned)
    log.debug3("Reconciling %s (exists: %s)", owned, existing is not None)
    apply_desired(client, existing, desired, changed, report, on_unchanged)
