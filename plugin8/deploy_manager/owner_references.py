"""
This module holds common functionality that the ClientHelper uses to manage
ownerReferences on created resources
"""

# First Party
import alog

log = alog.use_channel("OWNRF")


def update_owner_references(owner_cr: dict, child_obj: dict):
    """Merge a reference for the owning CR into the child object.

    The owner may be cluster-scoped (the FlowCollector is), in which case it can
    own children in any namespace. A namespaced owner can only own children in
    its own namespace.
    """

    # Validate the shape of the owner CR and the chid object
    _validate_object_struct(owner_cr)
    _validate_object_struct(child_obj)

    owner_md = owner_cr["metadata"]
    child_md = child_obj["metadata"]
    owner_uid = owner_md.get("uid")
    owner_namespace = owner_md.get("namespace")
    child_namespace = child_md.get("namespace")
    log.debug3("Owner CR UID: %s, namespace: %s", owner_uid, owner_namespace)

    if owner_uid is None:
        log.debug2("Owner has no uid yet; Not adding owner ref")
        return
    if owner_uid == child_md.get("uid"):
        log.debug2("Owner is same as child; Not adding owner ref")
        return
    if owner_namespace and owner_namespace != child_namespace:
        log.debug2(
            "Owner in [%s] cannot own child in [%s]", owner_namespace, child_namespace
        )
        return

    owner_refs = list(child_md.get("ownerReferences") or [])
    if owner_uid not in [ref.get("uid") for ref in owner_refs]:
        log.debug2(
            "Adding owner reference for %s.%s/%s",
            child_obj["apiVersion"],
            child_obj["kind"],
            child_md["name"],
        )
        owner_refs.append(_make_owner_reference(owner_cr))
    child_md["ownerReferences"] = owner_refs


## Implementation Details ######################################################


def _validate_object_struct(obj: dict):
    """Ensure that the required portions of an object are present (kind,
    apiVerison, metadata.name)
    """
    assert "kind" in obj, "Got object without 'kind'"
    assert "apiVersion" in obj, "Got object without 'apiVersion'"
    metadata = obj.get("metadata")
    assert isinstance(metadata, dict), "Got object with non-dict 'metadata'"
    assert "name" in metadata, "Got object without 'metadata.name'"


def _make_owner_reference(owner_cr: dict) -> dict:
    """Make an owner reference for the given CR instance

    Args:
        owner_cr:  dict
            The full CR manifest for the owning resource

    Returns:
        owner_reference:  dict
            The dict entry for the `metadata.ownerReferences` entry of the owned
            object
    """
    metadata = owner_cr.get("metadata", {})
    return {
        "apiVersion": owner_cr.get("apiVersion"),
        "kind": owner_cr.get("kind"),
        "name": metadata.get("name"),
        "uid": metadata.get("uid"),
        "controller": True,
        # The owner will not be deleted until this object completes its
        # deletion
        "blockOwnerDeletion": True,
    }
