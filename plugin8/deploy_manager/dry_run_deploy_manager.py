"""
The DryRunDeployManager implements the DeployManager interface but does not
actually interact with the cluster and instead holds the state of the cluster in
a local map.
"""

# Standard
from datetime import datetime
from itertools import count
from threading import RLock
from typing import Iterable, List, Optional, Tuple
import copy
import uuid

# First Party
import alog

# Local
from .base import DeployManagerBase

log = alog.use_channel("DRY-RUN")

# Metadata fields owned by the "server" which are ignored when detecting change
_SERVER_FIELDS = ["resourceVersion", "uid", "creationTimestamp"]


class DryRunDeployManager(DeployManagerBase):
    """
    Deploy manager which doesn't actually deploy!
    """

    def __init__(
        self,
        resources: Optional[List[dict]] = None,
        strict_resource_version: bool = False,
        available_kinds: Optional[Iterable[str]] = None,
    ):
        """Construct with an optional initial set of resources

        Args:
            resources:  Optional[List[dict]]
                Resources that exist in the cluster before anything runs
            strict_resource_version:  bool
                If True, updates carrying a stale resourceVersion fail the way
                a conflict would in a real cluster
            available_kinds:  Optional[Iterable[str]]
                The kinds this cluster serves. If None, every kind is served.
        """
        self.strict_resource_version = strict_resource_version
        self._available_kinds = (
            None if available_kinds is None else set(available_kinds)
        )
        self._cluster_content = {}
        self._lock = RLock()
        self._versions = count(1)
        for resource in resources or []:
            self._store(copy.deepcopy(resource), self._find(resource))

    ## Interface ###############################################################

    def get_object_current_state(self, kind, name, namespace=None, api_version=None):
        log.debug(
            "DRY RUN get_object_current_state of [%s/%s] in [%s]", kind, name, namespace
        )
        matches = []
        kind_entries = self._cluster_content.get(namespace, {}).get(kind, {})
        for api_ver, entries in kind_entries.items():
            if name in entries and (api_version is None or api_ver == api_version):
                matches.append(entries[name])
        log.debug2(
            "Found %d matches for [%s/%s] in %s", len(matches), kind, name, namespace
        )
        if len(matches) == 1:
            return True, copy.deepcopy(matches[0])
        return True, None

    def create(self, resource_definitions):
        log.info("DRY RUN create")
        changed = False
        with self._lock:
            for resource in resource_definitions:
                if self._find(resource) is not None:
                    log.debug("DRY RUN [%s] already exists", self._describe(resource))
                    continue
                self._store(copy.deepcopy(resource), None)
                changed = True
        return True, changed

    def update(self, resource_definitions):
        log.info("DRY RUN update")
        changed = False
        with self._lock:
            for resource in resource_definitions:
                current = self._find(resource)
                if current is None:
                    log.warning(
                        "DRY RUN cannot update missing [%s]", self._describe(resource)
                    )
                    return False, changed
                desired_version = resource.get("metadata", {}).get("resourceVersion")
                current_version = current["metadata"].get("resourceVersion")
                if (
                    self.strict_resource_version
                    and desired_version
                    and desired_version != current_version
                ):
                    log.warning(
                        "DRY RUN conflict updating [%s]: resourceVersion %s != %s",
                        self._describe(resource),
                        desired_version,
                        current_version,
                    )
                    return False, changed
                resource = copy.deepcopy(resource)
                if self._strip_server_fields(current) != self._strip_server_fields(
                    resource
                ):
                    self._store(resource, current)
                    changed = True
        return True, changed

    def delete(self, resource_definitions):
        log.info("DRY RUN delete")
        changed = False
        with self._lock:
            for resource in resource_definitions:
                if self._find(resource) is None:
                    continue
                api_version, kind, name, namespace = self._identifiers(resource)
                self._delete_key(namespace, kind, api_version, name)
                changed = True
        return True, changed

    def is_kind_available(self, kind, api_version):
        return self._available_kinds is None or kind in self._available_kinds

    ## Dry Run Methods #########################################################

    def list_objects(self, namespace: Optional[str] = None) -> List[dict]:
        """Get a copy of every object in the given namespace (or cluster-scoped
        objects when namespace is None)
        """
        return [
            copy.deepcopy(obj)
            for kind_entries in self._cluster_content.get(namespace, {}).values()
            for entries in kind_entries.values()
            for obj in entries.values()
        ]

    @property
    def namespaces(self) -> List[Optional[str]]:
        return list(self._cluster_content.keys())

    ## Implementation Details ##################################################

    @staticmethod
    def _identifiers(resource: dict) -> Tuple[str, str, str, Optional[str]]:
        metadata = resource.get("metadata", {})
        return (
            resource.get("apiVersion"),
            resource.get("kind"),
            metadata.get("name"),
            metadata.get("namespace"),
        )

    @classmethod
    def _describe(cls, resource: dict) -> str:
        api_version, kind, name, namespace = cls._identifiers(resource)
        return f"{namespace}/{api_version}/{kind}/{name}"

    @staticmethod
    def _strip_server_fields(resource: dict) -> dict:
        resource = copy.deepcopy(resource)
        for field in _SERVER_FIELDS:
            resource.get("metadata", {}).pop(field, None)
        return resource

    def _find(self, resource: dict) -> Optional[dict]:
        api_version, kind, name, namespace = self._identifiers(resource)
        return (
            self._cluster_content.get(namespace, {})
            .get(kind, {})
            .get(api_version, {})
            .get(name)
        )

    def _store(self, resource: dict, current: Optional[dict]):
        api_version, kind, name, namespace = self._identifiers(resource)
        log.debug("DRY RUN store [%s/%s/%s/%s]", namespace, kind, api_version, name)
        log.debug4(resource)
        current_md = (current or {}).get("metadata", {})
        metadata = resource.setdefault("metadata", {})
        metadata["uid"] = current_md.get("uid", metadata.get("uid", str(uuid.uuid4())))
        metadata["creationTimestamp"] = current_md.get(
            "creationTimestamp", datetime.now().isoformat()
        )
        metadata["resourceVersion"] = str(next(self._versions))
        with self._lock:
            (
                self._cluster_content.setdefault(namespace, {})
                .setdefault(kind, {})
                .setdefault(api_version, {})
            )[name] = resource

    def _delete_key(self, namespace, kind, api_version, name):
        del self._cluster_content[namespace][kind][api_version][name]
        if not self._cluster_content[namespace][kind][api_version]:
            del self._cluster_content[namespace][kind][api_version]
        if not self._cluster_content[namespace][kind]:
            del self._cluster_content[namespace][kind]
        if not self._cluster_content[namespace]:
            del self._cluster_content[namespace]
