"""
This DeployManager is responsible for delegating cluster operations to the
openshift library. It is the one that will be used when the reconciler is
running in the cluster or outside the cluster making live changes.
"""
# Standard
from collections import namedtuple
from typing import Callable, List, Optional, Tuple

# Third Party
from openshift.dynamic import DynamicClient
from openshift.dynamic.exceptions import (
    ConflictError,
    DynamicApiError,
    ForbiddenError,
    NotFoundError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from openshift.dynamic.resource import Resource
import kubernetes

# First Party
import alog

# Local
from .. import config
from ..exceptions import assert_cluster
from .base import DeployManagerBase

log = alog.use_channel("OSFTD")

## Deploy Manager ##############################################################


class OpenshiftDeployManager(DeployManagerBase):
    """This DeployManager uses the openshift DynamicClient to interact with the
    cluster
    """

    def __init__(self):
        log.debug("Initializing openshift client")
        self._client = None

    @property
    def client(self):
        """Lazy property access to the client"""
        if self._client is None:
            self._client = self._setup_client()
        return self._client

    def get_object_current_state(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Tuple[bool, Optional[dict]]:
        """The get_current_objects function fetches the current state using
        calls directly to the api client

        Args:
            kind:  str
                The kind of the object ot fetch
            name:  str
                The full name of the object to fetch
            namespace:  Optional[str]
                The namespace to search for the object or None for no namespace
            api_version:  Optional[str]
                The api_version of the resource kind to fetch

        Returns:
            success:  bool
                Whether or not the state fetch operation succeeded
            current_state:  dict or None
                The dict representation of the current object's configuration,
                or None if not present
        """
        resources = self._get_resource_handle(kind, api_version)
        if not resources:
            return True, None

        try:
            resource = resources.get(name=name, namespace=namespace)
        except NotFoundError:
            log.debug(
                "No object named [%s/%s] found in namespace [%s]", kind, name, namespace
            )
            return True, None
        except ForbiddenError:
            log.debug(
                "Fetching objects of kind [%s] forbidden in namespace [%s]",
                kind,
                namespace,
            )
            return False, None
        except DynamicApiError as err:
            log.warning(
                "Failed to fetch [%s/%s] in namespace [%s]: %s",
                kind,
                name,
                namespace,
                err,
            )
            return False, None

        # If the resource was found, return it's dict representation
        return True, resource.to_dict()

    @alog.logged_function(log.debug)
    def create(self, resource_definitions: List[dict]) -> Tuple[bool, bool]:
        return self._run_operation(resource_definitions, self._create)

    @alog.logged_function(log.debug)
    def update(self, resource_definitions: List[dict]) -> Tuple[bool, bool]:
        return self._run_operation(resource_definitions, self._update)

    @alog.logged_function(log.debug)
    def delete(self, resource_definitions: List[dict]) -> Tuple[bool, bool]:
        return self._run_operation(resource_definitions, self._delete)

    def is_kind_available(self, kind: str, api_version: str) -> bool:
        return self._get_resource_handle(kind, api_version) is not None

    ## Implementation Helpers ##################################################

    @staticmethod
    def _setup_client():
        """Create a DynamicClient that will work based on where the reconciler
        is running
        """
        # Try in-cluster config
        try:
            log.debug2("Running with in-cluster config")

            # Create Empty Config and load in-cluster information
            kube_config = kubernetes.client.Configuration()
            kubernetes.config.load_incluster_config(client_configuration=kube_config)

            # Generate ApiClient and return Openshift DynamicClient
            api_client = kubernetes.client.ApiClient(kube_config)
            return DynamicClient(api_client)

        # Fall back to out-of-cluster config
        except kubernetes.config.ConfigException:
            log.debug2("Running with out-of-cluster config")
            return DynamicClient(kubernetes.config.new_client_from_config())

    def _get_resource_handle(
        self, kind: str, api_version: Optional[str]
    ) -> Optional[Resource]:
        """Get the openshift resource handle for a specified kind and api_version"""
        resources = None
        try:
            resources = self.client.resources.get(kind=kind, api_version=api_version)
        except (ResourceNotFoundError, ResourceNotUniqueError):
            log.debug(
                "No objects of kind [%s] found or multiple objects matching "
                + "request found",
                kind,
            )
        return resources

    # Internal struct to hold the key resource identifier elements
    _ResourceIdentifiers = namedtuple(
        "ResourceIdentifiers", ["api_version", "kind", "name", "namespace"]
    )

    @classmethod
    def _get_resource_identifiers(cls, resource_definition):
        """Helper for getting the required parts of a single resource definition"""
        api_version = resource_definition.get("apiVersion")
        kind = resource_definition.get("kind")
        name = resource_definition.get("metadata", {}).get("name")
        namespace = resource_definition.get("metadata", {}).get("namespace")
        assert None not in [
            kind,
            name,
            api_version,
        ], "Cannot operate on resource without kind, name or apiVersion"
        return cls._ResourceIdentifiers(api_version, kind, name, namespace)

    def _get_required_handle(self, res_id) -> Resource:
        resource_handle = self._get_resource_handle(res_id.kind, res_id.api_version)
        assert_cluster(
            resource_handle,
            (
                "Failed to fetch resource handle for "
                + f"{res_id.namespace}/{res_id.api_version}/{res_id.kind}"
            ),
        )
        return resource_handle

    def _run_operation(
        self,
        resource_definitions: List[dict],
        operation: Callable[[dict], bool],
    ) -> Tuple[bool, bool]:
        """Shared wrapper for executing a client operation on each resource"""

        # Make sure the resource_definitions is a list
        assert isinstance(
            resource_definitions, list
        ), "Programming Error: resource_definitions is not a list"

        # Run each resource individually so that we can stop at the first
        # failure. Resources are assumed to be in an intentional sequence.
        success = True
        changed = False
        for resource_definition in resource_definitions:
            try:
                changed = operation(resource_definition) or changed
            except Exception as err:  # pylint: disable=broad-except
                log.warning(
                    "Operation [%s] failed to execute: %s",
                    operation.__name__,
                    err,
                    exc_info=True,
                )
                success = False
                break
        return success, changed

    ################
    ## Operations ##
    ################

    def _create(self, resource_definition: dict) -> bool:
        """Create a single resource, treating AlreadyExists as no change"""
        res_id = self._get_resource_identifiers(resource_definition)
        resource_handle = self._get_required_handle(res_id)
        log.debug2(
            "Attempting to create [%s/%s/%s] in %s",
            res_id.api_version,
            res_id.kind,
            res_id.name,
            res_id.namespace,
        )
        try:
            resource_handle.create(
                body=resource_definition,
                namespace=res_id.namespace,
                field_manager=config.field_manager,
            )
        except ConflictError:
            log.debug(
                "[%s/%s] already exists in %s",
                res_id.kind,
                res_id.name,
                res_id.namespace,
            )
            return False
        return True

    def _update(self, resource_definition: dict) -> bool:
        """Replace a single resource. A conflict on the resourceVersion is
        raised to the caller.
        """
        res_id = self._get_resource_identifiers(resource_definition)
        resource_handle = self._get_required_handle(res_id)

        # Strip out managedFields to let the sever set them
        resource_definition.setdefault("metadata", {}).pop("managedFields", None)

        log.debug2(
            "Attempting to put [%s/%s/%s] in %s",
            res_id.api_version,
            res_id.kind,
            res_id.name,
            res_id.namespace,
        )
        previous_version = resource_definition["metadata"].get("resourceVersion")
        result = resource_handle.replace(
            body=resource_definition,
            name=res_id.name,
            namespace=res_id.namespace,
            field_manager=config.field_manager,
        ).to_dict()
        return result.get("metadata", {}).get("resourceVersion") != previous_version

    def _delete(self, resource_definition: dict) -> bool:
        """Delete a single resource if it exists"""
        res_id = self._get_resource_identifiers(resource_definition)
        try:
            resource_handle = self.client.resources.get(
                api_version=res_id.api_version, kind=res_id.kind
            )
            log.debug2(
                "Attempting to delete [%s/%s/%s] from %s",
                res_id.api_version,
                res_id.kind,
                res_id.name,
                res_id.namespace,
            )
            resource_handle.delete(name=res_id.name, namespace=res_id.namespace)

        # If the kind or instance is not found, that's a success without change
        except (ResourceNotFoundError, NotFoundError) as err:
            log.debug2(
                "Valid error caught when deleting [%s/%s]: %s",
                res_id.kind,
                res_id.name,
                err,
            )
            return False
        return True
