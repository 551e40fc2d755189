"""
This module holds the core session state for an individual reconciliation pass
"""

# Standard
from typing import Optional, Tuple
import threading

# First Party
import aconfig
import alog

# Local
from . import config, constants
from .deploy_manager import DeployManagerBase
from .exceptions import ReconcileCancelledError, assert_config

log = alog.use_channel("SESSION")


class Session:
    """A session holds the inputs of one in-progress reconciliation pass: the
    desired FlowCollector manifest, the deploy manager, and the cancellation
    token that every cluster call checks before running.
    """

    # We strictly define the set of attributes that a Session can have to
    # disallow arbitrary assignment
    __slots__ = [
        "__id",
        "__cr_manifest",
        "__deploy_manager",
        "__cancelled",
    ]

    def __init__(
        self,
        reconciliation_id: str,
        cr_manifest: aconfig.Config,
        deploy_manager: DeployManagerBase,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Construct a session object to hold the state for a reconciliation

        Args:
            reconciliation_id:  str
                The unique ID for this reconciliation
            cr_manifest:  aconfig.Config
                The full value of the FlowCollector manifest that triggered
                this reconciliation
            deploy_manager:  DeployManagerBase
                The preconfigured DeployManager in charge of running the actual
                cluster operations for this pass
            cancel_event:  Optional[threading.Event]
                Event shared with the caller. When set, the next cluster call
                raises ReconcileCancelledError.
        """
        self.__id = reconciliation_id
        if not isinstance(cr_manifest, aconfig.Config):
            cr_manifest = aconfig.Config(cr_manifest, override_env_vars=False)
        self._validate_cr(cr_manifest)
        self.__cr_manifest = cr_manifest
        self.__deploy_manager = deploy_manager
        self.__cancelled = cancel_event or threading.Event()

    ## Properties ##############################################################

    @property
    def id(self) -> str:  # pylint: disable=invalid-name
        """The unique reconciliation ID"""
        return self.__id

    @property
    def cr_manifest(self) -> aconfig.Config:
        """The full CR manifest that triggered this reconciliation"""
        return self.__cr_manifest

    @property
    def spec(self) -> aconfig.Config:
        """The spec section of the CR manifest"""
        return self.cr_manifest.get("spec") or aconfig.Config({})

    @property
    def metadata(self) -> aconfig.Config:
        """The metadata for this CR"""
        return self.cr_manifest.metadata

    @property
    def name(self) -> str:
        """The metadata.name for this CR"""
        return self.metadata.name

    @property
    def target_namespace(self) -> str:
        """The namespace the operand is deployed to. The library config
        override wins over spec.namespace.
        """
        return (
            config.namespace
            or self.spec.get("namespace")
            or constants.DEFAULT_NAMESPACE
        )

    @property
    def deploy_manager(self) -> DeployManagerBase:
        """Allow read access to the deploy manager"""
        return self.__deploy_manager

    ## Cancellation ############################################################

    def cancel(self):
        """Signal the in-flight pass to stop at the next cluster call"""
        log.info("Cancelling reconciliation %s", self.id)
        self.__cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self.__cancelled.is_set()

    def assert_not_cancelled(self):
        if self.__cancelled.is_set():
            raise ReconcileCancelledError(f"Reconciliation {self.id} was cancelled")

    ## State Management ########################################################

    def get_object_current_state(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Tuple[bool, Optional[dict]]:
        """Get the current state of the given object. Unlike a namespaced
        lookup helper, None here means a cluster-scoped object.
        """
        self.assert_not_cancelled()
        return self.deploy_manager.get_object_current_state(
            kind=kind,
            name=name,
            namespace=namespace,
            api_version=api_version,
        )

    ## Implementation Details ##################################################

    @staticmethod
    def _validate_cr(cr_manifest: aconfig.Config):
        """Ensure that all expected elements of the CR are present"""
        assert_config(cr_manifest.get("kind"), "CR Manifest missing kind")
        assert_config(cr_manifest.get("apiVersion"), "CR Manifest missing apiVersion")
        assert_config(
            cr_manifest.get("metadata", {}).get("name"), "CR Manifest missing name"
        )
