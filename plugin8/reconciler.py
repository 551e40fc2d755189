"""
The ConsolePluginReconciler drives one reconciliation pass of the console
plugin unit: every owned object is fetched, compared with a freshly built
desired version and created, updated or left alone in a fixed order.
"""

# Standard
from functools import partial
from typing import List, Optional

# First Party
import alog

# Local
from . import constants
from .builder import Builder
from .cert_watcher import CertificateWatcher
from .change_report import ChangeReport
from .client_helper import ClientHelper, apply_desired, reconcile_owned
from .comparators import (
    autoscaler_changed,
    config_map_changed,
    deployment_changed,
    plugin_needs_update,
    service_monitor_changed,
    service_needs_update,
)
from .desired import hpa_disabled, loki_tls_configs
from .discovery import AvailableAPIs
from .managed_object import ManagedObject
from .object_manager import NamespacedObjectManager
from .registration import reconcile_registration
from .session import Session

log = alog.use_channel("RECON")


class ConsolePluginReconciler:
    """Reconciler for the console plugin unit. An instance only holds
    configuration; all per-pass state lives in the object manager and client
    built inside each call, so one instance can serve concurrent passes.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        namespace: str,
        previous_namespace: Optional[str],
        image: str,
        available_apis: AvailableAPIs,
        cert_watcher: Optional[CertificateWatcher] = None,
    ):
        """
        Args:
            namespace:  str
                Namespace the namespaced objects are deployed to
            previous_namespace:  Optional[str]
                Namespace of a previous deployment to clean up
            image:  str
                Default plugin image
            available_apis:  AvailableAPIs
                Optional kinds served by the cluster
            cert_watcher:  Optional[CertificateWatcher]
                Watcher annotating the pod with certificate fingerprints
        """
        self.namespace = namespace
        self.previous_namespace = previous_namespace
        self.image = image
        self.cert_watcher = cert_watcher
        self.has_svc_monitor = available_apis.has_svc_monitor()

        # Ordered (name, kind, api_version) of the owned namespaced slots
        self._owned = [
            (constants.PLUGIN_NAME, "Deployment", constants.API_VERSION_APPS),
            (constants.PLUGIN_NAME, "Service", constants.API_VERSION_V1),
            (
                constants.PLUGIN_NAME,
                "HorizontalPodAutoscaler",
                constants.API_VERSION_AUTOSCALING,
            ),
            (constants.PLUGIN_NAME, "ServiceAccount", constants.API_VERSION_V1),
            (
                constants.PLUGIN_CONFIG_MAP_NAME,
                "ConfigMap",
                constants.API_VERSION_V1,
            ),
        ]
        if self.has_svc_monitor:
            self._owned.append(
                (
                    constants.PLUGIN_NAME,
                    "ServiceMonitor",
                    constants.API_VERSION_MONITORING,
                )
            )

    @property
    def managed_kinds(self) -> List[str]:
        return [kind for _, kind, _ in self._owned]

    ## Public ##################################################################

    @alog.logged_function(log.debug)
    def reconcile(self, session: Session):
        """Run one reconciliation pass. The first error aborts the pass and is
        raised to the caller, which is expected to retry the whole pass.
        """
        log.info("Reconciling console plugin in %s [%s]", self.namespace, session.id)
        object_manager = self._new_object_manager(session)
        object_manager.fetch_all()
        client = ClientHelper(session)
        builder = Builder(self.namespace, self.image, session.spec)

        reconcile_registration(
            session, constants.PLUGIN_NAME, builder.plugin["register"]
        )
        self._reconcile_permissions(object_manager, client, builder)
        self._reconcile_plugin(client, builder)
        digest = self._reconcile_config_map(object_manager, client, builder)
        self._reconcile_deployment(session, object_manager, client, builder, digest)
        self._reconcile_services(object_manager, client, builder)
        self._reconcile_hpa(object_manager, client, builder)

    def cleanup_namespace(self, session: Session) -> int:
        """Remove the owned objects from the previous namespace

        Returns:
            n_deleted:  int
                The number of objects removed
        """
        return self._new_object_manager(session).cleanup_previous_namespace()

    ## Steps ###################################################################

    def _reconcile_permissions(
        self,
        object_manager: NamespacedObjectManager,
        client: ClientHelper,
        builder: Builder,
    ):
        # The service account is never updated once created
        if not object_manager.exists(self._slot(object_manager, "ServiceAccount")):
            client.create_owned(builder.service_account())
        client.reconcile_cluster_role(builder.cluster_role())
        client.reconcile_cluster_role_binding(builder.cluster_role_binding())

    @staticmethod
    def _reconcile_plugin(client: ClientHelper, builder: Builder):
        report = ChangeReport("Console plug-in")
        try:
            desired = builder.console_plugin()
            existing = client.get(
                kind="ConsolePlugin",
                name=constants.PLUGIN_NAME,
                api_version=constants.API_VERSION_CONSOLE_PLUGIN,
            )
            port = builder.plugin["port"]
            apply_desired(
                client,
                existing,
                desired,
                lambda current, _, rep: plugin_needs_update(current, port, rep),
                report,
            )
        finally:
            report.log_if_needed()

    def _reconcile_config_map(
        self,
        object_manager: NamespacedObjectManager,
        client: ClientHelper,
        builder: Builder,
    ) -> str:
        report = ChangeReport("Console config map")
        try:
            config_map, digest = builder.config_map()
            reconcile_owned(
                object_manager,
                client,
                self._slot(object_manager, "ConfigMap"),
                config_map,
                config_map_changed,
                report,
            )
        finally:
            report.log_if_needed()
        return digest

    def _reconcile_deployment(  # pylint: disable=too-many-arguments
        self,
        session: Session,
        object_manager: NamespacedObjectManager,
        client: ClientHelper,
        builder: Builder,
        digest: str,
    ):
        report = ChangeReport("Console deployment")
        try:
            owned = self._slot(object_manager, "Deployment")
            desired = builder.deployment(digest)
            if self.cert_watcher is not None:
                self.cert_watcher.annotate_pod(
                    session,
                    desired["spec"]["template"],
                    *loki_tls_configs(builder.loki),
                )

            check_replicas = hpa_disabled(builder.plugin["autoscaler"])
            existing = object_manager.current(owned)
            if not check_replicas and existing is not None:
                # The autoscaler owns the replica count; keep what it set
                replicas = (existing.get("spec") or {}).get("replicas")
                if replicas is not None:
                    desired["spec"]["replicas"] = replicas

            reconcile_owned(
                object_manager,
                client,
                owned,
                desired,
                partial(
                    deployment_changed,
                    container_name=constants.PLUGIN_NAME,
                    check_replicas=check_replicas,
                    desired_replicas=builder.plugin["replicas"],
                ),
                report,
                on_unchanged=client.check_deployment_in_progress,
            )
        finally:
            report.log_if_needed()

    def _reconcile_services(
        self,
        object_manager: NamespacedObjectManager,
        client: ClientHelper,
        builder: Builder,
    ):
        report = ChangeReport("Console service")
        try:
            port = builder.plugin["port"]
            reconcile_owned(
                object_manager,
                client,
                self._slot(object_manager, "Service"),
                builder.service,
                lambda existing, _, rep: service_needs_update(existing, port, rep),
                report,
            )
            if self.has_svc_monitor:
                reconcile_owned(
                    object_manager,
                    client,
                    self._slot(object_manager, "ServiceMonitor"),
                    builder.service_monitor(),
                    service_monitor_changed,
                    report,
                )
        finally:
            report.log_if_needed()

    def _reconcile_hpa(
        self,
        object_manager: NamespacedObjectManager,
        client: ClientHelper,
        builder: Builder,
    ):
        owned = self._slot(object_manager, "HorizontalPodAutoscaler")
        autoscaler = builder.plugin["autoscaler"]
        if hpa_disabled(autoscaler):
            object_manager.try_delete(owned)
            return

        report = ChangeReport("Console autoscaler")
        try:
            reconcile_owned(
                object_manager,
                client,
                owned,
                builder.auto_scaler(),
                lambda existing, _, rep: autoscaler_changed(
                    existing, autoscaler, rep
                ),
                report,
            )
        finally:
            report.log_if_needed()

    ## Implementation Details ##################################################

    def _new_object_manager(self, session: Session) -> NamespacedObjectManager:
        object_manager = NamespacedObjectManager(
            session, self.namespace, self.previous_namespace
        )
        for name, kind, api_version in self._owned:
            object_manager.add_managed_object(name, kind, api_version)
        return object_manager

    @staticmethod
    def _slot(object_manager: NamespacedObjectManager, kind: str) -> ManagedObject:
        for owned in object_manager.managed_objects:
            if owned.kind == kind:
                return owned
        raise KeyError(f"Programming Error: {kind} is not managed")
