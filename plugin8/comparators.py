"""
Per-kind comparison functions that decide whether an existing object needs to
be updated to match a freshly built desired object.

Every comparator has the shape changed(existing, desired, report, ...) and
appends a reason to the ChangeReport when it returns True. Comparators only
look at the fields listed here. Anything else the cluster or another
controller sets on the object is ignored.
"""

# Standard
from typing import Any, Optional

# First Party
import alog

# Local
from .change_report import ChangeReport
from .desired import hpa_metrics
from .utils import nested_get

log = alog.use_channel("DIFF")

## Generic Helpers #############################################################


def deep_derivative(desired: Any, existing: Any) -> bool:
    """Check that existing is a semantic superset of desired. Unset values in
    desired (None, empty strings, zero, False, empty collections) are ignored so
    that defaults filled in by the api server never count as a difference.

    Args:
        desired:  Any
            The value built by the reconciler
        existing:  Any
            The value currently in the cluster

    Returns:
        derivative:  bool
            True if every value set in desired is present and equal in existing
    """
    if not desired:
        return True
    if isinstance(desired, dict):
        if not isinstance(existing, dict):
            return False
        return all(
            deep_derivative(value, existing.get(key)) for key, value in desired.items()
        )
    if isinstance(desired, list):
        if not isinstance(existing, list) or len(desired) != len(existing):
            return False
        return all(deep_derivative(d, e) for d, e in zip(desired, existing))
    return desired == existing


def is_subset(superset: Optional[dict], subset: Optional[dict]) -> bool:
    """Check that every key/value of subset is present in superset"""
    superset = superset or {}
    return all(superset.get(key) == value for key, value in (subset or {}).items())


def find_container(pod_spec: dict, name: str) -> Optional[dict]:
    for container in pod_spec.get("containers") or []:
        if container.get("name") == name:
            return container
    return None


## Comparators #################################################################


def service_needs_update(
    existing: dict, desired_port: int, report: ChangeReport
) -> bool:
    """Only the plugin port is compared. The service is unchanged as long as
    some TCP port entry matches the desired port number.
    """
    for port in nested_get(existing, "spec.ports") or []:
        if port.get("port") == desired_port and port.get("protocol") == "TCP":
            return False
    report.add("Port changed")
    return True


def plugin_needs_update(
    existing: dict, desired_port: int, report: ChangeReport
) -> bool:
    """Only the service port of the ConsolePlugin is compared. The rest of the
    object is shared with the console operator.
    """
    return report.check(
        "Plugin port changed",
        nested_get(existing, "spec.service.port") != desired_port,
    )


def config_map_changed(existing: dict, desired: dict, report: ChangeReport) -> bool:
    """Structural equality of the data mappings"""
    return report.check(
        "ConfigMap content changed",
        (existing.get("data") or {}) != (desired.get("data") or {}),
    )


def pod_changed(
    existing: dict, desired: dict, container_name: str, report: ChangeReport
) -> bool:
    """Compare two pod templates. Only the annotations set by the builder and
    the fields set on the named container, the volumes and the service account
    are considered.
    """
    existing_annotations = nested_get(existing, "metadata.annotations") or {}
    for key, value in (nested_get(desired, "metadata.annotations") or {}).items():
        if existing_annotations.get(key) != value:
            report.add(f"Annotation changed: {key}")
            return True

    existing_spec = existing.get("spec") or {}
    desired_spec = desired.get("spec") or {}
    existing_container = find_container(existing_spec, container_name)
    desired_container = find_container(desired_spec, container_name)
    if existing_container is None or desired_container is None:
        report.add(f"Container {container_name} not found")
        return True

    return (
        report.check(
            "Container changed",
            not deep_derivative(desired_container, existing_container),
        )
        or report.check(
            "Volumes changed",
            not deep_derivative(
                desired_spec.get("volumes"), existing_spec.get("volumes")
            ),
        )
        or report.check(
            "Service account changed",
            desired_spec.get("serviceAccountName")
            != existing_spec.get("serviceAccountName"),
        )
    )


def deployment_changed(  # pylint: disable=too-many-arguments
    existing: dict,
    desired: dict,
    report: ChangeReport,
    *,
    container_name: str,
    check_replicas: bool,
    desired_replicas: int,
) -> bool:
    """Compare two deployments

    Args:
        existing:  dict
            The deployment in the cluster
        desired:  dict
            The newly built deployment
        report:  ChangeReport
            Report to add the reasons to
        container_name:  str
            The container owned by the reconciler
        check_replicas:  bool
            Whether the replica count is owned by the reconciler. When an
            autoscaler owns it, it must not be compared.
        desired_replicas:  int
            The replica count to compare against when check_replicas is set

    Returns:
        changed:  bool
            True if the deployment must be updated
    """
    return report.check(
        "Pod changed",
        pod_changed(
            nested_get(existing, "spec.template") or {},
            nested_get(desired, "spec.template") or {},
            container_name,
            report,
        ),
    ) or report.check(
        "Replicas changed",
        check_replicas and nested_get(existing, "spec.replicas") != desired_replicas,
    )


def autoscaler_changed(
    existing: dict, desired_autoscaler: dict, report: ChangeReport
) -> bool:
    """Compare an existing HorizontalPodAutoscaler with the autoscaler section
    of the desired spec. Metrics are compared against what the autoscaler
    effectively runs with, so an emptied list is seen as a return to the
    server default.
    """
    spec = existing.get("spec") or {}
    desired_metrics = hpa_metrics(desired_autoscaler)
    return (
        report.check(
            "Max replicas changed",
            spec.get("maxReplicas") != desired_autoscaler.get("maxReplicas"),
        )
        or report.check(
            "Min replicas changed",
            spec.get("minReplicas", 1) != desired_autoscaler.get("minReplicas", 1),
        )
        or report.check(
            "Metrics changed",
            not deep_derivative(desired_metrics, spec.get("metrics")),
        )
    )


def service_monitor_changed(
    existing: dict, desired: dict, report: ChangeReport
) -> bool:
    return report.check(
        "ServiceMonitor spec changed",
        not deep_derivative(desired.get("spec"), existing.get("spec")),
    ) or report.check(
        "ServiceMonitor labels changed",
        not is_subset(
            nested_get(existing, "metadata.labels"),
            nested_get(desired, "metadata.labels"),
        ),
    )


def cluster_role_changed(existing: dict, desired: dict, report: ChangeReport) -> bool:
    return report.check(
        "Rules changed",
        not deep_derivative(desired.get("rules"), existing.get("rules")),
    )


def cluster_role_binding_changed(
    existing: dict, desired: dict, report: ChangeReport
) -> bool:
    return report.check(
        "Role ref changed",
        not deep_derivative(desired.get("roleRef"), existing.get("roleRef")),
    ) or report.check(
        "Subjects changed",
        not deep_derivative(desired.get("subjects"), existing.get("subjects")),
    )
