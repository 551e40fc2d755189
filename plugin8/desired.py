"""
Accessors for the console plugin portion of a FlowCollector spec. The CRD
normally fills in defaults; the same defaults are merged here so a sparse
manifest still produces complete desired objects.
"""

# Standard
from typing import List, Optional
import copy
import json

# Local
from . import constants
from .utils import merge_configs

CONSOLE_PLUGIN_DEFAULTS = {
    "register": True,
    "port": constants.DEFAULT_PLUGIN_PORT,
    "imagePullPolicy": "IfNotPresent",
    "replicas": 1,
    "logLevel": "info",
    "resources": {
        "requests": {"cpu": "100m", "memory": "50Mi"},
        "limits": {"memory": "100Mi"},
    },
    "autoscaler": {
        "status": constants.AUTOSCALER_DISABLED,
        "minReplicas": 1,
        "maxReplicas": 3,
        "metrics": [
            {
                "type": "Resource",
                "resource": {
                    "name": "cpu",
                    "target": {"type": "Utilization", "averageUtilization": 50},
                },
            }
        ],
    },
    "portNaming": {"enable": True, "portNames": {}},
    "quickFilters": [],
}

# Metrics the api server fills in for an autoscaler created without any
DEFAULT_HPA_METRICS = [
    {
        "type": "Resource",
        "resource": {
            "name": "cpu",
            "target": {"type": "Utilization", "averageUtilization": 80},
        },
    }
]

LOKI_DEFAULTS = {
    "url": "http://loki:3100/",
    "timeout": "30s",
    "tenantID": "netobserv",
    "authToken": constants.LOKI_AUTH_DISABLED,
    "tls": {"enable": False, "insecureSkipVerify": False},
    "statusTls": {"enable": False, "insecureSkipVerify": False},
}


def _with_defaults(section: Optional[dict], defaults: dict) -> dict:
    # Round-trip through json so attribute dicts from aconfig come back as
    # plain dicts that yaml can serialize
    overrides = json.loads(json.dumps(section or {}))
    return merge_configs(copy.deepcopy(defaults), overrides)


def plugin_spec(spec: dict) -> dict:
    """Get the consolePlugin section of the spec with defaults applied"""
    return _with_defaults(spec.get("consolePlugin"), CONSOLE_PLUGIN_DEFAULTS)


def loki_spec(spec: dict) -> dict:
    """Get the loki section of the spec with defaults applied"""
    return _with_defaults(spec.get("loki"), LOKI_DEFAULTS)


def hpa_disabled(autoscaler: dict) -> bool:
    return autoscaler.get("status") != constants.AUTOSCALER_ENABLED


def hpa_metrics(autoscaler: dict) -> List[dict]:
    """The metrics the autoscaler effectively runs with. An explicitly empty
    list falls back to the server default.
    """
    return copy.deepcopy(autoscaler.get("metrics") or DEFAULT_HPA_METRICS)


def querier_url(loki: dict) -> str:
    return loki.get("querierUrl") or loki.get("url")


def status_url(loki: dict) -> str:
    return loki.get("statusUrl") or querier_url(loki)


def loki_tls_configs(loki: dict) -> List[dict]:
    """The TLS configs whose certificates the plugin mounts, in a stable
    order: querier first, then status
    """
    return [loki.get("tls", {}), loki.get("statusTls", {})]
