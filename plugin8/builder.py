"""
The Builder turns the FlowCollector spec into the concrete desired objects of
the console plugin unit. Every method is pure: it reads the spec captured at
construction and returns a fresh dict.
"""

# Standard
from typing import List, Optional, Tuple
import copy

# Third Party
import yaml

# First Party
import alog

# Local
from . import constants
from .desired import (
    hpa_disabled,
    hpa_metrics,
    loki_spec,
    plugin_spec,
    querier_url,
    status_url,
)
from .utils import content_digest

log = alog.use_channel("BUILD")

CONFIG_VOLUME = "config-volume"
SERVING_CERT_VOLUME = "serving-cert"
TOKEN_VOLUME = "token"
TOKEN_EXPIRATION_SECONDS = 3600


class Builder:
    """Pure construction of the desired console plugin objects"""

    def __init__(self, namespace: str, image: str, spec: dict):
        """
        Args:
            namespace:  str
                Namespace of the namespaced objects
            image:  str
                Default plugin image, used when the spec does not pin one
            spec:  dict
                The FlowCollector spec
        """
        self.namespace = namespace
        self.plugin = plugin_spec(spec)
        self.loki = loki_spec(spec)
        self.image = self.plugin.get("image") or image
        self.labels = {
            constants.APP_LABEL: constants.PLUGIN_NAME,
            constants.PART_OF_LABEL: constants.PART_OF_VALUE,
        }
        self.selector = {constants.APP_LABEL: constants.PLUGIN_NAME}

    ## Permissions #############################################################

    def service_account(self) -> dict:
        return {
            "apiVersion": constants.API_VERSION_V1,
            "kind": "ServiceAccount",
            "metadata": self._metadata(constants.PLUGIN_NAME),
        }

    def cluster_role(self) -> dict:
        return {
            "apiVersion": constants.API_VERSION_RBAC,
            "kind": "ClusterRole",
            "metadata": self._metadata(constants.PLUGIN_NAME, namespaced=False),
            "rules": [
                {
                    "apiGroups": ["authentication.k8s.io"],
                    "resources": ["tokenreviews"],
                    "verbs": ["create"],
                }
            ],
        }

    def cluster_role_binding(self) -> dict:
        return {
            "apiVersion": constants.API_VERSION_RBAC,
            "kind": "ClusterRoleBinding",
            "metadata": self._metadata(constants.PLUGIN_NAME, namespaced=False),
            "roleRef": {
                "apiGroup": "rbac.authorization.k8s.io",
                "kind": "ClusterRole",
                "name": constants.PLUGIN_NAME,
            },
            "subjects": [
                {
                    "kind": "ServiceAccount",
                    "name": constants.PLUGIN_NAME,
                    "namespace": self.namespace,
                }
            ],
        }

    ## Console #################################################################

    def console_plugin(self) -> dict:
        service = {
            "name": constants.PLUGIN_NAME,
            "namespace": self.namespace,
            "port": self.plugin["port"],
        }
        return {
            "apiVersion": constants.API_VERSION_CONSOLE_PLUGIN,
            "kind": "ConsolePlugin",
            "metadata": self._metadata(constants.PLUGIN_NAME, namespaced=False),
            "spec": {
                "displayName": "NetObserv plugin",
                "service": dict(service, basePath="/"),
                "proxy": [
                    {
                        "type": "Service",
                        "alias": "backend",
                        "authorize": True,
                        "service": service,
                    }
                ],
            },
        }

    ## Configuration ###########################################################

    def config_map(self) -> Tuple[dict, str]:
        """Build the plugin ConfigMap

        Returns:
            config_map:  dict
                The desired ConfigMap
            digest:  str
                Fingerprint of the generated configuration content
        """
        content = yaml.safe_dump(self._plugin_config(), default_flow_style=False)
        log.debug4("Plugin config:\n%s", content)
        config_map = {
            "apiVersion": constants.API_VERSION_V1,
            "kind": "ConfigMap",
            "metadata": self._metadata(constants.PLUGIN_CONFIG_MAP_NAME),
            "data": {constants.PLUGIN_CONFIG_FILE: content},
        }
        return config_map, content_digest(content)

    ## Workload ################################################################

    def deployment(self, config_digest: str) -> dict:
        """Build the plugin deployment. The replica count is left unset when an
        autoscaler owns it.
        """
        volumes, mounts = self._volumes()
        container = {
            "name": constants.PLUGIN_NAME,
            "image": self.image,
            "imagePullPolicy": self.plugin["imagePullPolicy"],
            "args": [
                "-loglevel",
                self.plugin["logLevel"],
                "-config",
                f"{constants.PLUGIN_CONFIG_MOUNT_PATH}/{constants.PLUGIN_CONFIG_FILE}",
            ],
            "resources": copy.deepcopy(self.plugin["resources"]),
            "ports": [
                {
                    "name": constants.PLUGIN_MAIN_PORT_NAME,
                    "containerPort": self.plugin["port"],
                    "protocol": "TCP",
                },
                {
                    "name": constants.PLUGIN_METRICS_PORT_NAME,
                    "containerPort": constants.PLUGIN_METRICS_PORT,
                    "protocol": "TCP",
                },
            ],
            "volumeMounts": mounts,
        }
        spec = {
            "selector": {"matchLabels": dict(self.selector)},
            "template": {
                "metadata": {
                    "labels": dict(self.labels),
                    "annotations": {
                        constants.CONFIG_DIGEST_ANNOTATION: config_digest,
                    },
                },
                "spec": {
                    "serviceAccountName": constants.PLUGIN_NAME,
                    "containers": [container],
                    "volumes": volumes,
                },
            },
        }
        if hpa_disabled(self.plugin["autoscaler"]):
            spec["replicas"] = self.plugin["replicas"]
        return {
            "apiVersion": constants.API_VERSION_APPS,
            "kind": "Deployment",
            "metadata": self._metadata(constants.PLUGIN_NAME),
            "spec": spec,
        }

    def auto_scaler(self) -> dict:
        autoscaler = self.plugin["autoscaler"]
        return {
            "apiVersion": constants.API_VERSION_AUTOSCALING,
            "kind": "HorizontalPodAutoscaler",
            "metadata": self._metadata(constants.PLUGIN_NAME),
            "spec": {
                "scaleTargetRef": {
                    "apiVersion": constants.API_VERSION_APPS,
                    "kind": "Deployment",
                    "name": constants.PLUGIN_NAME,
                },
                "minReplicas": autoscaler.get("minReplicas", 1),
                "maxReplicas": autoscaler["maxReplicas"],
                "metrics": hpa_metrics(autoscaler),
            },
        }

    ## Exposure ################################################################

    def service(self, existing: Optional[dict] = None) -> dict:
        """Build the plugin service. When updating, the existing service is
        used as the base so fields set by the cluster (clusterIP and friends)
        are preserved and only the ports are rewritten.
        """
        ports = [
            {
                "name": constants.PLUGIN_MAIN_PORT_NAME,
                "port": self.plugin["port"],
                "protocol": "TCP",
            },
            {
                "name": constants.PLUGIN_METRICS_PORT_NAME,
                "port": constants.PLUGIN_METRICS_PORT,
                "protocol": "TCP",
            },
        ]
        if existing is not None:
            service = copy.deepcopy(existing)
            service.setdefault("spec", {})["ports"] = ports
            return service
        metadata = self._metadata(constants.PLUGIN_NAME)
        metadata["annotations"] = {
            constants.SERVING_CERT_ANNOTATION: constants.PLUGIN_SERVING_CERT_SECRET,
        }
        return {
            "apiVersion": constants.API_VERSION_V1,
            "kind": "Service",
            "metadata": metadata,
            "spec": {"selector": dict(self.selector), "ports": ports},
        }

    def service_monitor(self) -> dict:
        server_name = f"{constants.PLUGIN_NAME}.{self.namespace}.svc"
        return {
            "apiVersion": constants.API_VERSION_MONITORING,
            "kind": "ServiceMonitor",
            "metadata": self._metadata(constants.PLUGIN_NAME),
            "spec": {
                "endpoints": [
                    {
                        "port": constants.PLUGIN_METRICS_PORT_NAME,
                        "interval": "15s",
                        "scheme": "https",
                        "tlsConfig": {
                            "serverName": server_name,
                            "ca": {
                                "configMap": {
                                    "name": "openshift-service-ca.crt",
                                    "key": "service-ca.crt",
                                }
                            },
                        },
                    }
                ],
                "namespaceSelector": {"matchNames": [self.namespace]},
                "selector": {"matchLabels": dict(self.selector)},
            },
        }

    ## Implementation Details ##################################################

    def _metadata(self, name: str, namespaced: bool = True) -> dict:
        metadata = {"name": name, "labels": dict(self.labels)}
        if namespaced:
            metadata["namespace"] = self.namespace
        return metadata

    def _plugin_config(self) -> dict:
        """The content of the plugin's config.yaml"""
        loki = self.loki
        loki_config = {
            "url": querier_url(loki),
            "tenantID": loki.get("tenantID"),
            "timeout": loki.get("timeout"),
            "forwardUserToken": loki["authToken"] == constants.LOKI_AUTH_FORWARD,
        }
        if status_url(loki) != querier_url(loki):
            loki_config["statusUrl"] = status_url(loki)
        if loki["authToken"] == constants.LOKI_AUTH_HOST:
            loki_config["tokenPath"] = constants.LOKI_TOKEN_PATH
        for section, prefix in [("tls", ""), ("statusTls", "status")]:
            loki_config.update(self._tls_config(section, prefix))

        port_naming = self.plugin.get("portNaming") or {}
        cert_dir = constants.PLUGIN_CERT_MOUNT_PATH
        return {
            "server": {
                "port": self.plugin["port"],
                "metricsPort": constants.PLUGIN_METRICS_PORT,
                "certPath": f"{cert_dir}/tls.crt",
                "keyPath": f"{cert_dir}/tls.key",
            },
            "loki": loki_config,
            "frontend": {
                "portNaming": {
                    "enable": bool(port_naming.get("enable")),
                    "portNames": dict(port_naming.get("portNames") or {}),
                },
                "quickFilters": list(self.plugin.get("quickFilters") or []),
            },
        }

    def _tls_config(self, section: str, prefix: str) -> dict:
        """Config entries pointing the plugin at the mounted loki certs"""
        tls = self.loki.get(section) or {}
        if not tls.get("enable"):
            return {}

        def key(name: str) -> str:
            return prefix + name[0].upper() + name[1:] if prefix else name

        base = constants.LOKI_CERT_MOUNT_PATHS[section]
        config = {}
        if tls.get("insecureSkipVerify"):
            config[key("skipTls")] = True
        ca_cert = tls.get("caCert") or {}
        if ca_cert.get("name") and ca_cert.get("certFile"):
            config[key("caPath")] = f"{base}-ca/{ca_cert['certFile']}"
        user_cert = tls.get("userCert") or {}
        if user_cert.get("name") and user_cert.get("certFile"):
            config[key("userCertPath")] = f"{base}-user/{user_cert['certFile']}"
            if user_cert.get("certKey"):
                config[key("userKeyPath")] = f"{base}-user/{user_cert['certKey']}"
        return config

    def _volumes(self) -> Tuple[List[dict], List[dict]]:
        """Volumes and matching container mounts for the plugin pod"""
        volumes = [
            {
                "name": SERVING_CERT_VOLUME,
                "secret": {"secretName": constants.PLUGIN_SERVING_CERT_SECRET},
            },
            {
                "name": CONFIG_VOLUME,
                "configMap": {"name": constants.PLUGIN_CONFIG_MAP_NAME},
            },
        ]
        mounts = [
            {
                "name": SERVING_CERT_VOLUME,
                "mountPath": constants.PLUGIN_CERT_MOUNT_PATH,
                "readOnly": True,
            },
            {
                "name": CONFIG_VOLUME,
                "mountPath": constants.PLUGIN_CONFIG_MOUNT_PATH,
                "readOnly": True,
            },
        ]
        for section, base in constants.LOKI_CERT_MOUNT_PATHS.items():
            tls = self.loki.get(section) or {}
            if not tls.get("enable"):
                continue
            for ref_key, suffix in [("caCert", "ca"), ("userCert", "user")]:
                ref = tls.get(ref_key) or {}
                if not ref.get("name"):
                    continue
                volume_name = f"{section.lower()}-{suffix}"
                volumes.append(self._cert_volume(volume_name, ref))
                mounts.append(
                    {
                        "name": volume_name,
                        "mountPath": f"{base}-{suffix}",
                        "readOnly": True,
                    }
                )
        if self.loki["authToken"] == constants.LOKI_AUTH_HOST:
            token_dir, token_file = constants.LOKI_TOKEN_PATH.rsplit("/", 1)
            volumes.append(
                {
                    "name": TOKEN_VOLUME,
                    "projected": {
                        "sources": [
                            {
                                "serviceAccountToken": {
                                    "path": token_file,
                                    "expirationSeconds": TOKEN_EXPIRATION_SECONDS,
                                }
                            }
                        ]
                    },
                }
            )
            mounts.append(
                {
                    "name": TOKEN_VOLUME,
                    "mountPath": token_dir,
                }
            )
        return volumes, mounts

    @staticmethod
    def _cert_volume(volume_name: str, ref: dict) -> dict:
        if (ref.get("type") or "").lower() == constants.CERT_TYPE_SECRET:
            return {"name": volume_name, "secret": {"secretName": ref["name"]}}
        return {"name": volume_name, "configMap": {"name": ref["name"]}}
