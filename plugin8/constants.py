"""
Shared module to hold constant values for the library
"""

# Name shared by all namespaced objects of the console plugin unit
PLUGIN_NAME = "netobserv-plugin"

# The plugin configuration lives in its own ConfigMap
PLUGIN_CONFIG_MAP_NAME = "console-plugin-config"
PLUGIN_CONFIG_FILE = "config.yaml"
PLUGIN_CONFIG_MOUNT_PATH = "/opt/app-root/config"

# Secret generated by the service-ca operator for the plugin service
PLUGIN_SERVING_CERT_SECRET = "console-serving-cert"
PLUGIN_CERT_MOUNT_PATH = "/var/serving-cert"

# Ports
DEFAULT_PLUGIN_PORT = 9001
PLUGIN_METRICS_PORT = 9002
PLUGIN_METRICS_PORT_NAME = "metrics"
PLUGIN_MAIN_PORT_NAME = "main"

# Cluster-scoped console operator resource used for plugin registration
CONSOLE_OPERATOR_NAME = "cluster"

# Pod template annotations
ANNOTATION_PREFIX = "flows.netobserv.io/"
CONFIG_DIGEST_ANNOTATION = ANNOTATION_PREFIX + "config-digest"
CERT_ANNOTATION_PREFIX = ANNOTATION_PREFIX + "watched-"
SERVING_CERT_ANNOTATION = "service.beta.openshift.io/serving-cert-secret-name"

# Labels
APP_LABEL = "app"
PART_OF_LABEL = "app.kubernetes.io/part-of"
PART_OF_VALUE = "netobserv-operator"

# Autoscaler status values
AUTOSCALER_DISABLED = "DISABLED"
AUTOSCALER_ENABLED = "ENABLED"

# Certificate reference types
CERT_TYPE_CONFIGMAP = "configmap"
CERT_TYPE_SECRET = "secret"

# Default operand namespace if none given
DEFAULT_NAMESPACE = "netobserv"

# Delimiter used for nested dict keys
NESTED_DICT_DELIM = "."

## API Versions ################################################################

API_VERSION_V1 = "v1"
API_VERSION_APPS = "apps/v1"
API_VERSION_AUTOSCALING = "autoscaling/v2"
API_VERSION_RBAC = "rbac.authorization.k8s.io/v1"
API_VERSION_MONITORING = "monitoring.coreos.com/v1"
API_VERSION_CONSOLE_PLUGIN = "console.openshift.io/v1alpha1"
API_VERSION_CONSOLE_OPERATOR = "operator.openshift.io/v1"

# Loki auth token modes
LOKI_AUTH_DISABLED = "DISABLED"
LOKI_AUTH_HOST = "HOST"
LOKI_AUTH_FORWARD = "FORWARD"

# Mount points for loki certificates, keyed by the TLS config they belong to
LOKI_CERT_MOUNT_PATHS = {
    "tls": "/var/loki-certs",
    "statusTls": "/var/loki-status-certs",
}
LOKI_TOKEN_PATH = "/var/run/secrets/tokens/netobserv-plugin"
