"""
Tests for the desired object Builder
"""

# Third Party
import yaml

# Local
from plugin8 import constants
from plugin8.builder import Builder
from plugin8.desired import DEFAULT_HPA_METRICS
from plugin8.test_helpers.helpers import TEST_IMAGE, TEST_NAMESPACE

## Helpers #####################################################################


def make_builder(spec=None):
    return Builder(TEST_NAMESPACE, TEST_IMAGE, spec or {})


def plugin_config(builder):
    config_map, _ = builder.config_map()
    return yaml.safe_load(config_map["data"][constants.PLUGIN_CONFIG_FILE])


## Tests #######################################################################


def test_defaults():
    builder = make_builder()
    assert builder.image == TEST_IMAGE
    assert builder.plugin["port"] == constants.DEFAULT_PLUGIN_PORT
    assert builder.plugin["register"] is True


def test_image_from_spec():
    builder = make_builder({"consolePlugin": {"image": "my/image:1"}})
    container = builder.deployment("d")["spec"]["template"]["spec"]["containers"][0]
    assert container["image"] == "my/image:1"


def test_namespaced_and_cluster_scoped_metadata():
    builder = make_builder()
    assert builder.service_account()["metadata"]["namespace"] == TEST_NAMESPACE
    assert "namespace" not in builder.cluster_role()["metadata"]
    assert "namespace" not in builder.console_plugin()["metadata"]
    subject = builder.cluster_role_binding()["subjects"][0]
    assert subject["namespace"] == TEST_NAMESPACE


def test_builder_is_pure():
    """Calling a builder twice gives equal, independent objects"""
    builder = make_builder()
    first = builder.deployment("d")
    second = builder.deployment("d")
    assert first == second
    first["spec"]["template"]["spec"]["containers"][0]["resources"]["limits"] = {}
    assert builder.deployment("d") == second


def test_config_map_digest():
    """The digest follows the config content"""
    _, digest = make_builder().config_map()
    _, same_digest = make_builder().config_map()
    _, other_digest = make_builder({"loki": {"url": "http://other/"}}).config_map()
    assert digest == same_digest
    assert digest != other_digest


def test_config_content():
    config = plugin_config(
        make_builder(
            {
                "consolePlugin": {
                    "port": 9005,
                    "portNaming": {"portNames": {"3100": "loki"}},
                    "quickFilters": [{"name": "f", "filter": {"a": "b"}}],
                },
                "loki": {
                    "url": "http://loki:3100/",
                    "statusUrl": "http://loki-status:3100/",
                    "authToken": "FORWARD",
                },
            }
        )
    )
    assert config["server"]["port"] == 9005
    assert config["loki"]["url"] == "http://loki:3100/"
    assert config["loki"]["statusUrl"] == "http://loki-status:3100/"
    assert config["loki"]["forwardUserToken"] is True
    assert config["frontend"]["portNaming"] == {
        "enable": True,
        "portNames": {"3100": "loki"},
    }
    assert config["frontend"]["quickFilters"][0]["name"] == "f"


def test_querier_url_preferred():
    config = plugin_config(
        make_builder({"loki": {"url": "http://a/", "querierUrl": "http://q/"}})
    )
    assert config["loki"]["url"] == "http://q/"
    assert "statusUrl" not in config["loki"]


def test_loki_tls_mounts():
    builder = make_builder(
        {
            "loki": {
                "tls": {
                    "enable": True,
                    "caCert": {"name": "ca", "certFile": "ca.crt"},
                    "userCert": {
                        "type": "secret",
                        "name": "user",
                        "certFile": "tls.crt",
                        "certKey": "tls.key",
                    },
                }
            }
        }
    )
    config = plugin_config(builder)
    assert config["loki"]["caPath"] == "/var/loki-certs-ca/ca.crt"
    assert config["loki"]["userCertPath"] == "/var/loki-certs-user/tls.crt"
    assert config["loki"]["userKeyPath"] == "/var/loki-certs-user/tls.key"

    pod_spec = builder.deployment("d")["spec"]["template"]["spec"]
    volumes = {vol["name"]: vol for vol in pod_spec["volumes"]}
    assert volumes["tls-ca"]["configMap"]["name"] == "ca"
    assert volumes["tls-user"]["secret"]["secretName"] == "user"
    mounts = [m["mountPath"] for m in pod_spec["containers"][0]["volumeMounts"]]
    assert "/var/loki-certs-ca" in mounts
    assert "/var/loki-certs-user" in mounts


def test_status_tls_config_keys():
    config = plugin_config(
        make_builder(
            {
                "loki": {
                    "statusTls": {
                        "enable": True,
                        "insecureSkipVerify": True,
                        "caCert": {"name": "ca", "certFile": "ca.crt"},
                    }
                }
            }
        )
    )
    assert config["loki"]["statusSkipTls"] is True
    assert config["loki"]["statusCaPath"] == "/var/loki-status-certs-ca/ca.crt"


def test_host_token_volume():
    builder = make_builder({"loki": {"authToken": "HOST"}})
    assert plugin_config(builder)["loki"]["tokenPath"] == constants.LOKI_TOKEN_PATH
    pod_spec = builder.deployment("d")["spec"]["template"]["spec"]
    token = [vol for vol in pod_spec["volumes"] if vol["name"] == "token"][0]
    source = token["projected"]["sources"][0]["serviceAccountToken"]
    assert source["path"] == "netobserv-plugin"


def test_deployment_replicas():
    builder = make_builder({"consolePlugin": {"replicas": 2}})
    assert builder.deployment("d")["spec"]["replicas"] == 2
    builder = make_builder(
        {"consolePlugin": {"replicas": 2, "autoscaler": {"status": "ENABLED"}}}
    )
    assert "replicas" not in builder.deployment("d")["spec"]


def test_deployment_digest_annotation():
    template = make_builder().deployment("abc")["spec"]["template"]
    assert template["metadata"]["annotations"] == {
        constants.CONFIG_DIGEST_ANNOTATION: "abc"
    }


def test_service_new_and_existing():
    builder = make_builder({"consolePlugin": {"port": 9005}})
    new = builder.service()
    assert new["metadata"]["annotations"][constants.SERVING_CERT_ANNOTATION]
    assert new["spec"]["ports"][0]["port"] == 9005

    existing = {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": constants.PLUGIN_NAME, "resourceVersion": "3"},
        "spec": {"clusterIP": "10.0.0.1", "ports": [{"port": 9001}]},
    }
    updated = builder.service(existing)
    assert updated["spec"]["clusterIP"] == "10.0.0.1"
    assert updated["spec"]["ports"][0]["port"] == 9005
    assert existing["spec"]["ports"] == [{"port": 9001}]


def test_auto_scaler():
    hpa = make_builder(
        {"consolePlugin": {"autoscaler": {"status": "ENABLED", "maxReplicas": 5}}}
    ).auto_scaler()
    assert hpa["spec"]["maxReplicas"] == 5
    assert hpa["spec"]["minReplicas"] == 1
    assert hpa["spec"]["scaleTargetRef"]["name"] == constants.PLUGIN_NAME
    assert hpa["spec"]["metrics"][0]["resource"]["name"] == "cpu"


def test_auto_scaler_emptied_metrics():
    hpa = make_builder(
        {"consolePlugin": {"autoscaler": {"status": "ENABLED", "metrics": []}}}
    ).auto_scaler()
    assert hpa["spec"]["metrics"] == DEFAULT_HPA_METRICS


def test_service_monitor():
    monitor = make_builder().service_monitor()
    assert monitor["spec"]["namespaceSelector"] == {"matchNames": [TEST_NAMESPACE]}
    endpoint = monitor["spec"]["endpoints"][0]
    assert endpoint["port"] == constants.PLUGIN_METRICS_PORT_NAME
    assert endpoint["tlsConfig"]["serverName"] == (
        f"{constants.PLUGIN_NAME}.{TEST_NAMESPACE}.svc"
    )
