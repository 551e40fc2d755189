"""
The CertificateWatcher fingerprints the certificates a pod mounts so that a
rotated certificate changes the pod template and triggers a rollout.
"""

# First Party
import alog

# Local
from . import constants
from .exceptions import assert_cluster, assert_precondition
from .session import Session
from .utils import content_digest

log = alog.use_channel("CERTS")

# Keys of a TLS config that hold certificate references
CERT_REFERENCE_KEYS = ["caCert", "userCert"]

# Maximum length of the name part of an annotation key
MAX_ANNOTATION_NAME_LEN = 63


class CertificateWatcher:
    """Annotates pod templates with a digest of each referenced certificate"""

    def annotate_pod(self, session: Session, pod_template: dict, *tls_configs: dict):
        """Add one annotation per certificate referenced by the enabled TLS
        configs. The pod template is updated in place.

        Args:
            session:  Session
                The session for the current pass
            pod_template:  dict
                The pod template to annotate
            *tls_configs:  dict
                TLS config sections whose caCert and userCert references are
                watched
        """
        annotations = pod_template.setdefault("metadata", {}).setdefault(
            "annotations", {}
        )
        for tls in tls_configs:
            if not tls or not tls.get("enable"):
                continue
            for ref_key in CERT_REFERENCE_KEYS:
                ref = tls.get(ref_key) or {}
                if not ref.get("name"):
                    continue
                key = self._annotation_key(ref)
                annotations[key] = self._fetch_digest(session, ref)

    ## Implementation Details ##################################################

    @staticmethod
    def _annotation_key(ref: dict) -> str:
        kind = (ref.get("type") or constants.CERT_TYPE_CONFIGMAP).lower()
        name = f"{kind}-{ref['name']}"[:MAX_ANNOTATION_NAME_LEN]
        return constants.CERT_ANNOTATION_PREFIX + name

    @staticmethod
    def _fetch_digest(session: Session, ref: dict) -> str:
        kind = (
            "Secret"
            if (ref.get("type") or "").lower() == constants.CERT_TYPE_SECRET
            else "ConfigMap"
        )
        name = ref["name"]
        namespace = ref.get("namespace") or session.target_namespace
        success, content = session.get_object_current_state(
            kind=kind,
            name=name,
            namespace=namespace,
            api_version=constants.API_VERSION_V1,
        )
        assert_cluster(success, f"Failed to fetch {kind} {namespace}/{name}")
        assert_precondition(
            content is not None, f"Certificate {kind} {namespace}/{name} not found"
        )
        data = content.get("data") or {}
        watched = {
            key: data.get(ref[key])
            for key in ["certFile", "certKey"]
            if ref.get(key)
        }
        log.debug3("Watching %s of %s %s/%s", list(watched), kind, namespace, name)
        return content_digest(watched)
