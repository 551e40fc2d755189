"""
Discovery of the optional APIs served by the cluster. The result is evaluated
once when the reconciler is constructed and never changes afterwards.
"""

# Standard
from typing import Dict, Optional, Tuple

# First Party
import alog

# Local
from . import constants
from .deploy_manager import DeployManagerBase

log = alog.use_channel("DISCO")

# Optional kinds the reconciler can make use of, keyed by kind
OPTIONAL_KINDS = {
    "ServiceMonitor": constants.API_VERSION_MONITORING,
}


class AvailableAPIs:
    """Snapshot of which optional kinds the cluster serves"""

    def __init__(
        self,
        deploy_manager: DeployManagerBase,
        optional_kinds: Optional[Dict[str, str]] = None,
    ):
        optional_kinds = OPTIONAL_KINDS if optional_kinds is None else optional_kinds
        self._available = dict(
            self._discover(deploy_manager, kind, api_version)
            for kind, api_version in optional_kinds.items()
        )
        log.debug("Available optional APIs: %s", self._available)

    def is_available(self, kind: str) -> bool:
        return self._available.get(kind, False)

    def has_svc_monitor(self) -> bool:
        return self.is_available("ServiceMonitor")

    @staticmethod
    def _discover(
        deploy_manager: DeployManagerBase, kind: str, api_version: str
    ) -> Tuple[str, bool]:
        try:
            available = deploy_manager.is_kind_available(kind, api_version)
        except Exception as err:  # pylint: disable=broad-except
            log.warning("Could not discover %s/%s: %s", api_version, kind, err)
            available = False
        if not available:
            log.info("%s/%s is not available on this cluster", api_version, kind)
        return kind, available
