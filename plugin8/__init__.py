"""
Package exports
"""

# Local
from . import config
from .builder import Builder
from .cert_watcher import CertificateWatcher
from .change_report import ChangeReport
from .client_helper import ClientHelper, reconcile_owned
from .deploy_manager import DeployManagerBase
from .discovery import AvailableAPIs
from .exceptions import assert_cluster, assert_config, assert_precondition
from .managed_object import ManagedObject
from .object_manager import NamespacedObjectManager
from .reconciler import ConsolePluginReconciler
from .registration import reconcile_registration
from .session import Session
from .verify_resources import verify_deployment
