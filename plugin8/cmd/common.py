"""
Setup shared by the commands that run against a FlowCollector manifest
"""

# Standard
from typing import List, Optional, Tuple
import os
import sys
import uuid

# Third Party
import yaml

# First Party
import alog

# Local
from .. import config
from ..cert_watcher import CertificateWatcher
from ..deploy_manager import (
    DeployManagerBase,
    DryRunDeployManager,
    OpenshiftDeployManager,
)
from ..discovery import AvailableAPIs
from ..exceptions import assert_config
from ..log_format import configure_logging
from ..reconciler import ConsolePluginReconciler
from ..session import Session

log = alog.use_channel("MAIN")


def parse_resource_dir(resource_dir: Optional[str]) -> List[dict]:
    """If given, this will parse all yaml files found in the given directory"""
    all_resources = []
    if resource_dir is not None:
        for fname in sorted(os.listdir(resource_dir)):
            if fname.endswith(".yaml") or fname.endswith(".yml"):
                resource_path = os.path.join(resource_dir, fname)
                log.debug3("Reading resource file [%s]", resource_path)
                with open(resource_path, encoding="utf-8") as handle:
                    all_resources.extend(
                        doc for doc in yaml.safe_load_all(handle) if doc
                    )
    return all_resources


def load_cr(cr_path: str) -> dict:
    assert_config(os.path.isfile(cr_path), f"CR file not found: {cr_path}")
    log.info("Loading CR [%s]", cr_path)
    with open(cr_path, encoding="utf-8") as handle:
        cr_manifest = yaml.safe_load(handle)
    assert_config(isinstance(cr_manifest, dict), f"Invalid CR file: {cr_path}")
    log.debug3(cr_manifest)
    return cr_manifest


def setup_deploy_manager(resource_dir: Optional[str]) -> DeployManagerBase:
    """Make the deploy manager for the configured mode"""
    assert_config(
        resource_dir is None or (config.dry_run and os.path.isdir(resource_dir)),
        "Can only specify --resource_dir with dry run and it must point to a valid directory",
    )
    if config.dry_run:
        log.info("Running DRY RUN")
        return DryRunDeployManager(resources=parse_resource_dir(resource_dir))
    return OpenshiftDeployManager()


def setup(args) -> Tuple[Session, ConsolePluginReconciler]:
    """Build the session and reconciler for the parsed command line args"""
    cr_manifest = load_cr(args.cr)
    deploy_manager = setup_deploy_manager(args.resource_dir)
    session = Session(str(uuid.uuid4()), cr_manifest, deploy_manager)
    configure_logging(session.cr_manifest, session.id)
    reconciler = ConsolePluginReconciler(
        namespace=session.target_namespace,
        previous_namespace=config.previous_namespace or None,
        image=config.plugin_image,
        available_apis=AvailableAPIs(deploy_manager),
        cert_watcher=CertificateWatcher(),
    )
    return session, reconciler


def print_dry_run_objects(deploy_manager: DeployManagerBase, stream=None):
    """In dry run mode, dump every object held by the deploy manager"""
    if not isinstance(deploy_manager, DryRunDeployManager):
        return
    objects = [
        obj
        for namespace in deploy_manager.namespaces
        for obj in deploy_manager.list_objects(namespace)
    ]
    yaml.safe_dump_all(objects, stream or sys.stdout, default_flow_style=False)
