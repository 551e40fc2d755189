"""
This module holds common helper functions for making testing easy
"""

# Standard
from contextlib import contextmanager
from typing import List, Optional
from unittest import mock
import copy
import inspect
import os
import uuid

# First Party
import aconfig
import alog

# Local
from plugin8 import constants
from plugin8.config import library_config as config_detail_dict
from plugin8.deploy_manager.dry_run_deploy_manager import DryRunDeployManager
from plugin8.discovery import AvailableAPIs
from plugin8.reconciler import ConsolePluginReconciler
from plugin8.session import Session
from plugin8.utils import merge_configs

log = alog.use_channel("TEST")


def configure_logging():
    alog.configure(
        os.environ.get("LOG_LEVEL", "off"),
        os.environ.get("LOG_FILTERS", ""),
        formatter="json"
        if os.environ.get("LOG_JSON", "").lower() == "true"
        else "pretty",
        thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
    )


configure_logging()

TEST_INSTANCE_NAME = "cluster"
TEST_INSTANCE_UID = "12345678-1234-1234-1234-123456789012"
TEST_NAMESPACE = "test"
SOME_OTHER_NAMESPACE = "somewhere"
TEST_IMAGE = "quay.io/netobserv/network-observability-console-plugin:test"


def setup_cr(
    spec=None,
    kind="FlowCollector",
    api_version="flows.netobserv.io/v1beta2",
    name=TEST_INSTANCE_NAME,
    namespace=TEST_NAMESPACE,
    **kwargs,
):
    """Make a FlowCollector manifest. The FlowCollector is cluster-scoped so
    the metadata carries no namespace; the operand namespace is in the spec.
    """
    cr_dict = kwargs or {}
    cr_dict.setdefault("kind", kind)
    cr_dict.setdefault("apiVersion", api_version)
    cr_dict.setdefault("metadata", {}).setdefault("name", name)
    cr_dict.setdefault("metadata", {}).setdefault("uid", TEST_INSTANCE_UID)
    cr_dict.setdefault("spec", {}).setdefault("namespace", namespace)
    merge_configs(cr_dict["spec"], copy.deepcopy(spec or {}))
    return aconfig.Config(cr_dict, override_env_vars=False)


def setup_session(
    spec=None,
    full_cr=None,
    deploy_manager=None,
    namespace=TEST_NAMESPACE,
    cancel_event=None,
):
    full_cr = full_cr or setup_cr(spec=spec, namespace=namespace)
    return Session(
        reconciliation_id=str(uuid.uuid4()),
        cr_manifest=full_cr,
        deploy_manager=deploy_manager or MockDeployManager(),
        cancel_event=cancel_event,
    )


def setup_reconciler(
    deploy_manager,
    namespace=TEST_NAMESPACE,
    previous_namespace=None,
    cert_watcher=None,
):
    return ConsolePluginReconciler(
        namespace=namespace,
        previous_namespace=previous_namespace,
        image=TEST_IMAGE,
        available_apis=AvailableAPIs(deploy_manager),
        cert_watcher=cert_watcher,
    )


def console_operator(plugins: Optional[List[str]] = None) -> dict:
    """Make the cluster-scoped Console operator resource"""
    return {
        "apiVersion": constants.API_VERSION_CONSOLE_OPERATOR,
        "kind": "Console",
        "metadata": {"name": constants.CONSOLE_OPERATOR_NAME},
        "spec": {"plugins": list(plugins or [])},
    }


@contextmanager
def library_config(**config_overrides):
    """This context manager sets library config values temporarily and reverts
    them on completion
    """
    # Override the configs and hang onto the old values
    old_vals = {}
    for key, val in config_overrides.items():
        if key in config_detail_dict:
            old_vals[key] = config_detail_dict[key]
        config_detail_dict[key] = val

    # Yield to the context
    try:
        yield
    finally:
        # Revert to the old values
        for key in config_overrides:
            if key in old_vals:
                config_detail_dict[key] = old_vals[key]
            else:
                del config_detail_dict[key]


def get_failable_method(fail_flag, method, failure_return=False):
    log.debug4(
        "Setting up failable mock of [%s] with fail flag: %s", str(method), fail_flag
    )

    def failable_method(*args, **kwargs):
        log.debug4(
            "Running failable mock of [%s] with fail flag: %s", str(method), fail_flag
        )
        if isinstance(fail_flag, Exception) or (
            inspect.isclass(fail_flag) and issubclass(fail_flag, Exception)
        ):
            log.debug4("Raising in failable mock")
            raise fail_flag
        if callable(fail_flag):
            log.debug4("Calling callable fail flag")
            res = fail_flag(*args, **kwargs)
            if res is not None:
                return res
        elif fail_flag == "assert":
            log.debug4("Asserting in failable mock")
            raise AssertionError(f"You told me to fail {method}!")
        elif fail_flag:
            log.debug4("Returning %s", failure_return)
            return failure_return
        log.debug4("Passing through (%s, **%s)", args, kwargs)
        res = method(*args, **kwargs)
        log.debug4("Passthrough res: %s", res)
        return res

    return failable_method


class MockDeployManager(DryRunDeployManager):
    """The MockDeployManager wraps a standard DryRunDeployManager and adds
    configuration options to simulate failures in each of its operations. Every
    operation is a mock.Mock so tests can assert on the calls made.
    """

    def __init__(
        self,
        create_fail=False,
        create_raise=False,
        update_fail=False,
        update_raise=False,
        delete_fail=False,
        delete_raise=False,
        get_state_fail=False,
        get_state_raise=False,
        auto_enable=True,
        **kwargs,
    ):
        """This DeployManager can be configured to have various failure cases
        and will mock the state of the cluster so that get_object_current_state
        will pull its information from the local dict.
        """
        super().__init__(**kwargs)
        self.create_fail = "assert" if create_raise else create_fail
        self.update_fail = "assert" if update_raise else update_fail
        self.delete_fail = "assert" if delete_raise else delete_fail
        self.get_state_fail = "assert" if get_state_raise else get_state_fail

        # If auto-enabling, turn the mocks on now
        if auto_enable:
            self.enable_mocks()

    #######################
    ## Helpers for Tests ##
    #######################

    def enable_mocks(self):
        """Turn the mocks on"""
        self.create = mock.Mock(
            side_effect=get_failable_method(
                self.create_fail, super().create, (False, False)
            )
        )
        self.update = mock.Mock(
            side_effect=get_failable_method(
                self.update_fail, super().update, (False, False)
            )
        )
        self.delete = mock.Mock(
            side_effect=get_failable_method(
                self.delete_fail, super().delete, (False, False)
            )
        )
        self.get_object_current_state = mock.Mock(
            side_effect=get_failable_method(
                self.get_state_fail, super().get_object_current_state, (False, None)
            )
        )

    def reset_mocks(self):
        for method in [
            self.create,
            self.update,
            self.delete,
            self.get_object_current_state,
        ]:
            method.reset_mock()

    def get_obj(self, kind, name, namespace=None, api_version=None):
        return self.get_object_current_state(kind, name, namespace, api_version)[1]

    def has_obj(self, *args, **kwargs):
        return self.get_obj(*args, **kwargs) is not None

    def written_kinds(self, method_name: str) -> List[str]:
        """The kinds passed to the named write operation, in call order"""
        method = getattr(self, method_name)
        return [
            resource["kind"]
            for call in method.call_args_list
            for resource in call.args[0]
        ]
