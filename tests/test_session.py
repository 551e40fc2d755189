"""
Tests for the Session
"""

# Standard
import threading

# Third Party
import pytest

# Local
from plugin8 import constants
from plugin8.exceptions import ConfigError, ReconcileCancelledError
from plugin8.session import Session
from plugin8.test_helpers.helpers import (
    TEST_INSTANCE_NAME,
    TEST_NAMESPACE,
    MockDeployManager,
    library_config,
    setup_cr,
    setup_session,
)


def test_properties():
    dm = MockDeployManager()
    session = setup_session(deploy_manager=dm)
    assert session.id
    assert session.name == TEST_INSTANCE_NAME
    assert session.spec.namespace == TEST_NAMESPACE
    assert session.target_namespace == TEST_NAMESPACE
    assert session.deploy_manager is dm


def test_plain_dict_manifest():
    cr = dict(setup_cr())
    session = Session("id", cr, MockDeployManager())
    assert session.metadata.name == TEST_INSTANCE_NAME


def test_target_namespace_defaults():
    cr = setup_cr()
    del cr["spec"]["namespace"]
    session = Session("id", cr, MockDeployManager())
    assert session.target_namespace == constants.DEFAULT_NAMESPACE
    with library_config(namespace="override"):
        assert session.target_namespace == "override"


@pytest.mark.parametrize("missing", ["kind", "apiVersion"])
def test_invalid_manifest(missing):
    cr = setup_cr()
    del cr[missing]
    with pytest.raises(ConfigError):
        Session("id", cr, MockDeployManager())


def test_missing_name():
    cr = setup_cr()
    del cr["metadata"]["name"]
    with pytest.raises(ConfigError):
        Session("id", cr, MockDeployManager())


def test_cancel():
    dm = MockDeployManager()
    session = setup_session(deploy_manager=dm)
    assert not session.cancelled
    session.assert_not_cancelled()
    session.cancel()
    assert session.cancelled
    with pytest.raises(ReconcileCancelledError):
        session.get_object_current_state("Service", "foo", TEST_NAMESPACE, "v1")
    assert not dm.get_object_current_state.called


def test_shared_cancel_event():
    """The caller can cancel through the event it handed in"""
    event = threading.Event()
    session = setup_session(cancel_event=event)
    event.set()
    assert session.cancelled
