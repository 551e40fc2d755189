"""
Tests for the plugin registration in the Console operator resource
"""

# Third Party
import pytest

# Local
from plugin8.exceptions import ClusterError
from plugin8.registration import reconcile_registration
from plugin8.test_helpers.helpers import (
    MockDeployManager,
    console_operator,
    setup_session,
)

PLUGIN = "my-plugin"


def get_plugins(dm):
    return dm.get_obj("Console", "cluster")["spec"]["plugins"]


def run_registration(dm, register):
    session = setup_session(deploy_manager=dm)
    dm.reset_mocks()
    return reconcile_registration(session, PLUGIN, register)


def test_register_appends():
    dm = MockDeployManager(resources=[console_operator(["other"])])
    assert run_registration(dm, True)
    assert dm.update.call_count == 1
    assert get_plugins(dm) == ["other", PLUGIN]


def test_unregister_removes_all_occurrences():
    dm = MockDeployManager(resources=[console_operator([PLUGIN, "other", PLUGIN])])
    assert run_registration(dm, False)
    assert get_plugins(dm) == ["other"]


@pytest.mark.parametrize(
    ["plugins", "register"],
    [([PLUGIN], True), (["other"], False), ([], False)],
)
def test_already_in_desired_state(plugins, register):
    """No write is made when nothing needs to change"""
    dm = MockDeployManager(resources=[console_operator(plugins)])
    assert not run_registration(dm, register)
    assert not dm.update.called


def test_missing_plugins_list():
    console = console_operator()
    del console["spec"]
    dm = MockDeployManager(resources=[console])
    assert run_registration(dm, True)
    assert get_plugins(dm) == [PLUGIN]


@pytest.mark.parametrize("register", [True, False])
def test_console_missing(register):
    dm = MockDeployManager()
    assert not run_registration(dm, register)
    assert not dm.update.called


def test_console_lookup_failure():
    """An unreachable Console resource is logged, not raised"""
    dm = MockDeployManager(
        resources=[console_operator()], get_state_fail=True
    )
    assert not run_registration(dm, True)
    assert not dm.update.called


def test_update_failure_raises():
    dm = MockDeployManager(resources=[console_operator()], update_fail=True)
    with pytest.raises(ClusterError):
        run_registration(dm, True)
    assert dm.update.call_count == 1
