"""
Tests for the OpenshiftDeployManager
"""
# Standard
from unittest import mock

# Third Party
from kubernetes.client.rest import ApiException
from openshift.dynamic.exceptions import (
    ConflictError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    ResourceNotFoundError,
)
import pytest

# First Party
import alog

# Local
from plugin8.deploy_manager.openshift_deploy_manager import OpenshiftDeployManager
from plugin8.exceptions import ClusterError
from plugin8.test_helpers.helpers import TEST_NAMESPACE, library_config

## Helpers #####################################################################

log = alog.use_channel("TEST")


def api_error(error_class, status, reason):
    return error_class(ApiException(status=status, reason=reason))


def setup_testable_manager():
    """Set up a deploy manager with a mock dynamic client. The returned handle
    is what every resources.get() call returns.
    """
    dm = OpenshiftDeployManager()
    client = mock.MagicMock()
    handle = mock.MagicMock()
    client.resources.get.return_value = handle
    dm._client = client
    return dm, handle


def sample_object(resource_version=None):
    obj = {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "foo", "namespace": TEST_NAMESPACE},
        "data": {"a": "b"},
    }
    if resource_version is not None:
        obj["metadata"]["resourceVersion"] = resource_version
    return obj


## get_object_current_state ####################################################


def test_get_found():
    dm, handle = setup_testable_manager()
    handle.get.return_value.to_dict.return_value = sample_object("1")
    success, content = dm.get_object_current_state(
        "ConfigMap", "foo", TEST_NAMESPACE, "v1"
    )
    assert success
    assert content == sample_object("1")
    handle.get.assert_called_once_with(name="foo", namespace=TEST_NAMESPACE)


def test_get_not_found():
    dm, handle = setup_testable_manager()
    handle.get.side_effect = api_error(NotFoundError, 404, "Not Found")
    assert dm.get_object_current_state("ConfigMap", "foo", TEST_NAMESPACE) == (
        True,
        None,
    )


@pytest.mark.parametrize(
    ["error_class", "status"], [(ForbiddenError, 403), (InternalServerError, 500)]
)
def test_get_errors(error_class, status):
    dm, handle = setup_testable_manager()
    handle.get.side_effect = api_error(error_class, status, "boom")
    assert dm.get_object_current_state("ConfigMap", "foo", TEST_NAMESPACE) == (
        False,
        None,
    )


def test_get_unknown_kind():
    dm, _ = setup_testable_manager()
    dm.client.resources.get.side_effect = ResourceNotFoundError("nope")
    assert dm.get_object_current_state("Foo", "foo", TEST_NAMESPACE) == (True, None)
    assert not dm.is_kind_available("Foo", "foo/v1")


def test_is_kind_available():
    dm, _ = setup_testable_manager()
    assert dm.is_kind_available("ConfigMap", "v1")


## create ######################################################################


def test_create():
    dm, handle = setup_testable_manager()
    with library_config(field_manager="tester"):
        assert dm.create([sample_object()]) == (True, True)
    handle.create.assert_called_once_with(
        body=sample_object(), namespace=TEST_NAMESPACE, field_manager="tester"
    )


def test_create_already_exists():
    dm, handle = setup_testable_manager()
    handle.create.side_effect = api_error(ConflictError, 409, "AlreadyExists")
    assert dm.create([sample_object()]) == (True, False)


def test_create_failure_stops():
    """The first failure stops the sequence"""
    dm, handle = setup_testable_manager()
    handle.create.side_effect = api_error(ForbiddenError, 403, "Forbidden")
    assert dm.create([sample_object(), sample_object()]) == (False, False)
    assert handle.create.call_count == 1


def test_create_missing_handle():
    dm, _ = setup_testable_manager()
    dm.client.resources.get.side_effect = ResourceNotFoundError("nope")
    assert dm.create([sample_object()]) == (False, False)


def test_create_not_a_list():
    dm, _ = setup_testable_manager()
    with pytest.raises(AssertionError):
        dm.create(sample_object())


## update ######################################################################


def test_update_changed():
    dm, handle = setup_testable_manager()
    handle.replace.return_value.to_dict.return_value = sample_object("2")
    obj = sample_object("1")
    obj["metadata"]["managedFields"] = [{"manager": "someone"}]
    assert dm.update([obj]) == (True, True)
    body = handle.replace.call_args.kwargs["body"]
    assert "managedFields" not in body["metadata"]
    assert body["metadata"]["resourceVersion"] == "1"


def test_update_no_change():
    dm, handle = setup_testable_manager()
    handle.replace.return_value.to_dict.return_value = sample_object("1")
    assert dm.update([sample_object("1")]) == (True, False)


def test_update_conflict():
    dm, handle = setup_testable_manager()
    handle.replace.side_effect = api_error(ConflictError, 409, "Conflict")
    assert dm.update([sample_object("1")]) == (False, False)


## delete ######################################################################


def test_delete():
    dm, handle = setup_testable_manager()
    assert dm.delete([sample_object()]) == (True, True)
    handle.delete.assert_called_once_with(name="foo", namespace=TEST_NAMESPACE)


@pytest.mark.parametrize(
    "error",
    [api_error(NotFoundError, 404, "Not Found"), ResourceNotFoundError("nope")],
)
def test_delete_not_found(error):
    dm, handle = setup_testable_manager()
    handle.delete.side_effect = error
    dm.client.resources.get.side_effect = (
        error if isinstance(error, ResourceNotFoundError) else None
    )
    assert dm.delete([sample_object()]) == (True, False)


def test_delete_failure():
    dm, handle = setup_testable_manager()
    handle.delete.side_effect = api_error(ForbiddenError, 403, "Forbidden")
    assert dm.delete([sample_object()]) == (False, False)


## client setup ################################################################


def test_lazy_client():
    """The client is only built on first use"""
    with mock.patch.object(
        OpenshiftDeployManager, "_setup_client", return_value=mock.MagicMock()
    ) as setup_client:
        dm = OpenshiftDeployManager()
        assert not setup_client.called
        dm.is_kind_available("ConfigMap", "v1")
        dm.is_kind_available("Service", "v1")
        assert setup_client.call_count == 1


def test_required_handle_raises():
    dm, _ = setup_testable_manager()
    dm.client.resources.get.side_effect = ResourceNotFoundError("nope")
    with pytest.raises(ClusterError):
        dm._get_required_handle(
            OpenshiftDeployManager._get_resource_identifiers(sample_object())
        )
