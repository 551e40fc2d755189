"""
Test the custom assert functions
"""

# Third Party
import pytest

# Local
from plugin8 import exceptions


def test_assert_precondition_pass():
    """Make sure that no exception is throw by assert_precondition when it
    passes
    """
    exceptions.assert_precondition(True)


def test_assert_precondition_fail():
    """Make sure the right exception is thrown by assert_precondition when it
    fails
    """
    exception_msg = "error mesage"
    with pytest.raises(exceptions.PreconditionError, match=exception_msg):
        exceptions.assert_precondition(False, exception_msg)


def test_assert_config_fail():
    exception_msg = "error mesage"
    with pytest.raises(exceptions.ConfigError, match=exception_msg):
        exceptions.assert_config(False, exception_msg)


def test_assert_cluster_pass():
    exceptions.assert_cluster(True)
    exceptions.assert_cluster({"kind": "Foo"})


def test_assert_cluster_fail():
    """Make sure the right exception is thrown by assert_cluster when it
    fails
    """
    exception_msg = "error mesage"
    with pytest.raises(exceptions.ClusterError, match=exception_msg):
        exceptions.assert_cluster(False, exception_msg)


def test_exception_derived_from_base():
    """Make sure the derived classes is instance of the base Plugin8 Class"""
    assert isinstance(exceptions.Plugin8FatalError(), exceptions.Plugin8Error)
    assert isinstance(exceptions.Plugin8ExpectedError(), exceptions.Plugin8Error)


def test_cluster_is_fatal():
    """Make sure the cluster error is considered fatal error"""
    with pytest.raises(exceptions.ClusterError) as cluster_error:
        exceptions.assert_cluster(False)
    assert isinstance(cluster_error.value, exceptions.Plugin8FatalError)
    assert cluster_error.value.is_fatal_error


def test_config_is_fatal():
    with pytest.raises(exceptions.ConfigError) as config_error:
        exceptions.assert_config(False)
    assert config_error.value.is_fatal_error


def test_precondition_is_non_fatal():
    """Make sure the expected errors are not setting the fatal error flag"""
    with pytest.raises(exceptions.PreconditionError) as precondition_error:
        exceptions.assert_precondition(False)
    assert not precondition_error.value.is_fatal_error
    assert not isinstance(precondition_error.value, exceptions.Plugin8FatalError)
    assert isinstance(precondition_error.value, exceptions.Plugin8ExpectedError)


def test_cancelled_is_non_fatal():
    """A cancelled pass is expected to be retried"""
    err = exceptions.ReconcileCancelledError("cancelled")
    assert not err.is_fatal_error
    assert isinstance(err, exceptions.Plugin8ExpectedError)
