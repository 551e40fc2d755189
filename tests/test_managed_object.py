"""
Tests for the ManagedObject descriptor
"""

# Third Party
import pytest

# Local
from plugin8.managed_object import ManagedObject


def test_equality_and_hash():
    first = ManagedObject("Deployment", "apps/v1", "foo")
    second = ManagedObject("Deployment", "apps/v1", "foo")
    other = ManagedObject("Service", "v1", "foo")
    assert first == second
    assert hash(first) == hash(second)
    assert first != other
    assert len({first, second, other}) == 2
    assert str(first) == "apps/v1/Deployment/foo"


def test_reference():
    owned = ManagedObject("Service", "v1", "foo")
    assert owned.reference("ns") == {
        "kind": "Service",
        "apiVersion": "v1",
        "metadata": {"name": "foo", "namespace": "ns"},
    }


def test_missing_fields():
    with pytest.raises(AssertionError):
        ManagedObject(None, "v1", "foo")
    with pytest.raises(AssertionError):
        ManagedObject("Service", "v1", None)
