"""
Test the verify_resources functionality
"""

# Standard
from datetime import datetime, timedelta, timezone

# Third Party
import pytest

# Local
from plugin8.verify_resources import (
    AVAILABLE_CONDITION_KEY,
    NEW_RS_AVAILABLE_REASON,
    PROGRESSING_CONDITION_KEY,
    verify_deployment,
)

## Helpers #####################################################################


def make_condition(type_val, status, reason=None, age_seconds=0):
    timestamp = datetime.now(timezone.utc) - timedelta(seconds=age_seconds)
    condition = {
        "type": type_val,
        "status": status,
        "lastTransitionTime": timestamp.isoformat(),
    }
    if reason is not None:
        condition["reason"] = reason
    return condition


def make_deployment(conditions=None, generation=None, observed=None):
    deployment = {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": "foo"},
    }
    if generation is not None:
        deployment["metadata"]["generation"] = generation
    if conditions is not None or observed is not None:
        deployment["status"] = {}
        if conditions is not None:
            deployment["status"]["conditions"] = conditions
        if observed is not None:
            deployment["status"]["observedGeneration"] = observed
    return deployment


AVAILABLE = make_condition(AVAILABLE_CONDITION_KEY, "True")
ROLLED_OUT = make_condition(
    PROGRESSING_CONDITION_KEY, "True", reason=NEW_RS_AVAILABLE_REASON
)

## Tests #######################################################################


def test_verify_deployment_ready():
    assert verify_deployment(make_deployment([AVAILABLE, ROLLED_OUT]))


def test_verify_deployment_no_status():
    assert not verify_deployment(make_deployment())


@pytest.mark.parametrize(
    "conditions",
    [
        [AVAILABLE],
        [ROLLED_OUT],
        [make_condition(AVAILABLE_CONDITION_KEY, "False"), ROLLED_OUT],
        [
            AVAILABLE,
            make_condition(
                PROGRESSING_CONDITION_KEY, "True", reason="ReplicaSetUpdated"
            ),
        ],
    ],
)
def test_verify_deployment_not_ready(conditions):
    assert not verify_deployment(make_deployment(conditions))


def test_verify_deployment_latest_condition_wins():
    """Only the newest condition of each type counts"""
    stale = make_condition(AVAILABLE_CONDITION_KEY, "False", age_seconds=60)
    assert verify_deployment(make_deployment([stale, AVAILABLE, ROLLED_OUT]))
    old_ok = make_condition(AVAILABLE_CONDITION_KEY, "True", age_seconds=60)
    newer_bad = make_condition(AVAILABLE_CONDITION_KEY, "False")
    assert not verify_deployment(make_deployment([old_ok, newer_bad, ROLLED_OUT]))


def test_verify_deployment_bool_status():
    available = dict(AVAILABLE, status=True)
    assert verify_deployment(make_deployment([available, ROLLED_OUT]))


def test_verify_deployment_generation_not_observed():
    deployment = make_deployment([AVAILABLE, ROLLED_OUT], generation=3, observed=2)
    assert not verify_deployment(deployment)
    deployment["status"]["observedGeneration"] = 3
    assert verify_deployment(deployment)
