"""
This library holds common verification routines for individual kubernetes
resources.
"""

# Standard
from datetime import datetime
from typing import List, Optional

# Third Party
import dateutil.parser

# First Party
import alog

## Globals #####################################################################

log = alog.use_channel("VERFY")

DEFAULT_TIMESTAMP_KEY = "lastTransitionTime"
AVAILABLE_CONDITION_KEY = "Available"
PROGRESSING_CONDITION_KEY = "Progressing"
NEW_RS_AVAILABLE_REASON = "NewReplicaSetAvailable"

## Individual Resources ########################################################


def verify_deployment(object_state: dict) -> bool:
    """Verify that all members of a deployment are ready
    and all members are rolled out to new version in case of update.
    """
    obj_status = object_state.get("status") or {}
    observed = obj_status.get("observedGeneration")
    generation = object_state.get("metadata", {}).get("generation")
    if observed is not None and generation is not None and observed < generation:
        log.debug2("Deployment generation %s not observed yet", generation)
        return False
    return _verify_condition(
        object_state, AVAILABLE_CONDITION_KEY, True
    ) and _verify_condition(
        object_state,
        PROGRESSING_CONDITION_KEY,
        True,
        expected_reason=NEW_RS_AVAILABLE_REASON,
    )


## Helpers #####################################################################


def _verify_condition(
    object_state: dict,
    type_val: str,
    expected_status: bool,
    timestamp_key: str = DEFAULT_TIMESTAMP_KEY,
    expected_reason: Optional[str] = None,
) -> bool:
    """Check that the latest condition of the given type has the expected
    status and reason
    """
    conditions = _get_conditions(object_state, type_val)
    log.debug2("Found %d [%s] conditions", len(conditions), type_val)

    # If no conditions, the resource is not verified
    if not conditions:
        log.debug2("No %s conditions. Not verified", type_val)
        return False

    latest_cond = _sort_conditions_by_date(conditions, timestamp_key)[0]
    log.debug3("Latest '%s' condition: %s", type_val, latest_cond)
    return _check_condition(latest_cond, expected_status, expected_reason)


def _get_conditions(object_state: dict, type_val: str) -> List[dict]:
    return [
        cond
        for cond in (object_state.get("status") or {}).get("conditions") or []
        if cond.get("type") == type_val
    ]


def _parse_condition_timestamp(condition: dict, timestamp_key: str) -> datetime:
    timestamp = condition.get(timestamp_key)
    log.debug3("Timestamp [%s]: %s", timestamp_key, timestamp)
    if isinstance(timestamp, str):
        return dateutil.parser.parse(timestamp)
    if isinstance(timestamp, datetime):
        return timestamp
    log.warning("Found condition with no valid timestamp. Using epoch")
    return dateutil.parser.parse("1970-01-01T00:00:00Z")


def _sort_conditions_by_date(conditions: List[dict], timestamp_key: str) -> List[dict]:
    """Newest conditions first"""
    return sorted(
        conditions,
        key=lambda x: _parse_condition_timestamp(x, timestamp_key),
        reverse=True,
    )


def _check_condition(
    condition: dict, expected_status: bool, expected_reason: Optional[str] = None
) -> bool:
    obj_status = condition.get("status")
    if not obj_status:
        return False
    if isinstance(obj_status, str):
        status_ok = obj_status.lower() == str(expected_status).lower()
    else:
        status_ok = bool(obj_status) == expected_status
    return status_ok and (
        expected_reason is None or condition.get("reason") == expected_reason
    )
