"""
Custom logging formats that add reconciliation details to the json logs
"""

# First Party
from alog import AlogJsonFormatter
import alog

# Local
from . import config


class Plugin8JsonFormatter(AlogJsonFormatter):
    """Custom Log Format that extends AlogJsonFormatter to add identifiers of
    the FlowCollector being reconciled, the reconciliationId and thread
    information to the json
    """

    _FIELDS_TO_PRINT = AlogJsonFormatter._FIELDS_TO_PRINT + [
        "process",
        "thread",
        "threadName",
        "kind",
        "resourceName",
        "reconciliationId",
    ]

    def __init__(self, manifest=None, reconciliation_id=None):
        super().__init__()
        self.manifest = manifest
        self.reconciliation_id = reconciliation_id

    def format(self, record):
        if self.reconciliation_id:
            record.reconciliationId = self.reconciliation_id

        if resource := getattr(record, "resource", self.manifest):
            record.kind = resource.get("kind")
            record.resourceName = resource.get("metadata", {}).get("name")

        return super().format(record)


def configure_logging(manifest=None, reconciliation_id=None):
    """(Re)configure alog from the library config"""
    alog.configure(
        default_level=config.log_level,
        filters=config.log_filters,
        formatter=(
            Plugin8JsonFormatter(manifest, reconciliation_id)
            if config.log_json
            else "pretty"
        ),
        thread_id=config.log_thread_id,
    )
