"""
The ChangeReport collects human readable reasons explaining why an owned
resource was judged to need an update. It is only used for observability and
never drives control flow.
"""

# Standard
from typing import List

# First Party
import alog

log = alog.use_channel("CHNGE")


class ChangeReport:
    """Append-only list of change reasons for a single reconciled kind"""

    def __init__(self, name: str):
        self.name = name
        self._reasons: List[str] = []

    @property
    def reasons(self) -> List[str]:
        return list(self._reasons)

    def add(self, reason: str):
        self._reasons.append(reason)

    def check(self, reason: str, changed: bool) -> bool:
        """Record the reason if changed is True and pass changed back through
        so checks can be chained with `or`
        """
        if changed:
            self.add(reason)
        return changed

    def log_if_needed(self):
        if self._reasons:
            log.info("%s", self)
        else:
            log.debug2("%s: no change", self.name)

    def __bool__(self):
        return bool(self._reasons)

    def __str__(self):
        return f"{self.name}: {', '.join(self._reasons)}"
