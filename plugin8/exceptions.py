"""
This module implements custom exceptions
"""

## Base Error ##################################################################


class Plugin8Error(Exception):
    """Base class for all plugin8 exceptions"""

    def __init__(self, message: str, is_fatal_error: bool):
        """Construct with a flag indicating whether this is a fatal error. This
        will be a static property of all children.
        """
        super().__init__(message)
        self._is_fatal_error = is_fatal_error

    @property
    def is_fatal_error(self):
        """Property indicating whether or not this error should be considered
        unrecoverable without outside intervention
        """
        return self._is_fatal_error


## Fatal Errors ################################################################


class Plugin8FatalError(Plugin8Error):
    """A Plugin8FatalError is one that indicates an unexpected failure during a
    reconciliation pass. The pass is aborted and the caller is expected to run
    the whole pass again from the top.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=True)


class ConfigError(Plugin8FatalError):
    """Exception caused during usage of user-provided configuration"""


class ClusterError(Plugin8FatalError):
    """Exception caused when a cluster operation fails in an unexpected way.
    This includes write conflicts on shared objects.
    """


## Expected Errors #############################################################


class Plugin8ExpectedError(Plugin8Error):
    """A Plugin8ExpectedError is one that indicates an expected failure
    condition that should cause a reconciliation to terminate, but is expected
    to resolve in a subsequent reconciliation.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=False)


class PreconditionError(Plugin8ExpectedError):
    """Exception caused when an expected precondition is not met"""


class ReconcileCancelledError(Plugin8ExpectedError):
    """Exception raised when the session for an in-flight reconciliation pass
    has been cancelled
    """


## Assertions ##################################################################


def assert_precondition(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a PreconditionError"""
    if not condition:
        raise PreconditionError(message)


def assert_config(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a ConfigError. This should be
    used when the library config or the desired spec holds values that can't
    be used.
    """
    if not condition:
        raise ConfigError(message)


def assert_cluster(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a ClusterError. This should
    be used when an operation in the cluster (such as fetching or writing an
    owned object) must succeed for the pass to continue.
    """
    if not condition:
        raise ClusterError(message)
