"""
Registration of the plugin in the list of enabled plugins held by the
cluster-scoped Console operator resource
"""

# First Party
import alog

# Local
from . import constants
from .exceptions import assert_cluster
from .session import Session

log = alog.use_channel("REGIS")


def reconcile_registration(session: Session, plugin_name: str, register: bool) -> bool:
    """Add or remove the plugin from the Console operator's spec.plugins

    The Console resource is shared with other controllers. It is read once and
    written back once with the resourceVersion that was read, so a concurrent
    writer causes the update to fail rather than be overwritten. There is no
    retry here; the next pass tries again.

    Args:
        session:  Session
            The session for the current pass
        plugin_name:  str
            The name to add or remove
        register:  bool
            Whether the plugin should be in the list

    Returns:
        changed:  bool
            True if the Console resource was updated
    """
    success, console = session.get_object_current_state(
        kind="Console",
        name=constants.CONSOLE_OPERATOR_NAME,
        api_version=constants.API_VERSION_CONSOLE_OPERATOR,
    )
    if not success or console is None:
        if register:
            log.error(
                "Could not get the Console operator resource to register plugin %s. "
                + "It needs to be registered manually.",
                plugin_name,
            )
        else:
            log.debug("Console operator resource not available")
        return False

    plugins = list((console.get("spec") or {}).get("plugins") or [])
    registered = plugin_name in plugins
    if register == registered:
        log.debug2("Plugin %s registration already %s", plugin_name, registered)
        return False

    if register:
        log.info("Registering plugin %s in the console", plugin_name)
        plugins.append(plugin_name)
    else:
        log.info("Unregistering plugin %s from the console", plugin_name)
        plugins = [name for name in plugins if name != plugin_name]

    console.setdefault("spec", {})["plugins"] = plugins
    session.assert_not_cancelled()
    success, _ = session.deploy_manager.update([console])
    assert_cluster(
        success, f"Failed to update plugin registration for {plugin_name}"
    )
    return True
