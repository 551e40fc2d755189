"""
This module loads the reconciler config at import time and does the initial
log config. The packaged defaults can be overlaid by a yaml file named in
PLUGIN8_CONFIG_FILE (typically mounted from a ConfigMap), and every key can
then be overridden by its env var.
"""

# Standard
from typing import Optional
import os

# Third Party
import yaml

# First Party
import aconfig
import alog

# Local
from ..exceptions import assert_config
from ..utils import merge_configs
from .validation import get_invalid_params

# Env var naming an optional overlay file
CONFIG_FILE_ENV_VAR = "PLUGIN8_CONFIG_FILE"

DEFAULTS_FILE = os.path.join(os.path.dirname(__file__), "config.yaml")
VALIDATION_FILE = os.path.join(os.path.dirname(__file__), "config_validation.yaml")


def load_library_config(overlay_path: Optional[str] = None) -> aconfig.Config:
    """Load the packaged defaults with the overlay file merged on top. Env var
    overrides are applied last. Keys the defaults do not know are rejected.
    """
    with open(DEFAULTS_FILE, encoding="utf-8") as handle:
        content = yaml.safe_load(handle)
    if overlay_path:
        with open(overlay_path, encoding="utf-8") as handle:
            overlay = yaml.safe_load(handle) or {}
        assert_config(
            isinstance(overlay, dict), f"Config file {overlay_path} is not a mapping"
        )
        unknown = sorted(set(overlay) - set(content))
        assert_config(
            not unknown, f"Config file {overlay_path} has unknown keys: {unknown}"
        )
        content = merge_configs(content, overlay)
    return aconfig.Config(content, override_env_vars=True)


def validate_library_config(
    config: aconfig.Config, validation_config: aconfig.Config
):
    """Raise a ConfigError naming every key that fails validation"""
    invalid_params = get_invalid_params(config, validation_config)
    assert_config(
        not invalid_params,
        f"Library configuration found invalid values: {invalid_params}",
    )


library_config = load_library_config(os.environ.get(CONFIG_FILE_ENV_VAR))

# Parse the validation file, not allowing env overrides
validation_config = aconfig.Config.from_yaml(VALIDATION_FILE, override_env_vars=False)

validate_library_config(library_config, validation_config)

# Do initial alog configuration
alog.configure(
    default_level=library_config.log_level,
    filters=library_config.log_filters,
    formatter="json" if library_config.log_json else "pretty",
    thread_id=library_config.log_thread_id,
)
