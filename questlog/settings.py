import copy
import logging
import os

import yaml

from questlog.constants import CONFIG_FILE, DEFAULT_SETTINGS

# Retrieve main logger
logger = logging.getLogger("main")

# Environment variables that win over the YAML file
ENV_OVERRIDES = {
    "TWITCH_CLIENT_ID": ("igdb", "client_id"),
    "TWITCH_CLIENT_SECRET": ("igdb", "client_secret"),
}


# Cache variable
_cached_settings = None
_cached_path = None


def _merge_with_defaults(settings):
    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)
    for section, values in settings.items():
        if isinstance(values, dict) and isinstance(merged_settings.get(section), dict):
            merged_settings[section].update(values)
        else:
            merged_settings[section] = values
    return merged_settings


def _apply_env_overrides(settings):
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            settings.setdefault(section, {})[key] = value
    return settings


def load_settings(config_file=None, force=False):
    global _cached_settings, _cached_path

    config_file = config_file or CONFIG_FILE
    if _cached_settings and not force and _cached_path == config_file:
        return _cached_settings

    if os.path.exists(config_file):
        logger.debug(f"Reading configuration file: {config_file}")
        with open(config_file, "r") as yaml_file:
            settings = yaml.safe_load(yaml_file) or {}
        settings = _merge_with_defaults(settings)
    else:
        settings = copy.deepcopy(DEFAULT_SETTINGS)
        try:
            os.makedirs(os.path.dirname(config_file), exist_ok=True)
            with open(config_file, "w") as yaml_file:
                yaml.dump(settings, yaml_file)
            logger.info(f"Created default configuration file: {config_file}")
        except OSError as e:
            logger.warning(f"Could not write default configuration to {config_file}: {e}")

    settings = _apply_env_overrides(settings)

    _cached_settings = settings
    _cached_path = config_file
    return settings


def verify_settings(section, data):
    success = True
    errors = []
    if section == "catalog":
        for key in ("cache_ttl", "page_size", "candidate_limit", "baseline_limit", "min_votes"):
            value = data.get(key)
            if value is not None and (not isinstance(value, (int, float)) or value < 0):
                success = False
                errors.append({"path": f"catalog/{key}", "error": f"{key} must be a non-negative number."})
    elif section == "igdb":
        if not data.get("client_id") or not data.get("client_secret"):
            success = False
            errors.append({"path": "igdb/client_id", "error": "IGDB client id and secret are required."})
    return success, errors


def reload_conf(config_file=None):
    """Reload application settings cache"""
    global _cached_settings
    _cached_settings = None
    return load_settings(config_file, force=True)
