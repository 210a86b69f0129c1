"""
Project key configuration loading.
Reads the field-indirection table from config/project_keys.yaml in the working
directory when present, else from the project_keys.yaml shipped with this
package, then applies ISSUE_INSIGHTS_<KEY>_FIELD environment overrides.
"""
from typing import Dict, Optional
import os

import yaml

from normalize.models import ProjectKeys, DEFAULT_FIELD_NAMES

# filename used for the project key YAML configuration
PROJECT_KEYS_FILENAME = 'project_keys.yaml'
ENV_PREFIX = 'ISSUE_INSIGHTS_'


def packaged_config_path() -> str:
    return os.path.join(os.path.dirname(__file__), PROJECT_KEYS_FILENAME)


def default_config_path() -> str:
    """./config/project_keys.yaml when the working directory has one, else the packaged file."""
    local = os.path.join(os.getcwd(), 'config', PROJECT_KEYS_FILENAME)
    if os.path.isfile(local):
        return local
    return packaged_config_path()


def _read_yaml_mapping(path: str) -> Dict[str, object]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _env_overrides() -> Dict[str, str]:
    overrides = {}
    for logical in DEFAULT_FIELD_NAMES:
        val = os.getenv(f"{ENV_PREFIX}{logical}_FIELD")
        if val:
            overrides[logical] = val
    return overrides


def load_project_keys(path: Optional[str] = None) -> ProjectKeys:
    """
    Load the project key table. Missing file, unreadable YAML and missing entries
    all fall back to the default field names; environment overrides win over the file.
    """
    if not path:
        path = default_config_path()
    mapping = _read_yaml_mapping(path)
    mapping.update(_env_overrides())
    return ProjectKeys.from_mapping(mapping)
