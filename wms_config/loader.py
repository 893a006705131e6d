"""
Configuration Loader (``wms_config.loader``).

Responsibility
--------------
Read YAML settings files into plain dicts and fingerprint the effective
settings.  Parsing into typed settings happens in ``wms_config``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top-level value that is not a mapping  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from wms_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path | str) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML document is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top-level YAML value must be a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """
    SHA-256 of the canonical JSON serialization of ``data``.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
