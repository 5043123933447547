#!/usr/bin/env python3
"""
network_config.py - Central configuration module for the KPI scripts

This module defines the node endpoints the scripts talk to. Named cluster
presets cover the usual test networks; an optional YAML file and a few
environment variables override them.

Example kpi.yaml:

    cluster: cluster4
    window: 200
    timeout: 10
    # or list endpoints explicitly
    endpoints:
      - http://127.0.0.1:9001
      - http://127.0.0.1:9002
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from kpi.constants import DEFAULT_RPC_URL, DEFAULT_TIMEOUT_SECS, DEFAULT_WINDOW

# Handle imports for both direct execution and module import
try:
    from error_handling import log_info, log_warning
except ImportError:
    from scripts.error_handling import log_info, log_warning

# Module identification
MODULE_NAME = "NETWORK_CONFIG"

DEFAULT_CONFIG_FILE: str = "kpi.yaml"

# Local single node
LOCAL_RPC: str = DEFAULT_RPC_URL

# 4 node cluster on one host
CLUSTER4_HOST: str = "127.0.0.1"
CLUSTER4_BASE_PORT: int = 9000
CLUSTER4_RPC: List[str] = [f"http://{CLUSTER4_HOST}:{CLUSTER4_BASE_PORT + i}" for i in range(1, 5)]

# 16 node cluster
CLUSTER16_HOST: str = "10.0.4.47"
CLUSTER16_BASE_PORT: int = 19000
CLUSTER16_RPC: List[str] = [f"http://{CLUSTER16_HOST}:{CLUSTER16_BASE_PORT + i}" for i in range(1, 17)]

# Two nodes of the 4 node cluster expected to follow competing branches
FORK_RPC: List[str] = [CLUSTER4_RPC[0], CLUSTER4_RPC[2]]

CLUSTERS: Dict[str, List[str]] = {
    "local": [LOCAL_RPC],
    "cluster4": CLUSTER4_RPC,
    "cluster16": CLUSTER16_RPC,
    "fork": FORK_RPC,
}

DEFAULT_CLUSTER: str = "cluster4"


class ConfigError(Exception):
    """Raised when the KPI configuration cannot be loaded"""
    pass


@dataclass
class NetworkConfig:
    """Endpoints and range defaults for one script run."""
    endpoints: List[str] = field(default_factory=lambda: list(CLUSTERS[DEFAULT_CLUSTER]))
    window: int = DEFAULT_WINDOW
    timeout: float = DEFAULT_TIMEOUT_SECS


def get_cluster_endpoints(cluster: str) -> List[str]:
    """Return the endpoint list of a named cluster preset."""
    try:
        return list(CLUSTERS[cluster])
    except KeyError:
        raise ConfigError(f"Unknown cluster '{cluster}' (known: {', '.join(sorted(CLUSTERS))})")


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{name}' must be an integer, got {value!r}")


def load_network_config(config_path: Optional[str] = None,
                        cluster: Optional[str] = None,
                        environ: Optional[Dict[str, str]] = None) -> NetworkConfig:
    """
    Build the configuration for a script run.

    Precedence, lowest first: built-in defaults, the ``cluster`` argument,
    the YAML file, then the KPI_CLUSTER, KPI_ENDPOINTS and KPI_WINDOW
    environment variables.

    Args:
        config_path: YAML file to read. Defaults to KPI_CONFIG, then
            kpi.yaml in the working directory; a missing default file is
            not an error.
        cluster: Preset used when nothing else names endpoints
        environ: Environment mapping, os.environ when omitted

    Returns:
        NetworkConfig for the run
    """
    env = os.environ if environ is None else environ
    config = NetworkConfig()
    if cluster is not None:
        config.endpoints = get_cluster_endpoints(cluster)

    explicit = config_path or env.get("KPI_CONFIG")
    path = Path(explicit or DEFAULT_CONFIG_FILE)
    if path.exists():
        data = _read_config_file(path)
        log_info(MODULE_NAME, f"Loaded configuration from {path}")
        if "cluster" in data:
            config.endpoints = get_cluster_endpoints(str(data["cluster"]))
        if "endpoints" in data:
            endpoints = data["endpoints"]
            if not isinstance(endpoints, list) or not endpoints:
                raise ConfigError("'endpoints' must be a non-empty list of URLs")
            config.endpoints = [str(url) for url in endpoints]
        if "window" in data:
            config.window = _as_int("window", data["window"])
        if "timeout" in data:
            try:
                config.timeout = float(data["timeout"])
            except (TypeError, ValueError):
                raise ConfigError(f"'timeout' must be a number, got {data['timeout']!r}")
    elif explicit:
        raise ConfigError(f"Configuration file not found: {path}")

    if env.get("KPI_CLUSTER"):
        config.endpoints = get_cluster_endpoints(env["KPI_CLUSTER"])
    if env.get("KPI_ENDPOINTS"):
        config.endpoints = [url.strip() for url in env["KPI_ENDPOINTS"].split(",") if url.strip()]
    if env.get("KPI_WINDOW"):
        config.window = _as_int("KPI_WINDOW", env["KPI_WINDOW"])

    if not config.endpoints:
        raise ConfigError("No RPC endpoints configured")
    if config.window < 1:
        raise ConfigError(f"'window' must be positive, got {config.window}")
    if cluster is not None and config.endpoints != get_cluster_endpoints(cluster):
        log_warning(MODULE_NAME, f"Configured endpoints replace the '{cluster}' preset: "
                                 f"{', '.join(config.endpoints)}")
    if len(set(config.endpoints)) < len(config.endpoints):
        log_warning(MODULE_NAME, "Endpoint list contains duplicates; each copy is queried separately")

    return config
