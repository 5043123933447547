#!/usr/bin/env python3
"""
kpi_common.py - Boilerplate shared by the KPI metric scripts

Handles the ``[startBlock] [endBlock]`` command line, builds the collector
from the network configuration and turns RPC or configuration failures
into a logged non-zero exit.
"""

import argparse
from typing import Callable, List, Optional

from kpi.collector import BlockRange, RangedMetricCollector
from kpi.constants import DEFAULT_RANGE_FLOOR
from kpi.node_rpc import RPCError

# Handle imports for both direct execution and module import
try:
    from error_handling import configure_library_logging, handle_exit, log_info
    from network_config import ConfigError, NetworkConfig, load_network_config
except ImportError:
    from scripts.error_handling import configure_library_logging, handle_exit, log_info
    from scripts.network_config import ConfigError, NetworkConfig, load_network_config


def build_range_parser(description: str) -> argparse.ArgumentParser:
    """Parser for the optional ``[startBlock] [endBlock]`` positionals."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("start", nargs="?", type=int, default=None,
                        help="First block (default: start of the trailing window)")
    parser.add_argument("end", nargs="?", type=int, default=None,
                        help="Last block (default: latest block)")
    parser.add_argument("--config", default=None,
                        help="YAML configuration file (default: $KPI_CONFIG or ./kpi.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show per-request debug logging")
    return parser


def build_collector(config: NetworkConfig,
                    endpoints: Optional[List[str]] = None,
                    floor: int = DEFAULT_RANGE_FLOOR,
                    window: Optional[int] = None) -> RangedMetricCollector:
    """Collector over ``endpoints`` (all configured endpoints by default)."""
    return RangedMetricCollector(
        endpoints if endpoints is not None else config.endpoints,
        window=window if window is not None else config.window,
        floor=floor,
        timeout=config.timeout,
    )


def announce_range(component: str, block_range: BlockRange) -> None:
    log_info(component, f"Latest block number: {block_range.latest}")
    log_info(component, f"Fetching data from block #{block_range.start} to #{block_range.end}")


def run_metric(component: str, metric: Callable[[argparse.Namespace, NetworkConfig], None],
               args: argparse.Namespace, cluster: Optional[str] = None) -> None:
    """
    Load configuration, run ``metric`` and exit.

    Args:
        component: Component name for logging
        metric: Callable doing the fetch, reduction and printing
        args: Parsed command line
        cluster: Preset used when the configuration names no endpoints
    """
    configure_library_logging(getattr(args, "verbose", False))
    try:
        config = load_network_config(getattr(args, "config", None), cluster=cluster)
        metric(args, config)
    except ConfigError as e:
        handle_exit(1, component, f"Configuration error: {e}")
    except RPCError as e:
        handle_exit(1, component, f"RPC failure: {e}")
    handle_exit(0, component, "statistics computed")
