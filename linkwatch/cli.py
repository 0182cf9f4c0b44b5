# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review for correctness and security.

"""
Command-line interface for LinkWatch.

This module contains the main entry point, command-line argument handling and
the monitor loop that ties rounds, rendering and display together.
"""

import argparse
import logging
import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence

from linkwatch.config import LinkWatchConfig, load_config
from linkwatch.core import ResolutionError, read_input_file, read_piped_hosts, validate_endpoints
from linkwatch.history import DEFAULT_HISTORY_SIZE, EndpointState, build_endpoint_states
from linkwatch.input_keys import terminal_cbreak_mode, wait_for_quit
from linkwatch.pinger import Prober
from linkwatch.scheduler import RoundScheduler
from linkwatch.ui_render import DisplayDriver, render_frame

logger = logging.getLogger(__name__)


def _configure_logging(log_level: str, log_file: Optional[str]) -> None:
    """Configure logging handlers for CLI execution.

    With a log file, records go only to the file so they never tear the live frame.
    """
    handlers: List[logging.Handler]
    if log_file:
        handlers = [logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8")]
    else:
        handlers = [logging.StreamHandler()]
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


# Hardcoded defaults for config-overridable fields.
# Applied after config merging for any field still set to None.
_HARDCODED_DEFAULTS: Dict[str, Any] = {
    "history_size": DEFAULT_HISTORY_SIZE,
    "log_level": "WARNING",
}


def _positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _apply_config_to_args(args: argparse.Namespace, config: LinkWatchConfig) -> None:
    """
    Overlay config file values onto a parsed argument namespace.

    Only fields that are still ``None`` (i.e. not explicitly set on the CLI)
    are updated.  Config-supplied ``hosts`` are kept separately and used only
    when no other host source provides any.
    """
    for key in ("history_size", "log_level", "log_file"):
        value = getattr(config, key)
        if value is not None and getattr(args, key) is None:
            setattr(args, key, value)
    args.config_hosts = list(config.hosts)


def handle_options(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse and validate command-line arguments."""
    parser = argparse.ArgumentParser(
        description="LinkWatch - Watch ICMP reachability of many hosts at once",
        epilog="Press q or Ctrl+C to quit. History symbols: '.' reply, 'x' timeout, '?' error.",
    )
    parser.add_argument(
        "-n",
        "--history-size",
        type=_positive_int,
        default=None,
        help=f"Number of results kept and shown per host (default: {DEFAULT_HISTORY_SIZE})",
    )
    parser.add_argument(
        "-f",
        "--input",
        type=str,
        help="Input file containing list of hosts (one per line, # for comments)",
        required=False,
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file path; when set, logs are written only to this file",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        default=False,
        help="Skip loading ~/.linkwatch.conf config file",
    )
    parser.add_argument("hosts", nargs="*", help="Hosts to ping (IP addresses or hostnames)")

    args = parser.parse_args(argv)
    args.config_hosts = []

    if not args.no_config:
        try:
            config = load_config()
            _apply_config_to_args(args, config)
        except ValueError as exc:
            parser.error(str(exc))

    for field, default in _HARDCODED_DEFAULTS.items():
        if getattr(args, field, None) is None:
            setattr(args, field, default)

    if isinstance(args.history_size, bool) or not isinstance(args.history_size, int) or args.history_size <= 0:
        parser.error("--history-size must be a positive integer.")
    return args


def collect_hosts(args: argparse.Namespace, stdin: Optional[Any] = None) -> List[str]:
    """
    Gather endpoints from the command line, an input file, a pipe, or the config file.

    Command-line hosts come first, then the input file. Piped stdin is read
    only when neither supplied any; config hosts are the last resort.
    """
    hosts: List[str] = list(args.hosts or [])
    if args.input:
        hosts.extend(read_input_file(args.input))
    if not hosts:
        hosts.extend(read_piped_hosts(stdin if stdin is not None else sys.stdin))
    if not hosts:
        hosts.extend(getattr(args, "config_hosts", None) or [])
    return hosts


def monitor_loop(
    states: Sequence[EndpointState],
    scheduler: RoundScheduler,
    driver: DisplayDriver,
    stop_event: threading.Event,
    wait: Callable[[float, threading.Event], bool] = wait_for_quit,
) -> None:
    """
    Probe, render and display until ``stop_event`` is set.

    Each iteration runs one round, draws the resulting frame, then waits for
    the round's computed delay. A non-positive delay starts the next round
    immediately.
    """
    while not stop_event.is_set():
        delay_ms = scheduler.run_round(states)
        driver.draw(render_frame(states))
        wait(max(0, delay_ms) / 1000.0, stop_event)
    logger.info("Monitor stopped after %d round(s)", scheduler.round_count)


def run(args: argparse.Namespace) -> int:
    """Run the LinkWatch monitor with parsed arguments and return the exit status."""
    _configure_logging(getattr(args, "log_level", "WARNING"), getattr(args, "log_file", None))

    hosts = collect_hosts(args)
    if not hosts:
        print("Error: No hosts specified. Provide hosts as arguments, pipe them on stdin, or use -f/--input.", file=sys.stderr)
        return 1

    try:
        endpoints = validate_endpoints(hosts)
    except ResolutionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    states = build_endpoint_states(endpoints, args.history_size)
    logger.info("Monitoring %d host(s) with history size %d", len(states), args.history_size)

    stop_event = threading.Event()
    driver = DisplayDriver(sys.stdout)
    executor = ThreadPoolExecutor(max_workers=len(states), thread_name_prefix="linkwatch-probe")
    scheduler = RoundScheduler(Prober(executor))
    try:
        with terminal_cbreak_mode():
            monitor_loop(states, scheduler, driver, stop_event)
    except KeyboardInterrupt:
        stop_event.set()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
        driver.close()
    return 0


def main() -> None:
    """Main entrypoint for the CLI - parses arguments and runs the application."""
    args = handle_options()
    sys.exit(run(args))
