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
Core functionality for LinkWatch.

This module contains functions for collecting endpoint identities from files
and pipes, and for validating at start-up that every endpoint is either a
literal IP address or a name that resolves in DNS.
"""

import ipaddress
import logging
import socket
import sys
from typing import Iterable, List, Optional, Sequence, TextIO

logger = logging.getLogger(__name__)


class ResolutionError(ValueError):
    """Raised when one or more endpoints are neither an IP nor resolvable."""

    def __init__(self, hosts: Sequence[str]):
        self.hosts = list(hosts)
        super().__init__(f"Cannot resolve host(s): {', '.join(self.hosts)}")


def parse_host_line(line: str, line_number: int, source: str) -> Optional[str]:
    """
    Parse a single line of host input.

    Args:
        line: Line of text
        line_number: Line number in the source (for warnings)
        source: Name of the file or stream (for warnings)

    Returns:
        The host string, or None for blank lines, comments, and invalid entries
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    if len(stripped.split()) != 1:
        print(
            f"Warning: Invalid host entry at {source}:{line_number}. Expected one host per line.",
            file=sys.stderr,
        )
        return None
    return stripped


def read_hosts(lines: Iterable[str], source: str) -> List[str]:
    """Collect hosts from an iterable of lines, skipping comments and invalid entries."""
    hosts = []
    for line_number, line in enumerate(lines, start=1):
        host = parse_host_line(line, line_number, source)
        if host is not None:
            hosts.append(host)
    return hosts


def read_input_file(input_file: str) -> List[str]:
    """
    Read and parse hosts from an input file.

    Args:
        input_file: Path to the file containing one host per line

    Returns:
        List of hosts (empty if the file cannot be read)
    """
    try:
        with open(input_file, "r", encoding="utf-8") as f:
            return read_hosts(f, input_file)
    except FileNotFoundError:
        print(f"Error: Input file '{input_file}' not found.", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied reading file '{input_file}'.", file=sys.stderr)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input file '{input_file}': {e}", file=sys.stderr)
    return []


def read_piped_hosts(stream: TextIO) -> List[str]:
    """Read hosts piped on ``stream``; returns an empty list for interactive terminals."""
    if stream.isatty():
        return []
    return read_hosts(stream, "<stdin>")


def is_resolvable(host: str) -> bool:
    """Return True if ``host`` is a literal IP address or resolves via DNS."""
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    try:
        return bool(socket.getaddrinfo(host, None))
    except (socket.gaierror, OSError, UnicodeError):
        return False


def validate_endpoints(hosts: Sequence[str]) -> List[str]:
    """
    Check every endpoint before monitoring starts.

    Args:
        hosts: Endpoint identities in the order supplied

    Returns:
        The same endpoints, in order

    Raises:
        ResolutionError: If any endpoint is neither an IP address nor resolvable
    """
    unresolved = [host for host in hosts if not is_resolvable(host)]
    if unresolved:
        logger.error("Start-up resolution failed for: %s", ", ".join(unresolved))
        raise ResolutionError(unresolved)
    return list(hosts)
