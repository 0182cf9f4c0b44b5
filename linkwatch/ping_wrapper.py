#!/usr/bin/env python3
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
# Review required for correctness, security, and licensing.

"""
Python wrapper around the ping3 ICMP transport.

This module sends a single ICMP echo request and reports the transport's view
of what happened. It normalizes the three return shapes of ``ping3.ping``:

  - a number: the round-trip time in milliseconds (reply received)
  - ``None``: no reply within ping3's own default timeout
  - ``False``: the request could not be completed (e.g. unknown host)

No timeout is passed to ping3; the library default window applies to every
probe.
"""

import enum
from dataclasses import dataclass
from typing import Optional

import ping3

__all__ = ["EchoReply", "EchoStatus", "PingTransportError", "send_echo"]


class PingTransportError(RuntimeError):
    """Raised when the transport returns a value it does not document."""

    def __init__(self, message, host=None, raw_result=None):
        super().__init__(message)
        self.host = host
        self.raw_result = raw_result


class EchoStatus(enum.Enum):
    """Completion status reported by the transport for one echo request."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class EchoReply:
    """Transport-level result of a single echo request."""

    host: str
    status: EchoStatus
    rtt_ms: Optional[float] = None


def send_echo(host: str) -> EchoReply:
    """
    Send one ICMP echo request to ``host`` and wait for the transport to finish.

    Args:
        host: The hostname or IP address to ping

    Returns:
        EchoReply with status SUCCESS (and rtt_ms), TIMEOUT, or UNREACHABLE

    Raises:
        PingTransportError: If ping3 returns a value outside its contract
        OSError: If the ICMP socket cannot be created (e.g. missing privileges)

    Examples:
        >>> reply = send_echo("127.0.0.1")
        >>> reply.status in (EchoStatus.SUCCESS, EchoStatus.TIMEOUT)
        True
    """
    result = ping3.ping(host, unit="ms")

    # bool is an int subclass, so False must be checked before the numeric case
    if result is False:
        return EchoReply(host=host, status=EchoStatus.UNREACHABLE)
    if result is None:
        return EchoReply(host=host, status=EchoStatus.TIMEOUT)
    if isinstance(result, (int, float)):
        return EchoReply(host=host, status=EchoStatus.SUCCESS, rtt_ms=float(result))

    raise PingTransportError(
        f"Unexpected ping3 result for {host}: {result!r}",
        host=host,
        raw_result=result,
    )

