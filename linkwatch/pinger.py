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
Ping functionality for LinkWatch.

This module defines the classified result of a probe (Success, Timeout or
Failure) and the Prober, which dispatches one echo request per endpoint onto a
thread pool and turns the finished request into a classified outcome.
"""

import logging
from concurrent.futures import Executor, Future
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass
from typing import Callable, Union

from linkwatch.ping_wrapper import EchoReply, EchoStatus, send_echo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    """An echo reply was received after ``rtt_ms`` milliseconds."""

    rtt_ms: int


@dataclass(frozen=True)
class Timeout:
    """No reply arrived within the transport's default window."""


@dataclass(frozen=True)
class Failure:
    """The probe did not complete (lookup failure, exception, unknown status)."""

    reason: str = ""


ProbeOutcome = Union[Success, Timeout, Failure]


def classify_reply(reply: EchoReply) -> ProbeOutcome:
    """
    Map a transport reply onto a probe outcome.

    Args:
        reply: The EchoReply returned by the transport

    Returns:
        Success with a whole-millisecond RTT, Timeout, or Failure for any other status
    """
    if reply.status is EchoStatus.SUCCESS and reply.rtt_ms is not None:
        return Success(rtt_ms=max(0, int(round(reply.rtt_ms))))
    if reply.status is EchoStatus.TIMEOUT:
        return Timeout()
    return Failure(reason=f"status={reply.status.value}")


class Prober:
    """
    Issues echo requests without blocking and classifies them once settled.

    The executor is owned by the caller; one worker per endpoint keeps every
    probe of a round in flight at the same time.
    """

    def __init__(self, executor: Executor, transport: Callable[[str], EchoReply] = send_echo) -> None:
        self.executor = executor
        self.transport = transport

    def start(self, endpoint: str) -> "Future[EchoReply]":
        """Submit an echo request for ``endpoint`` and return its handle immediately."""
        logger.debug("Dispatching echo request to %s", endpoint)
        return self.executor.submit(self.transport, endpoint)

    def collect(self, handle: "Future[EchoReply]") -> ProbeOutcome:
        """
        Block until ``handle`` settles and classify the result.

        Any exception raised by the transport becomes a Failure; nothing is
        re-raised to the caller.
        """
        wait_futures([handle])
        if handle.cancelled():
            return Failure(reason="cancelled")
        error = handle.exception()
        if error is not None:
            return Failure(reason=f"{type(error).__name__}: {error}")
        return classify_reply(handle.result())
