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
History management for LinkWatch.

This module provides the rolling per-endpoint result buffer and the endpoint
state record that pairs an endpoint with its buffer and its latest outcome.
"""

import enum
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from linkwatch.pinger import Failure, ProbeOutcome, Success, Timeout

DEFAULT_HISTORY_SIZE = 50


class HistorySymbol(str, enum.Enum):
    """Single-character classification of one round for one endpoint."""

    NO_DATA = " "
    REPLY = "."
    TIMED_OUT = "x"
    ERROR = "?"


def symbol_for_outcome(outcome: ProbeOutcome) -> HistorySymbol:
    """Return the history symbol for a probe outcome."""
    if isinstance(outcome, Success):
        return HistorySymbol.REPLY
    if isinstance(outcome, Timeout):
        return HistorySymbol.TIMED_OUT
    if isinstance(outcome, Failure):
        return HistorySymbol.ERROR
    raise TypeError(f"Unknown probe outcome: {outcome!r}")


class HistoryBuffer:
    """
    Fixed-capacity FIFO of history symbols.

    The buffer starts full of NO_DATA so every rendered row has the same width
    from the first frame on. Capacity never changes after construction.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"History capacity must be a positive integer, got {capacity!r}.")
        self._capacity = capacity
        self._symbols: "deque[HistorySymbol]" = deque([HistorySymbol.NO_DATA] * capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, symbol: HistorySymbol) -> None:
        """Append ``symbol`` and evict the oldest entries beyond capacity."""
        self._symbols.append(symbol)
        while len(self._symbols) > self._capacity:
            self._symbols.popleft()

    def snapshot(self) -> List[HistorySymbol]:
        """Return the symbols oldest first."""
        return list(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)


@dataclass
class EndpointState:
    """Mutable per-endpoint record updated once per round."""

    endpoint: str
    history: HistoryBuffer
    last_outcome: Optional[ProbeOutcome] = field(default=None)

    def record(self, outcome: ProbeOutcome) -> None:
        """Push the outcome's symbol and remember it as the latest result."""
        self.history.push(symbol_for_outcome(outcome))
        self.last_outcome = outcome

    @property
    def is_healthy(self) -> bool:
        return isinstance(self.last_outcome, Success)


def build_endpoint_states(endpoints: Sequence[str], capacity: int = DEFAULT_HISTORY_SIZE) -> List[EndpointState]:
    """
    Create one EndpointState per endpoint, preserving order.

    Args:
        endpoints: Endpoint identities in the order they were supplied
        capacity: History buffer capacity for every endpoint

    Returns:
        List of EndpointState with pre-filled histories
    """
    return [EndpointState(endpoint=endpoint, history=HistoryBuffer(capacity)) for endpoint in endpoints]
