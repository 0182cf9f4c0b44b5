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
Round scheduler module for LinkWatch.

This module runs one probing round across every endpoint: all probes are
started back to back, the round waits for every one of them to settle, each
outcome is recorded into its endpoint's state, and the delay that keeps the
loop near a one-second cadence is computed from the slowest successful reply.
"""

import logging
from concurrent.futures import ALL_COMPLETED
from concurrent.futures import wait as wait_futures
from typing import Iterable, Sequence

from linkwatch.history import EndpointState
from linkwatch.pinger import ProbeOutcome, Prober, Success

logger = logging.getLogger(__name__)

TARGET_PERIOD_MS = 1000


def compute_round_delay(outcomes: Iterable[ProbeOutcome], target_period_ms: int = TARGET_PERIOD_MS) -> int:
    """
    Compute how long to sleep before the next round.

    Only successful replies count toward the slowest round trip; timeouts and
    failures are ignored. The result is clamped at zero.

    Args:
        outcomes: Outcomes of the round that just finished
        target_period_ms: Desired time between round starts

    Returns:
        Delay in whole milliseconds (>= 0)
    """
    latencies = [outcome.rtt_ms for outcome in outcomes if isinstance(outcome, Success)]
    slowest = max(latencies) if latencies else 0
    return max(0, target_period_ms - slowest)


class RoundScheduler:
    """
    Fire-and-join probing rounds for LinkWatch.

    The scheduler is the only writer of EndpointState. It mutates the states
    after the round's barrier, so a renderer running between rounds always sees
    every endpoint at the same round.
    """

    def __init__(self, prober: Prober, target_period_ms: int = TARGET_PERIOD_MS) -> None:
        """
        Initialize the RoundScheduler.

        Args:
            prober: Prober used to dispatch and classify echo requests
            target_period_ms: Desired time between round starts in milliseconds (default: 1000)
        """
        self.prober = prober
        self.target_period_ms = target_period_ms
        self.round_count = 0

    def run_round(self, states: Sequence[EndpointState]) -> int:
        """
        Probe every endpoint once and record the outcomes.

        Args:
            states: Endpoint states in display order

        Returns:
            Delay in milliseconds before the next round should start
        """
        handles = [self.prober.start(state.endpoint) for state in states]
        if handles:
            wait_futures(handles, return_when=ALL_COMPLETED)

        # Outcome i belongs to endpoint i of the launch list.
        outcomes = [self.prober.collect(handle) for handle in handles]
        for state, outcome in zip(states, outcomes):
            state.record(outcome)
            if not isinstance(outcome, Success):
                logger.debug("Probe to %s did not succeed: %r", state.endpoint, outcome)

        self.round_count += 1
        delay = compute_round_delay(outcomes, self.target_period_ms)
        logger.debug("Round %d finished for %d endpoint(s); next round in %d ms", self.round_count, len(states), delay)
        return delay
