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
UI rendering functions for LinkWatch.

This module turns endpoint states into terminal lines and places each frame on
the terminal so it overwrites the previous one without a visible flash.
"""

import logging
import os
import re
import sys
from typing import List, Optional, Sequence, TextIO

from linkwatch.history import EndpointState
from linkwatch.pinger import Success

logger = logging.getLogger(__name__)

# ANSI and display constants
ANSI_RESET = "\x1b[0m"
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
ANSI_CLEAR_SCREEN = "\x1b[2J"
ANSI_CURSOR_HOME = "\x1b[H"
ANSI_ERASE_LINE_END = "\x1b[K"
ANSI_HIDE_CURSOR = "\x1b[?25l"
ANSI_SHOW_CURSOR = "\x1b[?25h"
STATUS_BACKGROUNDS = {
    "healthy": "\x1b[30;42m",  # Black on green
    "unhealthy": "\x1b[97;41m",  # White on red
}
SEGMENT_SEPARATOR = " "
LATENCY_WIDTH = 4
LATENCY_CAP_MS = 1000
LATENCY_CAP_LABEL = "999+"
LATENCY_PLACEHOLDER = "-" * LATENCY_WIDTH


# ============================================================================
# ANSI/Text Utility Functions
# ============================================================================


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_ESCAPE_RE.sub("", text)


def visible_len(text: str) -> int:
    """Get the visible length of text (excluding ANSI codes)."""
    return len(strip_ansi(text))


def colorize_name(name: str, healthy: bool) -> str:
    """Wrap an endpoint name in the background color for its status."""
    background = STATUS_BACKGROUNDS["healthy" if healthy else "unhealthy"]
    return f"{background}{name}{ANSI_RESET}"


# ============================================================================
# Formatting Functions
# ============================================================================


def format_latency(rtt_ms: Optional[int]) -> str:
    """
    Format a round-trip time as a fixed-width latency field.

    Args:
        rtt_ms: Round-trip time in milliseconds, or None when there is no reply

    Returns:
        "(  15ms)" style text; "(999+ms)" at or above one second; "(----ms)" without a reply
    """
    if rtt_ms is None:
        value = LATENCY_PLACEHOLDER
    elif rtt_ms >= LATENCY_CAP_MS:
        value = LATENCY_CAP_LABEL
    else:
        value = str(rtt_ms).rjust(LATENCY_WIDTH)
    return f"({value}ms)"


def format_history(state: EndpointState) -> str:
    """Concatenate an endpoint's history symbols, oldest first."""
    return "".join(symbol.value for symbol in state.history.snapshot())


def render_line(state: EndpointState, name_width: int = 0) -> str:
    """
    Render one endpoint as a single terminal line.

    Args:
        state: Endpoint state to render
        name_width: Width the name segment is padded to

    Returns:
        "<history> (<latency>) <name>" with a status background on the name
    """
    outcome = state.last_outcome
    rtt_ms = outcome.rtt_ms if isinstance(outcome, Success) else None
    name = state.endpoint.ljust(name_width)
    return SEGMENT_SEPARATOR.join(
        [
            format_history(state),
            format_latency(rtt_ms),
            colorize_name(name, state.is_healthy),
        ]
    )


def render_frame(states: Sequence[EndpointState]) -> List[str]:
    """
    Render every endpoint in start-up order.

    The output depends only on ``states``; rendering the same states twice
    yields identical lines.
    """
    name_width = max((len(state.endpoint) for state in states), default=0)
    return [render_line(state, name_width) for state in states]


# ============================================================================
# Terminal Utilities
# ============================================================================


def supports_cursor_positioning(stream: TextIO) -> bool:
    """Return True when ``stream`` is an interactive terminal that honors cursor moves."""
    if os.environ.get("TERM", "") == "dumb":
        return False
    try:
        if not stream.isatty():
            return False
        os.get_terminal_size(stream.fileno())
    except (AttributeError, ValueError, OSError):
        return False
    return True


class DisplayDriver:
    """
    Places frames on the terminal.

    When the terminal supports it, each frame is drawn from the home position
    over the previous one; otherwise the screen is cleared before every frame.
    The first frame always starts from a cleared screen.
    """

    def __init__(self, stream: Optional[TextIO] = None, cursor_positioning: Optional[bool] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        if cursor_positioning is None:
            cursor_positioning = supports_cursor_positioning(self.stream)
        self.cursor_positioning = cursor_positioning
        self.frames_drawn = 0
        self._cursor_hidden = False
        logger.debug(
            "Display strategy: %s",
            "cursor home" if self.cursor_positioning else "full clear",
        )

    def prepare(self) -> str:
        """Return the escape sequence that positions the next frame."""
        if self.frames_drawn == 0 or not self.cursor_positioning:
            return ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME
        return ANSI_CURSOR_HOME

    def draw(self, lines: Sequence[str]) -> None:
        """Write one frame. Write errors propagate to the caller."""
        chunks = [self.prepare()]
        if self.frames_drawn == 0 and self.cursor_positioning:
            chunks.insert(0, ANSI_HIDE_CURSOR)
            self._cursor_hidden = True
        for line in lines:
            chunks.append(f"{line}{ANSI_ERASE_LINE_END}\n")
        self.stream.write("".join(chunks))
        self.stream.flush()
        self.frames_drawn += 1

    def close(self) -> None:
        """Reset colors and restore the cursor."""
        restore = ANSI_RESET
        if self._cursor_hidden:
            restore += ANSI_SHOW_CURSOR
            self._cursor_hidden = False
        self.stream.write(restore)
        self.stream.flush()
