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
Keyboard input handling for LinkWatch using the readchar library.

The only interactive command is quit. Keys are polled while the monitor waits
between rounds, so pressing ``q`` stops the loop at the next round boundary.
"""

import contextlib
import select
import sys
import termios
import threading
import time
import tty
from typing import Generator, Optional, TextIO

import readchar

QUIT_KEYS = frozenset(("q", "Q"))


@contextlib.contextmanager
def terminal_cbreak_mode(stream: Optional[TextIO] = None) -> Generator[None, None, None]:
    """Put a terminal into cbreak mode and restore its settings on exit.

    Cbreak (rather than raw) keeps Ctrl+C delivering SIGINT. The original
    settings are restored even when the block is left by an exception.

    Args:
        stream: Terminal input stream.  Defaults to ``sys.stdin``.
    """
    if stream is None:
        stream = sys.stdin
    if not stream.isatty():
        yield
        return
    fd = stream.fileno()
    try:
        old_settings = termios.tcgetattr(fd)
    except termios.error:
        # Not a real terminal (e.g. a pipe or test mock) - skip mode setup.
        yield
        return
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def read_key(timeout: float = 0.0) -> Optional[str]:
    """
    Read one key from ``sys.stdin`` if it arrives within ``timeout`` seconds.

    Only ``sys.stdin`` is supported because ``readchar.readkey`` always reads
    from it. Keys that readchar has already pulled into the text buffer are
    not visible to ``select``; they are returned on the next ready read.

    Returns:
        The key as returned by readchar, or None when no input is available
        or stdin is not a terminal
    """
    if not sys.stdin.isatty():
        return None
    ready, _, _ = select.select([sys.stdin], [], [], max(0.0, timeout))
    if not ready:
        return None
    return readchar.readkey()


def is_quit_key(key: Optional[str]) -> bool:
    return key in QUIT_KEYS


def wait_for_quit(seconds: float, stop_event: threading.Event) -> bool:
    """
    Wait up to ``seconds`` while watching stdin for the quit key.

    Args:
        seconds: How long to wait; non-positive values return immediately
        stop_event: Set when the operator asks to quit

    Returns:
        True if the stop event is set when the wait ends
    """
    seconds = max(0.0, seconds)
    if not sys.stdin.isatty():
        stop_event.wait(seconds)
        return stop_event.is_set()

    deadline = time.monotonic() + seconds
    while not stop_event.is_set():
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        if is_quit_key(read_key(remaining)):
            stop_event.set()
    return stop_event.is_set()
