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
Unit tests for linkwatch CLI module.

This module tests the command-line interface parsing, host collection, the
monitor loop and the run entrypoint without performing actual network
operations.
"""

import argparse
import contextlib
import io
import os
import socket
import sys
import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

# Add parent directory to path to import linkwatch
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from linkwatch.cli import collect_hosts, handle_options, main, monitor_loop, run  # noqa: E402
from linkwatch.config import LinkWatchConfig  # noqa: E402
from linkwatch.history import build_endpoint_states  # noqa: E402
from linkwatch.ping_wrapper import EchoReply, EchoStatus  # noqa: E402
from linkwatch.pinger import Prober, Success  # noqa: E402
from linkwatch.scheduler import RoundScheduler  # noqa: E402
from linkwatch.ui_render import DisplayDriver, strip_ansi  # noqa: E402


def make_args(**overrides):
    values = {
        "hosts": ["192.0.2.1"],
        "input": None,
        "history_size": 5,
        "log_level": "WARNING",
        "log_file": None,
        "no_config": True,
        "config_hosts": [],
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@patch("linkwatch.cli.load_config", return_value=LinkWatchConfig())
class TestCLIArgumentParsing(unittest.TestCase):
    """Test command-line argument parsing in linkwatch.cli"""

    def test_handle_options_default_values(self, _mock_load):
        """Test that default option values are set correctly"""
        args = handle_options(["example.com"])
        self.assertEqual(args.history_size, 50)
        self.assertEqual(args.log_level, "WARNING")
        self.assertIsNone(args.log_file)
        self.assertIsNone(args.input)
        self.assertEqual(args.hosts, ["example.com"])
        self.assertEqual(args.config_hosts, [])

    def test_handle_options_history_size(self, _mock_load):
        """Test custom history size option"""
        self.assertEqual(handle_options(["-n", "10", "a"]).history_size, 10)
        self.assertEqual(handle_options(["--history-size", "3", "a"]).history_size, 3)

    def test_handle_options_history_size_validation(self, _mock_load):
        """History size must be a positive integer"""
        for value in ("0", "-4", "ten"):
            with self.subTest(value=value):
                with patch("sys.stderr", new_callable=io.StringIO):
                    with self.assertRaises(SystemExit):
                        handle_options(["-n", value, "a"])

    def test_handle_options_log_level_case_insensitive(self, _mock_load):
        self.assertEqual(handle_options(["--log-level", "debug", "a"]).log_level, "DEBUG")

    def test_handle_options_multiple_hosts_keep_order(self, _mock_load):
        """Hosts keep the order given, duplicates included"""
        args = handle_options(["b", "a", "b"])
        self.assertEqual(args.hosts, ["b", "a", "b"])

    def test_config_fills_unset_fields(self, mock_load):
        """Config values apply only where the CLI left a field unset"""
        mock_load.return_value = LinkWatchConfig(history_size=20, log_level="INFO", hosts=["cfg.lan"])
        args = handle_options(["-n", "7", "a"])
        self.assertEqual(args.history_size, 7)
        self.assertEqual(args.log_level, "INFO")
        self.assertEqual(args.config_hosts, ["cfg.lan"])

    def test_no_config_skips_loading(self, mock_load):
        args = handle_options(["--no-config", "a"])
        mock_load.assert_not_called()
        self.assertEqual(args.history_size, 50)

    def test_invalid_config_exits(self, mock_load):
        """A broken config file is reported as a usage error"""
        mock_load.side_effect = ValueError("Invalid YAML in config file")
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            with self.assertRaises(SystemExit) as cm:
                handle_options(["a"])
        self.assertEqual(cm.exception.code, 2)
        self.assertIn("Invalid YAML", mock_stderr.getvalue())

    def test_invalid_history_size_from_config(self, mock_load):
        mock_load.return_value = LinkWatchConfig(history_size=0)
        with patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                handle_options(["a"])


class TestCollectHosts(unittest.TestCase):
    """Test host source precedence"""

    def test_cli_hosts_then_input_file(self):
        args = make_args(hosts=["cli"], input="hosts.txt")
        with patch("linkwatch.cli.read_input_file", return_value=["file-a", "file-b"]):
            self.assertEqual(collect_hosts(args, stdin=io.StringIO("piped\n")), ["cli", "file-a", "file-b"])

    def test_piped_stdin_when_no_other_source(self):
        args = make_args(hosts=[], config_hosts=["cfg"])
        self.assertEqual(collect_hosts(args, stdin=io.StringIO("p1\np2\n")), ["p1", "p2"])

    def test_config_hosts_as_last_resort(self):
        args = make_args(hosts=[], config_hosts=["cfg"])
        self.assertEqual(collect_hosts(args, stdin=io.StringIO("")), ["cfg"])

    def test_nothing_supplied(self):
        self.assertEqual(collect_hosts(make_args(hosts=[]), stdin=io.StringIO("")), [])


class TestMonitorLoop(unittest.TestCase):
    """Test the probe/render/wait loop"""

    def setUp(self):
        self.executor = ThreadPoolExecutor(max_workers=2)

    def tearDown(self):
        self.executor.shutdown(wait=True)

    def _stop_after(self, rounds, waits):
        def fake_wait(seconds, stop_event):
            waits.append(seconds)
            if len(waits) >= rounds:
                stop_event.set()
            return stop_event.is_set()

        return fake_wait

    def test_loop_runs_until_stopped(self):
        transport = lambda host: EchoReply(host, EchoStatus.SUCCESS, 10.0)  # noqa: E731
        states = build_endpoint_states(["a", "b"], capacity=4)
        scheduler = RoundScheduler(Prober(self.executor, transport=transport))
        stream = io.StringIO()
        driver = DisplayDriver(stream, cursor_positioning=False)
        waits = []

        monitor_loop(states, scheduler, driver, threading.Event(), wait=self._stop_after(3, waits))

        self.assertEqual(scheduler.round_count, 3)
        self.assertEqual(driver.frames_drawn, 3)
        self.assertEqual(waits, [0.99, 0.99, 0.99])
        self.assertEqual(states[0].history.snapshot(), [" ", ".", ".", "."])
        self.assertIn("(  10ms) a", strip_ansi(stream.getvalue()))

    def test_slow_round_waits_zero(self):
        transport = lambda host: EchoReply(host, EchoStatus.SUCCESS, 1500.0)  # noqa: E731
        states = build_endpoint_states(["far"], capacity=2)
        scheduler = RoundScheduler(Prober(self.executor, transport=transport))
        waits = []
        monitor_loop(
            states,
            scheduler,
            DisplayDriver(io.StringIO(), cursor_positioning=False),
            threading.Event(),
            wait=self._stop_after(1, waits),
        )
        self.assertEqual(waits, [0.0])
        self.assertEqual(states[0].last_outcome, Success(1500))

    def test_already_stopped(self):
        scheduler = MagicMock(round_count=0)
        stop_event = threading.Event()
        stop_event.set()
        monitor_loop([], scheduler, MagicMock(), stop_event, wait=MagicMock())
        scheduler.run_round.assert_not_called()


class TestRun(unittest.TestCase):
    """Test the run entrypoint"""

    def setUp(self):
        patcher = patch("linkwatch.cli._configure_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    @patch("linkwatch.cli.read_piped_hosts", return_value=[])
    def test_no_hosts(self, _mock_piped):
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            self.assertEqual(run(make_args(hosts=[])), 1)
        self.assertIn("No hosts specified", mock_stderr.getvalue())

    @patch("linkwatch.cli.ThreadPoolExecutor")
    @patch("linkwatch.cli.DisplayDriver")
    @patch("linkwatch.cli.terminal_cbreak_mode", return_value=contextlib.nullcontext())
    @patch("linkwatch.cli.monitor_loop")
    def test_large_host_list_is_monitored(self, mock_loop, _mock_cbreak, _mock_driver_cls, mock_executor_cls):
        """Any number of valid endpoints is accepted, one worker each"""
        hosts = [f"10.0.{i // 256}.{i % 256}" for i in range(300)]
        self.assertEqual(run(make_args(hosts=hosts)), 0)
        mock_loop.assert_called_once()
        states = mock_loop.call_args[0][0]
        self.assertEqual([state.endpoint for state in states], hosts)
        self.assertEqual(mock_executor_cls.call_args.kwargs["max_workers"], 300)

    @patch("linkwatch.cli.monitor_loop")
    @patch("linkwatch.cli.build_endpoint_states")
    @patch("linkwatch.core.socket.getaddrinfo", side_effect=socket.gaierror("Name or service not known"))
    def test_unresolvable_host_aborts_before_probing(self, _mock_gai, mock_build, mock_loop):
        """An unresolvable endpoint stops start-up before any state exists"""
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            self.assertEqual(run(make_args(hosts=["not-a-real-host.invalid"])), 1)
        self.assertIn("not-a-real-host.invalid", mock_stderr.getvalue())
        mock_build.assert_not_called()
        mock_loop.assert_not_called()

    @patch("linkwatch.cli.DisplayDriver")
    @patch("linkwatch.cli.terminal_cbreak_mode", return_value=contextlib.nullcontext())
    @patch("linkwatch.cli.monitor_loop", side_effect=KeyboardInterrupt)
    def test_interrupt_exits_cleanly(self, mock_loop, _mock_cbreak, mock_driver_cls):
        """Ctrl+C ends the run with status 0 and restores the terminal"""
        self.assertEqual(run(make_args(hosts=["192.0.2.1", "192.0.2.2"])), 0)
        states = mock_loop.call_args[0][0]
        self.assertEqual([state.endpoint for state in states], ["192.0.2.1", "192.0.2.2"])
        self.assertEqual(states[0].history.capacity, 5)
        mock_driver_cls.return_value.close.assert_called_once()

    @patch("linkwatch.cli.DisplayDriver")
    @patch("linkwatch.cli.terminal_cbreak_mode", return_value=contextlib.nullcontext())
    @patch("linkwatch.cli.monitor_loop")
    def test_quit_key_exits_cleanly(self, mock_loop, _mock_cbreak, mock_driver_cls):
        self.assertEqual(run(make_args()), 0)
        mock_loop.assert_called_once()
        mock_driver_cls.return_value.close.assert_called_once()


class TestCLIMain(unittest.TestCase):
    """Test the main CLI entrypoint function"""

    @patch("linkwatch.cli.run", return_value=0)
    @patch("linkwatch.cli.handle_options")
    def test_main_calls_handle_options_and_run(self, mock_handle_options, mock_run):
        """Test that main() calls handle_options() and exits with run()'s status"""
        mock_args = MagicMock()
        mock_handle_options.return_value = mock_args

        with self.assertRaises(SystemExit) as cm:
            main()

        self.assertEqual(cm.exception.code, 0)
        mock_handle_options.assert_called_once()
        mock_run.assert_called_once_with(mock_args)

    @patch("linkwatch.cli.run")
    def test_main_help(self, mock_run):
        """--help exits with status 0 before running anything"""
        with patch("sys.argv", ["linkwatch", "--help"]), patch("sys.stdout", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as cm:
                main()
        self.assertEqual(cm.exception.code, 0)
        mock_run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
