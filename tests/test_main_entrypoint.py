"""Tests for the command-line entrypoint."""

from __future__ import annotations

import contextlib
import io
import logging
import tempfile
from pathlib import Path
import unittest
from unittest.mock import patch

from observerkit.__main__ import main


class MainEntrypointTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)

    def test_version_flag_prints_version(self) -> None:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            code = main(["--version"])
        self.assertEqual(code, 0)
        self.assertTrue(buffer.getvalue().startswith("observerkit "))

    def test_demo_runs_with_config(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                '[logging]\nstructured = false\n', encoding="utf-8"
            )
            buffer = io.StringIO()
            with contextlib.redirect_stdout(buffer):
                code = main(["--config", str(config_path), "demo"])
        self.assertEqual(code, 0)
        self.assertIn("Forecast:", buffer.getvalue())

    def test_no_command_prints_help(self) -> None:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            code = main([])
        self.assertEqual(code, 2)
        self.assertIn("usage: observerkit", buffer.getvalue())

    def test_demo_uses_configured_policy(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                '[registry]\nerror_policy = "log"\n[logging]\nstructured = false\n',
                encoding="utf-8",
            )
            with patch("observerkit.__main__.run_demo") as run_demo:
                main(["--config", str(config_path), "demo"])
        registry = run_demo.call_args.args[0]
        self.assertEqual(registry.error_policy.value, "log")


if __name__ == "__main__":
    unittest.main()
