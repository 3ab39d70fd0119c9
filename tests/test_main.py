"""Tests for the command line entry point."""
from __future__ import annotations

import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import numpy as np

from voxforge.application.errors import SynthesisRejected
from voxforge.main import (
    EXIT_CONFIG,
    EXIT_CREDENTIALS,
    EXIT_EMPTY,
    EXIT_IO,
    EXIT_OK,
    main,
)

ENV = {"VOXFORGE_SYSTEM_PROMPT_FILE": "/nonexistent/voxforge-prompt.txt"}
STORY = "A short story that fits into one chunk. It ends here."


class FakeSpeechClient:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.requests = []

    def is_configured(self) -> bool:
        return True

    def synthesize(self, request):
        self.requests.append(request)
        if self.fail:
            raise SynthesisRejected("400 bad request")
        return np.full(100, 0.1, dtype=np.float32)


class TestMain(unittest.TestCase):
    """Test cases for main()."""

    def setUp(self):
        """Set up test fixtures."""
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.input = self.tmp / "story.txt"
        self.input.write_text(STORY, encoding="utf-8")
        self.out_dir = self.tmp / "out"

        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        patchers = [
            patch.dict(os.environ, ENV, clear=True),
            patch("sys.stdout", self.stdout),
            patch("sys.stderr", self.stderr),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self):
        """Tear down test fixtures."""
        self._tmp.cleanup()

    def _run(self, *extra: str) -> int:
        argv = [str(self.input), "--out-dir", str(self.out_dir), "--env-file", "", *extra]
        return main(argv)

    def test_list_voices(self):
        """Test that voices are listed without any configuration."""
        self.assertEqual(main(["--list-voices"]), EXIT_OK)
        self.assertIn("Kore", self.stdout.getvalue())

    def test_missing_credentials(self):
        """Test the exit code when no API key is configured."""
        self.assertEqual(self._run(), EXIT_CREDENTIALS)
        self.assertIn("Credentials error", self.stderr.getvalue())
        self.assertFalse(self.out_dir.exists())

    def test_invalid_setting_is_config_error(self):
        """Test that out-of-range CLI settings are reported as config errors."""
        self.assertEqual(self._run("--chunk-size", "10"), EXIT_CONFIG)

    def test_missing_input_is_io_error(self):
        """Test that an unreadable input file exits with the I/O code."""
        self.assertEqual(main([str(self.tmp / "missing.txt"), "--env-file", ""]), EXIT_IO)

    def test_empty_input_is_a_no_op(self):
        """Test that empty input exits cleanly without output."""
        self.input.write_text("   \n", encoding="utf-8")

        self.assertEqual(self._run(), EXIT_OK)
        self.assertFalse(self.out_dir.exists())

    def test_successful_run_writes_merged_wav(self):
        """Test a full run with a fake provider."""
        client = FakeSpeechClient()
        with patch("voxforge.di_container.build_speech_client", return_value=client):
            code = self._run("--voice", "Puck", "--speed", "fast")

        self.assertEqual(code, EXIT_OK)
        output = self.out_dir / "story.wav"
        self.assertTrue(output.exists())
        self.assertEqual(self.stdout.getvalue().strip(), str(output))
        self.assertEqual(client.requests[0].voice_id, "Puck")
        self.assertEqual(client.requests[0].speed.value, "Fast")
        self.assertIn("Progress: 100%", self.stderr.getvalue())

    def test_no_merge_uses_name(self):
        """Test per-chunk output with a custom stem."""
        with patch("voxforge.di_container.build_speech_client", return_value=FakeSpeechClient()):
            code = self._run("--no-merge", "--name", "tale")

        self.assertEqual(code, EXIT_OK)
        self.assertTrue((self.out_dir / "tale_chunk_001.wav").exists())

    def test_all_failed_exits_empty(self):
        """Test that a batch without audio exits with the empty code."""
        with patch("voxforge.di_container.build_speech_client", return_value=FakeSpeechClient(fail=True)):
            code = self._run()

        self.assertEqual(code, EXIT_EMPTY)
        self.assertIn("Chunk 1 failed: 400 bad request", self.stderr.getvalue())

    def test_fail_on_empty(self):
        """Test the fail policy from the command line."""
        with patch("voxforge.di_container.build_speech_client", return_value=FakeSpeechClient(fail=True)):
            code = self._run("--fail-on-empty")

        self.assertEqual(code, EXIT_EMPTY)
        self.assertIn("No audio was produced", self.stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
