"""Unit tests for GenerationSettings and Speed."""
from __future__ import annotations

import unittest

from voxforge.domain.vo.generation_settings import EmptyBatchPolicy, GenerationSettings
from voxforge.domain.vo.synthesis_request import Speed
from voxforge.domain.vo.voice import DEFAULT_SYSTEM_PROMPT


class TestGenerationSettings(unittest.TestCase):
    """Test cases for GenerationSettings."""

    def test_defaults(self):
        """Test the narrator preset."""
        settings = GenerationSettings()

        self.assertEqual(settings.chunk_size, 3000)
        self.assertTrue(settings.merge_output)
        self.assertEqual(settings.voice_id, "Kore")
        self.assertEqual(settings.model_id, "gemini-2.5-flash-preview-tts")
        self.assertEqual(settings.speed, Speed.NORMAL)
        self.assertEqual(settings.temperature, 0.7)
        self.assertEqual(settings.system_prompt, DEFAULT_SYSTEM_PROMPT)
        self.assertEqual(settings.concurrency_limit, 3)
        self.assertEqual(settings.max_retries, 3)
        self.assertIs(settings.empty_batch_policy, EmptyBatchPolicy.SOFT)

    def test_chunk_size_bounds(self):
        """Test the accepted chunk size range."""
        GenerationSettings(chunk_size=500)
        GenerationSettings(chunk_size=15000)
        for size in (499, 15001):
            with self.assertRaises(ValueError):
                GenerationSettings(chunk_size=size)

    def test_other_bounds(self):
        """Test temperature, concurrency and retry validation."""
        with self.assertRaises(ValueError):
            GenerationSettings(temperature=2.5)
        with self.assertRaises(ValueError):
            GenerationSettings(concurrency_limit=0)
        with self.assertRaises(ValueError):
            GenerationSettings(max_retries=-1)

    def test_request_template(self):
        """Test that the template carries every delivery setting."""
        settings = GenerationSettings(voice_id="Puck", speed=Speed.FAST, temperature=1.2, system_prompt=None)

        template = settings.request_template()

        self.assertEqual(template.text, "")
        self.assertEqual(template.voice_id, "Puck")
        self.assertEqual(template.speed, Speed.FAST)
        self.assertEqual(template.temperature, 1.2)
        self.assertIsNone(template.system_prompt)
        self.assertEqual(template.for_text("hi").text, "hi")


class TestSpeed(unittest.TestCase):
    """Test cases for Speed.parse()."""

    def test_parse_is_case_insensitive(self):
        """Test accepted spellings."""
        self.assertIs(Speed.parse("slow"), Speed.SLOW)
        self.assertIs(Speed.parse(" FAST "), Speed.FAST)
        self.assertIs(Speed.parse("Normal"), Speed.NORMAL)

    def test_parse_rejects_unknown(self):
        """Test that unknown speeds raise."""
        with self.assertRaises(ValueError):
            Speed.parse("brisk")


if __name__ == "__main__":
    unittest.main()
