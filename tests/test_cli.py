"""Unit tests for the console driver and live capture wiring."""

from __future__ import annotations

import contextlib
import io
import struct
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pcm_meter import cli
from pcm_meter.audio import collector
from pcm_meter.audio.config import MeterConfig


class TestRenderLevel(unittest.TestCase):
    """Tests for the console bar."""

    def test_quieter_moves_marker_right(self) -> None:
        loud = cli.render_level(-0.5)
        quiet = cli.render_level(-2.0)
        self.assertTrue(loud.startswith("|"))
        self.assertGreater(quiet.index("-2.0"), loud.index("-0.5"))

    def test_silence_is_clamped(self) -> None:
        line = cli.render_level(float("-inf"), label="peak ")
        self.assertTrue(line.startswith("peak |"))
        self.assertTrue(line.endswith("-inf"))


class TestMain(unittest.TestCase):
    """End-to-end runs of main() on a raw PCM file."""

    def _write_pcm(self, directory: str, samples) -> Path:
        path = Path(directory) / "tone.raw"
        path.write_bytes(struct.pack("<%dh" % len(samples), *samples))
        return path

    def test_reports_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write_pcm(tmp, [16384, -16384] * 10)
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                code = cli.main(
                    [
                        "--mime-type", "audio/L16; rate=10; channels=1",
                        "--input", str(path),
                        "--window", "0.5",
                        "--peak",
                        "--chunk-size", "3",
                    ]
                )
        self.assertEqual(code, 0)
        lines = out.getvalue().splitlines()
        # 20 frames, a report every 4 frames, RMS and peak lines each
        self.assertEqual(len(lines), 10)
        self.assertEqual(sum(1 for line in lines if line.startswith("peak ")), 5)

    def test_bad_header_exits_with_error(self) -> None:
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = cli.main(["--mime-type", "audio/mpeg"])
        self.assertEqual(code, 2)
        self.assertIn("unrecognized MIME type", err.getvalue())

    def test_bad_interval_exits_with_error(self) -> None:
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = cli.main(["--mime-type", "audio/L16; rate=10; channels=1", "--every", "0.01"])
        self.assertEqual(code, 2)
        self.assertIn("bad meter parameters", err.getvalue())


class _FakeStream:
    def __init__(self, callback, blocks):
        self._callback = callback
        self._blocks = blocks

    def __enter__(self):
        for block in self._blocks:
            self._callback(block, len(block), None, None)
        return self

    def __exit__(self, *exc):
        return False


class TestRawAudioCollector(unittest.TestCase):
    """Live capture yields the device's raw bytes unchanged."""

    def test_record_stream_yields_bytes(self) -> None:
        fake_sd = mock.Mock()
        captured = {}

        def raw_input_stream(**kwargs):
            captured.update(kwargs)
            return _FakeStream(kwargs["callback"], [b"\x01\x00\x02\x00", b"\x03\x00"])

        fake_sd.RawInputStream.side_effect = raw_input_stream
        with mock.patch.object(collector, "sd", fake_sd):
            rec = collector.RawAudioCollector(MeterConfig(sample_rate=8000, channels=1))
            stream = rec.record_stream(chunk_duration_sec=0.01)
            self.assertEqual(next(stream), b"\x01\x00\x02\x00")
            self.assertEqual(next(stream), b"\x03\x00")
            stream.close()
        self.assertEqual(captured["dtype"], "int16")
        self.assertEqual(captured["blocksize"], 80)
        self.assertEqual(captured["channels"], 1)

    def test_missing_sounddevice(self) -> None:
        with mock.patch.object(collector, "sd", None):
            rec = collector.RawAudioCollector()
            with self.assertRaises(ImportError):
                next(rec.record_stream())

    def test_unsupported_format(self) -> None:
        with self.assertRaises(ValueError):
            collector.RawAudioCollector(MeterConfig(little_endian=False))
        with self.assertRaises(ValueError):
            collector.RawAudioCollector(MeterConfig(word_size=40))


if __name__ == "__main__":
    unittest.main()
