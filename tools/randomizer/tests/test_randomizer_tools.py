#!/usr/bin/env python3

from __future__ import annotations

import json
import subprocess
import tempfile
import unittest
import zipfile
from pathlib import Path

from apps.api.tests.sample_data import write_sample_data

ROOT = Path(__file__).resolve().parents[3]
GENERATE_SCRIPT = ROOT / "tools/randomizer/generate_mod.py"
PREVIEW_SCRIPT = ROOT / "tools/randomizer/preview_mod.py"


class RandomizerToolsTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.tmp = tempfile.TemporaryDirectory()
        cls.data_dir = write_sample_data(Path(cls.tmp.name) / "data")

    @classmethod
    def tearDownClass(cls) -> None:
        cls.tmp.cleanup()

    def _run(self, script: Path, *args: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            ["python3", str(script), *args],
            cwd=ROOT,
            capture_output=True,
            text=True,
            check=False,
        )

    def test_generate_writes_archive(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out_path = Path(tmp) / "out" / "mod.zip"
            proc = self._run(
                GENERATE_SCRIPT,
                "--seed", "abc",
                "--data-dir", str(self.data_dir),
                "--act-shuffle",
                "--players", "3",
                "--teleport-staff", "10",
                "--out", str(out_path),
            )
            self.assertEqual(proc.returncode, 0, msg=proc.stderr)
            self.assertIn("Seed: 96354", proc.stdout)
            self.assertIn("Act order:", proc.stdout)
            self.assertIn(f"Wrote mod to {out_path}", proc.stdout)
            with zipfile.ZipFile(out_path) as archive:
                names = archive.namelist()
            self.assertIn("mod/data/global/excel/skills.txt", names)
            self.assertIn("mod/data/global/excel/uniqueitems.txt", names)

    def test_generate_reports_missing_data(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            proc = self._run(GENERATE_SCRIPT, "--seed", "1", "--data-dir", tmp, "--out", str(Path(tmp) / "x.zip"))
            self.assertEqual(proc.returncode, 1)
            self.assertIn("ERROR [missing_template]", proc.stdout)
            self.assertFalse((Path(tmp) / "x.zip").exists())

    def test_preview_json_is_stable(self) -> None:
        first = self._run(PREVIEW_SCRIPT, "--seed", "abc", "--data-dir", str(self.data_dir))
        second = self._run(PREVIEW_SCRIPT, "--seed", "96354", "--data-dir", str(self.data_dir))
        self.assertEqual(first.returncode, 0, msg=first.stderr)
        payload = json.loads(first.stdout)
        self.assertEqual(payload["seed"], 96354)
        self.assertIsNone(payload["act_order"])
        self.assertEqual(len(payload["classes"]), 8)
        self.assertEqual(payload, json.loads(second.stdout))

    def test_preview_text(self) -> None:
        proc = self._run(PREVIEW_SCRIPT, "--seed", "7", "--data-dir", str(self.data_dir), "--text", "--act-shuffle")
        self.assertEqual(proc.returncode, 0, msg=proc.stderr)
        lines = proc.stdout.splitlines()
        self.assertEqual(lines[0], "Seed: 7")
        self.assertTrue(lines[1].startswith("Act order: "))
        self.assertIn("Amazon:", lines)
        self.assertEqual(sum(1 for line in lines if line.startswith("  tab ")), 24)


if __name__ == "__main__":
    unittest.main()
