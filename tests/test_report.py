import json
import tempfile
import unittest
from pathlib import Path

from contentbuild.core.profiles import RecoveryProfile
from contentbuild.core.quantizer import QuantizeSummary
from contentbuild.core.recovery import RecoveryRun, RecoverySummary
from contentbuild.core.report import build_report_dict, write_report_json
from contentbuild.models import FailureRecord, RecoveryAction, RecoveryIssue


class TestReport(unittest.TestCase):
    def test_report_write(self):
        with tempfile.TemporaryDirectory() as td:
            out = Path(td)

            run = RecoveryRun(profile=RecoveryProfile(name="iOS"))
            run.records = [FailureRecord("D:/p/IOS/a.png", "Could not compress texture")]
            run.actions = [
                RecoveryAction(
                    original_path="D:/p/IOS/a.png",
                    output_path="D:/p/IOS/bin/IOS/a.png",
                    compiled_output_path="D:/p/IOS/bin/IOS/a.xnb",
                    requires_quantization=True,
                )
            ]
            run.summary = RecoverySummary(total=1, repaired=1, failed=0, already_clean=0)
            run.quantize_summary = QuantizeSummary(total=1, succeeded=0, failed=1)
            run.worklist = ["D:/p/IOS/bin/IOS/a.png"]
            run.issues = [RecoveryIssue("ERROR", "QUANTIZE_FAILED", "pngquant exited with code 15", "D:/p/IOS/bin/IOS/a.png")]

            report = build_report_dict("Tool", "0.0", run)
            path = write_report_json(report, str(out / "reports" / "recovery.json"))
            self.assertTrue(Path(path).exists())

            loaded = json.loads(Path(path).read_text(encoding="utf-8"))
            self.assertEqual(loaded["tool"], "Tool")
            self.assertEqual(loaded["profile"]["name"], "iOS")
            self.assertEqual(loaded["actions"][0]["compiled_output_path"], "D:/p/IOS/bin/IOS/a.xnb")
            self.assertEqual(loaded["summary"]["repaired"], 1)
            self.assertEqual(loaded["quantize_summary"]["failed"], 1)
            self.assertEqual(loaded["issues"][0]["code"], "QUANTIZE_FAILED")

    def test_report_without_summaries(self):
        report = build_report_dict("Tool", "0.0", RecoveryRun(profile=RecoveryProfile(name="iOS")))
        self.assertIsNone(report["summary"])
        self.assertIsNone(report["quantize_summary"])
        self.assertEqual(report["failures"], [])


if __name__ == "__main__":
    unittest.main()
