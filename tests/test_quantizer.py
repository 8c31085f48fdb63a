import subprocess
import unittest
from dataclasses import replace
from unittest import mock

from contentbuild.core.profiles import RecoveryProfile
from contentbuild.core.quantizer import build_command, quantize_files


def _ok(*_args, **_kwargs):
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=b"", stderr=b"")


class TestQuantizer(unittest.TestCase):
    def setUp(self):
        self.profile = RecoveryProfile(name="iOS")

    def test_build_command(self):
        self.assertEqual(
            build_command("out/a.png", self.profile),
            ["pngquant", "out/a.png", "--ext", ".png", "--force"],
        )
        prof = replace(self.profile, quantizer_executable="/opt/pngquant", quantizer_args=("--force",))
        self.assertEqual(build_command("b.png", prof), ["/opt/pngquant", "b.png", "--force"])

    def test_runs_sequentially_in_order(self):
        runner = mock.Mock(side_effect=_ok)
        summary, issues = quantize_files(["a.png", "b.png", "c.png"], self.profile, runner=runner)

        self.assertEqual(summary.total, 3)
        self.assertEqual(summary.succeeded, 3)
        self.assertEqual(issues, [])
        self.assertEqual([c[0][0][1] for c in runner.call_args_list], ["a.png", "b.png", "c.png"])

    def test_launch_failure_does_not_stop_batch(self):
        def runner(cmd, **kwargs):
            if cmd[1] == "a.png":
                raise FileNotFoundError(2, "No such file or directory", "pngquant")
            return _ok()

        summary, issues = quantize_files(["a.png", "b.png"], self.profile, runner=runner)
        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.succeeded, 1)
        self.assertEqual([(i.code, i.path) for i in issues], [("QUANTIZE_LAUNCH_FAILED", "a.png")])

    def test_nonzero_exit_is_reported(self):
        def runner(cmd, **kwargs):
            if cmd[1] == "b.png":
                return subprocess.CompletedProcess(args=cmd, returncode=15, stdout=b"", stderr=b"error: bad PNG\n")
            return _ok()

        summary, issues = quantize_files(["a.png", "b.png", "c.png"], self.profile, runner=runner)
        self.assertEqual(summary.succeeded, 2)
        self.assertEqual(summary.failed, 1)
        self.assertEqual(issues[0].code, "QUANTIZE_FAILED")
        self.assertIn("code 15", issues[0].message)
        self.assertIn("bad PNG", issues[0].message)

    def test_unexpected_runner_error_does_not_stop_batch(self):
        def runner(cmd, **kwargs):
            if cmd[1] == "a.png":
                raise RuntimeError("runner blew up")
            return _ok()

        summary, issues = quantize_files(["a.png", "b.png"], self.profile, runner=runner)
        self.assertEqual((summary.succeeded, summary.failed), (1, 1))
        self.assertEqual([(i.code, i.path) for i in issues], [("QUANTIZE_FAILED", "a.png")])
        self.assertIn("runner blew up", issues[0].message)

    def test_cancel_mid_worklist(self):
        runner = mock.Mock(side_effect=_ok)
        summary, issues = quantize_files(
            ["a.png", "b.png", "c.png"],
            self.profile,
            runner=runner,
            is_cancelled=lambda: runner.call_count >= 1,
        )

        self.assertEqual(runner.call_count, 1)
        self.assertEqual((summary.total, summary.succeeded, summary.failed), (3, 1, 0))
        self.assertEqual([(i.code, i.path) for i in issues], [("QUANTIZE_CANCELLED", "b.png")])

    def test_default_runner_is_subprocess_run(self):
        with mock.patch("subprocess.run", side_effect=_ok) as run:
            summary, _ = quantize_files(["a.png"], self.profile)
        self.assertEqual(summary.succeeded, 1)
        run.assert_called_once_with(
            ["pngquant", "a.png", "--ext", ".png", "--force"],
            capture_output=True,
            check=False,
        )

    def test_empty_worklist(self):
        runner = mock.Mock()
        summary, issues = quantize_files([], self.profile, runner=runner)
        self.assertEqual((summary.total, summary.succeeded, summary.failed), (0, 0, 0))
        runner.assert_not_called()


if __name__ == "__main__":
    unittest.main()
