import logging
import threading
import unittest

from contentbuild.core.output import OutputLog, OutputLogHandler


class TestOutputLog(unittest.TestCase):
    def test_owner_thread_writes_directly(self):
        seen = []
        out = OutputLog(sink=seen.append)
        out.append("one")
        out.append(None)
        out.append("two")
        self.assertEqual(out.text(), "one\ntwo")
        self.assertEqual(seen, ["one", "two"])

    def test_other_threads_are_queued_until_drain(self):
        seen = []
        out = OutputLog(sink=seen.append)

        def producer(n):
            for i in range(50):
                out.append(f"t{n}-{i}")

        threads = [threading.Thread(target=producer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(out.text(), "")
        self.assertEqual(seen, [])

        self.assertEqual(out.drain(), 200)
        self.assertEqual(len(out.lines()), 200)
        self.assertEqual(len(seen), 200)
        # each producer's lines keep their order
        t0 = [s for s in seen if s.startswith("t0-")]
        self.assertEqual(t0, [f"t0-{i}" for i in range(50)])

    def test_owner_append_flushes_pending_first(self):
        out = OutputLog()
        t = threading.Thread(target=out.append, args=("from worker",))
        t.start()
        t.join()
        out.append("from owner")
        self.assertEqual(out.lines(), ["from worker", "from owner"])

    def test_drain_off_owner_thread_raises(self):
        out = OutputLog()
        errors = []

        def worker():
            try:
                out.drain()
            except RuntimeError as e:
                errors.append(e)

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        self.assertEqual(len(errors), 1)

    def test_lines_split_multiline_appends(self):
        out = OutputLog()
        out.append("D:/x/a.png\nCould not compress texture")
        self.assertEqual(out.lines(), ["D:/x/a.png", "Could not compress texture"])
        out.clear()
        self.assertEqual(out.lines(), [])

    def test_log_handler_forwards_records(self):
        out = OutputLog()
        logger = logging.getLogger("contentbuild.tests.output")
        logger.setLevel(logging.INFO)
        handler = OutputLogHandler(out)
        logger.addHandler(handler)
        try:
            logger.info("Fixing: %s", "a.png")
            logger.error("boom")
            logger.debug("hidden")
        finally:
            logger.removeHandler(handler)

        self.assertEqual(out.lines(), ["Fixing: a.png", "ERROR: boom"])


if __name__ == "__main__":
    unittest.main()
