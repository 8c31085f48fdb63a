import unittest

from contentbuild.core.paths import join_segments, segment


class TestSegment(unittest.TestCase):
    def test_mixed_and_doubled_separators(self):
        self.assertEqual(segment("a//b\\c/"), (["a", "b"], "c"))
        self.assertEqual(segment("a//b\\c"), (["a", "b"], "c"))

    def test_trailing_separator_is_dropped(self):
        self.assertEqual(segment("game/"), ([], "game"))
        self.assertEqual(segment("game/tiles/"), (["game"], "tiles"))

    def test_leading_separators(self):
        self.assertEqual(segment("/game/snow.png"), (["game"], "snow.png"))
        self.assertEqual(segment("\\\\game\\snow.png"), (["game"], "snow.png"))

    def test_empty_input(self):
        self.assertEqual(segment(""), ([], ""))
        self.assertEqual(segment("///"), ([], ""))
        self.assertEqual(segment(None), ([], ""))

    def test_order_preserved(self):
        folders, leaf = segment("z/y/x/w.txt")
        self.assertEqual(folders, ["z", "y", "x"])
        self.assertEqual(leaf, "w.txt")

    def test_join_segments(self):
        self.assertEqual(join_segments(["a", "b"]), "a/b")
        self.assertEqual(join_segments([]), "")


if __name__ == "__main__":
    unittest.main()
