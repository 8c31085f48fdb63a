import os
import tempfile
import unittest
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication
from PySide6.QtTest import QTest
from PySide6.QtCore import Qt

from contentbuild.ui.main_window import MainWindow


class TestMainWindowUI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # Ensure one QApplication exists
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self._profiles = tempfile.TemporaryDirectory()
        os.environ["CONTENTBUILD_PROFILES_DIR"] = self._profiles.name
        self.window = MainWindow()
        self.window.show()
        QTest.qWaitForWindowExposed(self.window)

    def tearDown(self):
        self.window.close()
        os.environ.pop("CONTENTBUILD_PROFILES_DIR", None)
        self._profiles.cleanup()

    def test_open_folder_fills_tree(self):
        with tempfile.TemporaryDirectory() as content_dir:
            root = Path(content_dir)
            (root / "game" / "tiles").mkdir(parents=True)
            (root / "game" / "tiles" / "snow.png").write_bytes(b"dummy")
            (root / "game" / "dice.jpg").write_bytes(b"dummy")

            self.assertTrue(self.window.open_content_folder(str(root)))

            tree = self.window.findChild(type(self.window.project_tree), "project_tree")
            self.assertEqual(tree.topLevelItemCount(), 1)
            top = tree.topLevelItem(0)
            self.assertTrue(top.isExpanded())
            self.assertEqual(top.child(0).text(0), "game")
            self.assertEqual(top.child(0).childCount(), 2)

            # Selecting an item shows its properties
            item = self.window.project.find_item("game/dice.jpg")
            self.window.project.select(item)
            props = self.window.findChild(type(self.window.properties_box), "properties_box")
            self.assertIn("TextureImporter", props.toPlainText())

            # Excluding removes the row
            self.window.exclude(item)
            self.assertEqual(top.child(0).childCount(), 1)

    def test_fix_with_empty_log_finishes(self):
        btn_fix = self.window.findChild(type(self.window.btn_fix), "btn_fix")
        QTest.mouseClick(btn_fix, Qt.LeftButton)

        for _ in range(100):
            if btn_fix.isEnabled():
                break
            QTest.qWait(50)

        self.assertTrue(btn_fix.isEnabled())
        output = self.window.findChild(type(self.window.output_box), "output_box")
        self.assertIn("RECOVERY DONE", output.toPlainText())


if __name__ == "__main__":
    unittest.main()
