import logging
import os
from pathlib import Path

from PySide6.QtCore import Qt, QObject, QThread, QTimer, Signal
from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QFileDialog,
    QComboBox,
    QTreeWidget,
    QTreeWidgetItem,
    QPlainTextEdit,
    QSplitter,
    QMenu,
    QMessageBox,
    QProgressBar,
)

from contentbuild.config import APP_NAME, APP_VERSION, DEFAULT_PROFILE, IGNORE_DIRS, OUTPUT_POLL_MS
from contentbuild.core.actions import context_action_for, dispatch_context_action
from contentbuild.core.output import OutputLog, OutputLogHandler
from contentbuild.core.profiles import default_profiles, ensure_default_profiles_on_disk, resolve_profile
from contentbuild.core.project import ContentProject
from contentbuild.core.recovery import run_recovery
from contentbuild.models import ContentItem

_LOG = logging.getLogger(__name__)

UID_ROLE = Qt.UserRole


class RecoveryWorker(QObject):
    finished = Signal(object)  # RecoveryRun

    def __init__(self, log_text, profile, quantize=True):
        super().__init__()
        self.log_text = log_text
        self.profile = profile
        self.quantize = quantize
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def run(self):
        def _is_cancelled():
            return self._cancelled

        run = run_recovery(
            self.log_text,
            self.profile,
            quantize=self.quantize,
            is_cancelled=_is_cancelled,
        )
        self.finished.emit(run)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} (v{APP_VERSION})")
        self.setMinimumSize(1020, 680)

        # State
        self.project = ContentProject()
        self.tree = self.project.tree
        self.tree.add_listener(self)
        self._widget_items = {}  # node uid -> QTreeWidgetItem
        self._fix_thread = None
        self._fix_worker = None

        # --- Root widget
        root = QWidget()
        self.setCentralWidget(root)

        main_layout = QVBoxLayout(root)
        main_layout.setContentsMargins(12, 12, 12, 12)
        main_layout.setSpacing(10)

        # -------------------------
        # Top: project + recovery buttons
        # -------------------------
        top_row = QHBoxLayout()

        self.btn_open = QPushButton("Open Folder...")
        self.btn_open.clicked.connect(self.pick_content_folder)

        self.btn_close = QPushButton("Close")
        self.btn_close.clicked.connect(self.on_close_project_clicked)

        self.profile_combo = QComboBox()
        self.profile_combo.addItems(sorted(default_profiles().keys()))
        self.profile_combo.setCurrentText(DEFAULT_PROFILE)

        self.btn_load_log = QPushButton("Load Build Log...")
        self.btn_load_log.clicked.connect(self.pick_build_log)

        self.btn_fix = QPushButton("Fix Failed Textures")
        self.btn_fix.clicked.connect(self.on_fix_clicked)

        self.btn_clear = QPushButton("Clear Output")
        self.btn_clear.clicked.connect(self.on_clear_output_clicked)

        top_row.addWidget(self.btn_open)
        top_row.addWidget(self.btn_close)
        top_row.addStretch(1)
        top_row.addWidget(QLabel("Profile:"))
        top_row.addWidget(self.profile_combo)
        top_row.addWidget(self.btn_load_log)
        top_row.addWidget(self.btn_fix)
        top_row.addWidget(self.btn_clear)

        main_layout.addLayout(top_row)

        # -------------------------
        # Progress + Cancel
        # -------------------------
        prog_row = QHBoxLayout()

        self.progress = QProgressBar()
        self.progress.setRange(0, 1)
        self.progress.setValue(0)

        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.setEnabled(False)
        self.btn_cancel.clicked.connect(self.on_cancel_clicked)

        prog_row.addWidget(QLabel("Recovery:"))
        prog_row.addWidget(self.progress, 1)
        prog_row.addWidget(self.btn_cancel)

        main_layout.addLayout(prog_row)

        # -------------------------
        # Bottom: Tree | Properties + Output
        # -------------------------
        splitter = QSplitter(Qt.Horizontal)

        tree_panel = QWidget()
        tree_layout = QVBoxLayout(tree_panel)
        tree_layout.setContentsMargins(0, 0, 0, 0)
        tree_layout.addWidget(QLabel("Project"))

        self.project_tree = QTreeWidget()
        self.project_tree.setHeaderHidden(True)
        self.project_tree.setContextMenuPolicy(Qt.CustomContextMenu)
        self.project_tree.customContextMenuRequested.connect(self.on_tree_context_menu)
        self.project_tree.itemSelectionChanged.connect(self.on_tree_selection_changed)
        self.project_tree.itemExpanded.connect(lambda w: self._set_expanded(w, True))
        self.project_tree.itemCollapsed.connect(lambda w: self._set_expanded(w, False))
        tree_layout.addWidget(self.project_tree, 1)

        right_panel = QWidget()
        right_layout = QVBoxLayout(right_panel)
        right_layout.setContentsMargins(0, 0, 0, 0)

        right_layout.addWidget(QLabel("Properties"))
        self.properties_box = QPlainTextEdit()
        self.properties_box.setReadOnly(True)
        self.properties_box.setMaximumHeight(140)
        right_layout.addWidget(self.properties_box)

        right_layout.addWidget(QLabel("Output"))
        self.output_box = QPlainTextEdit()
        self.output_box.setReadOnly(True)
        self.output_box.setPlaceholderText("Build output will appear here...")
        right_layout.addWidget(self.output_box, 1)

        splitter.addWidget(tree_panel)
        splitter.addWidget(right_panel)
        splitter.setSizes([360, 660])

        main_layout.addWidget(splitter, 1)

        # Output is owned by this (GUI) thread; worker threads queue into it
        self.output = OutputLog(sink=self.output_box.appendPlainText)
        self._log_handler = OutputLogHandler(self.output)
        pkg_logger = logging.getLogger("contentbuild")
        if pkg_logger.level == logging.NOTSET:
            pkg_logger.setLevel(logging.INFO)
        pkg_logger.addHandler(self._log_handler)

        self._output_timer = QTimer(self)
        self._output_timer.timeout.connect(self.output.drain)
        self._output_timer.start(OUTPUT_POLL_MS)

        # Stable IDs (used by UI tests)
        self.btn_open.setObjectName("btn_open")
        self.btn_fix.setObjectName("btn_fix")
        self.btn_cancel.setObjectName("btn_cancel")
        self.project_tree.setObjectName("project_tree")
        self.properties_box.setObjectName("properties_box")
        self.output_box.setObjectName("output_box")
        self.progress.setObjectName("progress")

        repo_root = str(Path(__file__).resolve().parents[2])  # .../contentbuild/ui/main_window.py -> repo root
        self._repo_root = repo_root
        try:
            ensure_default_profiles_on_disk(self._repo_root)
        except OSError as e:
            _LOG.warning("Could not write default profiles: %s", e)

        self.append_output("Ready. Open a content folder, load a build log, then Fix Failed Textures.")

    def closeEvent(self, event):
        logging.getLogger("contentbuild").removeHandler(self._log_handler)
        self._output_timer.stop()
        super().closeEvent(event)

    # -------------------------
    # Output
    # -------------------------
    def append_output(self, text):
        self.output.append(text)

    def on_clear_output_clicked(self):
        self.output.clear()
        self.output_box.clear()

    def pick_build_log(self):
        path, _ = QFileDialog.getOpenFileName(self, "Select Build Log", "", "Log Files (*.log *.txt);;All Files (*.*)")
        if path:
            self.load_build_log(path)

    def load_build_log(self, path):
        try:
            text = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            QMessageBox.warning(self, "Build Log", f"Could not read build log:\n{e}")
            return
        for line in text.splitlines():
            self.append_output(line)

    # -------------------------
    # Project tree (TreeIndex listener)
    # -------------------------
    def on_reset(self, root_node):
        self._widget_items.clear()
        self.project_tree.clear()
        if root_node is not None:
            w = QTreeWidgetItem([root_node.label])
            w.setData(0, UID_ROLE, root_node.uid)
            self.project_tree.addTopLevelItem(w)
            self._widget_items[root_node.uid] = w
        self.show_properties(root_node.item if root_node else None)

    def on_node_added(self, node):
        parent_w = self._widget_items.get(node.parent.uid)
        if parent_w is None:
            return
        w = QTreeWidgetItem([node.label])
        w.setData(0, UID_ROLE, node.uid)
        parent_w.addChild(w)
        self._widget_items[node.uid] = w
        if self.tree.root is not None and self.tree.root is node.parent:
            self._widget_items[self.tree.root.uid].setExpanded(True)

    def on_node_removed(self, node):
        w = self._widget_items.get(node.uid)
        for n in node.iter_subtree():
            self._widget_items.pop(n.uid, None)
        if w is not None and w.parent() is not None:
            w.parent().removeChild(w)

    def on_selected(self, node):
        w = self._widget_items.get(node.uid)
        if w is not None and self.project_tree.currentItem() is not w:
            self.project_tree.setCurrentItem(w)
        self.show_properties(node.item)

    def on_refreshed(self, node):
        if self.tree.selected is node:
            self.show_properties(node.item)

    def _node_for(self, w):
        if w is None:
            return None
        return self.tree.get(w.data(0, UID_ROLE))

    def _set_expanded(self, w, expanded):
        node = self._node_for(w)
        if node is not None:
            node.expanded = expanded

    def on_tree_selection_changed(self):
        node = self._node_for(self.project_tree.currentItem())
        if node is not None and node is not self.tree.selected:
            self.project.select(node.item)

    def show_properties(self, item):
        if item is None:
            self.properties_box.setPlainText("")
            return
        lines = [f"Name: {item.name}", f"Location: {item.location}"]
        if isinstance(item, ContentItem):
            lines.append(f"Importer: {item.importer or '(none)'}")
            lines.append(f"Processor: {item.processor or '(none)'}")
            for key, value in sorted(item.parameters.items()):
                lines.append(f"  {key} = {value}")
        self.properties_box.setPlainText("\n".join(lines))

    def on_tree_context_menu(self, pos):
        node = self._node_for(self.project_tree.itemAt(pos))
        if node is None:
            return
        self.project.select(node.item)

        action = context_action_for(node.item)
        menu = QMenu(self)
        menu.addAction(action)
        chosen = menu.exec(self.project_tree.viewport().mapToGlobal(pos))
        if chosen is not None:
            dispatch_context_action(chosen.text(), node.item, self)

    # Context-menu controller: the dialogs live here, the changes in ContentProject
    def include(self, location):
        if not self.project.is_open:
            return None
        base = Path(self.project.info.location)
        start_dir = base / location if location else base
        path, _ = QFileDialog.getOpenFileName(self, "Add Content", str(start_dir), "All Files (*.*)")
        if not path:
            return None
        try:
            rel = Path(path).resolve().relative_to(base)
        except ValueError:
            QMessageBox.warning(self, "Add Content", "The file must be inside the content folder.")
            return None
        return self.project.include(str(rel).replace("\\", "/"))

    def exclude(self, item):
        return self.project.exclude(item)

    # -------------------------
    # Open / close
    # -------------------------
    def pick_content_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Content Folder")
        if folder:
            self.open_content_folder(os.path.normpath(folder))

    def open_content_folder(self, folder):
        try:
            self.project.open_folder(folder, ignore_dirs=IGNORE_DIRS)
        except ValueError as e:
            QMessageBox.warning(self, "Open Folder", str(e))
            return False
        return True

    def on_close_project_clicked(self):
        self.project.close_project()

    # -------------------------
    # Fix failed textures
    # -------------------------
    def _current_profile(self):
        name = self.profile_combo.currentText() or DEFAULT_PROFILE
        try:
            return resolve_profile(self._repo_root, name)
        except (OSError, ValueError, KeyError) as e:
            _LOG.warning("Profile '%s' unusable (%s); using built-in defaults", name, e)
            return default_profiles()[DEFAULT_PROFILE]

    def on_fix_clicked(self):
        if self._fix_thread is not None:
            return

        self.output.drain()
        log_text = self.output.text()
        profile = self._current_profile()

        self.append_output("---- RECOVERY START ----")

        self.progress.setRange(0, 0)  # busy
        self.btn_cancel.setEnabled(True)
        self.btn_fix.setEnabled(False)
        self.btn_clear.setEnabled(False)

        self._fix_thread = QThread()
        self._fix_worker = RecoveryWorker(log_text, profile)
        self._fix_worker.moveToThread(self._fix_thread)

        self._fix_thread.started.connect(self._fix_worker.run)
        self._fix_worker.finished.connect(self._on_fix_finished)

        self._fix_worker.finished.connect(self._fix_thread.quit)
        self._fix_worker.finished.connect(self._fix_worker.deleteLater)
        self._fix_thread.finished.connect(self._fix_thread.deleteLater)

        self._fix_thread.start()

    def _on_fix_finished(self, run):
        self.output.drain()

        self._fix_thread = None
        self._fix_worker = None

        self.progress.setRange(0, 1)
        self.progress.setValue(1)
        self.btn_cancel.setEnabled(False)
        self.btn_fix.setEnabled(True)
        self.btn_clear.setEnabled(True)

        for issue in run.issues:
            if issue.level.upper() == "WARNING":
                suffix = f" ({issue.path})" if issue.path else ""
                self.append_output(f"WARNING: {issue.code}: {issue.message}{suffix}")

        s = run.summary
        self.append_output(f"Repaired: {s.repaired}, failed: {s.failed}, already clean: {s.already_clean}")
        if run.quantize_summary:
            q = run.quantize_summary
            self.append_output(f"Quantized: {q.succeeded}/{q.total}")
        self.append_output("---- RECOVERY DONE ----")

    def on_cancel_clicked(self):
        if self._fix_worker:
            self._fix_worker.cancel()
            self.append_output("Cancel requested...")
