"""
Main application window for EduSolver.

PyQt6 GUI with a categories home page, a category list, the staging
page where a new scan is composed, and the solution page.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

from PyQt6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QGroupBox,
    QSpinBox,
    QStackedWidget,
    QToolBar,
    QMessageBox,
    QApplication,
    QFileDialog,
    QButtonGroup,
)
from PyQt6.QtCore import Qt, QThread, QSize, pyqtSignal
from PyQt6.QtGui import QAction, QIcon, QPixmap

from ..models import AppMode, Category, Scan
from ..session import HomeworkSession
from ..solvers.base import MAX_QUESTION_COUNT, MIN_QUESTION_COUNT
from ..utils.config import AppConfig
from ..utils.errors import (
    ApiKeyMissingError,
    EduSolverError,
    format_error_for_dialog,
    format_error_for_user,
)

logger = logging.getLogger(__name__)

PAGE_HOME = 0
PAGE_CATEGORY = 1
PAGE_STAGING = 2
PAGE_SOLUTION = 3

THUMBNAIL_SIZE = 96


class SolveWorker(QThread):
    """Background thread for the AI request."""

    finished = pyqtSignal(object)  # Scan
    error = pyqtSignal(str)

    def __init__(self, session: HomeworkSession, scan: Scan):
        super().__init__()
        self.session = session
        self.scan = scan

    def run(self):
        try:
            self.finished.emit(self.session.run_scan(self.scan))
        except Exception as e:
            logger.exception("Solve worker crashed")
            self.error.emit(str(e))


def format_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d %b %Y %H:%M")


class MainWindow(QMainWindow):
    """
    Main application window for EduSolver.

    Layout:
    - Toolbar: History, Check Camera, Reset Key
    - Home: Student/Teacher toggle, categories, New button
    - Category: scans of one level and subject
    - Staging: selectors, images, texts, submit
    - Solution: rendered answer
    """

    def __init__(self, session: Optional[HomeworkSession] = None):
        super().__init__()

        self.session = session or HomeworkSession(AppConfig.from_env())

        self.setWindowTitle("EduSolver")
        self.setGeometry(100, 100, 960, 720)
        self.setMinimumSize(640, 480)

        # Current state
        self._current_category: Optional[Category] = None
        self._current_scan: Optional[Scan] = None
        self._workers = []

        # Setup UI
        self._init_ui()
        self._init_toolbar()

        self._refresh_home()
        self.statusBar().showMessage("Ready")

    def _init_ui(self):
        """Initialize the page stack."""
        self.pages = QStackedWidget()
        self.setCentralWidget(self.pages)

        self.pages.addWidget(self._create_home_page())
        self.pages.addWidget(self._create_category_page())
        self.pages.addWidget(self._create_staging_page())
        self.pages.addWidget(self._create_solution_page())

    def _create_home_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(10, 10, 10, 10)

        # Mode toggle
        mode_layout = QHBoxLayout()
        self.mode_group = QButtonGroup(self)
        self.student_btn = QPushButton("Student")
        self.teacher_btn = QPushButton("Teacher")
        for mode, button in ((AppMode.STUDENT, self.student_btn), (AppMode.TEACHER, self.teacher_btn)):
            button.setCheckable(True)
            button.clicked.connect(lambda checked, m=mode: self._on_mode_selected(m))
            self.mode_group.addButton(button)
            mode_layout.addWidget(button)
        self.student_btn.setChecked(True)
        mode_layout.addStretch()

        self.new_btn = QPushButton("New Question")
        self.new_btn.setStyleSheet("font-weight: bold; padding: 5px 20px;")
        self.new_btn.clicked.connect(self._on_new_clicked)
        mode_layout.addWidget(self.new_btn)
        layout.addLayout(mode_layout)

        group = QGroupBox("History by Category")
        group_layout = QVBoxLayout(group)
        self.category_list = QListWidget()
        self.category_list.itemClicked.connect(self._on_category_activated)
        group_layout.addWidget(self.category_list)

        self.empty_label = QLabel("No history yet. Start with a new question.")
        self.empty_label.setStyleSheet("color: gray; font-style: italic;")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        group_layout.addWidget(self.empty_label)
        layout.addWidget(group)

        return page

    def _create_category_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        header = QHBoxLayout()
        back_btn = QPushButton("< Back")
        back_btn.clicked.connect(self._go_home)
        header.addWidget(back_btn)
        self.category_title = QLabel()
        self.category_title.setStyleSheet("font-size: 16px; font-weight: bold;")
        header.addWidget(self.category_title)
        header.addStretch()
        layout.addLayout(header)

        self.scan_list = QListWidget()
        self.scan_list.itemClicked.connect(self._on_scan_activated)
        layout.addWidget(self.scan_list)

        return page

    def _create_staging_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        header = QHBoxLayout()
        back_btn = QPushButton("< Back")
        back_btn.clicked.connect(self._go_home)
        header.addWidget(back_btn)
        self.staging_title = QLabel()
        self.staging_title.setStyleSheet("font-size: 16px; font-weight: bold;")
        header.addWidget(self.staging_title)
        header.addStretch()
        layout.addLayout(header)

        from .selectors import ExplanationSelector, SubjectSelector

        settings = QGroupBox("Settings")
        settings_layout = QVBoxLayout(settings)
        self.subject_selector = SubjectSelector()
        self.subject_selector.levelChanged.connect(self.session.set_level)
        self.subject_selector.subjectChanged.connect(self.session.set_subject)
        self.subject_selector.customSubjectChanged.connect(self.session.set_custom_subject)
        settings_layout.addWidget(self.subject_selector)

        self.style_selector = ExplanationSelector()
        self.style_selector.styleChanged.connect(self._on_style_changed)
        settings_layout.addWidget(self.style_selector)

        count_row = QHBoxLayout()
        self.count_label = QLabel("Number of questions:")
        count_row.addWidget(self.count_label)
        self.count_spin = QSpinBox()
        self.count_spin.setRange(MIN_QUESTION_COUNT, MAX_QUESTION_COUNT)
        self.count_spin.setValue(self.session.question_count)
        self.count_spin.valueChanged.connect(self._on_count_changed)
        count_row.addWidget(self.count_spin)
        count_row.addStretch()
        settings_layout.addLayout(count_row)
        layout.addWidget(settings)

        material = QGroupBox("Material")
        material_layout = QVBoxLayout(material)

        self.image_list = QListWidget()
        self.image_list.setViewMode(QListWidget.ViewMode.IconMode)
        self.image_list.setIconSize(QSize(THUMBNAIL_SIZE, THUMBNAIL_SIZE))
        self.image_list.setMaximumHeight(THUMBNAIL_SIZE + 40)
        material_layout.addWidget(self.image_list)

        self.text_list = QListWidget()
        self.text_list.setMaximumHeight(100)
        material_layout.addWidget(self.text_list)

        buttons = QHBoxLayout()
        camera_btn = QPushButton("Camera")
        camera_btn.clicked.connect(self._on_camera_clicked)
        buttons.addWidget(camera_btn)

        upload_btn = QPushButton("Upload Image")
        upload_btn.clicked.connect(self._on_upload_clicked)
        buttons.addWidget(upload_btn)

        text_btn = QPushButton("Type Text")
        text_btn.clicked.connect(self._on_add_text_clicked)
        buttons.addWidget(text_btn)

        remove_btn = QPushButton("Remove Selected")
        remove_btn.clicked.connect(self._on_remove_clicked)
        buttons.addWidget(remove_btn)
        buttons.addStretch()
        material_layout.addLayout(buttons)

        self.material_count = QLabel()
        self.material_count.setStyleSheet("color: gray;")
        material_layout.addWidget(self.material_count)
        layout.addWidget(material, stretch=1)

        self.submit_btn = QPushButton()
        self.submit_btn.setStyleSheet("font-weight: bold; padding: 8px 20px;")
        self.submit_btn.clicked.connect(self._on_submit_clicked)
        layout.addWidget(self.submit_btn)

        return page

    def _create_solution_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        header = QHBoxLayout()
        back_btn = QPushButton("< Back")
        back_btn.clicked.connect(self._on_solution_back)
        header.addWidget(back_btn)
        self.solution_title = QLabel()
        self.solution_title.setStyleSheet("font-size: 16px; font-weight: bold;")
        header.addWidget(self.solution_title)
        header.addStretch()

        copy_btn = QPushButton("Copy Answer")
        copy_btn.clicked.connect(self._on_copy_answer)
        header.addWidget(copy_btn)

        delete_btn = QPushButton("Delete")
        delete_btn.clicked.connect(self._on_delete_current)
        header.addWidget(delete_btn)
        layout.addLayout(header)

        from ..output.mathjax_widget import MathJaxWidget

        self.solution_view = MathJaxWidget(dark_mode=self.session.config.dark_mode)
        layout.addWidget(self.solution_view, stretch=1)

        return page

    def _init_toolbar(self):
        """Initialize the toolbar."""
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        history_action = QAction("History", self)
        history_action.setStatusTip("Browse and export all saved scans")
        history_action.triggered.connect(self._on_history_clicked)
        toolbar.addAction(history_action)

        toolbar.addSeparator()

        camera_action = QAction("Check Camera", self)
        camera_action.setStatusTip("Check that the camera can be opened")
        camera_action.triggered.connect(self._on_check_camera)
        toolbar.addAction(camera_action)

        toolbar.addSeparator()

        key_action = QAction("Reset API Key", self)
        key_action.setStatusTip("Forget the API key for this session")
        key_action.triggered.connect(self._on_reset_key)
        toolbar.addAction(key_action)

    # === Error Handling ===

    def _show_error(self, exc: Exception, context: str = "") -> None:
        """
        Show a rich error dialog with suggestions.
        """
        error_info = format_error_for_dialog(exc, context)

        msg_box = QMessageBox(self)
        msg_box.setWindowTitle(error_info["title"])
        msg_box.setText(error_info["text"])
        msg_box.setIcon(error_info["icon"])

        if error_info["detailed_text"]:
            msg_box.setDetailedText(error_info["detailed_text"])

        msg_box.exec()

        # Update status bar with brief message
        self.statusBar().showMessage(format_error_for_user(exc, context))

    # === API key ===

    def ensure_api_key(self) -> bool:
        """Ask for the key if this session has none. True once a key is set."""
        if self.session.has_api_key:
            return True

        from .api_key_dialog import ApiKeyDialog

        dialog = ApiKeyDialog(self)
        if not dialog.exec():
            self.statusBar().showMessage("An API key is required to submit questions")
            return False

        try:
            self.session.set_api_key(dialog.api_key())
        except EduSolverError as e:
            self._show_error(e, "saving the API key")
            return False
        self.statusBar().showMessage("API key set for this session")
        return True

    def _on_reset_key(self):
        reply = QMessageBox.question(
            self,
            "Reset API Key",
            "Reset the API key for this session?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.session.reset_api_key()
            self._go_home()
            self.ensure_api_key()

    # === Navigation ===

    def _go_home(self):
        self._current_category = None
        self._refresh_home()
        self.pages.setCurrentIndex(PAGE_HOME)

    def _refresh_home(self):
        """Rebuild the category list for the current mode."""
        self.category_list.clear()
        categories = self.session.categories()

        for category in categories:
            item = QListWidgetItem(
                f"{category.level} | {category.subject}    "
                f"({category.count})  last: {format_time(category.last_time)}"
            )
            item.setData(Qt.ItemDataRole.UserRole, category)
            self.category_list.addItem(item)

        self.empty_label.setVisible(not categories)
        self.category_list.setVisible(bool(categories))

    def _show_category(self, category: Category):
        self._current_category = category
        self.category_title.setText(f"{category.level} | {category.subject}")

        self.scan_list.clear()
        for scan in self.session.scans_in_category(category):
            status = " (processing)" if scan.loading else " (failed)" if scan.error else ""
            item = QListWidgetItem(f"{format_time(scan.timestamp)}  {scan.summary()}{status}")
            item.setData(Qt.ItemDataRole.UserRole, scan.id)
            self.scan_list.addItem(item)

        self.pages.setCurrentIndex(PAGE_CATEGORY)

    def _show_scan(self, scan: Scan):
        self._current_scan = scan
        self.solution_title.setText(
            f"{scan.education_level.value} | {scan.display_subject} | "
            f"{scan.explanation_style.label}"
        )
        self.solution_view.display_scan(scan)
        self.pages.setCurrentIndex(PAGE_SOLUTION)

    def _on_mode_selected(self, mode: AppMode):
        self.session.set_mode(mode)
        self._refresh_home()
        self.statusBar().showMessage(f"{mode.value.title()} mode")

    def _on_category_activated(self, item: QListWidgetItem):
        self._show_category(item.data(Qt.ItemDataRole.UserRole))

    def _on_scan_activated(self, item: QListWidgetItem):
        self._open_scan(item.data(Qt.ItemDataRole.UserRole))

    def _open_scan(self, scan_id: str):
        try:
            scan = self.session.get_scan(scan_id)
        except EduSolverError as e:
            self._show_error(e, "opening a saved scan")
            return
        self._show_scan(scan)

    def _on_solution_back(self):
        if self._current_category is not None:
            self._show_category(self._current_category)
        else:
            self._go_home()

    # === Staging ===

    def _on_new_clicked(self):
        """Start composing a new scan."""
        self.session.start_new()
        teacher = self.session.mode == AppMode.TEACHER

        self.staging_title.setText("New Exam Questions" if teacher else "New Question")
        self.subject_selector.set_preferences(self.session.preferences)
        self.style_selector.set_style(self.session.explanation_style)
        self.style_selector.set_label("Answer key:" if teacher else "Explanation:")
        self.count_label.setVisible(teacher)
        self.count_spin.setVisible(teacher)
        self.submit_btn.setText("Create Questions" if teacher else "Solve")

        self._refresh_staging()
        self.pages.setCurrentIndex(PAGE_STAGING)

    def _refresh_staging(self):
        staging = self.session.staging

        self.image_list.clear()
        for i, data in enumerate(staging.images, 1):
            pixmap = QPixmap()
            pixmap.loadFromData(data, "JPEG")
            self.image_list.addItem(QListWidgetItem(QIcon(pixmap), f"#{i}"))

        self.text_list.clear()
        for text in staging.texts:
            self.text_list.addItem(" ".join(text.split())[:120])

        self.material_count.setText(
            f"{len(staging.images)}/{staging.max_images} images, {len(staging.texts)} texts"
        )

    def _on_style_changed(self, style):
        self.session.explanation_style = style

    def _on_count_changed(self, value: int):
        self.session.question_count = value

    def _check_image_room(self) -> bool:
        if self.session.staging.can_add_image:
            return True

        from ..utils.errors import TooManyImagesError

        self._show_error(TooManyImagesError(self.session.staging.max_images))
        return False

    def _on_camera_clicked(self):
        if not self._check_image_room():
            return

        from .camera_dialog import CameraDialog

        dialog = CameraDialog(self.session.config.camera_index, parent=self)
        if not dialog.start():
            return
        if dialog.exec() and dialog.captured_jpeg:
            from ..input.images import decode_jpeg

            try:
                self._crop_and_stage(decode_jpeg(dialog.captured_jpeg))
            except EduSolverError as e:
                self._show_error(e, "reading the camera image")

    def _on_upload_clicked(self):
        if not self._check_image_room():
            return

        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Upload Image",
            "",
            "Images (*.png *.jpg *.jpeg *.webp *.bmp);;All Files (*)",
        )
        if not file_path:
            return

        from ..input.images import load_image_file

        try:
            image = load_image_file(file_path)
        except EduSolverError as e:
            self._show_error(e, "loading the image")
            return
        self._crop_and_stage(image)

    def _crop_and_stage(self, image):
        from .crop_dialog import CropDialog

        dialog = CropDialog(image, self)
        if not dialog.exec() or dialog.cropped_jpeg is None:
            return

        try:
            self.session.staging.add_image(dialog.cropped_jpeg)
        except EduSolverError as e:
            self._show_error(e)
            return
        self._refresh_staging()
        self.statusBar().showMessage("Image added")

    def _on_add_text_clicked(self):
        from .text_input_dialog import TextInputDialog

        dialog = TextInputDialog(self)
        if not dialog.exec():
            return

        try:
            self.session.staging.add_text(dialog.text())
        except EduSolverError as e:
            self._show_error(e)
            return
        self._refresh_staging()

    def _on_remove_clicked(self):
        staging = self.session.staging
        image_rows = sorted((i.row() for i in self.image_list.selectedIndexes()), reverse=True)
        text_rows = sorted((i.row() for i in self.text_list.selectedIndexes()), reverse=True)
        for row in image_rows:
            staging.remove_image(row)
        for row in text_rows:
            staging.remove_text(row)
        self._refresh_staging()

    # === Submission ===

    def _on_submit_clicked(self):
        """Create the scan, show it as loading and solve in the background."""
        try:
            scan = self.session.create_scan()
        except ApiKeyMissingError:
            if not self.ensure_api_key():
                return
            self._on_submit_clicked()
            return
        except EduSolverError as e:
            self._show_error(e, "submitting")
            return

        self._current_category = next(
            (
                c
                for c in self.session.categories()
                if c.level == scan.education_level.value and c.subject == scan.display_subject
            ),
            None,
        )
        self._show_scan(scan)
        self.statusBar().showMessage("Solving...")

        worker = SolveWorker(self.session, scan)
        worker.finished.connect(self._on_solve_finished)
        worker.error.connect(self._on_solve_error)
        worker.finished.connect(lambda _: self._release_worker(worker))
        worker.error.connect(lambda _: self._release_worker(worker))
        self._workers.append(worker)
        worker.start()

    def _release_worker(self, worker: SolveWorker):
        # run() returns right after emitting; the thread must not be collected before that
        worker.wait()
        if worker in self._workers:
            self._workers.remove(worker)

    def _on_solve_finished(self, scan: Scan):
        """Handle solve completion."""
        if self._current_scan is not None and self._current_scan.id == scan.id:
            self._show_scan(scan)
        if self.pages.currentIndex() == PAGE_HOME:
            self._refresh_home()

        if scan.error:
            self.statusBar().showMessage(scan.error)
        else:
            self.statusBar().showMessage("Done")

    def _on_solve_error(self, error: str):
        self._show_error(EduSolverError(error), "solving")

    # === Other actions ===

    def _on_copy_answer(self):
        if self._current_scan and self._current_scan.solution:
            QApplication.clipboard().setText(self._current_scan.solution)
            self.statusBar().showMessage("Answer copied to clipboard")

    def _on_delete_current(self):
        scan = self._current_scan
        if scan is None:
            return

        reply = QMessageBox.question(
            self,
            "Delete",
            "Delete this item?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return

        self.session.delete_scan(scan.id)
        self._current_scan = None
        self.solution_view.clear()
        category = self._current_category
        if category is not None and self.session.scans_in_category(category):
            self._show_category(category)
        else:
            self._go_home()

    def _on_history_clicked(self):
        """Handle history button click."""
        from .history_dialog import HistoryDialog

        dialog = HistoryDialog(self.session, parent=self)
        dialog.open_requested.connect(self._open_scan)
        dialog.exec()
        if self.pages.currentIndex() == PAGE_HOME:
            self._refresh_home()

    def _on_check_camera(self):
        from ..input.camera import check_camera_access

        if check_camera_access(self.session.config.camera_index):
            QMessageBox.information(self, "Camera", "Camera access is working.")
        else:
            QMessageBox.warning(
                self,
                "Camera",
                "Camera access was denied. Allow camera access in your system settings.",
            )


def run_app(config: Optional[AppConfig] = None):
    """Run the EduSolver application."""
    app = QApplication(sys.argv)
    app.setApplicationName("EduSolver")

    window = MainWindow(HomeworkSession(config or AppConfig.from_env()))
    window.show()
    window.ensure_api_key()

    sys.exit(app.exec())
