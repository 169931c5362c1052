"""主窗口模块.

布局结构:
    ┌──────────────────────────────┬──────────────────────┐
    │                              │   画面调整            │
    │          预览画布             │   文字 / 贴纸         │
    │                              │   AI 分析与风格       │
    │                              │   历史记录            │
    ├──────────────────────────────┴──────────────────────┤
    │                       状态栏                          │
    └─────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QCloseEvent, QIcon, QImage, QKeySequence, QPixmap
from PyQt6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSlider,
    QSplitter,
    QStatusBar,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from poster_studio.core.config_manager import get_config
from poster_studio.models.adjustments import TEXT_STYLE_LABELS, AspectRatio, ElementType, TextStyle
from poster_studio.models.history import HistoryItem
from poster_studio.models.style_option import CUSTOM_STYLE, STYLE_OPTIONS
from poster_studio.services.kv_store import KeyValueStore
from poster_studio.services.poster_service import PosterService
from poster_studio.ui.async_worker import AsyncTaskThread
from poster_studio.ui.poster_canvas import PosterCanvas
from poster_studio.utils.constants import (
    APP_NAME,
    APP_VERSION,
    MAX_BLUR,
    MAX_PERCENT,
    MIN_BLUR,
    MIN_PERCENT,
    NEUTRAL_PERCENT,
    STICKER_PRESETS,
)
from poster_studio.utils.error_handler import get_user_friendly_message
from poster_studio.utils.exceptions import AppException, ConfigError
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

ASPECT_RATIO_LABELS = {
    AspectRatio.ORIGINAL: "原始比例",
    AspectRatio.SQUARE: "1:1",
    AspectRatio.WIDESCREEN: "16:9",
    AspectRatio.PORTRAIT_WIDE: "9:16",
    AspectRatio.STANDARD: "4:3",
    AspectRatio.PORTRAIT: "3:4",
}

# 用户偏好：上次导出目录
LAST_EXPORT_DIR_KEY = "last_export_dir"

TUTORIAL_TEXT = (
    "1. 上传一张海报或图片\n"
    "2. 调整画面、添加文字与贴纸，拖拽调整位置\n"
    "3. 点击「保存并应用」，AI 会识别图中的文字与主体\n"
    "4. 填写文字替换和主体改造，选择风格后开始转换\n"
    "5. 导出最终成品"
)


class MainWindow(QMainWindow):
    """主窗口.

    Attributes:
        service: 海报工作流
        canvas: 预览画布
    """

    def __init__(
        self,
        service: PosterService,
        store: Optional[KeyValueStore] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.service = service
        self._store = store
        self._task: Optional[AsyncTaskThread] = None
        self._selected: Optional[tuple[str, ElementType]] = None

        self.setWindowTitle(f"{APP_NAME} v{APP_VERSION}")
        self.resize(1280, 820)

        self.canvas = PosterCanvas(service.session, service.compositor)
        self.canvas.element_selected.connect(self._on_element_selected)
        self.canvas.element_moved.connect(self._refresh_controls)

        self._setup_menubar()
        self._setup_central_widget()
        self._setup_statusbar()
        self._refresh_history()
        self._refresh_controls()

    # ========================
    # 初始化方法
    # ========================

    def _setup_menubar(self) -> None:
        menubar = self.menuBar()
        file_menu = menubar.addMenu("文件(&F)")

        action_open = QAction("打开图片(&O)...", self)
        action_open.setShortcut(QKeySequence.StandardKey.Open)
        action_open.triggered.connect(self._on_open_image)
        file_menu.addAction(action_open)

        self._action_export = QAction("导出成品(&E)...", self)
        self._action_export.setShortcut(QKeySequence("Ctrl+Shift+E"))
        self._action_export.triggered.connect(self._on_download)
        file_menu.addAction(self._action_export)

        edit_menu = menubar.addMenu("编辑(&E)")
        self._action_undo = QAction("撤销(&U)", self)
        self._action_undo.setShortcut(QKeySequence.StandardKey.Undo)
        self._action_undo.triggered.connect(self._on_undo)
        edit_menu.addAction(self._action_undo)

        action_reset = QAction("重置(&R)", self)
        action_reset.triggered.connect(self._on_reset)
        edit_menu.addAction(action_reset)

    def _setup_central_widget(self) -> None:
        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.canvas)

        panel = QWidget()
        layout = QVBoxLayout(panel)
        layout.addWidget(self._build_adjust_group())
        layout.addWidget(self._build_text_group())
        layout.addWidget(self._build_sticker_group())
        layout.addWidget(self._build_ai_group())
        layout.addWidget(self._build_history_group())
        layout.addStretch()

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(panel)
        scroll.setMinimumWidth(340)
        splitter.addWidget(scroll)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)

        self.setCentralWidget(splitter)

    def _build_adjust_group(self) -> QGroupBox:
        group = QGroupBox("画面调整")
        form = QFormLayout(group)

        self._aspect_combo = QComboBox()
        for ratio, label in ASPECT_RATIO_LABELS.items():
            self._aspect_combo.addItem(label, ratio)
        self._aspect_combo.currentIndexChanged.connect(self._on_aspect_changed)
        form.addRow("裁剪比例", self._aspect_combo)

        self._brightness_slider = self._make_slider(MIN_PERCENT, MAX_PERCENT, NEUTRAL_PERCENT)
        self._brightness_slider.valueChanged.connect(
            lambda v: self._on_slider_value(self.service.session.set_brightness, v)
        )
        form.addRow("亮度", self._brightness_slider)

        self._contrast_slider = self._make_slider(MIN_PERCENT, MAX_PERCENT, NEUTRAL_PERCENT)
        self._contrast_slider.valueChanged.connect(
            lambda v: self._on_slider_value(self.service.session.set_contrast, v)
        )
        form.addRow("对比度", self._contrast_slider)

        self._blur_slider = self._make_slider(MIN_BLUR, MAX_BLUR, MIN_BLUR)
        self._blur_slider.valueChanged.connect(
            lambda v: self._on_slider_value(self.service.session.set_blur, v)
        )
        form.addRow("景深模糊", self._blur_slider)

        buttons = QHBoxLayout()
        rotate_button = QPushButton("🔄 旋转画面")
        rotate_button.clicked.connect(self._on_rotate)
        buttons.addWidget(rotate_button)
        self._undo_button = QPushButton("↩ 撤销")
        self._undo_button.clicked.connect(self._on_undo)
        buttons.addWidget(self._undo_button)
        form.addRow(buttons)
        return group

    def _build_text_group(self) -> QGroupBox:
        group = QGroupBox("文字")
        layout = QVBoxLayout(group)

        add_button = QPushButton("+ 添加文本")
        add_button.clicked.connect(self._on_add_text)
        layout.addWidget(add_button)

        self._text_edit = QLineEdit()
        self._text_edit.setPlaceholderText("选中文字后在此修改内容")
        self._text_edit.editingFinished.connect(self._on_text_content_changed)
        layout.addWidget(self._text_edit)

        self._text_style_combo = QComboBox()
        for style in TextStyle:
            self._text_style_combo.addItem(TEXT_STYLE_LABELS[style], style)
        self._text_style_combo.activated.connect(self._on_text_style_changed)
        layout.addWidget(self._text_style_combo)

        row = QHBoxLayout()
        for label, handler in (
            ("置顶", self._on_bring_to_front),
            ("置底", self._on_send_to_back),
            ("删除", self._on_remove_selected),
        ):
            button = QPushButton(label)
            button.clicked.connect(handler)
            row.addWidget(button)
        layout.addLayout(row)
        return group

    def _build_sticker_group(self) -> QGroupBox:
        group = QGroupBox("贴纸")
        layout = QHBoxLayout(group)
        for emoji in STICKER_PRESETS:
            button = QPushButton(emoji)
            button.setFixedWidth(36)
            button.clicked.connect(lambda _checked=False, e=emoji: self._on_add_sticker(e))
            layout.addWidget(button)
        return group

    def _build_ai_group(self) -> QGroupBox:
        group = QGroupBox("AI 风格迁移")
        layout = QVBoxLayout(group)

        self._apply_button = QPushButton("保存并应用到 AI")
        self._apply_button.clicked.connect(self._on_apply_edits)
        layout.addWidget(self._apply_button)

        layout.addWidget(QLabel("识别到的文字（可修改替换内容）"))
        self._replacement_table = QTableWidget(0, 2)
        self._replacement_table.setHorizontalHeaderLabels(["原文", "替换为"])
        self._replacement_table.itemChanged.connect(self._on_replacement_edited)
        layout.addWidget(self._replacement_table)

        layout.addWidget(QLabel("主体改造"))
        self._entity_table = QTableWidget(0, 2)
        self._entity_table.setHorizontalHeaderLabels(["主体", "改造指令"])
        self._entity_table.itemChanged.connect(self._on_entity_edited)
        layout.addWidget(self._entity_table)

        self._style_combo = QComboBox()
        for option in [*STYLE_OPTIONS, CUSTOM_STYLE]:
            self._style_combo.addItem(f"{option.icon} {option.label}", option)
        layout.addWidget(self._style_combo)

        self._prompt_edit = QLineEdit()
        self._prompt_edit.setPlaceholderText("自定义风格描述（选择「自定义」时使用）")
        layout.addWidget(self._prompt_edit)

        self._transform_button = QPushButton("开始 AI 转换")
        self._transform_button.clicked.connect(self._on_transform)
        layout.addWidget(self._transform_button)

        self._result_label = QLabel()
        self._result_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._result_label.setMinimumHeight(160)
        layout.addWidget(self._result_label)

        self._download_button = QPushButton("导出最终成品 📥")
        self._download_button.clicked.connect(self._on_download)
        layout.addWidget(self._download_button)
        return group

    def _build_history_group(self) -> QGroupBox:
        group = QGroupBox("最近作品")
        layout = QVBoxLayout(group)
        self._history_list = QListWidget()
        self._history_list.itemDoubleClicked.connect(self._on_history_activated)
        layout.addWidget(self._history_list)
        return group

    def _setup_statusbar(self) -> None:
        self._statusbar = QStatusBar()
        self.setStatusBar(self._statusbar)
        self._status_label = QLabel("就绪")
        self._statusbar.addWidget(self._status_label, 1)

    def _make_slider(self, minimum: int, maximum: int, value: int) -> QSlider:
        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setRange(minimum, maximum)
        slider.setValue(value)
        slider.sliderPressed.connect(self.service.session.begin_slider_interaction)
        return slider

    # ========================
    # 公共方法
    # ========================

    def show_status_message(self, message: str) -> None:
        """在状态栏显示消息."""
        self._status_label.setText(message)

    def show_tutorial_if_needed(self) -> None:
        """首次启动时显示新手引导."""
        if self._store is None or self._store.is_tutorial_shown():
            return
        QMessageBox.information(self, "使用指南", TUTORIAL_TEXT)
        self._store.mark_tutorial_shown()

    def handle_exception(self, error: Exception) -> None:
        """向用户展示错误."""
        message = get_user_friendly_message(error)
        if not isinstance(error, AppException):
            logger.exception(f"未预期的错误: {error}")
        self.show_status_message(message)
        QMessageBox.warning(self, "提示", message)

    # ========================
    # 编辑操作
    # ========================

    def _on_open_image(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "选择图片", "", "图片 (*.png *.jpg *.jpeg *.webp *.bmp)"
        )
        if not path:
            return
        try:
            self.service.load_image(Path(path))
        except AppException as e:
            self.handle_exception(e)
            return
        self._sync_sliders()
        self._refresh_controls()
        self._run_analysis()

    def _on_reset(self) -> None:
        self.service.reset()
        self._sync_sliders()
        self._refresh_controls()

    def _on_undo(self) -> None:
        if self.service.session.undo():
            self._sync_sliders()
            self._refresh_controls()

    def _on_rotate(self) -> None:
        self.service.session.rotate()
        self._refresh_controls()

    def _on_aspect_changed(self, index: int) -> None:
        ratio = self._aspect_combo.itemData(index)
        if ratio is None or ratio == self.service.session.adjustments.aspect_ratio:
            return
        self.service.session.set_aspect_ratio(ratio)
        self._refresh_controls()

    def _on_slider_value(self, setter: Callable[[float], None], value: int) -> None:
        setter(value)
        self.canvas.refresh_preview()

    def _on_add_text(self) -> None:
        text = self.service.session.add_text()
        self._on_element_selected(text.id, ElementType.TEXT)
        self._refresh_controls()

    def _on_add_sticker(self, emoji: str) -> None:
        self.service.session.add_sticker(emoji)
        self._refresh_controls()

    def _on_element_selected(self, element_id: str, element_type: ElementType) -> None:
        self._selected = (element_id, element_type)
        if element_type == ElementType.TEXT:
            text = self.service.session.adjustments.get_text(element_id)
            if text is not None:
                self._text_edit.setText(text.content)
                self._text_style_combo.setCurrentIndex(list(TextStyle).index(text.style))

    def _selected_element(self) -> Optional[tuple[str, ElementType]]:
        return self._selected

    def _on_text_content_changed(self) -> None:
        selected = self._selected_element()
        if selected is None or selected[1] != ElementType.TEXT:
            return
        text = self.service.session.adjustments.get_text(selected[0])
        if text is None or text.content == self._text_edit.text():
            return
        self.service.session.update_text(selected[0], content=self._text_edit.text())
        self.canvas.update()

    def _on_text_style_changed(self, index: int) -> None:
        selected = self._selected_element()
        if selected is None or selected[1] != ElementType.TEXT:
            return
        self.service.session.update_text(
            selected[0], style=self._text_style_combo.itemData(index)
        )
        self.canvas.update()

    def _on_bring_to_front(self) -> None:
        self._reorder(self.service.session.bring_to_front)

    def _on_send_to_back(self) -> None:
        self._reorder(self.service.session.send_to_back)

    def _reorder(self, action: Callable[[str, ElementType], None]) -> None:
        selected = self._selected_element()
        if selected is None:
            return
        try:
            action(*selected)
        except AppException as e:
            self.handle_exception(e)
        self.canvas.update()

    def _on_remove_selected(self) -> None:
        selected = self._selected_element()
        if selected is None:
            return
        element_id, element_type = selected
        try:
            if element_type == ElementType.TEXT:
                self.service.session.remove_text(element_id)
            else:
                self.service.session.remove_sticker(element_id)
        except AppException as e:
            self.handle_exception(e)
        self._selected = None
        self.canvas.update()

    # ========================
    # AI 操作
    # ========================

    def _on_apply_edits(self) -> None:
        try:
            processed = self.service.apply_edits()
        except AppException as e:
            self.handle_exception(e)
            return
        self._show_result(None)
        self.show_status_message(f"已应用编辑 ({len(processed)} bytes)")
        self._run_analysis()

    def _run_analysis(self) -> None:
        self.show_status_message("AI 正在分析图片...")
        self._start_task(self.service.analyze, self._on_analysis_done, "图片分析")

    def _on_analysis_done(self, _result: Any) -> None:
        self._fill_analysis_tables()
        self.show_status_message("分析完成")

    def _on_transform(self) -> None:
        style = self._style_combo.currentData()
        prompt = self._prompt_edit.text()
        self._transform_button.setEnabled(False)
        self.show_status_message("AI 正在转换风格...")
        self._start_task(
            lambda: self.service.transform(style, prompt),
            self._on_transform_done,
            "风格转换",
        )

    def _on_transform_done(self, result: bytes) -> None:
        self._transform_button.setEnabled(True)
        self._show_result(result)
        self._refresh_history()
        self.show_status_message("转换完成")

    def _on_download(self) -> None:
        config = get_config()
        directory = QFileDialog.getExistingDirectory(
            self, "选择保存目录", config.get_user_config(LAST_EXPORT_DIR_KEY, "")
        )
        if not directory:
            return
        try:
            path = self.service.download(Path(directory))
        except AppException as e:
            self.handle_exception(e)
            return
        try:
            config.set_user_config(LAST_EXPORT_DIR_KEY, directory)
        except ConfigError as e:
            logger.warning(f"记录导出目录失败: {e}")
        self.show_status_message(f"已导出: {path}")

    def _on_history_activated(self, item: QListWidgetItem) -> None:
        history_item: HistoryItem = item.data(Qt.ItemDataRole.UserRole)
        try:
            self.service.restore_history(history_item)
        except AppException as e:
            self.handle_exception(e)
            return
        self._sync_sliders()
        self._refresh_controls()
        self._run_analysis()

    def _start_task(
        self,
        factory: Callable[[], Awaitable[Any]],
        on_success: Callable[[Any], None],
        name: str,
    ) -> None:
        async def run() -> Any:
            try:
                return await factory()
            finally:
                # 每个任务使用独立事件循环，客户端不能跨循环复用
                await self.service.ai_service.close()

        task = AsyncTaskThread(run, name, self)
        task.succeeded.connect(on_success)
        task.failed.connect(self._on_task_failed)
        task.finished.connect(task.deleteLater)
        self._task = task
        task.start()

    def _on_task_failed(self, error: Exception) -> None:
        self._transform_button.setEnabled(True)
        self.handle_exception(error)

    # ========================
    # 界面刷新
    # ========================

    def _sync_sliders(self) -> None:
        adjustments = self.service.session.adjustments
        for slider, value in (
            (self._brightness_slider, adjustments.brightness),
            (self._contrast_slider, adjustments.contrast),
            (self._blur_slider, adjustments.blur),
        ):
            slider.blockSignals(True)
            slider.setValue(round(value))
            slider.blockSignals(False)

        self._aspect_combo.blockSignals(True)
        self._aspect_combo.setCurrentIndex(
            list(ASPECT_RATIO_LABELS).index(adjustments.aspect_ratio)
        )
        self._aspect_combo.blockSignals(False)

    def _refresh_controls(self) -> None:
        self.canvas.refresh_preview()
        self._undo_button.setEnabled(self.service.session.can_undo)
        self._action_undo.setEnabled(self.service.session.can_undo)
        has_source = self.service.session.has_source
        self._apply_button.setEnabled(has_source)
        self._transform_button.setEnabled(has_source and not self.service.is_transforming)
        self._download_button.setEnabled(self.service.transformed_image is not None)

    def _fill_analysis_tables(self) -> None:
        analysis = self.service.analysis

        self._replacement_table.blockSignals(True)
        self._replacement_table.setRowCount(len(analysis.text_replacements))
        for row, tr in enumerate(analysis.text_replacements):
            original = QTableWidgetItem(tr.original)
            original.setFlags(original.flags() & ~Qt.ItemFlag.ItemIsEditable)
            self._replacement_table.setItem(row, 0, original)
            self._replacement_table.setItem(row, 1, QTableWidgetItem(tr.replacement))
        self._replacement_table.blockSignals(False)

        self._entity_table.blockSignals(True)
        self._entity_table.setRowCount(len(analysis.entity_modifications))
        for row, em in enumerate(analysis.entity_modifications):
            entity = QTableWidgetItem(em.entity)
            entity.setFlags(entity.flags() & ~Qt.ItemFlag.ItemIsEditable)
            self._entity_table.setItem(row, 0, entity)
            self._entity_table.setItem(row, 1, QTableWidgetItem(em.instruction))
        self._entity_table.blockSignals(False)

    def _on_replacement_edited(self, item: QTableWidgetItem) -> None:
        if item.column() == 1:
            self.service.set_text_replacement(item.row(), item.text())

    def _on_entity_edited(self, item: QTableWidgetItem) -> None:
        if item.column() == 1:
            self.service.set_entity_instruction(item.row(), item.text())

    def _show_result(self, data: Optional[bytes]) -> None:
        if data is None:
            self._result_label.clear()
            self._download_button.setEnabled(False)
            return
        pixmap = QPixmap.fromImage(QImage.fromData(data))
        self._result_label.setPixmap(
            pixmap.scaled(
                320,
                320,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        )
        self._download_button.setEnabled(True)

    def _refresh_history(self) -> None:
        self._history_list.clear()
        for history_item in self.service.history.items:
            pixmap = QPixmap.fromImage(
                QImage.fromData(self.service.history.restore(history_item))
            )
            item = QListWidgetItem(QIcon(pixmap), history_item.style)
            item.setData(Qt.ItemDataRole.UserRole, history_item)
            self._history_list.addItem(item)

    # ========================
    # 事件处理
    # ========================

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._task is not None and self._task.isRunning():
            self._task.wait()
        logger.info("主窗口关闭")
        event.accept()
