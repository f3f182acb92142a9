from __future__ import annotations

import sys
from pathlib import Path

import yaml
from PIL import Image
from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QImage, QPixmap
from PyQt6.QtWidgets import (
    QApplication,
    QCheckBox,
    QColorDialog,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from socialcard.assets.resolver import ImageBatch, ImageCache, ImageResolver, ImageResult, collect_image_urls
from socialcard.card_loader import (
    custom_token,
    get_template_spec,
    list_templates,
    load_card,
    load_presets,
    preset_token,
)
from socialcard.config import get_asset_root, load_config
from socialcard.constants import APP_ID, GRID_STYLE_LABELS, IMAGE_SIZES
from socialcard.export import build_export_name, display_size, preview_scale, save_png
from socialcard.gui.state import EditorState
from socialcard.models import GridOptions
from socialcard.render.color import safe_hex_color
from socialcard.render.engine import render_card


def _pil_to_qpixmap(image: Image.Image) -> QPixmap:
    rgba = image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    q_image = QImage(data, rgba.width, rgba.height, QImage.Format.Format_RGBA8888)
    return QPixmap.fromImage(q_image.copy())


class _BatchBridge(QObject):
    # 加载线程回调转发到 Qt 主线程
    settled = pyqtSignal(int, object)


class CardPreviewWindow(QMainWindow):
    def __init__(self, startup_file: Path | None = None) -> None:
        super().__init__()
        self.setWindowTitle("Social Card Preview")
        self.resize(1320, 820)

        self.config = load_config()
        self.state = EditorState(accent_color=str(self.config.get("accent_color")))
        self.state.size = str(self.config.get("default_size") or self.state.size)
        self.resolver = ImageResolver(
            cache=ImageCache(),
            asset_root=get_asset_root(self.config),
            workers=int(self.config.get("loader_workers") or 1),
            timeout=float(self.config.get("load_timeout") or 10.0),
        )
        self.images: ImageResult = {}
        self.last_rendered: Image.Image | None = None
        self._batch: ImageBatch | None = None
        self._generation = 0
        self._bridge = _BatchBridge()
        self._bridge.settled.connect(self._on_batch_settled)
        self._syncing = False
        self._field_inputs: dict[str, QWidget] = {}

        self._setup_ui()
        self._sync_controls()
        self._request_images()

        if startup_file:
            self.open_card(startup_file)

    # ------------------------------------------------------------------
    # UI

    def _setup_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        layout = QHBoxLayout(root)

        left = QVBoxLayout()
        layout.addLayout(left, 0)

        card_group = QGroupBox("Card")
        card_form = QFormLayout(card_group)
        self.template_combo = QComboBox()
        for spec in list_templates():
            self.template_combo.addItem(spec.name, spec.id)
        self.template_combo.currentIndexChanged.connect(self._on_template_changed)
        card_form.addRow("Template", self.template_combo)

        self.size_combo = QComboBox()
        for key in IMAGE_SIZES:
            self.size_combo.addItem(key, key)
        self.size_combo.currentIndexChanged.connect(self._on_style_changed)
        card_form.addRow("Size", self.size_combo)

        self.token_inputs = [QLineEdit(), QLineEdit()]
        for index, token_input in enumerate(self.token_inputs):
            token_input.setPlaceholderText("Symbol, e.g. " + ", ".join(list(load_presets())[:3]))
            token_input.editingFinished.connect(self._on_tokens_changed)
            card_form.addRow(f"Token {index + 1}", token_input)
        left.addWidget(card_group)

        self.fields_group = QGroupBox("Fields")
        self.fields_form = QFormLayout(self.fields_group)
        left.addWidget(self.fields_group)

        style_group = QGroupBox("Style")
        style_form = QFormLayout(style_group)
        accent_row = QHBoxLayout()
        self.accent_input = QLineEdit()
        self.accent_input.editingFinished.connect(self._on_style_changed)
        accent_button = QPushButton("Pick")
        accent_button.clicked.connect(self.choose_accent)
        accent_row.addWidget(self.accent_input)
        accent_row.addWidget(accent_button)
        style_form.addRow("Accent", accent_row)

        self.grid_combo = QComboBox()
        for key, label in GRID_STYLE_LABELS.items():
            self.grid_combo.addItem(label, key)
        self.grid_combo.currentIndexChanged.connect(self._on_style_changed)
        style_form.addRow("Grid", self.grid_combo)

        self.opacity_spin = QSpinBox()
        self.opacity_spin.setRange(0, 100)
        self.opacity_spin.valueChanged.connect(self._on_style_changed)
        style_form.addRow("Grid opacity", self.opacity_spin)

        self.density_spin = QSpinBox()
        self.density_spin.setRange(1, 3)
        self.density_spin.valueChanged.connect(self._on_style_changed)
        style_form.addRow("Grid density", self.density_spin)

        self.disclaimer_check = QCheckBox("Show disclaimer")
        self.disclaimer_check.toggled.connect(self._on_style_changed)
        style_form.addRow(self.disclaimer_check)
        left.addWidget(style_group)

        buttons = QHBoxLayout()
        for text, handler in (
            ("Open Card", self.choose_card),
            ("Save Card", self.save_card),
            ("Save PNG", self.export_png),
            ("Reset", self.reset),
        ):
            button = QPushButton(text)
            button.clicked.connect(handler)
            buttons.addWidget(button)
        left.addLayout(buttons)
        left.addStretch(1)

        self.preview_label = QLabel("Rendering...")
        self.preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.preview_label, 1)

    def _rebuild_field_inputs(self) -> None:
        while self.fields_form.rowCount():
            self.fields_form.removeRow(0)
        self._field_inputs = {}
        spec = get_template_spec(self.state.template)
        if spec is None:
            return
        for item in spec.fields:
            if item.type == "select" and item.options:
                widget = QComboBox()
                for value, label in item.options:
                    widget.addItem(label, value)
                index = widget.findData(self.state.fields.get(item.id, item.default))
                widget.setCurrentIndex(max(0, index))
                widget.currentIndexChanged.connect(lambda _i, key=item.id, w=widget: self._on_field_changed(key, w.currentData()))
            else:
                widget = QLineEdit(self.state.fields.get(item.id, item.default))
                widget.textChanged.connect(lambda text, key=item.id: self._on_field_changed(key, text))
            self._field_inputs[item.id] = widget
            self.fields_form.addRow(item.label, widget)

    def _sync_controls(self) -> None:
        self._syncing = True
        try:
            self.template_combo.setCurrentIndex(max(0, self.template_combo.findData(self.state.template)))
            self.size_combo.setCurrentIndex(max(0, self.size_combo.findData(self.state.size)))
            for index, token_input in enumerate(self.token_inputs):
                token = self.state.tokens[index] if index < len(self.state.tokens) else None
                token_input.setText(token.symbol if token else "")
            self.accent_input.setText(self.state.accent_color)
            self.grid_combo.setCurrentIndex(max(0, self.grid_combo.findData(self.state.grid.style)))
            self.opacity_spin.setValue(int(self.state.grid.opacity))
            self.density_spin.setValue(int(self.state.grid.density))
            self.disclaimer_check.setChecked(self.state.show_disclaimer)
            self._rebuild_field_inputs()
        finally:
            self._syncing = False

    # ------------------------------------------------------------------
    # state changes

    def _on_template_changed(self) -> None:
        if self._syncing:
            return
        self.state.select_template(str(self.template_combo.currentData()))
        self._sync_controls()
        self.render_preview()

    def _on_field_changed(self, key: str, value: str) -> None:
        if self._syncing:
            return
        self.state.set_field(key, str(value))
        self.render_preview()

    def _on_style_changed(self) -> None:
        if self._syncing:
            return
        self.state.size = str(self.size_combo.currentData())
        self.state.accent_color = safe_hex_color(self.accent_input.text(), self.state.accent_color)
        self.state.grid = GridOptions(
            style=str(self.grid_combo.currentData()),
            opacity=self.opacity_spin.value(),
            density=self.density_spin.value(),
        )
        self.state.show_disclaimer = self.disclaimer_check.isChecked()
        self.render_preview()

    def _on_tokens_changed(self) -> None:
        if self._syncing:
            return
        self.state.tokens = []
        for token_input in self.token_inputs:
            symbol = token_input.text().strip()
            if symbol:
                self.state.add_token(preset_token(symbol) or custom_token(symbol, color=self.state.accent_color))
        self._request_images()

    # ------------------------------------------------------------------
    # assets and rendering

    def _request_images(self) -> None:
        if self._batch is not None:
            self._batch.cancel()
        urls = collect_image_urls(self.state.to_template_data(), self.config.get("brand_logo_url"))
        self._set_status(f"Loading {len(urls)} image(s)...")
        self._generation += 1
        generation = self._generation
        self._batch = self.resolver.resolve(
            urls,
            on_settled=lambda images: self._bridge.settled.emit(generation, images),
        )

    def _on_batch_settled(self, generation: int, images: ImageResult) -> None:
        if generation != self._generation:
            return
        self.images = images
        self.render_preview()

    def render_preview(self) -> None:
        data = self.state.to_template_data()
        try:
            rendered = render_card(data, self.images, config=self.config)
        except Exception as exc:
            self._set_status(f"Preview failed: {exc}")
            return
        self.last_rendered = rendered
        width, height = display_size(data.size, preview_scale(data.size))
        pixmap = _pil_to_qpixmap(rendered).scaled(
            width,
            height,
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self.preview_label.setPixmap(pixmap)
        self._set_status(f"Preview updated: {rendered.width}x{rendered.height}")

    # ------------------------------------------------------------------
    # actions

    def choose_accent(self) -> None:
        chosen = QColorDialog.getColor(QColor(self.state.accent_color), self, "Pick accent color")
        if not chosen.isValid():
            return
        self.accent_input.setText(chosen.name())
        self._on_style_changed()

    def choose_card(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Open card", "", "Card (*.yaml *.yml *.json)")
        if file_path:
            self.open_card(Path(file_path))

    def open_card(self, path: Path) -> None:
        try:
            data = load_card(path, default_accent=self.state.accent_color)
        except ValueError as exc:
            self._show_error("Open Error", str(exc))
            return
        self.state = EditorState(
            template=data.template,
            size=data.size,
            fields=dict(data.fields),
            tokens=list(data.tokens),
            accent_color=data.accent_color,
            show_disclaimer=data.show_disclaimer,
            grid=data.grid,
        )
        self._sync_controls()
        self._request_images()

    def save_card(self) -> None:
        file_path, _ = QFileDialog.getSaveFileName(self, "Save card", "card.yaml", "YAML (*.yaml *.yml)")
        if not file_path:
            return
        path = Path(file_path)
        try:
            path.write_text(
                yaml.safe_dump(self.state.to_template_data().to_dict(), sort_keys=False, allow_unicode=True),
                encoding="utf-8",
            )
        except OSError as exc:
            self._show_error("Save Error", str(exc))
            return
        self._set_status(f"Card saved: {path}")

    def export_png(self) -> None:
        if self.last_rendered is None:
            self.render_preview()
        if self.last_rendered is None:
            return
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save PNG",
            build_export_name(self.state.template),
            "PNG (*.png)",
        )
        if not file_path:
            return
        try:
            path = save_png(self.last_rendered, Path(file_path))
        except OSError as exc:
            self._show_error("Export Error", str(exc))
            return
        self._set_status(f"Exported: {path}")

    def reset(self) -> None:
        self.state.reset()
        self._sync_controls()
        self._request_images()

    def _set_status(self, message: str) -> None:
        self.statusBar().showMessage(message)

    def _show_error(self, title: str, message: str) -> None:
        QMessageBox.critical(self, title, message)

    def closeEvent(self, event) -> None:
        if self._batch is not None:
            self._batch.cancel()
        self.resolver.close()
        super().closeEvent(event)


def launch_gui(startup_file: Path | None = None) -> None:
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(APP_ID)
    window = CardPreviewWindow(startup_file=startup_file)
    window.show()
    app.exec()
