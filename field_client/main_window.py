"""Main window: toolbar actions, field palette, placement surface and coordinate panel."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Hashable, List, Optional

from PyQt6.QtCore import QThreadPool, Qt, QUrl
from PyQt6.QtGui import QAction, QDesktopServices, QKeySequence, QPixmap
from PyQt6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from field_client.client_config import InitialClientSettings
from field_client.field_surface import FieldSurface
from field_client.page_rasterizer import DEFAULT_RENDER_SCALE, RasterizationError, rasterize_first_page
from field_client.services.signing import SigningPreconditionError, build_signing_request, load_signature_payload
from field_client.services.transport import DocumentTransport, TransportError
from field_client.services.transport_worker import TransportTask
from field_client.widgets import CoordinatePanel, FieldPalette

_CLIENT_LOGGER = logging.getLogger("FieldPlacer.Client")

_WINDOW_TITLE = "Field Placer"
_SIGNATURE_PREVIEW_HEIGHT = 60


class PlacerWindow(QMainWindow):
    def __init__(
        self,
        initial: InitialClientSettings,
        transport: Optional[DocumentTransport] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(_WINDOW_TITLE)
        self._transport = transport or DocumentTransport(initial.api_url, timeout=initial.request_timeout)
        self._render_scale = DEFAULT_RENDER_SCALE
        self._show_coordinates = True
        self._document_id: Optional[str] = None
        self._signature_payload: Optional[str] = None
        self._document_generation = 0
        self._thread_pool = QThreadPool.globalInstance()
        self._inflight: List[TransportTask] = []
        self._transport_actions: List[QAction] = []

        self._surface = FieldSurface(initial.engine_limits())
        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        scroll.setWidget(self._surface)

        self._palette = FieldPalette(self._surface.editor.controller, self)
        self._signature_preview = QLabel("No signature", self)
        self._signature_preview.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._signature_preview.setMinimumHeight(_SIGNATURE_PREVIEW_HEIGHT)

        sidebar = QWidget(self)
        sidebar_layout = QVBoxLayout(sidebar)
        sidebar_layout.setContentsMargins(0, 0, 0, 0)
        sidebar_layout.addWidget(self._palette)
        sidebar_layout.addWidget(QLabel("Signature", sidebar))
        sidebar_layout.addWidget(self._signature_preview)
        sidebar_layout.addStretch(1)
        sidebar.setFixedWidth(180)

        self._coordinates = CoordinatePanel(self)

        central = QWidget(self)
        body = QHBoxLayout()
        body.addWidget(sidebar)
        body.addWidget(scroll, 1)
        outer = QVBoxLayout(central)
        outer.addLayout(body, 1)
        outer.addWidget(self._coordinates)
        self.setCentralWidget(central)

        self._scale_label = QLabel(self)
        self.statusBar().addPermanentWidget(self._scale_label)
        self._build_actions()

        self._surface.fields_changed.connect(self._refresh_coordinates)
        self._surface.scale_changed.connect(self._update_scale_label)
        self._update_scale_label(self._surface.editor.scale)
        self.resize(1100, 900)

    # Settings hooks -------------------------------------------------------

    @property
    def surface(self) -> FieldSurface:
        return self._surface

    @property
    def document_id(self) -> Optional[str]:
        return self._document_id

    def set_show_coordinates(self, enabled: bool) -> None:
        self._show_coordinates = bool(enabled)
        self._refresh_coordinates()

    def set_render_scale(self, scale: float) -> None:
        """Raster resolution used for the next loaded document."""

        try:
            numeric = float(scale)
        except (TypeError, ValueError):
            return
        if numeric > 0:
            self._render_scale = numeric

    # Actions --------------------------------------------------------------

    def _build_actions(self) -> None:
        toolbar = self.addToolBar("Document")
        toolbar.setMovable(False)

        upload_pdf = QAction("Upload PDF", self)
        upload_pdf.setShortcut(QKeySequence.StandardKey.Open)
        upload_pdf.triggered.connect(self.choose_document)
        toolbar.addAction(upload_pdf)

        upload_signature = QAction("Upload Signature", self)
        upload_signature.triggered.connect(self.choose_signature)
        toolbar.addAction(upload_signature)

        sign = QAction("Sign Document", self)
        sign.triggered.connect(self.sign_document)
        toolbar.addAction(sign)
        self._transport_actions = [upload_pdf, sign]

        delete = QAction("Delete Field", self)
        delete.setShortcuts([QKeySequence(QKeySequence.StandardKey.Delete), QKeySequence("Backspace")])
        delete.triggered.connect(self.delete_selected_field)
        self.addAction(delete)

    def choose_document(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Upload PDF", "", "PDF documents (*.pdf)")
        if path:
            self.open_document(Path(path))

    def open_document(self, path: Path) -> bool:
        """Rasterize page 1 locally, then register the document with the backend."""

        try:
            data = path.read_bytes()
            page = rasterize_first_page(data, self._render_scale)
        except (OSError, RasterizationError) as exc:
            _CLIENT_LOGGER.warning("Unable to load %s: %s", path, exc)
            self._alert(f"Unable to load PDF: {exc}")
            return False

        self._document_id = None
        self._document_generation += 1
        self._surface.load_page(page)
        self.setWindowTitle(f"{_WINDOW_TITLE} - {path.name}")
        self.statusBar().showMessage(f"Loaded {path.name}", 5000)

        name = path.name
        self._start_call(
            ("upload", self._document_generation, name),
            lambda: self._transport.upload_document(data, name),
        )
        return True

    def choose_signature(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Upload Signature", "", "Images (*.png *.jpg *.jpeg *.gif *.bmp)")
        if path:
            self.attach_signature(Path(path))

    def attach_signature(self, path: Path) -> bool:
        try:
            payload = load_signature_payload(path)
        except OSError as exc:
            _CLIENT_LOGGER.warning("Unable to read signature image %s: %s", path, exc)
            self._alert(f"Unable to read signature image: {exc}")
            return False
        self._signature_payload = payload
        preview = QPixmap(str(path))
        if preview.isNull():
            self._signature_preview.setText(path.name)
        else:
            self._signature_preview.setPixmap(
                preview.scaledToHeight(_SIGNATURE_PREVIEW_HEIGHT, Qt.TransformationMode.SmoothTransformation)
            )
        _CLIENT_LOGGER.debug("Signature image attached from %s", path)
        return True

    def sign_document(self) -> None:
        if self._inflight:
            return
        try:
            request = build_signing_request(self._document_id, self._signature_payload, self._surface.editor.store)
        except SigningPreconditionError as exc:
            self._alert(str(exc))
            return

        self._start_call(("sign", request.document_id), lambda: self._transport.sign_document(request))

    def delete_selected_field(self) -> None:
        editor = self._surface.editor
        selected = editor.context.selected_id
        if selected is not None:
            editor.controller.delete_field(selected)

    # Internal helpers ----------------------------------------------------

    @property
    def transport_busy(self) -> bool:
        return bool(self._inflight)

    def _start_call(self, tag: Hashable, call: Callable[[], Any]) -> None:
        """Run a backend call on the thread pool; outcomes arrive on the GUI thread."""

        task = TransportTask(tag, call)
        task.signals.succeeded.connect(self._call_succeeded)
        task.signals.failed.connect(self._call_failed)
        task.signals.finished.connect(self._call_finished)
        self._inflight.append(task)
        self._sync_transport_actions()
        self.statusBar().showMessage("Contacting server...")
        self._thread_pool.start(task)

    def _call_succeeded(self, tag: Hashable, result: Any) -> None:
        if tag[0] == "upload":
            if tag[1] != self._document_generation:
                _CLIENT_LOGGER.debug("Dropping upload result for replaced document %s", tag[2])
                return
            self._document_id = result
            _CLIENT_LOGGER.debug("Uploaded %s as %s", tag[2], result)
            return
        _CLIENT_LOGGER.info("Audit trail: %s", result.audit_trail)
        QMessageBox.information(self, _WINDOW_TITLE, "Document signed successfully!")
        if result.download_url:
            QDesktopServices.openUrl(QUrl(result.download_url))

    def _call_failed(self, tag: Hashable, exc: TransportError) -> None:
        if tag[0] == "upload":
            if tag[1] != self._document_generation:
                return
            _CLIENT_LOGGER.warning("Upload of %s failed: %s", tag[2], exc)
            self._alert("Failed to upload PDF")
            return
        _CLIENT_LOGGER.warning("Signing %s failed: %s", tag[1], exc)
        self._alert("Failed to sign document")

    def _call_finished(self, tag: Hashable) -> None:
        self._inflight = [task for task in self._inflight if task.tag != tag]
        self._sync_transport_actions()
        if not self._inflight:
            self.statusBar().clearMessage()

    def _sync_transport_actions(self) -> None:
        idle = not self._inflight
        for action in self._transport_actions:
            action.setEnabled(idle)

    def _alert(self, message: str) -> None:
        QMessageBox.warning(self, _WINDOW_TITLE, message)

    def _refresh_coordinates(self) -> None:
        field = self._surface.editor.selected_field() if self._show_coordinates else None
        self._coordinates.show_field(field)

    def _update_scale_label(self, scale: float) -> None:
        if not self._surface.editor.is_loaded:
            self._scale_label.setText("No document")
            return
        self._scale_label.setText(f"Scale: {scale * 100:.0f}%")
