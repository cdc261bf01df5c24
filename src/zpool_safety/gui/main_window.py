from __future__ import annotations

from typing import Any

from PySide6.QtCore import QThreadPool
from PySide6.QtGui import QFont
from PySide6.QtWidgets import QLabel, QMainWindow, QPlainTextEdit, QPushButton

from zpool_safety.gui.workers import AnalysisWorker
from zpool_safety.models.findings import Recommendation
from zpool_safety.services.analysis_service import AnalysisOutcome, AnalysisService
from zpool_safety.services.config_service import ConfigService


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self._config = ConfigService().resolve()
        self.setWindowTitle(f"ZFS Pool Safety: {self._config.pool}")
        self.resize(960, 720)

        self._service = AnalysisService(self._config)
        self._latest: AnalysisOutcome | None = None
        self._thread_pool = QThreadPool.globalInstance()
        self._active_workers: set[AnalysisWorker] = set()

        self._report = QPlainTextEdit()
        self._report.setReadOnly(True)
        self._report.setFont(QFont("monospace"))
        self._report.setPlainText("No analysis yet.")
        self.setCentralWidget(self._report)

        self._verdict = QLabel("Recommendation: -")
        self.statusBar().addWidget(self._verdict)

        self._run_btn = QPushButton("Run Analysis")
        self._run_btn.clicked.connect(self.refresh)  # type: ignore[arg-type]
        self.statusBar().addPermanentWidget(self._run_btn)

        export_btn = QPushButton("Export Report")
        export_btn.clicked.connect(self._export_report)  # type: ignore[arg-type]
        self.statusBar().addPermanentWidget(export_btn)

        self.refresh()

    def refresh(self) -> None:
        self._run_btn.setEnabled(False)
        self.statusBar().showMessage(f"Analyzing pool {self._config.pool}...")

        w = AnalysisWorker(self._service)
        self._active_workers.add(w)
        w.signals.result.connect(self._on_result)  # type: ignore[arg-type]
        w.signals.failed.connect(self._on_failed)  # type: ignore[arg-type]
        w.signals.finished.connect(lambda _w=w: self._on_finished(_w))  # type: ignore[arg-type]
        self._thread_pool.start(w)

    def _on_result(self, res: Any) -> None:
        if not isinstance(res, AnalysisOutcome):
            return
        self._latest = res
        self._report.setPlainText(res.report.text)
        warnings = sum(1 for f in res.findings if f.is_warning)
        verdict = "KEEP QUOTA" if res.recommendation is Recommendation.KEEP_QUOTA else "SAFE TO REMOVE"
        self._verdict.setText(f"Recommendation: {verdict}")
        self.statusBar().showMessage(
            f"Updated: {res.result.ts:%F %T} | Warnings: {warnings} | Notes: {len(res.findings) - warnings}"
        )

    def _on_failed(self, kind: str, msg: str) -> None:
        self._latest = None
        self._verdict.setText("Recommendation: -")
        self._report.setPlainText(f"Analysis aborted ({kind}): {msg}")
        self.statusBar().showMessage(f"Error: {msg}")

    def _on_finished(self, w: AnalysisWorker) -> None:
        self._active_workers.discard(w)
        self._run_btn.setEnabled(True)

    def _export_report(self) -> None:
        if self._latest is None:
            self.statusBar().showMessage("Nothing to export: run an analysis first")
            return
        reporter = self._service.reporter
        try:
            written = reporter.write_html(reporter.default_report_path(), self._latest.report.html)
        except OSError as e:
            self.statusBar().showMessage(f"Export failed: {e}")
            return
        self.statusBar().showMessage(f"Report exported: {written}")
