from __future__ import annotations

from PySide6.QtCore import QObject, QRunnable, Signal, Slot

from zpool_safety.errors import CollectionError, NoDisksFound
from zpool_safety.services.analysis_service import AnalysisService


class AnalysisSignals(QObject):
    result = Signal(object)
    failed = Signal(str, str)
    finished = Signal()


class AnalysisWorker(QRunnable):
    """Runs one blocking analysis off the GUI thread."""

    def __init__(self, service: AnalysisService) -> None:
        super().__init__()
        self.service = service
        self.signals = AnalysisSignals()
        self.setAutoDelete(False)

    @Slot()
    def run(self) -> None:
        try:
            self.signals.result.emit(self.service.run())
        except NoDisksFound as e:
            self.signals.failed.emit("no-disks", str(e))
        except CollectionError as e:
            self.signals.failed.emit("collection", str(e))
        finally:
            self.signals.finished.emit()
