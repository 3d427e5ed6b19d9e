"""Background render worker and request coalescing for the preview.

AIDEV-NOTE: The worker thread owns a single-slot mailbox (capacity 1). The
controller on the GUI thread keeps at most one request in flight plus a
"pending" flag, so a burst of slider changes collapses into one follow-up
render that reads the live settings when it is dispatched.
"""

from typing import Optional

from PyQt6.QtCore import (
    QMutex,
    QMutexLocker,
    QObject,
    QThread,
    QWaitCondition,
    pyqtSignal,
)

from image_processing import ImageProcessor
from models import EffectSettings, ImageBuffer, RenderRequest, RenderResponse


class ChannelFullError(RuntimeError):
    """A request was submitted while another one is still waiting."""


class WorkerStoppedError(RuntimeError):
    """A request was submitted to a worker that is not running."""


class RenderThread(QThread):
    """Background thread that runs the pipeline to avoid blocking the GUI."""

    response_ready = pyqtSignal(object)  # RenderResponse
    error_occurred = pyqtSignal(int, str)  # sequence, error message

    def __init__(self, processor: Optional[ImageProcessor] = None):
        super().__init__()
        self.processor = processor or ImageProcessor()

        self.running = True

        # Single-slot channel guarded by a mutex
        self.mailbox: Optional[RenderRequest] = None
        self.mailbox_lock = QMutex()
        self.mailbox_ready = QWaitCondition()

    # -------------------------------------------------------------

    def run(self):
        print("Render worker started.")

        while True:
            request = self._take_request()
            if request is None:
                break
            self._render(request)

        print("Render worker stopped.")

    def _take_request(self) -> Optional[RenderRequest]:
        """Block until a request arrives or the worker is stopped."""
        with QMutexLocker(self.mailbox_lock):
            while self.running and self.mailbox is None:
                self.mailbox_ready.wait(self.mailbox_lock)

            if not self.running:
                return None

            request, self.mailbox = self.mailbox, None
            return request

    def _render(self, request: RenderRequest):
        """Run one request to completion and send back the result."""
        try:
            response = self.processor.handle_request(request)
        except Exception as e:
            self.error_occurred.emit(request.sequence, f"Render failed: {e}")
            return

        self.response_ready.emit(response)

    # -------------------------------------------------------------
    # API methods
    # -------------------------------------------------------------

    def submit(self, request: RenderRequest):
        """Thread-safe hand-off of one request to the worker.

        Raises:
            WorkerStoppedError: If the worker has been stopped
            ChannelFullError: If a previous request has not been picked up yet
        """
        with QMutexLocker(self.mailbox_lock):
            if not self.running:
                raise WorkerStoppedError("Render worker is not running")
            if self.mailbox is not None:
                raise ChannelFullError(
                    f"Render #{self.mailbox.sequence} is still waiting"
                )
            self.mailbox = request
            self.mailbox_ready.wakeOne()

    def stop(self):
        """Stop the worker; a request still in the mailbox fails."""
        with QMutexLocker(self.mailbox_lock):
            self.running = False
            dropped, self.mailbox = self.mailbox, None
            self.mailbox_ready.wakeAll()

        if dropped is not None:
            self.error_occurred.emit(dropped.sequence, "Render worker stopped")


class RenderController(QObject):
    """GUI-side front end for the render worker.

    Signals:
        render_ready: Latest RenderResponse to display
        render_failed: Error message for the latest request
        busy_changed: True while a request is in flight
    """

    render_ready = pyqtSignal(object)  # RenderResponse
    render_failed = pyqtSignal(str)
    busy_changed = pyqtSignal(bool)

    def __init__(
        self,
        settings: Optional[EffectSettings] = None,
        worker: Optional[RenderThread] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.settings = settings or EffectSettings()
        self.source: Optional[ImageBuffer] = None

        self.worker = worker or RenderThread()
        self.worker.response_ready.connect(self._on_response)
        self.worker.error_occurred.connect(self._on_error)

        # Coalescing state
        self.last_sequence = 0
        self.in_flight: Optional[int] = None
        self.pending = False

    @property
    def busy(self) -> bool:
        return self.in_flight is not None

    def start(self):
        self.worker.start()

    def stop(self):
        """Stop the worker and wait for the current render to finish.

        Later requests go straight to the stopped worker and raise
        WorkerStoppedError.
        """
        self.pending = False
        self.worker.stop()
        self.worker.wait()
        self._set_in_flight(None)

    def set_source(self, buffer: ImageBuffer) -> bool:
        """Replace the source image and request a render of it."""
        self.source = buffer.copy()
        return self.request_render()

    def update_settings(self, settings: EffectSettings) -> bool:
        """Replace the live settings and request a render with them."""
        self.settings = settings
        return self.request_render()

    def request_render(self) -> bool:
        """Render the current source with the live settings.

        Returns:
            True if a request was dispatched now, False if it was folded
            into the pending repeat (or there is no source yet)
        """
        if self.source is None:
            return False

        if self.busy:
            self.pending = True
            return False

        self._dispatch()
        return True

    # -------------------------------------------------------------

    def _dispatch(self):
        self.last_sequence += 1
        request = RenderRequest.from_settings(
            self.last_sequence, self.source.copy(), self.settings
        )

        self._set_in_flight(request.sequence)

        try:
            self.worker.submit(request)
        except RuntimeError:
            self._set_in_flight(None)
            raise

    def _set_in_flight(self, sequence: Optional[int]):
        was_busy = self.busy
        self.in_flight = sequence
        if self.busy != was_busy:
            self.busy_changed.emit(self.busy)

    def _finish(self, sequence: int):
        if sequence != self.in_flight:
            return

        if not self.pending:
            self._set_in_flight(None)
            return

        # Run the one coalesced repeat; no retry if it cannot be sent
        self.pending = False
        try:
            self._dispatch()
        except RuntimeError as e:
            self.render_failed.emit(str(e))

    def _on_response(self, response: RenderResponse):
        # Only the newest issued request reaches the display
        if response.sequence == self.last_sequence:
            self.render_ready.emit(response)
        self._finish(response.sequence)

    def _on_error(self, sequence: int, message: str):
        print(f"Warning: {message}")
        if sequence == self.last_sequence:
            self.render_failed.emit(message)
        self._finish(sequence)
