"""
Camera scan session.

Design:
- CameraBackend is the capture/decoding capability: list devices, start delivering decoded
  text to a callback, stop and release. Decoding itself is the backend's business.
- PollingCameraBackend runs its own daemon thread (like a monitor loop) that polls a frame
  reader and hands every decoded text to the callback until stopped. If capture fails the
  thread ends and on_stopped is called so the owner can reset.
- ScanSession owns one acquisition: start() picks a device and begins decoding, each decoded
  text is parsed as a QR payload and passed on as a ScanLookup, stop() releases the device.
  It is a context manager so the device is released on teardown as well.
- Thread-safety: on_lookup / on_stopped are called from the backend's thread; UI callers
  marshal to the main thread (root.after). stop() only signals and never waits, so it is
  safe to call from the Tk thread.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from .codec import decode_qr_payload
from .config import CAMERA_POLL_INTERVAL_SEC
from .errors import DecodeError, ScannerUnavailable
from .models import ScanLookup

logger = logging.getLogger(__name__)

DecodedCallback = Callable[[str], None]
# called with a short reason when capture ends without stop() being asked for
StoppedCallback = Callable[[str], None]
# returns decoded text for the current frame, or None when nothing was recognized
FrameReader = Callable[[], Optional[str]]


class CameraBackend(ABC):
    @abstractmethod
    def list_devices(self) -> List[str]:
        ...

    @abstractmethod
    def start(
        self,
        device_id: str,
        on_decoded: DecodedCallback,
        on_stopped: Optional[StoppedCallback] = None,
    ) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...


class PollingCameraBackend(CameraBackend):
    """
    Design (PollingCameraBackend)
    - readers: {device_id -> FrameReader}
    - start(): spawns a daemon thread polling the reader every interval_sec; each run has
               its own stop Event so a stopped thread can finish in the background
    - stop(): signals the thread and returns immediately
    """

    def __init__(self, readers: Dict[str, FrameReader], interval_sec: float = CAMERA_POLL_INTERVAL_SEC):
        self.readers = readers
        self.interval_sec = interval_sec
        self._lock = threading.Lock()
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None

    def list_devices(self) -> List[str]:
        return list(self.readers)

    def start(
        self,
        device_id: str,
        on_decoded: DecodedCallback,
        on_stopped: Optional[StoppedCallback] = None,
    ) -> None:
        if device_id not in self.readers:
            raise ScannerUnavailable(f"Unknown capture device {device_id!r}")
        with self._lock:
            if self._thread is not None:
                raise ScannerUnavailable("Capture already running")
            stop = threading.Event()
            thread = threading.Thread(
                target=self._loop,
                args=(self.readers[device_id], on_decoded, on_stopped, stop),
                daemon=True,
            )
            self._stop, self._thread = stop, thread
        thread.start()

    def stop(self) -> None:
        with self._lock:
            stop, self._stop, self._thread = self._stop, None, None
        if stop is not None:
            stop.set()

    def _loop(
        self,
        reader: FrameReader,
        on_decoded: DecodedCallback,
        on_stopped: Optional[StoppedCallback],
        stop: threading.Event,
    ) -> None:
        reason = None
        while not stop.is_set():
            try:
                text = reader()
            except OSError as exc:
                logger.error("Frame capture failed: %s", exc)
                reason = f"Camera stopped: {exc}"
                break
            except Exception as exc:
                logger.exception("Frame decoder failed")
                reason = f"Camera stopped: {exc}"
                break
            if text:
                try:
                    on_decoded(text)
                except Exception:
                    logger.exception("Decoded-frame handler failed")
            stop.wait(self.interval_sec)

        if reason is None:
            return
        with self._lock:
            if self._stop is not stop:
                # stop() already released this run
                return
            self._stop, self._thread = None, None
        if on_stopped is not None:
            try:
                on_stopped(reason)
            except Exception:
                logger.exception("Capture-stopped handler failed")


class ScanSession:
    """
    Design (ScanSession)
    - One camera acquisition at a time; start() while running is a no-op.
    - Invalid QR payloads are logged and ignored (the camera keeps looking).
    - If the backend ends capture on its own, the session resets and on_stopped is told why.
    """

    def __init__(
        self,
        backend: CameraBackend,
        on_lookup: Callable[[ScanLookup], None],
        on_stopped: Optional[StoppedCallback] = None,
    ) -> None:
        self.backend = backend
        self.on_lookup = on_lookup
        self.on_stopped = on_stopped
        self.device_id: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self.device_id is not None

    def start(self, device_id: Optional[str] = None) -> str:
        """
        Purpose: Acquire a device (the first one unless given) and start decoding.
        Raises: ScannerUnavailable when no device exists.
        """
        with self._lock:
            if self.device_id is not None:
                return self.device_id
            devices = self.backend.list_devices()
            if not devices:
                raise ScannerUnavailable("No camera found")
            chosen = device_id if device_id is not None else devices[0]
            self.device_id = chosen
            try:
                self.backend.start(chosen, self._handle_text, self._handle_stopped)
            except Exception:
                self.device_id = None
                raise
        logger.info("Scanning from device %s", chosen)
        return chosen

    def stop(self) -> None:
        """Release the device; safe to call repeatedly."""
        with self._lock:
            if self.device_id is None:
                return
            device, self.device_id = self.device_id, None
        try:
            self.backend.stop()
        finally:
            logger.info("Stopped scanning from device %s", device)

    def __enter__(self) -> "ScanSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _handle_text(self, text: str) -> None:
        try:
            lookup = decode_qr_payload(text)
        except DecodeError as exc:
            logger.debug("Ignoring unreadable QR payload: %s", exc)
            return
        self.on_lookup(lookup)

    def _handle_stopped(self, reason: str) -> None:
        with self._lock:
            device, self.device_id = self.device_id, None
        logger.warning("Capture on device %s ended: %s", device, reason)
        if self.on_stopped is not None:
            self.on_stopped(reason)
