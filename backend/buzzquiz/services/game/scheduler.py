import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AnswerTimer:
    """Single-shot, cancellable timer for the buzzed player's answer window.

    - At most one pending expiry; ``start`` refuses to re-arm while pending
    - ``cancel`` is idempotent (safe after firing or after a previous cancel)
    - Runs on a Socket.IO background task so it works under threading,
      eventlet and gevent async modes alike
    """

    def __init__(self, socketio):
        self._socketio = socketio
        self._lock = threading.Lock()
        self._token: Optional[object] = None

    @property
    def pending(self) -> bool:
        return self._token is not None

    def start(self, delay_sec: float, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._token is not None:
                raise RuntimeError('answer timer already pending; cancel it first')
            token = object()
            self._token = token
        logger.info(f"[timer-set] duration={delay_sec}s")
        self._socketio.start_background_task(self._worker, token, delay_sec, callback)

    def cancel(self) -> None:
        with self._lock:
            if self._token is None:
                return
            self._token = None
        logger.info("[timer-cancel]")

    def _worker(self, token: object, delay_sec: float, callback: Callable[[], None]) -> None:
        self._socketio.sleep(delay_sec)
        with self._lock:
            if self._token is not token:
                logger.debug("[timer-abort] superseded or cancelled")
                return
            self._token = None
        logger.info("[timer-fire]")
        try:
            callback()
        except Exception:
            logger.exception("[timer-error] answer timeout handler failed")
