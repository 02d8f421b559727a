"""
Управление остановкой сканирования по SIGINT
"""

import asyncio
import logging
import os
import signal
import threading
from enum import Enum
from typing import Callable, Optional

from .errors import WatchdogTimeoutError

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Состояние прохода"""
    RUNNING = "running"
    STOP_REQUESTED = "stop_requested"
    STOPPED = "stopped"


class CancellationController:
    """
    Флаг остановки с единственным писателем и сторожевой таймер.

    Первый SIGINT выставляет флаг и запускает таймер. Если за
    watchdog_timeout секунд проход не остановился, процесс завершается
    немедленно с ненулевым кодом.
    """

    def __init__(self, watchdog_timeout: float = 5.0,
                 exit_func: Callable[[int], None] = os._exit):
        self.watchdog_timeout = watchdog_timeout
        self._exit_func = exit_func
        self._stop = threading.Event()
        self._state = RunState.RUNNING
        self._lock = threading.Lock()
        self._watchdog: Optional[threading.Timer] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._previous_handler = None
        self._fallback_installed = False

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> bool:
        """
        Запросить остановку

        Returns:
            True если запрос принят, False если остановка уже запрошена
        """
        with self._lock:
            if self._state is not RunState.RUNNING:
                return False
            self._state = RunState.STOP_REQUESTED
            self._stop.set()
            self._start_watchdog()
        return True

    def mark_stopped(self):
        """Все воркеры и цикл сбора завершились"""
        with self._lock:
            self._state = RunState.STOPPED
            if self._watchdog is not None:
                self._watchdog.cancel()
                self._watchdog = None

    def _start_watchdog(self):
        self._watchdog = threading.Timer(self.watchdog_timeout, self._on_watchdog)
        self._watchdog.daemon = True
        self._watchdog.start()

    def _on_watchdog(self):
        if self._state is RunState.STOPPED:
            return
        error = WatchdogTimeoutError(self.watchdog_timeout)
        logger.critical(f"Ошибка: {error}")
        self._exit_func(1)

    def _on_interrupt(self):
        if self.request_stop():
            print("Получен сигнал прерывания, сканирование останавливается досрочно.")
        else:
            logger.debug("Повторный сигнал прерывания проигнорирован")

    def install_signal_handler(self, loop: asyncio.AbstractEventLoop):
        """Подписаться на SIGINT"""
        self._loop = loop
        try:
            loop.add_signal_handler(signal.SIGINT, self._on_interrupt)
        except (NotImplementedError, RuntimeError):
            # Windows: цикл событий не поддерживает add_signal_handler
            self._fallback_installed = True
            self._previous_handler = signal.signal(
                signal.SIGINT,
                lambda signum, frame: loop.call_soon_threadsafe(self._on_interrupt)
            )

    def remove_signal_handler(self):
        """Вернуть обработку SIGINT по умолчанию"""
        if self._loop is None:
            return
        if self._fallback_installed:
            signal.signal(signal.SIGINT, self._previous_handler or signal.default_int_handler)
            self._previous_handler = None
            self._fallback_installed = False
        else:
            self._loop.remove_signal_handler(signal.SIGINT)
        self._loop = None
