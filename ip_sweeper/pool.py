"""
Пул воркеров, разбирающих очередь адресов
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from .config import DEFAULT_WORKERS, CompletionRecord, ResponseRecord
from .errors import ProbeTransportError
from .probe import CompleteCallback, SuccessCallback
from .range_parser import WorkSupply

logger = logging.getLogger(__name__)

ProbeFunc = Callable[[str, SuccessCallback, CompleteCallback], Awaitable[None]]


def resolve_worker_count(requested: int, total: Optional[int] = None) -> int:
    """
    Количество воркеров для прохода

    Args:
        requested: Запрошенное количество
        total: Количество адресов (воркеров не больше, чем адресов)

    Returns:
        Количество воркеров, не меньше 1
    """
    if requested is None or requested <= 0:
        logger.warning(f"Количество воркеров {requested} не больше 0, "
                       f"используется значение по умолчанию {DEFAULT_WORKERS}")
        requested = DEFAULT_WORKERS
    if total is not None:
        requested = min(requested, max(total, 1))
    return requested


class _ProbeSession:
    """Колбэки одного ping: не больше одного ответа и ровно одно завершение"""

    def __init__(self, pool: "WorkerPool", address: str):
        self.pool = pool
        self.address = address
        self.responded = False
        self.completed = False

    def on_success(self, address: str, rtt_ms: Optional[float] = None):
        if self.completed:
            logger.warning(f"Ответ от {self.address} после завершения ping проигнорирован")
            return
        if self.responded:
            logger.warning(f"Повторный ответ от {self.address} проигнорирован")
            return
        self.responded = True
        self.pool.responses.put_nowait(ResponseRecord(self.address, rtt_ms))

    def on_complete(self, address: str):
        if self.completed:
            logger.warning(f"Повторное завершение ping {self.address} проигнорировано")
            return
        self.completed = True
        self.pool.completions.put_nowait(
            CompletionRecord(self.address, f"IP проверен: {self.address}")
        )


class WorkerPool:
    """Фиксированный набор воркеров поверх общей очереди адресов"""

    def __init__(self, should_stop: Callable[[], bool]):
        self._should_stop = should_stop
        self.completions: Optional[asyncio.Queue] = None
        self.responses: Optional[asyncio.Queue] = None
        self.error: Optional[ProbeTransportError] = None
        self._aborted = False
        self._tasks: List[asyncio.Task] = []

    def spawn(self, n: int, supply: WorkSupply,
              probe_fn: ProbeFunc) -> Tuple[asyncio.Queue, asyncio.Queue]:
        """
        Запуск воркеров

        Должен вызываться из работающего цикла событий.

        Args:
            n: Количество воркеров
            supply: Запечатанная очередь адресов
            probe_fn: Функция ping(address, on_success, on_complete)

        Returns:
            Кортеж (очередь завершений, очередь ответов)
        """
        if self._tasks:
            raise RuntimeError("воркеры уже запущены")
        if not supply.sealed:
            raise RuntimeError("очередь адресов должна быть запечатана до старта воркеров")

        capacity = max(supply.capacity, 1)
        self.completions = asyncio.Queue(maxsize=capacity)
        self.responses = asyncio.Queue(maxsize=capacity)

        count = resolve_worker_count(n, supply.capacity)
        for worker_id in range(count):
            if self._should_stop() or len(supply) == 0:
                break
            task = asyncio.ensure_future(self._worker(worker_id, supply, probe_fn))
            self._tasks.append(task)

        logger.debug(f"Запущено воркеров: {len(self._tasks)}/{count}")
        return self.completions, self.responses

    @property
    def worker_count(self) -> int:
        return len(self._tasks)

    @property
    def finished(self) -> bool:
        """Все воркеры завершились"""
        return all(task.done() for task in self._tasks)

    @property
    def aborted(self) -> bool:
        return self._aborted

    def _abort(self, error: ProbeTransportError):
        if self.error is None:
            self.error = error
            logger.error(f"Сканирование прервано: {error}")
        self._aborted = True

    async def _worker(self, worker_id: int, supply: WorkSupply, probe_fn: ProbeFunc):
        while not (self._should_stop() or self._aborted):
            address = supply.take()
            if address is None:
                break

            session = _ProbeSession(self, address)
            try:
                await probe_fn(address, session.on_success, session.on_complete)
            except ProbeTransportError as e:
                self._abort(e)
                break
            except Exception as e:
                logger.error(f"Ошибка ping для {address}: {e}, адрес считается неответившим")

            if not session.completed:
                logger.warning(f"ping {address} не сообщил о завершении")
                session.on_complete(address)

        logger.debug(f"Воркер {worker_id} завершен")

    async def join(self):
        """Дождаться завершения всех воркеров"""
        if self._tasks:
            await asyncio.gather(*self._tasks)
