"""
Сбор результатов воркеров и статистика прохода
"""

import asyncio
import logging
from typing import Callable, List, Optional

from .config import CompletionRecord, ResponseRecord, RunStatistics
from .pool import WorkerPool
from .reporter import ReportGenerator

logger = logging.getLogger(__name__)


class ResultAggregator:
    """
    Единственный владелец счетчиков прохода.

    Счетчики меняются только по записям из очередей завершений и ответов.
    """

    def __init__(self, stats: RunStatistics, completions: asyncio.Queue,
                 responses: asyncio.Queue, should_stop: Callable[[], bool],
                 verbose: bool = False, poll_interval: float = 0.2):
        self.stats = stats
        self.completions = completions
        self.responses = responses
        self._should_stop = should_stop
        self.verbose = verbose
        self.poll_interval = poll_interval
        self.responded: List[str] = []
        self.response_records: List[ResponseRecord] = []
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def _handle_completion(self, record: CompletionRecord):
        self.stats.completed += 1
        if self.verbose:
            print(record.status)

    def _handle_response(self, record: ResponseRecord):
        self.stats.responded += 1
        self.responded.append(record.address)
        self.response_records.append(record)
        if self.verbose:
            print(record.describe())

    def drain(self):
        """Забрать все уже накопленные записи без ожидания"""
        # Ответ по адресу всегда приходит раньше его завершения
        while not self.responses.empty():
            self._handle_response(self.responses.get_nowait())
        while not self.completions.empty():
            self._handle_completion(self.completions.get_nowait())
        while not self.responses.empty():
            self._handle_response(self.responses.get_nowait())

    async def collect(self, pool: WorkerPool):
        """
        Сбор записей до завершения всех адресов, запроса остановки или
        завершения всех воркеров
        """
        while self.stats.completed < self.stats.total:
            if self._should_stop() or pool.aborted or pool.finished:
                break
            try:
                record = await asyncio.wait_for(self.completions.get(),
                                                timeout=self.poll_interval)
            except asyncio.TimeoutError:
                continue
            while not self.responses.empty():
                self._handle_response(self.responses.get_nowait())
            self._handle_completion(record)

        self.drain()

    def finish(self):
        self._finished = True
        self.stats.finish()

    async def report_progress(self, reporter: ReportGenerator, interval: float,
                              output: Optional[Callable[[str], None]] = None):
        """Периодический вывод прогресса до окончания прохода"""
        output = output or print
        while not self._finished:
            await asyncio.sleep(interval)
            if self._finished:
                break
            output(reporter.progress(self.stats))
