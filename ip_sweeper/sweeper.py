"""
Модуль асинхронного сканирования диапазона
"""

import asyncio
import logging
from typing import Optional, Union

from .aggregator import ResultAggregator
from .cancellation import CancellationController
from .config import SweeperConfig, RunStatistics, SweepResult
from .pool import ProbeFunc, WorkerPool
from .probe import PingProbe
from .range_parser import RangeDescriptor, expand
from .reporter import ReportGenerator

logger = logging.getLogger(__name__)


class RangeSweeper:
    """Проход ping по всем адресам диапазона"""

    def __init__(self, config: SweeperConfig, probe: Optional[ProbeFunc] = None,
                 controller: Optional[CancellationController] = None,
                 install_signals: bool = True):
        self.config = config
        self.probe = probe or PingProbe(timeout=config.timeout,
                                        concurrent_limit=config.concurrent_limit)
        self.controller = controller or CancellationController(
            watchdog_timeout=config.watchdog_timeout
        )
        self.install_signals = install_signals
        self.reporter = ReportGenerator(config)

    async def sweep(self, descriptor: Union[str, RangeDescriptor]) -> SweepResult:
        """
        Сканирование диапазона

        Args:
            descriptor: Диапазон адресов

        Returns:
            Результат прохода

        Raises:
            InvalidRangeError: если диапазон некорректен
            ProbeTransportError: если ping не удалось отправить
        """
        print("Генерация списка IP...")
        supply, total = expand(descriptor)
        print(f"Список IP сформирован, сканируется адресов: {total}.")

        loop = asyncio.get_running_loop()
        if self.install_signals:
            self.controller.install_signal_handler(loop)

        stats = RunStatistics(total=total)
        pool = WorkerPool(should_stop=lambda: self.controller.stop_requested)
        progress_task = None

        try:
            completions, responses = pool.spawn(self.config.workers, supply, self.probe)
            logger.info(f"Запущено воркеров: {pool.worker_count}")

            aggregator = ResultAggregator(
                stats, completions, responses,
                should_stop=lambda: self.controller.stop_requested,
                verbose=self.config.verbose,
                poll_interval=self.config.poll_interval,
            )

            if not self.config.verbose:
                progress_task = asyncio.ensure_future(
                    aggregator.report_progress(self.reporter, self.config.progress_interval)
                )

            await aggregator.collect(pool)
            # Начатые ping завершаются сами
            await pool.join()
            aggregator.drain()
            aggregator.finish()
        finally:
            if progress_task is not None:
                progress_task.cancel()
                await asyncio.gather(progress_task, return_exceptions=True)
            self.controller.mark_stopped()
            if self.install_signals:
                self.controller.remove_signal_handler()

        if pool.error is not None:
            raise pool.error

        cancelled = stats.completed < stats.total
        if cancelled:
            logger.info(f"Сканирование остановлено досрочно: {stats.completed}/{stats.total}")
        else:
            logger.info(f"Сканирование завершено за {stats.elapsed:.1f} секунд")

        return SweepResult(
            responded=list(aggregator.responded),
            responses=list(aggregator.response_records),
            statistics=stats,
            cancelled=cancelled,
        )

    def render_report(self, result: SweepResult) -> str:
        return self.reporter.generate(result.statistics, result.responses)
