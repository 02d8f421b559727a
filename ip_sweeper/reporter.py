"""
Модуль для генерации отчетов
"""

from typing import List

from .config import SweeperConfig, RunStatistics, ResponseRecord


class ReportGenerator:
    """Генератор строк прогресса и итогового отчета"""

    def __init__(self, config: SweeperConfig):
        self.config = config

    @staticmethod
    def progress(stats: RunStatistics) -> str:
        """Строка промежуточной статистики"""
        return "\n".join([
            "|==== статистика ====",
            f"| Прошло времени: {stats.elapsed:.2f} сек",
            f"| Проверено IP: {stats.completed}/{stats.total} ({stats.percent_complete:.2f}%)",
            "",
        ])

    def generate(self, stats: RunStatistics, responses: List[ResponseRecord]) -> str:
        """
        Генерация итогового отчета

        Args:
            stats: Статистика прохода
            responses: Ответы в порядке получения

        Returns:
            Строка с отчетом
        """
        limit = self.config.display_limit
        report_lines = [
            "",
            f"|======== Ответы: ({len(responses)}) ========",
        ]

        for response in responses[:limit]:
            report_lines.append(f"| {response.describe()}")
        if len(responses) > limit:
            report_lines.append(f"| ... {len(responses) - limit} записей скрыто.")

        report_lines.extend([
            "",
            "|======== Статистика: ========",
            f"| Всего отправлено запросов: {stats.completed}",
            f"| Всего получено ответов: {stats.responded}/{stats.completed} "
            f"({stats.response_rate:.2f}%)",
            f"| Сканирование заняло {stats.elapsed:.2f} сек",
        ])

        return "\n".join(report_lines)
