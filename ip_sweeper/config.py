"""
Модуль конфигурации и моделей данных
"""

import json
import time
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, Optional, List
import logging

import yaml

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8192


@dataclass
class SweeperConfig:
    """Конфигурация сканера с валидацией"""

    # Параметры ping
    timeout: float = 1.0

    # Параметры производительности
    workers: int = DEFAULT_WORKERS
    concurrent_limit: int = 100

    # Остановка и отчеты
    progress_interval: float = 5.0
    watchdog_timeout: float = 5.0
    poll_interval: float = 0.2
    display_limit: int = 25

    # Настройки вывода
    verbose: bool = False
    output_file: Optional[str] = None
    log_file: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self):
        """Валидация значений после инициализации"""
        self._validate_values()

    def _validate_values(self):
        """Проверка корректности значений"""
        for name in ("workers", "concurrent_limit", "display_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} должен быть целым числом, получено: {value!r}")
        for name in ("timeout", "progress_interval", "watchdog_timeout", "poll_interval"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} должен быть числом, получено: {value!r}")

        if self.concurrent_limit <= 0:
            raise ValueError("concurrent_limit должен быть положительным числом")
        if self.timeout <= 0:
            raise ValueError("timeout должен быть положительным числом")
        if self.progress_interval <= 0:
            raise ValueError("progress_interval должен быть положительным числом")
        if self.watchdog_timeout <= 0:
            raise ValueError("watchdog_timeout должен быть положительным числом")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval должен быть положительным числом")
        if self.display_limit < 0:
            raise ValueError("display_limit не может быть отрицательным")

        # Проверка log_level
        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if not isinstance(self.log_level, str) or self.log_level.upper() not in valid_log_levels:
            raise ValueError(f"log_level должен быть одним из: {valid_log_levels}")

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SweeperConfig":
        """Создание из словаря, неизвестные ключи игнорируются"""
        known = {name for name in cls.__dataclass_fields__}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Неизвестные параметры конфигурации: {', '.join(sorted(unknown))}")
        return cls(**{key: value for key, value in data.items() if key in known})


class ConfigLoader:
    """Загрузчик конфигурации"""

    CONFIG_FILES = [
        "ip_sweeper.yaml",
        "ip_sweeper.json",
        "config/ip_sweeper.yaml",
    ]

    DEFAULT_CONFIG = SweeperConfig().to_dict()

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> SweeperConfig:
        """
        Загрузка конфигурации

        Args:
            config_path: Путь к файлу конфигурации (опционально)

        Returns:
            Объект конфигурации
        """
        config_dict = dict(cls.DEFAULT_CONFIG)

        found_config = cls._find_config_file(config_path)

        if found_config:
            try:
                user_config = cls._load_config_file(found_config)
                config_dict.update(user_config)
                logger.info(f"Загружена конфигурация из {found_config}")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Ошибка загрузки конфигурации: {e}")
                logger.info("Используются значения по умолчанию")
        elif config_path:
            logger.warning(f"Файл конфигурации не найден: {config_path}")
        else:
            logger.debug("Конфигурационный файл не найден, используются значения по умолчанию")

        return SweeperConfig.from_dict(config_dict)

    @classmethod
    def _find_config_file(cls, config_path: Optional[str] = None) -> Optional[Path]:
        """Поиск файла конфигурации"""
        if config_path:
            path = Path(config_path)
            if path.exists():
                return path
            return None

        for config_file in cls.CONFIG_FILES:
            path = Path(config_file)
            if path.exists():
                return path

        return None

    @staticmethod
    def _load_config_file(filepath: Path) -> Dict[str, Any]:
        """Загрузка конфигурации из JSON или YAML файла"""
        with open(filepath, 'r', encoding='utf-8') as f:
            if filepath.suffix.lower() in ('.yaml', '.yml'):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"ожидался словарь параметров, получено: {type(data).__name__}")
        return data


@dataclass(frozen=True)
class CompletionRecord:
    """Ping адреса завершен (ответ или таймаут)"""
    address: str
    status: str


@dataclass(frozen=True)
class ResponseRecord:
    """Получен ответ от адреса"""
    address: str
    rtt_ms: Optional[float] = None

    def describe(self) -> str:
        rtt = f"{self.rtt_ms:.2f} мс" if self.rtt_ms is not None else "неизвестно"
        return f"[ПОЛУЧЕН ОТВЕТ] IP: {self.address}, RTT: {rtt}"


@dataclass
class RunStatistics:
    """Статистика сканирования"""
    total: int = 0
    completed: int = 0
    responded: int = 0
    start_time: float = field(default_factory=time.monotonic)
    end_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        """Прошедшее время в секундах"""
        end = self.end_time if self.end_time is not None else time.monotonic()
        return end - self.start_time

    @property
    def percent_complete(self) -> float:
        """Процент проверенных адресов"""
        if self.total == 0:
            return 0.0
        return (self.completed / self.total) * 100

    @property
    def response_rate(self) -> float:
        """Процент ответивших адресов"""
        if self.completed == 0:
            return 0.0
        return (self.responded / self.completed) * 100

    def finish(self):
        if self.end_time is None:
            self.end_time = time.monotonic()


@dataclass
class SweepResult:
    """Итог одного прохода по диапазону"""
    responded: List[str]
    responses: List[ResponseRecord]
    statistics: RunStatistics
    cancelled: bool = False
