"""
Вспомогательные утилиты
"""

import shutil
import sys
import logging

from .config import SweeperConfig


def setup_logging(config: SweeperConfig):
    """
    Настройка логирования

    Args:
        config: Конфигурация сканера
    """
    # Уровень логирования
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    # Формат сообщений
    log_format = '%(asctime)s - %(levelname)s - %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    # Очищаем существующие обработчики
    logging.getLogger().handlers.clear()

    # Создаем форматтер
    formatter = logging.Formatter(log_format, date_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Файловый обработчик
    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    # Консольный обработчик
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # Отключаем логирование для некоторых библиотек
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def print_banner():
    """Печать баннера при запуске"""
    banner = """
    ╔══════════════════════════════════════════════════════╗
    ║          СКАНЕР ДИАПАЗОНОВ IP-АДРЕСОВ                ║
    ║          Проверка доступности по ICMP echo           ║
    ╚══════════════════════════════════════════════════════╝
    """
    print(banner)


def print_summary(config: SweeperConfig, descriptor: str):
    """
    Печать сводки перед началом сканирования

    Args:
        config: Конфигурация сканера
        descriptor: Диапазон адресов
    """
    print(f"\n{'='*60}")
    print("НАСТРОЙКИ СКАНИРОВАНИЯ:")
    print(f"  Диапазон: {descriptor}")
    print(f"  Воркеров: {config.workers}")
    print(f"  Одновременных ping: {config.concurrent_limit}")
    print(f"  Таймаут ping: {config.timeout} сек")
    print(f"  Файл результатов: {config.output_file or 'не сохраняется'}")
    print(f"  Подробный вывод: {'Да' if config.verbose else 'Нет'}")
    print(f"{'='*60}\n")


def validate_environment() -> bool:
    """
    Проверка окружения

    Returns:
        True если команда ping доступна
    """
    if shutil.which('ping') is None:
        print("Ошибка: Команда 'ping' не найдена")
        print("Убедитесь, что ping установлен в системе")
        return False
    return True
