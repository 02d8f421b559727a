"""
Главный модуль сканера диапазонов IP-адресов
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import ConfigLoader, SweeperConfig, DEFAULT_WORKERS
from .errors import InvalidRangeError, OutputSinkError, ProbeTransportError
from .range_parser import RangeDescriptor
from .sink import OutputSink
from .sweeper import RangeSweeper
from .utils import (
    setup_logging,
    print_banner,
    print_summary,
    validate_environment
)

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Парсинг аргументов командной строки"""
    parser = argparse.ArgumentParser(
        prog='ip-sweeper',
        description='Проверка доступности всех адресов диапазона IPv4 по ICMP echo',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Диапазон задается по октетам: 0-255.0-255.0-255.0-255
Одиночное значение октета допустимо: 192.168.0-3.1-254

Примеры использования:
  ip-sweeper 10.0.0.1-254
  ip-sweeper -v -t 256 192.168.1-2.0-255
  sudo ip-sweeper -o alive.txt 10.0-3.0-255.0-255
        """
    )

    parser.add_argument(
        'range',
        help='Диапазон IP-адресов в формате A1-A2.B1-B2.C1-C2.D1-D2'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        default=None,
        help='Выводить сообщение для каждого проверенного IP'
    )

    parser.add_argument(
        '--output', '-o',
        help='Файл для списка ответивших IP, по одному на строку (по умолчанию: не сохранять)'
    )

    parser.add_argument(
        '--threads', '-t',
        type=int,
        help=f'Количество одновременных воркеров, должно быть > 0 (по умолчанию: {DEFAULT_WORKERS})'
    )

    parser.add_argument(
        '--concurrent-limit',
        type=int,
        help='Максимум одновременно запущенных процессов ping (по умолчанию: 100)'
    )

    parser.add_argument(
        '--config', '-c',
        help='Файл конфигурации (JSON/YAML)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        help='Таймаут ping в секундах (по умолчанию: 1)'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Уровень логирования (по умолчанию: INFO)'
    )

    parser.add_argument(
        '--log-file',
        help='Файл журнала (по умолчанию: только консоль)'
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace):
    """Конфигурация из файла с учетом аргументов командной строки"""
    config = ConfigLoader.load(args.config)

    overrides = {
        'verbose': args.verbose,
        'output_file': args.output,
        'workers': args.threads,
        'concurrent_limit': args.concurrent_limit,
        'timeout': args.timeout,
        'log_level': args.log_level,
        'log_file': args.log_file,
    }
    data = config.to_dict()
    data.update({key: value for key, value in overrides.items() if value is not None})
    config = SweeperConfig.from_dict(data)

    if config.workers <= 0:
        print(f"Количество воркеров не больше 0, используется значение по умолчанию {DEFAULT_WORKERS}")
        config.workers = DEFAULT_WORKERS

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Основная функция, возвращает код выхода"""
    args = parse_arguments(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Ошибка конфигурации: {e}")
        return 1

    setup_logging(config)
    logger.debug(f"Конфигурация: {config.to_dict()}")

    try:
        descriptor = RangeDescriptor.parse(args.range)
    except InvalidRangeError as e:
        print(f"Ошибка: {e}")
        return 1

    print_banner()

    if not validate_environment():
        return 1

    print_summary(config, str(descriptor))

    sweeper = RangeSweeper(config)
    try:
        result = asyncio.run(sweeper.sweep(descriptor))
    except ProbeTransportError as e:
        print(f"Ошибка: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nСканирование прервано пользователем")
        return 0

    print(sweeper.render_report(result))

    if config.output_file:
        print(f"\nСохранение IP-адресов в \"{config.output_file}\"...")
        try:
            saved = OutputSink().save(result.responded, config.output_file)
        except OutputSinkError as e:
            print(f"Ошибка: {e}")
            return 1
        except (KeyboardInterrupt, EOFError):
            print("\nСохранение отменено")
            return 0
        if saved:
            print(f"IP-адреса успешно записаны в {saved}.")

    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
