"""
Исключения сканера диапазонов
"""

from typing import Optional


class SweepError(Exception):
    """Базовая ошибка сканирования"""


class InvalidRangeError(SweepError):
    """Некорректное описание диапазона адресов"""

    def __init__(self, descriptor: str, reason: str):
        self.descriptor = descriptor
        self.reason = reason
        super().__init__(f"Некорректный диапазон IP \"{descriptor}\": {reason}")


class ProbeTransportError(SweepError):
    """Не удалось отправить ping на адрес"""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Ошибка ping для {address}: {reason}")


class WatchdogTimeoutError(SweepError):
    """Остановка не завершилась за отведенное время"""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"выполнение не остановилось в течение {timeout:g} сек после получения SIGINT"
        )


class OutputSinkError(SweepError):
    """Ошибка записи файла с результатами"""

    def __init__(self, path: Optional[str], reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Ошибка сохранения в \"{path}\": {reason}")
