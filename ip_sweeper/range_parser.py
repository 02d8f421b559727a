"""
Модуль для разбора диапазона IP-адресов вида A1-A2.B1-B2.C1-C2.D1-D2
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Optional, Tuple

from .errors import InvalidRangeError

logger = logging.getLogger(__name__)

OCTET_MIN = 0
OCTET_MAX = 255


@dataclass(frozen=True)
class OctetRange:
    """Замкнутый интервал значений одного октета"""
    lo: int
    hi: int

    def __len__(self) -> int:
        return self.hi - self.lo + 1

    def values(self) -> range:
        return range(self.lo, self.hi + 1)


@dataclass(frozen=True)
class RangeDescriptor:
    """Описание диапазона: четыре интервала октетов"""
    octets: Tuple[OctetRange, OctetRange, OctetRange, OctetRange]

    @classmethod
    def parse(cls, text: str) -> "RangeDescriptor":
        """
        Разбор строки диапазона

        Args:
            text: Строка вида 10-10.0-0.0-1.0-1 (одиночные значения допустимы)

        Returns:
            Описание диапазона

        Raises:
            InvalidRangeError: если строка некорректна
        """
        if text is None:
            raise InvalidRangeError("", "диапазон не указан")

        components = text.strip().split('.')
        if len(components) != 4:
            raise InvalidRangeError(text, f"ожидается 4 октета, получено {len(components)}")

        octets = tuple(cls._parse_component(text, component) for component in components)
        return cls(octets=octets)

    @staticmethod
    def _parse_component(text: str, component: str) -> OctetRange:
        """Разбор одного октета: значение или интервал lo-hi"""
        bounds = component.split('-')
        if len(bounds) > 2:
            raise InvalidRangeError(text, f"лишний дефис в октете \"{component}\"")

        values = []
        for bound in bounds:
            bound = bound.strip()
            if not (bound.isascii() and bound.isdigit()):
                raise InvalidRangeError(text, f"\"{bound}\" не является числом")
            value = int(bound)
            if not OCTET_MIN <= value <= OCTET_MAX:
                raise InvalidRangeError(text, f"октет {value} вне диапазона {OCTET_MIN}-{OCTET_MAX}")
            values.append(value)

        lo, hi = values[0], values[-1]
        # Перевернутые интервалы не допускаются
        if lo > hi:
            raise InvalidRangeError(text, f"начало интервала больше конца: {lo}-{hi}")
        return OctetRange(lo, hi)

    @property
    def total(self) -> int:
        """Количество адресов в диапазоне"""
        count = 1
        for octet in self.octets:
            count *= len(octet)
        return count

    def addresses(self) -> Iterator[str]:
        """Адреса диапазона по возрастанию (a, b, c, d)"""
        a_range, b_range, c_range, d_range = self.octets
        for a in a_range.values():
            for b in b_range.values():
                for c in c_range.values():
                    for d in d_range.values():
                        yield f"{a}.{b}.{c}.{d}"

    def __str__(self) -> str:
        return '.'.join(
            str(octet.lo) if octet.lo == octet.hi else f"{octet.lo}-{octet.hi}"
            for octet in self.octets
        )


class WorkSupply:
    """
    Ограниченная очередь адресов для воркеров.

    Заполняется один раз и запечатывается до старта воркеров. Каждый адрес
    выдается ровно одному воркеру; take() возвращает None, когда очередь
    исчерпана.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._items: Deque[str] = deque()
        self._sealed = False

    def put(self, address: str):
        if self._sealed:
            raise RuntimeError("очередь адресов уже запечатана")
        if len(self._items) >= self.capacity:
            raise RuntimeError(f"очередь адресов переполнена ({self.capacity})")
        self._items.append(address)

    def seal(self):
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def take(self) -> Optional[str]:
        """Взять следующий адрес или None, если адресов больше не будет"""
        if self._items:
            return self._items.popleft()
        return None

    def __len__(self) -> int:
        return len(self._items)


def expand(descriptor) -> Tuple[WorkSupply, int]:
    """
    Развернуть диапазон в очередь адресов

    Args:
        descriptor: RangeDescriptor или строка диапазона

    Returns:
        Кортеж (очередь адресов, количество адресов)
    """
    if not isinstance(descriptor, RangeDescriptor):
        descriptor = RangeDescriptor.parse(descriptor)

    total = descriptor.total
    supply = WorkSupply(total)
    for address in descriptor.addresses():
        supply.put(address)
    supply.seal()

    logger.debug(f"Диапазон {descriptor} развернут в {total} адресов")
    return supply, total
