"""
Модуль ping одного адреса через системную команду ping
"""

import asyncio
import errno
import ipaddress
import platform
import re
import logging
from typing import Callable, List, Optional

from .errors import ProbeTransportError

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[str, Optional[float]], None]
CompleteCallback = Callable[[str], None]

# Нехватка дескрипторов или процессов на этой машине, а не ошибка адреса
RESOURCE_ERRNOS = {errno.EMFILE, errno.ENFILE, errno.EAGAIN, errno.ENOMEM}


class PingProbe:
    """Отправка одного ICMP echo на адрес"""

    def __init__(self, timeout: float = 1.0, concurrent_limit: int = 100):
        self.timeout = timeout
        self.concurrent_limit = concurrent_limit
        self.system = platform.system().lower()
        self._semaphore = None
        self._semaphore_loop = None

    def _get_semaphore(self) -> asyncio.Semaphore:
        """Семафор, ограничивающий число одновременных процессов ping в текущем цикле"""
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.concurrent_limit)
            self._semaphore_loop = loop
        return self._semaphore

    def build_command(self, ip: str) -> List[str]:
        """Построение команды ping"""
        if self.system == 'windows':
            return [
                'ping', '-n', '1',
                '-w', str(int(self.timeout * 1000)),
                ip
            ]
        else:
            return [
                'ping', '-c', '1',
                '-W', str(max(1, int(round(self.timeout)))),
                ip
            ]

    @staticmethod
    def extract_latency(output: str) -> Optional[float]:
        """Извлечение времени отклика из вывода ping"""
        patterns = [
            r'time[=<>](\d+\.?\d*)\s*ms',  # Стандартный формат
            r'время[=<>](\d+\.?\d*)\s*мс',  # Русская локализация
        ]

        for pattern in patterns:
            matches = re.findall(pattern, output, re.IGNORECASE)
            if matches:
                return float(matches[-1])

        return None

    @staticmethod
    def _validate_address(address: str):
        try:
            ipaddress.IPv4Address(address)
        except ValueError as e:
            raise ProbeTransportError(address, f"не удалось разрешить адрес: {e}") from e

    async def __call__(self, address: str, on_success: SuccessCallback,
                       on_complete: CompleteCallback):
        await self.probe(address, on_success, on_complete)

    async def probe(self, address: str, on_success: SuccessCallback,
                    on_complete: CompleteCallback):
        """
        Ping одного адреса

        Вызывает on_success(address, rtt_ms) не более одного раза, затем
        on_complete(address) ровно один раз. Отсутствие ответа и таймаут
        не являются ошибкой. Одновременно работает не более
        concurrent_limit процессов ping.

        Raises:
            ProbeTransportError: если адрес некорректен или команда ping
                не может быть запущена (не найдена, нет прав)
        """
        self._validate_address(address)
        cmd = self.build_command(address)

        async with self._get_semaphore():
            process = await self._launch(address, cmd)
            if process is None:
                on_complete(address)
                return

            try:
                stdout, stderr = await asyncio.wait_for(
                    process.communicate(),
                    timeout=self.timeout + 1
                )
            except asyncio.TimeoutError:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
                logger.debug(f"Таймаут ping для {address}")
                on_complete(address)
                return

        if process.returncode == 0:
            output = stdout.decode('utf-8', errors='ignore')
            on_success(address, self.extract_latency(output))
        elif process.returncode != 1:
            logger.debug(f"ping {address} завершился с кодом {process.returncode}: "
                         f"{stderr.decode('utf-8', errors='ignore').strip()}")

        on_complete(address)

    async def _launch(self, address: str, cmd: List[str]):
        """
        Запуск процесса ping

        Returns:
            Процесс или None, если системе не хватило ресурсов на запуск
        """
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ProbeTransportError(address, f"не удалось запустить ping: {e}") from e
        except OSError as e:
            if e.errno not in RESOURCE_ERRNOS:
                raise ProbeTransportError(address, f"не удалось запустить ping: {e}") from e
            logger.warning(f"Не удалось запустить ping для {address}: {e}, "
                           f"адрес считается неответившим")
            return None
