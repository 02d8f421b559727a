"""
Сохранение ответивших адресов в файл
"""

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Optional

from .errors import OutputSinkError

logger = logging.getLogger(__name__)


class OutputSink:
    """Запись списка адресов: один адрес на строку, без заголовка"""

    def __init__(self, prompt: Callable[[str], str] = input):
        self._prompt = prompt

    @staticmethod
    def render(addresses: Iterable[str]) -> str:
        return "".join(f"{address}\n" for address in addresses)

    def save(self, addresses: Iterable[str], filepath: str) -> Optional[str]:
        """
        Сохранение адресов с подтверждением перезаписи

        Args:
            addresses: Адреса в порядке получения ответов
            filepath: Путь к файлу

        Returns:
            Путь, куда записан файл, или None если пользователь отменил запись

        Raises:
            OutputSinkError: при ошибке записи или смены владельца
        """
        content = self.render(addresses)

        while True:
            path = Path(filepath)
            if not self._is_nonempty(path):
                break

            answer = self._prompt(
                f"ВНИМАНИЕ: файл {filepath} уже существует и не пуст. "
                f"Перезаписать? (y/N) > "
            ).strip().lower()
            if answer in ('y', 'yes'):
                break

            filepath = self._prompt(
                "Сохранить в другой файл? (введите имя файла или ничего для отмены) > "
            ).strip()
            if not filepath:
                logger.info("Сохранение отменено пользователем")
                return None

        self._write(path, content)
        self._transfer_ownership(path)
        logger.info(f"IP-адреса сохранены в {path}")
        return str(path)

    @staticmethod
    def _is_nonempty(path: Path) -> bool:
        try:
            return path.stat().st_size > 0
        except FileNotFoundError:
            return False
        except OSError as e:
            raise OutputSinkError(str(path), f"не удалось проверить файл: {e}") from e

    @staticmethod
    def _write(path: Path, content: str):
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise OutputSinkError(str(path), f"не удалось записать файл: {e}") from e

    @staticmethod
    def _transfer_ownership(path: Path):
        """Передать файл пользователю, запустившему sudo"""
        if os.name != 'posix' or os.geteuid() != 0:
            return

        username = os.environ.get('SUDO_USER')
        if not username:
            logger.debug("SUDO_USER не задан, владелец файла не меняется")
            return

        import pwd

        try:
            user = pwd.getpwnam(username)
        except KeyError as e:
            raise OutputSinkError(str(path), f"пользователь \"{username}\" не найден") from e

        try:
            os.chown(path, user.pw_uid, user.pw_gid)
        except OSError as e:
            raise OutputSinkError(str(path), f"не удалось сменить владельца: {e}") from e
