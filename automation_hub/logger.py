"""Lightweight logging helper shared by the dispatcher and its adapters."""

from __future__ import annotations

import logging
from typing import Any

from automation_hub.config import CONFIG

_LOGGER = logging.getLogger("automation_hub")


def _coerce(parts: tuple[object, ...]) -> str:
    rendered = " ".join(str(part) for part in parts if part is not None)
    return rendered.strip()


def _is_system_message(message: str) -> bool:
    prefixes = getattr(CONFIG, "system_log_prefixes", ()) or ()
    return any(message.startswith(prefix) for prefix in prefixes)


def log(*parts: object, **metadata: Any) -> None:
    """
    Emit an info-level log message with optional metadata.

    Keyword arguments such as ``automation`` or ``variant`` are appended to
    the message. Messages carrying a system prefix (``[executor]``,
    ``[insights]`` ...) drop to debug level while ``SUPPRESS_SYSTEM_LOGS``
    is on.
    """

    message = _coerce(parts)
    if metadata:
        message = f"{message} | {metadata}"

    if not _LOGGER.handlers:
        logging.basicConfig(level=logging.INFO)

    if getattr(CONFIG, "suppress_system_logs", False) and _is_system_message(message):
        _LOGGER.debug(message)
        return
    _LOGGER.info(message)


__all__ = ["log"]
