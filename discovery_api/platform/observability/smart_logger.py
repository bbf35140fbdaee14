"""
Project-wide structured logging entry point.

`SmartLogger.log(level, message, category=..., params=...)` forwards to an
implementation chosen once at import:

- `PRIVATE_LOGGER_PATH` pointing at a `.py` file or an importable module that
  defines its own `SmartLogger` class with a compatible `log` classmethod;
- otherwise `ConsoleLogger`, one line per record on stdout.
"""

from __future__ import annotations

import importlib
import importlib.util
import json
import os
import traceback
from pathlib import Path
from types import ModuleType
from typing import Protocol


class _LoggerImpl(Protocol):
    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 100,
    ) -> None: ...


_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "CRITICAL": 50}
_TRUTHY = {"1", "true", "yes", "on"}

_CONSOLE_DEFAULTS = {
    "SMART_LOGGER_MIN_LEVEL": "INFO",
    "SMART_LOGGER_INCLUDE_ALL_MIN_LEVEL": "ERROR",
}


def _level_no(level: str | None) -> int:
    return _LEVELS.get((level or "").strip().upper(), _LEVELS["INFO"])


def _import_target(target: str) -> tuple[ModuleType, str]:
    path = Path(target)
    if path.is_file():
        spec = importlib.util.spec_from_file_location("private_smart_logger", str(path))
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load logger module from file: {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module, f"PRIVATE_LOGGER_PATH(file)={path}"
    return importlib.import_module(target), f"PRIVATE_LOGGER_PATH(module)={target}"


def _private_impl(target: str) -> tuple[type[_LoggerImpl], str]:
    module, source = _import_target(target)
    impl = getattr(module, "SmartLogger", None)
    if impl is None:
        raise ImportError(f"`SmartLogger` not found ({source})")
    if not callable(getattr(impl, "log", None)):
        raise TypeError(f"`SmartLogger.log` missing or not callable ({source})")
    return impl, source


class ConsoleLogger:
    """
    Default implementation: `LEVEL: [category] message | {params-json}`.

    Records below SMART_LOGGER_MIN_LEVEL are dropped. Params are printed when
    SMART_LOGGER_CONSOLE_PARAMS is truthy, and always for records at or above
    SMART_LOGGER_INCLUDE_ALL_MIN_LEVEL.
    """

    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 100,
    ) -> None:
        level_no = _level_no(level)
        if level_no < _level_no(os.getenv("SMART_LOGGER_MIN_LEVEL")):
            return

        parts = [f"{level.upper()}:"]
        if category:
            parts.append(f"[{category}]")
        parts.append(message)
        line = " ".join(parts)

        if params and cls._wants_params(level_no):
            line = f"{line} | {cls._render(params, max_inline_chars)}"
        print(line)

    @staticmethod
    def _wants_params(level_no: int) -> bool:
        if (os.getenv("SMART_LOGGER_CONSOLE_PARAMS") or "").strip().lower() in _TRUTHY:
            return True
        return level_no >= _level_no(os.getenv("SMART_LOGGER_INCLUDE_ALL_MIN_LEVEL", "ERROR"))

    @staticmethod
    def _render(params: dict, limit: int) -> str:
        rendered = json.dumps(params, ensure_ascii=False, default=str)
        if limit and len(rendered) > limit:
            return f"{rendered[:limit]}... (+{len(rendered) - limit} chars)"
        return rendered


def _resolve_impl() -> tuple[type[_LoggerImpl], str]:
    target = (os.getenv("PRIVATE_LOGGER_PATH") or "").strip()
    if target:
        return _private_impl(target)
    for key, value in _CONSOLE_DEFAULTS.items():
        os.environ.setdefault(key, value)
    return ConsoleLogger, "console"


_IMPL, _IMPL_SOURCE = _resolve_impl()


class SmartLogger:
    """
    Always log through this class:

        from discovery_api.platform.observability.smart_logger import SmartLogger
        SmartLogger.log("INFO", "Canvas loaded.", category="canvas.store.load.done", params={...})
    """

    impl_source: str = _IMPL_SOURCE

    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 200,
    ) -> None:
        try:
            _IMPL.log(level, message, category=category, params=params, max_inline_chars=max_inline_chars)
        except Exception:
            # Logging failures never propagate to the caller.
            prefix = f"[{category}] " if category else ""
            print(f"{level}: {prefix}{message}")
            print(f"LOGGER_ERROR: {traceback.format_exc()}")
