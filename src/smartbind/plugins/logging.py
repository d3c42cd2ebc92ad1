"""Logging plugin (source of truth).

Rebuild behaviour exactly as described; no hidden defaults beyond this text.

Responsibilities
----------------
- Wrap each argument resolution and emit configurable messages:
  * ``before`` (default True): ``"{target} bind start"``
  * ``after`` (default True): ``"{target} bind end (<ms> ms)"`` with elapsed
    time in milliseconds and ``{elapsed:.2f}`` formatting.
  * ``skipped`` (default True): one warning per omitted slot,
    ``"{target} bind skipped #<position> (<kind>)"``.
- Sinks:
  * when ``print`` is true → always ``print(message)``;
  * else when ``log`` is true → ``logger.info``/``logger.warning`` if the
    logger reports handlers via ``hasHandlers()``, otherwise ``print(message)``
    to avoid drops;
  * else → no output.
- Use a provided ``logging.Logger`` (default ``logging.getLogger("smartbind")``).

Configuration
-------------
Accepted keys (resolver-level or per-target ``"Owner.method"``): ``enabled``,
``before``, ``after``, ``skipped``, ``log``, ``print``; also via ``flags``
(e.g. ``"before:off,skipped:on"``).

Exceptions propagate; the end message is skipped when resolution raises.

Registration
------------
At module import, the plugin registers itself globally as ``"logging"``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from smartbind.core.resolver import ArgumentResolver, Resolution
from smartbind.plugins._base_plugin import BasePlugin


class LoggingPlugin(BasePlugin):
    """Logs argument resolution with timing and skipped slots."""

    plugin_code = "logging"
    plugin_description = "Logs argument resolution with timing"

    __slots__ = ("_logger",)

    def __init__(self, resolver, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("smartbind")
        super().__init__(resolver, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        skipped: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options.

        The wrapper added by __init_subclass__ handles writing to store.
        """
        pass

    def _emit(self, message: str, *, cfg: Optional[dict] = None, level: int = logging.INFO):
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            logger = self._logger
            has_handlers = getattr(logger, "hasHandlers", None) or getattr(
                logger, "has_handlers", None
            )
            can_log = callable(has_handlers) and has_handlers()
            if not can_log:
                print(message)
            elif level >= logging.WARNING:
                logger.warning(message)
            else:
                logger.info(message)

    def wrap_resolve(self, resolver, call_next: Callable):
        """Wrap resolution with start/end logging and timing."""

        async def logged(resolution: Resolution) -> Resolution:
            target = resolution.target
            cfg = self._effective_config(target)
            if not cfg["enabled"]:
                return await call_next(resolution)
            if cfg["before"]:
                self._emit(f"{target} bind start", cfg=cfg)
            t0 = time.perf_counter()
            result = await call_next(resolution)
            elapsed = (time.perf_counter() - t0) * 1000
            if cfg["skipped"]:
                for descriptor in result.skipped:
                    self._emit(
                        f"{target} bind skipped #{descriptor.position} ({descriptor.kind_name})",
                        cfg=cfg,
                        level=logging.WARNING,
                    )
            if cfg["after"]:
                self._emit(f"{target} bind end ({elapsed:.2f} ms)", cfg=cfg)
            return result

        return logged

    def _effective_config(self, target: str) -> dict:
        defaults = {
            "enabled": True,
            "before": True,
            "after": True,
            "skipped": True,
            "log": True,
            "print": False,
        }
        cfg = defaults | self.configuration(target)

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


ArgumentResolver.register_plugin(LoggingPlugin)
