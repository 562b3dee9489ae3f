# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""StructlogAdapter — structlog setup for graphmap's mapping events.

Mapper events carry live objects (type pairs, types, skip reasons) and the
type pair of the running top-level call, bound in structlog contextvars as
``mapping``. :class:`MappingValueRenderer` turns those into plain strings so
both the console and JSON renderers can print them.
"""

from __future__ import annotations

import enum
import logging
import sys
from typing import Any

import structlog

from graphmap.config.properties.logging import LoggingProperties
from graphmap.core.config import Config
from graphmap.mapping.types import TypePair

_FORMATS = ("console", "json")


class MappingValueRenderer:
    """Structlog processor rendering types, enums and type pairs as text."""

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        return {key: self._render(value) for key, value in event_dict.items()}

    def _render(self, value: Any) -> Any:
        if isinstance(value, TypePair):
            return str(value)
        if isinstance(value, type):
            return value.__qualname__
        if isinstance(value, enum.Enum):
            return value.name
        if isinstance(value, (list, tuple)):
            return [self._render(v) for v in value]
        return value


class StructlogAdapter:
    """LoggingPort implementation over structlog and stdlib logging.

    ``graphmap.logging.level.root`` sets the root level; every other key
    under ``graphmap.logging.level`` is a logger name, e.g.
    ``graphmap.mapping: DEBUG`` to see skipped fields.
    """

    def __init__(self) -> None:
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        props = config.bind(LoggingProperties)
        fmt = str(props.format).lower()
        if fmt not in _FORMATS:
            raise ValueError(f"Unsupported graphmap.logging.format {props.format!r}; expected one of {_FORMATS}")

        levels = {name: str(level).upper() for name, level in (props.level or {}).items()}
        self._root_level = levels.pop("root", "INFO")
        self._module_levels = levels
        self._format = fmt

        structlog.configure(
            processors=self._processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=self._level(self._root_level, "root"),
            force=True,
        )
        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(self._level(level, name))

    def _processors(self) -> list[Any]:
        processors: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            MappingValueRenderer(),
        ]
        if self._format == "json":
            processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        else:
            processors.append(structlog.dev.ConsoleRenderer())
        return processors

    @staticmethod
    def _level(level: str, name: str) -> int:
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level {level!r} for logger '{name}'")
        return numeric
