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
"""Composition root for the mapper."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from graphmap.config.properties.mapper import MapperProperties
from graphmap.core.config import Config
from graphmap.mapping.mapper import Mapper
from graphmap.mapping.shape_cache import TypeShapeCache

if TYPE_CHECKING:
    from graphmap.logging.port import LoggingPort


def create_mapper(
    config: Config | None = None,
    *,
    shape_cache: TypeShapeCache | None = None,
    logging_port: LoggingPort | None = None,
) -> Mapper:
    """Build a :class:`Mapper` from the ``graphmap.mapper`` config section.

    Pass *shape_cache* to share discovered shapes and custom mappings with
    other mappers owned by the same application. When *logging_port* is
    given it is configured from the ``graphmap.logging`` section first, so
    the mapper's events follow the configured levels and format.
    """
    config = config if config is not None else Config.from_file()
    if logging_port is not None:
        logging_port.configure(config)
        logger = logging_port.get_logger("graphmap.mapping")
    else:
        logger = structlog.get_logger("graphmap.mapping")

    props = config.bind(MapperProperties)
    mapper = Mapper(
        shape_cache,
        merge_only=props.merge_only,
        max_depth=props.max_depth,
        strict=props.strict,
    )
    logger.debug(
        "mapper_created",
        max_depth=props.max_depth,
        merge_only=props.merge_only,
        strict=props.strict,
        sources=config.loaded_sources,
    )
    return mapper
