from __future__ import annotations

import io
from contextlib import contextmanager
from typing import Iterator

from loguru import logger


def debug_log(msg: str, depth: float) -> None:
    logger.trace(f"{' ' * int(depth * 2)}{msg}")


@contextmanager
def capture_trace(enabled: bool = True) -> Iterator[io.StringIO | None]:
    """Collect the traversal trace of this package while the block runs."""
    if not enabled:
        yield None
        return

    sink = io.StringIO()
    handler_id = logger.add(sink, level="TRACE", format="{message}", filter="tt_lib")
    try:
        yield sink
    finally:
        logger.remove(handler_id)


__all__ = ("capture_trace", "debug_log")
