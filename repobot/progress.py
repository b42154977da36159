"""Progress display for the long-running phases of a run."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, List, Sequence, TypeVar

from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from .logging import console

T = TypeVar("T")

_LABEL_WIDTH = 40


async def gather_with_progress(
    awaitables: Sequence[Awaitable[T]],
    label: str,
    *,
    enabled: bool = True,
    return_exceptions: bool = False,
) -> List[Any]:
    """Like ``asyncio.gather`` but ticks a progress bar as each awaitable settles.

    The bar advances on failures too, so it always reaches the total.
    """
    with Progress(
        TextColumn(f"{label:<{_LABEL_WIDTH}}"),
        BarColumn(bar_width=45),
        TaskProgressColumn(),
        console=console,
        disable=not enabled,
        transient=False,
    ) as progress:
        task_id = progress.add_task(label, total=len(awaitables))

        async def _tracked(awaitable: Awaitable[T]) -> T:
            try:
                return await awaitable
            finally:
                progress.advance(task_id)

        return await asyncio.gather(
            *(_tracked(awaitable) for awaitable in awaitables),
            return_exceptions=return_exceptions,
        )


__all__ = ["gather_with_progress"]
