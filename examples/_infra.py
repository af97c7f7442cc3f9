"""Shared helpers for examples."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine


def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    logging.basicConfig(level=logging.INFO, format="   %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
