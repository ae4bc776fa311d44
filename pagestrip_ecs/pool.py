"""Bounded worker pool for running pipeline calls in parallel.

Every api call is independent and holds no shared state, so calls can
run on plain threads; Pillow and NumPy release the GIL for the heavy
work. Failed calls are never retried: decoding the same bytes again
fails the same way.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable, TypeVar

from pagestrip_ecs import api
from pagestrip_ecs.components.image import ImageInfo
from pagestrip_ecs.config import load_settings

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ImagePool:
    """Thread pool dispatching api calls.

    Example:
        >>> with ImagePool(max_workers=4) as pool:
        ...     pages = pool.rearrange_many(scrambled_pages, rows=10)
    """

    def __init__(
        self,
        max_workers: int | None = None,
        config_path: str | None = None,
    ) -> None:
        """Create the pool.

        Args:
            max_workers: Worker count (defaults to config, then CPU count)
            config_path: Path to pagestrip.toml, also passed to every call
        """
        settings = load_settings(config_path)
        if max_workers is not None:
            workers = max_workers
        else:
            workers = settings.max_workers or os.cpu_count() or 1
        if workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {workers}")
        self.max_workers = workers
        self.config_path = config_path
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="pagestrip"
        )
        logger.debug("ImagePool started with %d workers", workers)

    def submit(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> Future[R]:
        """Schedule one api call; config_path is filled in unless given."""
        kwargs.setdefault("config_path", self.config_path)
        return self._executor.submit(fn, *args, **kwargs)

    def _gather(self, futures: list[Future[R]]) -> list[R]:
        # Raises the first failure in input order
        return [f.result() for f in futures]

    def info_many(self, payloads: Iterable[bytes]) -> list[ImageInfo]:
        return self._gather([self.submit(api.get_image_info, p) for p in payloads])

    def rearrange_many(self, payloads: Iterable[bytes], rows: int) -> list[bytes]:
        """Descramble every payload with the same strip count."""
        return self._gather(
            [self.submit(api.rearrange_image_rows, p, rows) for p in payloads]
        )

    def crop_many(
        self,
        payloads: Iterable[bytes],
        x: int,
        y: int,
        width: int,
        height: int,
    ) -> list[bytes]:
        """Crop the same rectangle out of every payload."""
        return self._gather(
            [self.submit(api.crop_image, p, x, y, width, height) for p in payloads]
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> ImagePool:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return f"ImagePool(max_workers={self.max_workers})"
