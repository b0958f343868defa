"""Deferral: batched refresh of a collection view.

While at least one Deferral is outstanding, changes are recorded but the
expensive recompute is skipped. Releasing the last one runs the recompute
once, folding in everything that happened meanwhile.

Usage:
    with view.defer_refresh():
        view.filter = lambda x: x > 1
        view.sort_by(SortDescription(len))
        # nothing recomputed yet
    # one rebuild, one RESET notification here
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger("collectionview.defer")


class Deferral:
    """Handle for one suspension. Releasing it more than once is a no-op."""

    __slots__ = ("_controller", "_released")

    def __init__(self, controller: DeferralController) -> None:
        self._controller = controller
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def complete(self) -> None:
        if self._released:
            return
        self._released = True
        self._controller._release()

    def __enter__(self) -> Deferral:
        return self

    def __exit__(self, *exc_info) -> None:
        self.complete()


class DeferralController:
    """Reference-counted suspension. Nested deferrals are supported."""

    __slots__ = ("_count", "_on_release")

    def __init__(self, on_release: Callable[[], None]) -> None:
        self._count = 0
        self._on_release = on_release

    @property
    def count(self) -> int:
        return self._count

    @property
    def active(self) -> bool:
        return self._count > 0

    def begin(self) -> Deferral:
        """Enter a suspension scope. Returns the handle that ends it."""
        self._count += 1
        return Deferral(self)

    def _release(self) -> None:
        if self._count == 0:
            logger.debug("Ignoring release of an inactive deferral")
            return
        self._count -= 1
        if self._count == 0:
            self._on_release()
