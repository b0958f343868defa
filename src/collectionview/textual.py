"""Textual integration for collectionview. Opt-in: requires textual.

Mirrors a CollectionView into a ListView by replaying its change feed:
insert -> ListView.insert, remove -> ListView.pop, reset -> clear + extend.

Guarded like any widget-touching callback: skipped while the app is paused
or not running (the binding is then stale and resyncs with a full reset on
the next safe event), marshaled via call_from_thread from other threads,
NoMatches swallowed.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches
from textual.widgets import Label, ListItem

from collectionview.events import CollectionChange

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Hold back list updates during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def default_render(item) -> ListItem:
    return ListItem(Label(str(item)))


class ListViewBinding:
    """Live link between a CollectionView and a ListView. dispose() to stop."""

    def __init__(self, app, view, list_view, render=None):
        self._app = app
        self._view = view
        self._list_view = list_view
        self._render = render or default_render
        self._main = threading.get_ident()
        self._stale = False
        self._disposer = view.vector_changed.subscribe(self._on_vector_changed)

    @property
    def stale(self) -> bool:
        return self._stale

    def resync(self) -> None:
        """Rebuild the ListView from the current view contents."""
        if not is_safe(self._app):
            self._stale = True
            return
        self._stale = False
        self._dispatch(CollectionChange.RESET, 0, list(self._view))

    def dispose(self) -> None:
        if self._disposer is not None:
            self._disposer()
            self._disposer = None

    def _on_vector_changed(self, event):
        if not is_safe(self._app):
            self._stale = True
            return
        if self._stale or event.change is CollectionChange.RESET:
            self.resync()
        elif event.change is CollectionChange.ITEM_INSERTED:
            self._dispatch(event.change, event.index, [self._view[event.index]])
        else:
            self._dispatch(event.change, event.index, [])

    def _dispatch(self, change, index, items):
        # Payload is captured now; the view may move on before a marshaled call runs.
        if threading.get_ident() != self._main:
            self._app.call_from_thread(self._apply, change, index, items)
        else:
            self._apply(change, index, items)

    def _apply(self, change, index, items):
        try:
            if change is CollectionChange.RESET:
                self._list_view.clear()
                self._list_view.extend([self._render(item) for item in items])
            elif change is CollectionChange.ITEM_INSERTED:
                self._list_view.insert(index, [self._render(items[0])])
            else:
                self._list_view.pop(index)
        except NoMatches:
            pass


def bind_list_view(app, view, list_view, render=None) -> ListViewBinding:
    """Fill ``list_view`` from ``view`` and keep it in sync.

    Usage:
        binding = stx.bind_list_view(app, view, app.query_one(ListView))
        ...
        binding.dispose()
    """
    binding = ListViewBinding(app, view, list_view, render)
    binding.resync()
    return binding
