"""collectionview: live filtered, sorted and grouped views over mutable collections."""

from importlib.metadata import version as _version

__version__ = _version("collectionview")

from collectionview.sorting import SortDescription, SortDirection, CompositeComparator, natural_compare
from collectionview.observable import (
    ListChange,
    ListChangeAction,
    ObservableList,
    ObservableSequence,
    SupportsIncrementalLoading,
)
from collectionview.events import CollectionChange, EventStream, PropertyChangedEvent, VectorChangedEvent
from collectionview.groups import CollectionGroup, GroupIndex
from collectionview.defer import Deferral, DeferralController
from collectionview.view import CollectionView
# textual NOT auto-imported, opt-in only

__all__ = [
    "SortDescription",
    "SortDirection",
    "CompositeComparator",
    "natural_compare",
    "ListChange",
    "ListChangeAction",
    "ObservableList",
    "ObservableSequence",
    "SupportsIncrementalLoading",
    "CollectionChange",
    "EventStream",
    "PropertyChangedEvent",
    "VectorChangedEvent",
    "CollectionGroup",
    "GroupIndex",
    "Deferral",
    "DeferralController",
    "CollectionView",
]
