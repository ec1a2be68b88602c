"""
Core domain layer: ranked dataset, filter controls and state, projection,
chart adapter and the image preview contract.

The store and selection controller live in rank_viewer.core.store and
rank_viewer.core.selection.
"""

from .dataset import Dataset, RankedItem
from .controls import ControlSet, FilterState, RangeValue
from .projection import DerivedSeries, project
from .chart import ChartAdapter, LayoutOptions, NoOp, SelectionEvent
from .preview import ImagePreviewGateway, ModalImageGateway

__all__ = [
    "Dataset",
    "RankedItem",
    "ControlSet",
    "FilterState",
    "RangeValue",
    "DerivedSeries",
    "project",
    "ChartAdapter",
    "LayoutOptions",
    "NoOp",
    "SelectionEvent",
    "ImagePreviewGateway",
    "ModalImageGateway",
]
