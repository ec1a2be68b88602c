from __future__ import annotations

import logging
import threading
from typing import Optional

import plotly.graph_objects as go

from rank_viewer.core.chart import ChartAdapter, LayoutOptions
from rank_viewer.core.dataset import RankedItem
from rank_viewer.core.exceptions import RenderError
from rank_viewer.core.preview import ImageResolver, ModalImageGateway
from rank_viewer.core.selection import SelectionController
from rank_viewer.core.store import RankedItemStore, StoreChange

logger = logging.getLogger(__name__)


class RankingSession:
    """
    Explicit wiring of the ranking pipeline for one dashboard session:

        store -> (projection) -> chart adapter
        chart events -> selection controller -> modal gateway

    The chart re-renders on every store change with the current layout
    options. A RenderError keeps the previous figure and is recorded in
    'render_error' so the UI can show a notice.

    'lock' serialises callbacks touching this session.
    """

    def __init__(self, image_base_url: Optional[str] = None, layout_options: Optional[LayoutOptions] = None):
        self.lock = threading.RLock()
        self.store = RankedItemStore()
        self.chart = ChartAdapter(default_options=layout_options)
        self.gateway = ModalImageGateway(self._lookup, ImageResolver(image_base_url))
        self.selection = SelectionController(self.store, self.gateway)
        self.render_error: Optional[str] = None

        self.store.subscribe(self._on_store_change)

    def _lookup(self, item_id: str) -> Optional[RankedItem]:
        dataset = self.store.get_snapshot().dataset
        return dataset.get(item_id) if dataset is not None else None

    @property
    def layout_options(self) -> LayoutOptions:
        return self.chart.default_options

    def set_layout_options(self, options: LayoutOptions) -> None:
        self.chart.default_options = options
        self.rerender()

    def rerender(self) -> Optional[go.Figure]:
        snapshot = self.store.get_snapshot()
        if snapshot.derived is None:
            return None
        try:
            fig = self.chart.render(
                snapshot.derived,
                generation=snapshot.generation,
                selected_id=snapshot.selection.item_id,
            )
        except RenderError as e:
            self.render_error = str(e)
            return None
        self.render_error = None
        return fig

    def _on_store_change(self, change: StoreChange) -> None:
        self.rerender()
