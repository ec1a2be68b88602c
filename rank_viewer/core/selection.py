from __future__ import annotations

import logging
from typing import Optional, Union

from .chart import NoOp, SelectionEvent
from .preview import ImagePreviewGateway
from .store import RankedItemStore, SelectionState, StoreChange

logger = logging.getLogger(__name__)


class SelectionController:
    """
    Idle / Selected(item_id) state machine between the chart and the image preview.

    The selection itself lives in the store (so it is part of every snapshot and
    is dropped by the store on reload or when filtered out); this controller
    turns chart events into store selections and mirrors each transition onto
    the gateway:

    - entering Selected(id) opens the preview for id
    - leaving to Idle closes it
    - switching Selected(a) -> Selected(b) closes a's preview, then opens b's,
      so every open is matched by exactly one close
    """

    def __init__(self, store: RankedItemStore, gateway: ImagePreviewGateway):
        self._store = store
        self._gateway = gateway
        self._open_id: Optional[str] = None
        self._unsubscribe = store.subscribe(self._on_store_change)

    @property
    def state(self) -> SelectionState:
        return self._store.selection

    def handle(self, event: Union[SelectionEvent, NoOp]) -> SelectionState:
        """Apply a normalised chart event; NoOp leaves the state untouched."""
        if isinstance(event, SelectionEvent):
            self.select(event.item_id)
        return self.state

    def select(self, item_id: str) -> bool:
        return self._store.select(item_id)

    def deselect(self) -> None:
        self._store.clear_selection()

    def detach(self) -> None:
        """Stop following the store and release any open preview."""
        self._unsubscribe()
        self._sync(None)

    def _on_store_change(self, change: StoreChange) -> None:
        self._sync(change.snapshot.selection.item_id)

    def _sync(self, target: Optional[str]) -> None:
        if target == self._open_id:
            return

        if self._open_id is not None:
            logger.debug("Closing preview", extra={"item_id": self._open_id})
            self._open_id = None
            self._gateway.close()

        if target is not None:
            logger.debug("Opening preview", extra={"item_id": target})
            self._open_id = target
            self._gateway.open(target)
