from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urljoin

from .dataset import RankedItem

logger = logging.getLogger(__name__)


class ImagePreviewGateway(ABC):
    """
    Contract to the external image overlay.

    - open(item_id): show the image of that item; a missing image is logged, never raised
    - close(): dismiss; calling it with nothing open is a no-op
    """

    @abstractmethod
    def open(self, item_id: str) -> None:
        raise NotImplementedError()

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError()


class ImageResolver:
    """
    Turns an item's image_ref into a URL the browser can load.

    Absolute URLs, root-relative paths and data: URIs pass through;
    anything else is joined onto 'base_url' (when one is configured).
    """

    PASSTHROUGH = ("http://", "https://", "data:", "/")

    def __init__(self, base_url: Optional[str] = None):
        if base_url and not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url

    def resolve(self, image_ref: str) -> str:
        if image_ref.startswith(self.PASSTHROUGH) or not self.base_url:
            return image_ref
        return urljoin(self.base_url, image_ref)


@dataclass(frozen=True)
class ModalState:
    is_open: bool = False
    item_id: Optional[str] = None
    src: Optional[str] = None
    title: str = ""


ItemLookup = Callable[[str], Optional[RankedItem]]


class ModalImageGateway(ImagePreviewGateway):
    """
    Gateway backing the dashboard's image modal.

    Holds the modal's state; the Dash layer reads 'state' after each callback
    and maps it onto the dbc.Modal props.
    """

    def __init__(self, lookup: ItemLookup, resolver: Optional[ImageResolver] = None):
        self._lookup = lookup
        self._resolver = resolver or ImageResolver()
        self._state = ModalState()

    @property
    def state(self) -> ModalState:
        return self._state

    def open(self, item_id: str) -> None:
        item = self._lookup(item_id)
        if item is None:
            logger.warning("Image preview requested for unknown item", extra={"item_id": item_id})
            self._state = ModalState()
            return

        if not item.image_ref:
            logger.warning("No image for selected item", extra={"item_id": item_id, "rank": item.rank})
            self._state = ModalState()
            return

        self._state = ModalState(
            is_open=True,
            item_id=item_id,
            src=self._resolver.resolve(item.image_ref),
            title=f"#{item.rank} · {item.item_id}",
        )
        logger.info("Image preview opened", extra={"item_id": item_id, "src": self._state.src})

    def close(self) -> None:
        if not self._state.is_open:
            return
        logger.info("Image preview closed", extra={"item_id": self._state.item_id})
        self._state = ModalState()
