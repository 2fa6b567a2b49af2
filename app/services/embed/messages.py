"""
Cross-frame messages between the widget iframe and the host page.

The widget page posts ``{"type": "passiton-widget", "action": ...}`` to its
parent. Anything that does not parse as one of the known actions is ignored,
since host pages receive messages from every frame they contain.

``EmbedHost`` models what ``passiton-embed.js`` keeps per host page: which
overlays are open, the body overflow saved when the first one opened, and
iframe heights reported through resize messages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from app.utils.logger import get_logger

logger = get_logger(__name__)

MESSAGE_TYPE = "passiton-widget"


class _WidgetMessageBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: Literal["passiton-widget"] = MESSAGE_TYPE


class CloseMessage(_WidgetMessageBase):
    action: Literal["close"] = "close"


class ResizeMessage(_WidgetMessageBase):
    action: Literal["resize"] = "resize"
    height: int = Field(gt=0)
    widget_id: str = Field(alias="widgetId", min_length=1)


WidgetMessage = Annotated[
    Union[CloseMessage, ResizeMessage], Field(discriminator="action")
]
_message_adapter: TypeAdapter = TypeAdapter(WidgetMessage)


def parse_widget_message(data: Any) -> Optional[Union[CloseMessage, ResizeMessage]]:
    """Parse a ``postMessage`` payload; ``None`` for anything foreign or malformed."""
    if not isinstance(data, dict) or data.get("type") != MESSAGE_TYPE:
        return None
    try:
        return _message_adapter.validate_python(data)
    except ValidationError as exc:
        logger.debug(
            "Ignoring malformed widget message",
            action=data.get("action"),
            errors=len(exc.errors()),
        )
        return None


def close_message() -> Dict[str, Any]:
    return CloseMessage().model_dump(by_alias=True)


def resize_message(height: int, widget_id: str) -> Dict[str, Any]:
    return ResizeMessage(height=height, widget_id=widget_id).model_dump(by_alias=True)


class DismissTrigger(str, Enum):
    CLOSE_CONTROL = "close_control"
    OUTSIDE_CLICK = "outside_click"
    ESCAPE = "escape"


@dataclass
class EmbedHost:
    """Host-page embed state: overlays, saved scroll lock, iframe heights."""

    body_overflow: str = ""
    embeds: Dict[str, str] = field(default_factory=dict)
    open_modals: Set[str] = field(default_factory=set)
    open_sidebars: Set[str] = field(default_factory=set)
    iframe_heights: Dict[str, int] = field(default_factory=dict)
    _saved_overflow: Optional[str] = None

    def register(self, widget_id: str, style: str) -> None:
        self.embeds[widget_id] = style

    def _require(self, widget_id: str, style: str) -> None:
        if self.embeds.get(widget_id) != style:
            raise KeyError(f"no {style} embed {widget_id}")

    # === Modal ===

    def open_modal(self, widget_id: str) -> None:
        self._require(widget_id, "modal")
        if widget_id in self.open_modals:
            return
        if not self.open_modals:
            self._saved_overflow = self.body_overflow
            self.body_overflow = "hidden"
        self.open_modals.add(widget_id)

    def dismiss(self, trigger: DismissTrigger, widget_id: Optional[str] = None) -> List[str]:
        """
        Close modals for a dismissal gesture and return the ids closed.

        Close control and outside click act on one modal; Escape closes
        every open modal.
        """
        if trigger is DismissTrigger.ESCAPE:
            closing = sorted(self.open_modals)
        elif widget_id in self.open_modals:
            closing = [widget_id]
        else:
            closing = []
        for closed in closing:
            self.open_modals.discard(closed)
        if closing and not self.open_modals:
            self._restore_overflow()
        return closing

    # === Sidebar ===

    def toggle_sidebar(self, widget_id: str) -> bool:
        self._require(widget_id, "sidebar")
        if widget_id in self.open_sidebars:
            self.open_sidebars.discard(widget_id)
            return False
        self.open_sidebars.add(widget_id)
        return True

    def click_outside_sidebars(self) -> None:
        self.open_sidebars.clear()

    # === Messages ===

    def handle_message(self, data: Any) -> bool:
        """Apply a message posted by a widget iframe; False when ignored."""
        message = parse_widget_message(data)
        if message is None:
            return False
        if isinstance(message, CloseMessage):
            had_modal = bool(self.open_modals)
            self.open_modals.clear()
            self.open_sidebars.clear()
            if had_modal:
                self._restore_overflow()
            return True
        if message.widget_id not in self.embeds:
            return False
        self.iframe_heights[message.widget_id] = message.height
        return True

    def _restore_overflow(self) -> None:
        self.body_overflow = self._saved_overflow if self._saved_overflow is not None else ""
        self._saved_overflow = None
