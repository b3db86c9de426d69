from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type, Union
import logging

logger = logging.getLogger(__name__)


class AnnotationMode(str, Enum):
    NONE = 'none'            # neutral: viewer pans, annotations are clickable
    HIGHLIGHT = 'highlight'
    UNDERLINE = 'underline'


# ---- Commands ----

@dataclass(frozen=True)
class SetModeCommand:
    mode: AnnotationMode


@dataclass(frozen=True)
class UndoCommand:
    pass


@dataclass(frozen=True)
class ClosePopupCommand:
    pass


Command = Union[SetModeCommand, UndoCommand, ClosePopupCommand]

MODE_KEYS: Dict[str, AnnotationMode] = {
    'h': AnnotationMode.HIGHLIGHT,
    'u': AnnotationMode.UNDERLINE,
    '0': AnnotationMode.NONE,
}


class CommandDispatcher:
    """Routes each command to the one handler registered for its type."""

    def __init__(self):
        self._handlers: Dict[Type, Callable[[Any], Any]] = {}

    def register(self, command_type: Type, handler: Callable[[Any], Any]):
        self._handlers[command_type] = handler

    def dispatch(self, command: Command):
        handler = self._handlers.get(type(command))
        if handler is None:
            raise LookupError(f"No handler registered for {type(command).__name__}")
        return handler(command)


class ModeStateMachine:
    """Current interaction mode and the gates derived from it.

    ``revert_after_selection`` selects the policy after a selection produced
    annotations: stay in the chosen mode (default) or fall back to neutral.
    """

    def __init__(self, revert_after_selection: bool = False):
        self.mode = AnnotationMode.NONE
        self.revert_after_selection = revert_after_selection
        self._listeners: list[Callable[[AnnotationMode], None]] = []

    def on_change(self, listener: Callable[[AnnotationMode], None]):
        self._listeners.append(listener)

    def set_mode(self, mode: Union[AnnotationMode, str]) -> bool:
        mode = AnnotationMode(mode)
        if mode == self.mode:
            return False
        logger.debug("Annotation mode %s -> %s", self.mode.value, mode.value)
        self.mode = mode
        for listener in list(self._listeners):
            listener(mode)
        return True

    def selection_completed(self):
        if self.revert_after_selection:
            self.set_mode(AnnotationMode.NONE)

    # ---- Gates ----
    @property
    def maps_selections(self) -> bool:
        return self.mode in (AnnotationMode.HIGHLIGHT, AnnotationMode.UNDERLINE)

    @property
    def selection_tool(self) -> str:
        return 'hand' if self.mode == AnnotationMode.NONE else 'text'

    @property
    def annotation_hit_targets(self) -> bool:
        return self.mode == AnnotationMode.NONE

    # ---- Keyboard ----
    @staticmethod
    def command_for_key(key: str, ctrl: bool = False, meta: bool = False, alt: bool = False,
                        shift: bool = False, in_text_input: bool = False) -> Optional[Command]:
        """Translate a key press into a command, or None when it is not a shortcut.

        Escape is honoured while typing so the note editor can be closed; every
        other shortcut is left to the text input. Shift+Ctrl/Cmd+Z is redo, which
        is not bound.
        """
        if key == 'Escape' and not (ctrl or meta or alt):
            return ClosePopupCommand()
        if in_text_input:
            return None
        if (ctrl or meta) and not alt and not shift and key.lower() == 'z':
            return UndoCommand()
        if ctrl or meta or alt:
            return None
        mode = MODE_KEYS.get(key)
        return SetModeCommand(mode) if mode is not None else None
