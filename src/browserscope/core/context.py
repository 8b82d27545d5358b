"""Browsing context handles and the per-session context tree.

A ContextHandle identifies one logical browsing context: a top-level window
or a frame nested in one. Handles point to their parent by scope id only;
the ContextTree owning them is the single place that resolves ids to
handles, so no reference cycles are created between contexts.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass

from browserscope.core.states import ContextStateMachine
from browserscope.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class ContextHandle:
    """Identity and lineage of one browsing context.

    Attributes:
        scope_id: Unique id of the context, stable for its lifetime.
        window_handle: Native handle of the window the context lives in.
            Frames carry their ancestor window's handle.
        parent_id: Scope id of the enclosing document, None for windows.
        frame_locator: Selector entering this frame from its parent,
            None for windows.
    """

    scope_id: str
    window_handle: str
    parent_id: str | None = None
    frame_locator: str | None = None

    def __post_init__(self) -> None:
        """Validate that frames have both a parent and a locator."""
        if (self.parent_id is None) != (self.frame_locator is None):
            raise ConfigurationError(
                "parent_id and frame_locator must be given together"
            )
        if self.parent_id == self.scope_id:
            raise ConfigurationError("A context cannot be its own parent")

    @property
    def is_root(self) -> bool:
        """Whether this is a top-level window context."""
        return self.parent_id is None

    @property
    def is_frame(self) -> bool:
        """Whether this context is a frame inside another document."""
        return self.frame_locator is not None

    def describe(self) -> str:
        """Return a short human-readable description for logs and errors."""
        if self.is_frame:
            return f"frame '{self.frame_locator}' ({self.scope_id[:8]})"
        return f"window {self.window_handle} ({self.scope_id[:8]})"


def new_scope_id() -> str:
    """Generate a fresh scope id."""
    return uuid.uuid4().hex


class ContextTree:
    """Registry of the contexts belonging to one browser session.

    Holds every handle created for the session together with its lifecycle
    state machine. Handles are never removed: a closed window's contexts end
    up in the lost state instead.
    """

    def __init__(self) -> None:
        self._handles: dict[str, ContextHandle] = {}
        self._states: dict[str, ContextStateMachine] = {}

    def __contains__(self, handle: object) -> bool:
        if isinstance(handle, ContextHandle):
            return handle.scope_id in self._handles
        return handle in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[ContextHandle]:
        return iter(self._handles.values())

    def _add(self, handle: ContextHandle) -> ContextHandle:
        self._handles[handle.scope_id] = handle
        self._states[handle.scope_id] = ContextStateMachine()
        return handle

    def open_window(self, window_handle: str) -> ContextHandle:
        """Create a top-level context for a native window.

        Args:
            window_handle: Native handle of the window.

        Returns:
            The new root handle.
        """
        if not window_handle:
            raise ConfigurationError("window_handle is required for a window context")
        return self._add(ContextHandle(scope_id=new_scope_id(), window_handle=window_handle))

    def open_frame(self, parent: ContextHandle, frame_locator: str) -> ContextHandle:
        """Create a frame context nested in ``parent``.

        Args:
            parent: Handle of the document containing the frame element.
            frame_locator: Selector of the frame element within ``parent``.

        Returns:
            The new frame handle, living in the parent's window.

        Raises:
            ConfigurationError: If the parent is unknown or the locator empty.
        """
        if parent not in self:
            raise ConfigurationError(f"Unknown parent context {parent.scope_id}")
        if not frame_locator:
            raise ConfigurationError("frame_locator is required for a frame context")
        return self._add(
            ContextHandle(
                scope_id=new_scope_id(),
                window_handle=parent.window_handle,
                parent_id=parent.scope_id,
                frame_locator=frame_locator,
            )
        )

    def get(self, scope_id: str) -> ContextHandle:
        """Return the handle registered under ``scope_id``.

        Raises:
            ConfigurationError: If no such context exists in this tree.
        """
        try:
            return self._handles[scope_id]
        except KeyError as e:
            raise ConfigurationError(f"Unknown context {scope_id}") from e

    def parent_of(self, handle: ContextHandle) -> ContextHandle | None:
        """Return the enclosing context, or None for a window."""
        if handle.parent_id is None:
            return None
        return self.get(handle.parent_id)

    def lineage(self, handle: ContextHandle) -> list[ContextHandle]:
        """Return the chain from the root window down to ``handle``."""
        chain = [handle]
        parent = self.parent_of(handle)
        while parent is not None:
            chain.append(parent)
            parent = self.parent_of(parent)
        chain.reverse()
        return chain

    def root_of(self, handle: ContextHandle) -> ContextHandle:
        """Return the window context ``handle`` lives in."""
        return self.lineage(handle)[0]

    def children_of(self, handle: ContextHandle) -> list[ContextHandle]:
        """Return the frames opened directly inside ``handle``."""
        return [h for h in self._handles.values() if h.parent_id == handle.scope_id]

    def state_of(self, handle: ContextHandle) -> ContextStateMachine:
        """Return the lifecycle state machine of ``handle``."""
        try:
            return self._states[handle.scope_id]
        except KeyError as e:
            raise ConfigurationError(f"Unknown context {handle.scope_id}") from e

    def windows(self) -> list[ContextHandle]:
        """Return all top-level contexts in creation order."""
        return [h for h in self._handles.values() if h.is_root]
