"""Scope activation: keeping the driver's live pointer on the right context.

The driver has a single window/frame pointer, while a test may hold sessions
for several contexts at once. Before every operation a session asks the
ScopeActivator to point the driver at its own context. The activator
remembers which context it activated last (the active scope marker) and
skips all driver calls when nothing has to change.
"""

from __future__ import annotations

import logging

from browserscope.core.context import ContextHandle, ContextTree
from browserscope.core.protocols import DriverProtocol
from browserscope.utils.exceptions import (
    ContextLostError,
    NoSuchFrameError,
    NoSuchWindowError,
)

logger = logging.getLogger(__name__)


class ScopeActivator:
    """Reconciles the driver's live pointer with the desired context.

    One activator exists per root browser session; frame and window sessions
    derived from it share it, together with the session's ContextTree.

    Attributes:
        driver: The driver whose pointer is managed.
        tree: Registry of the session's contexts.
    """

    def __init__(self, driver: DriverProtocol, tree: ContextTree) -> None:
        self.driver = driver
        self.tree = tree
        self._active_scope: str | None = None
        self._current: ContextHandle | None = None

    @property
    def active_scope(self) -> str | None:
        """Scope id of the context the driver points at, if known."""
        return self._active_scope

    def is_active(self, handle: ContextHandle) -> bool:
        """Whether the driver is known to point at ``handle``."""
        return self._active_scope == handle.scope_id

    def invalidate(self) -> None:
        """Forget where the driver points.

        Used when raw driver access is handed out; the next activation
        re-enters the full context chain.
        """
        if self._active_scope is not None:
            logger.debug(f"Active scope {self._active_scope[:8]} invalidated")
        self._active_scope = None

    def activate(self, handle: ContextHandle) -> None:
        """Point the driver at ``handle`` with as few switches as possible.

        Args:
            handle: The context the next driver operation must run against.

        Raises:
            ContextLostError: If the context's window or frame no longer
                exists, now or during an earlier activation.
        """
        if self._active_scope == handle.scope_id:
            return

        state = self.tree.state_of(handle)
        if state.is_lost:
            raise ContextLostError(
                handle.scope_id, handle.window_handle, "context was lost earlier"
            )

        try:
            self._enter(handle)
        except ContextLostError as e:
            self._active_scope = None
            self._mark_lost(handle)
            if e.scope_id == handle.scope_id:
                raise
            raise ContextLostError(handle.scope_id, handle.window_handle, str(e)) from e
        except (NoSuchWindowError, NoSuchFrameError) as e:
            self._active_scope = None
            self._mark_lost(handle)
            raise ContextLostError(handle.scope_id, handle.window_handle, str(e)) from e
        except Exception:
            self._active_scope = None
            raise

        self._mark_active(handle)

    def _enter(self, handle: ContextHandle) -> None:
        parent = self.tree.parent_of(handle)
        if parent is not None:
            self.activate(parent)
        else:
            self._enter_window(handle)

        if handle.frame_locator is not None:
            logger.debug(f"Switching to frame '{handle.frame_locator}'")
            self.driver.switch_to_frame(handle.frame_locator)

    def _enter_window(self, handle: ContextHandle) -> None:
        try:
            current = self.driver.current_window_handle
        except NoSuchWindowError:
            # The window the driver pointed at was closed
            current = None

        if current != handle.window_handle:
            logger.debug(f"Switching to window {handle.window_handle}")
            self.driver.switch_to_window(handle.window_handle)
        # Clears any frame pointer left over from an earlier activation
        self.driver.switch_to_default_content()

    def _mark_active(self, handle: ContextHandle) -> None:
        previous = self._current
        if previous is not None and previous.scope_id != handle.scope_id:
            previous_state = self.tree.state_of(previous)
            if previous_state.active.is_active:
                previous_state.supersede()

        self.tree.state_of(handle).activate()
        self._current = handle
        self._active_scope = handle.scope_id
        logger.debug(f"Activated {handle.describe()}")

    def _mark_lost(self, handle: ContextHandle) -> None:
        pending = [handle]
        while pending:
            lost = pending.pop()
            state = self.tree.state_of(lost)
            if not state.is_lost:
                state.lose()
                logger.warning(f"Context lost: {lost.describe()}")
            if self._current is not None and self._current.scope_id == lost.scope_id:
                self._current = None
            pending.extend(self.tree.children_of(lost))
