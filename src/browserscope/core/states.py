"""Lifecycle state machine for a browsing context.

A context starts unactivated, becomes active when the ScopeActivator points
the driver at it, is superseded when another context is activated and can be
reactivated any number of times. Lost is terminal: the window or frame the
context lived in is gone.
"""

from statemachine import State as SMState
from statemachine import StateMachine


class ContextStateMachine(StateMachine):
    """Tracks whether a context is the one the driver currently points at.

    Attributes:
        activations: Number of times the context was (re)activated.

    States:
        unactivated: Created but never activated.
        active: The driver's live pointer is on this context.
        superseded: Another context was activated since.
        lost: The underlying window or frame no longer exists (final).
    """

    unactivated = SMState(initial=True)
    active = SMState()
    superseded = SMState()
    lost = SMState(final=True)

    activate = unactivated.to(active) | superseded.to(active) | active.to(active)
    supersede = active.to(superseded)
    lose = unactivated.to(lost) | active.to(lost) | superseded.to(lost)

    def __init__(self) -> None:
        """Initialize the state machine with its activation counter."""
        self.activations: int = 0
        super().__init__()

    def on_enter_active(self) -> None:
        """Count every (re)activation."""
        self.activations += 1

    @property
    def is_lost(self) -> bool:
        """Whether the context reached the terminal lost state."""
        return self.lost.is_active
