"""
Canonical workflow types (``wms_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for document state machines.  Modules declare their
lifecycle once as a ``Workflow`` and aggregates ask it whether an action is
allowed from the current state, instead of scattering status checks.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``selectors/``, or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the aggregate does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: ``initial_state`` is a member of ``states``.
    ``terminal_states`` are states with no outgoing transitions.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state!r} "
                "is not a declared state"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action!r} "
                    f"references unknown state ({t.from_state} -> {t.to_state})"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow {self.name}: terminal state {t.from_state!r} "
                    f"has outgoing transition {t.action!r}"
                )

    def find_transition(
        self,
        from_state: str,
        action: str,
        to_state: str | None = None,
    ) -> Transition | None:
        """The transition for ``action`` out of ``from_state``, if one exists.

        An action may lead to several states (the guard decides which);
        pass ``to_state`` to select one of them.
        """
        for t in self.transitions:
            if t.from_state != from_state or t.action != action:
                continue
            if to_state is None or t.to_state == to_state:
                return t
        return None

    def allowed_actions(self, from_state: str) -> tuple[str, ...]:
        """Actions that may fire from ``from_state``, in declaration order."""
        return tuple(t.action for t in self.transitions if t.from_state == from_state)
