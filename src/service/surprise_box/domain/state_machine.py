"""
Transition tables for the box and the order.

Every status change in the service goes through one of these tables: entities
ask `next_status` before evolving, and the ledgers build their
`WHERE status IN (...)` guards from `sources_for`, so the in-memory check and
the conditional UPDATE can never disagree.
"""

from typing import Generic, Mapping, TypeVar

from src.service.surprise_box.domain.enum import BoxEvent, BoxStatus, OrderEvent, OrderStatus
from src.service.surprise_box.domain.errors import InvalidStateTransitionError


S = TypeVar('S', BoxStatus, OrderStatus)
E = TypeVar('E', BoxEvent, OrderEvent)


class TransitionTable(Generic[S, E]):
    def __init__(
        self,
        *,
        entity: str,
        transitions: Mapping[tuple[S, E], S],
        terminal: frozenset[S],
    ) -> None:
        for (source, _), target in transitions.items():
            if source in terminal and target != source:
                raise ValueError(f'{entity}: terminal status {source} cannot transition out')
        self.entity = entity
        self.terminal = terminal
        self._transitions = dict(transitions)

    def can(self, current: S, event: E) -> bool:
        return (current, event) in self._transitions

    def next_status(self, current: S, event: E) -> S:
        try:
            return self._transitions[(current, event)]
        except KeyError:
            raise InvalidStateTransitionError(self.entity, str(current), str(event)) from None

    def sources_for(self, event: E) -> frozenset[S]:
        return frozenset(source for (source, ev) in self._transitions if ev == event)

    def changing_sources_for(self, event: E) -> frozenset[S]:
        """Sources where `event` really changes the status (self-loops excluded)."""
        return frozenset(
            source
            for (source, ev), target in self._transitions.items()
            if ev == event and target != source
        )

    def target_of(self, event: E) -> S:
        targets = {target for (_, ev), target in self._transitions.items() if ev == event}
        if len(targets) != 1:
            raise ValueError(f'{self.entity}: event {event} has targets {sorted(targets)}')
        return targets.pop()

    def is_terminal(self, status: S) -> bool:
        return status in self.terminal


# Box: DRAFT -> ACTIVE <-> RESERVED -> SOLD; ACTIVE|RESERVED -> CANCELLED|EXPIRED
# SOLD accepts CONFIRM_SOLD as an idempotent self-loop
BOX_STATE_MACHINE: TransitionTable[BoxStatus, BoxEvent] = TransitionTable(
    entity='surprise box',
    transitions={
        (BoxStatus.DRAFT, BoxEvent.ACTIVATE): BoxStatus.ACTIVE,
        (BoxStatus.ACTIVE, BoxEvent.RESERVE): BoxStatus.RESERVED,
        (BoxStatus.RESERVED, BoxEvent.RELEASE): BoxStatus.ACTIVE,
        (BoxStatus.RESERVED, BoxEvent.SELL): BoxStatus.SOLD,
        (BoxStatus.RESERVED, BoxEvent.CONFIRM_SOLD): BoxStatus.SOLD,
        (BoxStatus.SOLD, BoxEvent.CONFIRM_SOLD): BoxStatus.SOLD,
        (BoxStatus.ACTIVE, BoxEvent.WITHDRAW): BoxStatus.CANCELLED,
        (BoxStatus.RESERVED, BoxEvent.WITHDRAW): BoxStatus.CANCELLED,
        (BoxStatus.ACTIVE, BoxEvent.EXPIRE_SALE): BoxStatus.EXPIRED,
        (BoxStatus.RESERVED, BoxEvent.EXPIRE_SALE): BoxStatus.EXPIRED,
    },
    terminal=frozenset({BoxStatus.SOLD, BoxStatus.EXPIRED, BoxStatus.CANCELLED}),
)


_ORDER_TERMINAL = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.REFUNDED})
_ORDER_OPEN = tuple(status for status in OrderStatus if status not in _ORDER_TERMINAL)

# Order: PENDING -> PAID -> READY_FOR_PICKUP -> IN_DELIVERY;
# COMPLETE / CANCEL / REFUND from any non-terminal status
ORDER_STATE_MACHINE: TransitionTable[OrderStatus, OrderEvent] = TransitionTable(
    entity='order',
    transitions={
        (OrderStatus.PENDING, OrderEvent.MARK_PAID): OrderStatus.PAID,
        (OrderStatus.PAID, OrderEvent.MARK_READY): OrderStatus.READY_FOR_PICKUP,
        (OrderStatus.READY_FOR_PICKUP, OrderEvent.DISPATCH): OrderStatus.IN_DELIVERY,
        **{(status, OrderEvent.COMPLETE): OrderStatus.COMPLETED for status in _ORDER_OPEN},
        **{(status, OrderEvent.CANCEL): OrderStatus.CANCELLED for status in _ORDER_OPEN},
        **{(status, OrderEvent.REFUND): OrderStatus.REFUNDED for status in _ORDER_OPEN},
    },
    terminal=_ORDER_TERMINAL,
)
