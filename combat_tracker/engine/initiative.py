from typing import Iterable

from .state import Participant


def sort_by_initiative(participants: Iterable[Participant]) -> tuple[Participant, ...]:
    """Order participants highest initiative first.

    ``sorted`` is stable, so ties keep their input order. There is no random
    tie-break: identical input always yields the identical turn order.
    """
    return tuple(sorted(participants, key=lambda p: p.initiative_value, reverse=True))
