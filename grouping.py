import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TypeVar

from messages import message
from naming import NamingClient
from roster import Participant

T = TypeVar("T")


@dataclass
class Group:
    id: str
    name: str
    members: List[Participant] = field(default_factory=list)


def planned_group_count(total: int, group_size: int) -> int:
    if total <= 0 or group_size < 1:
        return 0
    return math.ceil(total / group_size)


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    # random.shuffle 은 Fisher-Yates
    result = list(items)
    rng.shuffle(result)
    return result


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    return [list(items[i: i + size]) for i in range(0, len(items), size)]


def make_groups(
    roster: Sequence[Participant],
    group_size: int,
    names: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    locale: str = "en",
) -> List[Group]:
    if group_size < 1:
        raise ValueError(f"group size must be at least 1: {group_size}")
    if not roster:
        return []
    if rng is None:
        rng = random.Random(seed)

    names = list(names or [])
    groups: List[Group] = []
    for i, members in enumerate(chunk(shuffled(roster, rng), group_size)):
        name = names[i].strip() if i < len(names) and names[i] else ""
        groups.append(
            Group(
                id=f"group-{i}",
                name=name or message("group_fallback", locale, index=i + 1),
                members=members,
            )
        )
    return groups


class GroupingEngine:
    def __init__(self, naming: Optional[NamingClient] = None, seed: Optional[int] = None) -> None:
        self.naming = naming
        self.rng = random.Random(seed)
        self.groups: List[Group] = []

    def clear(self) -> None:
        self.groups = []

    def run(
        self,
        roster: Sequence[Participant],
        group_size: int,
        use_ai_names: bool = False,
        locale: str = "en",
    ) -> List[Group]:
        if group_size < 1:
            raise ValueError(f"group size must be at least 1: {group_size}")
        names: List[str] = []
        count = planned_group_count(len(roster), group_size)
        if use_ai_names and count and self.naming is not None:
            names = self.naming.generate_team_names(count, locale)
        self.groups = make_groups(roster, group_size, names=names, rng=self.rng, locale=locale)
        return self.groups
