"""Lucky draw state machine.

The state itself is an immutable ``DrawState``; the module-level functions are
pure transitions. ``DrawEngine`` owns the current state plus the random source
and hands out ``TickHandle`` objects for the shuffle animation. A reset or a
roster change bumps ``generation``, which invalidates every outstanding handle
and congratulation request.
"""

import random
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from config import DRAW_INTERVAL_MS, DRAW_TICKS
from roster import Participant, Roster

IDLE = "idle"
ANIMATING = "animating"
SETTLED = "settled"

EMPTY_POOL = "empty_pool"
BUSY = "busy"


@dataclass(frozen=True)
class DrawState:
    roster: Roster = ()
    pool: Roster = ()
    history: Roster = ()  # 최근 당첨자가 맨 앞
    winner: Optional[Participant] = None
    phase: str = IDLE
    allow_repeat: bool = False
    generation: int = 0
    congratulation: str = ""
    display: str = ""


@dataclass(frozen=True)
class CongratsRequest:
    generation: int
    draw_number: int
    winner: Participant


@dataclass
class TickHandle:
    generation: int
    ticks_left: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def done(self) -> bool:
        return self.ticks_left <= 0


def initial_state(roster: Sequence[Participant] = (), allow_repeat: bool = False) -> DrawState:
    roster = tuple(roster)
    return DrawState(roster=roster, pool=roster, allow_repeat=allow_repeat)


def load_roster(state: DrawState, roster: Sequence[Participant]) -> DrawState:
    roster = tuple(roster)
    return replace(
        state,
        roster=roster,
        pool=roster,
        history=(),
        winner=None,
        phase=IDLE,
        generation=state.generation + 1,
        congratulation="",
        display="",
    )


def reset(state: DrawState) -> DrawState:
    return load_roster(state, state.roster)


def abort(state: DrawState) -> DrawState:
    """Drop an unfinished animation, keeping history and pool."""
    if state.phase != ANIMATING:
        return state
    return replace(state, phase=IDLE, display="", generation=state.generation + 1)


def set_allow_repeat(state: DrawState, allow_repeat: bool) -> DrawState:
    return replace(state, allow_repeat=allow_repeat)


def eligible(state: DrawState) -> Roster:
    return state.roster if state.allow_repeat else state.pool


def blocked_reason(state: DrawState) -> Optional[str]:
    if state.phase == ANIMATING:
        return BUSY
    if not eligible(state):
        return EMPTY_POOL
    return None


def begin(state: DrawState) -> DrawState:
    return replace(state, phase=ANIMATING, winner=None, congratulation="")


def show(state: DrawState, name: str) -> DrawState:
    return replace(state, display=name)


def settle(state: DrawState, winner: Participant) -> DrawState:
    pool = state.pool
    if not state.allow_repeat:
        pool = tuple(p for p in pool if p.id != winner.id)
    return replace(
        state,
        phase=SETTLED,
        winner=winner,
        history=(winner,) + state.history,
        pool=pool,
        display=winner.name,
    )


def congratulation_request(state: DrawState) -> Optional[CongratsRequest]:
    if state.phase != SETTLED or state.winner is None:
        return None
    return CongratsRequest(state.generation, len(state.history), state.winner)


def attach_congratulation(state: DrawState, request: CongratsRequest, text: str) -> DrawState:
    # 초기화 이후 또는 이전 추첨에 대한 응답은 무시
    if congratulation_request(state) != request:
        return state
    return replace(state, congratulation=text)


class DrawEngine:
    def __init__(
        self,
        roster: Sequence[Participant] = (),
        allow_repeat: bool = False,
        ticks: int = DRAW_TICKS,
        interval_ms: int = DRAW_INTERVAL_MS,
        seed: Optional[int] = None,
    ) -> None:
        self.state = initial_state(roster, allow_repeat)
        self.ticks = max(1, ticks)
        self.interval_ms = interval_ms
        self.rng = random.Random(seed)

    @property
    def phase(self) -> str:
        return self.state.phase

    @property
    def pool_size(self) -> int:
        return len(eligible(self.state))

    def is_current(self, handle: TickHandle) -> bool:
        return (
            not handle.cancelled
            and not handle.done
            and handle.generation == self.state.generation
            and self.state.phase == ANIMATING
        )

    def blocked_reason(self) -> Optional[str]:
        return blocked_reason(self.state)

    def start_draw(self) -> Optional[TickHandle]:
        if blocked_reason(self.state) is not None:
            return None
        self.state = begin(self.state)
        return TickHandle(generation=self.state.generation, ticks_left=self.ticks)

    def tick(self, handle: TickHandle) -> Optional[str]:
        """Advance one animation step; returns the name to display.

        The last step commits the winner. A stale or cancelled handle
        returns ``None`` and leaves the state alone.
        """
        if not self.is_current(handle):
            return None
        pool = eligible(self.state)
        if not pool:
            # 진행 중 명단이 비면 애니메이션을 접는다
            handle.cancel()
            self.state = replace(self.state, phase=IDLE, display="")
            return None
        handle.ticks_left -= 1
        if handle.ticks_left > 0:
            self.state = show(self.state, pool[self.rng.randrange(len(pool))].name)
            return self.state.display
        winner = pool[self.rng.randrange(len(pool))]
        self.state = settle(self.state, winner)
        return winner.name

    def cancel(self, handle: Optional[TickHandle]) -> None:
        if handle is not None:
            handle.cancel()

    def abort(self) -> None:
        self.state = abort(self.state)

    def reset(self) -> None:
        self.state = reset(self.state)

    def load_roster(self, roster: Sequence[Participant]) -> None:
        self.state = load_roster(self.state, roster)

    def set_allow_repeat(self, allow_repeat: bool) -> None:
        self.state = set_allow_repeat(self.state, allow_repeat)

    def congratulation_request(self) -> Optional[CongratsRequest]:
        return congratulation_request(self.state)

    def attach_congratulation(self, request: CongratsRequest, text: str) -> bool:
        before = self.state
        self.state = attach_congratulation(self.state, request, text)
        return self.state is not before

    def run_blocking(
        self,
        on_tick: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Optional[Participant]:
        handle = self.start_draw()
        if handle is None:
            return None
        while self.is_current(handle):
            name = self.tick(handle)
            if name is None:
                break
            if on_tick is not None:
                on_tick(name)
            if not handle.done:
                sleep(self.interval_ms / 1000.0)
        if self.state.phase != SETTLED or handle.generation != self.state.generation:
            return None
        return self.state.winner
