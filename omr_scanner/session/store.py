from typing import Awaitable, Callable, Protocol

from omr_scanner.capture.device import FacingMode

from .state import SessionState, initial_state
from .actions import Action
from .effects import Effect
from .update import update


class EffectHandler(Protocol):
    async def __call__(
        self,
        effect: Effect,
        dispatch: Callable[[Action], Awaitable[None]]
    ) -> None: ...


class Store:
    def __init__(self, initial: SessionState | None = None):
        self._state = initial if initial is not None else initial_state()
        self._subscribers: list[Callable[[SessionState], None]] = []
        self._effect_handler: EffectHandler | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, callback: Callable[[SessionState], None]) -> Callable[[], None]:
        self._subscribers.append(callback)
        callback(self._state)
        return lambda: self._subscribers.remove(callback)

    def set_effect_handler(self, handler: EffectHandler) -> None:
        self._effect_handler = handler

    def _notify_subscribers(self) -> None:
        for subscriber in self._subscribers:
            subscriber(self._state)

    async def dispatch(self, action: Action) -> None:
        # State changes before the first await, so a later dispatch from
        # another task always observes this transition.
        self._state, effects = update(self._state, action)
        self._notify_subscribers()

        if self._effect_handler:
            for effect in effects:
                await self._effect_handler(effect, self.dispatch)


def create_store(facing_mode: FacingMode = FacingMode.REAR) -> Store:
    return Store(initial_state(facing_mode))
