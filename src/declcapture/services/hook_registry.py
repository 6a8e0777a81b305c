"""Hook registry: wires compiled hook registrations into host phases.

Each registration becomes a named handler, "declcapture-hook/<phase>/<keys>",
attached to its phase. When the host signals a phase with an active entry key,
every handler of that phase whose key equals the active key runs its callback.

Handlers can be removed by a regular expression matched against their keys,
for one phase, several phases or all of them. Removed names stay in the
registry's name table unless they are explicitly forgotten.

The registry is not thread-safe; it is meant to be mutated and dispatched
from the host's single event thread.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from ..exceptions import InvalidArgumentError, UnresolvableHookTargetError
from ..models.entry import HookRegistration
from ..types.enums import HookPhase

logger = logging.getLogger(__name__)

PhaseSelector = Union[None, str, HookPhase, Iterable[Union[str, HookPhase]]]

ALL_PHASES = "all"


def resolve_phase(phase: Union[str, HookPhase]) -> HookPhase:
    """Map a phase name to a HookPhase.

    Raises:
        UnresolvableHookTargetError: If the name is not a known phase
    """
    try:
        return HookPhase.from_string(phase)
    except ValueError as e:
        raise UnresolvableHookTargetError(phase, HookPhase.get_all_phases()) from e


def resolve_phases(selector: PhaseSelector = ALL_PHASES) -> List[HookPhase]:
    """Expand a phase selector into a list of phases.

    Args:
        selector: "all" or None for every phase, a single phase, or an
            iterable of phases

    Raises:
        UnresolvableHookTargetError: If any phase name is unknown
    """
    if selector is None or selector == ALL_PHASES:
        return list(HookPhase)
    if isinstance(selector, str):
        selector = [selector]

    phases: List[HookPhase] = []
    for item in selector:
        phase = resolve_phase(item)
        if phase not in phases:
            phases.append(phase)
    return phases


@dataclass(frozen=True)
class HookHandler:
    """A registered handler: runs its callback only for its own entry key."""
    name: str
    registration: HookRegistration

    @property
    def phase(self) -> HookPhase:
        return self.registration.phase

    @property
    def match_key(self) -> str:
        return self.registration.match_key

    def __call__(self, active_key: str, *args: Any, **kwargs: Any) -> bool:
        """Run the callback when active_key is this handler's key.

        Returns:
            True if the callback ran
        """
        if active_key != self.match_key:
            return False
        self.registration.callback(*args, **kwargs)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return self.registration.to_dict()


class HookRegistry:
    """Named hook handlers grouped by phase."""

    def __init__(self):
        self._handlers: Dict[HookPhase, Dict[str, HookHandler]] = {phase: {} for phase in HookPhase}
        self._names: Set[str] = set()

    def register(self, registration: HookRegistration) -> str:
        """Register one hook, replacing any handler with the same name.

        Returns:
            The generated handler name

        Raises:
            InvalidArgumentError: If the callback is not callable
            UnresolvableHookTargetError: If the phase is unknown
        """
        return self._store(registration, self._check(registration))

    def register_all(self, registrations: Iterable[HookRegistration]) -> List[str]:
        """Register several hooks, or none of them if any one is rejected."""
        checked = [(registration, self._check(registration)) for registration in registrations]
        return [self._store(registration, phase) for registration, phase in checked]

    def _check(self, registration: HookRegistration) -> HookPhase:
        phase = resolve_phase(registration.phase)
        if not callable(registration.callback):
            raise InvalidArgumentError(
                f"Hook callback for {registration.entry_name!r} ({phase.value}) is not callable",
                argument_name="callback",
            )
        return phase

    def _store(self, registration: HookRegistration, phase: HookPhase) -> str:
        name = registration.handler_name
        replaced = name in self._handlers[phase]
        self._handlers[phase][name] = HookHandler(name=name, registration=registration)
        self._names.add(name)
        logger.debug("%s hook handler %s on %s", "Replaced" if replaced else "Registered",
                     name, phase.host_hook)
        return name

    def handlers(self, phases: PhaseSelector = ALL_PHASES) -> List[HookHandler]:
        """List handlers of the selected phases in registration order."""
        result: List[HookHandler] = []
        for phase in resolve_phases(phases):
            result.extend(self._handlers[phase].values())
        return result

    def dispatch(self, phase: Union[str, HookPhase], active_key: str, *args: Any, **kwargs: Any) -> int:
        """Signal a phase for the currently active entry key.

        Returns:
            Number of callbacks that ran
        """
        resolved = resolve_phase(phase)
        ran = 0
        for handler in list(self._handlers[resolved].values()):
            if handler(active_key, *args, **kwargs):
                ran += 1
        logger.debug("Dispatched %s for %r: %d callbacks", resolved.value, active_key, ran)
        return ran

    def find(self, pattern: str = "", phases: PhaseSelector = ALL_PHASES) -> List[HookHandler]:
        """Find handlers whose key matches pattern (re.search) in the selected phases."""
        regex = _compile_pattern(pattern)
        return [handler for handler in self.handlers(phases) if regex.search(handler.match_key)]

    def remove(self, pattern: str = "", phases: PhaseSelector = ALL_PHASES, forget: bool = False) -> List[str]:
        """Unregister handlers whose key matches pattern.

        Args:
            pattern: Regular expression searched in each handler's key
            phases: Phase selector, "all" by default
            forget: Also drop the removed names from the name table

        Returns:
            Names of the removed handlers
        """
        removed = []
        for handler in self.find(pattern, phases):
            del self._handlers[handler.phase][handler.name]
            if forget:
                self._names.discard(handler.name)
            removed.append(handler.name)

        logger.info("Removed %d hook handlers matching %r%s",
                    len(removed), pattern, " (names forgotten)" if forget else "")
        return removed

    def known_names(self) -> Set[str]:
        """Every handler name ever registered and not yet forgotten."""
        return set(self._names)

    def clear(self) -> None:
        for handlers in self._handlers.values():
            handlers.clear()
        self._names.clear()

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())


def _compile_pattern(pattern: str) -> "re.Pattern[str]":
    try:
        return re.compile(pattern or "")
    except re.error as e:
        raise InvalidArgumentError(f"Invalid key pattern {pattern!r}: {e}", argument_name="pattern") from e


_global_registry: Optional[HookRegistry] = None


def get_registry() -> HookRegistry:
    """Get the process-wide hook registry."""
    global _global_registry
    if _global_registry is None:
        _global_registry = HookRegistry()
    return _global_registry


def reset_registry() -> None:
    """Replace the process-wide registry with an empty one."""
    global _global_registry
    _global_registry = HookRegistry()


def install_hooks(registrations: Iterable[HookRegistration],
                  registry: Optional[HookRegistry] = None) -> List[str]:
    """Wire compiled hook registrations into a registry (process-wide by default)."""
    target = registry if registry is not None else get_registry()
    return target.register_all(registrations)
