"""Activation gate and discrete-command cooldown shared by all input paths."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from models import Command

LOG = logging.getLogger("slideshow.input")


@dataclass
class InteractionSession:
    activated: bool = False
    last_action_at: Optional[float] = None


class DebounceGate:
    def __init__(self, session: InteractionSession, min_interval_s: float = 0.75) -> None:
        self.session = session
        self.min_interval_s = min_interval_s

    def admit(self, command: Command, now: float, activated: Optional[bool] = None) -> bool:
        """Return True if ``command`` may be applied at ``now``.

        Continuous commands pass whenever the gate is open. Discrete ones
        also need the cooldown to have elapsed, and only an admitted
        discrete command moves ``last_action_at``.
        """
        is_open = self.session.activated if activated is None else activated
        if not is_open:
            LOG.debug("dropped %s: input not activated", command.value)
            return False
        if not command.is_discrete:
            return True
        last = self.session.last_action_at
        if last is not None and now - last < self.min_interval_s:
            LOG.debug("dropped %s: %.3fs since last action", command.value, now - last)
            return False
        self.session.last_action_at = now
        return True
