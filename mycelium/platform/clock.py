"""
Clock - Source of moments for Mycelium timestamps

Moments are integers counting nanoseconds since UNIX_EPOCH. The clock is
handed to a Mycelium at construction instead of being read ambiently, so
trees can be built deterministically (ManualClock) when needed.
"""

import time

from ..errors import TimingError


class Clock:
    """
    Base class for moment sources.
    Subclasses implement _read().
    """

    def now(self):
        """
        Current moment in nanoseconds since UNIX_EPOCH.

        Raises:
            TimingError: if the clock is unavailable or reports a moment
                before UNIX_EPOCH
        """
        try:
            moment = self._read()
        except OSError as e:
            raise TimingError(f"System clock unavailable: {e}") from e

        if moment < 0:
            raise TimingError(f"Clock reports {moment}ns, before UNIX_EPOCH")
        return moment

    def _read(self):
        raise NotImplementedError("Subclass must implement _read()")


class SystemClock(Clock):
    """Wall clock backed by time.time_ns()"""

    def _read(self):
        return time.time_ns()

    def __repr__(self):
        return "SystemClock()"


class ManualClock(Clock):
    """
    Deterministic clock.

    Each call to now() returns the current moment and then advances it
    by `step`.
    """

    def __init__(self, start=1, step=1):
        """
        Args:
            start: first moment returned (ns since UNIX_EPOCH)
            step: amount added after every read
        """
        self.moment = start
        self.step = step

    def set(self, moment):
        """Jump to an explicit moment"""
        self.moment = moment

    def _read(self):
        moment = self.moment
        self.moment += self.step
        return moment

    def __repr__(self):
        return f"ManualClock(moment={self.moment}, step={self.step})"


_default_clock = None

def get_default_clock():
    """Get the shared SystemClock (singleton)"""
    global _default_clock
    if _default_clock is None:
        _default_clock = SystemClock()
    return _default_clock
