from __future__ import annotations

from admissionsim.core.temporal import Instant


class Request:
    """A unit of work flowing producer -> dispatcher -> consumer.

    ``start`` is fixed at creation. ``dispatch`` is stamped once, when the
    dispatcher admits the request into the consumer.
    """

    __slots__ = ("_start", "dispatch")

    def __init__(self, start: Instant):
        self._start = start
        self.dispatch: Instant | None = None

    @property
    def start(self) -> Instant:
        return self._start

    @property
    def is_dispatched(self) -> bool:
        return self.dispatch is not None

    def __repr__(self) -> str:
        return f"Request(start={self._start!r}, dispatch={self.dispatch!r})"
