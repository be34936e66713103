"""
Cooperative cancellation for preview requests.

A ``CancellationSource`` hands out one current ``CancellationHandle`` at a
time. Issuing a new handle, or invalidating the source, marks every earlier
handle as cancelled, so results that arrive late are dropped instead of
published. Work already running (including external processes) is not
interrupted.
"""


class CancellationHandle:
    """Token for one logical request."""

    def __init__(self, source: "CancellationSource", generation: int):
        self._source = source
        self.generation = generation
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled or self._source.generation != self.generation

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"CancellationHandle(generation={self.generation}, {state})"


class CancellationSource:
    """Issues handles; only the newest one stays valid."""

    def __init__(self):
        self.generation = 0

    def new_handle(self) -> CancellationHandle:
        self.generation += 1
        return CancellationHandle(self, self.generation)

    def invalidate(self) -> None:
        """Cancel the current handle without issuing a new one."""
        self.generation += 1
