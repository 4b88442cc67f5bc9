"""TraceBuffer implementation."""


class TraceBuffer:
    """Ordered queue of serialized traces awaiting publication."""

    def __init__(self):
        self._records: list[str] = []

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: str) -> int:
        """Add a serialized trace. Returns the new buffer length."""
        self._records.append(record)
        return len(self._records)

    def drain(self) -> tuple[str, ...]:
        """Swap the live list for an empty one and return the old contents."""
        records, self._records = self._records, []
        return tuple(records)
