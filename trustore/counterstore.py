"""Per-client monotonic counters."""

from __future__ import annotations

from trustore import store as _store
from trustore.store import Store
from trustore.types import CounterId, ErrorKind, Location, TrussedError

_COUNTER_BYTES = 16
_COUNTER_LIMIT = 1 << (8 * _COUNTER_BYTES)
_SEARCH_ORDER = (Location.INTERNAL, Location.EXTERNAL, Location.VOLATILE)


class ClientCounterstore:
    """Counters of one client, kept below ``<client_id>/ctr/``.

    A counter is a 128-bit unsigned value stored little-endian; incrementing
    returns the value before the increment.
    """

    DEFAULT_START_AT = 0

    def __init__(self, client_id: str, rng, store: Store) -> None:
        self.client_id = client_id
        self.rng = rng
        self.store = store

    def _counter_path(self, id: CounterId) -> str:
        return f"{self.client_id}/ctr/{id.hex()}"

    def _read_counter(self, location: Location, id: CounterId) -> int:
        data = _store.read(self.store, location, self._counter_path(id), _COUNTER_BYTES)
        return int.from_bytes(data.ljust(_COUNTER_BYTES, b"\x00"), "little")

    def _write_counter(self, location: Location, id: CounterId, value: int) -> None:
        _store.store_data(
            self.store,
            location,
            self._counter_path(id),
            value.to_bytes(_COUNTER_BYTES, "little"),
        )

    def _increment_location(self, location: Location, id: CounterId) -> int:
        counter = self._read_counter(location, id)
        if counter + 1 >= _COUNTER_LIMIT:
            raise OverflowError("counter overflow")
        self._write_counter(location, id, counter + 1)
        return counter

    def create_starting_at(self, location: Location, starting_at: int) -> CounterId:
        """Create a counter with the given initial value."""
        if not 0 <= starting_at < _COUNTER_LIMIT:
            raise ValueError("a counter must fit in 128 unsigned bits")
        id = CounterId.generate(self.rng)
        self._write_counter(location, id, starting_at)
        return id

    def create(self, location: Location) -> CounterId:
        """Create a counter starting at :attr:`DEFAULT_START_AT`."""
        return self.create_starting_at(location, self.DEFAULT_START_AT)

    def increment(self, id: CounterId) -> int:
        """Increment a counter wherever it lives, returning its previous value."""
        for location in _SEARCH_ORDER:
            try:
                return self._increment_location(location, id)
            except TrussedError:
                continue
        raise TrussedError(ErrorKind.NO_SUCH_KEY)