"""Per-client certificate storage."""

from __future__ import annotations

from trustore import store as _store
from trustore.store import Store
from trustore.types import CertId, ErrorKind, Location, TrussedError

_SEARCH_ORDER = (Location.INTERNAL, Location.EXTERNAL, Location.VOLATILE)


class ClientCertstore:
    """Certificates of one client, kept below ``<client_id>/x5c/``."""

    def __init__(self, client_id: str, rng, store: Store) -> None:
        self.client_id = client_id
        self.rng = rng
        self.store = store

    def _cert_path(self, id: CertId) -> str:
        return f"{self.client_id}/x5c/{id.hex()}"

    def delete_certificate(self, id: CertId) -> None:
        """Delete a certificate from whichever location holds it."""
        path = self._cert_path(id)
        if not any(_store.delete(self.store, location, path) for location in _SEARCH_ORDER):
            raise TrussedError(ErrorKind.NO_SUCH_KEY)

    def read_certificate(self, id: CertId) -> bytes:
        """Return the DER bytes of a stored certificate."""
        path = self._cert_path(id)
        for location in _SEARCH_ORDER:
            try:
                return _store.read(self.store, location, path)
            except TrussedError:
                continue
        raise TrussedError(ErrorKind.NO_SUCH_CERTIFICATE)

    def write_certificate(self, location: Location, der: bytes) -> CertId:
        """Store a certificate under a fresh random id and return the id."""
        id = CertId.generate(self.rng)
        _store.store_data(self.store, location, self._cert_path(id), der)
        return id