"""In-memory certificate, counter and file storage with DER encoding of X.509 attestation certificates."""

__version__ = "0.1.0"