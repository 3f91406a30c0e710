# trustore

Storage and certificate building blocks for a small cryptographic service.

## Modules

- `trustore.types`: the 128-bit object identifier `Id` and its subclasses
  `KeyId`, `CertId` and `CounterId` (with `generate`, `from_special`,
  `from_bytes`, `to_bytes`, `is_special` and `hex`); enumerations such as
  `Location` (`VOLATILE`, `INTERNAL`, `EXTERNAL`), `Mechanism`, `Status`,
  `ConsentLevel`, `KeySerialization` and `SignatureSerialization`; attribute
  records such as `StorageAttributes` and `KeyAttributes`; `Letters`, which
  accepts only lower-case ASCII bytes; and the `TrussedError` exception with
  its `ErrorKind`.
- `trustore.fs`: an in-memory `Filesystem` with directories, files and
  numbered attributes (0 to 255). Reading a directory yields `.` and `..`
  first, then the children in name order. Failures raise `FilesystemError`,
  an `OSError` whose `errno` tells why.
- `trustore.store`: a `Store` holding one `Filesystem` per `Location`, and
  the helpers `read`, `write`, `store_data` (creates parent directories),
  `delete`, `exists`, `remove_dir`, `remove_dir_all_where` and
  `create_directories`.
- `trustore.filestore`: `ClientFilestore`, which keeps each client's files
  below `<client_id>/dat/`. Besides reading, writing and removing files it
  offers resumable directory listings (`read_dir_first` / `read_dir_next`),
  listings of file contents optionally filtered by a user attribute
  (`read_dir_files_first` / `read_dir_files_next`) and a depth-first
  `locate_file`. Listings and `locate_file` work on the internal location
  only.
- `trustore.certstore`: `ClientCertstore`, storing DER certificates below
  `<client_id>/x5c/` under random `CertId`s.
- `trustore.counterstore`: `ClientCounterstore`, 128-bit monotonic counters
  below `<client_id>/ctr/`; `increment` returns the value before the
  increment.
- `trustore.der`: `encode_tlv` and the pieces of a certificate:
  `SignatureAlgorithm`, `Version`, `BigEndianInteger`, `Name`, `Datetime`
  (UTCTime before 2050, GeneralizedTime from then on), `Validity` (end
  defaults to 9999-12-31T23:59:59Z) and `ParsedDatetime`.
- `trustore.attest`: `SerializedSubjectPublicKey`, `SerializedSignature`,
  `TbsCertificate` and `Certificate`, which produce the DER encoding of an
  X.509 v3 certificate, and the special ids `ED255_ATTN_KEY` and
  `P256_ATTN_KEY`.

The random source passed to the stores is any object with a
`randbytes(n)` method, such as `random.Random` or `random.SystemRandom`.

## Installation

```
pip install .
```

## Example

```python
import random

from trustore.counterstore import ClientCounterstore
from trustore.filestore import ClientFilestore
from trustore.fs import Filesystem
from trustore.store import Store
from trustore.types import Location

store = Store(Filesystem(), Filesystem(), Filesystem())

files = ClientFilestore("app", store)
files.write("config", Location.INTERNAL, b"hello")
assert files.read("config", Location.INTERNAL) == b"hello"

counters = ClientCounterstore("app", random.Random(0), store)
counter_id = counters.create(Location.VOLATILE)
assert counters.increment(counter_id) == 0
assert counters.increment(counter_id) == 1
```

Failures are raised as `trustore.types.TrussedError`; its `kind` attribute
tells which `ErrorKind` occurred.

## What it does not do

- Everything is held in memory: the `Filesystem` is not written to disk, so
  nothing survives the process.
- There is no key store and no cryptography: the package neither generates
  nor stores keys, and it does not sign, verify, encrypt or hash. Building an
  attestation certificate means supplying the public key and the signature
  yourself; `trustore.attest` only encodes them.
- There is no request-dispatching service, client interface or command-line
  tool.

## Tests

```
pip install ".[test]"
pytest
```