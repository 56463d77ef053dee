"""
plangate: policy fingerprint over RFC 8785 (JCS) canonical JSON

Every evaluation result carries the fingerprint of the always-safe /
always-unsafe lists it was decided with. Two policies with the same
members hash the same, whatever the file order, key spelling or
whitespace they were written with.

RFC 8785: https://www.rfc-editor.org/rfc/rfc8785
"""

import hashlib

import jcs


def canonicalize(obj: dict) -> bytes:
    """Policy dict as JCS bytes. Callers sort the type lists first."""
    return jcs.canonicalize(obj)


def canonical_hash(obj: dict) -> str:
    """Hex SHA-256 of canonicalize(obj), reported as `policy_hash`."""
    return hashlib.sha256(canonicalize(obj)).hexdigest()
