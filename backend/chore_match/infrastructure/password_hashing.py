"""Credential Hashing — PBKDF2-HMAC-SHA256 implementation of CredentialHasher.

Invariants:
    - Every hash gets a fresh 16-byte random salt
    - Encoded as pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>
    - verify() compares digests with hmac.compare_digest
    - Malformed credentials verify as False (never raise)

Design Decisions:
    - hashlib.pbkdf2_hmac over a third-party hasher: no native build, iterations stored
      per credential so the work factor can be raised without invalidating old hashes
"""

import hashlib
import hmac
import secrets

SCHEME = "pbkdf2_sha256"
SALT_BYTES = 16
DEFAULT_ITERATIONS = 390_000


class Pbkdf2Hasher:
    """Derives and verifies salted PBKDF2 credentials."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        self.iterations = iterations

    def hash(self, password: str) -> str:
        salt = secrets.token_bytes(SALT_BYTES)
        digest = _derive(password, salt, self.iterations)
        return f"{SCHEME}${self.iterations}${salt.hex()}${digest.hex()}"

    def verify(self, password: str, credential: str) -> bool:
        try:
            scheme, iterations, salt_hex, digest_hex = credential.split("$")
            if scheme != SCHEME:
                return False
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(digest_hex)
            rounds = int(iterations)
        except (AttributeError, ValueError):
            return False
        if rounds < 1:
            return False
        return hmac.compare_digest(_derive(password, salt, rounds), expected)


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
