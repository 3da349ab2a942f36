"""
Password hashing.

PBKDF2-HMAC-SHA256 with a per-password random salt. The digest string
carries everything verify() needs:

    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
"""

from __future__ import annotations

import hashlib
import secrets

ALGORITHM = "pbkdf2_sha256"


class PasswordHasher:
    """Salted one-way hashing with a tunable cost factor."""

    def __init__(self, iterations: int = 100_000, salt_bytes: int = 16):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations
        self.salt_bytes = salt_bytes

    @staticmethod
    def _derive(password: str, salt: str, iterations: int) -> str:
        return hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=iterations,
        ).hex()

    def hash(self, password: str) -> str:
        """Hash a password. Two calls with the same input differ by salt."""
        salt = secrets.token_hex(self.salt_bytes)
        hash_hex = self._derive(password, salt, self.iterations)
        return f"{ALGORITHM}${self.iterations}${salt}${hash_hex}"

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Verify a password against its digest.

        Uses the iteration count stored in the digest, so hashes made
        under an older cost setting keep verifying.
        """
        try:
            algorithm, iterations, salt, stored_hash = password_hash.split('$')
            if algorithm != ALGORITHM:
                return False
            hash_hex = self._derive(password, salt, int(iterations))
        except (ValueError, AttributeError):
            return False
        return secrets.compare_digest(hash_hex, stored_hash)
