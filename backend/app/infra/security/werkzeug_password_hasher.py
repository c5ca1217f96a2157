# app/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

import secrets
from dataclasses import dataclass
from functools import lru_cache

from werkzeug.security import check_password_hash, generate_password_hash

from app.services._shared.ports import PasswordHasher


@lru_cache(maxsize=8)
def dummy_hash_for(method: str | None) -> str:
    """
    Hash of a random value nobody knows, built with ``method``.

    Verifying against it costs the same as verifying a real hash of the same
    method, so unknown emails take as long as wrong passwords. Cached per
    method; hashers are created per request.

    :param method: Werkzeug method spec, ``None`` for the library default.
    :rtype: str
    """
    if method:
        return generate_password_hash(secrets.token_urlsafe(32), method=method)
    return generate_password_hash(secrets.token_urlsafe(32))


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Adapter over :mod:`werkzeug.security`.

    ``check_password_hash`` compares digests with :func:`hmac.compare_digest`,
    so verification time does not depend on the mismatch position.

    :param method: Werkzeug hashing method spec (``None`` uses the library default).
    :type method: str | None
    """

    method: str | None = None

    @property
    def dummy_hash(self) -> str:
        return dummy_hash_for(self.method)

    def hash(self, plaintext: str) -> str:
        if self.method:
            return generate_password_hash(plaintext, method=self.method)
        return generate_password_hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return check_password_hash(hashed, plaintext)
        except (ValueError, TypeError):
            # Unknown method or corrupt parameters in the stored hash.
            return False

    def burn(self, plaintext: str) -> None:
        check_password_hash(self.dummy_hash, plaintext)
