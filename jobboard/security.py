"""
Password hashing with bcrypt.

bcrypt only looks at the first 72 bytes of a password, so longer inputs are
truncated explicitly before hashing and verifying.
"""

from typing import Optional

import bcrypt

from .config import get_bcrypt_work_factor

MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str, work_factor: Optional[int] = None) -> str:
    rounds = work_factor if work_factor is not None else get_bcrypt_work_factor()
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
