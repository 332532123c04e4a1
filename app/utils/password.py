"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification using bcrypt directly.
Used by login and by the privileged user-creation flow.
"""

import bcrypt


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다 (Hash a password with a random salt)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교합니다.

    Verify a plain text password against a stored bcrypt hash.
    Malformed hashes are treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False
