"""
Password hashing (argon2).

규칙:
- 평문 비밀번호는 저장/로그 금지
- 해시는 저장소 안에서만 사용, API 응답에 포함하지 않음
"""

from argon2 import PasswordHasher

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """
    비밀번호 해시.

    Args:
        password: 평문 비밀번호

    Returns:
        argon2 encoded hash
    """
    return str(_hasher.hash(password))
