"""
ID 생성: user_id

규칙:
- user_id는 UUID v4 문자열, 생성 후 수정 금지
"""

import uuid


def generate_user_id() -> str:
    """
    User ID 생성.

    Returns:
        UUID v4 문자열 (예: "3f2b...-...")
    """
    return str(uuid.uuid4())

