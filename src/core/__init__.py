"""
Core layer: 요청 처리 파이프라인 + 보안 유틸.

역할:
- Flow: 바인딩 → 검증 → 액션 → JSON 응답 (flow.py)
- 비밀번호 해시 (passwords.py)
- ID 생성 (ids.py)
"""

from .flow import (
    FieldValidator,
    Flow,
    FlowContext,
    FlowResponse,
    Pagination,
    email,
    max_length,
    min_length,
    one_of,
)
from .ids import generate_user_id
from .passwords import hash_password

__all__ = [
    # flow
    "Flow",
    "FlowContext",
    "FlowResponse",
    "FieldValidator",
    "Pagination",
    "email",
    "min_length",
    "max_length",
    "one_of",
    # ids
    "generate_user_id",
    # passwords
    "hash_password",
]
