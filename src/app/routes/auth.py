"""
Auth Routes (/api/v1/auth).

login/logout/refresh는 자리만 잡아둔 stub (인증 미구현).
"""

from typing import Any

from fastapi import APIRouter

api_router = APIRouter()


def _stub(message: str) -> dict[str, Any]:
    return {
        "success": True,
        "data": {"message": message, "status": "success"},
    }


@api_router.post("/login")
async def login() -> dict[str, Any]:
    return _stub("Login endpoint - implementation in progress")


@api_router.post("/logout")
async def logout() -> dict[str, Any]:
    return _stub("Logout endpoint - implementation in progress")


@api_router.post("/refresh")
async def refresh() -> dict[str, Any]:
    return _stub("Refresh token endpoint - implementation in progress")
