"""
Dashboard Service: 대시보드 화면 데이터.

통계/활동 데이터는 데모용 고정 값 (시간만 현재 기준으로 계산).
사용자 수 카드는 저장소가 있으면 실제 집계로 대체.
"""

from datetime import datetime, timedelta

from src.domain.schemas import (
    Activity,
    BreadcrumbItem,
    Dashboard,
    DashboardUser,
    Stat,
    UserStats,
)

ADMIN_USER = DashboardUser(name="Administrator", role="System Admin")


def build_dashboard(user_stats: UserStats | None = None, now: datetime | None = None) -> Dashboard:
    """
    대시보드 페이지 데이터.

    Args:
        user_stats: 저장소 집계 (None이면 데모 값 사용)
        now: 기준 시각 (테스트용)
    """
    now = now or datetime.now()

    active_users = Stat(
        title="Active Users",
        value="3,247",
        change="+18% from last month",
        icon="users",
        type="positive",
    )
    if user_stats is not None:
        active_users = Stat(
            title="Active Users",
            value=f"{user_stats.active_users:,}",
            change=f"{user_stats.total_users:,} registered",
            icon="users",
            type="neutral",
        )

    return Dashboard(
        title="Lokstra Dashboard",
        subtitle="Welcome to Lokstra Admin Dashboard - Modern Web Components Framework",
        user=ADMIN_USER,
        stats=[
            active_users,
            Stat("Total Revenue", "$89,320", "+12% from last month", "dollar-sign", "positive"),
            Stat("System Load", "67%", "-5% from last week", "cpu", "negative"),
            Stat("Response Time", "234ms", "Optimal performance", "zap", "neutral"),
        ],
        activities=[
            Activity(
                title="New user registration",
                description="user@example.com joined the platform",
                time=now - timedelta(minutes=10),
                type="user",
                icon="user-plus",
            ),
            Activity(
                title="System backup completed",
                description="Daily backup finished successfully",
                time=now - timedelta(hours=1),
                type="system",
                icon="server",
            ),
        ],
        breadcrumb=[
            BreadcrumbItem(title="Home", url="/"),
            BreadcrumbItem(title="Dashboard", url="/dashboard", active=True),
        ],
    )


def recent_activities(now: datetime | None = None) -> list[Activity]:
    """최근 활동 목록 (최신순)."""
    now = now or datetime.now()
    return [
        Activity(
            title="New user registered",
            description="john.doe@example.com joined the platform",
            time=now - timedelta(minutes=5),
            type="user",
            icon="user-plus",
        ),
        Activity(
            title="Report generated",
            description="Monthly analytics report completed",
            time=now - timedelta(minutes=15),
            type="report",
            icon="file-text",
        ),
        Activity(
            title="System backup",
            description="Automated backup completed successfully",
            time=now - timedelta(hours=1),
            type="system",
            icon="database",
        ),
        Activity(
            title="Payment received",
            description="$249.99 payment from Acme Corp",
            time=now - timedelta(hours=2),
            type="payment",
            icon="credit-card",
        ),
    ]


def project_stats() -> list[Stat]:
    """프로젝트 화면 통계 카드."""
    return [
        Stat("Active Projects", "12", "", "folder", "neutral"),
        Stat("Completed", "48", "", "check-circle", "positive"),
        Stat("In Progress", "8", "", "clock", "neutral"),
    ]
