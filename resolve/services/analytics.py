"""
Admin analytics computed from an already fetched complaint list
"""
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from resolve.constants import HIGH_PRIORITY_THRESHOLD
from resolve.models import (
    AnalyticsSummary,
    CategoryResolution,
    Complaint,
    ComplaintStatus,
    DailyCount,
    Rating,
    Severity,
)

TREND_DAYS = 7
TOP_CATEGORIES = 5
CATEGORY_LABEL_LENGTH = 15


def _daily_trend(complaints: Sequence[Complaint], today: datetime) -> List[DailyCount]:
    counts: Dict[object, int] = defaultdict(int)
    for complaint in complaints:
        if complaint.created_at:
            counts[complaint.created_at.date()] += 1

    trend = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = (today - timedelta(days=offset)).date()
        trend.append(DailyCount(date=day.strftime("%b %d"), complaints=counts.get(day, 0)))
    return trend


def _slowest_categories(complaints: Sequence[Complaint]) -> List[CategoryResolution]:
    totals: Dict[str, List[float]] = defaultdict(list)
    for complaint in complaints:
        hours = complaint.resolution_hours
        if complaint.ai_category and hours is not None:
            totals[complaint.ai_category].append(hours)

    rows = []
    for category, hours in totals.items():
        label = category if len(category) <= CATEGORY_LABEL_LENGTH else category[:CATEGORY_LABEL_LENGTH] + "..."
        rows.append(CategoryResolution(category=label, hours=round(sum(hours) / len(hours))))

    rows.sort(key=lambda row: row.hours, reverse=True)
    return rows[:TOP_CATEGORIES]


def summarize(
    complaints: Sequence[Complaint],
    ratings: Sequence[Rating] = (),
    now: Optional[datetime] = None,
) -> AnalyticsSummary:
    """Totals, breakdowns, trend and resolution times for the admin view"""
    now = now or datetime.now(timezone.utc)

    by_status = {status.value: 0 for status in ComplaintStatus}
    by_severity = {severity.value: 0 for severity in Severity}
    for complaint in complaints:
        by_status[complaint.status.value] += 1
        by_severity[complaint.severity.value] += 1

    resolution_hours = [c.resolution_hours for c in complaints if c.resolution_hours is not None]
    average_resolution = sum(resolution_hours) / len(resolution_hours) if resolution_hours else 0.0

    average_rating = None
    if ratings:
        average_rating = round(sum(r.rating for r in ratings) / len(ratings), 2)

    return AnalyticsSummary(
        total=len(complaints),
        by_status=by_status,
        by_severity=by_severity,
        resolved=sum(1 for c in complaints if c.status.is_terminal),
        open_urgent=sum(
            1 for c in complaints if c.severity is Severity.URGENT and not c.status.is_terminal
        ),
        high_priority=sum(
            1 for c in complaints if (c.priority_score or 0) > HIGH_PRIORITY_THRESHOLD
        ),
        average_resolution_hours=round(average_resolution, 1),
        average_rating=average_rating,
        trend=_daily_trend(complaints, now),
        slowest_categories=_slowest_categories(complaints),
    )
