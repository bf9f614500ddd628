"""
Reports service - team performance report and flat case export
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from case_review.models.case import Case
from case_review.models.enums import CaseStatus
from case_review.utils.helpers import utc_now

logger = logging.getLogger(__name__)

# OKW is credited with at most this many days of a case's elapsed time
OKW_DAYS_CAP = 3

SECONDS_PER_DAY = 60 * 60 * 24

OKW_STATUSES = {CaseStatus.WITH_OKW, CaseStatus.WITH_CDD, CaseStatus.APPROVED, CaseStatus.REJECTED}
CDD_STATUSES = {CaseStatus.WITH_CDD, CaseStatus.APPROVED, CaseStatus.REJECTED}

class TeamMetrics(BaseModel):
    total_cases: int = 0
    total_days: int = 0
    avg_days: float = 0.0

class QueueCounters(BaseModel):
    pending: int = 0
    in_review: int = 0
    completed: int = 0

class CaseSummaryRecord(BaseModel):
    """One row of the flat case export, in case-creation order"""
    case_id: str
    client_name: str
    status: CaseStatus
    submitted_at: datetime
    updated_at: datetime
    days_since_submission: int
    current_assignee: str

class ReportSummary(BaseModel):
    total_cases: int
    team_metrics: Dict[str, TeamMetrics]
    status_distribution: Dict[str, int]
    queue: QueueCounters

class CaseReport(BaseModel):
    generated_at: datetime
    summary: ReportSummary
    case_details: List[CaseSummaryRecord] = Field(default_factory=list)

def elapsed_days(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up"""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)

def _finalize(metrics: TeamMetrics) -> TeamMetrics:
    avg_days = metrics.total_days / metrics.total_cases if metrics.total_cases else 0.0
    return metrics.model_copy(update={"avg_days": avg_days})

def calculate_team_metrics(cases: Iterable[Case]) -> Dict[str, TeamMetrics]:
    """
    Per-team processing time.

    OKW is credited with every case that left pending, for at most
    OKW_DAYS_CAP days; CDD with every case that reached it, for the days
    beyond that.
    """
    okw = TeamMetrics()
    cdd = TeamMetrics()
    overall = TeamMetrics()

    for case in cases:
        days = elapsed_days(case.submitted_at, case.updated_at)
        overall.total_cases += 1
        overall.total_days += days

        if case.status in OKW_STATUSES:
            okw.total_cases += 1
            okw.total_days += min(days, OKW_DAYS_CAP)

        if case.status in CDD_STATUSES:
            cdd.total_cases += 1
            cdd.total_days += max(0, days - OKW_DAYS_CAP)

    return {"okw": _finalize(okw), "cdd": _finalize(cdd), "overall": _finalize(overall)}

def status_distribution(cases: Iterable[Case]) -> Dict[str, int]:
    counts = {status.value: 0 for status in CaseStatus}
    for case in cases:
        counts[case.status.value] += 1
    return counts

def queue_counters(cases: Iterable[Case]) -> QueueCounters:
    counts = status_distribution(cases)
    return QueueCounters(
        pending=counts[CaseStatus.PENDING.value],
        in_review=counts[CaseStatus.WITH_OKW.value] + counts[CaseStatus.WITH_CDD.value],
        completed=counts[CaseStatus.APPROVED.value] + counts[CaseStatus.REJECTED.value],
    )

def export_records(cases: Iterable[Case], now: datetime) -> List[CaseSummaryRecord]:
    return [
        CaseSummaryRecord(
            case_id=case.case_id,
            client_name=case.client_info.client_name,
            status=case.status,
            submitted_at=case.submitted_at,
            updated_at=case.updated_at,
            days_since_submission=elapsed_days(case.submitted_at, now),
            current_assignee=case.current_assignee,
        )
        for case in cases
    ]

def build_report(cases: Iterable[Case], now: Optional[datetime] = None) -> CaseReport:
    """
    Build the team performance report over `cases`

    Args:
        cases: Cases to report on, in creation order
        now: Report time (default: current UTC time)

    Returns:
        CaseReport with summary metrics and the flat export records
    """
    cases = list(cases)
    now = now or utc_now()

    report = CaseReport(
        generated_at=now,
        summary=ReportSummary(
            total_cases=len(cases),
            team_metrics=calculate_team_metrics(cases),
            status_distribution=status_distribution(cases),
            queue=queue_counters(cases),
        ),
        case_details=export_records(cases, now),
    )
    logger.info(f"Built case report over {len(cases)} cases")
    return report
