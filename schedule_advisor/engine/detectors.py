"""The five conflict detectors."""

from __future__ import annotations

import logging
from typing import Dict, List

from schedule_advisor.domain.entities import Assignment, can_access
from schedule_advisor.services.timeplan import end_minutes, to_minutes
from schedule_advisor.services.workload import classify_workloads, unique_assignments

from .base import BaseDetector, DetectionContext, group_by_worker_day
from .conflicts import Conflict, ConflictType, Severity, make_conflict
from .resolutions import (
    double_booking_resolutions,
    routing_resolutions,
    security_resolutions,
    time_overlap_resolutions,
    workload_resolutions,
)

logger = logging.getLogger(__name__)


class DoubleBookingDetector(BaseDetector):
    """A worker named on two or more distinct assignments on the same day."""

    conflict_type = ConflictType.DOUBLE_BOOKING

    def detect(self, ctx: DetectionContext) -> List[Conflict]:
        conflicts: List[Conflict] = []
        for (worker_name, day), group in group_by_worker_day(ctx.snapshot.assignments).items():
            if len(group) < 2:
                continue
            conflicts.append(make_conflict(
                self.conflict_type,
                conflict_id=f"cleaner-conflict-{worker_name}|{day}",
                severity=Severity.CRITICAL if len(group) > 2 else Severity.HIGH,
                description=f"{worker_name} is scheduled for {len(group)} jobs on {day}",
                affected=group,
                resolutions=double_booking_resolutions(worker_name, group, ctx),
                scale=len(group),
            ))
        return conflicts


class TimeOverlapDetector(BaseDetector):
    """Adjacent timed assignments where the first ends after the next starts."""

    conflict_type = ConflictType.TIME_OVERLAP

    def detect(self, ctx: DetectionContext) -> List[Conflict]:
        conflicts: List[Conflict] = []
        groups = group_by_worker_day(ctx.snapshot.assignments, timed_only=True)
        for (worker_name, day), group in groups.items():
            if len(group) < 2:
                continue
            ordered = sorted(
                (a for a in group if to_minutes(a.start_time) is not None),
                key=lambda a: to_minutes(a.start_time),
            )
            for current, following in zip(ordered, ordered[1:]):
                if not current.hours:
                    continue
                if end_minutes(current.start_time, current.hours) > to_minutes(following.start_time):
                    conflicts.append(make_conflict(
                        self.conflict_type,
                        conflict_id=f"time-conflict-{worker_name}|{day}-{current.id}-{following.id}",
                        severity=Severity.HIGH,
                        description=(
                            f"{worker_name} has overlapping shifts on {day}: "
                            f"{current.site} runs past the {following.start_time} start of {following.site}"
                        ),
                        affected=[current, following],
                        resolutions=time_overlap_resolutions(current, following, ctx),
                    ))
        return conflicts


class SecurityAccessDetector(BaseDetector):
    """Workers below the clearance a site requires."""

    conflict_type = ConflictType.SECURITY_ACCESS

    def detect(self, ctx: DetectionContext) -> List[Conflict]:
        conflicts: List[Conflict] = []
        snapshot = ctx.snapshot
        for entry in snapshot.live():
            site = snapshot.site_for(entry)
            if site is None or site.clearance is None:
                continue

            unauthorized = []
            for name in entry.workers:
                worker = snapshot.worker(name)
                if worker is None:
                    logger.debug("Worker %s not in roster; skipping clearance check", name)
                    continue
                if not can_access(worker, site):
                    unauthorized.append(name)
            if not unauthorized:
                continue

            verb = "lacks" if len(unauthorized) == 1 else "lack"
            conflicts.append(make_conflict(
                self.conflict_type,
                conflict_id=f"security-access-{entry.id}",
                severity=Severity.CRITICAL,
                description=(
                    f"{', '.join(unauthorized)} {verb} required security clearance for "
                    f"{entry.site} (requires {site.clearance.value.upper()})"
                ),
                affected=[entry],
                resolutions=security_resolutions(entry, site, unauthorized, ctx),
            ))
        return conflicts


class WorkloadImbalanceDetector(BaseDetector):
    """Active workers far above and far below the mean attributed hours."""

    conflict_type = ConflictType.WORKLOAD_IMBALANCE

    def detect(self, ctx: DetectionContext) -> List[Conflict]:
        balance = classify_workloads(ctx.snapshot, ctx.cfg.imbalance_threshold)
        if balance is None or not balance.is_imbalanced:
            return []

        affected = unique_assignments(
            [load.assignments for load in balance.overloaded]
            + [load.assignments for load in balance.underloaded]
        )
        return [make_conflict(
            self.conflict_type,
            conflict_id="workload-imbalance",
            severity=Severity.MEDIUM,
            description=(
                f"{len(balance.overloaded)} cleaners are overloaded while "
                f"{len(balance.underloaded)} are underutilized "
                f"(mean {balance.mean_hours:.1f}h)"
            ),
            affected=affected,
            resolutions=workload_resolutions(balance.overloaded, balance.underloaded, ctx),
            scale=len(balance.overloaded),
        )]


class RoutingEfficiencyDetector(BaseDetector):
    """A worker travelling between several clients on one day."""

    conflict_type = ConflictType.ROUTING

    def detect(self, ctx: DetectionContext) -> List[Conflict]:
        conflicts: List[Conflict] = []
        for (worker_name, day), group in group_by_worker_day(ctx.snapshot.assignments).items():
            if len(group) < 2:
                continue
            by_client: Dict[str, List[Assignment]] = {}
            for entry in group:
                by_client.setdefault(entry.client, []).append(entry)
            if len(by_client) < 2:
                continue

            conflicts.append(make_conflict(
                self.conflict_type,
                conflict_id=f"location-efficiency-{worker_name}|{day}",
                severity=Severity.LOW,
                description=f"{worker_name} travels between {len(by_client)} different clients on {day}",
                affected=group,
                resolutions=routing_resolutions(by_client, ctx),
                scale=len(by_client),
            ))
        return conflicts


DEFAULT_DETECTORS = (
    DoubleBookingDetector,
    TimeOverlapDetector,
    SecurityAccessDetector,
    WorkloadImbalanceDetector,
    RoutingEfficiencyDetector,
)

GATE_DETECTORS = (
    DoubleBookingDetector,
    TimeOverlapDetector,
    SecurityAccessDetector,
)
