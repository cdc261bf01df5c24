from __future__ import annotations

from dataclasses import dataclass

import structlog

from zpool_safety.collectors.command_runner import CommandRunner
from zpool_safety.collectors.pool_collector import PoolCollector
from zpool_safety.models.common import CollectorResult
from zpool_safety.models.findings import Finding, Recommendation
from zpool_safety.models.pool import PoolData
from zpool_safety.services.config_service import AnalyzerConfig
from zpool_safety.services.evaluator import ConditionEvaluator
from zpool_safety.services.report_service import ReportBundle, ReportService

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AnalysisOutcome:
    result: CollectorResult[PoolData]
    findings: list[Finding]
    report: ReportBundle

    @property
    def recommendation(self) -> Recommendation:
        return self.report.recommendation


class AnalysisService:
    """Collect, evaluate and report for one pool. Collection errors propagate."""

    def __init__(self, config: AnalyzerConfig, runner: CommandRunner | None = None) -> None:
        self.config = config
        self.collector = PoolCollector(pool=config.pool, runner=runner)
        self.evaluator = ConditionEvaluator(
            redundancy_marker=config.redundancy_marker,
            capacity_note_percent=config.capacity_note_percent,
            fragmentation_note_percent=config.fragmentation_note_percent,
        )
        self.reporter = ReportService(quota_percent=config.quota_percent)

    def run(self) -> AnalysisOutcome:
        result = self.collector.collect()
        findings = self.evaluator.evaluate(result.data)
        report = self.reporter.build_report(result, findings)
        log.info(
            "analysis.done",
            pool=self.config.pool,
            warnings=sum(1 for f in findings if f.is_warning),
            notes=sum(1 for f in findings if not f.is_warning),
            recommendation=report.recommendation.value,
        )
        return AnalysisOutcome(result=result, findings=findings, report=report)
