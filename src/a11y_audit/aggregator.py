"""Runs selected rules over snapshots and collects the findings into a Report."""

import asyncio
from typing import Iterable, Sequence

import structlog

from .config import settings
from .models import ERROR_KIND, Finding, Report
from .registry import Rule, RuleRegistry
from .rules import default_registry
from .snapshot import Snapshot

logger = structlog.get_logger()


def _error_finding(rule: Rule, error: Exception, url: str | None) -> Finding:
    return Finding(
        criterion_id=rule.criterion_id,
        severity=rule.severity,
        element_ref=None,
        message=f"Rule {rule.criterion_id}/{rule.variant} failed to evaluate: {error}",
        remediation="Check the snapshot for malformed data; the rule was skipped",
        kind=ERROR_KIND,
        url=url,
    )


def _run_rule(rule: Rule, target: Snapshot | Sequence[Snapshot], url: str | None) -> list[Finding]:
    """Evaluate one rule, turning any exception into a single error finding."""
    try:
        if not rule.is_applicable(target):
            return []
        return rule.evaluate(target)
    except Exception as e:
        logger.error(
            "Rule evaluation failed",
            criterion=rule.criterion_id,
            variant=rule.variant,
            url=url,
            error=str(e),
        )
        return [_error_finding(rule, e, url)]


def audit_page(snapshot: Snapshot, rules: Iterable[Rule]) -> Report:
    """Report for one page: per-page rules only, in the order given."""
    findings: list[Finding] = []
    for rule in rules:
        if rule.cross_page:
            continue
        findings.extend(_run_rule(rule, snapshot, snapshot.url))

    logger.debug("Page audited", url=snapshot.url, findings=len(findings))
    return Report(pages=(snapshot.url,), findings=tuple(findings))


def audit_site(snapshots: Sequence[Snapshot], rules: Iterable[Rule]) -> list[Finding]:
    """Findings of the cross-page rules over the snapshots in visitation order."""
    findings: list[Finding] = []
    for rule in rules:
        if rule.cross_page:
            findings.extend(_run_rule(rule, snapshots, None))
    return findings


def select_rules(
    level=None,
    tags: Iterable[str] | None = None,
    criteria: Iterable[str] | None = None,
    registry: RuleRegistry | None = None,
) -> list[Rule]:
    if registry is None:
        registry = default_registry()
    if level is None:
        level = settings.default_level
    return registry.rules_for(level=level, tags=tags, criteria=criteria)


def _finish(page_reports: list[Report], snapshots: Sequence[Snapshot], rules: list[Rule]) -> Report:
    report = Report.merge(page_reports, extra=audit_site(snapshots, rules))
    logger.info(
        "Audit complete",
        pages=len(report.pages),
        rules=len(rules),
        findings=len(report.findings),
        errors=len(report.errors),
    )
    return report


def run_audit(
    snapshots: Snapshot | Sequence[Snapshot],
    level=None,
    tags: Iterable[str] | None = None,
    criteria: Iterable[str] | None = None,
    registry: RuleRegistry | None = None,
) -> Report:
    """Audit snapshots in visitation order.

    Args:
        snapshots: One snapshot or the ordered snapshots of a site visit.
        level: "A", "AA", a Level, or None for the configured default.
        tags: Restrict to rules carrying any of these tags or principles.
        criteria: Restrict to these criterion ids.
        registry: Rules to draw from; the built-in rules when omitted.

    Returns:
        Report with page findings in visitation order, cross-page findings last.
    """
    if isinstance(snapshots, Snapshot):
        snapshots = [snapshots]
    snapshots = list(snapshots)
    rules = select_rules(level, tags, criteria, registry)

    logger.info("Starting audit", pages=len(snapshots), rules=len(rules))
    page_reports = [audit_page(snapshot, rules) for snapshot in snapshots]
    return _finish(page_reports, snapshots, rules)


async def run_audit_concurrently(
    snapshots: Sequence[Snapshot],
    level=None,
    tags: Iterable[str] | None = None,
    criteria: Iterable[str] | None = None,
    registry: RuleRegistry | None = None,
    concurrency: int | None = None,
) -> Report:
    """Same report as run_audit, with pages evaluated in worker threads.

    Page reports are merged by visitation order, never by completion order.
    """
    snapshots = list(snapshots)
    rules = select_rules(level, tags, criteria, registry)
    semaphore = asyncio.Semaphore(concurrency or settings.max_concurrent_pages)

    async def audit_with_semaphore(snapshot: Snapshot) -> Report:
        async with semaphore:
            logger.debug("Auditing page", url=snapshot.url)
            return await asyncio.to_thread(audit_page, snapshot, rules)

    logger.info("Starting concurrent audit", pages=len(snapshots), rules=len(rules))
    page_reports = await asyncio.gather(*(audit_with_semaphore(s) for s in snapshots))
    return _finish(list(page_reports), snapshots, rules)
