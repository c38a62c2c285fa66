"""
Accessibility report construction from audit findings and contrast checks.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from tokenscope.config import ScoringConfig
from tokenscope.protocols import AccessibilityFinding, AccessibilitySignal, Severity, WCAGLevel
from tokenscope.schemas import AccessibilityReport, AccessibilitySummary, AccessibilityViolation, ContrastIssue

logger = structlog.get_logger(__name__)

SEVERITY_ORDER = (Severity.CRITICAL, Severity.SERIOUS, Severity.MODERATE, Severity.MINOR)

# Used when a finding carries no explicit WCAG level.
DEFAULT_LEVEL: Dict[Severity, WCAGLevel] = {
    Severity.CRITICAL: WCAGLevel.A,
    Severity.SERIOUS: WCAGLevel.AA,
    Severity.MODERATE: WCAGLevel.AA,
    Severity.MINOR: WCAGLevel.AAA,
}

RULE_RECOMMENDATIONS: Dict[str, str] = {
    "image-alt": "Add descriptive alt text to all images",
    "color-contrast": "Increase text contrast to at least 4.5:1 (3:1 for large text)",
    "label": "Associate every form control with a visible label",
    "button-name": "Give every button an accessible name",
    "link-name": "Give every link discernible text",
    "heading-order": "Keep heading levels sequential without skipping levels",
    "html-lang": "Declare the page language on the html element",
    "document-title": "Give every page a descriptive title",
    "landmark-one-main": "Wrap primary content in a single main landmark",
    "skip-link": "Add a skip link to bypass repeated navigation",
    "focus-visible": "Keep a visible focus indicator on interactive elements",
}


class AccessibilityAuditor:
    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig()

    def _from_finding(self, finding: AccessibilityFinding) -> AccessibilityViolation:
        level = finding.wcag_level or DEFAULT_LEVEL[finding.impact]
        return AccessibilityViolation(
            rule=finding.rule,
            impact=finding.impact.value,
            description=finding.description,
            element=finding.element,
            url=finding.url,
            guideline=finding.guideline,
            wcag_level=level.value,
            weight=self.config.severity_weights.get(finding.impact.value, 0.0),
        )

    def _from_contrast(self, issue: ContrastIssue) -> AccessibilityViolation:
        return AccessibilityViolation(
            rule="color-contrast",
            impact=Severity.SERIOUS.value,
            description=(
                f"Contrast ratio {issue.ratio}:1 of {issue.foreground} on {issue.background} "
                f"is below the required {issue.required}:1"
            ),
            element=f"{issue.foreground} on {issue.background}",
            guideline="1.4.3 Contrast (Minimum)",
            wcag_level=WCAGLevel.AA.value,
            weight=self.config.severity_weights.get(Severity.SERIOUS.value, 0.0),
        )

    @staticmethod
    def aggregate_signals(signals: Sequence[AccessibilitySignal]) -> Dict[str, bool]:
        """A signal holds site-wide only if every page that reported it had it."""
        merged: Dict[str, bool] = {}
        for signal in signals:
            merged[signal.name] = merged.get(signal.name, True) and signal.present
        return merged

    def build_report(
        self,
        findings: Sequence[AccessibilityFinding],
        signals: Sequence[AccessibilitySignal] = (),
        contrast_issues: Sequence[ContrastIssue] = (),
        contrast_checks: int = 0,
    ) -> Optional[AccessibilityReport]:
        """Return the report, or None when nothing was audited at all."""
        if not findings and not signals and not contrast_issues and contrast_checks == 0:
            return None

        violations: List[AccessibilityViolation] = []
        seen: set = set()
        candidates = [self._from_finding(f) for f in findings] + [self._from_contrast(i) for i in contrast_issues]
        for violation in candidates:
            key: Tuple[str, str, str] = (violation.url, violation.rule, violation.element)
            if key in seen:
                continue
            seen.add(key)
            violations.append(violation)

        rank = {severity.value: i for i, severity in enumerate(SEVERITY_ORDER)}
        violations.sort(key=lambda v: rank[v.impact])

        counts = {severity.value: 0 for severity in SEVERITY_ORDER}
        for violation in violations:
            counts[violation.impact] += 1
        penalty = sum(v.weight for v in violations)
        score = max(0.0, 100.0 - penalty)

        recommendations: List[str] = []
        for violation in violations:
            text = RULE_RECOMMENDATIONS.get(violation.rule, f"Resolve '{violation.rule}' violations")
            if text not in recommendations:
                recommendations.append(text)

        logger.debug("Accessibility report built", violations=len(violations), score=score)
        return AccessibilityReport(
            score=score,
            violations=violations,
            summary=AccessibilitySummary(total=len(violations), **counts),
            signals=self.aggregate_signals(signals),
            recommendations=recommendations,
        )
