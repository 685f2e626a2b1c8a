"""Third-party extension / compliance detection."""

from __future__ import annotations

from ..collaborators.project import MagentoProject
from ..constants import EXTENSION_ADVISORIES
from ..diagnostics.checks import Check, CheckList, Severity
from ..diagnostics.probe import ProbeConfig, probe


def match_advisories(modules: list[str]) -> list[tuple[str, list[str], Severity, str]]:
    """(advisory key, matching modules, severity, advice) for every hit, in table order."""
    hits = []
    for key, (severity, advice) in EXTENSION_ADVISORIES.items():
        if key.endswith("_"):
            matched = [m for m in modules if m.startswith(key)]
        else:
            matched = [m for m in modules if m == key]
        if matched:
            hits.append((key, matched, Severity(severity), advice))
    return hits


def classify_extensions(modules: list[str]) -> CheckList:
    checks: CheckList = [Check.info(f"Enabled modules: {len(modules):,}")]
    hits = match_advisories(modules)
    if not hits:
        checks.append(Check.success("No flagged third-party extensions installed"))
        return checks
    for key, matched, severity, advice in hits:
        vendor = key.rstrip("_")
        if len(matched) > 1:
            label = f"{vendor}: {len(matched)} modules"
        else:
            label = matched[0]
        checks.append(Check(severity, f"{label} - {advice}"))
    return checks


@probe("Extensions")
async def check_extensions(project: MagentoProject, config: ProbeConfig) -> CheckList:
    return classify_extensions(project.installed_modules())
