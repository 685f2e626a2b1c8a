"""
Rendering of check lists.

render() produces the admin console markup: a title line followed by one
styled line per check in input order. format_report() is the plain-text
variant used by the CLI.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

from ..constants import DEFAULT_STYLE, SEVERITY_STYLES, TITLE_STYLE
from .checks import CheckList, Severity

if TYPE_CHECKING:
    from .runner import ConsoleReport


def style_for(severity: Severity) -> str:
    """Map a severity to its style token; unknown values get the info style."""
    value = getattr(severity, "value", severity)
    return SEVERITY_STYLES.get(value, DEFAULT_STYLE)


def render(title: str, checks: CheckList) -> str:
    lines = [f"<div class='{TITLE_STYLE}'>{html.escape(title)}</div>"]
    for check in checks:
        lines.append(
            f"<div class='{style_for(check.severity)}'>{html.escape(check.message)}</div>"
        )
    return "\n".join(lines)


_ICONS = {
    Severity.SUCCESS: "✅",
    Severity.WARNING: "⚠️",
    Severity.ERROR: "❌",
    Severity.INFO: "ℹ️",
}


def _format_duration(duration_ms: float) -> str:
    if duration_ms < 1:
        return "<1ms"
    if duration_ms < 1000:
        return f"{duration_ms:.0f}ms"
    return f"{duration_ms / 1000:.1f}s"


def render_html(report: "ConsoleReport") -> str:
    """Render every section of a report with render()."""
    return "\n".join(render(section.title, section.checks) for section in report.sections)


def format_report(report: "ConsoleReport") -> str:
    """Format a full console report as plain text for a terminal."""
    lines = []

    if report.overall == Severity.SUCCESS:
        lines.append("🟢 All checks passed")
    elif report.overall == Severity.WARNING:
        lines.append("🟡 Attention needed")
    else:
        lines.append("🔴 Problems found")

    lines.append("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")

    for section in report.sections:
        lines.append("")
        lines.append(f"{section.title} ({_format_duration(section.duration_ms)})")
        for check in section.checks:
            lines.append(f"  {_ICONS.get(check.severity, _ICONS[Severity.INFO])} {check.message}")

    lines.append("")
    lines.append("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
    lines.append(f"storepulse {report.version} on Python {report.python_version}")

    if report.total_duration_ms < 1000:
        total_str = f"{report.total_duration_ms:.0f}ms"
    else:
        total_str = f"{report.total_duration_ms / 1000:.2f}s"
    lines.append(f"⏱️ Total diagnostics time: {total_str}")

    return "\n".join(lines)
