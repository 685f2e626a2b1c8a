"""
Diagnostics core: the Check convention, the sampler, the probe boundary and
rendering.

The orchestrator lives in storepulse.diagnostics.runner and is imported
from there; it depends on storepulse.probes, which depends on this package.
"""

from .checks import Check, CheckList, Severity, worst_severity
from .probe import ProbeConfig, probe
from .reporter import format_report, render, render_html, style_for
from .sampler import SampleStats, measure, run_multiple_times
from .thresholds import ThresholdTable

__all__ = [
    "Check",
    "CheckList",
    "ProbeConfig",
    "SampleStats",
    "Severity",
    "ThresholdTable",
    "format_report",
    "measure",
    "probe",
    "render",
    "render_html",
    "run_multiple_times",
    "style_for",
    "worst_severity",
]
