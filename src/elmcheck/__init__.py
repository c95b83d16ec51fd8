# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run the Elm compiler on save and publish its diagnostics per file."""

from __future__ import annotations

from .analyzer import AnalyzerIssues
from .config import Config, OverlapPolicy, load_config
from .errors import (
    CompilerOutputError,
    ConfigError,
    ElmCheckError,
    InvocationError,
    InvocationTimeoutError,
    ReportError,
)
from .invocation import CompilerInvocation, InvocationResult, check_for_errors
from .models import Diagnostic, HostDiagnostic, Position, Region, to_host_diagnostic
from .project import ToolchainGeneration
from .publisher import DiagnosticCollection, DiagnosticPublisher, PublishReport, SavedDocument
from .severity import HostSeverity, Severity

__version__ = "0.1.0"

__all__ = [
    "AnalyzerIssues",
    "CompilerInvocation",
    "CompilerOutputError",
    "Config",
    "ConfigError",
    "Diagnostic",
    "DiagnosticCollection",
    "DiagnosticPublisher",
    "ElmCheckError",
    "HostDiagnostic",
    "HostSeverity",
    "InvocationError",
    "InvocationResult",
    "InvocationTimeoutError",
    "OverlapPolicy",
    "Position",
    "PublishReport",
    "Region",
    "ReportError",
    "SavedDocument",
    "Severity",
    "ToolchainGeneration",
    "check_for_errors",
    "load_config",
    "to_host_diagnostic",
]
