"""
prereqscan - find the modules a Perl code base depends on, without running
Perl.
"""

from .context import Context, Handler
from .requirements import Requirement, RequirementKind, Requirements, ScanReport
from .scan import Scanner

__version__ = "0.1.0"

__all__ = [
    "Context",
    "Handler",
    "Requirement",
    "RequirementKind",
    "Requirements",
    "ScanReport",
    "Scanner",
    "__version__",
]
