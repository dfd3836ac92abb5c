"""
Project Analysis

- ProjectAnalyzer: README-grounded summaries through a chat session
"""

from .service import (
    NO_DOCUMENTATION_MESSAGE,
    SYSTEM_PROMPT,
    ProjectAnalyzer,
    build_analysis_messages,
)

__all__ = [
    "NO_DOCUMENTATION_MESSAGE",
    "SYSTEM_PROMPT",
    "ProjectAnalyzer",
    "build_analysis_messages",
]
