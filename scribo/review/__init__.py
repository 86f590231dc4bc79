"""Client-side review workflow: analyzer calls, sessions and reporting."""

from .client import AnalyzerClient
from .orchestrator import ReviewOrchestrator
from .service import AnalysisService
from .session import AnalysisState, RuleSetSession

__all__ = [
    'AnalyzerClient',
    'AnalysisService',
    'AnalysisState',
    'RuleSetSession',
    'ReviewOrchestrator',
]
