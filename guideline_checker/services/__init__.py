"""
Analysis services package.
"""
from guideline_checker.services.analysis_orchestrator import (
    run_compliance_check,
    validate_app_idea
)

__all__ = [
    'run_compliance_check',
    'validate_app_idea'
]
