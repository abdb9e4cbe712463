"""
Core services - business logic and domain services.
"""
from .ac_parser import CriteriaParser
from .step_classifier import StepClassifier, classify_action, classify_verification
from .test_case_factory import TestCaseGenerator
from .test_validator import TestCaseValidator, ValidationResult, ValidationSeverity
from .metrics import StructuredLogger, get_logger

__all__ = [
    'CriteriaParser',
    'StepClassifier',
    'classify_action',
    'classify_verification',
    'TestCaseGenerator',
    'TestCaseValidator',
    'ValidationResult',
    'ValidationSeverity',
    # Logging
    'StructuredLogger',
    'get_logger',
]
