"""
Services Package
"""
from olpm.services.grading_service import GradingService
from olpm.services.test_service import TestService
from olpm.services.submission_service import SubmissionService
from olpm.services.analytics_service import AnalyticsService

__all__ = ['GradingService', 'TestService', 'SubmissionService', 'AnalyticsService']
