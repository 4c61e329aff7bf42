"""
Models Package
Exports all database models
"""
from olpm.models.user import User
from olpm.models.test import Test
from olpm.models.question import Question
from olpm.models.submission import TestSubmission
from olpm.models.answer import Answer

__all__ = ['User', 'Test', 'Question', 'TestSubmission', 'Answer']
