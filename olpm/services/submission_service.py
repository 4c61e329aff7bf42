"""
Submission Service
Grades and records attempts, and reads graded results back
"""
import logging
import math

from flask import current_app

from olpm.errors import AuthorizationError, NotFoundError, ValidationError
from olpm.extensions import db
from olpm.models import Answer, Question, Test, TestSubmission
from olpm.services.grading_service import GradingService
from olpm.services.test_service import TestService
from olpm.services.transaction import atomic
from olpm.utils.helpers import format_timestamp, grade_for_percentage, percentage

logger = logging.getLogger(__name__)


def serialize_submission(submission):
    return {
        'id': submission.id,
        'test_id': submission.test_id,
        'student_id': submission.student_id,
        'score': submission.score,
        'time_taken_seconds': submission.time_taken_seconds,
        'submitted_at': format_timestamp(submission.submitted_at),
    }


class SubmissionService:
    """Submission ledger"""

    @staticmethod
    def validate_time_taken(raw):
        """Client-reported elapsed seconds; advisory only"""
        if raw is None or raw == '':
            return 0
        if isinstance(raw, bool):
            raise ValidationError('time_taken_seconds must be a non-negative integer')
        try:
            seconds = int(raw)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError('time_taken_seconds must be a non-negative integer')
        if (isinstance(raw, float) and raw != seconds) or seconds < 0:
            raise ValidationError('time_taken_seconds must be a non-negative integer')
        return seconds

    @staticmethod
    def submit(test_id, student, answers, time_taken_seconds):
        """
        Grade a student's answers and record the attempt

        The score is computed before anything is written, then the submission
        and one answer row per question are committed together.

        Returns:
            TestSubmission: the committed submission
        """
        answers = GradingService.normalize_answers(answers)
        time_taken = SubmissionService.validate_time_taken(time_taken_seconds)

        answer_key = TestService.answer_key(test_id)
        if not answer_key:
            raise NotFoundError('Test not found')

        score, rows = GradingService.grade(answer_key, answers)

        with atomic('submit test'):
            submission = TestSubmission(
                test_id=test_id,
                student_id=student.id,
                score=score,
                time_taken_seconds=time_taken,
            )
            db.session.add(submission)
            db.session.flush()

            for row in rows:
                db.session.add(Answer(submission_id=submission.id, **row))
            db.session.flush()

        logger.info(
            "Student %s submitted test %s: score %d/%d (submission %s)",
            student.id, test_id, score, len(answer_key), submission.id,
        )
        return submission

    @staticmethod
    def can_view(viewer, student_id, test):
        if viewer.role == 'admin' or viewer.id == student_id:
            return True
        return viewer.role == 'teacher' and test is not None and test.teacher_id == viewer.id

    @staticmethod
    def get_latest_result(test_id, student_id, viewer):
        """
        Most recent graded attempt of a student on a test
        Students may attempt a test more than once; newest wins
        """
        if current_app.config['RESTRICT_RESULT_ACCESS']:
            test = db.session.get(Test, test_id)
            if not SubmissionService.can_view(viewer, student_id, test):
                raise AuthorizationError('You are not allowed to view this result')

        submission = TestSubmission.query.filter_by(
            test_id=test_id, student_id=student_id
        ).order_by(
            TestSubmission.submitted_at.desc(),
            TestSubmission.id.desc()
        ).first()

        if not submission:
            raise NotFoundError('No result found')
        return submission

    @staticmethod
    def list_student_results(student, page=1, limit=None):
        """Paginated history of a student's attempts, newest first"""
        max_limit = current_app.config['RESULTS_MAX_PAGE_SIZE']
        limit = limit or current_app.config['RESULTS_PAGE_SIZE']
        if page < 1 or limit < 1:
            raise ValidationError('page and limit must be positive')
        limit = min(limit, max_limit)

        query = db.select(TestSubmission).filter_by(student_id=student.id).order_by(
            TestSubmission.submitted_at.desc(),
            TestSubmission.id.desc()
        )
        pagination = db.paginate(query, page=page, per_page=limit, error_out=False)

        counts = TestService.question_counts({s.test_id for s in pagination.items})
        results = []
        for submission in pagination.items:
            test = submission.test
            total = counts.get(test.id, 0)
            pct = percentage(submission.score, total)
            results.append({
                'submission_id': submission.id,
                'score': submission.score,
                'time_taken_seconds': submission.time_taken_seconds,
                'submitted_at': format_timestamp(submission.submitted_at),
                'test_id': test.id,
                'test_title': test.title,
                'test_description': test.description,
                'duration_minutes': test.duration_minutes,
                'teacher_name': test.teacher.name if test.teacher else None,
                'total_questions': total,
                'percentage': pct,
                'grade': grade_for_percentage(pct),
            })

        total_pages = math.ceil(pagination.total / limit) if pagination.total else 0
        return {
            'results': results,
            'pagination': {
                'current_page': page,
                'total_pages': total_pages,
                'total_results': pagination.total,
                'has_next': page < total_pages,
                'has_prev': page > 1,
            },
        }

    @staticmethod
    def get_detailed_submission(submission_id, viewer):
        """Full graded view of one submission, answer key included"""
        submission = db.session.get(TestSubmission, submission_id)
        if not submission:
            raise NotFoundError('Test submission not found')

        test = submission.test
        if viewer.role == 'student' and submission.student_id != viewer.id:
            raise AuthorizationError('You can only view your own test results')
        if viewer.role == 'teacher' and test.teacher_id != viewer.id:
            raise AuthorizationError('You can only view results for your own tests')

        total = TestService.question_counts({test.id})[test.id]
        pct = percentage(submission.score, total)

        rows = db.session.query(Answer, Question)\
            .join(Question, Answer.question_id == Question.id)\
            .filter(Answer.submission_id == submission.id)\
            .order_by(Question.id).all()

        answers = [
            {
                'question_id': question.id,
                'selected_option': answer.selected_option,
                'is_correct': answer.is_correct,
                'question_text': question.question_text,
                'option_a': question.option_a,
                'option_b': question.option_b,
                'option_c': question.option_c,
                'option_d': question.option_d,
                'correct_option': question.correct_option,
            }
            for answer, question in rows
        ]

        detail = serialize_submission(submission)
        detail.update({
            'test_title': test.title,
            'test_description': test.description,
            'duration_minutes': test.duration_minutes,
            'teacher_id': test.teacher_id,
            'student_name': submission.student.name if submission.student else None,
            'teacher_name': test.teacher.name if test.teacher else None,
            'total_questions': total,
            'percentage': pct,
        })

        return {
            'submission': detail,
            'answers': answers,
            'summary': {
                'correct_answers': submission.score,
                'total_questions': total,
                'percentage': pct,
                'time_taken_minutes': int(submission.time_taken_seconds / 60 + 0.5),
                'grade': grade_for_percentage(pct),
            },
        }
