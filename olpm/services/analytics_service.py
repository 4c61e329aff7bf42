"""
Analytics Service
Teacher and admin reporting over graded submissions
"""
from collections import OrderedDict
from datetime import timedelta
import csv
import io
import re

from olpm.errors import NotFoundError, ValidationError
from olpm.extensions import db
from olpm.models import Answer, Question, Test, TestSubmission, User
from olpm.services.test_service import TestService
from olpm.utils.helpers import (
    format_timestamp, grade_for_percentage, now_utc, percentage, utc_to_local,
)

GRADE_RANGES = OrderedDict([
    ('Excellent', 'Excellent (80-100%)'),
    ('Good', 'Good (60-79%)'),
    ('Average', 'Average (40-59%)'),
    ('Needs Improvement', 'Needs Improvement (0-39%)'),
])

CSV_HEADERS = [
    'Student Name', 'Email', 'Score', 'Total Questions', 'Percentage',
    'Time Taken (minutes)', 'Submitted At', 'Grade',
]


def _mean(values, places=2):
    values = [v for v in values if v is not None]
    if not values:
        return None
    return round(sum(values) / len(values), places)


def _round(value, places=2):
    return round(float(value), places) if value is not None else None


def _minutes(seconds):
    return round(seconds / 60.0, 2)


def _question_totals():
    """Subquery: test_id -> number of questions"""
    return db.session.query(
        Question.test_id.label('test_id'),
        db.func.count(Question.id).label('total'),
    ).group_by(Question.test_id).subquery()


def _grade_case(pct):
    return db.case(
        (pct >= 80, 'Excellent'),
        (pct >= 60, 'Good'),
        (pct >= 40, 'Average'),
        else_='Needs Improvement',
    )


class AnalyticsService:
    """Reporting over tests, submissions and answers"""

    @staticmethod
    def _submission_aggregates(totals):
        """Aggregate columns over submissions joined to their question totals"""
        pct = TestSubmission.score * 100.0 / totals.c.total
        return [
            db.func.count(TestSubmission.id).label('submission_count'),
            db.func.count(db.distinct(TestSubmission.student_id)).label('unique_students'),
            db.func.avg(pct).label('average_percentage'),
            db.func.min(pct).label('min_percentage'),
            db.func.max(pct).label('max_percentage'),
            db.func.avg(TestSubmission.time_taken_seconds / 60.0).label('average_time_minutes'),
        ]

    @staticmethod
    def question_analysis(test_id):
        """Per-question attempt counts, success rate and option spread"""
        def option_count(letter):
            return db.func.sum(db.case((Answer.selected_option == letter, 1), else_=0))

        rows = db.session.query(
            Question.id,
            Question.question_text,
            Question.correct_option,
            db.func.count(Answer.id).label('total_attempts'),
            db.func.sum(db.case((Answer.is_correct == True, 1), else_=0)).label('correct_attempts'),  # noqa: E712
            option_count('A').label('option_a_count'),
            option_count('B').label('option_b_count'),
            option_count('C').label('option_c_count'),
            option_count('D').label('option_d_count'),
        ).outerjoin(Answer, Answer.question_id == Question.id)\
         .filter(Question.test_id == test_id)\
         .group_by(Question.id, Question.question_text, Question.correct_option)\
         .order_by(Question.id).all()

        analysis = []
        for row in rows:
            total = int(row.total_attempts or 0)
            correct = int(row.correct_attempts or 0)
            analysis.append({
                'id': row.id,
                'question_text': row.question_text,
                'correct_option': row.correct_option,
                'total_attempts': total,
                'correct_attempts': correct,
                'success_rate': round(correct * 100.0 / total, 2) if total else None,
                'option_a_count': int(row.option_a_count or 0),
                'option_b_count': int(row.option_b_count or 0),
                'option_c_count': int(row.option_c_count or 0),
                'option_d_count': int(row.option_d_count or 0),
            })
        return analysis

    @staticmethod
    def teacher_analytics(teacher, test_id=None):
        """Overall, per-test and (optionally) per-question statistics for a teacher"""
        query = Test.query.filter_by(teacher_id=teacher.id)
        if test_id is not None:
            query = query.filter_by(id=test_id)
        tests = query.order_by(Test.created_at.desc(), Test.id.desc()).all()

        if test_id is not None and not tests:
            raise NotFoundError('Test not found or unauthorized')

        test_ids = [t.id for t in tests]
        counts = TestService.question_counts(test_ids)
        totals = _question_totals()
        aggregates = AnalyticsService._submission_aggregates(totals)

        base = db.session.query(*aggregates)\
            .join(totals, totals.c.test_id == TestSubmission.test_id)\
            .filter(TestSubmission.test_id.in_(test_ids))
        overall = base.one()

        per_test = {
            row.test_id: row
            for row in db.session.query(TestSubmission.test_id, *aggregates)
            .join(totals, totals.c.test_id == TestSubmission.test_id)
            .filter(TestSubmission.test_id.in_(test_ids))
            .group_by(TestSubmission.test_id).all()
        }

        overall_stats = {
            'total_tests': len(tests),
            'total_submissions': int(overall.submission_count or 0),
            'unique_students': int(overall.unique_students or 0),
            'average_percentage': _round(overall.average_percentage),
            'average_time_minutes': _round(overall.average_time_minutes),
        }

        test_stats = []
        for test in tests:
            row = per_test.get(test.id)
            test_stats.append({
                'id': test.id,
                'title': test.title,
                'duration_minutes': test.duration_minutes,
                'created_at': format_timestamp(test.created_at),
                'submission_count': int(row.submission_count) if row else 0,
                'unique_students': int(row.unique_students) if row else 0,
                'average_percentage': _round(row.average_percentage) if row else None,
                'min_percentage': _round(row.min_percentage) if row else None,
                'max_percentage': _round(row.max_percentage) if row else None,
                'average_time_minutes': _round(row.average_time_minutes) if row else None,
                'total_questions': counts[test.id],
            })

        return {
            'overall_stats': overall_stats,
            'test_stats': test_stats,
            'question_analysis': (
                AnalyticsService.question_analysis(test_id) if test_id is not None else []
            ),
        }

    @staticmethod
    def ranked_submissions(test):
        """Submissions best first (score desc, time asc) with competition ranks"""
        total = TestService.question_counts({test.id})[test.id]
        submissions = TestSubmission.query.filter_by(test_id=test.id).order_by(
            TestSubmission.score.desc(),
            TestSubmission.time_taken_seconds.asc(),
            TestSubmission.id.asc()
        ).all()

        ranked = []
        previous = None
        rank = 0
        for position, submission in enumerate(submissions, 1):
            key = (submission.score, submission.time_taken_seconds)
            if key != previous:
                rank = position
                previous = key
            pct = percentage(submission.score, total)
            student = submission.student
            ranked.append({
                'submission_id': submission.id,
                'score': submission.score,
                'time_taken_seconds': submission.time_taken_seconds,
                'submitted_at': format_timestamp(submission.submitted_at),
                'student_id': submission.student_id,
                'student_name': student.name if student else None,
                'student_email': student.email if student else None,
                'total_questions': total,
                'percentage': pct,
                'time_taken_minutes': _minutes(submission.time_taken_seconds),
                'grade': grade_for_percentage(pct),
                'rank': rank,
            })
        return ranked

    @staticmethod
    def student_performance(test):
        """Ranked per-student results for one test"""
        ranked = AnalyticsService.ranked_submissions(test)
        pcts = [row['percentage'] for row in ranked]
        return {
            'test_details': {
                'title': test.title,
                'description': test.description,
                'duration_minutes': test.duration_minutes,
                'created_at': format_timestamp(test.created_at),
                'total_questions': TestService.question_counts({test.id})[test.id],
            },
            'student_performance': ranked,
            'summary': {
                'total_submissions': len(ranked),
                'average_score': _mean(pcts) or 0,
                'highest_score': max(pcts) if pcts else 0,
                'lowest_score': min(pcts) if pcts else 0,
            },
        }

    @staticmethod
    def comparison(test):
        """Grade distribution and time usage for one test"""
        total = TestService.question_counts({test.id})[test.id]
        pct = TestSubmission.score * 100.0 / total
        grade = _grade_case(pct).label('grade')

        counts = dict(
            db.session.query(grade, db.func.count(TestSubmission.id))
            .filter(TestSubmission.test_id == test.id)
            .group_by(grade).all()
        )
        grade_distribution = [
            {'grade_range': label, 'student_count': counts[name]}
            for name, label in GRADE_RANGES.items() if counts.get(name)
        ]

        duration_seconds = test.duration_minutes * 60
        seconds = TestSubmission.time_taken_seconds
        timing = db.session.query(
            db.func.avg(seconds / 60.0).label('average'),
            db.func.min(seconds).label('fastest'),
            db.func.max(seconds).label('slowest'),
            db.func.sum(db.case((seconds <= duration_seconds * 0.5, 1), else_=0)).label('early'),
            db.func.sum(db.case((seconds >= duration_seconds * 0.9, 1), else_=0)).label('most'),
        ).filter(TestSubmission.test_id == test.id).one()

        time_analysis = {
            'average_time_minutes': _round(timing.average),
            'fastest_time_minutes': _minutes(timing.fastest) if timing.fastest is not None else None,
            'slowest_time_minutes': _minutes(timing.slowest) if timing.slowest is not None else None,
            'finished_early_count': int(timing.early or 0),
            'used_most_time_count': int(timing.most or 0),
        }

        return {
            'grade_distribution': grade_distribution,
            'time_analysis': time_analysis,
        }

    @staticmethod
    def export_filename(test):
        return re.sub(r'[^a-zA-Z0-9]', '_', test.title) + '_results.csv'

    @staticmethod
    def export_csv(test):
        """
        CSV of every submission for a test, best first
        Returns None when nobody has submitted yet
        """
        ranked = AnalyticsService.ranked_submissions(test)
        if not ranked:
            return None

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        writer.writerow(CSV_HEADERS)
        for row in ranked:
            writer.writerow([
                row['student_name'],
                row['student_email'],
                row['score'],
                row['total_questions'],
                row['percentage'],
                row['time_taken_minutes'],
                row['submitted_at'],
                row['grade'],
            ])
        return buffer.getvalue()

    @staticmethod
    def admin_analytics(range_days):
        """Platform-wide activity for tests created in the last range_days days"""
        try:
            days = int(range_days)
        except (TypeError, ValueError):
            raise ValidationError('range must be a whole number of days')
        if days <= 0:
            raise ValidationError('range must be positive')

        recent = Test.created_at >= now_utc() - timedelta(days=days)
        totals = _question_totals()
        pct = TestSubmission.score * 100.0 / totals.c.total

        tests = db.session.query(
            db.func.count(Test.id).label('total_tests'),
            db.func.count(db.distinct(Test.teacher_id)).label('active_teachers'),
        ).filter(recent).one()

        submissions = db.session.query(
            db.func.count(TestSubmission.id).label('total_submissions'),
            db.func.count(db.distinct(TestSubmission.student_id)).label('unique_students'),
            db.func.avg(pct).label('average_percentage'),
        ).join(Test, Test.id == TestSubmission.test_id)\
         .join(totals, totals.c.test_id == TestSubmission.test_id)\
         .filter(recent).one()

        overall_stats = {
            'total_tests': int(tests.total_tests or 0),
            'total_submissions': int(submissions.total_submissions or 0),
            'unique_students': int(submissions.unique_students or 0),
            'active_teachers': int(tests.active_teachers or 0),
            'platform_average_percentage': _round(submissions.average_percentage),
        }

        tests_created = db.func.count(db.distinct(Test.id))
        rows = db.session.query(
            User.name,
            tests_created.label('tests_created'),
            db.func.count(TestSubmission.id).label('total_submissions_received'),
            db.func.avg(pct).label('average_class_performance'),
        ).join(Test, Test.teacher_id == User.id)\
         .outerjoin(TestSubmission, TestSubmission.test_id == Test.id)\
         .outerjoin(totals, totals.c.test_id == TestSubmission.test_id)\
         .filter(recent)\
         .group_by(User.id, User.name)\
         .order_by(tests_created.desc(), User.name).all()

        teacher_activity = [
            {
                'teacher_name': row.name,
                'tests_created': int(row.tests_created),
                'total_submissions_received': int(row.total_submissions_received),
                'average_class_performance': _round(row.average_class_performance),
            }
            for row in rows
        ]

        # Bucket by the display time zone so dates match the rest of the API
        trends = {}
        for (created_at,) in db.session.query(Test.created_at).filter(recent):
            day = utc_to_local(created_at).date().isoformat()
            trends[day] = trends.get(day, 0) + 1
        creation_trends = [
            {'date': day, 'tests_created': count}
            for day, count in sorted(trends.items(), reverse=True)
        ]

        return {
            'time_range_days': days,
            'overall_stats': overall_stats,
            'teacher_activity': teacher_activity,
            'creation_trends': creation_trends,
        }
