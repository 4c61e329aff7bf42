"""
Test Routes
Create, take, submit and review tests; teacher and admin reporting
"""
from flask import Blueprint, Response, current_app, jsonify, request

from olpm.errors import ValidationError
from olpm.services import AnalyticsService, SubmissionService, TestService
from olpm.services.submission_service import serialize_submission
from olpm.utils import authenticate_token, authorize_roles, get_current_user

tests_bp = Blueprint('tests', __name__)


def json_body():
    """Request body as a dict; anything else is a client error"""
    if not request.get_data():
        return {}
    data = request.get_json(force=True, silent=True)
    if data is None:
        raise ValidationError('Invalid JSON format')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


# ================= TEST LIFECYCLE =================

@tests_bp.route('/create', methods=['POST'])
@authenticate_token
@authorize_roles('teacher')
def create_test():
    """Create a test with its questions"""
    test = TestService.create_test(get_current_user(), json_body())
    return jsonify({
        'message': 'Test created successfully',
        'test_id': test.id,
        'test_link': test.test_link,
    }), 201


@tests_bp.route('/<link>', methods=['GET'])
@authenticate_token
def get_test_by_link(link):
    """Test for taking, answer key stripped"""
    test = TestService.get_test_by_link(link)
    return jsonify({'test': test.to_taking_dict()})


@tests_bp.route('/<int:test_id>/submit', methods=['POST'])
@authenticate_token
@authorize_roles('student')
def submit_test(test_id):
    """Grade and record an attempt"""
    data = json_body()
    submission = SubmissionService.submit(
        test_id,
        get_current_user(),
        data.get('answers'),
        data.get('time_taken_seconds'),
    )
    return jsonify({
        'message': 'Test submitted',
        'score': submission.score,
        'submission_id': submission.id,
    }), 201


@tests_bp.route('/<int:test_id>/result/<int:student_id>', methods=['GET'])
@authenticate_token
def get_result(test_id, student_id):
    """Latest graded attempt of a student"""
    submission = SubmissionService.get_latest_result(
        test_id, student_id, get_current_user()
    )
    return jsonify({
        'result': serialize_submission(submission),
        'answers': [answer.to_dict() for answer in submission.answers],
    })


# ================= STUDENT RESULTS =================

@tests_bp.route('/my/results', methods=['GET'])
@authenticate_token
@authorize_roles('student')
def my_results():
    """Caller's attempts, newest first"""
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config['RESULTS_PAGE_SIZE'], type=int)
    return jsonify(SubmissionService.list_student_results(get_current_user(), page, limit))


@tests_bp.route('/submission/<int:submission_id>/detailed', methods=['GET'])
@authenticate_token
def detailed_submission(submission_id):
    return jsonify(
        SubmissionService.get_detailed_submission(submission_id, get_current_user())
    )


# ================= TEACHER ANALYTICS =================

@tests_bp.route('/my/analytics', methods=['GET'])
@authenticate_token
@authorize_roles('teacher')
def my_analytics():
    test_id = request.args.get('test_id', type=int)
    return jsonify(AnalyticsService.teacher_analytics(get_current_user(), test_id))


@tests_bp.route('/<int:test_id>/students/performance', methods=['GET'])
@authenticate_token
@authorize_roles('teacher')
def student_performance(test_id):
    test = TestService.get_owned_test(test_id, get_current_user())
    return jsonify(AnalyticsService.student_performance(test))


@tests_bp.route('/<int:test_id>/comparison', methods=['GET'])
@authenticate_token
@authorize_roles('teacher')
def comparison(test_id):
    test = TestService.get_owned_test(test_id, get_current_user())
    return jsonify(AnalyticsService.comparison(test))


@tests_bp.route('/<int:test_id>/export', methods=['GET'])
@authenticate_token
@authorize_roles('teacher')
def export_results(test_id):
    """Download results as CSV"""
    test = TestService.get_owned_test(test_id, get_current_user())
    csv_text = AnalyticsService.export_csv(test)
    if csv_text is None:
        return jsonify({'message': 'No submissions found for this test'})

    filename = AnalyticsService.export_filename(test)
    return Response(
        csv_text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


# ================= ADMIN ANALYTICS =================

@tests_bp.route('/admin/comprehensive-analytics', methods=['GET'])
@authenticate_token
@authorize_roles('admin')
def admin_analytics():
    return jsonify(AnalyticsService.admin_analytics(request.args.get('range', '30')))
