from olpm import models
from tests.conftest import SAMPLE_QUESTIONS


def test_failed_question_insert_rolls_back_whole_test(app, client, auth, fail_on_insert):
    questions = SAMPLE_QUESTIONS[:2] + [dict(SAMPLE_QUESTIONS[2], question_text='FAIL-ME')]
    fail_on_insert('questions', marker='FAIL-ME')

    response = client.post('/api/tests/create', json={
        'title': 'Doomed', 'questions': questions,
    }, headers=auth('teacher'))

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to create test'}
    with app.app_context():
        assert models.Test.query.count() == 0
        assert models.Question.query.count() == 0


def test_failed_answer_insert_rolls_back_submission(app, client, auth, users, make_test,
                                                    question_ids, fail_on_insert):
    test_id, _ = make_test()
    fail_on_insert('answers')

    response = client.post(f'/api/tests/{test_id}/submit', json={
        'answers': {str(question_ids(test_id)[0]): 'A'}, 'time_taken_seconds': 12,
    }, headers=auth('student'))

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to submit test'}
    with app.app_context():
        assert models.TestSubmission.query.filter_by(
            test_id=test_id, student_id=users['student']
        ).count() == 0
        assert models.Answer.query.count() == 0


def test_service_recovers_after_rollback(app, client, auth, make_test, fail_on_insert):
    test_id, _ = make_test()
    fail_on_insert('answers', marker='never-present')

    response = client.post(f'/api/tests/{test_id}/submit', json={'answers': {}},
                           headers=auth('student'))

    assert response.status_code == 201
    with app.app_context():
        assert models.Answer.query.count() == 3


def test_pool_timeout_on_submit_is_503_and_writes_nothing(app, client, auth, users, make_test,
                                                          question_ids, pool_exhausted_on):
    test_id, _ = make_test()
    headers = auth('student')
    pool_exhausted_on('INSERT INTO test_submissions')

    response = client.post(f'/api/tests/{test_id}/submit', json={
        'answers': {str(question_ids(test_id)[0]): 'A'}, 'time_taken_seconds': 5,
    }, headers=headers)

    assert response.status_code == 503
    assert response.get_json() == {'error': 'Database is busy. Please try again shortly.'}
    with app.app_context():
        assert models.TestSubmission.query.count() == 0
        assert models.Answer.query.count() == 0


def test_pool_timeout_on_create_is_503_and_writes_nothing(app, client, auth, pool_exhausted_on):
    headers = auth('teacher')
    pool_exhausted_on('INSERT INTO tests')

    response = client.post('/api/tests/create', json={
        'title': 'Busy', 'questions': SAMPLE_QUESTIONS,
    }, headers=headers)

    assert response.status_code == 503
    assert response.get_json()['error'] == 'Database is busy. Please try again shortly.'
    with app.app_context():
        assert models.Test.query.count() == 0
        assert models.Question.query.count() == 0


def test_pool_timeout_outside_a_write_is_503(client, auth, pool_exhausted_on):
    headers = auth('student')
    pool_exhausted_on('SELECT users')

    response = client.get('/api/tests/my/results', headers=headers)

    assert response.status_code == 503
    assert response.get_json() == {'error': 'Database is busy. Please try again shortly.'}
