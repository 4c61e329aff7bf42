from olpm.extensions import db
from olpm import models
from tests.conftest import SAMPLE_QUESTIONS


def test_teacher_creates_test_with_questions(app, client, auth):
    response = client.post('/api/tests/create', json={
        'title': 'Chemistry quiz',
        'description': 'Unit 1',
        'duration_minutes': 25,
        'questions': SAMPLE_QUESTIONS,
    }, headers=auth('teacher'))

    assert response.status_code == 201
    body = response.get_json()
    assert body['message'] == 'Test created successfully'

    with app.app_context():
        test = db.session.get(models.Test, body['test_id'])
        assert test.title == 'Chemistry quiz'
        assert test.duration_minutes == 25
        assert test.test_link == body['test_link']
        assert [q.correct_option for q in test.questions] == ['A', 'B', 'A']


def test_duration_defaults_when_omitted(app, make_test):
    test_id, _ = make_test()

    with app.app_context():
        test = db.session.get(models.Test, test_id)
        assert test.duration_minutes == app.config['DEFAULT_TEST_DURATION_MINUTES']


def test_links_are_prefixed_and_unique(app, make_test):
    links = {make_test()[1] for _ in range(5)}

    assert len(links) == 5
    prefix = app.config['TEST_LINK_PREFIX']
    for link in links:
        assert link.startswith(prefix)
        assert len(link) == len(prefix) + app.config['TEST_LINK_LENGTH']


def test_correct_option_is_normalised(app, make_test):
    questions = [dict(SAMPLE_QUESTIONS[0], correct_option=' c ')]
    test_id, _ = make_test(questions=questions)

    with app.app_context():
        assert db.session.get(models.Test, test_id).questions[0].correct_option == 'C'


def test_missing_title_is_rejected(app, client, auth):
    response = client.post('/api/tests/create', json={
        'questions': SAMPLE_QUESTIONS,
    }, headers=auth('teacher'))

    assert response.status_code == 400
    assert 'error' in response.get_json()
    with app.app_context():
        assert models.Test.query.count() == 0


def test_empty_question_list_is_rejected(client, auth):
    response = client.post('/api/tests/create', json={
        'title': 'Empty', 'questions': [],
    }, headers=auth('teacher'))

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Test title and questions are required'


def test_bad_correct_option_is_rejected(app, client, auth):
    questions = [SAMPLE_QUESTIONS[0], dict(SAMPLE_QUESTIONS[1], correct_option='E')]
    response = client.post('/api/tests/create', json={
        'title': 'Bad key', 'questions': questions,
    }, headers=auth('teacher'))

    assert response.status_code == 400
    assert 'Question 2' in response.get_json()['error']
    with app.app_context():
        assert models.Question.query.count() == 0


def test_question_without_text_is_rejected(client, auth):
    questions = [dict(SAMPLE_QUESTIONS[0], question_text='  ')]
    response = client.post('/api/tests/create', json={
        'title': 'No text', 'questions': questions,
    }, headers=auth('teacher'))

    assert response.status_code == 400


def test_question_missing_an_option_is_rejected(app, client, auth):
    questions = SAMPLE_QUESTIONS[:1] + [dict(SAMPLE_QUESTIONS[1], option_c=None)]
    response = client.post('/api/tests/create', json={
        'title': 'Three options', 'questions': questions,
    }, headers=auth('teacher'))

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Question 2 is missing option_c'}
    with app.app_context():
        assert models.Test.query.count() == 0
        assert models.Question.query.count() == 0


def test_non_positive_duration_is_rejected(client, auth):
    response = client.post('/api/tests/create', json={
        'title': 'Zero', 'duration_minutes': 0, 'questions': SAMPLE_QUESTIONS,
    }, headers=auth('teacher'))

    assert response.status_code == 400


def test_non_object_body_is_rejected(client, auth):
    response = client.post('/api/tests/create', json=['title'], headers=auth('teacher'))

    assert response.status_code == 400


def test_malformed_json_body_is_rejected(app, client, auth):
    response = client.post('/api/tests/create', data='{"title": "Cut off',
                           content_type='application/json', headers=auth('teacher'))

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Invalid JSON format'}
    with app.app_context():
        assert models.Test.query.count() == 0


def test_students_cannot_create_tests(app, client, auth):
    response = client.post('/api/tests/create', json={
        'title': 'Sneaky', 'questions': SAMPLE_QUESTIONS,
    }, headers=auth('student'))

    assert response.status_code == 403
    with app.app_context():
        assert models.Test.query.count() == 0
