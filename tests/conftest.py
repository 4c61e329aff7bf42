import sqlite3

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from olpm import create_app
from olpm.extensions import db
from olpm.models import User
from olpm.utils import create_token


USERS = [
    ('teacher', 'Tina Teacher', 'tina@example.com', 'teacher', 'approved'),
    ('other_teacher', 'Omar Teacher', 'omar@example.com', 'teacher', 'approved'),
    ('student', 'Sam Student', 'sam@example.com', 'student', 'approved'),
    ('other_student', 'Sol Student', 'sol@example.com', 'student', 'approved'),
    ('admin', 'Ada Admin', 'ada@example.com', 'admin', 'approved'),
    ('pending', 'Pat Pending', 'pat@example.com', 'student', 'pending'),
    ('banned', 'Bo Banned', 'bo@example.com', 'student', 'banned'),
]

SAMPLE_QUESTIONS = [
    {'question_text': '2 + 2?', 'option_a': '4', 'option_b': '5',
     'option_c': '6', 'option_d': '7', 'correct_option': 'A'},
    {'question_text': 'Capital of France?', 'option_a': 'Rome', 'option_b': 'Paris',
     'option_c': 'Madrid', 'option_d': 'Berlin', 'correct_option': 'B'},
    {'question_text': 'H2O is?', 'option_a': 'Water', 'option_b': 'Salt',
     'option_c': 'Sugar', 'option_d': 'Iron', 'correct_option': 'A'},
]


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    """Seeded users keyed by fixture name -> id"""
    ids = {}
    with app.app_context():
        for key, name, email, role, status in USERS:
            user = User(name=name, email=email, role=role, status=status)
            db.session.add(user)
            db.session.flush()
            ids[key] = user.id
        db.session.commit()
    return ids


@pytest.fixture
def auth(app, users):
    """auth('student') -> Authorization header for that seeded user"""
    def headers_for(key):
        with app.app_context():
            user = db.session.get(User, users[key])
            return {'Authorization': f'Bearer {create_token(user)}'}
    return headers_for


@pytest.fixture
def make_test(client, auth):
    """Create a test through the API and return (test_id, link)"""
    def create(questions=None, teacher='teacher', **fields):
        payload = {
            'title': fields.pop('title', 'Sample test'),
            'description': fields.pop('description', 'Three easy questions'),
            'questions': SAMPLE_QUESTIONS if questions is None else questions,
        }
        payload.update(fields)
        response = client.post('/api/tests/create', json=payload, headers=auth(teacher))
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return body['test_id'], body['test_link']
    return create


@pytest.fixture
def question_ids(app):
    """question_ids(test_id) -> question ids in order"""
    from olpm.models import Question

    def lookup(test_id):
        with app.app_context():
            return [
                q.id for q in Question.query.filter_by(test_id=test_id).order_by(Question.id)
            ]
    return lookup


@pytest.fixture
def fail_on_sql(app):
    """
    Make statements starting with `prefix` (and whose parameters mention
    `marker`) raise whatever `make_error(statement, parameters)` builds
    """
    listeners = []

    def install(prefix, make_error, marker=None):
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith(prefix.upper()):
                if marker is None or marker in str(parameters):
                    raise make_error(statement, parameters)

        with app.app_context():
            engine = db.engine
        event.listen(engine, 'before_cursor_execute', before_cursor_execute)
        listeners.append((engine, before_cursor_execute))

    yield install

    for engine, fn in listeners:
        event.remove(engine, 'before_cursor_execute', fn)


@pytest.fixture
def fail_on_insert(fail_on_sql):
    """INSERT into `table` fails at the driver level, as a dropped connection would"""
    def install(table, marker=None):
        fail_on_sql(
            f'INSERT INTO {table}',
            lambda statement, parameters: OperationalError(
                statement, parameters, sqlite3.OperationalError('injected failure')
            ),
            marker,
        )
    return install


@pytest.fixture
def pool_exhausted_on(fail_on_sql):
    """Statements starting with `prefix` time out waiting for a pooled connection"""
    def install(prefix, marker=None):
        fail_on_sql(
            prefix,
            lambda statement, parameters: PoolTimeoutError('QueuePool limit reached'),
            marker,
        )
    return install
