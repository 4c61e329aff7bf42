"""
TestSubmission Model
One graded attempt by one student; students may attempt a test repeatedly
"""
from olpm.extensions import db
from datetime import datetime, timezone


def now_utc():
    return datetime.now(timezone.utc)


class TestSubmission(db.Model):
    """Submission model"""
    __tablename__ = 'test_submissions'
    __test__ = False

    id = db.Column(db.Integer, primary_key=True)
    test_id = db.Column(db.Integer, db.ForeignKey('tests.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False, default=0)
    time_taken_seconds = db.Column(db.Integer, nullable=False, default=0)
    submitted_at = db.Column(db.DateTime, default=now_utc, index=True)

    # Relationships
    answers = db.relationship(
        'Answer', backref='submission', lazy=True, order_by='Answer.question_id'
    )
    test = db.relationship('Test', lazy='joined')
    student = db.relationship('User', lazy='joined')

    def __repr__(self):
        return f'<TestSubmission {self.id}: test {self.test_id} by {self.student_id} = {self.score}>'
