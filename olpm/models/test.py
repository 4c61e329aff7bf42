"""
Test Model
A timed multiple-choice test, addressed internally by id and externally by link
"""
from olpm.extensions import db
from datetime import datetime, timezone


def now_utc():
    return datetime.now(timezone.utc)


class Test(db.Model):
    """Test model"""
    __tablename__ = 'tests'
    # Keep pytest from collecting the model class
    __test__ = False

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    test_link = db.Column(db.String(64), unique=True, nullable=False, index=True)
    duration_minutes = db.Column(db.Integer, nullable=False, default=10)
    created_at = db.Column(db.DateTime, default=now_utc)

    # Relationships
    questions = db.relationship(
        'Question', backref='test', lazy=True, order_by='Question.id'
    )
    teacher = db.relationship('User', lazy='joined')

    def __repr__(self):
        return f'<Test {self.id}: {self.title}>'

    def to_taking_dict(self):
        """Student-facing view: never includes correct options"""
        return {
            'id': self.id,
            'title': self.title,
            'duration_minutes': self.duration_minutes,
            'questions': [q.to_public_dict() for q in self.questions],
        }
