"""
Answer Model
Stores the selection for every question of a submission, answered or not
"""
from olpm.extensions import db


class Answer(db.Model):
    """Answer model"""
    __tablename__ = 'answers'

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(
        db.Integer, db.ForeignKey('test_submissions.id'), nullable=False, index=True
    )
    question_id = db.Column(db.Integer, db.ForeignKey('questions.id'), nullable=False, index=True)
    selected_option = db.Column(db.String(1), nullable=True)
    is_correct = db.Column(db.Boolean, nullable=False, default=False)

    __table_args__ = (
        db.UniqueConstraint(
            'submission_id', 'question_id',
            name='unique_answer_per_submission_question'
        ),
    )

    question = db.relationship('Question', lazy='joined')

    def __repr__(self):
        return f'<Answer Q{self.question_id} on submission {self.submission_id}>'

    def to_dict(self):
        return {
            'question_id': self.question_id,
            'selected_option': self.selected_option,
            'is_correct': self.is_correct,
        }
