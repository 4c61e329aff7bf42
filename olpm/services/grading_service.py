"""
Grading Service
Scores single-select multiple choice answers against a test's answer key
"""
from olpm.errors import ValidationError
from olpm.models.question import OPTIONS


class GradingService:
    """Service for validating and scoring answers"""

    @staticmethod
    def normalize_selection(value):
        """
        Normalize one submitted selection
        None or '' means unanswered; anything else must be an option letter
        """
        if value is None or value == '':
            return None
        if not isinstance(value, str) or value not in OPTIONS:
            raise ValidationError(
                f"Invalid option {value!r}. Expected one of {', '.join(OPTIONS)}"
            )
        return value

    @staticmethod
    def normalize_answers(answers):
        """
        Validate the {question_id: option} mapping from a request body
        Keys are kept as strings since JSON object keys always are
        """
        if answers is None:
            return {}
        if not isinstance(answers, dict):
            raise ValidationError('answers must be an object mapping question ids to options')
        return {
            str(question_id): GradingService.normalize_selection(option)
            for question_id, option in answers.items()
        }

    @staticmethod
    def grade(answer_key, answers):
        """
        Grade answers against an answer key

        Args:
            answer_key: iterable of (question_id, correct_option) pairs
            answers: normalized mapping of str(question_id) -> option or None

        Returns:
            tuple: (score, rows) where rows holds one dict per question in
            answer-key order with question_id, selected_option, is_correct.
            Entries for questions outside the key are ignored.
        """
        score = 0
        rows = []
        for question_id, correct_option in answer_key:
            selected = answers.get(str(question_id))
            is_correct = selected is not None and selected == correct_option
            if is_correct:
                score += 1
            rows.append({
                'question_id': question_id,
                'selected_option': selected,
                'is_correct': is_correct,
            })
        return score, rows
