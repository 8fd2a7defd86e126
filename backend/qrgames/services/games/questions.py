import json
from typing import List, Optional

from qrgames.models import Question

DEFAULT_QUESTIONS = [
    Question('What is the capital of France?', ['London', 'Berlin', 'Paris', 'Madrid'], 'Paris'),
    Question('What is 2 + 2?', ['3', '4', '5', '6'], '4'),
    Question('Which planet is known as the Red Planet?', ['Venus', 'Mars', 'Jupiter', 'Saturn'], 'Mars'),
    Question('What is the largest ocean on Earth?', ['Atlantic', 'Indian', 'Arctic', 'Pacific'], 'Pacific'),
    Question('Who painted the Mona Lisa?', ['Van Gogh', 'Picasso', 'Leonardo da Vinci', 'Michelangelo'], 'Leonardo da Vinci'),
]


def load_question_bank(path: Optional[str]) -> List[Question]:
    """Load questions from a JSON list of {text, options, correctAnswer}.

    Returns the built-in bank when no path is given. A file that is present
    but unreadable is a configuration error and raises.
    """
    if not path:
        return list(DEFAULT_QUESTIONS)
    with open(path, encoding='utf-8') as fh:
        raw = json.load(fh)
    questions = [Question.from_dict(item) for item in raw]
    if not questions:
        raise ValueError(f'question bank {path} is empty')
    for q in questions:
        if q.correct_answer not in q.options:
            raise ValueError(f'correct answer {q.correct_answer!r} missing from options of {q.text!r}')
    return questions
