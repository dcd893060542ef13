from enum import Enum


class Grade(str, Enum):
    AGAIN = "AGAIN"
    HARD = "HARD"
    GOOD = "GOOD"
    EASY = "EASY"


class LearningState(str, Enum):
    """States the SM-2 scheduler can produce."""

    NEW = "NEW"
    REVIEWING = "REVIEWING"
    RELEARNING = "RELEARNING"


class StudyState(str, Enum):
    """
    Every state the progress column may hold. LEARNING_MCQ and
    LEARNING_TYPING belong to other study modes and are never assigned here.
    """

    NEW = "NEW"
    LEARNING_MCQ = "LEARNING_MCQ"
    LEARNING_TYPING = "LEARNING_TYPING"
    REVIEWING = "REVIEWING"
    RELEARNING = "RELEARNING"


class MasteryLevel(str, Enum):
    NEW = "new"
    STILL_LEARNING = "still_learning"
    ALMOST_DONE = "almost_done"
    MASTERED = "mastered"


GRADE_LABELS = {
    Grade.AGAIN: "Again",
    Grade.HARD: "Hard",
    Grade.GOOD: "Good",
    Grade.EASY: "Easy",
}

STUDY_STATE_CHOICES = [(s.value, s.value.replace("_", " ").title()) for s in StudyState]
GRADE_CHOICES = [(g.value, GRADE_LABELS[g]) for g in Grade]
