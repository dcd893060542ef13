from .data.models import CardProgress, StudyLog  # noqa: F401
