"""ORM models. Importing this package registers every table with `Base.metadata`."""

from app.models.user import User
from app.models.task import Task
from app.models.note import Note
from app.models.learning_guide import LearningGuide

__all__ = ["User", "Task", "Note", "LearningGuide"]
