"""
ORM models. Importing this package registers every table on Base.metadata.
"""

from questionbank.models.answer import Answer
from questionbank.models.question import Question, Tag, question_tags

__all__ = ["Answer", "Question", "Tag", "question_tags"]
