"""
Data management infrastructure for interview sessions.
"""

from .sessions import QuestionRecord, ResponseRecord, SessionRecord, SessionStore

__all__ = [
    'QuestionRecord',
    'ResponseRecord',
    'SessionRecord',
    'SessionStore'
]
