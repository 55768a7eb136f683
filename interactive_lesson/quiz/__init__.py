"""
Quiz scoring and results.

A logged-in user submits an answer to a quiz question; the answer is scored
against the expected answer, stored per user keyed by a hash of the
question, and the user's running score is incremented on correct answers.
"""

from .router import router  # noqa: F401
