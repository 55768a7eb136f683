"""
Public review search.

Reviews are held in an in-memory catalog, optionally loaded from a JSON file
at start-up, and searched by text, category, tag and rating with paginated
results.
"""

from .router import router  # noqa: F401
