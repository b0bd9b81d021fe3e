#  projection_back.__init__.py

from .projection_back import ProjectionBack

__all__ = [
    "ProjectionBack",
]
