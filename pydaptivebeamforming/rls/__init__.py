#  rls.__init__.py

from .multibin_rls import MultiBinRLS

__all__ = [
    "MultiBinRLS",
]
