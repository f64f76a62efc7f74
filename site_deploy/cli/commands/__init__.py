"""CLI commands"""

from . import deploy
from . import rollback
from . import releases
from . import invalidate

__all__ = [
    "deploy",
    "rollback",
    "releases",
    "invalidate",
]
