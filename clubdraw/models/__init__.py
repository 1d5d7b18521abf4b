from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .member import Member  # noqa: F401
from .prize import Prize  # noqa: F401
from .winner import Winner  # noqa: F401

__all__ = [
    "Base",
    "Member",
    "Prize",
    "Winner",
]
