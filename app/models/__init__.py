# SQLModel definitions, imported here to ensure metadata is populated for create_all.
from .base import CreatedAtMixin  # noqa: F401
from .task import Task  # noqa: F401
