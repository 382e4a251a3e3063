"""
ORM model package. Import all models here so Alembic autogenerate
can discover every table through the shared Base metadata.
"""
from app.models.user import User, UserRole  # noqa: F401
from app.models.project import DEFAULT_PROJECT_ID, Project  # noqa: F401
from app.models.task import Task, TaskStatus  # noqa: F401
from app.models.comment import TaskComment  # noqa: F401
from app.models.user_project import UserProject  # noqa: F401
