"""SQLAlchemy implementations of the project-store lookup repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.project import Project, ProjectUserRole, Task, TeamMember, User
from infrastructure.database.models import (
    ProjectModel,
    ProjectUserRoleModel,
    TaskModel,
    UserModel,
)


class SQLAlchemyTaskRepository:
    """SQLAlchemy implementation of ITaskRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        model = await self._session.get(TaskModel, task_id)
        if model is None:
            return None
        return Task(
            id=model.id,
            project_id=model.project_id,
            title=model.title,
            assigned_to=list(model.assigned_to or []),
        )


class SQLAlchemyProjectRepository:
    """SQLAlchemy implementation of IProjectRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, project_id: str) -> Project | None:
        """Get a project with its team members."""
        model = await self._session.get(ProjectModel, project_id)
        if model is None:
            return None
        return Project(
            id=model.id,
            name=model.name,
            owner=model.owner,
            team_members=[TeamMember(email=m.email, role=m.role) for m in model.team_members],
        )


class SQLAlchemyProjectRoleRepository:
    """SQLAlchemy implementation of IProjectRoleRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def filter(self, project_id: str, role: str) -> list[ProjectUserRole]:
        """Get every assignment of a role on a project."""
        stmt = (
            select(ProjectUserRoleModel)
            .where(
                ProjectUserRoleModel.project_id == project_id,
                ProjectUserRoleModel.role == role,
            )
            .order_by(ProjectUserRoleModel.user_email)
        )
        result = await self._session.execute(stmt)
        return [
            ProjectUserRole(project_id=m.project_id, user_email=m.user_email, role=m.role)
            for m in result.scalars()
        ]


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def filter(self, tenant_id: str, role: str) -> list[User]:
        """Get every user of a tenant holding a role."""
        stmt = (
            select(UserModel)
            .where(UserModel.tenant_id == tenant_id, UserModel.role == role)
            .order_by(UserModel.email)
        )
        result = await self._session.execute(stmt)
        return [
            User(email=m.email, tenant_id=m.tenant_id, role=m.role, full_name=m.full_name)
            for m in result.scalars()
        ]
