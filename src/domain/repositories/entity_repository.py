"""Read-only lookup protocols for entities owned by the project store."""

from typing import Protocol

from domain.entities.project import Project, ProjectUserRole, Task, User


class ITaskRepository(Protocol):
    """Repository interface for Task lookups."""

    async def find_by_id(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        ...


class IProjectRepository(Protocol):
    """Repository interface for Project lookups."""

    async def find_by_id(self, project_id: str) -> Project | None:
        """Get a project (with its team members) by ID."""
        ...


class IProjectRoleRepository(Protocol):
    """Repository interface for per-project role assignments."""

    async def filter(self, project_id: str, role: str) -> list[ProjectUserRole]:
        """Get every assignment of a role on a project."""
        ...


class IUserRepository(Protocol):
    """Repository interface for tenant users."""

    async def filter(self, tenant_id: str, role: str) -> list[User]:
        """Get every user of a tenant holding a role."""
        ...
