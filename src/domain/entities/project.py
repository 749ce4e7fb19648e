"""Read-only views of entities owned by the project-management store."""

from dataclasses import dataclass, field


class ProjectRoles:
    """Role names stored on project role assignments."""

    PROJECT_MANAGER = "project_manager"


class UserRoles:
    """Tenant-level role names."""

    ADMIN = "admin"
    MEMBER = "member"


@dataclass(frozen=True, slots=True)
class TeamMember:
    """A member listed on a project's team."""

    email: str
    role: str | None = None


@dataclass
class Task:
    """Domain entity for a task."""

    id: str
    project_id: str | None = None
    title: str = ""
    assigned_to: list[str] = field(default_factory=list)


@dataclass
class Project:
    """Domain entity for a project."""

    id: str
    name: str = ""
    owner: str | None = None
    team_members: list[TeamMember] = field(default_factory=list)


@dataclass
class ProjectUserRole:
    """Domain entity for a per-project role assignment."""

    project_id: str
    user_email: str
    role: str


@dataclass
class User:
    """Domain entity for a tenant user."""

    email: str
    tenant_id: str
    role: str = UserRoles.MEMBER
    full_name: str | None = None
