"""Project router - FastAPI endpoints for projects, phases and assignments"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from .schemas import AssignmentCreate, PhaseCreate, PhaseUpdate, ProjectCreate, ProjectUpdate
from .service import ProjectService, serialize_assignment, serialize_phase, serialize_project

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Projects"])


def get_project_service(db: Session = Depends(get_db)) -> ProjectService:
    """Dependency injection for ProjectService"""
    return ProjectService(db)


# ============================================================================
# PROJECTS
# ============================================================================


@router.get("/projects")
async def get_projects(
    includeArchived: bool = Query(False),
    status_filter: Optional[str] = Query(None, alias="status"),
    clientId: Optional[int] = Query(None),
    current_user: User = Depends(require_permission("projects", "view")),
    service: ProjectService = Depends(get_project_service),
):
    projects = service.get_projects(current_user, includeArchived, status_filter, clientId)
    return [serialize_project(p) for p in projects]


@router.get("/projects/{project_id}")
async def get_project(
    project_id: int,
    current_user: User = Depends(require_permission("projects", "view")),
    service: ProjectService = Depends(get_project_service),
):
    return serialize_project(service.get_project(project_id, current_user), detail=True)


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    current_user: User = Depends(require_permission("projects", "create")),
    service: ProjectService = Depends(get_project_service),
):
    return serialize_project(service.create_project(data, current_user))


@router.patch("/projects/{project_id}")
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    current_user: User = Depends(require_permission("projects", "edit")),
    service: ProjectService = Depends(get_project_service),
):
    return serialize_project(service.update_project(project_id, data, current_user))


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int,
    current_user: User = Depends(require_permission("projects", "delete")),
    service: ProjectService = Depends(get_project_service),
):
    return service.delete_project(project_id, current_user)


# ============================================================================
# PHASES
# ============================================================================


@router.get("/projects/{project_id}/phases")
async def get_project_phases(
    project_id: int,
    current_user: User = Depends(require_permission("projects", "view")),
    service: ProjectService = Depends(get_project_service),
):
    return [serialize_phase(p) for p in service.get_phases(project_id, current_user)]


@router.post("/project-phases", status_code=status.HTTP_201_CREATED)
async def create_project_phase(
    data: PhaseCreate,
    current_user: User = Depends(require_permission("projects", "edit")),
    service: ProjectService = Depends(get_project_service),
):
    return serialize_phase(service.create_phase(data, current_user))


@router.patch("/project-phases/{phase_id}")
async def update_project_phase(
    phase_id: int,
    data: PhaseUpdate,
    current_user: User = Depends(require_permission("projects", "edit")),
    service: ProjectService = Depends(get_project_service),
):
    return serialize_phase(service.update_phase(phase_id, data, current_user))


@router.delete("/project-phases/{phase_id}")
async def delete_project_phase(
    phase_id: int,
    current_user: User = Depends(require_permission("projects", "edit")),
    service: ProjectService = Depends(get_project_service),
):
    return service.delete_phase(phase_id, current_user)


# ============================================================================
# ASSIGNMENTS
# ============================================================================


@router.post("/projects/{project_id}/assignments", status_code=status.HTTP_201_CREATED)
async def create_project_assignment(
    project_id: int,
    data: AssignmentCreate,
    current_user: User = Depends(require_permission("projects", "edit")),
    service: ProjectService = Depends(get_project_service),
):
    return serialize_assignment(service.add_assignment(project_id, data, current_user))


@router.delete("/projects/{project_id}/assignments/{assignment_id}")
async def delete_project_assignment(
    project_id: int,
    assignment_id: int,
    current_user: User = Depends(require_permission("projects", "edit")),
    service: ProjectService = Depends(get_project_service),
):
    return service.remove_assignment(project_id, assignment_id, current_user)


__all__ = ["router"]
