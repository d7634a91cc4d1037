"""Project service - Business logic for projects, phases and assignments"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import Project, ProjectAssignment, ProjectPhase, User
from ...shared.serializers import isoformat
from ..clients.repository import ClientRepository
from ..clients.service import client_display_name, require_client
from ..technicians.repository import TechnicianRepository
from ..technicians.service import serialize_technician_summary
from .repository import ProjectRepository
from .schemas import AssignmentCreate, PhaseCreate, PhaseUpdate, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

PROJECT_FIELDS = {
    "clientId": "client_id",
    "name": "name",
    "description": "description",
    "projectType": "project_type",
    "startDate": "start_date",
    "deadline": "deadline",
    "status": "status",
    "completion": "completion",
    "budget": "budget",
    "notes": "notes",
    "isArchived": "is_archived",
}

PHASE_FIELDS = {
    "name": "name",
    "description": "description",
    "status": "status",
    "order": "order",
    "percentComplete": "percent_complete",
    "startDate": "start_date",
    "endDate": "end_date",
}

# Columns that reject NULL; an explicit null in a PATCH body is ignored for these
REQUIRED_COLUMNS = {"client_id", "name", "start_date", "status", "completion", "is_archived", "order", "percent_complete"}


def _updates(data, field_map: dict) -> dict:
    return {
        field_map[field]: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if field in field_map and not (value is None and field_map[field] in REQUIRED_COLUMNS)
    }


def serialize_phase(phase: ProjectPhase) -> dict:
    return {
        "id": phase.id,
        "projectId": phase.project_id,
        "name": phase.name,
        "description": phase.description,
        "status": phase.status,
        "order": phase.order,
        "percentComplete": phase.percent_complete,
        "startDate": isoformat(phase.start_date),
        "endDate": isoformat(phase.end_date),
    }


def serialize_assignment(assignment: ProjectAssignment) -> dict:
    return {
        "id": assignment.id,
        "projectId": assignment.project_id,
        "technicianId": assignment.technician_id,
        "role": assignment.role,
        "technician": serialize_technician_summary(assignment.technician),
    }


def serialize_project(project: Project, detail: bool = False) -> dict:
    data = {
        "id": project.id,
        "organizationId": project.organization_id,
        "clientId": project.client_id,
        "clientName": client_display_name(project.client),
        "name": project.name,
        "description": project.description,
        "projectType": project.project_type,
        "startDate": isoformat(project.start_date),
        "deadline": isoformat(project.deadline),
        "status": project.status,
        "completion": project.completion,
        "budget": project.budget,
        "notes": project.notes,
        "isArchived": project.is_archived,
        "createdAt": isoformat(project.created_at),
    }
    if detail:
        data["phases"] = [serialize_phase(p) for p in project.phases]
        data["assignments"] = [serialize_assignment(a) for a in project.assignments]
    return data


class ProjectService:
    """Service layer for project business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProjectRepository()

    def get_projects(
        self,
        user: User,
        include_archived: bool = False,
        status: Optional[str] = None,
        client_id: Optional[int] = None,
    ) -> list[Project]:
        client_ids = None
        if user.role == "client":
            client_ids = ClientRepository.get_client_ids_for_user(self.db, user.id)
        return self.repo.get_projects(
            self.db, get_org_filter(user), include_archived, status, client_id, client_ids
        )

    def get_project(self, project_id: int, user: User) -> Project:
        project = self.repo.get_project_by_id(self.db, project_id, get_org_filter(user))
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        if user.role == "client" and project.client_id not in ClientRepository.get_client_ids_for_user(
            self.db, user.id
        ):
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    def create_project(self, data: ProjectCreate, user: User) -> Project:
        organization_id = require_organization_id(user)
        require_client(self.db, data.clientId, organization_id)

        values = {column: getattr(data, field) for field, column in PROJECT_FIELDS.items() if field != "isArchived"}
        values["status"] = values["status"] or "planning"
        values["completion"] = values["completion"] or 0

        project = self.repo.create_project(self.db, organization_id=organization_id, **values)
        logger.info(f"✅ Project {project.id} '{project.name}' created")
        return project

    def update_project(self, project_id: int, data: ProjectUpdate, user: User) -> Project:
        project = self.get_project(project_id, user)
        updates = _updates(data, PROJECT_FIELDS)
        if "client_id" in updates and updates["client_id"] != project.client_id:
            require_client(self.db, updates["client_id"], project.organization_id)
        return self.repo.update_project(self.db, project, **updates)

    def delete_project(self, project_id: int, user: User) -> dict:
        project = self.get_project(project_id, user)
        try:
            self.repo.delete_project(self.db, project)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Project {project_id} still has related records: {e}")
            raise HTTPException(
                status_code=409, detail="Project has related records and cannot be deleted"
            ) from e
        logger.info(f"🗑️ Project {project_id} deleted")
        return {"success": True}

    # Phases

    def get_phases(self, project_id: int, user: User) -> list[ProjectPhase]:
        return list(self.get_project(project_id, user).phases)

    def _get_phase(self, phase_id: int, user: User) -> ProjectPhase:
        phase = self.repo.get_phase_by_id(self.db, phase_id, get_org_filter(user))
        if not phase:
            raise HTTPException(status_code=404, detail="Phase not found")
        return phase

    def create_phase(self, data: PhaseCreate, user: User) -> ProjectPhase:
        project = self.get_project(data.projectId, user)
        values = {column: getattr(data, field) for field, column in PHASE_FIELDS.items()}
        values["status"] = values["status"] or "pending"
        values["order"] = values["order"] or 0
        values["percent_complete"] = values["percent_complete"] or 0
        return self.repo.create_phase(self.db, project_id=project.id, **values)

    def update_phase(self, phase_id: int, data: PhaseUpdate, user: User) -> ProjectPhase:
        phase = self._get_phase(phase_id, user)
        return self.repo.update_phase(self.db, phase, **_updates(data, PHASE_FIELDS))

    def delete_phase(self, phase_id: int, user: User) -> dict:
        phase = self._get_phase(phase_id, user)
        self.repo.delete_phase(self.db, phase)
        return {"success": True}

    # Assignments

    def add_assignment(self, project_id: int, data: AssignmentCreate, user: User) -> ProjectAssignment:
        project = self.get_project(project_id, user)
        technician = TechnicianRepository.get_technician_by_id(
            self.db, data.technicianId, project.organization_id
        )
        if not technician:
            raise HTTPException(status_code=404, detail="Technician not found")
        if self.repo.find_assignment(self.db, project.id, technician.id):
            raise HTTPException(status_code=409, detail="Technician is already assigned to this project")

        assignment = self.repo.create_assignment(
            self.db, project_id=project.id, technician_id=technician.id, role=data.role
        )
        logger.info(f"✅ Technician {technician.id} assigned to project {project.id} as {data.role}")
        return assignment

    def remove_assignment(self, project_id: int, assignment_id: int, user: User) -> dict:
        project = self.get_project(project_id, user)
        assignment = self.repo.get_assignment(self.db, project.id, assignment_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Assignment not found")
        self.repo.delete_assignment(self.db, assignment)
        return {"success": True}
