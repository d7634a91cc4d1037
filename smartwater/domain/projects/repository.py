"""Project repository - Database operations for projects, phases and assignments"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Project, ProjectAssignment, ProjectPhase
from ...models_work_order import WorkOrder


class ProjectRepository:
    """Repository for project database operations"""

    @staticmethod
    def get_projects(
        db: Session,
        organization_id: Optional[int],
        include_archived: bool = False,
        status: Optional[str] = None,
        client_id: Optional[int] = None,
        client_ids: Optional[list[int]] = None,
    ) -> list[Project]:
        query = db.query(Project)
        if organization_id is not None:
            query = query.filter(Project.organization_id == organization_id)
        if not include_archived:
            query = query.filter(Project.is_archived.is_(False))
        if status:
            query = query.filter(Project.status == status)
        if client_id is not None:
            query = query.filter(Project.client_id == client_id)
        if client_ids is not None:
            query = query.filter(Project.client_id.in_(client_ids))
        return query.order_by(Project.start_date.desc(), Project.id.desc()).all()

    @staticmethod
    def get_project_by_id(
        db: Session, project_id: int, organization_id: Optional[int]
    ) -> Optional[Project]:
        query = db.query(Project).filter(Project.id == project_id)
        if organization_id is not None:
            query = query.filter(Project.organization_id == organization_id)
        return query.first()

    @staticmethod
    def create_project(db: Session, **data) -> Project:
        project = Project(**data)
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def update_project(db: Session, project: Project, **updates) -> Project:
        for key, value in updates.items():
            if hasattr(project, key):
                setattr(project, key, value)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def delete_project(db: Session, project: Project) -> None:
        # Work orders outlive the project they were scheduled under
        db.query(WorkOrder).filter(WorkOrder.project_id == project.id).update(
            {WorkOrder.project_id: None, WorkOrder.project_phase_id: None}, synchronize_session=False
        )
        phase_ids = [phase.id for phase in project.phases]
        if phase_ids:
            db.query(WorkOrder).filter(WorkOrder.project_phase_id.in_(phase_ids)).update(
                {WorkOrder.project_phase_id: None}, synchronize_session=False
            )
        db.delete(project)
        db.commit()

    # Phases

    @staticmethod
    def get_phase_by_id(db: Session, phase_id: int, organization_id: Optional[int]) -> Optional[ProjectPhase]:
        query = db.query(ProjectPhase).join(Project).filter(ProjectPhase.id == phase_id)
        if organization_id is not None:
            query = query.filter(Project.organization_id == organization_id)
        return query.first()

    @staticmethod
    def create_phase(db: Session, **data) -> ProjectPhase:
        phase = ProjectPhase(**data)
        db.add(phase)
        db.commit()
        db.refresh(phase)
        return phase

    @staticmethod
    def update_phase(db: Session, phase: ProjectPhase, **updates) -> ProjectPhase:
        for key, value in updates.items():
            if hasattr(phase, key):
                setattr(phase, key, value)
        db.commit()
        db.refresh(phase)
        return phase

    @staticmethod
    def delete_phase(db: Session, phase: ProjectPhase) -> None:
        db.query(WorkOrder).filter(WorkOrder.project_phase_id == phase.id).update(
            {WorkOrder.project_phase_id: None}, synchronize_session=False
        )
        db.delete(phase)
        db.commit()

    # Assignments

    @staticmethod
    def get_assignment(db: Session, project_id: int, assignment_id: int) -> Optional[ProjectAssignment]:
        return (
            db.query(ProjectAssignment)
            .filter(
                ProjectAssignment.id == assignment_id,
                ProjectAssignment.project_id == project_id,
            )
            .first()
        )

    @staticmethod
    def find_assignment(db: Session, project_id: int, technician_id: int) -> Optional[ProjectAssignment]:
        return (
            db.query(ProjectAssignment)
            .filter(
                ProjectAssignment.project_id == project_id,
                ProjectAssignment.technician_id == technician_id,
            )
            .first()
        )

    @staticmethod
    def create_assignment(db: Session, **data) -> ProjectAssignment:
        assignment = ProjectAssignment(**data)
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment

    @staticmethod
    def delete_assignment(db: Session, assignment: ProjectAssignment) -> None:
        db.delete(assignment)
        db.commit()
