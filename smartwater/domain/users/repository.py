"""User and organization repository - Database operations"""

import logging
import time
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Organization, User
from ...shared.validators import slugify

logger = logging.getLogger(__name__)

MAX_SLUG_ATTEMPTS = 5


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        """Case-insensitive email lookup"""
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def get_by_google_id(db: Session, google_id: str) -> Optional[User]:
        return db.query(User).filter(User.google_id == google_id).first()

    @staticmethod
    def get_users(
        db: Session, organization_id: Optional[int], role: Optional[str] = None
    ) -> list[User]:
        query = db.query(User)
        if organization_id is not None:
            query = query.filter(User.organization_id == organization_id)
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.name).all()

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user


class OrganizationRepository:
    """Repository for organization database operations"""

    @staticmethod
    def get_by_id(db: Session, organization_id: int) -> Optional[Organization]:
        return db.query(Organization).filter(Organization.id == organization_id).first()

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[Organization]:
        return db.query(Organization).filter(Organization.slug == slug).first()

    @staticmethod
    def get_organizations(db: Session) -> list[Organization]:
        return db.query(Organization).order_by(Organization.name).all()

    @staticmethod
    def create_with_unique_slug(db: Session, name: str, slug_source: str) -> Organization:
        """
        Create an organization, suffixing the slug with a timestamp on collision.

        Raises RuntimeError after MAX_SLUG_ATTEMPTS failed attempts.
        """
        base_slug = slugify(slug_source)
        slug = base_slug

        for attempt in range(MAX_SLUG_ATTEMPTS):
            if not OrganizationRepository.get_by_slug(db, slug):
                organization = Organization(name=name, slug=slug)
                db.add(organization)
                try:
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    logger.warning(f"⚠️ Organization slug race on '{slug}', retrying")
                else:
                    db.refresh(organization)
                    return organization

            slug = f"{base_slug}-{int(time.time() * 1000)}{attempt}"

        raise RuntimeError("Unable to create unique organization identifier")

    @staticmethod
    def update_organization(db: Session, organization: Organization, **updates) -> Organization:
        for key, value in updates.items():
            if value is not None and hasattr(organization, key):
                setattr(organization, key, value)
        db.commit()
        db.refresh(organization)
        return organization
