"""
User Service - Business Logic for User Operations
"""
from typing import Optional, List
from datetime import datetime
from sqlalchemy.orm import Session
import logging

from tourdesk.models import User, UserRole
from tourdesk.schemas import UserCreate, UserUpdate
from tourdesk.core.config import settings
from tourdesk.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_all(self) -> List[User]:
        return self.db.query(User).order_by(User.username).all()

    def create(self, user_data: UserCreate) -> User:
        if self.get_by_username(user_data.username):
            raise ValueError("Username already registered")
        if self.get_by_email(user_data.email):
            raise ValueError("Email already registered")

        user = User(
            username=user_data.username,
            email=user_data.email,
            full_name=user_data.full_name,
            hashed_password=get_password_hash(user_data.password),
            role=user_data.role.value,
            is_active=True
        )
        self.db.add(user)
        self.db.flush()
        return user

    def update(self, user_id: int, user_data: UserUpdate) -> Optional[User]:
        user = self.get_by_id(user_id)
        if not user:
            return None

        update_data = user_data.model_dump(exclude_unset=True)
        if 'email' in update_data and update_data['email'] != user.email:
            if self.get_by_email(update_data['email']):
                raise ValueError("Email already registered")
        if 'role' in update_data and update_data['role'] is not None:
            update_data['role'] = update_data['role'].value

        for key, value in update_data.items():
            setattr(user, key, value)

        self.db.flush()
        return user

    def verify_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.hashed_password)

    def authenticate(self, username: str, password: str) -> Optional[User]:
        user = self.get_by_username(username)
        if not user or not self.verify_password(user, password):
            return None
        return user

    def record_login(self, user: User):
        user.last_login = datetime.utcnow()
        self.db.flush()

    def change_password(self, user: User, current_password: str, new_password: str):
        if not self.verify_password(user, current_password):
            raise ValueError("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        self.db.flush()

    def seed_admin(self) -> Optional[User]:
        """Create the first admin from settings when no user exists yet"""
        if self.db.query(User).first() is not None:
            return None
        if not settings.ADMIN_PASSWORD:
            logger.warning("No users exist and ADMIN_PASSWORD is not set; skipping admin seed")
            return None

        user = User(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            full_name="Administrator",
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
            is_active=True
        )
        self.db.add(user)
        self.db.flush()
        logger.info(f"Seeded admin user '{user.username}'")
        return user
