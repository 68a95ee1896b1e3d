"""Admin back-office user model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from lookbook.persistence.database import Base


class AdminUser(Base):
    """An operator allowed into the admin back office."""

    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(50), default="admin", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<AdminUser(id={self.id}, email={self.email})>"
