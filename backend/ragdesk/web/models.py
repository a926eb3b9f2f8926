"""SQLAlchemy models."""

import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Project(Base):
    """Tenant project; owned and edited elsewhere, read here."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    plan = Column(Text)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    custom_slug = Column(String(255), unique=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    issues = relationship("Issue", back_populates="project", cascade="all, delete-orphan")
    inquiries = relationship("Inquiry", back_populates="project", cascade="all, delete-orphan")


class Issue(Base):
    """Problem report, including ones auto-detected from unanswered chat queries."""

    __tablename__ = "issues"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    severity = Column(String(50), nullable=False, default="medium")
    status = Column(String(50), nullable=False, default="open", index=True)  # open, in_progress, resolved
    tags = Column(JSON, nullable=False, default=list)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="issues")


class Inquiry(Base):
    """Open question, including ones auto-detected from unanswered chat queries."""

    __tablename__ = "inquiries"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    content = Column(Text)
    tags = Column(JSON, nullable=False, default=list)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="inquiries")
