# models.py — Database models for the Kanban board API
# - Projects own columns, columns own tasks, tasks own tag rows
# - Cascades are enforced by the database (ON DELETE CASCADE)
# - order_index gives sibling order; not unique, reads tie-break on created_at

import random
import time
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, String, DateTime, Integer, ForeignKey, Text, Index, CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def utcnow():
    return datetime.now(timezone.utc)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_id() -> str:
    """Millisecond timestamp in base 36 followed by a random base-36 suffix.

    Unique enough for a single board service; not suitable where ids must be
    unguessable.
    """
    stamp = _to_base36(int(time.time() * 1000))
    suffix = _to_base36(random.getrandbits(52)).rjust(11, "0")
    return stamp + suffix


# ============================================================
# ENUMS
# ============================================================

class TaskPriority(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ============================================================
# KANBAN BOARD
# ============================================================

class Project(Base):
    """Top-level board container"""
    __tablename__ = "projects"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    columns = relationship(
        "BoardColumn", back_populates="project",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="BoardColumn.order_index",
    )


class BoardColumn(Base):
    """Ordered lane within a project"""
    __tablename__ = "columns"

    id = Column(String, primary_key=True, default=new_id)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    color = Column(String, nullable=False)  # Hex color for the column header
    order_index = Column(Integer, nullable=False)

    # Relationships
    project = relationship("Project", back_populates="columns")
    tasks = relationship(
        "Task", back_populates="column",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="Task.order_index",
    )

    __table_args__ = (
        Index("idx_columns_project_id", "project_id"),
    )


class Task(Base):
    """Task card belonging to one column"""
    __tablename__ = "tasks"

    id = Column(String, primary_key=True, default=new_id)
    column_id = Column(String, ForeignKey("columns.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    assignee = Column(String, nullable=True)
    due_date = Column(String, nullable=True)  # Stored as sent, e.g. "2025-06-15"
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    order_index = Column(Integer, nullable=False, default=0)  # Order within column

    # Relationships
    column = relationship("BoardColumn", back_populates="tasks")
    tags = relationship(
        "TaskTag", back_populates="task",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_tasks_priority"),
        Index("idx_tasks_column_id", "column_id"),
    )


class TaskTag(Base):
    """Free-text label attached to a task; unique per task"""
    __tablename__ = "task_tags"

    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    tag_name = Column(String, primary_key=True)

    task = relationship("Task", back_populates="tags")

    __table_args__ = (
        Index("idx_task_tags_task_id", "task_id"),
    )
