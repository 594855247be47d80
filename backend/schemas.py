# schemas.py — Request/response models for the Kanban API
# JSON uses camelCase keys; Python code uses snake_case attributes.
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import TaskPriority


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def isoformat_ts(dt) -> Optional[str]:
    """ISO-8601 in UTC with an explicit offset; SQLite hands back naive values"""
    if dt is None:
        return None
    if not isinstance(dt, datetime):
        return str(dt)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


# ============================================================
# PROJECTS
# ============================================================

class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""


class ProjectUpdate(CamelModel):
    """Fields left as None are not touched"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class ProjectSummaryOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: str
    columns_count: int = 0
    tasks_count: int = 0


# ============================================================
# TASKS
# ============================================================

class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    assignee: str = ""
    due_date: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: List[str] = Field(default_factory=list)


class TaskUpdate(CamelModel):
    """Partial task update; ``tags`` replaces the whole tag set when given"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    assignee: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[List[str]] = None

    def has_field_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.title, self.description, self.assignee, self.due_date, self.priority)
        )


class TaskMove(CamelModel):
    column_id: str
    new_index: Optional[int] = None


class TaskReorder(CamelModel):
    task_ids: List[str]


class TaskOut(CamelModel):
    id: str
    column_id: str
    title: str
    description: Optional[str] = None
    assignee: Optional[str] = None
    due_date: Optional[str] = None
    priority: str
    tags: List[str] = []
    order_index: int = 0
    created_at: Optional[str] = None


# ============================================================
# COLUMNS
# ============================================================

class ColumnCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    color: str = "#CCCCCC"
    order: Optional[int] = None  # Appended after the last column when omitted


class ColumnUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None


class ColumnReorder(CamelModel):
    column_ids: List[str]


class ColumnOut(CamelModel):
    id: str
    project_id: str
    title: str
    color: str
    order: int
    order_index: int
    tasks: List[TaskOut] = []


class ProjectOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: str
    columns: List[ColumnOut] = []


# ============================================================
# GENERIC
# ============================================================

class SuccessOut(CamelModel):
    success: bool = True
    message: Optional[str] = None


# ============================================================
# ORM -> schema helpers
# ============================================================

def project_to_out(project, columns: Optional[List[ColumnOut]] = None) -> ProjectOut:
    return ProjectOut(
        id=project.id,
        name=project.name,
        description=project.description,
        created_at=isoformat_ts(project.created_at),
        columns=columns or [],
    )


def column_to_out(column, tasks: Optional[List[TaskOut]] = None) -> ColumnOut:
    return ColumnOut(
        id=column.id,
        project_id=column.project_id,
        title=column.title,
        color=column.color,
        order=column.order_index,
        order_index=column.order_index,
        tasks=tasks or [],
    )


def task_to_out(task, tags: Optional[List[str]] = None) -> TaskOut:
    priority = task.priority.value if isinstance(task.priority, TaskPriority) else task.priority
    return TaskOut(
        id=task.id,
        column_id=task.column_id,
        title=task.title,
        description=task.description,
        assignee=task.assignee,
        due_date=task.due_date,
        priority=priority,
        tags=tags or [],
        order_index=task.order_index or 0,
        created_at=isoformat_ts(task.created_at),
    )
