# repository.py — Storage access for projects, columns, tasks and tags
"""
Translates entity operations into parameterized statements on one
``AsyncSession``. The repository never commits: it works inside the caller's
unit of work (see ``kanban_service.KanbanService``). The batch reorders roll
the whole unit back before re-raising if any statement fails.
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import BoardColumn, Project, Task, TaskPriority, TaskTag, new_id, utcnow
from schemas import (
    ColumnUpdate, ProjectSummaryOut, ProjectUpdate, TaskCreate, TaskOut, TaskUpdate,
    isoformat_ts, task_to_out,
)

logger = logging.getLogger("kanban-api.repository")


class KanbanRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ============================================================
    # PROJECTS
    # ============================================================

    async def create_project(self, name: str, description: str = "", project_id: Optional[str] = None) -> Project:
        project = Project(
            id=project_id or new_id(),
            name=name,
            description=description or "",
            created_at=utcnow(),
        )
        self.session.add(project)
        await self.session.flush()
        return project

    async def get_project(self, project_id: str) -> Optional[Project]:
        result = await self.session.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def list_projects(self) -> List[ProjectSummaryOut]:
        """All projects, newest first, with column and task counts"""
        columns_count = (
            select(func.count(BoardColumn.id))
            .where(BoardColumn.project_id == Project.id)
            .correlate(Project)
            .scalar_subquery()
        )
        tasks_count = (
            select(func.count(Task.id))
            .select_from(Task)
            .join(BoardColumn, Task.column_id == BoardColumn.id)
            .where(BoardColumn.project_id == Project.id)
            .correlate(Project)
            .scalar_subquery()
        )
        stmt = (
            select(Project, columns_count.label("columns_count"), tasks_count.label("tasks_count"))
            .order_by(Project.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [
            ProjectSummaryOut(
                id=p.id,
                name=p.name,
                description=p.description,
                created_at=isoformat_ts(p.created_at),
                columns_count=n_columns or 0,
                tasks_count=n_tasks or 0,
            )
            for p, n_columns, n_tasks in result.all()
        ]

    async def update_project(self, project_id: str, changes: ProjectUpdate) -> bool:
        values = {}
        if changes.name is not None:
            values["name"] = changes.name
        if changes.description is not None:
            values["description"] = changes.description
        if not values:
            return False

        result = await self.session.execute(
            update(Project).where(Project.id == project_id).values(**values)
        )
        return result.rowcount > 0

    async def delete_project(self, project_id: str) -> bool:
        result = await self.session.execute(delete(Project).where(Project.id == project_id))
        return result.rowcount > 0

    # ============================================================
    # COLUMNS
    # ============================================================

    async def create_column(
        self, project_id: str, title: str, color: str, order_index: int,
        column_id: Optional[str] = None,
    ) -> BoardColumn:
        column = BoardColumn(
            id=column_id or new_id(),
            project_id=project_id,
            title=title,
            color=color,
            order_index=order_index,
        )
        self.session.add(column)
        await self.session.flush()
        return column

    async def get_column(self, column_id: str) -> Optional[BoardColumn]:
        result = await self.session.execute(select(BoardColumn).where(BoardColumn.id == column_id))
        return result.scalar_one_or_none()

    async def next_column_order(self, project_id: str) -> int:
        # Seeded columns start at 1, so an empty project also starts at 1
        stmt = select(func.coalesce(func.max(BoardColumn.order_index), 0)).where(
            BoardColumn.project_id == project_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() + 1

    async def get_columns_by_project(self, project_id: str) -> List[BoardColumn]:
        stmt = (
            select(BoardColumn)
            .where(BoardColumn.project_id == project_id)
            .order_by(BoardColumn.order_index.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_column(self, column_id: str, changes: ColumnUpdate) -> bool:
        values = {}
        if changes.title is not None:
            values["title"] = changes.title
        if changes.color is not None:
            values["color"] = changes.color
        if not values:
            return False

        result = await self.session.execute(
            update(BoardColumn).where(BoardColumn.id == column_id).values(**values)
        )
        return result.rowcount > 0

    async def delete_column(self, column_id: str) -> bool:
        result = await self.session.execute(delete(BoardColumn).where(BoardColumn.id == column_id))
        return result.rowcount > 0

    async def update_columns_order(
        self, column_orders: Iterable[Tuple[str, int]], project_id: Optional[str] = None,
    ) -> None:
        """Apply every (column_id, order) pair or none of them"""
        try:
            for column_id, order in column_orders:
                stmt = update(BoardColumn).where(BoardColumn.id == column_id)
                if project_id is not None:
                    stmt = stmt.where(BoardColumn.project_id == project_id)
                await self.session.execute(stmt.values(order_index=order))
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Column order batch rolled back: {e}", exc_info=True)
            raise

    # ============================================================
    # TASKS
    # ============================================================

    @staticmethod
    def _next_task_order(column_id: str):
        return (
            select(func.coalesce(func.max(Task.order_index), -1) + 1)
            .where(Task.column_id == column_id)
            .scalar_subquery()
        )

    async def create_task(self, column_id: str, data: TaskCreate, task_id: Optional[str] = None) -> Task:
        """Insert a task at the end of its column.

        The order is computed inside the INSERT itself, so the append is a
        single statement.
        """
        priority = data.priority.value if isinstance(data.priority, TaskPriority) else data.priority
        task = Task(
            id=task_id or new_id(),
            column_id=column_id,
            title=data.title,
            description=data.description,
            assignee=data.assignee,
            due_date=data.due_date,
            priority=priority,
            created_at=utcnow(),
            order_index=self._next_task_order(column_id),
        )
        self.session.add(task)
        await self.session.flush()
        # The flush expires SQL-expression attributes; load the computed value
        await self.session.refresh(task, ["order_index"])
        return task

    async def get_task(self, task_id: str) -> Optional[TaskOut]:
        result = await self.session.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if task is None:
            return None
        tags = await self.get_tags_for_tasks([task.id])
        return task_to_out(task, tags.get(task.id, []))

    async def task_exists(self, task_id: str) -> bool:
        result = await self.session.execute(select(Task.id).where(Task.id == task_id))
        return result.scalar_one_or_none() is not None

    async def get_tasks_by_column(self, column_id: str) -> List[TaskOut]:
        stmt = (
            select(Task)
            .where(Task.column_id == column_id)
            .order_by(Task.order_index.asc(), Task.created_at.asc())
        )
        result = await self.session.execute(stmt)
        tasks = result.scalars().all()
        tags = await self.get_tags_for_tasks([t.id for t in tasks])
        return [task_to_out(t, tags.get(t.id, [])) for t in tasks]

    async def get_task_order(self, column_id: str) -> List[str]:
        """Task ids of a column in display order"""
        stmt = (
            select(Task.id)
            .where(Task.column_id == column_id)
            .order_by(Task.order_index.asc(), Task.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_task(self, task_id: str, changes: TaskUpdate) -> bool:
        """Apply the non-tag fields of ``changes``; tags are handled separately"""
        values = {}
        if changes.title is not None:
            values["title"] = changes.title
        if changes.description is not None:
            values["description"] = changes.description
        if changes.assignee is not None:
            values["assignee"] = changes.assignee
        if changes.due_date is not None:
            values["due_date"] = changes.due_date
        if changes.priority is not None:
            values["priority"] = TaskPriority(changes.priority).value
        if not values:
            return False

        result = await self.session.execute(
            update(Task).where(Task.id == task_id).values(**values)
        )
        return result.rowcount > 0

    async def set_task_column(self, task_id: str, column_id: str) -> bool:
        result = await self.session.execute(
            update(Task).where(Task.id == task_id).values(column_id=column_id)
        )
        return result.rowcount > 0

    async def delete_task(self, task_id: str) -> bool:
        result = await self.session.execute(delete(Task).where(Task.id == task_id))
        return result.rowcount > 0

    async def update_tasks_order(
        self, task_orders: Iterable[Tuple[str, int]], column_id: Optional[str] = None,
    ) -> None:
        """Apply every (task_id, order) pair or none of them"""
        try:
            for task_id, order in task_orders:
                stmt = update(Task).where(Task.id == task_id)
                if column_id is not None:
                    stmt = stmt.where(Task.column_id == column_id)
                await self.session.execute(stmt.values(order_index=order))
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Task order batch rolled back: {e}", exc_info=True)
            raise

    async def search_tasks(self, project_id: str, term: str) -> List[TaskOut]:
        """Substring match on title, description or assignee, newest first"""
        pattern = f"%{term}%"
        stmt = (
            select(Task)
            .join(BoardColumn, Task.column_id == BoardColumn.id)
            .where(
                BoardColumn.project_id == project_id,
                or_(
                    Task.title.like(pattern),
                    Task.description.like(pattern),
                    Task.assignee.like(pattern),
                ),
            )
            .order_by(Task.created_at.desc())
        )
        result = await self.session.execute(stmt)
        tasks = result.scalars().all()
        tags = await self.get_tags_for_tasks([t.id for t in tasks])
        return [task_to_out(t, tags.get(t.id, [])) for t in tasks]

    # ============================================================
    # TAGS
    # ============================================================

    async def get_tags_for_tasks(self, task_ids: Sequence[str]) -> Dict[str, List[str]]:
        if not task_ids:
            return {}
        stmt = (
            select(TaskTag.task_id, TaskTag.tag_name)
            .where(TaskTag.task_id.in_(task_ids))
            .order_by(TaskTag.task_id, TaskTag.tag_name)
        )
        result = await self.session.execute(stmt)
        tags: Dict[str, List[str]] = {}
        for task_id, tag_name in result.all():
            tags.setdefault(task_id, []).append(tag_name)
        return tags

    async def add_task_tags(self, task_id: str, tags: Iterable[str]) -> None:
        """Attach tags, skipping ones the task already has"""
        existing = await self.get_tags_for_tasks([task_id])
        seen = set(existing.get(task_id, []))
        rows = []
        for tag in tags:
            if tag in seen:
                continue
            seen.add(tag)
            rows.append({"task_id": task_id, "tag_name": tag})
        if rows:
            await self.session.execute(insert(TaskTag), rows)

    async def delete_task_tags(self, task_id: str) -> None:
        await self.session.execute(delete(TaskTag).where(TaskTag.task_id == task_id))
