# kanban_service.py — Board orchestration on top of KanbanRepository
"""
Kanban service: default-column seeding, task creation with tags, partial task
updates, moves with reordering, and composition of the full project tree.

Every write runs as one unit of work on the request's session: it commits
when the whole operation succeeded and rolls back otherwise.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db_session
from models import new_id
from repository import KanbanRepository
from schemas import (
    ColumnCreate, ColumnOut, ColumnUpdate, ProjectOut, ProjectSummaryOut, ProjectUpdate,
    TaskCreate, TaskOut, TaskUpdate, column_to_out, project_to_out,
)

logger = logging.getLogger("kanban-api.service")

# Every new project starts with these lanes; order values are 1-based
DEFAULT_COLUMNS = [
    {"title": "To Do", "color": "#FF6B6B", "order": 1},
    {"title": "In Progress", "color": "#4ECDC4", "order": 2},
    {"title": "Done", "color": "#45B7D1", "order": 3},
]


class KanbanService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = KanbanRepository(session)

    @asynccontextmanager
    async def _unit_of_work(self):
        try:
            yield
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    # ============================================================
    # PROJECTS
    # ============================================================

    async def list_projects(self) -> List[ProjectSummaryOut]:
        return await self.repo.list_projects()

    async def create_project_with_defaults(self, name: str, description: str = "") -> ProjectOut:
        """Create a project together with its To Do / In Progress / Done columns"""
        async with self._unit_of_work():
            project = await self.repo.create_project(name, description, project_id=new_id())
            columns = []
            for col_def in DEFAULT_COLUMNS:
                column = await self.repo.create_column(
                    project.id,
                    title=col_def["title"],
                    color=col_def["color"],
                    order_index=col_def["order"],
                    column_id=new_id(),
                )
                columns.append(column_to_out(column))

        logger.info(f"Project {project.id} created with {len(columns)} default columns")
        return project_to_out(project, columns)

    async def get_project_with_columns(self, project_id: str) -> Optional[ProjectOut]:
        """Project -> ordered columns -> ordered tasks with tags, or None"""
        project = await self.repo.get_project(project_id)
        if project is None:
            return None

        columns = []
        for column in await self.repo.get_columns_by_project(project_id):
            tasks = await self.repo.get_tasks_by_column(column.id)
            columns.append(column_to_out(column, tasks))
        return project_to_out(project, columns)

    async def update_project(self, project_id: str, changes: ProjectUpdate) -> bool:
        async with self._unit_of_work():
            return await self.repo.update_project(project_id, changes)

    async def delete_project(self, project_id: str) -> bool:
        async with self._unit_of_work():
            deleted = await self.repo.delete_project(project_id)
        if deleted:
            logger.info(f"Project {project_id} deleted")
        return deleted

    # ============================================================
    # COLUMNS
    # ============================================================

    async def create_column(self, project_id: str, data: ColumnCreate) -> Optional[ColumnOut]:
        if await self.repo.get_project(project_id) is None:
            return None

        async with self._unit_of_work():
            order = data.order
            if order is None:
                order = await self.repo.next_column_order(project_id)
            column = await self.repo.create_column(
                project_id, title=data.title, color=data.color,
                order_index=order, column_id=new_id(),
            )
        return column_to_out(column)

    async def update_column(self, column_id: str, changes: ColumnUpdate) -> bool:
        async with self._unit_of_work():
            return await self.repo.update_column(column_id, changes)

    async def delete_column(self, column_id: str) -> bool:
        async with self._unit_of_work():
            return await self.repo.delete_column(column_id)

    async def reorder_columns(self, project_id: str, column_ids: List[str]) -> None:
        async with self._unit_of_work():
            await self.repo.update_columns_order(
                [(column_id, index) for index, column_id in enumerate(column_ids)],
                project_id=project_id,
            )

    # ============================================================
    # TASKS
    # ============================================================

    async def create_task(
        self, data: TaskCreate, column_id: str, project_id: Optional[str] = None,
    ) -> Optional[TaskOut]:
        """Insert a task at the end of ``column_id`` and attach its tags.

        Returns None when the column does not exist (or is not part of
        ``project_id`` when one is given).
        """
        column = await self.repo.get_column(column_id)
        if column is None or (project_id is not None and column.project_id != project_id):
            return None

        task_id = new_id()
        async with self._unit_of_work():
            await self.repo.create_task(column_id, data, task_id=task_id)
            if data.tags:
                await self.repo.add_task_tags(task_id, data.tags)

        return await self.repo.get_task(task_id)

    async def get_task(self, task_id: str) -> Optional[TaskOut]:
        return await self.repo.get_task(task_id)

    async def update_task(self, task_id: str, changes: TaskUpdate) -> bool:
        """Apply field changes and/or replace tags in one transaction.

        False when the task does not exist or nothing was supplied.
        """
        if not await self.repo.task_exists(task_id):
            return False
        if not changes.has_field_changes() and changes.tags is None:
            return False

        async with self._unit_of_work():
            if changes.has_field_changes():
                await self.repo.update_task(task_id, changes)
            if changes.tags is not None:
                await self.repo.delete_task_tags(task_id)
                await self.repo.add_task_tags(task_id, changes.tags)
        return True

    async def delete_task(self, task_id: str) -> bool:
        async with self._unit_of_work():
            return await self.repo.delete_task(task_id)

    async def move_task(self, task_id: str, new_column_id: str, new_index: Optional[int] = None) -> bool:
        """Move a task to ``new_column_id``; with ``new_index`` also renumber
        the destination column densely from 0 with the task spliced in.

        An index past the end appends. False if the task or column is missing.
        """
        if not await self.repo.task_exists(task_id):
            return False
        if await self.repo.get_column(new_column_id) is None:
            return False

        async with self._unit_of_work():
            await self.repo.set_task_column(task_id, new_column_id)
            if new_index is not None:
                order = [tid for tid in await self.repo.get_task_order(new_column_id) if tid != task_id]
                order.insert(new_index, task_id)
                await self.repo.update_tasks_order(
                    [(tid, index) for index, tid in enumerate(order)]
                )
        return True

    async def reorder_tasks(self, column_id: str, task_ids: List[str]) -> None:
        async with self._unit_of_work():
            await self.repo.update_tasks_order(
                [(task_id, index) for index, task_id in enumerate(task_ids)],
                column_id=column_id,
            )

    async def search_tasks(self, project_id: str, term: str) -> Optional[List[TaskOut]]:
        if await self.repo.get_project(project_id) is None:
            return None
        return await self.repo.search_tasks(project_id, term)


async def get_kanban_service(db: AsyncSession = Depends(get_db_session)) -> KanbanService:
    """Dependency for getting a service bound to the request's session"""
    return KanbanService(db)
