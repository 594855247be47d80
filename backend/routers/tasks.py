# routers/tasks.py — Task card endpoints
from fastapi import APIRouter, Depends, HTTPException, status

from errors import storage_errors
from kanban_service import KanbanService, get_kanban_service
from schemas import SuccessOut, TaskCreate, TaskMove, TaskOut, TaskReorder, TaskUpdate

router = APIRouter(prefix="/api", tags=["Tasks"])


@router.post(
    "/projects/{project_id}/columns/{column_id}/tasks",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    project_id: str,
    column_id: str,
    data: TaskCreate,
    service: KanbanService = Depends(get_kanban_service),
):
    """Create a task at the end of a column, with its tags"""
    with storage_errors("create task"):
        task = await service.create_task(data, column_id, project_id=project_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Column not found")
    return task


@router.get("/tasks/{task_id}", response_model=TaskOut)
async def get_task(task_id: str, service: KanbanService = Depends(get_kanban_service)):
    with storage_errors("load task"):
        task = await service.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.put("/tasks/{task_id}", response_model=SuccessOut)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    service: KanbanService = Depends(get_kanban_service),
):
    """Update task fields; ``tags`` (even empty) replaces the tag set"""
    with storage_errors("update task"):
        updated = await service.update_task(task_id, data)
    if not updated:
        raise HTTPException(status_code=404, detail="Task not found")
    return SuccessOut(message="Task updated")


@router.patch("/tasks/{task_id}/move", response_model=SuccessOut)
async def move_task(
    task_id: str,
    data: TaskMove,
    service: KanbanService = Depends(get_kanban_service),
):
    """Move a task to another column, optionally at ``newIndex``"""
    with storage_errors("move task"):
        moved = await service.move_task(task_id, data.column_id, data.new_index)
    if not moved:
        raise HTTPException(status_code=404, detail="Task or target column not found")
    return SuccessOut(message="Task moved")


@router.delete("/tasks/{task_id}", response_model=SuccessOut)
async def delete_task(task_id: str, service: KanbanService = Depends(get_kanban_service)):
    with storage_errors("delete task"):
        deleted = await service.delete_task(task_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
    return SuccessOut(message="Task deleted")


@router.patch("/columns/{column_id}/tasks/reorder", response_model=SuccessOut)
async def reorder_tasks(
    column_id: str,
    data: TaskReorder,
    service: KanbanService = Depends(get_kanban_service),
):
    """Renumber a column's tasks 0..n-1 following ``taskIds``"""
    with storage_errors("reorder tasks"):
        await service.reorder_tasks(column_id, data.task_ids)
    return SuccessOut(message="Task order updated")
