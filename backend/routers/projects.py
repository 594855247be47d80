# routers/projects.py — Project endpoints (board containers)
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from errors import storage_errors
from kanban_service import KanbanService, get_kanban_service
from schemas import ProjectCreate, ProjectOut, ProjectSummaryOut, ProjectUpdate, SuccessOut, TaskOut

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get("", response_model=List[ProjectSummaryOut])
async def list_projects(service: KanbanService = Depends(get_kanban_service)):
    """List projects with column and task counts (no tree)"""
    with storage_errors("load projects"):
        return await service.list_projects()


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(project_id: str, service: KanbanService = Depends(get_kanban_service)):
    """Full project tree: columns in order, each with its ordered tasks"""
    with storage_errors("load project"):
        project = await service.get_project_with_columns(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, service: KanbanService = Depends(get_kanban_service)):
    """Create a project with the three default columns"""
    with storage_errors("create project"):
        return await service.create_project_with_defaults(data.name, data.description)


@router.put("/{project_id}", response_model=SuccessOut)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    service: KanbanService = Depends(get_kanban_service),
):
    """Update name and/or description"""
    with storage_errors("update project"):
        updated = await service.update_project(project_id, data)
    if not updated:
        raise HTTPException(status_code=404, detail="Project not found")
    return SuccessOut(message="Project updated")


@router.delete("/{project_id}", response_model=SuccessOut)
async def delete_project(project_id: str, service: KanbanService = Depends(get_kanban_service)):
    """Delete a project with all its columns, tasks and tags"""
    with storage_errors("delete project"):
        deleted = await service.delete_project(project_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Project not found")
    return SuccessOut(message="Project deleted")


@router.get("/{project_id}/tasks/search", response_model=List[TaskOut])
async def search_tasks(
    project_id: str,
    q: str = Query(..., description="Text to look for in title, description or assignee"),
    service: KanbanService = Depends(get_kanban_service),
):
    """Search a project's tasks, newest first"""
    with storage_errors("search tasks"):
        tasks = await service.search_tasks(project_id, q)
    if tasks is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return tasks
