# routers/columns.py — Column (swim lane) endpoints
from fastapi import APIRouter, Depends, HTTPException, status

from errors import storage_errors
from kanban_service import KanbanService, get_kanban_service
from schemas import ColumnCreate, ColumnOut, ColumnReorder, ColumnUpdate, SuccessOut

router = APIRouter(prefix="/api", tags=["Columns"])


@router.post("/projects/{project_id}/columns", response_model=ColumnOut, status_code=status.HTTP_201_CREATED)
async def create_column(
    project_id: str,
    data: ColumnCreate,
    service: KanbanService = Depends(get_kanban_service),
):
    """Add a column; placed after the last one unless ``order`` is given"""
    with storage_errors("create column"):
        column = await service.create_column(project_id, data)
    if column is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return column


@router.patch("/projects/{project_id}/columns/reorder", response_model=SuccessOut)
async def reorder_columns(
    project_id: str,
    data: ColumnReorder,
    service: KanbanService = Depends(get_kanban_service),
):
    """Renumber the project's columns to follow ``columnIds``"""
    with storage_errors("reorder columns"):
        await service.reorder_columns(project_id, data.column_ids)
    return SuccessOut(message="Column order updated")


@router.put("/columns/{column_id}", response_model=SuccessOut)
async def update_column(
    column_id: str,
    data: ColumnUpdate,
    service: KanbanService = Depends(get_kanban_service),
):
    """Update a column's title and/or color"""
    with storage_errors("update column"):
        updated = await service.update_column(column_id, data)
    if not updated:
        raise HTTPException(status_code=404, detail="Column not found")
    return SuccessOut(message="Column updated")


@router.delete("/columns/{column_id}", response_model=SuccessOut)
async def delete_column(column_id: str, service: KanbanService = Depends(get_kanban_service)):
    """Delete a column and every task in it"""
    with storage_errors("delete column"):
        deleted = await service.delete_column(column_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Column not found")
    return SuccessOut(message="Column deleted")
