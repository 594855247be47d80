# tests/test_service.py — KanbanService behaviour (no HTTP)
import pytest
from sqlalchemy.exc import IntegrityError

from kanban_service import DEFAULT_COLUMNS, KanbanService
from schemas import ColumnCreate, ColumnUpdate, ProjectUpdate, TaskCreate, TaskUpdate


async def _project(service: KanbanService, name: str = "Board"):
    return await service.create_project_with_defaults(name, "")


async def _order(service: KanbanService, column_id: str) -> list:
    return await service.repo.get_task_order(column_id)


@pytest.mark.asyncio
async def test_new_project_has_three_default_columns(service):
    project = await _project(service)
    loaded = await service.get_project_with_columns(project.id)

    assert [(c.title, c.color, c.order) for c in loaded.columns] == [
        (d["title"], d["color"], d["order"]) for d in DEFAULT_COLUMNS
    ]
    assert all(c.tasks == [] for c in loaded.columns)


@pytest.mark.asyncio
async def test_get_missing_project_returns_none(service):
    assert await service.get_project_with_columns("missing") is None


@pytest.mark.asyncio
async def test_list_projects_newest_first(service):
    first = await _project(service, "First")
    second = await _project(service, "Second")
    await service.create_task(TaskCreate(title="t"), second.columns[0].id)

    summaries = await service.list_projects()
    assert [p.id for p in summaries] == [second.id, first.id]
    assert summaries[0].tasks_count == 1
    assert summaries[0].columns_count == 3


@pytest.mark.asyncio
async def test_update_and_delete_project(service):
    project = await _project(service)
    assert await service.update_project(project.id, ProjectUpdate(name="Renamed")) is True
    assert (await service.get_project_with_columns(project.id)).name == "Renamed"

    assert await service.delete_project(project.id) is True
    assert await service.get_project_with_columns(project.id) is None
    assert await service.delete_project(project.id) is False


@pytest.mark.asyncio
async def test_tasks_get_increasing_order_from_zero(service):
    project = await _project(service)
    column_id = project.columns[0].id

    created = [await service.create_task(TaskCreate(title=f"T{i}"), column_id) for i in range(3)]
    assert [t.order_index for t in created] == [0, 1, 2]


@pytest.mark.asyncio
async def test_create_task_with_tags(service):
    project = await _project(service)
    task = await service.create_task(
        TaskCreate(title="Tagged", priority="high", tags=["b", "a"]), project.columns[0].id,
    )
    assert task.priority == "high"
    assert task.tags == ["a", "b"]

    loaded = await service.get_project_with_columns(project.id)
    assert loaded.columns[0].tasks[0].tags == ["a", "b"]


@pytest.mark.asyncio
async def test_create_task_checks_column(service):
    project = await _project(service)
    other = await _project(service, "Other")

    assert await service.create_task(TaskCreate(title="x"), "missing") is None
    assert await service.create_task(
        TaskCreate(title="x"), other.columns[0].id, project_id=project.id,
    ) is None


@pytest.mark.asyncio
async def test_reorder_tasks(service):
    project = await _project(service)
    column_id = project.columns[0].id
    t1, t2, t3 = [await service.create_task(TaskCreate(title=f"T{i}"), column_id) for i in range(3)]

    await service.reorder_tasks(column_id, [t3.id, t1.id, t2.id])

    assert await _order(service, column_id) == [t3.id, t1.id, t2.id]
    loaded = await service.get_project_with_columns(project.id)
    assert [t.order_index for t in loaded.columns[0].tasks] == [0, 1, 2]


@pytest.mark.asyncio
async def test_move_task_to_front_of_other_column(service):
    project = await _project(service)
    source, target = project.columns[0].id, project.columns[1].id
    existing = [await service.create_task(TaskCreate(title=f"E{i}"), target) for i in range(2)]
    moving = await service.create_task(TaskCreate(title="Moving"), source)

    assert await service.move_task(moving.id, target, 0) is True

    assert await _order(service, source) == []
    assert await _order(service, target) == [moving.id, existing[0].id, existing[1].id]
    moved = await service.get_task(moving.id)
    assert moved.column_id == target
    assert moved.order_index == 0


@pytest.mark.asyncio
async def test_move_task_within_column(service):
    project = await _project(service)
    column_id = project.columns[0].id
    a, b, c = [await service.create_task(TaskCreate(title=n), column_id) for n in "abc"]

    assert await service.move_task(a.id, column_id, 2) is True
    assert await _order(service, column_id) == [b.id, c.id, a.id]


@pytest.mark.asyncio
async def test_move_task_index_past_end_appends(service):
    project = await _project(service)
    target = project.columns[1].id
    first = await service.create_task(TaskCreate(title="first"), target)
    moving = await service.create_task(TaskCreate(title="moving"), project.columns[0].id)

    assert await service.move_task(moving.id, target, 99) is True
    assert await _order(service, target) == [first.id, moving.id]


@pytest.mark.asyncio
async def test_move_missing_task_or_column(service):
    project = await _project(service)
    task = await service.create_task(TaskCreate(title="t"), project.columns[0].id)

    assert await service.move_task("missing", project.columns[1].id, 0) is False
    assert await service.move_task(task.id, "missing", 0) is False
    assert (await service.get_task(task.id)).column_id == project.columns[0].id


@pytest.mark.asyncio
async def test_update_task_fields_and_tags(service):
    project = await _project(service)
    task = await service.create_task(TaskCreate(title="Old", tags=["x"]), project.columns[0].id)

    changes = TaskUpdate(title="New", assignee="kim", tags=["y", "z"])
    assert await service.update_task(task.id, changes) is True

    loaded = await service.get_task(task.id)
    assert loaded.title == "New"
    assert loaded.assignee == "kim"
    assert loaded.priority == "medium"
    assert loaded.tags == ["y", "z"]


@pytest.mark.asyncio
async def test_clearing_tags_is_idempotent(service):
    project = await _project(service)
    task = await service.create_task(TaskCreate(title="t", tags=["a", "b"]), project.columns[0].id)

    assert await service.update_task(task.id, TaskUpdate(tags=[])) is True
    assert await service.update_task(task.id, TaskUpdate(tags=[])) is True
    assert (await service.get_task(task.id)).tags == []


@pytest.mark.asyncio
async def test_update_task_nothing_to_do(service):
    project = await _project(service)
    task = await service.create_task(TaskCreate(title="t"), project.columns[0].id)

    assert await service.update_task(task.id, TaskUpdate()) is False
    assert await service.update_task("missing", TaskUpdate(title="x")) is False


@pytest.mark.asyncio
async def test_update_task_failure_rolls_back_tags(service, monkeypatch):
    """Field update and tag replacement commit together or not at all"""
    project = await _project(service)
    task = await service.create_task(TaskCreate(title="t", tags=["keep"]), project.columns[0].id)

    async def failing_add(task_id, tags):
        raise IntegrityError("INSERT INTO task_tags", {}, Exception("boom"))

    monkeypatch.setattr(service.repo, "add_task_tags", failing_add)
    with pytest.raises(IntegrityError):
        await service.update_task(task.id, TaskUpdate(title="changed", tags=["new"]))

    loaded = await service.get_task(task.id)
    assert loaded.title == "t"
    assert loaded.tags == ["keep"]


@pytest.mark.asyncio
async def test_columns_create_update_reorder_delete(service):
    project = await _project(service)

    review = await service.create_column(project.id, ColumnCreate(title="Review"))
    assert review.order == 4
    assert review.color == "#CCCCCC"
    assert await service.create_column("missing", ColumnCreate(title="x")) is None

    assert await service.update_column(review.id, ColumnUpdate(title="QA")) is True

    ids = [c.id for c in project.columns] + [review.id]
    await service.reorder_columns(project.id, list(reversed(ids)))
    loaded = await service.get_project_with_columns(project.id)
    assert [c.id for c in loaded.columns] == list(reversed(ids))
    assert loaded.columns[0].title == "QA"

    assert await service.delete_column(review.id) is True
    loaded = await service.get_project_with_columns(project.id)
    assert len(loaded.columns) == 3


@pytest.mark.asyncio
async def test_delete_task(service):
    project = await _project(service)
    task = await service.create_task(TaskCreate(title="t", tags=["a"]), project.columns[0].id)

    assert await service.delete_task(task.id) is True
    assert await service.get_task(task.id) is None
    assert await service.repo.get_tags_for_tasks([task.id]) == {}
    assert await service.delete_task(task.id) is False


@pytest.mark.asyncio
async def test_search_tasks(service):
    project = await _project(service)
    await service.create_task(TaskCreate(title="Ship release"), project.columns[0].id)
    await service.create_task(TaskCreate(title="Plan", description="release notes"), project.columns[1].id)
    await service.create_task(TaskCreate(title="Other"), project.columns[2].id)

    results = await service.search_tasks(project.id, "release")
    assert sorted(t.title for t in results) == ["Plan", "Ship release"]
    assert await service.search_tasks("missing", "release") is None


@pytest.mark.asyncio
async def test_equal_order_index_falls_back_to_creation_time(service):
    """Moving without newIndex can leave two tasks on the same orderIndex"""
    project = await _project(service)
    source, target = project.columns[0].id, project.columns[1].id
    older = await service.create_task(TaskCreate(title="older"), source)
    newer = await service.create_task(TaskCreate(title="newer"), target)

    assert await service.move_task(older.id, target) is True

    loaded = await service.get_project_with_columns(project.id)
    tasks = loaded.columns[1].tasks
    assert [(t.id, t.order_index) for t in tasks] == [(older.id, 0), (newer.id, 0)]
    assert await _order(service, target) == [older.id, newer.id]
