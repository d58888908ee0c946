from typing import List

from fastapi import APIRouter, Depends, status

from ..core.auth import CurrentUser, get_current_user
from ..schemas.task import MessageResponse, StatusUpdate, TaskCreate, TaskResponse, TaskUpdate
from ..services import get_orchestrator
from ..services.orchestrator import TaskOrchestrator

router = APIRouter()


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
):
    """Create a new task owned by the authenticated user"""
    task = orchestrator.create_task(current_user, task_data)
    return TaskResponse.from_task(task)


@router.get("", response_model=List[TaskResponse])
async def get_tasks(
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
):
    """Get all tasks (admin) or only the caller's own tasks"""
    return [TaskResponse.from_task(task) for task in orchestrator.list_tasks(current_user)]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
):
    """Get a specific task by ID (owner or admin)"""
    return TaskResponse.from_task(orchestrator.get_task(current_user, task_id))


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
):
    """Update a task (owner or admin)"""
    return TaskResponse.from_task(orchestrator.update_task(current_user, task_id, task_update))


@router.put("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: int,
    status_update: StatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
):
    """Change the status of a task (owner or admin)"""
    task = orchestrator.update_status(current_user, task_id, status_update.status)
    return TaskResponse.from_task(task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
):
    """Delete a task (owner or admin)"""
    orchestrator.delete_task(current_user, task_id)
    return MessageResponse(message="Task deleted successfully")
