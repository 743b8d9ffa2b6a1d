"""
projectflow/models/task.py

Board tasks. Position orders tasks within a status column.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class Task(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_id: str
    project_id: str
    feature_id: Optional[str] = None
    parent_task_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    position: int = 0
    priority: Optional[str] = None
    effort: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class TaskCreateRequest(BaseModel):
    project_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: Optional[str] = None
    effort: Optional[str] = None
    category: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    parent_task_id: Optional[str] = None


class AddFeatureToTaskRequest(BaseModel):
    project_id: str
    feature_id: str
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None


class TaskStatusUpdateRequest(BaseModel):
    new_status: TaskStatus
    new_position: int = Field(ge=0)


class TaskPositionUpdateRequest(BaseModel):
    new_position: int = Field(ge=0)


class TaskAssignmentRequest(BaseModel):
    assigned_to: Optional[str] = None


class TaskNotesRequest(BaseModel):
    notes: str
