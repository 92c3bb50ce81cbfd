from enum import Enum
from typing import Annotated, ClassVar, List

from pydantic import BaseModel, Field

U64 = Annotated[int, Field(ge=0, le=2**64 - 1)]


class StorableModel(BaseModel):
    """Record that can be written to a region.

    Encoded as compact UTF-8 JSON and bounded by ``MAX_SIZE`` bytes.
    """

    MAX_SIZE: ClassVar[int] = 1024

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes):
        return cls.model_validate_json(data)


class TaskStatus(str, Enum):
    todo = "Todo"
    in_progress = "InProgress"
    done = "Done"


class Project(StorableModel):
    id: U64
    name: str
    description: str
    start_date: U64
    due_date: U64


class Task(StorableModel):
    id: U64
    project_id: U64
    name: str
    description: str
    start_date: U64
    due_date: U64
    status: TaskStatus = TaskStatus.todo
    assigned_users: List[U64] = Field(default_factory=list)


class User(StorableModel):
    id: U64
    name: str


class TaskAssignment(StorableModel):
    user_id: U64
    task_id: U64


# Request bodies

class ProjectIn(BaseModel):
    name: str
    description: str
    start_date: U64
    due_date: U64


class TaskCreate(BaseModel):
    project_id: U64
    name: str
    description: str
    start_date: U64
    due_date: U64
    assigned_users: List[U64] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    name: str
    description: str
    start_date: U64
    due_date: U64
    status: TaskStatus
    assigned_users: List[U64]


class TaskStatusChange(BaseModel):
    status: TaskStatus
    assigned_users: List[U64]


class UserIn(BaseModel):
    name: str
