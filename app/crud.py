import logging
import threading
from typing import Generic, List, TypeVar

from .errors import InvalidInput, NotFound
from .integrity import ReferentialIntegrity
from .schemas import Project, StorableModel, Task, TaskAssignment, TaskStatus, User
from .stable import Cell, StableMap

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=StorableModel)


class IdGenerator:
    """Shared counter issuing ids for every entity type.

    The counter value itself is durable: ``next_id`` persists ``current + 1``
    before handing out ``current``, so ids keep increasing across restarts.
    """

    def __init__(self, counter: Cell, lock: threading.RLock):
        self._counter = counter
        self._lock = lock

    def peek(self) -> int:
        """The id the next call to ``next_id`` will issue."""
        return self._counter.get()

    def next_id(self) -> int:
        with self._lock:
            current = self._counter.get()
            self._counter.set(current + 1)
            return current


class Repository(Generic[R]):
    entity_name = "Record"
    record_type = StorableModel

    def __init__(self, records: StableMap, ids: IdGenerator, lock: threading.RLock):
        self._records = records
        self._ids = ids
        self._lock = lock

    def _not_found(self, id: int) -> NotFound:
        return NotFound(f"{self.entity_name} with id={id} not found")

    def _save(self, record: R) -> R:
        self._records.insert(record.id, record)
        return record

    def _create(self, **fields) -> R:
        # bound checked before the counter advances
        with self._lock:
            record = self.record_type(id=self._ids.peek(), **fields)
            self._records.check(record)
            self._ids.next_id()
            self._save(record)
        logger.info("Created %s %d", self.entity_name.lower(), record.id)
        return record

    def get(self, id: int) -> R:
        record = self._records.get(id)
        if record is None:
            raise self._not_found(id)
        return record

    def contains(self, id: int) -> bool:
        return self._records.contains_key(id)

    def delete(self, id: int) -> None:
        with self._lock:
            if self._records.remove(id) is None:
                raise self._not_found(id)
        logger.info("Deleted %s %d", self.entity_name.lower(), id)

    def _replace(self, id: int, **fields) -> R:
        with self._lock:
            existing = self.get(id)
            updated = type(existing).model_validate({**existing.model_dump(), **fields})
            return self._save(updated)


class ProjectRepository(Repository[Project]):
    entity_name = "Project"
    record_type = Project

    def create(self, name: str, description: str, start_date: int, due_date: int) -> Project:
        return self._create(
            name=name, description=description, start_date=start_date, due_date=due_date
        )

    def update(self, id: int, name: str, description: str, start_date: int, due_date: int) -> Project:
        return self._replace(
            id, name=name, description=description, start_date=start_date, due_date=due_date
        )


class TaskRepository(Repository[Task]):
    entity_name = "Task"
    record_type = Task

    def create(
        self,
        project_id: int,
        name: str,
        description: str,
        start_date: int,
        due_date: int,
        assigned_users: List[int],
    ) -> Task:
        # project_id is advisory and never looked up
        return self._create(
            project_id=project_id,
            name=name,
            description=description,
            start_date=start_date,
            due_date=due_date,
            status=TaskStatus.todo,
            assigned_users=list(assigned_users),
        )

    def update(
        self,
        id: int,
        name: str,
        description: str,
        start_date: int,
        due_date: int,
        status: TaskStatus,
        assigned_users: List[int],
    ) -> Task:
        return self._replace(
            id,
            name=name,
            description=description,
            start_date=start_date,
            due_date=due_date,
            status=status,
            assigned_users=list(assigned_users),
        )

    def change_status(self, id: int, status: TaskStatus, assigned_users: List[int]) -> Task:
        return self._replace(id, status=status, assigned_users=list(assigned_users))


class UserRepository(Repository[User]):
    entity_name = "User"
    record_type = User

    def create(self, name: str) -> User:
        return self._create(name=name)

    def update(self, id: int, name: str) -> User:
        return self._replace(id, name=name)


class AssignmentRepository:
    """Task-to-user relation keyed by ``(user_id, task_id)``.

    Independent of ``Task.assigned_users``: neither side updates the other.
    """

    def __init__(self, records: StableMap, integrity: ReferentialIntegrity, lock: threading.RLock):
        self._records = records
        self._integrity = integrity
        self._lock = lock

    def contains(self, task_id: int, user_id: int) -> bool:
        return self._records.contains_key((user_id, task_id))

    def get(self, task_id: int, user_id: int) -> TaskAssignment:
        assignment = self._records.get((user_id, task_id))
        if assignment is None:
            raise NotFound(f"Task with id={task_id} is not assigned to user with id={user_id}")
        return assignment

    def assign(self, task_id: int, user_id: int) -> None:
        with self._lock:
            self._integrity.require_task_and_user(task_id, user_id)
            if self.contains(task_id, user_id):
                logger.warning("Task %d is already assigned to user %d", task_id, user_id)
                raise InvalidInput(
                    f"Task with id={task_id} is already assigned to user with id={user_id}"
                )
            self._records.insert((user_id, task_id), TaskAssignment(user_id=user_id, task_id=task_id))
        logger.info("Assigned task %d to user %d", task_id, user_id)

    def unassign(self, task_id: int, user_id: int) -> None:
        # no existence check on the task or user, only on the pair
        with self._lock:
            if self._records.remove((user_id, task_id)) is None:
                raise NotFound(f"Task with id={task_id} is not assigned to user with id={user_id}")
        logger.info("Unassigned task %d from user %d", task_id, user_id)
