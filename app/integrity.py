import logging

from .errors import NotFound

logger = logging.getLogger(__name__)


class ReferentialIntegrity:
    """Read-only existence checks across repositories, run before storing a relation."""

    def __init__(self, tasks, users):
        self._tasks = tasks
        self._users = users

    def require_task_and_user(self, task_id: int, user_id: int) -> None:
        if self._tasks.contains(task_id) and self._users.contains(user_id):
            return
        logger.warning("Missing task %d or user %d", task_id, user_id)
        raise NotFound(f"Task with id={task_id} or user with id={user_id} not found")
