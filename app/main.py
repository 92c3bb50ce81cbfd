import logging
import os
from typing import Annotated

from fastapi import Depends, FastAPI, Path, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import database, schemas
from .errors import TaskManagerError
from .store import Store

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

IdParam = Annotated[int, Path(ge=0, le=2**64 - 1)]

store = Store(database.create_session_factory(database.DATABASE_URL))

app = FastAPI(title="Task Manager API")


def get_store() -> Store:
    return store


# ERRORS
@app.exception_handler(TaskManagerError)
async def task_manager_error_handler(request: Request, exc: TaskManagerError):
    if exc.http_status >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "details": [
                    {"field": ".".join(str(loc) for loc in e["loc"]), "message": e["msg"]}
                    for e in exc.errors()
                ],
            }
        },
    )


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}},
    )


# PROJECTS
@app.post("/projects", response_model=schemas.Project)
def add_project(project: schemas.ProjectIn, store: Store = Depends(get_store)):
    return store.projects.create(project.name, project.description, project.start_date, project.due_date)


@app.get("/projects/{project_id}", response_model=schemas.Project)
def get_project(project_id: IdParam, store: Store = Depends(get_store)):
    return store.projects.get(project_id)


@app.put("/projects/{project_id}", response_model=schemas.Project)
def update_project(project_id: IdParam, project: schemas.ProjectIn, store: Store = Depends(get_store)):
    return store.projects.update(
        project_id, project.name, project.description, project.start_date, project.due_date
    )


@app.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: IdParam, store: Store = Depends(get_store)):
    store.projects.delete(project_id)
    return None


# TASKS
@app.post("/tasks", response_model=schemas.Task)
def add_task(task: schemas.TaskCreate, store: Store = Depends(get_store)):
    return store.tasks.create(
        task.project_id, task.name, task.description, task.start_date, task.due_date, task.assigned_users
    )


@app.get("/tasks/{task_id}", response_model=schemas.Task)
def get_task(task_id: IdParam, store: Store = Depends(get_store)):
    return store.tasks.get(task_id)


@app.put("/tasks/{task_id}", response_model=schemas.Task)
def update_task(task_id: IdParam, task: schemas.TaskUpdate, store: Store = Depends(get_store)):
    return store.tasks.update(
        task_id,
        task.name,
        task.description,
        task.start_date,
        task.due_date,
        task.status,
        task.assigned_users,
    )


@app.patch("/tasks/{task_id}/status", response_model=schemas.Task)
def change_task_status(task_id: IdParam, change: schemas.TaskStatusChange, store: Store = Depends(get_store)):
    return store.tasks.change_status(task_id, change.status, change.assigned_users)


@app.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: IdParam, store: Store = Depends(get_store)):
    store.tasks.delete(task_id)
    return None


# USERS
@app.post("/users", response_model=schemas.User)
def add_user(user: schemas.UserIn, store: Store = Depends(get_store)):
    return store.users.create(user.name)


@app.get("/users/{user_id}", response_model=schemas.User)
def get_user(user_id: IdParam, store: Store = Depends(get_store)):
    return store.users.get(user_id)


@app.put("/users/{user_id}", response_model=schemas.User)
def update_user(user_id: IdParam, user: schemas.UserIn, store: Store = Depends(get_store)):
    return store.users.update(user_id, user.name)


@app.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: IdParam, store: Store = Depends(get_store)):
    store.users.delete(user_id)
    return None


# ASSIGNMENTS
@app.post("/tasks/{task_id}/assignees/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def assign_task_to_user(task_id: IdParam, user_id: IdParam, store: Store = Depends(get_store)):
    store.assignments.assign(task_id, user_id)
    return None


@app.delete("/tasks/{task_id}/assignees/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_task_from_user(task_id: IdParam, user_id: IdParam, store: Store = Depends(get_store)):
    store.assignments.unassign(task_id, user_id)
    return None


@app.get("/tasks/{task_id}/assignees/{user_id}", response_model=schemas.TaskAssignment)
def get_assignment(task_id: IdParam, user_id: IdParam, store: Store = Depends(get_store)):
    return store.assignments.get(task_id, user_id)
