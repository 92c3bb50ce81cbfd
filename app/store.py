import threading
from enum import IntEnum

from sqlalchemy.orm import sessionmaker

from .crud import (
    AssignmentRepository,
    IdGenerator,
    ProjectRepository,
    TaskRepository,
    UserRepository,
)
from .integrity import ReferentialIntegrity
from .schemas import Project, Task, TaskAssignment, User
from .stable import Cell, RegionAllocator, StableMap, U64Key, U64PairKey


class RegionId(IntEnum):
    COUNTER = 0
    PROJECTS = 1
    TASKS = 2
    USERS = 3
    ASSIGNMENTS = 4


class Store:
    """Persistence context: regions, the shared id counter and the repositories.

    Built once at process start and handed to request handlers. All
    repositories share one writer lock so mutations never interleave.
    """

    def __init__(self, session_factory: sessionmaker):
        self.lock = threading.RLock()
        self.regions = RegionAllocator(session_factory)

        counter = Cell(self.regions.get(RegionId.COUNTER, "counter"), initial=0)
        self.ids = IdGenerator(counter, self.lock)

        self.projects = ProjectRepository(
            StableMap(self.regions.get(RegionId.PROJECTS, "projects"), U64Key, Project),
            self.ids,
            self.lock,
        )
        self.tasks = TaskRepository(
            StableMap(self.regions.get(RegionId.TASKS, "tasks"), U64Key, Task),
            self.ids,
            self.lock,
        )
        self.users = UserRepository(
            StableMap(self.regions.get(RegionId.USERS, "users"), U64Key, User),
            self.ids,
            self.lock,
        )
        self.assignments = AssignmentRepository(
            StableMap(self.regions.get(RegionId.ASSIGNMENTS, "assignments"), U64PairKey, TaskAssignment),
            ReferentialIntegrity(self.tasks, self.users),
            self.lock,
        )
