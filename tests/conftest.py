"""
Pytest will auto-discover / import this file called 'conftest.py'. ]
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.db.schema import Base
from src.duel.validator import WordListSource, WordValidator

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

# Small dictionary used throughout the tests (4 and 5 letter words)
DICTIONARY = [
    "ABCD", "DCBA", "BIRD", "WORD", "LAMP", "FISH", "CODE", "GAME",
    "ALLOW", "LLAMA", "CRANE", "AUDIO", "STARE", "RAISE", "MOUSE", "HELLO",
    "WORLD", "LEVEL", "BELLE", "LEMON", "SCOOP", "COOLS", "APPLE", "PLANT",
]


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


class FakeTask:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """
    Deterministic Scheduler: time only moves when the test calls advance().
    Due callbacks run synchronously, in order of their due time, on the test's thread.
    """

    def __init__(self) -> None:
        self.time = 0.0
        self.tasks: list[FakeTask] = []

    def now(self) -> float:
        return self.time

    def schedule(self, delay: float, callback: Callable[[], None]) -> FakeTask:
        task = FakeTask(self.time + delay, callback)
        self.tasks.append(task)
        return task

    def advance(self, seconds: float) -> None:
        target = self.time + seconds
        while True:
            due = [task for task in self.tasks if not task.cancelled and task.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.due)
            self.tasks.remove(task)
            self.time = max(self.time, task.due)
            task.callback()
        self.time = target

    def pending(self) -> list[FakeTask]:
        return [task for task in self.tasks if not task.cancelled]


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def validator() -> WordValidator:
    return WordValidator(WordListSource(DICTIONARY))
