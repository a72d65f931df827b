import pytest

from scenekit.project.project import ProjectContext


class RecordingFeedback:
    """Task feedback sink that keeps every call for inspection."""

    def __init__(self):
        self.tasks = {}
        self.updates = []
        self.closed = []
        self._next = 0

    def add_task_feedback(self, progress, message):
        self._next += 1
        self.tasks[self._next] = message
        return self._next

    def update_task_feedback(self, token, progress, message=None):
        self.updates.append((token, progress, message))

    def close_task_feedback(self, token):
        self.closed.append(token)

    def last_progress(self, token):
        values = [p for t, p, _ in self.updates if t == token]
        return values[-1] if values else None


@pytest.fixture
def feedback():
    return RecordingFeedback()


@pytest.fixture
def context():
    return ProjectContext()
