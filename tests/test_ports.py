# tests/test_ports.py

from __future__ import annotations

import pytest

import task_browser.core.ports as ports
from task_browser.core.ports import Clock, TaskBrowser
from task_browser.tasks.task_models import BrowseRequest
from task_browser.tasks.task_store import TaskStore

from .conftest import NOW, SAMPLE, ids
from .fakes import FakeClock, FakeTaskBrowser


def test_module_documents_itself() -> None:
    assert ports.__doc__ is not None
    assert "Ports" in ports.__doc__


def test_task_store_provides_repo_methods() -> None:
    for name in ("browse", "add_task", "all_tasks", "count_tasks"):
        assert callable(getattr(TaskStore, name))


@pytest.mark.asyncio
async def test_code_written_against_the_port_runs_on_a_fake() -> None:
    async def newest_work(browser: TaskBrowser, clock: Clock):
        return await browser.browse(BrowseRequest.build(tags=["work"]), now=clock())

    fake = FakeTaskBrowser(SAMPLE)
    clock = FakeClock(NOW)
    assert ids(await newest_work(fake, clock)) == [6, 5, 1]
    assert clock.calls == 1
    assert fake.requests[0].tags == ("work",)
