import pytest

from buildrules import console, tools
from buildrules.cache import BuildCache
from buildrules.config import DEFAULT_CONFIG
from buildrules.tools import ToolResult, ToolStatus


class FakeTools:
    """Stands in for run_tool/spawn_tool, recording every command line."""

    def __init__(self):
        self.calls = []
        self.spawned = []
        self.responses = {}

    def respond(self, prefix, status=ToolStatus.OK, stdout="", stderr="", returncode=None):
        if returncode is None:
            returncode = 0 if status is ToolStatus.OK else 1
        self.responses[tuple(prefix)] = ToolResult(list(prefix), status, returncode, stdout, stderr)

    def _lookup(self, args):
        for length in range(len(args), 0, -1):
            response = self.responses.get(tuple(args[:length]))
            if response is not None:
                return ToolResult(list(args), response.status, response.returncode, response.stdout, response.stderr)
        return ToolResult(list(args), ToolStatus.OK)

    def run_tool(self, args, cwd=None, capture=True):
        args = [str(arg) for arg in args]
        self.calls.append(args)
        return self._lookup(args)

    def spawn_tool(self, args, cwd=None):
        args = [str(arg) for arg in args]
        self.spawned.append((args, cwd))
        return self._lookup(args)

    def git_calls(self):
        return [call[1:] for call in self.calls if call[0] == "git"]


@pytest.fixture
def fake_tools(monkeypatch):
    fake = FakeTools()
    # A repository on main with something staged and an ssh origin.
    fake.respond(["git", "rev-parse"], stdout="main\n")
    fake.respond(["git", "diff", "--cached", "--quiet"], status=ToolStatus.FAILED)
    fake.respond(["git", "remote", "get-url"], stdout="git@github.com:org/repo.git\n")
    monkeypatch.setattr(tools, "run_tool", fake.run_tool)
    monkeypatch.setattr(tools, "spawn_tool", fake.spawn_tool)
    return fake


@pytest.fixture
def settings():
    return dict(DEFAULT_CONFIG)


@pytest.fixture
def cache(tmp_path):
    return BuildCache(str(tmp_path / ".build_cache.json"))


@pytest.fixture(autouse=True)
def reset_console():
    yield
    console.close()
    console.g_verbose = False
