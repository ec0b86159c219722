from __future__ import annotations
from collections.abc import Callable
from pathlib import Path
import pytest
from promptline.context import Context, Deadline
from promptline.errors import ConfigError
from promptline.git import shorthead
from promptline.segments import (
    Clock,
    ContainerId,
    DirStackDepth,
    Duration,
    ExitStatus,
    GitBranch,
    LoadAverage,
    VenvName,
    build_providers,
)
from promptline.styles import StyleClass as SC
from promptline.toggles import ToggleRegistry
from promptline.tracker import CommandOutcome
from conftest import FakeRunner

CID = "3f2a9c1b7d4e" + "0" * 52


def git_argv(cwd: Path, *args: str) -> tuple[str, ...]:
    return ("git", "-C", str(cwd), *args)


@pytest.mark.parametrize(
    "head,short",
    [
        ("main", "main"),
        ("feature/foo-bar", "feature/foo-bar"),
        ("feature/foo-quux", "feature/foo-qu…"),
        ("feature/foo-bar-quux", "feature/foo-ba…"),
    ],
)
def test_shorthead(head: str, short: str) -> None:
    assert shorthead(head) == short


def test_git_branch(make_ctx: Callable[..., Context], tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    runner = FakeRunner({git_argv(tmp_path, "rev-parse", "--git-dir"): ".git"})
    ctx = make_ctx(cwd=tmp_path, runner=runner)
    assert GitBranch().produce(ctx) == "(main)"
    assert GitBranch().style(ctx) is SC.GIT


def test_git_detached_tag(make_ctx: Callable[..., Context], tmp_path: Path) -> None:
    gitdir = tmp_path / "repo.git"
    gitdir.mkdir()
    (gitdir / "HEAD").write_text("0123456789abcdef0123456789abcdef01234567\n")
    runner = FakeRunner(
        {
            git_argv(tmp_path, "rev-parse", "--git-dir"): str(gitdir),
            git_argv(tmp_path, "describe", "--tags", "--exact-match", "HEAD"): "v1.2.3",
        }
    )
    ctx = make_ctx(cwd=tmp_path, runner=runner)
    assert GitBranch().produce(ctx) == "(v1.2.3)"
    assert GitBranch().style(ctx) is SC.GIT_DETACHED


def test_git_detached_commit(
    make_ctx: Callable[..., Context], tmp_path: Path
) -> None:
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("0123456789abcdef\n")
    runner = FakeRunner(
        {
            git_argv(tmp_path, "rev-parse", "--git-dir"): ".git",
            git_argv(tmp_path, "rev-parse", "--short", "HEAD"): "0123456",
        }
    )
    ctx = make_ctx(cwd=tmp_path, runner=runner)
    assert GitBranch().produce(ctx) == "(0123456)"


def test_git_style_matches_produce(
    make_ctx: Callable[..., Context], tmp_path: Path
) -> None:
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("0123456789abcdef\n")
    runner = FakeRunner(
        {
            git_argv(tmp_path, "rev-parse", "--git-dir"): ".git",
            git_argv(tmp_path, "rev-parse", "--short", "HEAD"): "0123456",
        }
    )
    now = [0.0]
    ctx = make_ctx(cwd=tmp_path, runner=runner, deadline=Deadline(1, lambda: now[0]))
    branch = GitBranch()
    assert branch.produce(ctx) == "(0123456)"
    # The budget runs out between producing the text and choosing its style
    now[0] = 2.0
    assert branch.style(ctx) is SC.GIT_DETACHED
    assert len(runner.calls) == 3
    # A new redraw looks again
    assert branch.produce(make_ctx(cwd=tmp_path / "elsewhere")) is None


def test_git_not_a_repo(make_ctx: Callable[..., Context]) -> None:
    ctx = make_ctx()
    assert GitBranch().produce(ctx) is None
    assert GitBranch().style(ctx) is SC.GIT


def test_container_from_cgroup(
    make_ctx: Callable[..., Context], tmp_path: Path
) -> None:
    root = tmp_path / "root"
    (root / "proc" / "self").mkdir(parents=True)
    (root / ".dockerenv").touch()
    (root / "proc" / "self" / "cgroup").write_text(
        f"12:memory:/docker/{CID}\n0::/\n"
    )
    ctx = make_ctx(root=root)
    assert ContainerId().produce(ctx) == "[docker:3f2a9c1b7d4e]"


def test_container_from_mountinfo(
    make_ctx: Callable[..., Context], tmp_path: Path
) -> None:
    root = tmp_path / "root"
    (root / "proc" / "self").mkdir(parents=True)
    (root / "proc" / "self" / "cgroup").write_text("0::/\n")
    (root / "proc" / "self" / "mountinfo").write_text(
        f"600 590 0:48 /var/lib/docker/containers/{CID}/hostname /etc/hostname"
        " rw,relatime - ext4 /dev/sda1 rw\n"
    )
    ctx = make_ctx(root=root, env={"container": "docker"})
    assert ContainerId().produce(ctx) == "[docker:3f2a9c1b7d4e]"


def test_container_hostname_fallback(
    make_ctx: Callable[..., Context], tmp_path: Path
) -> None:
    root = tmp_path / "root"
    (root / "run").mkdir(parents=True)
    (root / "run" / ".containerenv").touch()
    ctx = make_ctx(root=root, hostname="a1b2c3d4e5f6")
    assert ContainerId().produce(ctx) == "[docker:a1b2c3d4e5f6]"


def test_not_in_container(make_ctx: Callable[..., Context]) -> None:
    assert ContainerId().produce(make_ctx()) is None


def test_venv(make_ctx: Callable[..., Context], tmp_path: Path) -> None:
    venv = tmp_path / "venv"
    venv.mkdir()
    ctx = make_ctx(env={"VIRTUAL_ENV": str(venv)})
    assert VenvName().produce(ctx) == "[venv:venv]"
    (venv / "pyvenv.cfg").write_text(
        "home = /usr/bin\nprompt = 'my project'\nversion = 3.12.0\n"
    )
    assert VenvName().produce(ctx) == "[venv:my project]"
    (venv / "pyvenv.cfg").write_text("prompt = bare\n")
    assert VenvName().produce(ctx) == "[venv:bare]"


def test_conda(make_ctx: Callable[..., Context]) -> None:
    ctx = make_ctx(env={"CONDA_DEFAULT_ENV": "base"})
    assert VenvName().produce(ctx) == "[conda:base]"
    assert VenvName().produce(make_ctx()) is None


def test_load(make_ctx: Callable[..., Context]) -> None:
    assert LoadAverage().produce(make_ctx(loadavg=(0.4213, 1.0, 2.0))) == "load:0.42"
    assert LoadAverage().produce(make_ctx()) is None


@pytest.mark.parametrize("depth,out", [(0, None), (1, "+1"), (4, "+4")])
def test_dirstack(make_ctx: Callable[..., Context], depth: int, out: str | None) -> None:
    assert DirStackDepth().produce(make_ctx(dirstack=depth)) == out


def test_clock(make_ctx: Callable[..., Context]) -> None:
    ctx = make_ctx()
    assert Clock().produce(ctx) == "14:05:09"
    assert Clock("%H:%M").produce(ctx) == "14:05"


@pytest.mark.parametrize(
    "outcome,duration,status",
    [
        (None, None, None),
        (CommandOutcome(duration=5, exit_code=0), "5", None),
        (CommandOutcome(duration=0, exit_code=2), None, "2"),
        (CommandOutcome(duration=12, exit_code=1), "12", "1"),
    ],
)
def test_last_run(
    make_ctx: Callable[..., Context],
    outcome: CommandOutcome | None,
    duration: str | None,
    status: str | None,
) -> None:
    ctx = make_ctx(last_run=outcome)
    assert Duration().produce(ctx) == duration
    assert ExitStatus().produce(ctx) == status


def test_build_providers() -> None:
    toggles = ToggleRegistry({"docker": False, "clock": True})
    providers = build_providers(["venv", "docker", "git", "clock"], toggles, "%H")
    assert [p.name for p in providers] == ["venv", "git", "clock"]
    assert isinstance(providers[2], Clock)
    assert providers[2].fmt == "%H"


def test_build_providers_unknown() -> None:
    with pytest.raises(ConfigError, match="fortune"):
        build_providers(["git", "fortune"], ToggleRegistry())
