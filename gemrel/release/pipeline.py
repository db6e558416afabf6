"""The release pipeline.

Steps run strictly in order. Each step re-verifies the branch it expects
to be on before acting, because the checkout can change under us between
steps. The first failure stops the whole release; there is no resume, so a
failed run may leave branches, commits or tags for the operator to inspect
before running again.

    checkout -> version -> branch -> notes -> bundle -> build -> confirm
        -> publish -> merge

Declining the confirmation ends the run with the "aborted" outcome.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from gemrel.core.config import ReleaseConfig
from gemrel.core.result import Err, Ok, Result
from gemrel.git.repository import Repository
from gemrel.output.console import ConsoleProtocol, Style
from gemrel.platform.opener import open_path
from gemrel.platform.process import ProcessError
from gemrel.platform.process import run as run_process
from gemrel.release.changelog import ChangelogBuilder
from gemrel.release.errors import ReleaseError
from gemrel.release.executor import CommandExecutor, Runner, Verifier
from gemrel.release.fsm import StepHandler, StepOutcome, advance, finish, run_state_machine
from gemrel.release.gate import ConfirmationGate, ReadLine
from gemrel.release.gh import GhPullRequests, PullRequestLookup
from gemrel.release.model import Release, ReleaseOutcome
from gemrel.release.notes import ReleaseNotesDocument, write_release_notes
from gemrel.release.semver import resolve_version

PipelineStep = Literal[
    "checkout",
    "version",
    "branch",
    "notes",
    "bundle",
    "build",
    "confirm",
    "publish",
    "merge",
]

Opener = Callable[[Path], Result[str, ProcessError]]
Action = Callable[[], Result[object, ReleaseError]]


class StepLog:
    """Numbers the steps of one run."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console
        self.index = 0

    def next(self, label: str) -> None:
        self.index += 1
        self._console.step(self.index, label)


@dataclass(frozen=True, slots=True)
class StepContext:
    console: ConsoleProtocol
    config: ReleaseConfig
    executor: CommandExecutor
    verifier: Verifier
    repo: Repository
    changelog: ChangelogBuilder
    gate: ConfirmationGate
    steps: StepLog
    opener: Opener

    @classmethod
    def create(
        cls,
        *,
        console: ConsoleProtocol,
        config: ReleaseConfig,
        root: Path,
        runner: Runner = run_process,
        lookup: PullRequestLookup | None = None,
        read_line: ReadLine | None = None,
        opener: Opener | None = None,
    ) -> StepContext:
        executor = CommandExecutor(console=console, cwd=root, runner=runner)
        repo = Repository(executor=executor, version_file=config.version_file)
        return cls(
            console=console,
            config=config,
            executor=executor,
            verifier=Verifier(console=console, executor=executor),
            repo=repo,
            changelog=ChangelogBuilder(
                history=repo,
                lookup=lookup or GhPullRequests(workspace_root=root, repo=config.repo),
                dependency_bot=config.dependency_bot,
            ),
            gate=(
                ConfirmationGate(console=console, read_line=read_line)
                if read_line is not None
                else ConfirmationGate(console=console)
            ),
            steps=StepLog(console),
            opener=opener or (lambda path: open_path(path, cwd=root)),
        )


@dataclass(frozen=True, slots=True)
class PipelineState:
    step: PipelineStep
    release: Release


def _run_all(*actions: Action) -> Result[None, ReleaseError]:
    for action in actions:
        result = action()
        if isinstance(result, Err):
            return result
    return Ok(None)


def _verify_branch(ctx: StepContext, expected: str) -> Result[None, ReleaseError]:
    return ctx.verifier.verify_command(f"branch is {expected}", ctx.repo.current_branch, expected)


def _check_branch(ctx: StepContext, expected: str) -> Result[None, ReleaseError]:
    return ctx.verifier.check(f"branch is {expected}", ctx.repo.current_branch, expected)


def _open_for_review(ctx: StepContext, path: Path) -> None:
    opened = ctx.opener(path)
    if isinstance(opened, Err):
        ctx.console.print(f"could not open {path}: {opened.error}", Style.DIM)


# -- steps --------------------------------------------------------------------


def checkout_and_pull(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Checkout branch and pull")
    return _run_all(
        lambda: ctx.repo.checkout(release.branch),
        lambda: _verify_branch(ctx, release.branch),
        ctx.repo.pull,
    )


def update_version_string(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Update the version")
    added = re.compile(rf'\+\s*VERSION = "{re.escape(release.version)}"')
    return _run_all(
        lambda: _check_branch(ctx, release.branch),
        lambda: ctx.repo.write_declared_version(release.version),
        lambda: ctx.verifier.verify_command(
            f"version is set to {release.version}", ctx.repo.diff_command(), added
        ),
    )


def create_release_branch(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Create the release branch")
    return _run_all(
        lambda: ctx.repo.create_branch(release.release_branch),
        lambda: _verify_branch(ctx, release.release_branch),
    )


def generate_release_notes(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Generate the release notes")

    checked = _check_branch(ctx, release.release_branch)
    if isinstance(checked, Err):
        return checked

    changelog = ctx.changelog.build()
    if isinstance(changelog, Err):
        return changelog

    document = ReleaseNotesDocument(
        gem_filename=ctx.config.gem_filename(release.version),
        branch=release.branch,
        changelog=changelog.value,
    )
    written = write_release_notes(path=ctx.repo.path / ctx.config.notes_file, document=document)
    if isinstance(written, Err):
        return written

    _open_for_review(ctx, written.value)
    return Ok(None)


def bundle_and_commit(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Bundle and commit")
    return _run_all(
        lambda: _check_branch(ctx, release.release_branch),
        lambda: ctx.executor.run(["bundle", "install"]),
        lambda: ctx.repo.commit(
            ctx.config.files_to_commit, f"Updating Gemfile.lock to {release.version_tag}"
        ),
    )


def _move_artifact(ctx: StepContext, source: Path, folder: Path) -> Result[Path, ReleaseError]:
    ctx.console.command(f"mv {source.name} {folder}")
    try:
        folder.mkdir(parents=True, exist_ok=True)
        target = Path(shutil.move(str(source), str(folder / source.name)))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to move {source.name}: {e}",
                hint=str(folder),
            )
        )
    return Ok(target)


def build_gem(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Build the gem")
    artifact = ctx.repo.path / ctx.config.gem_filename(release.version)
    folder = ctx.config.gem_folder_path

    built = _run_all(
        lambda: _check_branch(ctx, release.release_branch),
        lambda: ctx.executor.run(["gem", "build", ctx.config.gemspec]),
        lambda: _move_artifact(ctx, artifact, folder),
    )
    if isinstance(built, Err):
        return built

    _open_for_review(ctx, folder)
    return Ok(None)


def _read_token(path: Path) -> Result[str, ReleaseError]:
    missing = ReleaseError(kind="missing_token", message="No Gemfury api token found", hint=str(path))
    try:
        token = path.read_text(encoding="utf-8").strip()
    except OSError:
        return Err(missing)
    if not token:
        return Err(missing)
    return Ok(token)


def push_gem(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Push gem to Gemfury")

    token = _read_token(ctx.config.token_path)
    if isinstance(token, Err):
        return token

    artifact = ctx.config.gem_folder_path / ctx.config.gem_filename(release.version)
    pushed = ctx.executor.run(
        ["fury", "push", str(artifact), f"--api-token={token.value}"],
        display=f"fury push {artifact} --api-token=***",
    )
    if isinstance(pushed, Err):
        return pushed
    return Ok(None)


def promote_to_main_line(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    main = ctx.config.main_branch
    return _run_all(
        lambda: ctx.repo.checkout(main),
        lambda: ctx.repo.merge(release.release_branch),
        lambda: ctx.repo.push(main),
        lambda: ctx.repo.checkout(release.branch),
    )


def merge_and_push(ctx: StepContext, release: Release) -> Result[None, ReleaseError]:
    ctx.steps.next("Merge release branch and push upstream")

    merged = _run_all(
        lambda: _check_branch(ctx, release.release_branch),
        lambda: ctx.repo.tag(release.version_tag, f"Tagging {release.version_tag} release"),
        lambda: ctx.repo.push(release.release_branch, tags=True),
        lambda: ctx.repo.checkout(release.branch),
        lambda: ctx.repo.merge(release.release_branch),
        lambda: ctx.repo.push(release.branch),
    )
    if isinstance(merged, Err):
        return merged

    if release.branch != ctx.config.develop_branch:
        return Ok(None)
    if not ctx.gate.confirm_main_line(ctx.config.main_branch):
        return Ok(None)
    return promote_to_main_line(ctx, release)


# -- orchestration ------------------------------------------------------------

StepAction = Callable[[StepContext, Release], Result[None, ReleaseError]]


class ReleasePipeline:
    """Runs one release from checkout to publish."""

    def __init__(self, *, ctx: StepContext, release: Release) -> None:
        self._ctx = ctx
        self.release = release

    @classmethod
    def create(
        cls, *, ctx: StepContext, branch: str, version: str
    ) -> Result[ReleasePipeline, ReleaseError]:
        """Resolve the requested version and fix the release identity."""
        resolved = resolve_version(version, ctx.repo)
        if isinstance(resolved, Err):
            return resolved
        return Ok(cls(ctx=ctx, release=Release(branch=branch, version=resolved.value)))

    def _then(self, action: StepAction, next_step: PipelineStep) -> StepHandler[PipelineState]:
        def handler(state: PipelineState) -> Result[StepOutcome[PipelineState], ReleaseError]:
            result = action(self._ctx, state.release)
            if isinstance(result, Err):
                return result
            return Ok(advance(replace(state, step=next_step)))

        return handler

    def _confirm(self, state: PipelineState) -> Result[StepOutcome[PipelineState], ReleaseError]:
        if not self._ctx.gate.confirm_release():
            self._ctx.console.warning("Release aborted")
            return Ok(finish("aborted"))
        self._ctx.console.success("Finalising release...")
        return Ok(advance(replace(state, step="publish")))

    def _merge(self, state: PipelineState) -> Result[StepOutcome[PipelineState], ReleaseError]:
        result = merge_and_push(self._ctx, state.release)
        if isinstance(result, Err):
            return result
        return Ok(finish("released"))

    def run(self) -> Result[ReleaseOutcome, ReleaseError]:
        handlers: dict[str, StepHandler[PipelineState]] = {
            "checkout": self._then(checkout_and_pull, "version"),
            "version": self._then(update_version_string, "branch"),
            "branch": self._then(create_release_branch, "notes"),
            "notes": self._then(generate_release_notes, "bundle"),
            "bundle": self._then(bundle_and_commit, "build"),
            "build": self._then(build_gem, "confirm"),
            "confirm": self._confirm,
            "publish": self._then(push_gem, "merge"),
            "merge": self._merge,
        }
        return run_state_machine(
            initial_state=PipelineState(step="checkout", release=self.release),
            get_step=lambda s: s.step,
            handlers=handlers,
        )
