from __future__ import annotations

from gemrel.core.result import Err, Ok, Result
from gemrel.release.changelog import (
    ChangelogBuilder,
    decorate_commits,
    parse_pull_request,
    partition_changelog,
    render_commit,
)
from gemrel.release.errors import ReleaseError
from gemrel.release.model import CommitRecord


class _Titles:
    def __init__(self, titles: dict[int, str]) -> None:
        self.titles = titles
        self.looked_up: list[int] = []

    def pull_request_title(self, number: int) -> Result[str, ReleaseError]:
        self.looked_up.append(number)
        if number not in self.titles:
            return Err(ReleaseError(kind="gh_failed", message=f"failed to look up pull request #{number}"))
        return Ok(self.titles[number])


class _History:
    def __init__(self, commits: list[CommitRecord], tag: str = "v1.2.3") -> None:
        self.commits = commits
        self.tag = tag

    def last_release_tag(self) -> Result[str, ReleaseError]:
        return Ok(self.tag)

    def commits_since(self, tag: str) -> Result[list[CommitRecord], ReleaseError]:
        assert tag == self.tag
        return Ok(self.commits)


_COMMITS = [
    CommitRecord(subject="Fix bug (#12)", author="alice"),
    CommitRecord(subject="Bump dep (#13)", author="dependabot[bot]"),
    CommitRecord(subject="Unrelated commit", author="bob"),
]


def test_parse_pull_request() -> None:
    assert parse_pull_request(_COMMITS[0]).pull_request_number == 12
    assert parse_pull_request(_COMMITS[2]).pull_request_number is None


def test_render_commit_keeps_marker_and_credit() -> None:
    commit = CommitRecord(
        subject="wip fix (#12)", author="alice", pull_request_number=12, resolved_title="Fix login"
    )
    assert render_commit(commit) == "- Fix login (#12) (@alice)"


def test_render_commit_empty_title_falls_back_to_subject() -> None:
    commit = CommitRecord(subject="wip fix (#12)", author="alice", pull_request_number=12, resolved_title="")
    assert render_commit(commit) == "- wip fix (#12) (@alice)"


def test_render_commit_without_reference() -> None:
    assert render_commit(_COMMITS[2]) is None


def test_decorate_drops_commits_without_reference() -> None:
    titles = _Titles({12: "Fix the bug", 13: "Bump dep from 1 to 2"})

    result = decorate_commits(_COMMITS, titles)

    assert result == Ok(
        [
            "- Fix the bug (#12) (@alice)",
            "- Bump dep from 1 to 2 (#13) (@dependabot[bot])",
        ]
    )
    assert titles.looked_up == [12, 13]


def test_decorate_stops_on_lookup_failure() -> None:
    result = decorate_commits(_COMMITS, _Titles({12: "Fix"}))
    assert isinstance(result, Err)
    assert result.error.kind == "gh_failed"


def test_partition_sorts_updates_and_reverses_bot_updates() -> None:
    lines = [
        "- Zeta (#3) (@carol)",
        "- Bump a (#4) (@dependabot[bot])",
        "- Alpha (#5) (@alice)",
        "- Bump b (#6) (@dependabot[bot])",
    ]
    changelog = partition_changelog(lines, dependency_bot="dependabot")

    assert changelog.updates == ("- Alpha (#5) (@alice)", "- Zeta (#3) (@carol)")
    assert changelog.dependency_updates == ("- Bump b (#6)", "- Bump a (#4)")


def test_builder_end_to_end() -> None:
    builder = ChangelogBuilder(
        history=_History(_COMMITS),
        lookup=_Titles({12: "Fix bug", 13: "Bump dep"}),
        dependency_bot="dependabot",
    )

    result = builder.build()

    assert isinstance(result, Ok)
    assert result.value.updates == ("- Fix bug (#12) (@alice)",)
    assert result.value.dependency_updates == ("- Bump dep (#13)",)


def test_builder_no_commits_is_fatal() -> None:
    builder = ChangelogBuilder(history=_History([]), lookup=_Titles({}), dependency_bot="dependabot")

    result = builder.build()

    assert isinstance(result, Err)
    assert result.error.kind == "no_commits"
    assert result.error.message == "No commits found"


def test_builder_only_unreferenced_commits_gives_empty_changelog() -> None:
    builder = ChangelogBuilder(
        history=_History([CommitRecord(subject="Tidy", author="bob")]),
        lookup=_Titles({}),
        dependency_bot="dependabot",
    )

    result = builder.build()

    assert isinstance(result, Ok)
    assert result.value.updates == ()
    assert result.value.dependency_updates == ()
