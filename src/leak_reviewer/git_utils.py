"""Git utilities for reviewing local changes."""

from pathlib import Path
from typing import Optional

from git import Repo

from .models import ChangedFile

CHANGE_STATUS = {
    "A": "added",
    "D": "removed",
    "M": "modified",
    "R": "renamed",
    "C": "copied",
    "T": "changed",
}


def _status(diff) -> str:
    if diff.new_file:
        return "added"
    if diff.deleted_file:
        return "removed"
    if diff.renamed_file:
        return "renamed"
    return CHANGE_STATUS.get(diff.change_type, "modified")


def _count_lines(patch: str) -> tuple[int, int]:
    additions = deletions = 0
    for line in patch.split("\n"):
        if line.startswith("+"):
            additions += 1
        elif line.startswith("-"):
            deletions += 1
    return additions, deletions


def local_changed_files(
    repo_path: str | Path,
    base: str = "HEAD",
    head: Optional[str] = None,
) -> list[ChangedFile]:
    """
    Collect the changes between two revisions of a local repository.

    Args:
        repo_path: Path to the git repository
        base: Revision the changes are compared against
        head: Revision holding the changes, or None for the working tree

    Returns:
        List of ChangedFile objects whose patches hold only the hunks
    """
    repo = Repo(repo_path)
    base_commit = repo.commit(base)
    target = repo.commit(head) if head else None

    files: list[ChangedFile] = []
    for diff in base_commit.diff(target, create_patch=True):
        raw = diff.diff or b""
        patch = raw if isinstance(raw, str) else raw.decode("utf-8", errors="ignore")
        additions, deletions = _count_lines(patch)
        files.append(
            ChangedFile(
                filename=diff.b_path or diff.a_path or "unknown",
                status=_status(diff),
                additions=additions,
                deletions=deletions,
                changes=additions + deletions,
                patch=patch,
            )
        )

    return files
