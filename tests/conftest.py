"""Shared test fixtures for the vaultsearch test suite.

Design:
- tmp_vault: isolated vault directory, exported via VAULTSEARCH_VAULT_ROOT
- runner: CliRunner for CLI tests
- write_note: helper for creating notes with optional front-matter
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def tmp_vault(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an empty vault directory and point VAULTSEARCH_VAULT_ROOT at it.

    Usage:
        def test_something(tmp_vault):
            write_note(tmp_vault, "Note.md", "Hello")
    """
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / ".obsidian").mkdir()
    monkeypatch.setenv("VAULTSEARCH_VAULT_ROOT", str(vault))
    return vault


@pytest.fixture
def linked_vault(tmp_vault: Path) -> Path:
    """Vault with a small link graph.

    Creates:
    - A.md links to B
    - B.md has no links
    - C.md links to a missing note
    - Notes/Meeting.md tagged work/urgent/followup, links to A
    """
    write_note(tmp_vault, "A.md", "Start here, then read [[B]].")
    write_note(tmp_vault, "B.md", "A leaf note.")
    write_note(tmp_vault, "C.md", "Points at [[Missing]].")
    write_note(
        tmp_vault,
        "Notes/Meeting.md",
        "Discussed the plan with [[A|the intro]].\n\nAction items #followup",
        frontmatter={"title": "Weekly Meeting", "tags": '["work", "urgent"]'},
    )
    return tmp_vault


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def write_note(
    vault: Path,
    path: str,
    body: str,
    frontmatter: dict[str, str] | None = None,
) -> Path:
    """Create a note, with a ``---`` front-matter block when frontmatter is given.

    Usage in tests:
        from conftest import write_note
        write_note(tmp_vault, "Projects/Plan.md", "Body", {"status": "draft"})
    """
    note_path = vault / path
    note_path.parent.mkdir(parents=True, exist_ok=True)

    text = body
    if frontmatter is not None:
        lines = [f"{key}: {value}" for key, value in frontmatter.items()]
        text = "---\n" + "\n".join(lines) + "\n---\n" + body

    note_path.write_text(text, encoding="utf-8")
    return note_path
