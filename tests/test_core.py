"""Tests for core query operations in vaultsearch.core.

Test organization:
- Content search (fields, context, caps, ordering)
- Fuzzy search (scoring, ranking, snippets)
- Graph search and connectivity
- Validation and error handling

Design:
- Test behaviors, not implementations
- Real vault directories via tmp_vault; in-memory sessions where a
  filesystem quirk is the point of the test
"""

from pathlib import Path

import pytest

from conftest import write_note
from vaultsearch import core
from vaultsearch.errors import (
    DocumentNotFoundError,
    ErrorCode,
    InvalidQueryError,
    VaultNotFoundError,
)
from vaultsearch.loader import MemoryVaultFilesystem
from vaultsearch.session import IndexSession

# ─────────────────────────────────────────────────────────────────────────────
# Content Search Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSearch:
    """Tests for literal content search."""

    @pytest.mark.asyncio
    async def test_content_match_with_context(self, tmp_vault: Path):
        write_note(tmp_vault, "Log.md", "one\ntwo\nthree Deploy\nfour\nfive\nsix")

        results = await core.search(tmp_vault, "deploy", context_lines=1)

        assert len(results) == 1
        [match] = results[0].matches
        assert match.line == 3
        assert match.content == "three Deploy"
        assert match.context == "two\nthree Deploy\nfour"

    @pytest.mark.asyncio
    async def test_context_is_clipped_to_document_bounds(self, tmp_vault: Path):
        write_note(tmp_vault, "Short.md", "needle first\nsecond")

        results = await core.search(tmp_vault, "needle", context_lines=5)

        assert results[0].matches[0].context == "needle first\nsecond"

    @pytest.mark.asyncio
    async def test_every_matching_line_is_reported(self, tmp_vault: Path):
        write_note(tmp_vault, "Multi.md", "alpha\nbeta alpha\ngamma\nALPHA")

        results = await core.search(tmp_vault, "alpha", context_lines=0)

        assert [m.line for m in results[0].matches] == [1, 2, 4]

    @pytest.mark.asyncio
    async def test_results_in_discovery_order_and_capped(self, tmp_vault: Path):
        for name in ["c", "a", "b", "d"]:
            write_note(tmp_vault, f"{name}.md", "shared term")

        results = await core.search(tmp_vault, "shared", max_results=3)

        assert [r.path for r in results] == ["a.md", "b.md", "c.md"]

    @pytest.mark.asyncio
    async def test_non_matching_documents_are_excluded(self, tmp_vault: Path):
        write_note(tmp_vault, "Yes.md", "contains kiwi")
        write_note(tmp_vault, "No.md", "contains mango")

        results = await core.search(tmp_vault, "kiwi")

        assert [r.path for r in results] == ["Yes.md"]

    @pytest.mark.asyncio
    async def test_include_content_false_omits_matches(self, tmp_vault: Path):
        write_note(tmp_vault, "Note.md", "kiwi")

        results = await core.search(tmp_vault, "kiwi", include_content=False)

        assert results[0].path == "Note.md"
        assert results[0].matches == []

    @pytest.mark.asyncio
    async def test_filename_field(self, tmp_vault: Path):
        write_note(tmp_vault, "Projects/Roadmap.md", "roadmap mentioned in body")
        write_note(tmp_vault, "Other.md", "roadmap mentioned in body")

        results = await core.search(tmp_vault, "ROADMAP", field="filename")

        assert [r.path for r in results] == ["Projects/Roadmap.md"]
        assert results[0].filename == "Roadmap.md"
        assert results[0].matches == []

    @pytest.mark.asyncio
    async def test_tag_field(self, linked_vault: Path):
        work = await core.search(linked_vault, "work", field="tag")
        missing = await core.search(linked_vault, "missing", field="tag")

        assert [r.path for r in work] == ["Notes/Meeting.md"]
        assert missing == []

    @pytest.mark.asyncio
    async def test_tag_field_with_unquoted_list(self, tmp_vault: Path):
        write_note(tmp_vault, "Notes/Meeting.md", "Agenda #followup", {"tags": "[work, urgent]"})

        assert [r.path for r in await core.search(tmp_vault, "work", field="tag")] == [
            "Notes/Meeting.md"
        ]
        assert await core.search(tmp_vault, "missing", field="tag") == []

    @pytest.mark.asyncio
    async def test_tag_field_matches_hash_prefixed_inline_tag(self, tmp_vault: Path):
        write_note(tmp_vault, "Notes/Meeting.md", "Action #followup", {"tags": "[work]"})

        results = await core.search(tmp_vault, "#followup", field="tag")

        assert [r.path for r in results] == ["Notes/Meeting.md"]

    @pytest.mark.asyncio
    async def test_deeply_nested_frontmatter_does_not_abort_search(self, tmp_vault: Path):
        write_note(tmp_vault, "Deep.md", "body", {"x": "[ " * 100_000})
        write_note(tmp_vault, "Good.md", "tagged #kiwi")

        by_tag = await core.search(tmp_vault, "#kiwi", field="tag")
        by_frontmatter = await core.search(tmp_vault, "[ [ [", field="frontmatter")

        assert [r.path for r in by_tag] == ["Good.md"]
        assert [r.path for r in by_frontmatter] == ["Deep.md"]

    @pytest.mark.asyncio
    async def test_link_field(self, linked_vault: Path):
        results = await core.search(linked_vault, "missing", field="link")
        assert [r.path for r in results] == ["C.md"]

    @pytest.mark.asyncio
    async def test_frontmatter_field(self, linked_vault: Path):
        results = await core.search(linked_vault, "weekly", field="frontmatter")

        assert [r.path for r in results] == ["Notes/Meeting.md"]
        assert results[0].frontmatter["title"] == "Weekly Meeting"

    @pytest.mark.asyncio
    async def test_unreadable_document_is_skipped(self, tmp_vault: Path):
        write_note(tmp_vault, "Good.md", "kiwi")
        (tmp_vault / "Bad.md").write_bytes(b"kiwi \xff\xfe")

        results = await core.search(tmp_vault, "kiwi")

        assert [r.path for r in results] == ["Good.md"]

    @pytest.mark.asyncio
    async def test_stops_reading_once_cap_is_reached(self):
        session = IndexSession.from_filesystem(
            MemoryVaultFilesystem({"a.md": "hit", "b.md": "hit", "c.md": "hit"})
        )

        await core.search("memory", "hit", max_results=1, session=session)

        assert set(session._read) == {"a.md"}


# ─────────────────────────────────────────────────────────────────────────────
# Fuzzy Search Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestFuzzySearch:
    """Tests for fuzzy scoring and ranking."""

    @pytest.mark.asyncio
    async def test_filename_exact_beats_content(self, tmp_vault: Path):
        write_note(tmp_vault, "Claude.md", "")
        write_note(tmp_vault, "Other.md", "I asked claude once.")

        results = await core.fuzzy_search(tmp_vault, "claude")

        assert [r.path for r in results] == ["Claude.md", "Other.md"]
        assert results[0].score == 180  # exact + substring + all tokens
        assert results[1].score == 30  # content substring + all tokens

    @pytest.mark.asyncio
    async def test_filename_only_match_has_no_snippets(self, tmp_vault: Path):
        write_note(tmp_vault, "Claude.md", "nothing relevant")

        [result] = await core.fuzzy_search(tmp_vault, "claude")

        assert result.matches == []

    @pytest.mark.asyncio
    async def test_content_match_carries_at_most_three_snippets(self, tmp_vault: Path):
        write_note(tmp_vault, "Log.md", "\n".join(["x", "kiwi 1", "kiwi 2", "y", "kiwi 3", "kiwi 4"]))

        [result] = await core.fuzzy_search(tmp_vault, "kiwi")

        assert [m.line for m in result.matches] == [2, 3, 5]
        assert result.matches[0].context == "x\nkiwi 1\nkiwi 2"

    @pytest.mark.asyncio
    async def test_multi_token_query(self, tmp_vault: Path):
        write_note(tmp_vault, "Meeting Notes.md", "")
        write_note(tmp_vault, "Notes on a meeting.md", "")
        write_note(tmp_vault, "Scattered.md", "the meeting produced notes")

        results = await core.fuzzy_search(tmp_vault, "meeting notes")

        assert [(r.path, r.score) for r in results] == [
            ("Meeting Notes.md", 180),
            ("Notes on a meeting.md", 30),
            ("Scattered.md", 10),
        ]

    @pytest.mark.asyncio
    async def test_zero_scores_excluded_and_ties_keep_discovery_order(self, tmp_vault: Path):
        write_note(tmp_vault, "b.md", "kiwi")
        write_note(tmp_vault, "a.md", "kiwi")
        write_note(tmp_vault, "c.md", "mango")

        results = await core.fuzzy_search(tmp_vault, "kiwi")

        assert [r.path for r in results] == ["a.md", "b.md"]

    @pytest.mark.asyncio
    async def test_cap_applies_after_ranking(self, tmp_vault: Path):
        write_note(tmp_vault, "a.md", "kiwi")
        write_note(tmp_vault, "kiwi.md", "")

        results = await core.fuzzy_search(tmp_vault, "kiwi", max_results=1)

        assert [r.path for r in results] == ["kiwi.md"]


# ─────────────────────────────────────────────────────────────────────────────
# Graph Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestGraphSearch:
    """Tests for graph_search and is_connected."""

    @pytest.mark.asyncio
    async def test_orphans_excluded_by_default(self, tmp_vault: Path):
        write_note(tmp_vault, "A.md", "[[B]]")
        write_note(tmp_vault, "B.md", "no links")
        write_note(tmp_vault, "C.md", "[[Missing]]")

        without = await core.graph_search(tmp_vault, include_orphans=False)
        with_orphans = await core.graph_search(tmp_vault, include_orphans=True)

        assert [r.path for r in without] == ["A.md", "B.md"]
        assert [r.path for r in with_orphans] == ["A.md", "B.md", "C.md"]

    @pytest.mark.asyncio
    async def test_result_fields(self, linked_vault: Path):
        results = {r.path: r for r in await core.graph_search(linked_vault)}

        a = results["A.md"]
        assert a.outgoing_links == ["B.md"]
        assert a.incoming_links == ["Notes/Meeting.md"]

        meeting = results["Notes/Meeting.md"]
        assert meeting.filename == "Meeting.md"
        assert meeting.tags == ["#followup", "urgent", "work"]
        assert meeting.frontmatter["title"] == "Weekly Meeting"

    @pytest.mark.asyncio
    async def test_seed_limits_to_neighbourhood(self, linked_vault: Path):
        depth_one = await core.graph_search(linked_vault, seed="B", max_depth=1)
        depth_two = await core.graph_search(linked_vault, seed="B", max_depth=2)
        depth_zero = await core.graph_search(linked_vault, seed="B.md", max_depth=0)

        assert [r.path for r in depth_one] == ["A.md", "B.md"]
        assert [r.path for r in depth_two] == ["A.md", "B.md", "Notes/Meeting.md"]
        assert [r.path for r in depth_zero] == ["B.md"]

    @pytest.mark.asyncio
    async def test_orphan_seed_needs_include_orphans(self, linked_vault: Path):
        assert await core.graph_search(linked_vault, seed="C") == []
        results = await core.graph_search(linked_vault, seed="C", include_orphans=True)
        assert [r.path for r in results] == ["C.md"]

    @pytest.mark.asyncio
    async def test_unknown_seed_raises(self, linked_vault: Path):
        with pytest.raises(DocumentNotFoundError):
            await core.graph_search(linked_vault, seed="Nope")

    @pytest.mark.asyncio
    async def test_is_connected(self, linked_vault: Path):
        assert await core.is_connected(linked_vault, "A", "A", 0)
        assert not await core.is_connected(linked_vault, "A", "B", 0)
        assert await core.is_connected(linked_vault, "Meeting", "B", 2)
        assert not await core.is_connected(linked_vault, "Meeting", "B", 1)
        assert not await core.is_connected(linked_vault, "A", "C", 10)

    @pytest.mark.asyncio
    async def test_session_reuses_graph(self, linked_vault: Path):
        session = IndexSession.open(linked_vault)

        await core.graph_search(linked_vault, session=session)
        graph = await session.link_graph()
        await core.is_connected(linked_vault, "A", "B", session=session)

        assert await session.link_graph() is graph
        session.invalidate()
        assert await session.link_graph() is not graph

    @pytest.mark.asyncio
    async def test_session_for_another_vault_is_rejected(self, linked_vault: Path, tmp_path: Path):
        other = tmp_path / "other"
        write_note(other, "B.md", "A leaf note.")
        session = IndexSession.open(other)

        with pytest.raises(InvalidQueryError):
            await core.search(linked_vault, "leaf", session=session)
        with pytest.raises(InvalidQueryError):
            await core.is_connected(linked_vault, "B", "B", session=session)

        results = await core.search(other, "leaf", session=session)
        assert [r.path for r in results] == ["B.md"]


# ─────────────────────────────────────────────────────────────────────────────
# Validation Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestValidation:
    """Invalid parameters and missing vaults fail before any scan."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_empty_query_rejected(self, tmp_vault: Path, query: str):
        with pytest.raises(InvalidQueryError):
            await core.search(tmp_vault, query)
        with pytest.raises(InvalidQueryError):
            await core.fuzzy_search(tmp_vault, query)

    @pytest.mark.asyncio
    async def test_bad_parameters_rejected(self, tmp_vault: Path):
        with pytest.raises(InvalidQueryError):
            await core.search(tmp_vault, "x", max_results=0)
        with pytest.raises(InvalidQueryError):
            await core.search(tmp_vault, "x", context_lines=-1)
        with pytest.raises(InvalidQueryError):
            await core.search(tmp_vault, "x", field="body")  # type: ignore[arg-type]
        with pytest.raises(InvalidQueryError):
            await core.graph_search(tmp_vault, max_depth=-1)
        with pytest.raises(InvalidQueryError):
            await core.is_connected(tmp_vault, "a", "b", max_depth=-1)

    @pytest.mark.asyncio
    async def test_validation_happens_before_root_check(self, tmp_path: Path):
        with pytest.raises(InvalidQueryError):
            await core.search(tmp_path / "missing", "")

    @pytest.mark.asyncio
    async def test_missing_root(self, tmp_path: Path):
        with pytest.raises(VaultNotFoundError) as exc_info:
            await core.search(tmp_path / "missing", "x")
        assert exc_info.value.code == ErrorCode.VAULT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_root_that_is_a_file(self, tmp_path: Path):
        file_root = tmp_path / "file.md"
        file_root.write_text("x")
        with pytest.raises(VaultNotFoundError):
            await core.graph_search(file_root)

    @pytest.mark.asyncio
    async def test_empty_vault_returns_empty(self, tmp_vault: Path):
        assert await core.search(tmp_vault, "x") == []
        assert await core.fuzzy_search(tmp_vault, "x") == []
        assert await core.graph_search(tmp_vault, include_orphans=True) == []
