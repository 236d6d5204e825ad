"""Tests for tag-link filling and tag insertion."""
import pytest

from conftest import write_doc
from ligi_ops.errors import InvalidTagNameError
from ligi_ops.links import (
    fill_all_tag_links,
    fill_tag_links,
    fill_tag_links_in_file,
    insert_tags,
    insert_tags_into_file,
    parse_tag_list,
    tag_link_target,
)


class TestFillTagLinks:
    def test_top_level_document(self):
        result = fill_tag_links("see [[t/alpha]]", "a.md")
        assert result.content == "see [[t/alpha]](index/tags/alpha.md)"
        assert result.filled == 1

    def test_link_depth_follows_document_path(self):
        assert tag_link_target("alpha", "notes/2024/a.md") == "../../index/tags/alpha.md"
        assert tag_link_target("p/x", "art/notes/a.md") == "../index/tags/p/x.md"

    def test_second_pass_is_noop(self):
        first = fill_tag_links("[[t/a]] and [[t/b]]", "sub/doc.md")
        second = fill_tag_links(first.content, "sub/doc.md")
        assert second.filled == 0
        assert second.content == first.content

    def test_code_and_comments_untouched(self):
        content = "`[[t/a]]`\n<!-- [[t/b]] -->\n```\n[[t/c]]\n```\n[[t/d]]\n"
        result = fill_tag_links(content, "x.md")
        assert result.filled == 1
        assert result.content == content.replace("[[t/d]]", "[[t/d]](index/tags/d.md)")

    def test_invalid_tokens_untouched(self):
        content = "[[t/bad name]] [[t/../up]]"
        result = fill_tag_links(content, "x.md")
        assert result.filled == 0
        assert result.content is content

    def test_bom_preserved(self):
        result = fill_tag_links("\ufeff[[t/a]]", "x.md")
        assert result.content == "\ufeff[[t/a]](index/tags/a.md)"

    def test_file_rewritten_only_when_changed(self, art):
        doc = write_doc(art, "sub/a.md", "# A\r\n[[t/alpha]]\r\n")
        assert fill_tag_links_in_file(art, "art/sub/a.md") == 1
        assert doc.read_bytes() == b"# A\r\n[[t/alpha]](../index/tags/alpha.md)\r\n"

        mtime = doc.stat().st_mtime_ns
        assert fill_tag_links_in_file(art, "sub/a.md") == 0
        assert doc.stat().st_mtime_ns == mtime

    def test_fill_all(self, art):
        write_doc(art, "a.md", "[[t/x]]")
        write_doc(art, "b/c.md", "[[t/y]] [[t/z]]")
        write_doc(art, "skip.tmp.md", "[[t/x]]")
        assert fill_all_tag_links(art, ignore_patterns=["skip*"]) == 3
        assert fill_all_tag_links(art) == 1


class TestInsertTags:
    def test_after_first_heading(self):
        content, added = insert_tags("# Title\nbody\n", ["work", "meeting"])
        assert added == 2
        assert content == "# Title\n[[t/work]] [[t/meeting]]\n\nbody\n"

    def test_without_heading_goes_on_top(self):
        content, added = insert_tags("body\n", ["work"])
        assert content == "[[t/work]]\n\nbody\n"
        assert added == 1

    def test_existing_tags_are_not_repeated(self):
        content, added = insert_tags("# T\n[[t/work]]\n", ["work"])
        assert added == 0
        assert content == "# T\n[[t/work]]\n"

    def test_heading_without_newline(self):
        content, _ = insert_tags("# T", ["x"])
        assert content == "# T\n[[t/x]]\n"

    def test_empty_document(self):
        assert insert_tags("", ["x"]) == ("[[t/x]]\n", 1)

    def test_bom_stays_first(self):
        content, _ = insert_tags("\ufeffbody", ["x"])
        assert content == "\ufeff[[t/x]]\n\nbody"

    def test_invalid_name_rejected_before_change(self):
        with pytest.raises(InvalidTagNameError):
            insert_tags("# T\n", ["ok", "../bad"])

    def test_parse_tag_list(self):
        assert parse_tag_list(" work, ,meeting ,") == ["work", "meeting"]

    def test_insert_into_file(self, art):
        doc = write_doc(art, "a.md", "# A\n\ntext\n")
        assert insert_tags_into_file(doc, ["alpha"]) == 1
        assert doc.read_text(encoding="utf-8") == "# A\n[[t/alpha]]\n\ntext\n"
        assert insert_tags_into_file(doc, ["alpha"]) == 0
