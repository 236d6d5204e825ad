"""Tests for the envelope API and the ligi command line."""
import json
import os

import pytest

from conftest import make_repo, write_doc
from ligi_ops.api import (
    ligi_fill_links,
    ligi_index,
    ligi_index_global,
    ligi_parse_tags,
    ligi_prune,
    ligi_query,
)
from ligi_ops.cli import main
from ligi_ops.reader import read_master_index, read_tag_page


class TestEnvelopes:
    def test_parse_tags(self):
        res = ligi_parse_tags("[[t/a]] `[[t/b]]`")
        assert res["ok"] is True
        assert res["data"] == [{"name": "a", "line": 1}]
        assert res["meta"] == {"count": 1}

    def test_fill_links(self):
        res = ligi_fill_links("[[t/a]]", "x.md")
        assert res["data"] == {"content": "[[t/a]](index/tags/a.md)", "filled": 1}

    def test_index_full(self, repo, art, global_art):
        write_doc(art, "a.md", "# A\n[[t/alpha]]\n")
        res = ligi_index(str(repo))
        assert res["ok"] is True, res["error"]
        data = res["data"]
        assert data["files_indexed"] == 1
        assert data["tags_found"] == 1
        assert data["links_filled"] == 1
        assert data["global"]["tags_kept"] == 1
        assert (art / "a.md").read_text(encoding="utf-8") == "# A\n[[t/alpha]](index/tags/alpha.md)\n"
        assert read_tag_page(global_art / "index" / "tags" / "alpha.md") == [f"{repo}/art/a.md"]

    def test_index_single_file_with_tags(self, repo, art):
        write_doc(art, "a.md", "# A\n[[t/alpha]]\n")
        write_doc(art, "notes/b.md", "# B\n")
        assert ligi_index(str(repo), sync_global=False)["ok"]

        res = ligi_index(str(repo), file="art/notes/b.md", tags="beta, gamma", sync_global=False)

        assert res["ok"] is True, res["error"]
        assert res["data"]["tags_added"] == 2
        assert read_master_index(art / "index" / "ligi_tags.md") == ["alpha", "beta", "gamma"]
        assert read_tag_page(art / "index" / "tags" / "beta.md") == ["art/notes/b.md"]
        assert read_tag_page(art / "index" / "tags" / "alpha.md") == ["art/a.md"]

    def test_tags_without_file_is_usage_error(self, repo):
        res = ligi_index(str(repo), tags="x")
        assert res["ok"] is False
        assert res["meta"]["exit_code"] == 1

    def test_file_outside_art_is_usage_error(self, repo):
        write_doc(repo, "README.md", "")
        res = ligi_index(str(repo), file="README.md")
        assert res["ok"] is False
        assert "outside art directory" in res["error"]

    def test_missing_art_is_usage_error(self, tmp_path):
        res = ligi_index(str(tmp_path / "empty"))
        assert res["ok"] is False
        assert res["meta"]["category"] == "usage"

    def test_global_failure_is_only_a_warning(self, repo, art, tmp_path, caplog):
        blocker = tmp_path / "blocked"
        blocker.write_text("", encoding="utf-8")
        write_doc(art, "a.md", "[[t/alpha]]")
        res = ligi_index(str(repo), global_art=str(blocker / "art"))
        assert res["ok"] is True
        assert res["data"]["global"] is None
        assert "failed to update global index" in caplog.text

    def test_index_global_and_prune_global(self, tmp_path, global_art):
        r1 = make_repo(tmp_path, "r1")
        gone = write_doc(r1 / "art", "gone.md", "[[t/alpha]]")
        write_doc(global_art, "index/ligi_global_index.md", f"## Repositories\n\n- {r1}\n")

        res = ligi_index_global()
        assert res["ok"] is True
        assert res["data"]["repos_processed"] == 1

        gone.unlink()
        res = ligi_prune(global_scope=True)
        assert res["data"] == {"pruned_entries": 1, "pruned_tags": 1}

    def test_query_reindexes_stale_index(self, repo, art):
        write_doc(art, "a.md", "[[t/alpha]]")
        res = ligi_query(str(repo), ["alpha"])
        assert res["data"] == ["art/a.md"]
        assert res["meta"] == {"count": 1}

    def test_query_absolute(self, repo, art):
        write_doc(art, "a.md", "[[t/alpha]]")
        res = ligi_query(str(repo), ["alpha"], absolute=True)
        assert res["data"] == [os.path.join(str(repo), "art/a.md")]

    def test_query_without_index(self, repo, art):
        write_doc(art, "a.md", "[[t/alpha]]")
        res = ligi_query(str(repo), ["alpha"], auto_index=False)
        assert res["data"] == []


class TestCli:
    def test_index_then_query_json(self, repo, art, capsys):
        write_doc(art, "a.md", "[[t/work]] [[t/urgent]]")
        write_doc(art, "b.md", "[[t/work]]")
        assert main(["index", "-r", str(repo), "-q"]) == 0
        capsys.readouterr()

        assert main(["query", "work", "&", "urgent", "-r", str(repo), "-o", "json"]) == 0
        assert json.loads(capsys.readouterr().out) == ["art/a.md"]

    def test_query_text(self, repo, art, capsys):
        write_doc(art, "a.md", "[[t/work]]")
        write_doc(art, "b.md", "[[t/home]]")
        assert main(["query", "work", "|", "home", "-r", str(repo)]) == 0
        assert capsys.readouterr().out.splitlines() == ["art/a.md", "art/b.md"]

    def test_prune(self, repo, art, capsys):
        gone = write_doc(art, "gone.md", "[[t/alpha]]")
        assert main(["index", "-r", str(repo), "-q"]) == 0
        gone.unlink()
        assert main(["prune", "-r", str(repo)]) == 0
        assert "Pruned 1 entries, 1 tags" in capsys.readouterr().out

    def test_quiet_after_any_subcommand(self, repo, art, capsys):
        write_doc(art, "a.md", "[[t/alpha]]")
        assert main(["index", "-r", str(repo), "-q"]) == 0
        assert main(["prune", "-r", str(repo), "-q"]) == 0
        assert capsys.readouterr().out == ""
        assert main(["query", "alpha", "-r", str(repo), "-q", "-v"]) == 0
        assert capsys.readouterr().out.splitlines() == ["art/a.md"]

    def test_invalid_tag_exit_code(self, repo, art, capsys):
        write_doc(art, "a.md", "")
        code = main(["index", "-r", str(repo), "-f", "art/a.md", "-t", "../bad"])
        assert code == 1
        assert "path traversal" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "argv",
        [
            ["index", "--global", "-f", "art/a.md"],
            ["index", "--no-local"],
            ["query", "x", "--global", "-r", "."],
        ],
    )
    def test_flag_combinations_are_usage_errors(self, argv):
        assert main(argv) == 1

    def test_global_rebuild(self, tmp_path, global_art, capsys):
        r1 = make_repo(tmp_path, "r1")
        write_doc(r1 / "art", "a.md", "[[t/alpha]]")
        write_doc(global_art, "index/ligi_global_index.md", f"## Repositories\n\n- {r1}\n")
        assert main(["index", "--global"]) == 0
        assert "1 repos" in capsys.readouterr().out
        assert read_tag_page(global_art / "index" / "tags" / "alpha.md") == [f"{r1}/art/a.md"]
