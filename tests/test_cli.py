"""
Tests for CLI — Commands over a catalog file

Tests verify:
- Each command prints a snapshot of the browser and exits 0 on success
- Unknown names exit 1 with suggestions
- Configuration can be read and written
"""

import orjson
import pytest

from nsbrowser.cli import build_parser, main
from nsbrowser.config import ConfigManager
from tests.factories import write_catalog


@pytest.fixture
def catalog_file(tmp_path):
    return write_catalog(tmp_path / "catalog.yaml")


@pytest.fixture
def run(tmp_path, catalog_file, capsys, monkeypatch):
    """Run the CLI against the rich catalog; returns (code, stdout, stderr)."""
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_DIR", tmp_path / "user")
    def _run(*argv, catalog=True):
        prefix = ["--project", str(tmp_path), "--symbols", "ascii"]
        if catalog:
            prefix += ["--catalog", str(catalog_file)]
        code = main(prefix + list(argv))
        out, err = capsys.readouterr()
        return code, out, err
    return _run


class TestParser:
    """Argument parsing."""

    def test_catalog_from_env(self, monkeypatch):
        monkeypatch.setenv("NSB_CATALOG", "/tmp/cat.yaml")
        args = build_parser().parse_args(["namespaces"])
        assert args.catalog == "/tmp/cat.yaml"

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["namespaces", "--mode", "sideloaded"])

    def test_no_command_prints_help(self, run):
        code, out, _ = run()
        assert code == 0
        assert "namespaces" in out


class TestNamespaces:
    """namespaces command."""

    def test_loaded_by_default(self, run):
        code, out, _ = run("namespaces")
        assert code == 0
        assert "[L] alpha" in out
        assert "beta" not in out

    def test_all_with_filter(self, run):
        code, out, _ = run("namespaces", "--mode", "all", "--filter", "^b")
        assert code == 0
        assert "beta" in out and "broken" in out
        assert "alpha" not in out

    def test_json(self, run):
        code, out, _ = run("--format", "json", "namespaces", "--mode", "unloaded")
        data = orjson.loads(out)
        assert data["namespace_rows"] == ["beta", "broken"]
        assert data["namespace_mode"] == "unloaded"

    def test_missing_catalog_file(self, tmp_path, capsys):
        code = main(["--project", str(tmp_path), "--catalog", str(tmp_path / "nope.yaml"), "namespaces"])
        assert code == 1
        assert "Cannot read catalog" in capsys.readouterr().err

    @pytest.mark.parametrize("data", [
        {"namespaces": {"a": {"loaded": True, "members": {"x": {"kind": "function"}}}}},
        {"namespaces": {"a": {"loaded": True, "members": {"foo": "text"}}}},
    ])
    def test_malformed_catalog_file(self, tmp_path, capsys, data):
        path = write_catalog(tmp_path / "bad.yaml", data)
        code = main(["--project", str(tmp_path), "--catalog", str(path), "namespaces"])
        assert code == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: Invalid catalog")

    def test_no_catalog(self, run):
        code, _, err = run("namespaces", catalog=False)
        assert code == 1
        assert "No catalog" in err


class TestMembers:
    """members command."""

    def test_members(self, run):
        code, out, _ = run("members", "alpha", "--mode", "interns-macro")
        assert code == 0
        assert "when-ready" in out
        assert "Members [interns-macro] 1 entry" in out

    def test_unknown_namespace_suggests(self, run):
        code, _, err = run("members", "alpah")
        assert code == 1
        assert "Did you mean" in err
        assert "alpha" in err


class TestDoc:
    """doc command."""

    def test_doc_source(self, run):
        code, out, _ = run("doc", "alpha/foo", "--facet", "Source")
        assert code == 0
        assert "(defn foo [] 42)" in out
        assert "[OK]" in out

    def test_doc_private_member(self, run):
        code, out, _ = run("doc", "alpha/helper")
        assert code == 0
        assert "Internal." in out

    def test_doc_not_found(self, run):
        code, out, _ = run("doc", "alpha/bar", "--facet", "Examples")
        assert code == 1
        assert "error(NotFound)" in out

    def test_doc_unknown_member(self, run):
        code, _, err = run("doc", "alpha/fooo")
        assert code == 1
        assert "Did you mean: alpha/foo" in err

    def test_doc_bad_facet(self, run):
        code, _, err = run("doc", "alpha/foo", "--facet", "Gossip")
        assert code == 1
        assert "DocFacet" in err


class TestRequire:
    """require command."""

    def test_require(self, run):
        code, out, _ = run("require", "beta")
        assert code == 0
        assert "[L] beta" in out
        assert "require beta: [OK] ok" in out

    def test_require_failure(self, run):
        code, out, _ = run("require", "broken")
        assert code == 1
        assert "error(LoadError)" in out


class TestConfigCommand:
    """config command."""

    def test_show(self, run):
        code, out, _ = run("config", catalog=False)
        assert code == 0
        assert "Configuration:" in out

    def test_set_then_get(self, run):
        assert run("config", "browser.member_mode", "map", catalog=False)[0] == 0
        code, out, _ = run("config", "browser.member_mode", catalog=False)
        assert code == 0
        assert out.strip() == "map"

    def test_set_invalid(self, run):
        code, _, err = run("config", "display.format", "xml", catalog=False)
        assert code == 1
        assert "Unknown format" in err

    def test_configured_mode_used(self, run):
        run("config", "browser.namespace_mode", "unloaded", catalog=False)
        code, out, _ = run("namespaces")
        assert "Namespaces [unloaded]" in out
