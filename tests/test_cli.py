"""Tests for the prattle CLI, config, and error rendering."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from prattle import __version__
from prattle.cli import main
from prattle.config import (
    PrattleConfig,
    discover_config,
    find_config,
    load_config,
    max_depth_ceiling,
)
from prattle.errors import (
    ConsumeFailedError,
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    IncompleteError,
    MissingRuleError,
    NestingTooDeepError,
    RuleRole,
    Severity,
)
from prattle.tokens import Token


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run from an empty directory so no stray prattle.toml is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def tmp_project(tmp_path):
    """Create a project dir with a prattle.toml."""
    toml = tmp_path / "prattle.toml"
    toml.write_text(
        '[parse]\ngrammar = "cdecl"\nmax_depth = 50\n'
        '[output]\ncolor = false\nformat = "inline"\n'
    )
    (tmp_path / "src").mkdir()
    return tmp_path


# --- CLI tests ---


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Pratt parser" in result.output
        assert "parse" in result.output
        assert "grammars" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_grammars(self, runner):
        result = runner.invoke(main, ["grammars"])
        assert result.exit_code == 0
        for name in ("arithmetic", "ebnf", "cdecl"):
            assert name in result.output

    def test_parse_tree(self, runner, workdir):
        result = runner.invoke(main, ["parse", "1 + 2 * 3"])
        assert result.exit_code == 0
        assert result.output == "+\n  1\n  *\n    2\n    3\n"

    def test_parse_inline(self, runner, workdir):
        result = runner.invoke(main, ["parse", "--inline", "a + b"])
        assert result.exit_code == 0
        assert result.output.strip() == "Composite(token: +, children: [Simple(a), Simple(b)])"

    def test_parse_with_grammar(self, runner, workdir):
        result = runner.invoke(main, ["parse", "-g", "ebnf", "--format", "inline", "x : a ;"])
        assert result.exit_code == 0
        assert "(RULE: rule)" in result.output

    def test_parse_from_file(self, runner, workdir):
        src = workdir / "prog.c"
        src.write_text("int x;\ngoto done;\n")
        result = runner.invoke(main, ["parse", "-g", "cdecl", "--file", str(src)])
        assert result.exit_code == 0
        assert "(DECLARATION: declaration)" in result.output
        assert "(GOTO: goto)" in result.output

    def test_parse_nothing(self, runner, workdir):
        result = runner.invoke(main, ["parse"])
        assert result.exit_code == 1
        assert "nothing to parse" in result.output

    def test_unknown_grammar(self, runner, workdir):
        result = runner.invoke(main, ["parse", "-g", "lisp", "(a b)"])
        assert result.exit_code == 1
        assert "unknown grammar 'lisp'" in result.output

    def test_parse_error_is_rendered(self, runner, workdir):
        result = runner.invoke(main, ["parse", "--no-color", "1 +"])
        assert result.exit_code == 1
        assert "error[P001]" in result.output
        assert "token iteration ended" in result.output

    def test_parse_error_points_at_source(self, runner, workdir):
        result = runner.invoke(main, ["parse", "--no-color", "-g", "cdecl", "x y;"])
        assert result.exit_code == 1
        assert "error[P004]" in result.output
        assert "input:1:3" in result.output
        assert "x y;" in result.output
        assert "\033[" not in result.output

    def test_max_depth_option(self, runner, workdir):
        result = runner.invoke(main, ["parse", "--no-color", "--max-depth", "2", "((a))"])
        assert result.exit_code == 1
        assert "error[P005]" in result.output

    def test_max_depth_above_ceiling_is_rejected(self, runner, workdir):
        deep = "(" * 800 + "1" + ")" * 800
        result = runner.invoke(main, ["parse", "--no-color", "--max-depth", "100000", deep])
        assert result.exit_code == 1
        assert "max_depth must be between 1 and" in result.output
        assert not isinstance(result.exception, RecursionError)

    def test_max_depth_zero_is_rejected(self, runner, workdir):
        result = runner.invoke(main, ["parse", "--max-depth", "0", "a"])
        assert result.exit_code == 1
        assert "got 0" in result.output

    def test_deep_input_within_ceiling(self, runner, workdir):
        ceiling = max_depth_ceiling()
        deep = "(" * ceiling + "1" + ")" * ceiling
        result = runner.invoke(main, ["parse", "--no-color", "--max-depth", str(ceiling), deep])
        assert result.exit_code == 1
        assert "error[P005]" in result.output

    def test_recursion_error_is_rendered(self, runner, workdir, monkeypatch):
        class Bottomless:
            def parse(self, text, max_depth=None):
                raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setattr("prattle.cli.get_grammar", lambda name: Bottomless())
        result = runner.invoke(main, ["parse", "--no-color", "--max-depth", "20", "a"])
        assert result.exit_code == 1
        assert "error[P005]" in result.output
        assert "limit of 20" in result.output

    def test_trace(self, runner, workdir):
        result = runner.invoke(main, ["parse", "--trace", "a"])
        assert result.exit_code == 0

    def test_config_is_discovered(self, runner, tmp_project, monkeypatch):
        monkeypatch.chdir(tmp_project / "src")
        result = runner.invoke(main, ["parse", "int x;"])
        assert result.exit_code == 0
        assert result.output.startswith("Composite(token: (DECLARATION: declaration)")

    def test_explicit_config(self, runner, tmp_project, workdir):
        result = runner.invoke(main, ["parse", "--config", str(tmp_project / "prattle.toml"),
                                      "return;"])
        assert result.exit_code == 0
        assert "RETURN" in result.output

    def test_invalid_config(self, runner, workdir):
        (workdir / "prattle.toml").write_text('[output]\nformat = "json"\n')
        result = runner.invoke(main, ["parse", "a"])
        assert result.exit_code == 1
        assert "output.format" in result.output


# --- Config tests ---


class TestConfig:
    def test_load_config(self, tmp_project):
        config = load_config(tmp_project / "prattle.toml")
        assert config.parse.grammar == "cdecl"
        assert config.parse.max_depth == 50
        assert config.output.color is False
        assert config.output.format == "inline"

    def test_load_config_defaults(self, tmp_path):
        toml = tmp_path / "prattle.toml"
        toml.write_text("[parse]\n")
        config = load_config(toml)
        assert config.parse.grammar == "arithmetic"
        assert config.parse.max_depth == 200
        assert config.output.format == "tree"

    @pytest.mark.parametrize("depth", [0, -3, 10**6])
    def test_load_config_rejects_max_depth(self, tmp_path, depth):
        toml = tmp_path / "prattle.toml"
        toml.write_text(f"[parse]\nmax_depth = {depth}\n")
        with pytest.raises(ValueError, match="parse.max_depth must be between 1 and"):
            load_config(toml)

    def test_find_config(self, tmp_project):
        found = find_config(tmp_project / "src")
        assert found == tmp_project / "prattle.toml"

    def test_find_config_not_found(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(FileNotFoundError, match="No prattle.toml found"):
            find_config(empty)

    def test_discover_defaults(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert discover_config(empty) == PrattleConfig()


# --- Error rendering tests ---


class TestDiagnostics:
    def test_render_with_source(self):
        diag = Diagnostic(
            severity=Severity.ERROR,
            code="P002",
            message="missing a infix syntax rule for: y",
            labels=[DiagnosticLabel(offset=6, width=1, message="no infix rule")],
            notes=["`y` cannot be used in infix position"],
        )
        output = DiagnosticRenderer(color=False).render(diag, "a = 1\nx y")
        assert "error[P002]: missing a infix syntax rule for: y" in output
        assert "input:2:1" in output
        assert "   2 | x y" in output
        assert "     | ^" in output
        assert "no infix rule" in output
        assert "= note: `y` cannot be used in infix position" in output

    def test_render_without_source(self):
        diag = Diagnostic(Severity.WARNING, "P999", "odd", labels=[DiagnosticLabel(4)])
        output = DiagnosticRenderer(color=False).render(diag)
        assert "warning[P999]: odd" in output
        assert "input:1:5" in output

    def test_render_color(self):
        diag = Diagnostic(Severity.ERROR, "P001", "eof")
        output = DiagnosticRenderer(color=True).render(diag)
        assert "\033[1;31m" in output

    def test_error_codes(self):
        assert IncompleteError().diagnostic().code == "P001"
        assert MissingRuleError("x", RuleRole.PREFIX).diagnostic().code == "P002"
        assert ConsumeFailedError(")", "]").diagnostic().code == "P003"
        assert NestingTooDeepError(3).diagnostic().code == "P005"

    def test_error_messages(self):
        assert str(IncompleteError()) == "token iteration ended before parsing context finished"
        assert str(MissingRuleError("*", RuleRole.PREFIX)) == "missing a prefix syntax rule for: *"
        assert "instead found: ]" in str(ConsumeFailedError(")", "]"))

    def test_errors_compare_by_value(self):
        assert NestingTooDeepError(3) == NestingTooDeepError(3)
        assert NestingTooDeepError(3) != NestingTooDeepError(4)
        assert len({NestingTooDeepError(3), NestingTooDeepError(3)}) == 1
        assert [IncompleteError(), NestingTooDeepError(2)] == [IncompleteError(), NestingTooDeepError(2)]

    def test_label_from_token_offset(self):
        err = ConsumeFailedError(Token(";", ";"), Token("ident", "foo", 7))
        label = err.diagnostic().labels[0]
        assert (label.offset, label.width) == (7, 3)

    def test_no_label_for_plain_tokens(self):
        assert MissingRuleError("x", RuleRole.INFIX).diagnostic().labels == []
