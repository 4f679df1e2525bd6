"""simpl CLI and Configuration Tests: CLI-001 through CLI-003."""

import json

import pytest

from simpl.ast_nodes import (
    BinaryOp, BinaryOperator, Binding, Let, Variable, app, bool_lit, int_lit, lam,
)
from simpl.cli import main
from simpl.config import ConfigError, SimplConfig, find_config, load_config
from simpl.serialization import encode_term


def write_term(tmp_path, term, name="term.json"):
    path = tmp_path / name
    path.write_text(json.dumps(encode_term(term)))
    return str(path)


def run(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code, capsys.readouterr().out


class TestCLI001:
    """CLI-001: Configuration loading."""

    def test_defaults_without_file(self, tmp_path):
        assert find_config(str(tmp_path)) is None
        assert load_config(start_dir=str(tmp_path)) == SimplConfig()

    def test_yaml_config(self, tmp_path):
        path = tmp_path / ".simplrc.yml"
        path.write_text("prelude: true\nformat: json\nlog_level: debug\nunknown: 1\n")
        config = load_config(str(path))
        assert config.prelude is True
        assert config.format == "json"
        assert config.log_level == "DEBUG"
        assert config.annotate is False

    def test_json_config(self, tmp_path):
        path = tmp_path / ".simplrc.json"
        path.write_text(json.dumps({"annotate": True}))
        assert load_config(str(path)).annotate is True

    def test_find_config_walks_up(self, tmp_path):
        (tmp_path / ".simplrc.yaml").write_text("prelude: true\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(str(nested)) == str(tmp_path / ".simplrc.yaml")
        assert load_config(start_dir=str(nested)).prelude is True

    def test_bad_format_rejected(self, tmp_path):
        path = tmp_path / ".simplrc.yml"
        path.write_text("format: sarif\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_unparsable_yaml(self, tmp_path):
        path = tmp_path / ".simplrc.yml"
        path.write_text("prelude: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / ".simplrc.yml"
        path.write_text("")
        assert load_config(str(path)) == SimplConfig()

    def test_flags_must_be_booleans(self, tmp_path):
        path = tmp_path / ".simplrc.json"
        path.write_text(json.dumps({"prelude": "false"}))
        with pytest.raises(ConfigError):
            load_config(str(path))
        path.write_text(json.dumps({"annotate": 1}))
        with pytest.raises(ConfigError):
            load_config(str(path))


class TestCLI002:
    """CLI-002: simpl check."""

    def test_check_pretty(self, tmp_path, capsys):
        path = write_term(tmp_path, app(lam(["x"], Variable("x")), int_lit(3)))
        code, out = run(["check", path], capsys)
        assert code == 0
        assert out.strip() == "Int"

    def test_check_json(self, tmp_path, capsys):
        path = write_term(tmp_path, lam(["x"], BinaryOp(BinaryOperator.INT_ADD,
                                                         Variable("x"), int_lit(1))))
        code, out = run(["check", path, "--format", "json"], capsys)
        assert code == 0
        data = json.loads(out)
        assert data["status"] == "ok"
        assert data["type"] == "Int -> Int"
        assert data["type_json"] == {"params": ["Int"], "result": "Int"}

    def test_check_type_error(self, tmp_path, capsys):
        term = Let((Binding("id", lam(["x"], Variable("x"))),),
                   app(Variable("id"), int_lit(1), bool_lit(True)))
        path = write_term(tmp_path, term)
        code, out = run(["check", path, "--format", "json"], capsys)
        assert code == 1
        error = json.loads(out)["error"]
        assert error["kind"] == "arity_mismatch"
        assert error["details"]["expected"] == 1
        assert error["details"]["origin"] == "Application"

    def test_check_unbound_pretty(self, tmp_path, capsys):
        path = write_term(tmp_path, Variable("ghost"))
        code, out = run(["check", path], capsys)
        assert code == 1
        assert "error[unbound_variable]" in out
        assert "ghost" in out

    def test_check_prelude(self, tmp_path, capsys):
        path = write_term(tmp_path, app(Variable("is_zero"), int_lit(0)))
        code, out = run(["check", path, "--prelude"], capsys)
        assert code == 0
        assert out.strip() == "Bool"

    def test_check_annotate(self, tmp_path, capsys):
        path = write_term(tmp_path, lam(["b"], Variable("b")))
        code, out = run(["check", path, "--annotate"], capsys)
        assert code == 0
        lines = out.splitlines()
        assert lines[0] == "t0 -> t0"
        assert lines[1] == "Lambda: t0 -> t0"
        assert "b : t0" in lines[2]

    def test_check_malformed_input(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"node": "mystery"}))
        code, out = run(["check", str(path)], capsys)
        assert code == 2
        assert "malformed_term" in out

    def test_check_missing_file(self, tmp_path, capsys):
        code, out = run(["check", str(tmp_path / "absent.json")], capsys)
        assert code == 2
        assert json.loads(out)["error"]["kind"] == "io_error"

    def test_check_invalid_utf8(self, tmp_path, capsys):
        path = tmp_path / "term.json"
        path.write_bytes(b'{"node": "var", "name": "\xff"}')
        code, out = run(["check", str(path), "--format", "json"], capsys)
        assert code == 2
        assert json.loads(out)["error"]["kind"] == "malformed_term"

    def test_check_too_deep(self, tmp_path, capsys):
        depth = 5000
        lit = '{"node": "literal", "kind": "Int", "value": 1}'
        text = ('{"node": "binop", "op": "+", "lhs": ' * depth + lit
                + (', "rhs": ' + lit + "}") * depth)
        path = tmp_path / "deep.json"
        path.write_text(text)
        code, out = run(["check", str(path), "--format", "json"], capsys)
        assert code == 2
        assert json.loads(out)["error"]["kind"] == "term_too_deep"

    def test_config_file_option(self, tmp_path, capsys):
        config = tmp_path / "custom.yml"
        config.write_text("format: json\nprelude: true\n")
        path = write_term(tmp_path, app(Variable("not"), bool_lit(True)))
        code, out = run(["check", path, "--config", str(config)], capsys)
        assert code == 0
        assert json.loads(out)["type"] == "Bool"


class TestCLI003:
    """CLI-003: simpl constraints."""

    def test_constraints(self, tmp_path, capsys):
        path = write_term(tmp_path, app(lam(["x"], Variable("x")), int_lit(3)))
        code, out = run(["constraints", path], capsys)
        assert code == 0
        assert out.splitlines() == ["root: t1", "t0 -> t0 = Int -> t1"]

    def test_no_command(self, capsys):
        code, _ = run([], capsys)
        assert code == 1
