from __future__ import annotations

import io
import json
import sys

import pytest

from cdn_rewrite.main import main, output_path_for, parse_arguments, parse_rule_option


PAGE = '<p>\n  <img src="/img/a.png">\n  <a href="/docs/">docs</a>\n</p>\n'
REWRITTEN = '<p>\n  <img src="https://cdn.example.net/img/a.png">\n  <a href="/docs/">docs</a>\n</p>\n'

RULE_ARGS = ["-b", "https://example.com", "-r", "host_only:png:cdn.example.net"]


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "cdn.json"
    path.write_text(json.dumps({
        "base_url": "https://example.com",
        "rules": [{"type": "host_only", "match": "png", "rule": "cdn.example.net"}],
    }), encoding="utf-8")
    return str(path)


def test_parse_rule_option() -> None:
    assert parse_rule_option("full_url:png:https://cdn.example.net/img") == {
        "type": "full_url",
        "match": "png",
        "rule": "https://cdn.example.net/img",
    }
    with pytest.raises(ValueError):
        parse_rule_option("host_only:png")


def test_output_path_for() -> None:
    args = parse_arguments(["-o", "out", "a.html", "b.html"])
    assert output_path_for(args, "pages/a.html", several=True).endswith("a.html")
    assert output_path_for(parse_arguments(["a.html"]), "a.html", several=False) is None
    assert output_path_for(parse_arguments(["-i", "a.html"]), "a.html", several=False) == "a.html"


def test_rewrites_file_to_stdout(tmp_path, capsys) -> None:
    source = tmp_path / "page.html"
    source.write_text(PAGE, encoding="utf-8")

    assert main(RULE_ARGS + ["-q", str(source)]) == 0
    assert capsys.readouterr().out == REWRITTEN


def test_rewrites_stdin(monkeypatch, capsys) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(PAGE.encode("utf-8"))))

    assert main(RULE_ARGS + ["-q"]) == 0
    assert capsys.readouterr().out == REWRITTEN


def test_rewrites_with_config_file(tmp_path, config_file) -> None:
    source = tmp_path / "page.html"
    target = tmp_path / "out" / "page.html"
    source.write_text(PAGE, encoding="utf-8")

    assert main(["-c", config_file, "-q", str(source), "-o", str(target)]) == 0
    assert target.read_text(encoding="utf-8") == REWRITTEN


def test_command_line_rules_follow_configured_rules(tmp_path, config_file) -> None:
    source = tmp_path / "page.html"
    source.write_text('<a href="/docs/guide.pdf">guide</a>', encoding="utf-8")

    assert main(["-c", config_file, "-q", "-i", "-r", "full_url:pdf:https://files.example.net", str(source)]) == 0
    assert source.read_text(encoding="utf-8") == '<a href="https://files.example.net/guide.pdf">guide</a>'


def test_whitelist_option_replaces_default_host(tmp_path) -> None:
    source = tmp_path / "page.html"
    source.write_text(PAGE, encoding="utf-8")

    assert main(RULE_ARGS + ["-w", "static.example.com,other.example.com", "-q", "-i", str(source)]) == 0
    assert source.read_text(encoding="utf-8") == PAGE


def test_crlf_is_preserved_in_place(tmp_path) -> None:
    source = tmp_path / "page.html"
    source.write_bytes(PAGE.replace("\n", "\r\n").encode("utf-8"))

    assert main(RULE_ARGS + ["-q", "-i", str(source)]) == 0
    assert source.read_bytes() == REWRITTEN.replace("\n", "\r\n").encode("utf-8")


def test_several_inputs_go_to_output_directory(tmp_path) -> None:
    sources = []
    for name in ("one.html", "two.html"):
        path = tmp_path / name
        path.write_text(PAGE, encoding="utf-8")
        sources.append(str(path))
    out_dir = tmp_path / "out"

    assert main(RULE_ARGS + ["-q", "-o", str(out_dir)] + sources) == 0
    assert (out_dir / "one.html").read_text(encoding="utf-8") == REWRITTEN
    assert (out_dir / "two.html").read_text(encoding="utf-8") == REWRITTEN


def test_several_inputs_need_a_destination(tmp_path) -> None:
    source = tmp_path / "page.html"
    source.write_text(PAGE, encoding="utf-8")
    assert main(RULE_ARGS + ["-q", str(source), str(source)]) == 1


def test_check_config(config_file, tmp_path) -> None:
    assert main(["-c", config_file, "--check-config"]) == 0

    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({
        "base_url": "https://example.com",
        "rules": [{"type": "bogus", "match": "png", "rule": "cdn.example.net"}],
    }), encoding="utf-8")
    assert main(["-c", str(broken), "--check-config"]) == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["-b", "example.com", "--check-config"],
        ["--check-config"],
        ["-b", "https://example.com", "-r", "host_only:png", "--check-config"],
        ["-c", "/nonexistent/cdn.json", "--check-config"],
    ],
)
def test_invalid_configuration_exits_with_error(argv) -> None:
    assert main(argv) == 1


def test_missing_input_file(tmp_path) -> None:
    assert main(RULE_ARGS + ["-q", str(tmp_path / "missing.html")]) == 1
