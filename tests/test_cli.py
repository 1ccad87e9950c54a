import argparse

import pytest
from watchfiles import Change

from gots.cli.commands.generate import resolve_root_spec
from gots.cli.commands.livereload import build_settings
from gots.cli.commands.watch import SourcesFilter, build_generate_command
from gots.cli.main import build_parser, main
from gots.errors import RootResolutionError
from tests import other_types
from tests.sample_types import Contact


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("GOTS_NAMESPACE", "GOTS_PACKAGE", "GOTS_OUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_generate_to_stdout(capsys):
    code = main(["generate", "tests.sample_types:Contact", "--package", "tests.sample_types"])

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("type Contact = {\n  contact: string\n")


def test_generate_to_file(capsys, tmp_path):
    target = tmp_path / "types" / "models.d.ts"

    code = main(["generate", "tests.sample_types:Derived", "--out", str(target)])

    assert code == 0
    assert "} & Base" in target.read_text(encoding="utf-8")
    assert "[gots] wrote 1 root(s)" in capsys.readouterr().out


def test_generate_reads_environment_defaults(capsys, monkeypatch):
    monkeypatch.setenv("GOTS_NAMESPACE", "Models")

    assert main(["generate", "tests.sample_types:Contact"]) == 0
    assert capsys.readouterr().out.startswith("declare namespace Models {\n")


def test_generate_flag_overrides_environment(capsys, monkeypatch):
    monkeypatch.setenv("GOTS_NAMESPACE", "Models")

    assert main(["generate", "tests.sample_types:Contact", "--namespace", ""]) == 0
    assert capsys.readouterr().out.startswith("type Contact")


def test_generate_reports_import_errors(capsys):
    code = main(["generate", "tests.does_not_exist:Thing"])

    assert code == 1
    assert capsys.readouterr().err.startswith("gots: Cannot import 'tests.does_not_exist'")


def test_generate_reports_unsupported_root(capsys):
    code = main(["generate", "tests.sample_types:StringAlias"])

    assert code == 1
    assert "Unsupported root type" in capsys.readouterr().err


def test_missing_command_is_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 2


def test_resolve_named_root():
    assert resolve_root_spec("tests.sample_types:Contact") == [Contact]


def test_resolve_module_roots_in_definition_order():
    assert resolve_root_spec("tests.other_types") == [other_types.ExternalBase, other_types.ExternalRecord]


def test_resolve_missing_attribute():
    with pytest.raises(RootResolutionError, match="has no attribute 'Nope'"):
        resolve_root_spec("tests.sample_types:Nope")


def test_watch_builds_generate_command():
    args = build_parser().parse_args(
        ["watch", "app.models", "--path", "app", "--out", "types.d.ts", "--namespace", "Api"]
    )

    cmd = build_generate_command(args)

    assert cmd[1:] == ["-m", "gots", "generate", "app.models", "--out", "types.d.ts", "--namespace", "Api"]
    assert args.paths == ["app"]
    assert args.debounce == 300


def test_watch_requires_existing_dirs(capsys):
    code = main(["watch", "app.models", "--path", "missing", "--out", "types.d.ts"])

    assert code == 2
    assert "watch dirs missing" in capsys.readouterr().err


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/src/app/models.py", True),
        ("/src/app/readme.md", False),
        ("/src/app/__pycache__/models.py", False),
        ("/src/app/models.pyc", False),
    ],
)
def test_sources_filter(path, expected):
    assert SourcesFilter()(Change.modified, path) is expected


def test_livereload_flags_override_settings(monkeypatch):
    monkeypatch.setenv("LIVERELOAD_HOST", "127.0.0.1")
    args = build_parser().parse_args(["livereload", "--port", "9000", "--watch", "site"])

    settings = build_settings(args)

    assert settings.port == 9000
    assert settings.watch_folder == "site"
    assert settings.host == "127.0.0.1"
    assert settings.period == 1.0
