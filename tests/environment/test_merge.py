"""Unit tests for env parsing, merge precedence and private file writes."""

import os
import stat

from dockhand.config import Settings
from dockhand.environment import (
    backup_env_file,
    discard_backup,
    env_value,
    load_defaults,
    merge,
    parse_env,
    parse_env_lines,
    read_env_file,
    render_env,
    restore_env_file,
    write_env_file,
    write_private_file,
)


def _mode(path):
    return stat.S_IMODE(os.stat(path).st_mode)


# ── parse_env ───────────────────────────────────────────────────────


def test_parse_env_basic():
    assert parse_env("PORT=8080\nDB=x\n") == {"PORT": "8080", "DB": "x"}


def test_parse_env_skips_comments_blanks_and_garbage():
    text = "# comment\n\nPORT=8080\nnot a pair\n=novalue\n  # indented comment\n"
    assert parse_env(text) == {"PORT": "8080"}


def test_parse_env_strips_quotes_and_export():
    text = "export A=1\nB=\"two words\"\nC='single'\nD=\"unbalanced'\n"
    assert parse_env(text) == {"A": "1", "B": "two words", "C": "single", "D": "\"unbalanced'"}


def test_env_value_decodes_quotes_and_escapes():
    assert env_value('"line1\\nline2"') == "line1\nline2"
    assert env_value('"  x"') == "  x"
    assert env_value('"a\\"b"') == 'a"b'
    assert env_value("'lit\\n'") == "lit\\n"
    assert env_value("plain") == "plain"
    assert env_value('"') == '"'


def test_parse_env_lines_keeps_raw_values():
    text = 'PORT="8080"\nPASSWORD="abc #123"\nexport KEY="line1\\nline2"\n'
    assert parse_env_lines(text) == {"PORT": '"8080"', "PASSWORD": '"abc #123"', "KEY": '"line1\\nline2"'}


def test_parse_env_decodes_quoted_values():
    text = 'PORT="8080"\nPASSWORD="abc #123"\nKEY="line1\\nline2"\nPAD="  x"\n'
    assert parse_env(text) == {"PORT": "8080", "PASSWORD": "abc #123", "KEY": "line1\nline2", "PAD": "  x"}


def test_parse_env_keeps_equals_in_value():
    assert parse_env("URL=postgres://u:p@h/db?sslmode=require\n") == {
        "URL": "postgres://u:p@h/db?sslmode=require"
    }


def test_parse_env_duplicate_key_last_wins():
    assert parse_env("PORT=1\nPORT=2\n") == {"PORT": "2"}


def test_parse_env_empty_value():
    assert parse_env("EMPTY=\n") == {"EMPTY": ""}


# ── merge ───────────────────────────────────────────────────────────


def test_merge_overrides_win():
    defaults = {"NODE_ENV": "production", "LOG_LEVEL": "info"}
    overrides = {"NODE_ENV": "staging", "PORT": "8080"}
    assert merge(defaults, overrides) == {"NODE_ENV": "staging", "LOG_LEVEL": "info", "PORT": "8080"}


def test_merge_with_no_defaults():
    assert merge({}, {"PORT": "8080"}) == {"PORT": "8080"}


def test_merge_does_not_mutate_inputs():
    defaults = {"A": "1"}
    overrides = {"B": "2"}
    merge(defaults, overrides)
    assert defaults == {"A": "1"}
    assert overrides == {"B": "2"}


def test_render_env_sorted():
    assert render_env({"PORT": "8080", "DB": "x"}) == "DB=x\nPORT=8080\n"


def test_render_env_preserves_quoted_values():
    text = 'PORT="8080"\nPASSWORD="abc #123"\nKEY="line1\\nline2"\nPAD="  x"\n'
    assert render_env(parse_env_lines(text)) == 'KEY="line1\\nline2"\nPAD="  x"\nPASSWORD="abc #123"\nPORT="8080"\n'


def test_write_env_file_reads_back_decoded(tmp_path):
    path = tmp_path / ".env"
    write_env_file(path, parse_env_lines('PASSWORD="abc #123"\nKEY="line1\\nline2"\n'))
    assert 'PASSWORD="abc #123"\n' in path.read_text()
    assert read_env_file(path) == {"PASSWORD": "abc #123", "KEY": "line1\nline2"}


# ── persistence ─────────────────────────────────────────────────────


def test_write_private_file_mode_and_content(tmp_path):
    path = tmp_path / "sub" / "secret.txt"
    write_private_file(path, "hello\n")
    assert path.read_text() == "hello\n"
    assert _mode(path) == 0o600
    assert not (tmp_path / "sub" / ".secret.txt.tmp").exists()


def test_write_private_file_replaces_existing(tmp_path):
    path = tmp_path / "f"
    path.write_text("old")
    os.chmod(path, 0o644)
    write_private_file(path, "new")
    assert path.read_text() == "new"
    assert _mode(path) == 0o600


def test_write_and_read_env_file(tmp_path):
    path = tmp_path / ".env"
    write_env_file(path, {"PORT": "8080", "DB": "x"})
    assert _mode(path) == 0o600
    assert read_env_file(path) == {"PORT": "8080", "DB": "x"}


def test_read_missing_env_file(tmp_path):
    assert read_env_file(tmp_path / "nope") == {}


def test_load_defaults(tmp_path):
    settings = Settings(config_dir=str(tmp_path / "cfg"), defaults_dir=str(tmp_path / "defaults"))
    (tmp_path / "defaults" / "svc_a").mkdir(parents=True)
    (tmp_path / "defaults" / "svc_a" / ".env.defaults").write_text("NODE_ENV=production\n")
    assert load_defaults(settings, "svc_a") == {"NODE_ENV": "production"}
    assert load_defaults(settings, "svc_b") == {}


def test_backup_and_restore(tmp_path):
    path = tmp_path / ".env"
    write_env_file(path, {"PORT": "8080"})
    backup = backup_env_file(path)
    assert backup == tmp_path / ".env.backup"
    assert _mode(backup) == 0o600

    write_env_file(path, {"PORT": "9999"})
    assert restore_env_file(path) is True
    assert read_env_file(path) == {"PORT": "8080"}
    assert not backup.exists()


def test_backup_missing_file_returns_none(tmp_path):
    assert backup_env_file(tmp_path / ".env") is None
    assert restore_env_file(tmp_path / ".env") is False


def test_discard_backup(tmp_path):
    path = tmp_path / ".env"
    write_env_file(path, {"PORT": "8080"})
    backup_env_file(path)
    discard_backup(path)
    assert not (tmp_path / ".env.backup").exists()
    discard_backup(path)
