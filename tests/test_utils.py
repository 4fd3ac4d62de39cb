"""Tests for configuration resolution and file access helpers."""

import io
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / 'scripts'))

import utils


class FakeTTY(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('IRONLIST_FILE', raising=False)
    monkeypatch.delenv('IRONLIST_WRAP_WIDTH', raising=False)
    cfg = tmp_path / 'home' / '.ironlist_default'
    monkeypatch.setenv('IRONLIST_DEFAULT_CONFIG', str(cfg))
    return cfg


def test_explicit_file_wins(tmp_path, monkeypatch):
    monkeypatch.setenv('IRONLIST_FILE', str(tmp_path / 'env.txt'))
    utils.persist_default_path(tmp_path / 'saved.txt')
    assert utils.resolve_data_file(tmp_path / 'explicit.txt') == tmp_path / 'explicit.txt'


def test_env_beats_saved_default(tmp_path, monkeypatch):
    monkeypatch.setenv('IRONLIST_FILE', str(tmp_path / 'env.txt'))
    utils.persist_default_path(tmp_path / 'saved.txt')
    assert utils.resolve_data_file() == tmp_path / 'env.txt'


def test_saved_default_used(tmp_path):
    utils.persist_default_path(tmp_path / 'saved.txt')
    assert utils.resolve_data_file() == tmp_path / 'saved.txt'


def test_saved_default_in_current_directory(tmp_path):
    (tmp_path / '.ironlist_default').write_text(f"{tmp_path / 'local.txt'}\n")
    assert utils.read_saved_default() == tmp_path / 'local.txt'


def test_no_default_without_tty_is_an_error(monkeypatch):
    monkeypatch.setattr(sys, 'stdin', io.StringIO(''))
    with pytest.raises(utils.ConfigError):
        utils.resolve_data_file()


def test_first_run_prompt_saves_default(tmp_path, monkeypatch, isolated_config):
    monkeypatch.setattr(sys, 'stdin', FakeTTY(''))
    monkeypatch.setattr(utils, 'prompt', lambda message: f"  {tmp_path / 'todo.txt'}  ")
    assert utils.resolve_data_file() == tmp_path / 'todo.txt'
    assert isolated_config.read_text().strip() == str(tmp_path / 'todo.txt')


def test_clear_saved_default(tmp_path, isolated_config):
    utils.persist_default_path(tmp_path / 'saved.txt')
    assert utils.clear_saved_default() is True
    assert not isolated_config.exists()
    assert utils.read_saved_default() is None
    assert utils.clear_saved_default() is False


def test_wrap_width_from_env(monkeypatch):
    assert utils.wrap_width_from_env() == 30
    monkeypatch.setenv('IRONLIST_WRAP_WIDTH', '44')
    assert utils.wrap_width_from_env() == 44
    monkeypatch.setenv('IRONLIST_WRAP_WIDTH', 'wide')
    assert utils.wrap_width_from_env() == 30


def test_load_config_width_override(tmp_path):
    config = utils.load_config(tmp_path / 'todo.txt', show_all=True, width=12)
    assert config.data_file == tmp_path / 'todo.txt'
    assert config.wrap_width == 12
    assert config.show_all is True
    assert config.strict is False


def test_load_lines_missing_file(tmp_path):
    assert utils.load_lines(tmp_path / 'missing.txt') == []


def test_load_lines_strips_line_endings(tmp_path):
    data = tmp_path / 'todo.txt'
    data.write_bytes(b"2025-10-18\tA\r\n\n2025-10-19\tB")
    assert utils.load_lines(data) == ['2025-10-18\tA', '', '2025-10-19\tB']


def test_append_line_creates_file(tmp_path):
    data = tmp_path / 'nested' / 'todo.txt'
    utils.append_line(data, '2025-10-18\tA')
    utils.append_line(data, '2025-10-19\tB')
    assert data.read_text() == '2025-10-18\tA\n2025-10-19\tB\n'


def test_append_line_after_missing_newline(tmp_path):
    data = tmp_path / 'todo.txt'
    data.write_text('2025-10-18\tA')
    utils.append_line(data, '2025-10-19\tB')
    assert data.read_text() == '2025-10-18\tA\n2025-10-19\tB\n'


def test_rewrite_all_replaces_content(tmp_path):
    data = tmp_path / 'todo.txt'
    data.write_text('old\n')
    utils.rewrite_all(data, ['2025-10-18\tA', 'kept as is'])
    assert data.read_text() == '2025-10-18\tA\nkept as is\n'
    assert [p.name for p in tmp_path.iterdir()] == ['todo.txt']


def test_rewrite_failure_keeps_original(tmp_path, monkeypatch):
    data = tmp_path / 'todo.txt'
    data.write_text('original\n')

    def fail_replace(src, dst):
        raise OSError('simulated replace failure')

    monkeypatch.setattr(utils.os, 'replace', fail_replace)
    with pytest.raises(OSError, match='simulated replace failure'):
        utils.rewrite_all(data, ['new'])
    assert data.read_text() == 'original\n'
    assert [p.name for p in tmp_path.iterdir()] == ['todo.txt']


def test_load_lines_keeps_undecodable_bytes(tmp_path):
    data = tmp_path / 'todo.txt'
    data.write_bytes(b"2025-10-18\tGood\n2025-10-19\tBad \xff\xfe\n")
    lines = utils.load_lines(data)
    assert lines[0] == '2025-10-18\tGood'
    assert lines[1].encode('utf-8', errors='surrogateescape') == b"2025-10-19\tBad \xff\xfe"

    utils.rewrite_all(data, lines)
    assert data.read_bytes() == b"2025-10-18\tGood\n2025-10-19\tBad \xff\xfe\n"


def test_rewrite_all_keeps_file_mode(tmp_path):
    data = tmp_path / 'todo.txt'
    data.write_text('old\n')
    data.chmod(0o644)
    utils.rewrite_all(data, ['2025-10-18\tA'])
    assert data.stat().st_mode & 0o777 == 0o644


def test_persisted_default_is_absolute(tmp_path, isolated_config):
    utils.persist_default_path(Path('relative.txt'))
    assert isolated_config.read_text().strip() == str(tmp_path / 'relative.txt')
    assert utils.read_saved_default() == tmp_path / 'relative.txt'
