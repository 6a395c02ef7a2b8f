"""Tests for Config resolution order and the terminal icon fallbacks."""
import pytest

from aster.config import DEFAULT_DENYLIST, Config
from aster.utils.logger import sanitize_for_terminal

ENV_VARS = ('ASTER_CACHE_DIR', 'ASTER_DENYLIST', 'ASTER_THREADS', 'XDG_CACHE_HOME')


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Start from an empty Aster environment; values loaded from .env are undone afterwards."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


class TestConfig:
    """Argument > environment > default."""

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv('HOME', str(tmp_path))
        config = Config()

        assert config.cache_dir == tmp_path / '.cache' / 'aster'
        assert config.denylist == DEFAULT_DENYLIST
        assert config.threads is None
        assert config.excluded_dirs is None

    def test_xdg_cache_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv('XDG_CACHE_HOME', str(tmp_path / 'xdg'))

        assert Config().cache_dir == tmp_path / 'xdg' / 'aster'

    def test_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv('ASTER_CACHE_DIR', str(tmp_path / 'snap'))
        monkeypatch.setenv('ASTER_DENYLIST', 'debug, ,test_')
        monkeypatch.setenv('ASTER_THREADS', '3')
        config = Config()

        assert config.cache_dir == tmp_path / 'snap'
        assert config.denylist == ('debug', 'test_')
        assert config.threads == 3

    def test_arguments_win(self, tmp_path, monkeypatch):
        monkeypatch.setenv('ASTER_CACHE_DIR', str(tmp_path / 'env'))
        monkeypatch.setenv('ASTER_THREADS', '3')
        config = Config(cache_dir=tmp_path / 'arg', denylist=['x', ''], threads=8, excluded_dirs=['out'])

        assert config.cache_dir == tmp_path / 'arg'
        assert config.denylist == ('x',)
        assert config.threads == 8
        assert config.excluded_dirs == frozenset({'out'})

    def test_env_file(self, tmp_path):
        """Settings can come from a .env file in the working directory."""
        (tmp_path / '.env').write_text(f'ASTER_CACHE_DIR={tmp_path / "from_dotenv"}\nASTER_DENYLIST=beta\n')

        config = Config()

        assert config.cache_dir == tmp_path / 'from_dotenv'
        assert config.denylist == ('beta',)

    @pytest.mark.parametrize('value', ['many', '0', '-2'])
    def test_invalid_threads(self, monkeypatch, value):
        monkeypatch.setenv('ASTER_THREADS', value)

        with pytest.raises(ValueError, match='ASTER_THREADS'):
            Config().threads


class TestSanitizeForTerminal:
    """ASCII stand-ins for status icons."""

    def test_legacy_terminal(self):
        assert sanitize_for_terminal('✓ 3 files indexed → cache', utf8=False) == '[OK] 3 files indexed -> cache'

    def test_utf8_terminal_untouched(self):
        assert sanitize_for_terminal('⚠ stale', utf8=True) == '⚠ stale'
