import pytest

from cdelectmap.config import Config


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config()
    assert config.config_path is None
    assert config.get('state') == 'NC'
    assert config.get('tie_winner') == 'Democrat'
    assert config.shapefile_url == (
        'http://cdmaps.polisci.ucla.edu/shp/districts113.zip')


def test_yaml_overrides_defaults(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text('state: SC\ncongress: 112\nplot:\n  width: 640\n')
    config = Config(str(path))
    assert config.get('state') == 'SC'
    assert config.get('year') == 2012
    assert config.get('plot.width') == 640
    assert config.get('plot.height', 480) == 480
    assert config.shapefile_url.endswith('districts112.zip')


def test_picks_up_config_yaml_in_cwd(tmp_path, monkeypatch):
    (tmp_path / 'config.yaml').write_text('out_dir: maps\n')
    monkeypatch.chdir(tmp_path)
    assert Config().get('out_dir') == 'maps'


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / 'nope.yaml'))


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text('- a\n- b\n')
    with pytest.raises(ValueError):
        Config(str(path))


def test_update_skips_none(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config()
    config.update(state='VA', out_dir=None)
    assert config.get('state') == 'VA'
    assert config.get('out_dir') == 'out'
