from pathlib import Path

import pytest

from cdelectmap import walkthrough


@pytest.fixture
def config_file(tmp_path, results_csv):
    path = tmp_path / 'settings.yaml'
    path.write_text(
        f'results_csv: {results_csv}\n'
        f'out_dir: {tmp_path / "out"}\n'
        'chart_format: html\n'
    )
    return str(path)


def test_parse_args_defaults():
    args = walkthrough.parse_args([])
    assert args.state is None
    assert args.verbose is False


def test_parse_args_rejects_unknown_tie_policy():
    with pytest.raises(SystemExit):
        walkthrough.parse_args(['--tie-winner', 'Republican'])


def test_main_writes_outputs(config_file, shp_path, tmp_path, capsys):
    rc = walkthrough.main(
        ['--config', config_file, '--shapefile', shp_path, '--state', 'NC'])
    assert rc == 0
    out_dir = tmp_path / 'out'
    for name in ['district_results.html', 'state_summary.html',
                 'districts.html', 'winner.html', 'r_prop.html',
                 'interactive.html']:
        assert (out_dir / name).exists(), name
    assert 'winner' in capsys.readouterr().out


def test_main_tie_flag_reaches_maps(config_file, shp_path, tmp_path):
    rc = walkthrough.main(['--config', config_file, '--shapefile', shp_path,
                           '--tie-winner', 'Tie'])
    assert rc == 0
    assert '"Tie"' in (tmp_path / 'out' / 'winner.html').read_text()


def test_main_unknown_state_fails(config_file, shp_path):
    rc = walkthrough.main(
        ['--config', config_file, '--shapefile', shp_path, '--state', 'ZZ'])
    assert rc == 1


def test_main_missing_shapefile_fails(config_file, tmp_path):
    rc = walkthrough.main(['--config', config_file, '--shapefile',
                           str(Path(tmp_path) / 'missing.shp')])
    assert rc == 1


def test_main_no_matching_districts_writes_nothing(config_file, shp_path,
                                                   tmp_path):
    # Virginia has neither results nor shapes in the fixtures
    rc = walkthrough.main(
        ['--config', config_file, '--shapefile', shp_path, '--state', 'VA'])
    assert rc == 1
    out_dir = tmp_path / 'out'
    assert not out_dir.exists() or list(out_dir.iterdir()) == []
