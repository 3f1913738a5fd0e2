from great_tables import GT

from cdelectmap import tables
from cdelectmap.hrelection import HrElection


def test_make_district_table(results_csv):
    df = HrElection(results_csv).get_state_results('NC')
    table = tables.make_district_table(df, 'NC districts')
    assert isinstance(table, GT)


def test_write_table(results_csv, tmp_path):
    df = HrElection(results_csv).get_state_summary()
    out = tmp_path / 'summary.html'
    tables.write_table(df, str(out), 'Seats and votes')
    html = out.read_text()
    assert 'Seats and votes' in html
    assert 'r_seat_prop' in html
