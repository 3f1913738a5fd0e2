import polars as pl
from great_tables import GT
from loguru import logger

count_cols = [
    'n_candidates', 'num_districts', 'total_votes', 'd_votes', 'r_votes',
    'other_votes', 'd_seats', 'r_seats',
]
share_cols = [
    'r_prop', 'mean_r_prop', 'median_r_prop', 'r_vote_prop', 'r_seat_prop',
]


def make_district_table(df: pl.DataFrame, title: str) -> GT:
    table = GT(df).tab_header(title=title)
    counts = [c for c in count_cols if c in df.columns]
    shares = [c for c in share_cols if c in df.columns]
    if counts:
        table = table.fmt_integer(columns=counts)
    if shares:
        table = table.fmt_number(columns=shares, decimals=3)
    return table


def write_table(df: pl.DataFrame, path: str, title: str) -> None:
    make_district_table(df, title).write_raw_html(path)
    logger.info(f'Wrote {path}')
