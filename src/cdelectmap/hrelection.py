from pathlib import Path
from typing import Optional, Union

import polars as pl
from loguru import logger

import cdelectmap.ushelper as ush
from cdelectmap.datasources import packaged_results_path

SD_COLS = ['state', 'district']
TIE_POLICIES = ('Democrat', 'Tie')

RESULTS_COLS = ['state', 'district_id', 'party', 'general_votes']

# Labels that count toward a major party's district vote. Minor-party
# fusion lines (e.g. Working Families) stay in other_votes.
party_affiliate_labels = {
    'Democrat': ['D', 'DEM', 'DFL', 'Democrat', 'Democratic'],
    'Republican': ['R', 'REP', 'Republican'],
}


def x_is_affiliate_of(major_party: str) -> pl.Expr:
    return pl.col('party').is_in(party_affiliate_labels[major_party])


def x_votes_for(major_party: str) -> pl.Expr:
    return pl.col('general_votes').filter(x_is_affiliate_of(major_party)).sum()


def x_share(numerator: str, denominator: str) -> pl.Expr:
    # Null rather than NaN when nothing was cast
    return (
        pl.when(pl.col(denominator) > 0)
        .then(pl.col(numerator) / pl.col(denominator))
        .otherwise(None)
    )


def table_print_config(max_rows: int = -1) -> pl.Config:
    """Display settings for printing whole district tables to the console."""
    return pl.Config(
        tbl_rows=max_rows,
        tbl_hide_dataframe_shape=True,
        tbl_hide_column_data_types=True,
        thousands_separator=',',
        float_precision=4,
    )


class HrElection:
    """U.S. House results for one cycle, with derived frames cached in dfs."""

    def __init__(self, csv_path: Optional[Union[str, Path]] = None,
                 year: int = 2012, tie_winner: str = 'Democrat'):
        if tie_winner not in TIE_POLICIES:
            raise ValueError(
                f'tie_winner must be one of {TIE_POLICIES}, not {tie_winner!r}')
        self.year = year
        self.tie_winner = tie_winner
        if csv_path is None:
            csv_path = packaged_results_path(year)
        self.csv_path = Path(csv_path)
        self.dfs: dict[str, pl.DataFrame] = {}
        self.dfs['results'] = self._load_results()

    def _load_results(self) -> pl.DataFrame:
        # All columns as strings; district_id keeps its leading zeros
        df = pl.read_csv(self.csv_path, infer_schema_length=0)
        missing = [c for c in RESULTS_COLS if c not in df.columns]
        if missing:
            raise ValueError(f'{self.csv_path} lacks columns {missing}')

        df = df.with_columns(pl.col('general_votes').cast(pl.Int64))
        n_missing_votes = df['general_votes'].null_count()
        if n_missing_votes:
            logger.info(
                f'{n_missing_votes} candidate rows have no general-election '
                'vote count; counting them as 0')

        df = df.with_columns(
            pl.col('state').str.strip_chars().str.to_uppercase(),
            pl.col('party').str.strip_chars(),
            pl.col('district_id').str.strip_chars()
            .str.extract(r'(\d+)').cast(pl.Int32).alias('district'),
            pl.col('general_votes').fill_null(0),
        )
        bad = df.filter(pl.col('district').is_null())
        if bad.height:
            raise ValueError(
                'Unparseable district_id values: '
                f'{bad["district_id"].unique().to_list()}')
        if (df['general_votes'] < 0).any():
            raise ValueError(f'{self.csv_path} has negative vote counts')
        logger.info(f'Loaded {df.height} candidate rows from {self.csv_path}')
        return df

    def get_district_aggregates(self) -> pl.DataFrame:
        if 'district_aggregates' in self.dfs:
            return self.dfs['district_aggregates']
        x_r_votes, x_d_votes = pl.col('r_votes'), pl.col('d_votes')
        df: pl.DataFrame = (
            self.dfs['results']
            .group_by(SD_COLS)
            .agg(
                pl.len().alias('n_candidates'),
                pl.col('general_votes').sum().alias('total_votes'),
                x_votes_for('Democrat').alias('d_votes'),
                x_votes_for('Republican').alias('r_votes'),
            )
            .with_columns(
                (pl.col('total_votes') - x_d_votes - x_r_votes)
                .alias('other_votes'),
                x_share('r_votes', 'total_votes').alias('r_prop'),
                pl.when(x_r_votes > x_d_votes)
                .then(pl.lit('Republican'))
                .when(x_d_votes > x_r_votes)
                .then(pl.lit('Democrat'))
                .otherwise(pl.lit(self.tie_winner))
                .alias('winner'),
            )
            .sort(SD_COLS)
        )
        ties = df.filter(x_r_votes == x_d_votes)
        for state, district in ties.select(SD_COLS).iter_rows():
            logger.warning(
                f'{state}-{district}: Democrat and Republican votes are '
                f'tied; winner recorded as {self.tie_winner!r}')
        self.dfs['district_aggregates'] = df
        return df

    def get_state_results(self, state: str) -> pl.DataFrame:
        abbr = ush.state_abbr(state)
        df = self.get_district_aggregates().filter(pl.col('state') == abbr)
        if df.is_empty():
            logger.warning(f'No {self.year} House results for {abbr}')
        return df

    def get_state_summary(self) -> pl.DataFrame:
        """Seat share against vote share for each state."""
        if 'state_summary' in self.dfs:
            return self.dfs['state_summary']
        df: pl.DataFrame = (
            self.get_district_aggregates()
            .group_by('state', maintain_order=True)
            .agg(
                pl.len().alias('num_districts'),
                pl.col('total_votes').sum(),
                pl.col('d_votes').sum(),
                pl.col('r_votes').sum(),
                (pl.col('winner') == 'Democrat').sum().cast(pl.Int64)
                .alias('d_seats'),
                (pl.col('winner') == 'Republican').sum().cast(pl.Int64)
                .alias('r_seats'),
            )
            .with_columns(
                x_share('r_votes', 'total_votes').alias('r_vote_prop'),
                x_share('r_seats', 'num_districts').alias('r_seat_prop'),
            )
        )
        self.dfs['state_summary'] = df
        return df

    def get_winner_summary(self, state: str) -> pl.DataFrame:
        return (
            self.get_state_results(state)
            .group_by('winner')
            .agg(
                pl.len().alias('num_districts'),
                pl.col('r_prop').mean().alias('mean_r_prop'),
                pl.col('r_prop').median().alias('median_r_prop'),
                pl.col('total_votes').sum(),
            )
            .sort('winner')
        )


if __name__ == '__main__':
    hr_elect = HrElection()
    with table_print_config():
        print(hr_elect.get_state_results('NC'))
        print(hr_elect.get_winner_summary('NC'))
