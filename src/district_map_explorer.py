import streamlit as st
import polars as pl

import cdelectmap.ushelper as ush
from cdelectmap import maps
from cdelectmap.config import Config
from cdelectmap.datasources import fetch_districts_shapefile
from cdelectmap.districtsgeodata import WGS84, DistrictsGeoData
from cdelectmap.hrelection import HrElection
from cdelectmap.merge import merge_districts

FILL_OPTIONS = ['Republican share', 'Winner']


@st.cache_resource
def load_election(csv_path, year: int, tie_winner: str) -> HrElection:
    return HrElection(csv_path, year=year, tie_winner=tie_winner)


@st.cache_data
def load_districts_shapefile(url: str, cache_dir) -> str:
    return fetch_districts_shapefile(url, cache_dir)


# Shared across sessions; merge_districts copies features and leaves it as is
@st.cache_resource
def load_state_geodata(shp_path: str, src_epsg: str,
                       state: str, tolerance: float) -> DistrictsGeoData:
    gd = DistrictsGeoData(shp_path, src_epsg)
    gd.filter_by_state([state])
    gd.xform_geometry(WGS84)
    if tolerance:
        gd.simplify(tolerance)
    return gd


if __name__ == '__main__':
    config = Config()
    st.set_page_config(layout='wide')
    st.markdown('''
        <style>
            .block-container {
                 padding-top: 2rem; padding-bottom: 0rem;
                 padding-left: 1rem; padding-right: 1rem;
            }
        </style>
    ''',
        unsafe_allow_html=True,
    )

    hr_elect = load_election(
        config.get('results_csv'), config.get('year'),
        config.get('tie_winner'))
    states = hr_elect.get_district_aggregates()['state'].unique().sort().to_list()
    with st.sidebar:
        default_state = ush.state_abbr(config.get('state'))
        state = st.selectbox(
            'State:', options=states,
            index=states.index(default_state) if default_state in states else 0,
            format_func=lambda abbr: ush.abbr_to_name[abbr],
        )
        fill = st.radio('Fill districts by:', options=FILL_OPTIONS, index=0)

    st.html(f'<h3>{hr_elect.year} U.S. House elections: '
            f'{ush.abbr_to_name[state]}</h3>')
    state_results = hr_elect.get_state_results(state)
    shp_path = load_districts_shapefile(
        config.shapefile_url, config.get('cache_dir'))
    gd = load_state_geodata(
        shp_path, config.get('src_epsg'), state,
        config.get('simplify_tolerance'))
    merged = merge_districts(state_results, gd)

    col1, col2 = st.columns(2)
    with col1:
        st.dataframe(
            state_results.drop('state').with_columns(pl.col('r_prop').round(3)),
            hide_index=True,
        )
        st.dataframe(hr_elect.get_winner_summary(state), hide_index=True)
    with col2:
        if fill == 'Winner':
            st.altair_chart(maps.make_winner_chart(merged))
        else:
            st.plotly_chart(maps.make_interactive_map(merged))
