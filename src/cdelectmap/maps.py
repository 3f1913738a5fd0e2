import os
from typing import Optional, Union

import altair as alt
import plotly.graph_objects as go  # type: ignore
import polars as pl
from loguru import logger
from shapely.geometry import shape

from cdelectmap.districtsgeodata import DistrictsGeoData
from cdelectmap.merge import MergedDistricts

party_colors = {'Democrat': 'blue', 'Republican': 'red', 'Tie': 'gray'}

R_PROP_DOMAIN = [0.2, 0.8]
DEFAULT_ZOOM = 6
# Contiguous U.S., for maps with no districts
FALLBACK_CENTER = {'lat': 39.8, 'lon': -98.6}

Chart = Union[alt.Chart, alt.LayerChart]


def geoshape_chart(features: list[dict], title: Optional[str] = None) -> alt.Chart:
    chart = (
        alt.Chart(alt.Data(values=features))
        .mark_geoshape(stroke='black', strokeWidth=0.5)
        .project(type='mercator')
        .properties(width=800, height=400)
    )
    return chart.properties(title=title) if title else chart


def make_district_outline_chart(gd: DistrictsGeoData) -> alt.Chart:
    """Each district shape in its own shade of grey."""
    return geoshape_chart(gd.geojson_data['features']).encode(
        color=alt.Color(
            'properties.DISTRICT:N', scale=alt.Scale(scheme='greys'),
            legend=None),
    )


def make_winner_chart(merged: MergedDistricts) -> alt.Chart:
    winners = [w for w in party_colors if w in set(merged.df['winner'])]
    return geoshape_chart(merged.features, 'District winner').encode(
        color=alt.Color(
            'properties.winner:N', title='Winner',
            scale=alt.Scale(
                domain=winners, range=[party_colors[w] for w in winners])),
        tooltip=[
            alt.Tooltip('properties.district:O', title='District'),
            alt.Tooltip('properties.winner:N', title='Winner'),
        ],
    )


def district_label_points(merged: MergedDistricts) -> list[dict]:
    points = []
    for feature in merged.features:
        pt = shape(feature['geometry']).representative_point()
        points.append({
            'lon': pt.x,
            'lat': pt.y,
            'district': feature['properties']['district'],
        })
    return points


def make_r_prop_chart(merged: MergedDistricts) -> alt.LayerChart:
    """Republican share on a diverging scale, labeled by district number."""
    fill = geoshape_chart(merged.features).encode(
        color=alt.Color(
            'properties.r_prop:Q', title='r_prop',
            scale=alt.Scale(
                scheme='redblue', reverse=True,
                domain=R_PROP_DOMAIN, domainMid=0.5, clamp=True)),
        tooltip=[
            alt.Tooltip('properties.district:O', title='District'),
            alt.Tooltip('properties.r_prop:Q', title='r_prop', format='.3f'),
        ],
    )
    labels = (
        alt.Chart(alt.Data(values=district_label_points(merged)))
        .mark_text(fontWeight='bold', fontSize=12)
        .encode(longitude='lon:Q', latitude='lat:Q', text='district:N')
        .project(type='mercator')
    )
    return alt.layer(fill, labels).properties(
        width=800, height=400, title='Republican share of the district vote')


def map_center(merged: MergedDistricts) -> dict[str, float]:
    if not merged.features:
        return dict(FALLBACK_CENTER)
    bounds = [shape(f['geometry']).bounds for f in merged.features]
    minx, miny = min(b[0] for b in bounds), min(b[1] for b in bounds)
    maxx, maxy = max(b[2] for b in bounds), max(b[3] for b in bounds)
    return {'lat': (miny + maxy) / 2.0, 'lon': (minx + maxx) / 2.0}


def make_interactive_map(merged: MergedDistricts,
                         center: Optional[dict[str, float]] = None,
                         zoom: float = DEFAULT_ZOOM) -> go.Figure:
    """Tile-based map; RdBu on 1 - r_prop puts Republican districts in red."""
    plot_df = merged.df.with_columns(
        (1.0 - pl.col('r_prop')).alias('color_col'),
        pl.col('r_prop').round(4).alias('r_prop_4'),
    )
    fig = go.Figure(go.Choroplethmap(
        geojson=merged.geojson_data,
        locations=plot_df['geo_id'].to_list(),
        z=plot_df['color_col'].to_list(),
        zmin=0.0,
        zmax=1.0,
        colorscale='RdBu',
        marker_opacity=0.7,
        marker_line_width=1,
        colorbar=dict(title='1 - r_prop'),
        customdata=plot_df.select(['district', 'r_prop_4']).rows(),
        hovertemplate=(
            'District %{customdata[0]}<br>%{customdata[1]}<extra></extra>'),
    ))
    fig.update_layout(
        map_style='open-street-map',
        map_center=center or map_center(merged),
        map_zoom=zoom,
        margin=dict(r=0, t=30, l=0, b=0),
        height=600,
    )
    return fig


def save_chart(chart: Chart, path: str) -> None:
    # .png and .svg go through vl-convert
    chart.save(path)
    logger.info(f'Wrote {path}')


def save_figure(fig: go.Figure, path: str) -> None:
    ext = os.path.splitext(path)[1].lower()
    if ext == '.html':
        with open(path, 'w') as fh:
            fh.write(fig.to_html(full_html=True))
    elif ext == '.json':
        fig.write_json(path)
    else:
        raise ValueError(f'Cannot save a plotly figure as {ext!r}')
    logger.info(f'Wrote {path}')
