import copy
import math
from typing import Any, Optional

import polars as pl
from loguru import logger
from pyproj import CRS

from cdelectmap.districtsgeodata import WGS84, DistrictsGeoData, GeoJSON
from cdelectmap.hrelection import SD_COLS

# NC-01, AK-00
x_geo_id: pl.Expr = pl.format(
    '{}-{}', pl.col('state'), pl.col('district').cast(pl.Utf8).str.zfill(2))


class MergedDistricts:
    """Inner join of district aggregates with district shapes."""

    def __init__(self, df: pl.DataFrame, geojson_data: GeoJSON,
                 epsg: str = WGS84):
        self.df = df
        self.geojson_data = geojson_data
        self.epsg = epsg

    def __len__(self) -> int:
        return self.df.height

    @property
    def features(self) -> list[dict[str, Any]]:
        return self.geojson_data['features']


def _log_unmatched(side: str, keys: pl.DataFrame) -> None:
    if keys.height:
        labels = ', '.join(f'{st}-{d}' for st, d in keys.iter_rows())
        logger.warning(f'{keys.height} {side} rows have no match: {labels}')


def _property_value(value: Any) -> Optional[Any]:
    # NaN is not valid JSON for the chart specs
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def merge_districts(aggregates: pl.DataFrame,
                    gd: DistrictsGeoData) -> MergedDistricts:
    if not gd.crs.equals(CRS.from_user_input(WGS84), ignore_axis_order=True):
        raise ValueError(
            f'District shapes must be in {WGS84} before merging, '
            f'not {gd.crs.name}')

    shapes = gd.to_frame().with_row_index('feature_ix')
    df = (
        shapes.join(aggregates, on=SD_COLS, how='inner')
        .sort(SD_COLS)
        .with_columns(x_geo_id.alias('geo_id'))
    )

    _log_unmatched(
        'aggregate',
        aggregates.select(SD_COLS).join(shapes, on=SD_COLS, how='anti'))
    _log_unmatched(
        'shape',
        shapes.select(SD_COLS).join(aggregates, on=SD_COLS, how='anti'))

    features = []
    extra_cols = [c for c in df.columns if c != 'feature_ix']
    for row in df.iter_rows(named=True):
        feature = copy.deepcopy(gd.geojson_data['features'][row['feature_ix']])
        feature['id'] = row['geo_id']
        feature['properties'].update(
            {col: _property_value(row[col]) for col in extra_cols})
        features.append(feature)

    if df.is_empty():
        logger.warning('No districts matched between results and shapes')
    logger.info(
        f'Merged {df.height} districts '
        f'({aggregates.height} aggregates, {shapes.height} shapes)')
    return MergedDistricts(
        df.drop('feature_ix'),
        {'type': 'FeatureCollection', 'features': features},
    )
