import json
import os
from typing import Any, Iterable, Optional, Union

import polars as pl
import shapefile as shpf
from loguru import logger
from pyproj import CRS, Transformer
import shapely
from shapely.geometry import mapping, shape

import cdelectmap.ushelper as ush
from cdelectmap.errors import DataSourceError

GeoJSON = dict[str, Any]

WGS84 = 'epsg:4326'


def transform_geometry(geom: GeoJSON, src_crs: CRS, dest_crs: CRS,
                       places: int = 6) -> None:
    """Reproject every feature in place, rounding to places decimals."""
    xform = Transformer.from_crs(src_crs, dest_crs, always_xy=True)

    def reproject(xy):
        xy[:, 0], xy[:, 1] = xform.transform(xy[:, 0], xy[:, 1])
        return xy.round(places)

    for feature in geom['features']:
        geometry = feature.get('geometry')
        if geometry and 'coordinates' in geometry:
            moved = shapely.transform(shape(geometry), reproject)
            # lists rather than tuples, as read from the shapefile
            feature['geometry'] = json.loads(json.dumps(mapping(moved)))


def read_prj(shp_path: str) -> Optional[CRS]:
    prj_path = os.path.splitext(shp_path)[0] + '.prj'
    if not os.path.exists(prj_path):
        return None
    with open(prj_path) as fh:
        return CRS.from_wkt(fh.read())


def parse_district_number(value: Union[str, int]) -> int:
    """'01' -> 1; at-large '0'/'00' -> 0."""
    text = str(value).strip()
    try:
        return int(float(text)) if '.' in text else int(text)
    except ValueError:
        raise ValueError(f'Cannot parse district number {value!r}') from None


class DistrictsGeoData:
    def __init__(self, shp_path: str, src_epsg: Optional[str] = None):
        if not os.path.exists(shp_path):
            raise DataSourceError(f'No shapefile at {shp_path}')
        self.shp_path = shp_path
        crs = read_prj(shp_path)
        if crs is None:
            if src_epsg is None:
                raise DataSourceError(
                    f'{shp_path} has no .prj and no source EPSG was given')
            crs = CRS.from_user_input(src_epsg)
            logger.debug(f'No .prj for {shp_path}; assuming {src_epsg}')
        self.crs: CRS = crs

        try:
            with shpf.Reader(shp_path) as reader:
                self.geojson_data: GeoJSON = json.loads(
                    json.dumps(reader.__geo_interface__))
        except shpf.ShapefileException as e:
            raise DataSourceError(f'Cannot read {shp_path}: {e}') from e
        logger.info(
            f'Read {len(self.geojson_data["features"])} district shapes '
            f'from {shp_path} (CRS {self.crs.name})')

    @property
    def epsg(self) -> Optional[str]:
        code = self.crs.to_epsg()
        return f'epsg:{code}' if code is not None else None

    def as_str(self) -> str:
        return json.dumps(self.geojson_data, indent=4)

    def to_file(self, path: str) -> None:
        with open(path, 'w') as outfile:
            json.dump(self.geojson_data, outfile, indent=4)

    def xform_geometry(self, dest_epsg: str = WGS84) -> None:
        dest_crs = CRS.from_user_input(dest_epsg)
        if dest_crs == self.crs:
            return
        transform_geometry(self.geojson_data, self.crs, dest_crs)
        logger.debug(f'Reprojected {self.crs.name} -> {dest_crs.name}')
        self.crs = dest_crs

    def filter_by_state(self, states: Iterable[str], exclude=False) -> None:
        wanted = {ush.state_name(st) for st in states}

        def condition(feat) -> bool:
            cond: bool = feat['properties']['STATENAME'] in wanted
            return not cond if exclude else cond

        before = len(self.geojson_data['features'])
        self.geojson_data['features'] = [
            feature for feature in self.geojson_data['features']
            if condition(feature)
        ]
        logger.debug(
            f'State filter kept {len(self.geojson_data["features"])} '
            f'of {before} shapes')

    def get_props(self, props: list[str]) -> dict[str, list]:
        return {
            prop: [feature['properties'].get(prop)
                   for feature in self.geojson_data['features']]
            for prop in props
        }

    def to_frame(self) -> pl.DataFrame:
        """State abbreviation and district number for each feature, in order."""
        props = self.get_props(['STATENAME', 'DISTRICT'])
        return pl.DataFrame({
            'state': [ush.state_abbr(name) for name in props['STATENAME']],
            'district': [parse_district_number(d) for d in props['DISTRICT']],
            'STATENAME': props['STATENAME'],
            'DISTRICT': [str(d) for d in props['DISTRICT']],
        }, schema={'state': pl.Utf8, 'district': pl.Int32,
                   'STATENAME': pl.Utf8, 'DISTRICT': pl.Utf8})

    def simplify(self, tolerance: float) -> None:
        simplified_features = []
        for feature in self.geojson_data['features']:
            geometry = shape(feature['geometry'])
            simplified_geometry = geometry.simplify(
                tolerance, preserve_topology=True
            )
            simplified_features.append({
                'type': 'Feature',
                'geometry': mapping(simplified_geometry),
                'properties': feature['properties'],
            })
        self.geojson_data['features'] = json.loads(
            json.dumps(simplified_features))
