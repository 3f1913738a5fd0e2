from pathlib import Path

import pytest
import shapefile
from loguru import logger
from pyproj import CRS, Transformer
from pyproj.enums import WktVersion

RESULTS_CSV = """\
state,district_id,cand_name,party,general_votes
NC,01,Alice,D,100
NC,01,Bob,R,50
NC,01,Carol,LIB,10
NC,02,Dan,R,200
NC,02,Erin,D,100
NC,02,Frank,R,
NC,03,Grace,D,80
NC,03,Heidi,R,80
SC,01,Ivan,R,300
SC,02,Judy,D,
SC,02,Ken,R,
"""

# Lon/lat boxes roughly over central North Carolina
NC_BOXES = {
    '1': (-80.0, 35.0, -79.0, 36.0),
    '2': (-79.0, 35.0, -78.0, 36.0),
    '3': (-78.0, 35.0, -77.0, 36.0),
    '4': (-77.0, 35.0, -76.0, 36.0),
}
SC_BOXES = {'1': (-81.0, 33.0, -80.0, 34.0)}


def box_ring(minx, miny, maxx, maxy):
    # Clockwise, as shapefile exterior rings are
    return [(minx, miny), (minx, maxy), (maxx, maxy), (maxx, miny),
            (minx, miny)]


def write_district_shapefile(base: Path, shapes, epsg=4326, write_prj=True):
    """shapes: iterable of (STATENAME, DISTRICT, lon/lat box)."""
    xform = Transformer.from_crs(4326, epsg, always_xy=True)
    with shapefile.Writer(str(base), shapeType=shapefile.POLYGON) as w:
        w.field('STATENAME', 'C', size=40)
        w.field('DISTRICT', 'C', size=4)
        for statename, district, bbox in shapes:
            ring = [xform.transform(x, y) for x, y in box_ring(*bbox)]
            w.poly([ring])
            w.record(statename, district)
    if write_prj:
        wkt = CRS.from_epsg(epsg).to_wkt(WktVersion.WKT1_GDAL)
        base.with_suffix('.prj').write_text(wkt)
    return str(base.with_suffix('.shp'))


def district_shapes():
    shapes = [('North Carolina', d, b) for d, b in NC_BOXES.items()]
    shapes += [('South Carolina', d, b) for d, b in SC_BOXES.items()]
    return shapes


@pytest.fixture
def results_csv(tmp_path):
    path = tmp_path / 'results.csv'
    path.write_text(RESULTS_CSV)
    return str(path)


@pytest.fixture
def shp_path(tmp_path):
    return write_district_shapefile(tmp_path / 'districts', district_shapes())


@pytest.fixture
def mercator_shp_path(tmp_path):
    return write_district_shapefile(
        tmp_path / 'districts_3857', district_shapes(), epsg=3857)


@pytest.fixture
def log_messages():
    messages: list[str] = []
    handler_id = logger.add(messages.append, level='WARNING',
                            format='{level} {message}')
    yield messages
    logger.remove(handler_id)
