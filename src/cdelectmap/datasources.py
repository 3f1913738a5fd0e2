import os
import tempfile
import zipfile as zf
from importlib import resources
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests
from loguru import logger

from cdelectmap.errors import DataSourceError

PACKAGED_RESULTS = {2012: 'results_house_2012.csv'}

# Removed by cleanup_downloads() or, failing that, at interpreter exit
_download_dirs: list[tempfile.TemporaryDirectory] = []


def cdmaps_districts_shp_url(congress: int) -> str:
    cdmaps_root = 'http://cdmaps.polisci.ucla.edu/shp'
    return f'{cdmaps_root}/districts{congress:03d}.zip'


def packaged_results_path(year: int) -> Path:
    if year not in PACKAGED_RESULTS:
        raise DataSourceError(
            f'No packaged House results for {year}; '
            f'available: {sorted(PACKAGED_RESULTS)}')
    ref = resources.files('cdelectmap') / 'data' / PACKAGED_RESULTS[year]
    return Path(str(ref))


def download_file(url: str, dest_dir: str) -> str:
    response = requests.get(url, stream=True, timeout=60)
    response.raise_for_status()

    # Prefer the server's filename when it sends one
    filename = os.path.basename(url)
    cd = response.headers.get('Content-Disposition', '')
    if 'filename=' in cd:
        filename = os.path.basename(cd.split('filename=')[1].strip('"; '))

    full_path = os.path.join(dest_dir, filename)
    with open(full_path, 'wb') as f:
        for chunk in response.iter_content(chunk_size=8192):
            f.write(chunk)
    logger.info(f'Downloaded {url} to {full_path}')
    return full_path


def download_and_unzip(url: str, dest_dir: str) -> list[str]:
    dest_path = download_file(url, dest_dir)
    try:
        with zf.ZipFile(dest_path, 'r') as zfh:
            names = zfh.namelist()
            zfh.extractall(dest_dir)
    except zf.BadZipFile as e:
        raise DataSourceError(f'Cannot unzip {dest_path}: {e}') from e
    logger.info(f'Extracted {len(names)} members into {dest_dir}')
    return [os.path.join(dest_dir, name) for name in names]


def find_shapefile(root: str) -> str:
    shp_paths = sorted(str(p) for p in Path(root).rglob('*.shp'))
    if not shp_paths:
        raise DataSourceError(f'No shapefile found under {root}')
    if len(shp_paths) > 1:
        logger.warning(f'Several shapefiles under {root}; using {shp_paths[0]}')
    return shp_paths[0]


def archive_cache_dir(url: str, cache_dir: str) -> str:
    """Per-archive subdirectory, e.g. <cache_dir>/districts113."""
    return os.path.join(cache_dir, Path(urlparse(url).path).stem)


def cleanup_downloads() -> None:
    while _download_dirs:
        _download_dirs.pop().cleanup()


def fetch_districts_shapefile(url: str, cache_dir: Optional[str] = None) -> str:
    """Return a local .shp for the archive at url, downloading if needed.

    With a cache_dir, a shapefile already extracted from the same archive
    is reused; without one the archive goes to a temporary directory that
    lives until cleanup_downloads() or interpreter exit.
    """
    if cache_dir is not None:
        dest_dir = archive_cache_dir(url, cache_dir)
        os.makedirs(dest_dir, exist_ok=True)
        if any(Path(dest_dir).rglob('*.shp')):
            shp_path = find_shapefile(dest_dir)
            logger.info(f'Using cached shapefile {shp_path}')
            return shp_path
    else:
        tmp = tempfile.TemporaryDirectory(prefix='cdelectmap-')
        _download_dirs.append(tmp)
        dest_dir = tmp.name
    download_and_unzip(url, dest_dir)
    return find_shapefile(dest_dir)


if __name__ == '__main__':
    print(fetch_districts_shapefile(cdmaps_districts_shp_url(113), './data'))
