"""
Walk through the district election analysis for one state.

Loads the House results, aggregates them per district, fetches the
district shapefile, joins the two and writes tables and maps to the
output directory.

Usage:
    cdelectmap-walkthrough --state NC --out out
    cdelectmap-walkthrough --config config.yaml --shapefile districts113.shp
"""

import argparse
import os
from typing import Optional

import requests
from loguru import logger

from cdelectmap import maps, tables
from cdelectmap.config import Config
from cdelectmap.datasources import cleanup_downloads, fetch_districts_shapefile
from cdelectmap.districtsgeodata import WGS84, DistrictsGeoData
from cdelectmap.errors import CdElectMapError, DataSourceError
from cdelectmap.hrelection import HrElection, TIE_POLICIES, table_print_config
from cdelectmap.logsetup import configure_logging
from cdelectmap.merge import merge_districts


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='cdelectmap-walkthrough',
        description='Map U.S. House election results by congressional district.',
    )
    parser.add_argument('--config', help='YAML settings file')
    parser.add_argument('--state', help='State abbreviation or name')
    parser.add_argument('--results', dest='results_csv',
                        help='House results CSV (default: packaged data)')
    parser.add_argument('--shapefile',
                        help='Local district shapefile; skips the download')
    parser.add_argument('--out', dest='out_dir', help='Output directory')
    parser.add_argument('--tie-winner', choices=TIE_POLICIES,
                        help='Winner label for tied districts')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable DEBUG logging')
    return parser.parse_args(argv)


def run_walkthrough(config: Config,
                    shapefile: Optional[str] = None) -> dict[str, str]:
    state = config.get('state')
    out_dir = config.get('out_dir')
    os.makedirs(out_dir, exist_ok=True)

    # 1-2. results and district aggregates
    hr_elect = HrElection(
        config.get('results_csv'), year=config.get('year'),
        tie_winner=config.get('tie_winner'))
    state_results = hr_elect.get_state_results(state)
    with table_print_config():
        print(state_results.drop('state'))
        print(hr_elect.get_winner_summary(state))

    # 3. district shapes
    if shapefile is None:
        shapefile = fetch_districts_shapefile(
            config.shapefile_url, config.get('cache_dir'))
    gd = DistrictsGeoData(shapefile, config.get('src_epsg'))
    gd.filter_by_state([state])
    gd.xform_geometry(WGS84)
    tolerance = config.get('simplify_tolerance')
    if tolerance:
        gd.simplify(tolerance)

    # 4. join
    merged = merge_districts(state_results, gd)
    if not len(merged):
        raise DataSourceError(
            f'No {state} districts matched between the results and the '
            'district shapes; nothing to map')

    # 5. outputs
    fmt = config.get('chart_format')
    outputs = {
        'district_results': os.path.join(out_dir, 'district_results.html'),
        'state_summary': os.path.join(out_dir, 'state_summary.html'),
        'districts': os.path.join(out_dir, f'districts.{fmt}'),
        'winner': os.path.join(out_dir, f'winner.{fmt}'),
        'r_prop': os.path.join(out_dir, f'r_prop.{fmt}'),
        'interactive': os.path.join(out_dir, 'interactive.html'),
    }
    tables.write_table(
        state_results, outputs['district_results'],
        f'{hr_elect.year} House results by district, {state}')
    tables.write_table(
        hr_elect.get_state_summary(), outputs['state_summary'],
        f'{hr_elect.year} House seats and votes by state')
    maps.save_chart(
        maps.make_district_outline_chart(gd), outputs['districts'])
    maps.save_chart(maps.make_winner_chart(merged), outputs['winner'])
    maps.save_chart(maps.make_r_prop_chart(merged), outputs['r_prop'])
    maps.save_figure(
        maps.make_interactive_map(merged), outputs['interactive'])
    return outputs


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = Config(args.config)
        config.update(
            state=args.state, results_csv=args.results_csv,
            out_dir=args.out_dir, tie_winner=args.tie_winner)
        outputs = run_walkthrough(config, args.shapefile)
    except (CdElectMapError, requests.RequestException, OSError,
            ValueError) as e:
        logger.error(f'Walkthrough failed: {e}')
        return 1
    finally:
        cleanup_downloads()
    logger.success(f'Wrote {len(outputs)} files to {config.get("out_dir")}')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
