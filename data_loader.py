"""
COVID-19 snapshot and map-geometry loading.

Provides functions to:
  - Fetch the per-region area snapshot (source A) and cache it locally
  - Load the pre-aggregated countries snapshot file (source B)
  - Load and cache the world geometry the maps are drawn on
  - Run any of the above off the event loop (the *_async variants)

Data sources:
  - Area snapshot: https://lab.isaaclin.cn/nCoV/api/area
  - Countries snapshot: worldometers export, shipped as data/GlobalCasesToday.json
  - World geometry: echarts 4 world.json (GeoJSON keyed by properties.name,
    usually shipped UTF8Encoding-compressed and decoded on load)

Every location can be a local path or an http(s) URL and can be overridden
through the environment (COVID_AREA_URL, COVID_COUNTRIES_SNAPSHOT,
COVID_WORLD_GEOJSON, COVID_HTTP_TIMEOUT).
"""

import asyncio
import json
import logging
import os
from datetime import datetime

import requests

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")
CACHE_DIR = DATA_DIR

AREA_URL = os.environ.get("COVID_AREA_URL", "https://lab.isaaclin.cn/nCoV/api/area")
COUNTRIES_SNAPSHOT = os.environ.get(
    "COVID_COUNTRIES_SNAPSHOT", os.path.join(DATA_DIR, "GlobalCasesToday.json"))
WORLD_GEOJSON = os.environ.get(
    "COVID_WORLD_GEOJSON",
    "https://cdn.jsdelivr.net/npm/echarts@4.9.0/map/json/world.json")
HTTP_TIMEOUT = float(os.environ.get("COVID_HTTP_TIMEOUT", "15"))

AREA_CACHE_FILE = os.path.join(CACHE_DIR, "area_snapshot.json")
WORLD_CACHE_FILE = os.path.join(CACHE_DIR, "world.json")

# Cache ages (days) after which a download is attempted again
AREA_CACHE_MAX_AGE = 0
WORLD_CACHE_MAX_AGE = 30


class DataSourceError(RuntimeError):
    """A data source could not be fetched or decoded."""


def _is_url(location):
    return location.startswith(("http://", "https://"))


def _get_json(url, timeout=None):
    try:
        response = requests.get(url, timeout=timeout or HTTP_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        raise DataSourceError(f"Failed to fetch {url}: {e}") from e


def _read_json_file(path):
    try:
        with open(path, encoding="utf-8") as fp:
            return json.load(fp)
    except (OSError, ValueError) as e:
        raise DataSourceError(f"Failed to read {path}: {e}") from e


def read_json(location):
    """JSON document from a path or an http(s) URL."""
    if _is_url(location):
        return _get_json(location)
    return _read_json_file(location)


def _cache_is_fresh(path, max_age_days):
    if not os.path.exists(path):
        return False
    mod_time = datetime.fromtimestamp(os.path.getmtime(path))
    return (datetime.now() - mod_time).days < max_age_days


def _write_cache(path, document):
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as fp:
            json.dump(document, fp, ensure_ascii=False)
    except OSError as e:
        logger.warning("Could not write cache %s: %s", path, e)


def _load_cached(location, cache_file, max_age_days, force=False):
    """Fetch `location`, keeping a copy in `cache_file`.

    A fresh cache short-circuits the fetch. When the fetch fails an existing
    cache is used regardless of its age; with no cache the error propagates.
    """
    if not force and _cache_is_fresh(cache_file, max_age_days):
        return _read_json_file(cache_file)

    try:
        document = read_json(location)
    except DataSourceError as e:
        if os.path.exists(cache_file):
            logger.warning("%s; using cached copy %s instead", e, cache_file)
            return _read_json_file(cache_file)
        raise

    if _is_url(location):
        _write_cache(cache_file, document)
    return document


def fetch_area_snapshot(url=None, force=False):
    """
    Fetch the latest per-region snapshot.

    Returns:
        dict with a "results" list; each element carries countryName,
        countryEnglishName, optional cities, the five counts and updateTime
        (epoch ms).
    """
    payload = _load_cached(url or AREA_URL, AREA_CACHE_FILE, AREA_CACHE_MAX_AGE, force)
    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        raise DataSourceError("Area snapshot has no 'results' list")
    logger.info("Area snapshot: %d records", len(payload["results"]))
    return payload


def load_countries_snapshot(location=None):
    """
    Load the countries snapshot.

    Returns:
        list of {name, total, active, increased, recovered, dead, perMppl}
        dicts, numbers still formatted as strings.
    """
    document = read_json(location or COUNTRIES_SNAPSHOT)
    countries = document.get("countries") if isinstance(document, dict) else None
    if not isinstance(countries, list):
        raise DataSourceError("Countries snapshot has no 'countries' list")
    logger.info("Countries snapshot: %d countries", len(countries))
    return countries


def _decode_ring(encoded, offsets, scale):
    """Coordinates of one ring in echarts' UTF8Encoding.

    Every character pair is a zigzag-encoded delta (character code - 64)
    from the previous point, starting at `offsets`.
    """
    ring = []
    prev_x, prev_y = offsets[0], offsets[1]
    for i in range(0, len(encoded) - 1, 2):
        x = ord(encoded[i]) - 64
        y = ord(encoded[i + 1]) - 64
        x = (x >> 1) ^ (-(x & 1))
        y = (y >> 1) ^ (-(y & 1))
        prev_x, prev_y = prev_x + x, prev_y + y
        ring.append([prev_x / scale, prev_y / scale])
    return ring


def _decode_feature(feature, scale):
    geometry = feature.get("geometry") or {}
    kind = geometry.get("type")
    if kind not in ("Polygon", "MultiPolygon"):
        return feature
    offsets = geometry["encodeOffsets"]
    if kind == "Polygon":
        coordinates = [_decode_ring(ring, offsets[i], scale)
                       for i, ring in enumerate(geometry["coordinates"])]
    else:
        coordinates = [[_decode_ring(ring, offsets[i][j], scale)
                        for j, ring in enumerate(polygon)]
                       for i, polygon in enumerate(geometry["coordinates"])]
    decoded = {k: v for k, v in geometry.items() if k != "encodeOffsets"}
    decoded["coordinates"] = coordinates
    return dict(feature, geometry=decoded)


def decode_geometry(document):
    """Plain GeoJSON from an echarts map file.

    echarts ships its map files with `"UTF8Encoding": true`, every ring
    packed into a string. Such documents are decoded into new dicts; any
    other document is returned as it is.
    """
    if not isinstance(document, dict) or not document.get("UTF8Encoding"):
        return document
    scale = document.get("UTF8Scale") or 1024
    try:
        features = [_decode_feature(f, scale) for f in document.get("features") or []]
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        raise DataSourceError(f"Malformed encoded world geometry: {e}") from e
    return dict(document, features=features, UTF8Encoding=False)


def _numeric_coordinates(coordinates):
    if isinstance(coordinates, list):
        return all(_numeric_coordinates(c) for c in coordinates)
    return isinstance(coordinates, (int, float)) and not isinstance(coordinates, bool)


def load_world_geometry(location=None, force=False):
    """World GeoJSON FeatureCollection keyed by properties.name.

    Encoded echarts documents are decoded first; anything still carrying
    non-numeric coordinates is rejected.
    """
    location = location or WORLD_GEOJSON
    if _is_url(location):
        geometry = _load_cached(location, WORLD_CACHE_FILE, WORLD_CACHE_MAX_AGE, force)
    else:
        geometry = _read_json_file(location)
    geometry = decode_geometry(geometry)
    if not isinstance(geometry, dict) or not isinstance(geometry.get("features"), list):
        raise DataSourceError("World geometry is not a GeoJSON FeatureCollection")
    for feature in geometry["features"]:
        shape = feature.get("geometry") if isinstance(feature, dict) else None
        if shape and not _numeric_coordinates(shape.get("coordinates")):
            raise DataSourceError("World geometry has non-numeric coordinates")
    return geometry


async def fetch_area_snapshot_async(url=None):
    return await asyncio.to_thread(fetch_area_snapshot, url)


async def load_countries_snapshot_async(location=None):
    return await asyncio.to_thread(load_countries_snapshot, location)


async def load_world_geometry_async(location=None):
    return await asyncio.to_thread(load_world_geometry, location)
