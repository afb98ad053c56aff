"""
Data I/O utilities.

Loads phantom descriptions (local file or HTTP URL) and saves built
scenes as GLB with a JSON metadata sidecar.

Phantom JSON layout:
    {
      "fiber_geometries": {
        "0": {"control_points": [x, y, z, x, y, z, ...],
              "tangents": "symmetric", "radius": 2.0}
      },
      "isotropic_regions": {
        "0": {"center": [x, y, z], "radius": 4.0}
      }
    }
Either collection may also be a list; control points may be nested triples.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import requests
import trimesh

from .sources import FiberSource, RegionSource, Phantom, InvalidSource

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 30


class PhantomFormatError(ValueError):
    """The phantom description cannot be parsed."""


def _entries(collection: Union[Dict[str, Any], Iterable, None], name: str):
    """Yield (key, entry) pairs from a dict (ordered by numeric key) or list."""
    if collection is None:
        return
    if isinstance(collection, dict):
        def order(key):
            return (0, int(key), "") if str(key).isdigit() else (1, 0, str(key))
        for key in sorted(collection, key=order):
            yield str(key), collection[key]
    elif isinstance(collection, list):
        for i, entry in enumerate(collection):
            yield str(i), entry
    else:
        raise PhantomFormatError(f"'{name}' must be an object or a list")


def phantom_from_dict(data: Dict[str, Any]) -> Phantom:
    """
    Build a Phantom from its decoded JSON description.

    Raises:
        PhantomFormatError: missing keys or invalid fiber/region entries
    """
    if not isinstance(data, dict):
        raise PhantomFormatError("phantom description must be a JSON object")

    fibers = []
    for key, entry in _entries(data.get("fiber_geometries"), "fiber_geometries"):
        try:
            fibers.append(FiberSource(
                entry["control_points"],
                radius=entry.get("radius"),
                tangents=entry.get("tangents", "symmetric")
            ))
        except KeyError as e:
            raise PhantomFormatError(f"fiber {key}: missing {e}") from e
        except InvalidSource as e:
            raise PhantomFormatError(f"fiber {key}: {e}") from e

    regions = []
    for key, entry in _entries(data.get("isotropic_regions"), "isotropic_regions"):
        try:
            regions.append(RegionSource(entry["center"], entry["radius"]))
        except KeyError as e:
            raise PhantomFormatError(f"region {key}: missing {e}") from e
        except InvalidSource as e:
            raise PhantomFormatError(f"region {key}: {e}") from e

    return Phantom(fibers, regions)


def parse_phantom(text: str) -> Phantom:
    """Parse a phantom description from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PhantomFormatError(f"invalid phantom JSON: {e}") from e
    return phantom_from_dict(data)


def load_phantom(source: Union[str, Path], session: Optional[requests.Session] = None) -> Phantom:
    """
    Load a phantom from a file path or an http(s) URL.

    Args:
        source: Path to a phantom JSON file, or URL serving it as text
        session: Optional requests session for URL sources

    Returns:
        Phantom with fibers and isotropic regions
    """
    source_str = str(source)
    if source_str.startswith(("http://", "https://")):
        response = (session or requests).get(source_str, timeout=REQUEST_TIMEOUT_S)
        response.raise_for_status()
        text = response.text
    else:
        path = Path(source)
        with open(path) as f:
            text = f.read()

    phantom = parse_phantom(text)
    logger.info(f"Loaded phantom from {source_str}: "
                f"{phantom.n_fibers} fibers, {phantom.n_regions} isotropic regions")
    return phantom


def save_phantom(phantom: Phantom, path: Path) -> None:
    """Write a phantom description as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(phantom.to_dict(), f, indent=2)
    logger.info(f"Saved phantom: {path}")


def save_scene(
    scene: trimesh.Scene,
    path: Path,
    metadata: Optional[Dict[str, Any]] = None
) -> Path:
    """
    Save scene to GLB file with metadata sidecar.

    Args:
        scene: trimesh scene
        path: Output path (should end in .glb)
        metadata: Optional dictionary saved as a .json sidecar

    Returns:
        Path of the written GLB
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = scene.export(file_type="glb")
    path.write_bytes(data)
    logger.info(f"Saved scene: {path} ({len(scene.geometry)} geometries)")

    if metadata is not None:
        meta_path = path.with_suffix('.json')
        with open(meta_path, 'w') as f:
            json.dump(metadata, f, indent=2)
        logger.info(f"Saved metadata: {meta_path}")

    return path
