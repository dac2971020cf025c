"""Load a track catalog exported from the media library."""

import csv
import json
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .track import Track


class CatalogLoader:
    """Load and parse a track catalog from JSON, CSV or YAML."""

    @staticmethod
    def load(path: Path) -> List[Track]:
        """
        Load a catalog, picking the parser from the file extension.

        A missing or empty file is an empty library, not an error.

        Args:
            path: Catalog file (.json, .csv, .yaml or .yml)

        Returns:
            List of tracks in file order

        Raises:
            ValueError: If the file format or its contents are invalid
        """
        if not path.exists() or path.stat().st_size == 0:
            return []

        suffix = path.suffix.lower()
        if suffix == ".json":
            return CatalogLoader.load_json(path)
        elif suffix == ".csv":
            return CatalogLoader.load_csv(path)
        elif suffix in (".yaml", ".yml"):
            return CatalogLoader.load_yaml(path)
        raise ValueError(
            f"Unsupported catalog format: {path.suffix}. Use .json, .csv, .yaml or .yml"
        )

    @staticmethod
    def load_json(path: Path) -> List[Track]:
        """
        Load a catalog from JSON.

        Accepts either a list of track objects or {"tracks": [...]}.

        Raises:
            ValueError: If JSON format is invalid
        """
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid catalog JSON: {e}") from e

        return CatalogLoader._tracks_from_data(data)

    @staticmethod
    def load_yaml(path: Path) -> List[Track]:
        """
        Load a catalog from YAML (same layout as JSON).

        Raises:
            ValueError: If YAML format is invalid
        """
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid catalog YAML: {e}") from e

        return CatalogLoader._tracks_from_data(data)

    @staticmethod
    def load_csv(path: Path) -> List[Track]:
        """
        Load a catalog from CSV with a header row of Track field names.

        Raises:
            ValueError: If required columns are missing
        """
        with open(path, newline="") as f:
            reader = csv.DictReader(f)
            rows = list(reader)
            fieldnames = reader.fieldnames or []

        if "id" not in fieldnames:
            raise ValueError("Catalog CSV must have an 'id' column")

        tracks = []
        for row in rows:
            entry: Dict[str, Any] = dict(row)
            # Only canonical integers become ints; "007" must stay distinct from "7"
            raw_id = entry["id"]
            if raw_id and raw_id.isdecimal() and str(int(raw_id)) == raw_id:
                entry["id"] = int(raw_id)
            tracks.append(Track.from_dict(entry))
        return tracks

    @staticmethod
    def _tracks_from_data(data: Any) -> List[Track]:
        if data is None:
            return []
        if isinstance(data, dict):
            if "tracks" not in data:
                raise ValueError("Catalog mapping must have a 'tracks' field")
            data = data["tracks"] or []
        if not isinstance(data, list):
            raise ValueError("Catalog must be a list of tracks")

        tracks = []
        for entry in data:
            if not isinstance(entry, dict):
                raise ValueError("Each catalog entry must be a mapping")
            tracks.append(Track.from_dict(entry))
        return tracks
