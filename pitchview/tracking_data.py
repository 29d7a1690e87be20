"""
Loading and exporting tracked entities for the command-line renderer.

The engine itself never reads files; hosts hand it entities directly. This
module exists so recorded tracks can be rendered offline. Two layouts are
supported:

JSON::

    {
        "entities": [
            {"id": "p7", "name": "Jane Doe", "number": 7, "role": "ST",
             "samples": [{"x": 42.0, "y": 61.5, "t": 12.4, "confidence": 0.9}]}
        ]
    }

CSV, one row per sample::

    entity_id,name,number,role,x,y,t,confidence,intensity,action
"""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, cast

from .data_structures import PositionSample, TrackedEntity


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _optional_float(value: object) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(cast(float, value))


def _optional_int(value: object) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(cast(int, value))


def _sample_from_mapping(entry: Mapping[str, Any]) -> PositionSample:
    confidence = _optional_float(entry.get("confidence"))
    return PositionSample(
        x=float(entry["x"]),
        y=float(entry["y"]),
        t=float(entry.get("t", entry.get("timestamp", 0.0))),
        confidence=0.8 if confidence is None else confidence,
        intensity=_optional_float(entry.get("intensity")),
        action_tag=entry.get("action") or None,
    )


@dataclass
class TrackStore:
    """
    Container for tracked entities read from or written to disk.

    Attributes:
        entities: Entities in file order (render order).
    """

    entities: List[TrackedEntity] = field(default_factory=list)

    def get(self, entity_id: str) -> Optional[TrackedEntity]:
        for entity in self.entities:
            if entity.entity_id == entity_id:
                return entity
        return None

    def to_json(self, path: Path) -> None:
        """
        Serialize entities to the JSON layout described in the module docstring.
        """
        _ensure_parent(path)
        payload: Dict[str, Any] = {
            "entities": [
                {
                    "id": e.entity_id,
                    "name": e.display_name,
                    "number": e.numeric_label,
                    "role": e.role_label,
                    "samples": [
                        {
                            "x": s.x,
                            "y": s.y,
                            "t": s.t,
                            "confidence": s.confidence,
                            "intensity": s.intensity,
                            "action": s.action_tag,
                        }
                        for s in sorted(e.samples, key=lambda s: s.t)
                    ],
                }
                for e in self.entities
            ]
        }
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    @classmethod
    def from_json(cls, path: Path) -> "TrackStore":
        """
        Load entities from a JSON file produced by :meth:`to_json`.
        """
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not isinstance(data.get("entities"), list):
            raise ValueError(f"{path} must contain an 'entities' list.")

        entities: List[TrackedEntity] = []
        for raw in cast(List[Dict[str, Any]], data["entities"]):
            entity_id = str(raw["id"])
            entities.append(
                TrackedEntity(
                    entity_id=entity_id,
                    display_name=str(raw.get("name") or entity_id),
                    role_label=str(raw.get("role") or ""),
                    numeric_label=_optional_int(raw.get("number")),
                    samples=[_sample_from_mapping(s) for s in raw.get("samples", [])],
                )
            )
        return cls(entities=entities)

    @classmethod
    def from_csv(cls, path: Path) -> "TrackStore":
        """
        Load entities from CSV; entity order follows first appearance.
        """
        by_id: Dict[str, TrackedEntity] = {}
        with path.open("r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                entity_id = row["entity_id"]
                entity = by_id.get(entity_id)
                if entity is None:
                    entity = TrackedEntity(
                        entity_id=entity_id,
                        display_name=row.get("name") or entity_id,
                        role_label=row.get("role") or "",
                        numeric_label=_optional_int(row.get("number")),
                    )
                    by_id[entity_id] = entity
                entity.samples.append(_sample_from_mapping(row))
        return cls(entities=list(by_id.values()))

    @classmethod
    def load(cls, path: Path) -> "TrackStore":
        """
        Load by file extension (``.json`` or ``.csv``).
        """
        if not path.exists():
            raise FileNotFoundError(f"Track file {path} not found.")
        suffix = path.suffix.lower()
        if suffix == ".json":
            return cls.from_json(path)
        if suffix == ".csv":
            return cls.from_csv(path)
        raise ValueError(f"Unsupported track file type: {path.suffix}")
