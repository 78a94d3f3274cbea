"""
Supplement Catalog

Read-only snapshot of the supplement database: supplements, goal mappings,
drug interactions, contraindications, synergies, absorption conflicts and
onset timelines. A snapshot is built once and never mutated; reloading swaps
in a freshly built snapshot.
"""

import json
import logging
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from tonic.config import get_settings

from .plan import SupplementTiming

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "data" / "catalog.json"


class EvidenceLevel(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    EMERGING = "emerging"

    @property
    def label(self) -> str:
        return {
            EvidenceLevel.STRONG: "Strong evidence",
            EvidenceLevel.MODERATE: "Moderate evidence",
            EvidenceLevel.EMERGING: "Emerging evidence",
        }[self]


# Severities that make a contraindication a hard exclusion
EXCLUDING_SEVERITIES = ("absolute", "contraindicated")


def slugify(name: str) -> str:
    """'Omega-3 (EPA/DHA)' -> 'omega_3_epa_dha'"""
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


@dataclass
class Supplement:
    """A single catalog entry."""
    name: str
    category: str
    common_dosage_range: str
    recommended_dosage_mg: float
    recommended_timing: SupplementTiming
    evidence_level: EvidenceLevel
    id: str = ""
    dosage_unit: str = "mg"
    min_dosage_mg: Optional[float] = None  # Safety floor
    max_dosage_mg: Optional[float] = None  # Catalog upper limit
    timing_class: Optional[str] = None  # "stimulating", "calming" or None
    benefits: List[str] = field(default_factory=list)
    contraindications: List[str] = field(default_factory=list)
    drug_interactions: List[str] = field(default_factory=list)
    notes: str = ""
    dosage_rationale: str = ""
    expected_timeline: str = ""
    onset_min_days: Optional[int] = None
    onset_max_days: Optional[int] = None
    onset_description: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = slugify(self.name)

    @property
    def slug(self) -> str:
        return slugify(self.name)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "common_dosage_range": self.common_dosage_range,
            "recommended_dosage_mg": self.recommended_dosage_mg,
            "dosage_unit": self.dosage_unit,
            "min_dosage_mg": self.min_dosage_mg,
            "max_dosage_mg": self.max_dosage_mg,
            "recommended_timing": self.recommended_timing.value,
            "evidence_level": self.evidence_level.value,
            "benefits": list(self.benefits),
            "contraindications": list(self.contraindications),
            "drug_interactions": list(self.drug_interactions),
            "notes": self.notes,
            "dosage_rationale": self.dosage_rationale,
            "expected_timeline": self.expected_timeline,
            "onset_min_days": self.onset_min_days,
            "onset_max_days": self.onset_max_days,
            "onset_description": self.onset_description,
        }


@dataclass
class GoalSupplementEntry:
    name: str
    weight: int  # 1-3


@dataclass
class DrugInteraction:
    supplement: str
    drug_or_class: str
    severity: str = "moderate"
    description: str = ""


@dataclass
class Contraindication:
    supplement: str
    condition: str
    severity: str  # "absolute", "contraindicated", "caution"
    description: str = ""

    @property
    def is_excluding(self) -> bool:
        return self.severity.lower() in EXCLUDING_SEVERITIES


@dataclass
class SynergyPairing:
    """Two supplements that work better together. `supplement_a` anchors the timing."""
    supplement_a: str
    supplement_b: str
    mechanism: str = ""
    co_locate: bool = False

    def partner_of(self, name: str) -> Optional[str]:
        if name == self.supplement_a:
            return self.supplement_b
        if name == self.supplement_b:
            return self.supplement_a
        return None


@dataclass
class AbsorptionConflict:
    supplement_a: str
    supplement_b: str
    reason: str = ""


class SupplementCatalog:
    """Immutable lookup tables over a catalog snapshot."""

    def __init__(
        self,
        supplements: Optional[List[Supplement]] = None,
        goal_map: Optional[Dict[str, List[GoalSupplementEntry]]] = None,
        drug_interactions: Optional[List[DrugInteraction]] = None,
        contraindications: Optional[List[Contraindication]] = None,
        synergies: Optional[List[SynergyPairing]] = None,
        absorption_conflicts: Optional[List[AbsorptionConflict]] = None,
    ):
        self._supplements: Tuple[Supplement, ...] = tuple(supplements or [])
        self._by_name: Dict[str, Supplement] = {s.name: s for s in self._supplements}
        self._by_id: Dict[str, Supplement] = {s.id: s for s in self._supplements}
        self._order: Dict[str, int] = {s.name: i for i, s in enumerate(self._supplements)}
        self._goal_map: Dict[str, Tuple[GoalSupplementEntry, ...]] = {
            goal: tuple(entries) for goal, entries in (goal_map or {}).items()
        }
        self._drug_interactions: Tuple[DrugInteraction, ...] = tuple(drug_interactions or [])
        self._contraindications: Tuple[Contraindication, ...] = tuple(contraindications or [])
        self._synergies: Tuple[SynergyPairing, ...] = tuple(synergies or [])
        self._conflicts: Tuple[AbsorptionConflict, ...] = tuple(absorption_conflicts or [])

    # =========================================================================
    # Lookups
    # =========================================================================

    @property
    def supplements(self) -> List[Supplement]:
        return list(self._supplements)

    @property
    def goals(self) -> List[str]:
        return list(self._goal_map.keys())

    @property
    def is_empty(self) -> bool:
        return not self._supplements

    def supplement(self, name: str) -> Optional[Supplement]:
        return self._by_name.get(name)

    def supplement_by_id(self, supplement_id: str) -> Optional[Supplement]:
        return self._by_id.get(supplement_id)

    def find(self, name_or_id: str) -> Optional[Supplement]:
        """Case-insensitive lookup by name, falling back to id."""
        supplement = self._by_name.get(name_or_id) or self._by_id.get(name_or_id)
        if supplement:
            return supplement
        lowered = name_or_id.lower()
        return next((s for s in self._supplements if s.name.lower() == lowered), None)

    def order_of(self, name: str) -> int:
        """Declaration order, used as the stable ranking tie-breaker."""
        return self._order.get(name, len(self._order))

    def goal_mappings(self, goal: str) -> List[GoalSupplementEntry]:
        return list(self._goal_map.get(goal, ()))

    def goal_weight(self, goal: str, name: str) -> int:
        return next((e.weight for e in self._goal_map.get(goal, ()) if e.name == name), 0)

    def interactions(self, name: str) -> List[DrugInteraction]:
        """Explicit interaction records plus the supplement's own interaction terms."""
        records = [i for i in self._drug_interactions if i.supplement == name]
        supplement = self._by_name.get(name)
        if supplement:
            known = {r.drug_or_class.lower() for r in records}
            for term in supplement.drug_interactions:
                if term.lower() not in known:
                    records.append(DrugInteraction(supplement=name, drug_or_class=term))
        return records

    def contraindications(self, name: str) -> List[Contraindication]:
        return [c for c in self._contraindications if c.supplement == name]

    def synergies(self, name: str) -> List[SynergyPairing]:
        return [s for s in self._synergies if s.partner_of(name) is not None]

    @property
    def all_synergies(self) -> List[SynergyPairing]:
        return list(self._synergies)

    @property
    def absorption_conflicts(self) -> List[AbsorptionConflict]:
        return list(self._conflicts)

    def onset(self, name: str) -> Optional[Tuple[int, int]]:
        supplement = self._by_name.get(name)
        if supplement is None or supplement.onset_min_days is None:
            return None
        return (supplement.onset_min_days, supplement.onset_max_days or supplement.onset_min_days)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_dict(cls, data: dict) -> "SupplementCatalog":
        """
        Build a catalog from its JSON document.

        Malformed entries are skipped with a warning so one bad row cannot
        take the whole catalog down. A document that is not a JSON object
        gives an empty catalog.
        """
        if not isinstance(data, dict):
            logger.error(f"Supplement catalog must be a JSON object, got {type(data).__name__}")
            return cls()

        supplements = []
        for raw in _list_section(data, "supplements"):
            try:
                supplements.append(_parse_supplement(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed supplement {raw.get('name', '?') if isinstance(raw, dict) else raw!r}: {e}")

        known = {s.name for s in supplements}

        goal_map: Dict[str, List[GoalSupplementEntry]] = {}
        goal_section = data.get("goal_supplements", {})
        if not isinstance(goal_section, dict):
            logger.warning("Skipping malformed goal_supplements section")
            goal_section = {}
        for goal, entries in goal_section.items():
            if not isinstance(entries, list):
                logger.warning(f"Skipping malformed goal entries for {goal}")
                continue
            parsed = []
            for entry in entries:
                try:
                    item = GoalSupplementEntry(name=entry["name"], weight=int(entry["weight"]))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed goal entry for {goal}: {e}")
                    continue
                if item.name not in known:
                    logger.warning(f"Goal {goal} references unknown supplement {item.name}")
                    continue
                parsed.append(item)
            goal_map[goal] = parsed

        return cls(
            supplements=supplements,
            goal_map=goal_map,
            drug_interactions=_parse_records(DrugInteraction, _list_section(data, "drug_interactions")),
            contraindications=_parse_records(Contraindication, _list_section(data, "contraindications")),
            synergies=_parse_records(SynergyPairing, _list_section(data, "synergies")),
            absorption_conflicts=_parse_records(AbsorptionConflict, _list_section(data, "absorption_conflicts")),
        )


def _list_section(data: dict, key: str) -> list:
    section = data.get(key, [])
    if not isinstance(section, list):
        logger.warning(f"Skipping malformed {key} section")
        return []
    return section


def _optional_number(value, cast):
    return None if value is None else cast(value)


def _require_str(raw: dict, key: str) -> str:
    value = raw[key]
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _parse_supplement(raw: dict) -> Supplement:
    onset = raw.get("onset") or {}
    if not isinstance(onset, dict):
        raise ValueError("onset must be an object")
    return Supplement(
        id=raw.get("id", ""),
        name=_require_str(raw, "name"),
        category=_require_str(raw, "category"),
        common_dosage_range=raw.get("common_dosage_range", ""),
        recommended_dosage_mg=float(raw.get("recommended_dosage_mg", 0)),
        dosage_unit=raw.get("dosage_unit", "mg"),
        min_dosage_mg=_optional_number(raw.get("min_dosage_mg"), float),
        max_dosage_mg=_optional_number(raw.get("max_dosage_mg"), float),
        recommended_timing=SupplementTiming(raw["recommended_timing"]),
        evidence_level=EvidenceLevel(raw["evidence_level"]),
        timing_class=raw.get("timing_class"),
        benefits=list(raw.get("benefits", [])),
        contraindications=list(raw.get("contraindications", [])),
        drug_interactions=list(raw.get("drug_interactions", [])),
        notes=raw.get("notes", ""),
        dosage_rationale=raw.get("dosage_rationale", ""),
        expected_timeline=raw.get("expected_timeline", ""),
        onset_min_days=_optional_number(onset.get("min_days"), int),
        onset_max_days=_optional_number(onset.get("max_days"), int),
        onset_description=onset.get("description", ""),
    )


def _parse_records(record_type, rows: List[dict]) -> list:
    records = []
    for row in rows:
        try:
            record = record_type(**row)
            for f in fields(record_type):
                if not isinstance(getattr(record, f.name), f.type):
                    raise TypeError(f"{f.name} must be {f.type.__name__}")
        except TypeError as e:
            logger.warning(f"Skipping malformed {record_type.__name__}: {e}")
            continue
        records.append(record)
    return records


# =============================================================================
# Loading
# =============================================================================

def load_catalog(path: Optional[str] = None) -> SupplementCatalog:
    """
    Load a catalog snapshot from JSON.

    Args:
        path: Catalog file; defaults to the bundled tonic/data/catalog.json

    Returns:
        The catalog, or an empty catalog if the file is missing or unreadable
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(catalog_path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load supplement catalog from {catalog_path}: {e}")
        return SupplementCatalog()

    catalog = SupplementCatalog.from_dict(data)
    logger.info(f"Loaded {len(catalog.supplements)} supplements from {catalog_path}")
    return catalog


_catalog: Optional[SupplementCatalog] = None


def get_catalog() -> SupplementCatalog:
    """Cached catalog snapshot, loaded from the configured path on first use."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(get_settings().catalog_path or None)
    return _catalog


def reload_catalog(path: Optional[str] = None) -> SupplementCatalog:
    """Build a fresh snapshot and swap it in."""
    global _catalog
    if path is None:
        path = get_settings().catalog_path or None
    _catalog = load_catalog(path)
    return _catalog
