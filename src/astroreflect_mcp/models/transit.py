"""Transit model - a time-bounded event derived from one or two bodies.

Transits are built fresh for every query and never persisted by the engine.
Journal entries elsewhere refer to them only by `id` / `transit_type_id`.

Design decisions:
- transit_type_id is the canonical *kind* key (see utils/transit_types.py);
  id is an opaque per-record uuid
- timing and intensity stay None until the record is classified
- start_date <= exact_date <= end_date is enforced on construction
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..constants import Aspect, Planet, TransitSubtype, TransitTiming, ZodiacSign


@dataclass
class Transit:
    """A single transit record."""

    transit_type_id: str
    planet_a: Planet
    subtype: TransitSubtype
    exact_date: datetime
    start_date: datetime
    end_date: datetime
    description: str
    planet_b: Optional[Planet] = None
    aspect: Optional[Aspect] = None
    sign: Optional[ZodiacSign] = None
    timing: Optional[TransitTiming] = None
    intensity: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not (self.start_date <= self.exact_date <= self.end_date):
            raise ValueError(
                f"Transit {self.transit_type_id} has an inconsistent window: "
                f"{self.start_date.isoformat()} / {self.exact_date.isoformat()} / "
                f"{self.end_date.isoformat()}"
            )

    @property
    def title(self) -> str:
        """Short human-readable label, e.g. 'Sun Square Mars' or 'Mars enters Leo'."""
        a = self.planet_a.display_name
        if self.planet_b is not None and self.aspect is not None:
            return f"{a} {self.aspect.value} {self.planet_b.display_name}"
        if self.subtype == TransitSubtype.INGRESS and self.sign is not None:
            return f"{a} enters {self.sign.value}"
        if self.subtype == TransitSubtype.TRANSIT and self.sign is not None:
            return f"{a} in {self.sign.value}"
        if self.subtype == TransitSubtype.DIRECT:
            return f"{a} Stations Direct"
        return f"{a} {self.subtype.value}"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "id": self.id,
            "transitTypeId": self.transit_type_id,
            "planetA": self.planet_a.value,
            "planetB": self.planet_b.value if self.planet_b else None,
            "aspect": self.aspect.value if self.aspect else None,
            "sign": self.sign.value if self.sign else None,
            "subtype": self.subtype.value,
            "exactDate": self.exact_date.isoformat(),
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "description": self.description,
            "timing": self.timing.value if self.timing else None,
            "intensity": self.intensity,
        }

    def __repr__(self) -> str:
        return (
            f"<Transit({self.transit_type_id}, exact={self.exact_date.isoformat()}, "
            f"timing={self.timing.value if self.timing else None})>"
        )
