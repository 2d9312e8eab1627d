"""TransitType model - the kind of a transit, independent of when it happens."""

from dataclasses import dataclass
from typing import Any, Optional

from ..constants import Aspect, Planet, TransitSubtype, ZodiacSign


@dataclass(frozen=True)
class TransitType:
    id: str
    planet_a: Planet
    subtype: TransitSubtype
    name: str
    description: str
    planet_b: Optional[Planet] = None
    aspect: Optional[Aspect] = None
    sign: Optional[ZodiacSign] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "planetA": self.planet_a.value,
            "planetB": self.planet_b.value if self.planet_b else None,
            "aspect": self.aspect.value if self.aspect else None,
            "sign": self.sign.value if self.sign else None,
            "subtype": self.subtype.value,
            "name": self.name,
            "description": self.description,
        }
