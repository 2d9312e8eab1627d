"""Template-based transit descriptions.

Aspect descriptions are a base sentence per aspect with %A / %B placeholders,
optionally followed by a sentence specific to the planet pair. Pair sentences
are looked up in either order.
"""

from ..constants import Aspect, Planet, ZodiacSign

ASPECT_DESCRIPTIONS: dict[Aspect, dict] = {
    Aspect.CONJUNCTION: {
        "base": "%A and %B merge their energies, creating a powerful new beginning or emphasis in your life.",
        "dynamics": {
            Planet.SUN: {
                Planet.MOON: "Your conscious will and emotional needs align, enabling authenticity and clear self-expression.",
                Planet.MERCURY: "Your sense of identity merges with communication, enhancing your ability to express yourself.",
                Planet.VENUS: "Your identity aligns with your desires and values, heightening creativity and personal charm.",
                Planet.MARS: "Your will and drive unite, providing a powerful boost to pursue your goals with vigor.",
                Planet.JUPITER: "Your identity expands through greater confidence, optimism, and opportunity for growth.",
                Planet.SATURN: "Your identity meets responsibility, bringing focus to personal achievement through discipline.",
                Planet.URANUS: "Your identity seeks freedom and awakening, potentially bringing unexpected changes to your path.",
                Planet.NEPTUNE: "Your identity blends with spiritual energy, enhancing imagination and compassion.",
                Planet.PLUTO: "Your identity undergoes powerful transformation, revealing deeper truths about yourself.",
            },
        },
    },
    Aspect.SEXTILE: {
        "base": "%A forms a harmonious opportunity with %B, offering a chance for growth if you take action.",
    },
    Aspect.SQUARE: {
        "base": "%A creates tension with %B, challenging you to overcome obstacles and grow through difficulty.",
    },
    Aspect.TRINE: {
        "base": "%A flows effortlessly with %B, offering natural talents and opportunities for easy progress.",
    },
    Aspect.OPPOSITION: {
        "base": "%A faces %B directly, creating awareness through polarization and the need for balance.",
    },
}


def describe_aspect(planet_a: Planet, aspect: Aspect, planet_b: Planet) -> str:
    """Description for an aspect transit between two planets."""
    entry = ASPECT_DESCRIPTIONS[aspect]
    description = entry["base"]

    dynamics = entry.get("dynamics", {})
    pair_text = (
        dynamics.get(planet_a, {}).get(planet_b)
        or dynamics.get(planet_b, {}).get(planet_a)
    )
    if pair_text:
        description += " " + pair_text

    return (
        description
        .replace("%A", planet_a.display_name)
        .replace("%B", planet_b.display_name)
    )


def describe_retrograde(planet: Planet) -> str:
    name = planet.display_name
    return (
        f"{name} appears to move backward from Earth's perspective, suggesting a time "
        f"to review, revise, and reconsider {name}-related matters."
    )


def describe_direct_station(planet: Planet) -> str:
    name = planet.display_name
    return (
        f"{name} stations direct and resumes forward motion, releasing what was "
        f"held up for review in {name}-related matters."
    )


def describe_ingress(planet: Planet, sign: ZodiacSign) -> str:
    name = planet.display_name
    return (
        f"{name} enters the sign of {sign.value}, bringing new qualities and themes "
        f"to {name}-related areas."
    )


def describe_sign_transit(planet: Planet, sign: ZodiacSign) -> str:
    name = planet.display_name
    return (
        f"{name} moving through {sign.value}, infusing {name}-related matters "
        f"with {sign.value} qualities."
    )
