"""Wind speed unit conversions. The canonical unit everywhere in the pipeline is m/s."""

KNOTS_TO_MPS = 0.514444
KMH_PER_MPS = 3.6

DISPLAY_UNIT_KNOTS = "knots"
DISPLAY_UNIT_KMH = "km/h"

# Short labels used in plain-text display lines.
UNIT_LABELS = {
    DISPLAY_UNIT_KNOTS: "kts",
    DISPLAY_UNIT_KMH: "km/h",
}


def knots_to_mps(knots: float) -> float:
    """Convert knots to meters per second."""
    return knots * KNOTS_TO_MPS


def mps_to_knots(mps: float) -> float:
    """Convert meters per second to knots."""
    return mps / KNOTS_TO_MPS


def kmh_to_mps(kmh: float) -> float:
    """Convert kilometers per hour to meters per second."""
    return kmh / KMH_PER_MPS


def mps_to_kmh(mps: float) -> float:
    """Convert meters per second to kilometers per hour."""
    return mps * KMH_PER_MPS


def mps_to_display(mps: float, display_unit: str) -> float:
    """Convert a canonical m/s value into a region display unit."""
    if display_unit == DISPLAY_UNIT_KNOTS:
        return mps_to_knots(mps)
    if display_unit == DISPLAY_UNIT_KMH:
        return mps_to_kmh(mps)
    raise ValueError(f"Unknown display unit '{display_unit}'")


def unit_label(display_unit: str) -> str:
    """Return the short label used for a display unit."""
    try:
        return UNIT_LABELS[display_unit]
    except KeyError:
        raise ValueError(f"Unknown display unit '{display_unit}'") from None
