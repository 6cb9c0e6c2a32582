"""
Human-readable output of a ComputationResult.
"""

import logging
from pathlib import Path

from .result import ComputationResult, IntersectionStatus

logger = logging.getLogger(__name__)

NULL_INTERSECTION = "The intersection between sender and receiver is null"


def format_intersection(result: ComputationResult) -> str:
    """Render the intersection as a (bitstring | integer value) table."""
    if result.status is IntersectionStatus.NO_COMPUTATION:
        return "No computation was performed (empty ciphertext)"
    if result.is_empty:
        return NULL_INTERSECTION

    width = max(len(bits) for bits in result.intersection) + 2
    o_line = "-" * width + "|" + "-" * width
    lines = [
        "Intersection between the two datasets: (bitstring, integer value)",
        "",
        o_line,
    ]
    for bits in result.intersection:
        lines.append(f" {bits:<{width - 1}}| {int(bits, 2)}")
        lines.append(o_line)
    return "\n".join(lines)


def print_intersection(result: ComputationResult) -> None:
    print(format_intersection(result))
    if result.noise_exhausted:
        print("WARNING: noise budget exhausted, the intersection above is unreliable")


def write_intersection(path, result: ComputationResult) -> Path:
    """Write the intersecting bitstrings, one per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for bits in result.intersection:
            f.write(bits + "\n")
    logger.info(f"Output dataset written to {path}")
    return path
