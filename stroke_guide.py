"""
Stroke guide geometry for hint overlays and animated stroke arrows.

Curves are sampled with svg.path; everything returned is in normalized
canvas space so the UI can scale it to any canvas size.
"""

from typing import List, Optional, Tuple

import numpy as np
from svg.path import parse_path

import config
from models import Point, ReferenceStroke
from path_resolver import resolve_path_endpoint


def guide_points(
    reference: ReferenceStroke,
    samples: int = config.GUIDE_SAMPLES,
    dimension: float = config.REFERENCE_DIMENSION,
) -> List[Point]:
    """Points evenly spaced by arc length along a reference stroke's path."""
    if samples < 2:
        raise ValueError("samples must be at least 2")

    # Raises MalformedPath before svg.path sees anything it would reject
    end = resolve_path_endpoint(reference.path, dimension)

    path = parse_path(reference.path)
    if sum(segment.length() for segment in path) < 1e-9:
        return [end] * samples

    out = []
    for i in range(samples):
        pos = path.point(i / (samples - 1))
        out.append(Point(pos.real / dimension, pos.imag / dimension))
    return out


def arrow_at(pts, progress: float) -> Optional[Tuple[Point, Tuple[float, float]]]:
    """
    Position and unit direction at a fraction of a polyline's length.

    progress is clamped to [0, 1]. Returns None for polylines with no
    length, where no direction exists.
    """
    pts = np.asarray(pts, dtype=np.float64)
    if len(pts) < 2:
        return None

    seg_vecs = np.diff(pts, axis=0)
    seg_lens = np.sqrt((seg_vecs ** 2).sum(axis=1))
    total_len = float(seg_lens.sum())
    if total_len < 1e-9:
        return None

    target = total_len * min(max(progress, 0.0), 1.0)
    cumulative = 0.0
    for i, seg_len in enumerate(seg_lens):
        if seg_len <= 0:
            continue
        last = i == len(seg_lens) - 1
        if cumulative + seg_len >= target or last:
            alpha = min((target - cumulative) / seg_len, 1.0)
            pos = pts[i] + alpha * seg_vecs[i]
            direction = seg_vecs[i] / seg_len
            return (
                Point(float(pos[0]), float(pos[1])),
                (float(direction[0]), float(direction[1])),
            )
        cumulative += seg_len

    # Trailing zero-length segments; point along the last real one
    i = int(np.nonzero(seg_lens > 0)[0][-1])
    direction = seg_vecs[i] / seg_lens[i]
    return Point(float(pts[-1][0]), float(pts[-1][1])), (float(direction[0]), float(direction[1]))
