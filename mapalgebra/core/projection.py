#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Projections and reprojection of points.

The Earth is not a sphere. Various schemes have been invented that give
`Point` coordinates for locations on the Earth, all of them approximations
with their own trade-offs. A `Projection` (also known as a Coordinate
Reference System) maps coordinates on a perfect `Sphere` to some other
representation, and back.

`Sphere` is the canonical frame: its coordinates are radians, with x the
longitude and y the latitude. Reprojection between any two projections always
passes through it.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- EPSG:3857, "WGS 84 / Pseudo-Mercator".
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
import numpy as np

from mapalgebra.core.config import PROJECTION_CONFIG
from mapalgebra.core.errors import ProjectionMismatchError


@dataclass(frozen=True)
class Point:
    """A location on the Earth in some `Projection`.
    
    Attributes
    ----------
    x : float or np.ndarray
        First coordinate (easting / longitude).
    y : float or np.ndarray
        Second coordinate (northing / latitude).
    projection : Projection
        The projection these coordinates are expressed in.
    
    Notes
    -----
    Coordinates may be numpy arrays, in which case a single `Point` stands
    for many locations and is reprojected in one vectorized call.
    """
    x: Any
    y: Any
    projection: "Projection"


class Projection(ABC):
    """Abstract base class for projections.
    
    Projections compare equal by class and by any parameters they carry;
    the stateless ones are equal whenever their classes match.
    """
    
    name: str = "projection"
    
    @abstractmethod
    def to_sphere(self, point: Point) -> Point:
        """Convert a point in this projection to radians on a perfect sphere."""
    
    @abstractmethod
    def from_sphere(self, point: Point) -> Point:
        """Convert a point of radians on a perfect sphere to this projection."""
    
    def point(self, x: Any, y: Any) -> Point:
        """Build a `Point` tagged with this projection."""
        return Point(x, y, self)
    
    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)
    
    def __hash__(self) -> int:
        return hash(type(self))
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Sphere(Projection):
    """A perfect geometric sphere.
    
    The Earth isn't actually shaped this way, but it's a convenient
    middle-ground for converting between the other projections.
    """
    
    name = "sphere"
    
    def to_sphere(self, point: Point) -> Point:
        return point
    
    def from_sphere(self, point: Point) -> Point:
        return point


class LatLng(Projection):
    """Longitude/latitude in degrees (x = longitude, y = latitude)."""
    
    name = "latlng"
    
    def to_sphere(self, point: Point) -> Point:
        return Point(np.radians(point.x), np.radians(point.y), SPHERE)
    
    def from_sphere(self, point: Point) -> Point:
        return Point(np.degrees(point.x), np.degrees(point.y), LATLNG)


class WebMercator(Projection):
    """Spherical Mercator, the most common projection for web maps.
    
    Coordinates are metres on a sphere of radius ``earth_radius`` from
    ``PROJECTION_CONFIG``. The poles map to infinity and are not guarded.
    """
    
    name = "webmercator"
    
    def __init__(self, radius: Optional[float] = None):
        self.radius = float(radius or PROJECTION_CONFIG.get("earth_radius", 6378137.0))
    
    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.radius == other.radius
    
    def __hash__(self) -> int:
        return hash((type(self), self.radius))
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}(radius={self.radius!r})"
    
    def to_sphere(self, point: Point) -> Point:
        lng = point.x / self.radius
        lat = 2.0 * np.arctan(np.exp(point.y / self.radius)) - np.pi / 2.0
        return Point(lng, lat, SPHERE)
    
    def from_sphere(self, point: Point) -> Point:
        x = self.radius * point.x
        y = self.radius * np.log(np.tan(np.pi / 4.0 + point.y / 2.0))
        return Point(x, y, self)


SPHERE = Sphere()
LATLNG = LatLng()
WEB_MERCATOR = WebMercator()


def reproject(point: Point, *projections: Projection) -> Point:
    """
    Reproject a `Point` from one `Projection` to another.
    
    Parameters
    ----------
    point : Point
        The point to convert.
    *projections : Projection
        Either just the target projection, or the source and then the
        target. An explicit source must match the point's own projection.
        
    Returns
    -------
    Point
        The same location expressed in the target projection.
        
    Raises
    ------
    ProjectionMismatchError
        If an explicit source projection differs from ``point.projection``.
    TypeError
        If neither one nor two projections are given.
    """
    if len(projections) == 1:
        source, target = point.projection, projections[0]
    elif len(projections) == 2:
        source, target = projections
        if source != point.projection:
            raise ProjectionMismatchError(point.projection, source)
    else:
        raise TypeError(f"reproject() takes a target or a source and target, got {len(projections)} projections")
    
    return target.from_sphere(source.to_sphere(point))
