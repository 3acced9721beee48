#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Map Algebra Package.

An implementation of Map Algebra as described in Dana Tomlin's *GIS and
Cartographic Modeling*: lazily-evaluated rasters, local operations between
them, multi-raster reducers, and a small projection model for converting
points between coordinate reference systems.
"""

__version__ = "0.1.0"
__author__ = "Elena Project Team"
__email__ = "user@example.com"

from mapalgebra.core.errors import (
    MapAlgebraError, PreconditionViolation, ProjectionMismatchError
)
from mapalgebra.core.projection import (
    Point, Projection, Sphere, LatLng, WebMercator,
    SPHERE, LATLNG, WEB_MERCATOR, reproject
)
from mapalgebra.core.raster import (
    Raster, Strategy, constant, from_function, from_array, from_vector,
    transform, combine, zip_with, materialize
)
from mapalgebra.core.bands import RGBARaster, from_rgba, from_gray
from mapalgebra.operations.local import (
    classify, lmin, lmax, add, subtract, multiply, divide, signum
)
from mapalgebra.operations.reducers import (
    collect, mean, variance, variety, majority, minority
)
