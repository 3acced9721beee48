#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Multi-band rasters.

Decoding image files is left to other libraries (rasterio, imageio, ...).
This module only splits an already decoded pixel array into one `Raster`
per band.
"""
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union
import numpy as np

from mapalgebra.core.errors import PreconditionViolation
from mapalgebra.core.logging_config import get_module_logger
from mapalgebra.core.projection import Projection
from mapalgebra.core.raster import Raster, Strategy, from_array

# Initialize logger
logger = get_module_logger(__name__)


@dataclass(frozen=True)
class RGBARaster:
    """The four colour bands of an RGBA image, each its own raster."""
    red: Raster
    green: Raster
    blue: Raster
    alpha: Raster

    def bands(self) -> Tuple[Raster, Raster, Raster, Raster]:
        return self.red, self.green, self.blue, self.alpha

    @property
    def shape(self) -> Tuple[int, int]:
        return self.red.shape


def from_rgba(pixels: Any,
              strategy: Union[Strategy, str, None] = None,
              projection: Optional[Projection] = None) -> RGBARaster:
    """
    Split a decoded RGBA image into four single-band rasters.

    Parameters
    ----------
    pixels : array-like
        Array of shape (rows, cols, 4), channels in R, G, B, A order.
    strategy : Strategy or str, optional
        Evaluation strategy recorded on each band.
    projection : Projection, optional
        Projection tag recorded on each band.

    Returns
    -------
    RGBARaster
        One materialized raster per band.

    Raises
    ------
    PreconditionViolation
        If the array does not have four channels on its last axis.
    """
    arr = np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise PreconditionViolation(f"Expected an array of shape (rows, cols, 4), got {arr.shape}")
    logger.debug(f"Splitting {arr.shape[0]}x{arr.shape[1]} RGBA image into bands")
    red, green, blue, alpha = (
        from_array(arr[:, :, band], strategy=strategy, projection=projection) for band in range(4)
    )
    return RGBARaster(red, green, blue, alpha)


def from_gray(pixels: Any,
              strategy: Union[Strategy, str, None] = None,
              projection: Optional[Projection] = None) -> Raster:
    """Wrap a decoded single-band (rows, cols) image as a raster."""
    arr = np.asarray(pixels)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    if arr.ndim != 2:
        raise PreconditionViolation(f"Expected an array of shape (rows, cols), got {arr.shape}")
    return from_array(arr, strategy=strategy, projection=projection)
