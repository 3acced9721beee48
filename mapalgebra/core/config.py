#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for map algebra computations.

This module centralizes the parameters used when evaluating rasters and
converting points between projections, making it easier to modify settings
in one place.
"""
from typing import Dict, Any
from pathlib import Path

# General configuration
DEFAULT_STRATEGY: str = "seq"  # "seq" or "par"
CHUNK_SIZE: int = 1024  # Side length of chunks for parallel evaluation
N_JOBS: int = -1         # Number of parallel jobs (-1 = all cores)

# Path configuration
# Relative, so it resolves against the working directory, never the package
DEFAULT_OUTPUT_DIR: Path = Path("output")

# Performance tuning
PERFORMANCE_CONFIG: Dict[str, Any] = {
    "use_parallel": True,   # If False, parallel requests are evaluated sequentially
    "prefer": "threads",    # joblib backend preference: 'threads' or 'processes'
    "progress": False,      # Show a progress bar during sequential chunked evaluation
}

# Projection configuration
PROJECTION_CONFIG: Dict[str, Any] = {
    "earth_radius": 6378137.0,  # WGS84 semi-major axis, metres
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": DEFAULT_OUTPUT_DIR / "mapalgebra.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
