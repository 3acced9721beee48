#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for map algebra.

This package contains general-purpose helpers for timing, chunking and
parallel evaluation of raster computations.
"""
