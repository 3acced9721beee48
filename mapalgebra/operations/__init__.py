#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Map algebra operations on rasters.

This package contains the local operations, evaluated independently at each
cell, and the reducers that summarize a collection of rasters cell by cell.
"""
