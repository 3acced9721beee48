#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core functionality for map algebra.

This module contains the raster type and its evaluation strategies, the
projection model, configuration management, and logging setup.
"""
