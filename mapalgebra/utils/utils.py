#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for map algebra.

This module provides common utility functions used when evaluating rasters,
including timing, grid partitioning and parallel processing.
"""
import numpy as np
import time
import functools
from typing import Callable, Any, List, Tuple, Optional
from tqdm import tqdm
from joblib import Parallel, delayed

from mapalgebra.core.config import PERFORMANCE_CONFIG, N_JOBS
from mapalgebra.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.
    
    Parameters
    ----------
    func : Callable
        Function to time.
        
    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logger.debug(f"Function {func.__name__} took {elapsed:.2f} seconds to run")
        return result
    return wrapper


def chunk_iterator(shape: Tuple[int, int], chunk_size: int = 1024) -> List[List[Tuple[slice, slice]]]:
    """
    Generate chunk slices for processing large grids.
    
    Parameters
    ----------
    shape : tuple
        (rows, cols) of the grid to chunk. Both must be positive.
    chunk_size : int, optional
        Approximate side length of chunks, by default 1024.
        
    Returns
    -------
    List[List[Tuple[slice, slice]]]
        Chunks laid out as a grid: one inner list per band of rows, each
        holding the (row_slice, col_slice) pairs of that band from left
        to right.
    """
    rows, cols = shape
    row_chunks = max(1, rows // chunk_size)
    col_chunks = max(1, cols // chunk_size)
    
    row_split = np.array_split(np.arange(rows), row_chunks)
    col_split = np.array_split(np.arange(cols), col_chunks)
    
    return [
        [(slice(int(r[0]), int(r[-1]) + 1), slice(int(c[0]), int(c[-1]) + 1)) for c in col_split]
        for r in row_split
    ]


def parallel_apply(
    func: Callable, 
    iterable: List[Any], 
    n_jobs: Optional[int] = None, 
    prefer: Optional[str] = None, 
    progress: Optional[bool] = None,
    **kwargs
) -> List[Any]:
    """
    Apply a function to an iterable in parallel.
    
    Parameters
    ----------
    func : Callable
        Function to apply.
    iterable : List[Any]
        Items to process.
    n_jobs : int, optional
        Number of jobs. If None, uses N_JOBS from config.
    prefer : str, optional
        'processes' or 'threads'. If None, uses PERFORMANCE_CONFIG.
    progress : bool, optional
        Whether to show a progress bar. If None, uses PERFORMANCE_CONFIG.
    **kwargs
        Additional arguments to pass to the function.
        
    Returns
    -------
    List[Any]
        Results of applying the function to each item, in input order.
    """
    if n_jobs is None:
        n_jobs = N_JOBS
    if prefer is None:
        prefer = PERFORMANCE_CONFIG.get("prefer", "threads")
    if progress is None:
        progress = PERFORMANCE_CONFIG.get("progress", False)
    
    # Check if parallelism is enabled
    if not PERFORMANCE_CONFIG.get("use_parallel", True) or n_jobs == 1:
        logger.debug(f"Running {len(iterable)} tasks sequentially")
        if progress:
            iterable = tqdm(iterable, desc=f"Running {getattr(func, '__name__', 'task')}")
        return [func(item, **kwargs) for item in iterable]
    
    logger.debug(f"Running {len(iterable)} tasks in parallel with {n_jobs} jobs")
    results = Parallel(n_jobs=n_jobs, prefer=prefer, verbose=10 if progress else 0)(
        delayed(func)(item, **kwargs) for item in iterable
    )
    
    return results
