"""
Core modules for FrameCount.

This package contains the pure estimation logic: tier pricing,
shot name normalization, duplicate detection and the estimate state.
"""
