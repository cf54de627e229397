"""
Overlap Analysis Engine
=======================
The computational stages of the overlap analysis.

Why is this file needed?
------------------------
1. Geometry: It orders the frames along the slice normal and clusters them
   into logical positions.
2. Comparison: It compares the packed pixel data of co-located frames.
3. Grouping: It derives the overlap matrix and the non-overlapping segment groups.

Note: This package should be pure Python/NumPy and never parses files itself.
"""
