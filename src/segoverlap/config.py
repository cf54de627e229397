"""
Configuration & Constants
=========================
This module serves as the central registry for the numeric constants of the
overlap analysis.

Why is this file needed?
------------------------
1. Single source: the clustering tolerance and the frame limit are used by
   several stages and must agree.
2. Readability: the overlap matrix cell values get names instead of bare
   -1/0/1 literals scattered through the code.

Exports:
    POSITION_TOLERANCE (float): Fraction of the slice thickness below which two
        neighbouring frames count as the same logical position.
    MAX_FRAME_COUNT (int): Largest number of addressable frames (2^32 - 1).
    UNKNOWN, NO_OVERLAP, OVERLAP (int): Overlap matrix cell values.
"""

# 1% of the slice thickness, compared with strict "<"
POSITION_TOLERANCE: float = 0.01

MAX_FRAME_COUNT: int = 2**32 - 1

# Overlap matrix cells
UNKNOWN: int = -1
NO_OVERLAP: int = 0
OVERLAP: int = 1
