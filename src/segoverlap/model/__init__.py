"""
The MODEL layer contains pure data structures.
It has NO knowledge of how overlaps are computed.
It deals with Geometry, the Segmentation source and the cached analysis State.
"""
