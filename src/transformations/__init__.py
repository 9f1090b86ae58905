"""Structural transformations of upstream source trees.

Each transformation converts one upstream application layout into the
library layout consumed by the host project's extension framework.
"""
