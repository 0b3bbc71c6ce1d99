"""
scentmap: similarity-to-embedding engine for the essential-oil catalog.

Turns pairwise similarity judgments (or descriptor-note feature vectors)
between catalog items into stable 2D coordinates for visualization.
"""
