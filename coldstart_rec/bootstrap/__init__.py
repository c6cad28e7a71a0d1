"""Adaptive bootstrapping for cold-start users.

Core idea:
- Classify every (user, candidate movie) pair as lover / hater / unknown
- Score each candidate by how well it separates users with different tastes
- Recursively split users on the best candidate to get a ternary question tree
- Flatten the tree level by level for the elicitation flow
"""
