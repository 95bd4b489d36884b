"""Interactive git branch deletion tool.

Features:
- List local branches with the age of their last commit
- Pick branches to delete from a checkbox list
- Current branch is shown but never offered for deletion
- Typed yes/no confirmation before anything is deleted
- Force deletion that keeps going past individual failures
"""

__version__ = "0.1.0"
