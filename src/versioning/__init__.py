"""Version parsing, comparison and newer-release checks."""
