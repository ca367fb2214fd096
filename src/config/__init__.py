"""Project configuration: the Avail extension and project file loading."""
