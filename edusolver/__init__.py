"""EduSolver: homework assistant for photographed and typed problems."""

__version__ = "1.0.0"
