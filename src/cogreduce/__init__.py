"""cogreduce - search for extract-method refactorings that reduce cognitive complexity."""

__version__ = "0.1.0"
