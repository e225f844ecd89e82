"""xbuilder: cross-compile a Go application for a matrix of os/arch targets and package the results."""

__version__ = "0.3.3"
