"""hostprov — provision a single machine into a running service host."""

__version__ = "0.1.0"
