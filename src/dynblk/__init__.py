"""dynblk — block library generator for robot inertia matrix blocks."""

__version__ = "0.1.0"
