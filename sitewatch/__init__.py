"""Multi-object tracking and staged detection pipelines for worksite safety monitoring."""

__version__ = "0.1.0"