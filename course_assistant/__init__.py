"""Course information assistant for the provincial job-training catalog."""

__version__ = "0.1.0"
