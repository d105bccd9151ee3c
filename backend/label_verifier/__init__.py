"""Label verification service: checks declared label data against recognized label text."""

__version__ = "1.0.0"
