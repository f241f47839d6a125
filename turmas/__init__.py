"""Class management server with a TCP client for students and teachers and a UDP client for administrators."""

__version__ = "0.1.0"