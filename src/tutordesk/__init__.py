"""Tutordesk - block notes, lessons and TOP 3 priorities for tutors."""

__version__ = "0.1.0"
