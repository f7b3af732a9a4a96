"""
Sproutling: adaptive review scheduling for early learners.

Tracks how well a child knows each learning fact (a number, a letter, a word),
schedules re-practice with a gentle SM-2 variant and blends due reviews into
each lesson.
"""

__version__ = "1.0.0"
