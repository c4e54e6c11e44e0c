"""
tasklane
Personal task manager: AI-suggested tasks, subtasks, categories and progress.
"""

__version__ = "1.0.0"
