"""Celery job definitions."""

from court_vision.jobs.analysis_tasks import analyze_video_task

__all__ = ["analyze_video_task"]
