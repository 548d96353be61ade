"""
Worker module for the digest service.

Celery application, beat schedule and tasks for the scheduled feed refresh
and background summarization.
"""
