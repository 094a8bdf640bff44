"""Persistent state-synchronization channel for controllers.

``upgrader`` promotes the HTTP request, ``loop`` runs the poll-and-push
cycle, and ``connection`` adapts the WebSocket and classifies failures.
"""
