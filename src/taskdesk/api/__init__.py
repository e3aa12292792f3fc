"""
REST resource client.

Components:
- client.py: ApiClient (shared httpx.AsyncClient), UsersClient, TasksClient, ApiError
"""
