"""
Core (transport-agnostic) layer.

Components:
- models.py: User, Task, TaskStatus and request payloads
- forms.py: form validation and display helpers
- ports.py: Protocols the view-models depend on
- state.py: ListManager view-model and AppState
"""
