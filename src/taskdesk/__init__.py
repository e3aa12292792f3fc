"""
taskdesk: console front end for a users/tasks REST backend.

Packages:
- api: async HTTP resource client (users, tasks)
- core: data models, form helpers, list-manager view-models
- cli: composition root, slash commands, entrypoint
- connectors: console REPL
"""
