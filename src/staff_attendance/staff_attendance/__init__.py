"""Staff attendance package.

Feature modules (attendance, shifts, team_members, reports, ...) keep a thin
Flask controller layer over service and repository layers. The attendance
state machine and shift-variance engine live under ``attendance`` and
``variance``; debounced autosave under ``autosave``.
"""
