"""
Service layer for the visa reminder feature.

Submodules are imported directly (`services.planner`, `services.dispatcher`,
`services.messages`); channels depend on `messages`, so this package does not
re-export anything.
"""
