"""
Service layer abstraction.

Each service encapsulates the business logic for posts.  API handlers
call services with already deserialised arguments; services talk to
the store only through ``repositories``.
"""
