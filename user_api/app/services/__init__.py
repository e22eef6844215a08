"""
Service layer abstraction.

Each service encapsulates business logic for a domain and delegates
storage to a repository, so rules can change without touching SQL or
API handlers.
"""
