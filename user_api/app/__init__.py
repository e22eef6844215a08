"""
User API application package.

``core`` holds configuration, logging, database and middleware
plumbing; ``repositories``, ``services`` and ``api`` form the request
pipeline, and ``schemas`` defines the JSON payloads.
"""
