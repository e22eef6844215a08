"""
Repository layer.

Repositories own all SQL.  Services call them with schema objects and
get schema objects back, so business logic never touches the
database driver directly.
"""
