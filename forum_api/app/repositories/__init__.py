"""Persistence layer.  Repositories run queries on a connection owned by the caller."""
