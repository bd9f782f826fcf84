"""
Firestore query helpers shared by the store façade and scripts.
"""

from typing import Dict


def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply an equality/range filter to a Firestore query or collection.

    Positional arguments work with both firebase_admin and the mock client;
    the SDK's deprecation warning for them does not affect results.

    Usage:
        query = where_filter(collection, "status", "==", "pending")
    """
    return query.where(field_path, op_string, value)


def snapshot_to_dict(doc) -> Dict:
    """Document snapshot → plain dict with its ID under "id"."""
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data
