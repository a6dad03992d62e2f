"""
todos/models.py -- Domain dataclass for the Todo resource.

Pure data container with zero logic. Persistence lives in todos/store.py;
access control lives in auth/guard.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Todo:
    """A single to-do item owned by exactly one user.

    owner_id is set at creation and never changed; it is the only field the
    authorization guard looks at. completed starts False.

    id is None before the record is written to the database.
    """

    owner_id: int
    title: str
    content: str = ""
    completed: bool = False
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
