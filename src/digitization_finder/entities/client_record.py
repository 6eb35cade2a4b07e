"""Client catalog domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ClientRecord:
    """One row of the client catalog.

    Attributes:
        space_id: Workspace identifier the folder belongs to
        space_name: Human-readable workspace name
        folder_name: Client name, the only field fuzzy matching looks at
        folder_id: Stable client identifier
    """

    space_id: str
    space_name: str
    folder_name: str
    folder_id: str
