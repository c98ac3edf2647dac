from reviewdesk.client.base import BaseClient
from reviewdesk.client.health import HealthClient
from reviewdesk.client.search import SearchClient
from reviewdesk.client.files import FileClient
from reviewdesk.client.checklist import ChecklistClient
from reviewdesk.client.authority import RemoteAuthority

__all__ = [
    "BaseClient", "HealthClient", "SearchClient", "FileClient",
    "ChecklistClient", "RemoteAuthority",
]
