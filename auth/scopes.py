"""
OAuth scopes requested for each service the server can expose.

The manifest publishes only the scopes of the services enabled at startup.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

SHEETS_WRITE_SCOPE = 'https://www.googleapis.com/auth/spreadsheets'
DRIVE_SCOPE = 'https://www.googleapis.com/auth/drive'
DRIVE_FILE_SCOPE = 'https://www.googleapis.com/auth/drive.file'

# Ordered; the manifest lists scopes in this order
SERVICE_SCOPES: Dict[str, Tuple[str, ...]] = {
    'sheets': (SHEETS_WRITE_SCOPE,),
    'drive': (DRIVE_SCOPE, DRIVE_FILE_SCOPE),
}


def get_scopes_for_tools(services: Optional[Iterable[str]] = None) -> List[str]:
    """
    Scopes needed by the given services, de-duplicated, first occurrence first.

    Args:
        services: Service names ('sheets', 'drive'). None means every service.
            Unknown names contribute nothing.
    """
    selected = list(SERVICE_SCOPES) if services is None else list(services)

    scopes: Dict[str, None] = {}
    for service in selected:
        for scope in SERVICE_SCOPES.get(service, ()):
            scopes.setdefault(scope)

    logger.debug(f"Scopes for services {selected}: {len(scopes)}")
    return list(scopes)


SCOPES = get_scopes_for_tools()
