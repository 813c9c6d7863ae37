from .connection import ConnectionScope
from .tracker import DomainHandle, ResourceTracker
from .lookup import DomainLookup
