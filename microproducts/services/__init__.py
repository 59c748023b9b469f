"""External service integrations."""

from .store import FileStore
from .github import GitHubStore, StoreConfig
