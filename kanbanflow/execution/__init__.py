from .config import EngineConfig
from .queue import CommitQueue
from .session import BoardSession, Commit, PendingMutation, load_or_seed
