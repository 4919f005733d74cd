"""语法仓库同步

- git.py: git 命令封装
- synchronizer.py: 清理 → clone → 固定 commit → 删除 .git
"""

from grammarsync.services.sync.git import GitClient
from grammarsync.services.sync.synchronizer import RepositorySynchronizer

__all__ = ["GitClient", "RepositorySynchronizer"]
