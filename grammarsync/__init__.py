"""grammarsync - tree-sitter 语法仓库拉取与构建工具"""

__version__ = "0.1.0"
