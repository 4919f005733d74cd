"""WebAssembly 构建"""

from grammarsync.services.build.builder import WasmBuilder

__all__ = ["WasmBuilder"]
