"""
figma2react — Figma design tree → React components（Python 管線）

節點樹經 normalizer 轉成中立 IR，再由可替換的樣式 adapter 產生元件，
重新產生時保留使用者區塊。
"""

__version__ = "0.1.0"

from .errors import (
    AuthError,
    ConfigError,
    Diagnostic,
    Diagnostics,
    Figma2ReactError,
    FigmaAPIError,
    FileWriteError,
    RateLimitError,
    format_error,
    with_retry,
)
from .ir import DesignTokens, IRNode
from .ir_builder import IRBuilder, save_ir
from .tokens import DEFAULT_TOKENS, load_tokens, merge_tokens, tokens_from_variables
from .adapters import ThemedAdapter, create_adapter
from .markup import MarkupBuilder
from .merge import extract_blocks, merge, resolve_update_strategy, write_generated_file
from .generator import ComponentGenerator, GeneratedComponent, GeneratedFile
from .config import GenerateOptions, load_config, resolve_options, validate_config
from .figma_client import FigmaClient
from .pipeline import ConversionResult, convert_document, write_files

__all__ = [
    "__version__",
    "AuthError",
    "ConfigError",
    "Diagnostic",
    "Diagnostics",
    "Figma2ReactError",
    "FigmaAPIError",
    "FileWriteError",
    "RateLimitError",
    "format_error",
    "with_retry",
    "DesignTokens",
    "IRNode",
    "IRBuilder",
    "save_ir",
    "DEFAULT_TOKENS",
    "load_tokens",
    "merge_tokens",
    "tokens_from_variables",
    "ThemedAdapter",
    "create_adapter",
    "MarkupBuilder",
    "extract_blocks",
    "merge",
    "resolve_update_strategy",
    "write_generated_file",
    "ComponentGenerator",
    "GeneratedComponent",
    "GeneratedFile",
    "GenerateOptions",
    "load_config",
    "resolve_options",
    "validate_config",
    "FigmaClient",
    "ConversionResult",
    "convert_document",
    "write_files",
]
