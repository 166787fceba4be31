"""
錯誤型別與轉換診斷

例外用於致命或呼叫端需處理的狀況；節點層級的問題則累積在 Diagnostics，
讓自動化流程可以直接斷言「零警告」而不必去解析 log。
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

FIGMA_API_ERROR = "FIGMA_API_ERROR"
RATE_LIMIT = "RATE_LIMIT"
NODE_NOT_FOUND = "NODE_NOT_FOUND"
PARSE_FAILED = "PARSE_FAILED"
STYLE_UNSUPPORTED = "STYLE_UNSUPPORTED"
FILE_WRITE_FAILED = "FILE_WRITE_FAILED"
AUTH_FAILED = "AUTH_FAILED"
CONFIG_MISSING_TOKEN = "CONFIG_MISSING_TOKEN"
CONFIG_INVALID = "CONFIG_INVALID"
UNTERMINATED_BLOCK = "UNTERMINATED_BLOCK"


class Figma2ReactError(Exception):
    code = FIGMA_API_ERROR

    def __init__(self, message: str = "", code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class FigmaAPIError(Figma2ReactError):
    code = FIGMA_API_ERROR

    def __init__(self, message: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RateLimitError(Figma2ReactError):
    code = RATE_LIMIT

    def __init__(self, message: str = "", retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class AuthError(Figma2ReactError):
    code = AUTH_FAILED


class NodeNotFoundError(Figma2ReactError):
    code = NODE_NOT_FOUND

    def __init__(self, node_id: str):
        super().__init__(f"node {node_id} not found")
        self.node_id = node_id


class NodeParseError(Figma2ReactError):
    code = PARSE_FAILED

    def __init__(self, node_id: str, reason: str):
        super().__init__(f"failed to parse node {node_id}: {reason}")
        self.node_id = node_id
        self.reason = reason


class FileWriteError(Figma2ReactError):
    code = FILE_WRITE_FAILED

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot write {path}: {reason}")
        self.path = path


class ConfigError(Figma2ReactError):
    code = CONFIG_INVALID


def format_error(exc: Exception) -> str:
    """將錯誤轉為給人看的一行訊息."""
    if isinstance(exc, RateLimitError):
        wait = f"，{exc.retry_after:g}s 後再試" if exc.retry_after else ""
        return f"Figma API 請求過於頻繁（rate limit）{wait}"
    if isinstance(exc, AuthError):
        return "Figma token 無效或無權限存取此檔案（401/403）"
    if isinstance(exc, FigmaAPIError):
        if exc.status == 404:
            return "找不到 Figma 檔案或節點（404），請確認 file key / node id"
        return f"Figma API 錯誤 ({exc.status}): {exc.message}"
    if isinstance(exc, Figma2ReactError):
        if exc.code == CONFIG_MISSING_TOKEN:
            return "請設定 FIGMA_TOKEN 環境變數，或在設定檔 figma.personalAccessToken 設定"
        return f"[{exc.code}] {exc.message}"
    return str(exc)


# ════════════════════════════════════════════════════════════
# Diagnostics
# ════════════════════════════════════════════════════════════

@dataclass
class Diagnostic:
    code: str
    message: str
    node_id: Optional[str] = None

    def __str__(self) -> str:
        where = f" ({self.node_id})" if self.node_id else ""
        return f"[{self.code}]{where} {self.message}"


@dataclass
class Diagnostics:
    """一次轉換的診斷結果，與產出檔案分開回傳."""
    warnings: List[Diagnostic] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)
    fallback_count: int = 0

    def warn(self, code: str, message: str, node_id: Optional[str] = None) -> None:
        logger.warning("%s: %s", code, message)
        self.warnings.append(Diagnostic(code, message, node_id))

    def error(self, code: str, message: str, node_id: Optional[str] = None) -> None:
        logger.error("%s: %s", code, message)
        self.errors.append(Diagnostic(code, message, node_id))

    def unsupported(self, feature: str, node_id: Optional[str] = None) -> None:
        self.warn(STYLE_UNSUPPORTED, f"{feature} is not representable, dropped", node_id)

    def fallback(self, what: str = "") -> None:
        # 非錯誤：arbitrary value 的品質訊號
        self.fallback_count += 1
        logger.debug("token fallback: %s", what)

    def merge_from(self, other: "Diagnostics") -> None:
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)
        self.fallback_count += other.fallback_count

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def clean(self) -> bool:
        return not self.errors and not self.warnings

    def summary(self) -> str:
        return (
            f"{len(self.warnings)} warning(s), {len(self.errors)} error(s), "
            f"{self.fallback_count} token fallback(s)"
        )


# ════════════════════════════════════════════════════════════
# Retry
# ════════════════════════════════════════════════════════════

def with_retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    max_delay: float = 60.0,
) -> T:
    """以指數退避重試；rate limit 時優先採用伺服器提供的等待秒數，驗證失敗不重試.

    每次等待最多 max_delay 秒（含 Retry-After）。
    """
    attempt = 0
    while True:
        try:
            return fn()
        except AuthError:
            raise
        except (RateLimitError, FigmaAPIError) as e:
            if attempt >= max_retries:
                raise
            if isinstance(e, FigmaAPIError) and e.status is not None and 400 <= e.status < 500:
                raise
            if isinstance(e, RateLimitError) and e.retry_after:
                delay = e.retry_after
            else:
                delay = base_delay * (2 ** attempt)
            delay = min(delay, max_delay)
            logger.warning("retrying after %s (%.1fs, attempt %d/%d)", e.code, delay, attempt + 1, max_retries)
            sleep(delay)
            attempt += 1
