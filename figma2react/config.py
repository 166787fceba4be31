"""設定檔載入、基本驗證與 GenerateOptions 解析."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import CONFIG_MISSING_TOKEN, ConfigError

DEFAULT_CONFIG_PATH = "figma2react.config.json"

# 已知有效的頂層欄位
_KNOWN_TOP_KEYS = {"figma", "output", "tokens", "naming", "assets"}

# 各區塊已知欄位（用於拼字提示）
_KNOWN_SECTION_KEYS = {
    "figma": {"personalAccessToken", "fileKey"},
    "output": {"dir", "styleStrategy", "themed", "stories", "onConflict"},
    "tokens": {"path"},
    "naming": {"componentPrefix"},
    "assets": {"imageDir", "iconMapping"},
}

_VALID_STRATEGIES = {"tailwind", "css-modules", "styled-components", "emotion", "emotion-css"}
_VALID_CONFLICT = {"merge", "overwrite", "skip"}
_BOOLEAN_KEYS = ("themed", "stories")


def _warn(msg: str) -> None:
    print(f"   ⚠️  [config] {msg}")


def validate_config(cfg: dict) -> None:
    """對 config 做基本欄位驗證，印出警告但不拋例外。"""
    if not cfg:
        return

    # 頂層未知欄位
    for key in cfg:
        if key not in _KNOWN_TOP_KEYS:
            known = ", ".join(sorted(_KNOWN_TOP_KEYS))
            _warn(f"未知頂層欄位 '{key}'（已知欄位：{known}）")

    # 各區塊欄位
    for section, known_keys in _KNOWN_SECTION_KEYS.items():
        section_cfg = cfg.get(section, {})
        if not isinstance(section_cfg, dict):
            _warn(f"'{section}' 應為物件，目前是 {type(section_cfg).__name__}")
            continue
        for key in section_cfg:
            if key not in known_keys:
                known = ", ".join(sorted(known_keys))
                _warn(f"[{section}] 未知欄位 '{key}'（已知欄位：{known}）")

    output = cfg.get("output", {})
    if not isinstance(output, dict):
        return

    # output.styleStrategy 值驗證
    strategy = output.get("styleStrategy")
    if strategy and strategy not in _VALID_STRATEGIES:
        valid = ", ".join(sorted(_VALID_STRATEGIES))
        _warn(f"output.styleStrategy '{strategy}' 不在已知值中（{valid}）")

    # output.onConflict 值驗證
    conflict = output.get("onConflict")
    if conflict and conflict not in _VALID_CONFLICT:
        valid = ", ".join(sorted(_VALID_CONFLICT))
        _warn(f"output.onConflict '{conflict}' 不在已知值中（{valid}）")

    for key in _BOOLEAN_KEYS:
        val = output.get(key)
        if val is not None and not isinstance(val, bool):
            _warn(f"output.{key} 應為布林值，目前是 {type(val).__name__}")

    if strategy == "tailwind" and output.get("themed"):
        _warn("output.themed 對 tailwind 無效（tailwind 直接使用 token class），將忽略")

    # tokens.path 存在性提示
    tokens_path = (cfg.get("tokens") or {}).get("path") if isinstance(cfg.get("tokens"), dict) else None
    if tokens_path and not Path(tokens_path).exists():
        _warn(f"tokens.path '{tokens_path}' 檔案不存在，將使用預設 tokens")


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """載入 JSON 設定檔，不存在則回傳空 dict；存在則做基本驗證。"""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        cfg: Any = json.load(f)
    if not isinstance(cfg, dict):
        print(f"   ⚠️  [config] '{config_path}' 格式錯誤，應為 JSON 物件，回傳空設定。")
        return {}
    validate_config(cfg)
    return cfg


# ════════════════════════════════════════════════════════════
# GenerateOptions
# ════════════════════════════════════════════════════════════

@dataclass
class GenerateOptions:
    output_dir: str = "src/components"
    style_strategy: str = "tailwind"
    themed: bool = False
    stories: bool = False
    on_conflict: str = "merge"
    tokens_path: Optional[str] = None
    component_prefix: str = ""
    image_dir: str = "./assets/images"
    icon_mapping: Dict[str, str] = field(default_factory=dict)
    include_warnings: bool = True
    dry_run: bool = False


# override key → (config section, config key)
_OPTION_SOURCES = {
    "output_dir": ("output", "dir"),
    "style_strategy": ("output", "styleStrategy"),
    "themed": ("output", "themed"),
    "stories": ("output", "stories"),
    "on_conflict": ("output", "onConflict"),
    "tokens_path": ("tokens", "path"),
    "component_prefix": ("naming", "componentPrefix"),
    "image_dir": ("assets", "imageDir"),
    "icon_mapping": ("assets", "iconMapping"),
}


def resolve_options(cfg: Optional[dict] = None, overrides: Optional[dict] = None) -> GenerateOptions:
    """config 值 → GenerateOptions；overrides（通常來自 CLI 參數）中非 None 的值優先."""
    cfg = cfg or {}
    overrides = overrides or {}
    options = GenerateOptions()
    for attr, (section, key) in _OPTION_SOURCES.items():
        section_cfg = cfg.get(section)
        if isinstance(section_cfg, dict) and section_cfg.get(key) is not None:
            setattr(options, attr, section_cfg[key])
    for attr, value in overrides.items():
        if value is None:
            continue
        if not hasattr(options, attr):
            raise ConfigError(f"unknown option '{attr}'")
        setattr(options, attr, value)

    if options.style_strategy not in _VALID_STRATEGIES:
        valid = ", ".join(sorted(_VALID_STRATEGIES))
        raise ConfigError(f"styleStrategy '{options.style_strategy}' 不在已知值中（{valid}）")
    if options.on_conflict not in _VALID_CONFLICT:
        raise ConfigError(f"onConflict '{options.on_conflict}' 不在已知值中")
    if options.style_strategy == "tailwind":
        options.themed = False
    return options


def resolve_token(cfg: Optional[dict] = None) -> str:
    """Figma token：config figma.personalAccessToken 優先，其次環境變數 FIGMA_TOKEN."""
    figma_cfg = (cfg or {}).get("figma") or {}
    token = figma_cfg.get("personalAccessToken") or os.environ.get("FIGMA_TOKEN")
    if not token:
        raise ConfigError(
            "Figma token 未設定：請設定 FIGMA_TOKEN 環境變數或 figma.personalAccessToken",
            code=CONFIG_MISSING_TOKEN,
        )
    return token
