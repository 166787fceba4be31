#!/usr/bin/env python3
"""
figma2react CLI — Figma design tree → React components

  figma2react convert design.json --style tailwind        # 本地 JSON → 元件
  figma2react convert --file-key KEY --node 1:2           # 直接從 Figma 讀取
  figma2react tokens --file-key KEY --out tokens.json     # variables → token 表
  figma2react preview design.json                         # 預覽 IR 樹
  figma2react watch design.json                           # JSON 變更時自動重新轉換
"""

import argparse
import json
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from . import __version__
from .config import DEFAULT_CONFIG_PATH, load_config, resolve_options, resolve_token
from .errors import ConfigError, Diagnostics, Figma2ReactError, format_error
from .figma_client import FigmaClient, parse_figma_url
from .ir_builder import IRBuilder
from .log import setup_logger
from .naming import preview_tree
from .pipeline import convert_document, find_component_roots, write_files
from .tokens import save_tokens, tokens_from_variables
from .variants import parse_component_registry

logger = logging.getLogger(__name__)

_WATCHED_EXTENSIONS = (".json",)


def _print_diagnostics(diagnostics: Diagnostics, limit: int = 20) -> None:
    for d in diagnostics.errors[:limit]:
        print(f"   ❌ {d}")
    for d in diagnostics.warnings[:limit]:
        print(f"   ⚠️  {d}")
    hidden = max(0, len(diagnostics.errors) - limit) + max(0, len(diagnostics.warnings) - limit)
    if hidden:
        print(f"   … {hidden} more (use --verbose for the full log)")
    print(f"   📊 {diagnostics.summary()}")


# ════════════════════════════════════════════════════════════
# Document loading
# ════════════════════════════════════════════════════════════

def _file_key(args, config: dict) -> Optional[str]:
    key = getattr(args, "file_key", None)
    if key and key.startswith("http"):
        key, node_id = parse_figma_url(key)
        if node_id and hasattr(args, "node") and not args.node:
            args.node = [node_id]
    return key or config.get("figma", {}).get("fileKey")


def load_document(args, config: dict) -> dict:
    """本地 JSON（GET /files 回應或單一節點）或透過 API 讀取."""
    source = getattr(args, "input", None)
    if source:
        with open(source, "r", encoding="utf-8") as f:
            return json.load(f)

    file_key = _file_key(args, config)
    if not file_key:
        raise ConfigError("請提供 JSON 檔案路徑，或使用 --file-key / config 的 figma.fileKey")
    client = FigmaClient(resolve_token(config))
    print(f"📥 Fetching Figma file: {file_key}")
    data = client.get_file(file_key)
    print("   ✅ Fetched Figma file")
    return data


def _options(args, config: dict):
    return resolve_options(config, {
        "output_dir": args.out,
        "style_strategy": args.style,
        "themed": True if args.themed else None,
        "stories": True if args.stories else None,
        "on_conflict": args.on_conflict,
        "tokens_path": args.tokens,
        "dry_run": args.dry_run,
    })


# ════════════════════════════════════════════════════════════
# Commands
# ════════════════════════════════════════════════════════════

def run_convert(args, config: dict) -> int:
    """convert 一次：讀文件 → 產生 → 寫檔；回傳 exit code."""
    options = _options(args, config)
    document = load_document(args, config)

    print(f"🎨 Converting with '{options.style_strategy}'{' (themed)' if options.themed else ''}...")
    result = convert_document(document, options, node_ids=args.node)
    if not result.components:
        print("   ⚠️  No components found (use --node to pick a frame)")

    actions = write_files(result, options.output_dir, options.on_conflict, dry_run=options.dry_run)
    for path, action in actions.items():
        icon = {"skip": "⏭️ ", "merge": "🔀", "failed": "❌"}.get(action, "📄")
        print(f"   {icon} {action:<9} {path}")
    if options.dry_run:
        print("   (dry run, nothing written)")

    _print_diagnostics(result.diagnostics)
    if result.diagnostics.ok:
        print(f"✅ Generated {len(result.components)} component(s) into {options.output_dir}")
        return 0
    print("❌ Finished with errors")
    return 1


def cmd_convert(args, config: dict) -> int:
    return run_convert(args, config)


def cmd_tokens(args, config: dict) -> int:
    """Figma variables → token JSON."""
    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            response = json.load(f)
    else:
        file_key = _file_key(args, config)
        if not file_key:
            print("❌ 請使用 --file-key 或在 config 的 figma.fileKey 設定 Figma 檔案 key。")
            return 1
        print(f"📥 Fetching variables: {file_key}")
        response = FigmaClient(resolve_token(config)).get_variables(file_key)

    tokens = tokens_from_variables(response)
    save_tokens(tokens, args.out)
    counts = ", ".join(f"{len(getattr(tokens, k))} {k}" for k in ("colors", "spacing", "border_radius", "shadows"))
    print(f"✅ Saved tokens to {args.out} ({counts})")
    return 0


def cmd_preview(args, config: dict) -> int:
    """預覽 IR 樹."""
    document = load_document(args, config)
    root = document.get("document", document)
    builder = IRBuilder(registry=parse_component_registry(document))

    if args.node:
        targets = [builder.build_by_id(root, node_id) for node_id in args.node]
    else:
        targets = [builder.build(raw) for raw in find_component_roots(root)]

    for ir in targets:
        if ir is None:
            continue
        print(f"👁️  {ir.name}")
        print(preview_tree(ir))
    _print_diagnostics(builder.diagnostics)
    return 0


class ChangeHandler(FileSystemEventHandler):
    """檔案變更事件處理器：trailing debounce，連續存檔只在最後一次之後重跑一次."""

    def __init__(self, callback, debounce: float = 1.0, target: Optional[str] = None):
        self.callback = callback
        self.debounce_seconds = debounce
        # 只監看特定檔案（None = 目錄內所有 .json）
        self.target = str(Path(target).resolve()) if target else None
        self._timer: Optional[threading.Timer] = None
        self._timer_lock = threading.Lock()
        # 同一時間只跑一次轉換
        self._run_lock = threading.Lock()

    def on_modified(self, event):
        if event.is_directory:
            return
        if not event.src_path.endswith(_WATCHED_EXTENSIONS):
            return
        if self.target and str(Path(event.src_path).resolve()) != self.target:
            return
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._fire, args=(event.src_path,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, src_path: str) -> None:
        print(f"\n🔄 File changed: {src_path}")
        with self._run_lock:
            try:
                self.callback()
            except Exception:
                # Timer 執行緒裡的例外沒有人接，至少要留下 log
                logger.exception("watch: regeneration failed for %s", src_path)

    def cancel(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


def cmd_watch(args, config: dict) -> int:
    """Watch: 監聽設計 JSON 變更並自動重新轉換."""
    source = Path(args.input)
    if not source.exists():
        print(f"❌ 找不到檔案 '{source}'")
        return 1
    print(f"👀 Watching '{source}' for changes...")
    print("   Press Ctrl+C to stop.")

    def convert_once():
        try:
            run_convert(args, config)
        except (Figma2ReactError, ValueError, OSError) as e:
            print(f"   ❌ {format_error(e)}")

    # 初始執行一次
    convert_once()

    event_handler = ChangeHandler(convert_once, debounce=args.debounce, target=str(source))
    observer = Observer()
    observer.schedule(event_handler, path=str(source.resolve().parent), recursive=False)
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Stopping watch...")
        observer.stop()
    finally:
        event_handler.cancel()
        observer.join()
    return 0


# ════════════════════════════════════════════════════════════
# Entry
# ════════════════════════════════════════════════════════════

def _add_generate_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--node", action="append", help="Node id to convert (repeatable), e.g. 1:2")
    p.add_argument("--file-key", help="Figma file key or URL (when no JSON input is given)")
    p.add_argument("--out", help="Output directory (default: output.dir or src/components)")
    p.add_argument("--style", choices=["tailwind", "css-modules", "styled-components", "emotion", "emotion-css"],
                   help="Style strategy")
    p.add_argument("--themed", action="store_true", help="Reference theme tokens instead of raw values")
    p.add_argument("--stories", action="store_true", help="Also emit Storybook stories")
    p.add_argument("--on-conflict", choices=["merge", "overwrite", "skip"], help="Existing file policy")
    p.add_argument("--tokens", help="Design token JSON path")
    p.add_argument("--dry-run", action="store_true", help="Report actions without writing")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="figma2react",
        description="figma2react: Figma design tree → React components",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config path")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    convert_p = sub.add_parser("convert", help="Design JSON / Figma file → React components",
        epilog="Examples:\n  figma2react convert design.json\n  figma2react convert design.json --style css-modules --themed\n  figma2react convert --file-key ABC123 --node 12:34 --stories",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    convert_p.add_argument("input", nargs="?", help="Local Figma JSON (GET /files response or a node)")
    _add_generate_args(convert_p)

    tokens_p = sub.add_parser("tokens", help="Figma variables → design token JSON",
        epilog="Examples:\n  figma2react tokens --file-key ABC123\n  figma2react tokens variables.json --out theme/tokens.json",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    tokens_p.add_argument("input", nargs="?", help="Local variables response JSON")
    tokens_p.add_argument("--file-key", help="Figma file key or URL")
    tokens_p.add_argument("--out", default="tokens.json", help="Output path")

    preview_p = sub.add_parser("preview", help="Print the IR tree",
        epilog="Examples:\n  figma2react preview design.json\n  figma2react preview design.json --node 12:34",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    preview_p.add_argument("input", nargs="?", help="Local Figma JSON")
    preview_p.add_argument("--node", action="append", help="Node id to preview (repeatable)")
    preview_p.add_argument("--file-key", help="Figma file key or URL")

    watch_p = sub.add_parser("watch", help="Re-convert when the design JSON changes",
        epilog="Examples:\n  figma2react watch design.json\n  figma2react watch design.json --style styled-components",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    watch_p.add_argument("input", help="Local Figma JSON to watch")
    watch_p.add_argument("--debounce", type=float, default=1.0, help="Seconds between re-runs")
    _add_generate_args(watch_p)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)
    config = load_config(args.config)

    commands = {
        "convert": cmd_convert,
        "tokens": cmd_tokens,
        "preview": cmd_preview,
        "watch": cmd_watch,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 0
    try:
        return command(args, config)
    except Figma2ReactError as e:
        print(f"❌ {format_error(e)}")
        return 1
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
