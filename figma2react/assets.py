"""
assets.py — 需要匯出的圖片 / icon 節點

collect_assets() 只看 IR（image / icon kind），不碰網路；
download_assets() 才透過 FigmaClient.get_images() 取得 URL 並存檔。
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

import requests

from .errors import Figma2ReactError
from .ir import IRNode
from .naming import to_kebab_case, to_pascal_case

logger = logging.getLogger(__name__)

BATCH_SIZE = 50

_SVG_ATTR_RE = re.compile(r"\b(class|fill-rule|clip-rule|stroke-width|stroke-linecap|stroke-linejoin)=")
_SVG_ATTR_JSX = {
    "class": "className",
    "fill-rule": "fillRule",
    "clip-rule": "clipRule",
    "stroke-width": "strokeWidth",
    "stroke-linecap": "strokeLinecap",
    "stroke-linejoin": "strokeLinejoin",
}


@dataclass
class AssetRef:
    node_id: str
    source_id: str
    name: str
    kind: str       # image | icon
    path: str       # 相對路徑，例如 ./assets/images/hero.png

    @property
    def format(self) -> str:
        return "svg" if self.kind == "icon" else "png"


def collect_assets(root: IRNode, image_dir: str = "./assets/images", icon_dir: str = "./assets/icons") -> List[AssetRef]:
    assets: List[AssetRef] = []
    seen = set()
    for node in root.walk():
        if node.kind not in ("image", "icon") or node.source_id in seen:
            continue
        seen.add(node.source_id)
        slug = to_kebab_case(node.name) or node.kind
        if node.kind == "icon":
            path = f"{icon_dir.rstrip('/')}/{slug}.svg"
        else:
            path = f"{image_dir.rstrip('/')}/{slug}.png"
        assets.append(AssetRef(node.id, node.source_id, node.name, node.kind, path))
    return assets


def asset_paths(assets: Iterable[AssetRef]) -> Dict[str, str]:
    """source id → 圖片路徑（只含 image）."""
    return {a.source_id: a.path for a in assets if a.kind == "image"}


def icon_mapping_from_assets(assets: Iterable[AssetRef], suffix: str = "Icon") -> Dict[str, str]:
    """source id → icon 元件名稱：'arrow right' → ArrowRightIcon."""
    mapping = {}
    for asset in assets:
        if asset.kind != "icon":
            continue
        name = to_pascal_case(asset.name) or "Generic"
        if not name.endswith(suffix):
            name += suffix
        mapping[asset.source_id] = name
    return mapping


def svg_to_component(svg: str, component_name: str) -> str:
    """SVG 原始碼 → React icon 元件（屬性轉 JSX 寫法，props 展開到 <svg>）."""
    jsx = _SVG_ATTR_RE.sub(lambda m: f"{_SVG_ATTR_JSX[m.group(1)]}=", svg.strip())
    jsx = re.sub(r"<svg\b", "<svg {...props}", jsx, count=1)
    body = "\n".join(f"    {line}" for line in jsx.splitlines())
    return (
        "import type { SVGProps } from 'react';\n\n"
        f"export function {component_name}(props: SVGProps<SVGSVGElement>) {{\n"
        "  return (\n"
        f"{body}\n"
        "  );\n"
        "}\n"
    )


def download_assets(client, file_key: str, assets: List[AssetRef], output_dir: str) -> List[AssetRef]:
    """批次向 Figma 要 render URL 後下載；單批失敗只記 log，不中斷其他批."""
    saved: List[AssetRef] = []
    for fmt in ("svg", "png"):
        group = [a for a in assets if a.format == fmt]
        for start in range(0, len(group), BATCH_SIZE):
            batch = group[start:start + BATCH_SIZE]
            try:
                response = client.get_images(file_key, [a.source_id for a in batch], format=fmt)
            except Figma2ReactError as e:
                logger.warning("%s export failed for %d asset(s): %s", fmt, len(batch), e)
                continue
            urls = response.get("images") or {}
            for asset in batch:
                url = urls.get(asset.source_id)
                if not url:
                    logger.warning("no render URL for %s (%s)", asset.name, asset.source_id)
                    continue
                try:
                    _save(url, Path(output_dir) / asset.path)
                except (requests.RequestException, OSError) as e:
                    logger.warning("download failed for %s: %s", asset.name, e)
                    continue
                saved.append(asset)
    logger.info("saved %d/%d asset(s)", len(saved), len(assets))
    return saved


def _save(url: str, path: Path) -> None:
    resp = requests.get(url, timeout=30)
    resp.raise_for_status()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(resp.content)
