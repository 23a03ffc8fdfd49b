"""テキスト処理ユーティリティ"""

import math
import re
from typing import Any, Optional


def normalize_text(text: Optional[str]) -> Optional[str]:
    """
    テキストを正規化

    - 前後の空白を除去
    - 連続する空白（タブ・改行を含む）を1つの半角スペースに
    """
    if not text:
        return None

    text = re.sub(r"\s+", " ", text)
    text = text.strip()

    return text if text else None


def parse_float(value: Any) -> Optional[float]:
    """
    数値または数値文字列をfloatに変換

    Nominatimは座標を文字列で返し、メンバーディレクトリは数値・文字列が混在する。

    Args:
        value: 変換対象

    Returns:
        Optional[float]: 変換結果（空値・非数値・非有限値の場合はNone）
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(number):
        return None

    return number


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    テキストを指定長で切り詰め

    Args:
        text: 対象テキスト
        max_length: 最大文字数
        suffix: 切り詰め時の接尾辞

    Returns:
        切り詰められたテキスト
    """
    if not text or len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix
