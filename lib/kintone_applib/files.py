import json
import logging
from pathlib import Path
from typing import Any, Union

import yaml

logger = logging.getLogger(__name__)

OUTPUT_DIR_NAME = "kintone-app-structure"


def load_payload(path: Union[str, Path], base_dir: Union[str, Path, None] = None) -> Any:
    """
    JSON または YAML のファイルを読み込む

    相対パスは base_dir (省略時はカレントディレクトリ) を基準に解決する。
    """
    file_path = Path(path)
    if not file_path.is_absolute() and base_dir is not None:
        file_path = Path(base_dir) / file_path

    if not file_path.is_file():
        raise FileNotFoundError(f"ファイルが存在しません: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        if file_path.suffix.lower() in (".yaml", ".yml"):
            try:
                return yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"YAMLの読み込みに失敗しました: {e}")
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"JSONの読み込みに失敗しました: {e}")


def unwrap(payload: Any, key: str) -> Any:
    """{"views": {...}} と {...} のどちらの形式でも中身を返す"""
    if isinstance(payload, dict) and key in payload:
        return payload[key]
    return payload


def save_json(data: Any, filename: str, output_dir: Union[str, Path]) -> Path:
    """レスポンスを整形した JSON として保存する"""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    output_path = out_dir / filename
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    logger.debug(f"JSONを保存しました: {output_path}")
    return output_path


def structure_filename(app_id, kind: str, preview: bool = False) -> str:
    """app_51_views.json / app_51_views_preview.json 形式のファイル名"""
    suffix = "_preview" if preview else ""
    return f"app_{app_id}_{kind}{suffix}.json"
