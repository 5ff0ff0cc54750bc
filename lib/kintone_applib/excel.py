"""
レコード一覧のExcel出力
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, PatternFill, Border, Side, Font
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

MAX_COLUMN_WIDTH = 50
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin")
)


def format_field_value(field: Dict[str, Any]) -> Any:
    """レコードのフィールド値をセルに書き込める値に変換する"""
    field_type = field.get("type")
    value = field.get("value")

    if value is None:
        return ""
    if field_type == "SUBTABLE":
        return f"{len(value)} 行"
    if isinstance(value, dict):
        return _format_entity(value)
    if isinstance(value, list):
        return ", ".join(str(_format_entity(v)) if isinstance(v, dict) else str(v) for v in value)
    return value


def _format_entity(entity: Dict[str, Any]) -> str:
    # ユーザー・組織・グループは "name (code)"、添付ファイルは name
    if "name" in entity and "code" in entity:
        return f"{entity['name']} ({entity['code']})"
    if "name" in entity:
        return entity["name"]
    return entity.get("code", "")


def collect_field_codes(records: List[Dict[str, Any]]) -> List[str]:
    """全レコードに現れるフィールドコードを出現順に返す。$id と $revision は先頭に置く"""
    codes = []
    for record in records:
        for code in record:
            if code not in codes:
                codes.append(code)
    head = [code for code in ("$id", "$revision") if code in codes]
    return head + [code for code in codes if code not in head]


def export_records_to_excel(records: List[Dict[str, Any]], output_file: Union[str, Path],
                            field_codes: Optional[List[str]] = None, sheet_title: str = "records") -> Path:
    """レコードを1行1レコードのシートとして出力する"""
    headers = field_codes or collect_field_codes(records)

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title[:31]

    # ヘッダー行のスタイル
    header_fill = PatternFill(start_color="E6F3FF", end_color="E6F3FF", fill_type="solid")
    header_font = Font(bold=True)
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for col_idx, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment
        cell.border = THIN_BORDER

    data_alignment = Alignment(vertical="center", wrap_text=True)
    widths = {col_idx: len(str(header)) + 2 for col_idx, header in enumerate(headers, 1)}

    for row_idx, record in enumerate(records, 2):
        for col_idx, code in enumerate(headers, 1):
            value = format_field_value(record[code]) if code in record else ""
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.alignment = data_alignment
            cell.border = THIN_BORDER
            widths[col_idx] = max(widths[col_idx], len(str(value)) + 2)

    for col_idx, width in widths.items():
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width, MAX_COLUMN_WIDTH)

    if headers:
        ws.freeze_panes = "A2"
        ws.auto_filter.ref = f"A1:{get_column_letter(len(headers))}{len(records) + 1}"

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(output_path)
    logger.info(f"{len(records)} 件のレコードを {output_path} に出力しました")
    return output_path
