import base64
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
from urllib.parse import urlencode

import requests

from .env import KintoneCredentials, resolve_credentials

AppID = Union[str, int]

MAX_GET_RECORDS = 500
MAX_WRITE_RECORDS = 100
MAX_BULK_REQUESTS = 20
MAX_URL_LENGTH = 4096
DEFAULT_TIMEOUT = 30


class KintoneRestAPIError(Exception):
    """kintone REST API がエラーレスポンスを返した場合の例外"""

    def __init__(self, status: int, body: Optional[Dict[str, Any]] = None, text: str = ""):
        body = body or {}
        self.status = status
        self.code = body.get("code")
        self.id = body.get("id")
        self.message = body.get("message") or text or f"HTTP {status}"
        self.errors = body.get("errors")
        super().__init__(f"[{status}] [{self.code}] {self.message} ({self.id})")


class KintoneAllRecordsError(Exception):
    """一括処理の途中で失敗した場合の例外。処理済みのレコード件数を保持する"""

    def __init__(self, processed: List[Dict[str, Any]], total: int, error: Exception):
        self.processed = processed
        self.total = total
        self.error = error
        super().__init__(f"{len(processed)}/{total} 件を処理した時点でエラーが発生しました: {error}")


def flatten_params(params: Dict[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    GET パラメータを kintone のクエリ文字列形式に展開する

    >>> flatten_params({"apps": [1, 2], "preview": True})
    [('apps[0]', '1'), ('apps[1]', '2'), ('preview', 'true')]
    """
    pairs = []
    for key, value in params.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        pairs.extend(_flatten_value(name, value))
    return pairs


def _flatten_value(name: str, value: Any) -> List[Tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, bool):
        return [(name, "true" if value else "false")]
    if isinstance(value, dict):
        return flatten_params(value, name)
    if isinstance(value, (list, tuple)):
        pairs = []
        for index, item in enumerate(value):
            pairs.extend(_flatten_value(f"{name}[{index}]", item))
        return pairs
    return [(name, str(value))]


def chunked(items: List[Any], size: int) -> Iterator[List[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _require_records(records: List[Any]):
    if not records:
        raise ValueError("records が指定されていません")


class KintoneRestClient:
    def __init__(self, credentials: KintoneCredentials, session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None, timeout: float = DEFAULT_TIMEOUT):
        self.credentials = credentials
        self.base_url = credentials.base_url
        self.guest_space_id = credentials.guest_space_id
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update(self._get_auth_header(credentials))

    @staticmethod
    def _get_auth_header(credentials: KintoneCredentials) -> Dict[str, str]:
        if credentials.username and credentials.password:
            token = f"{credentials.username}:{credentials.password}"
            return {"X-Cybozu-Authorization": base64.b64encode(token.encode("utf-8")).decode("utf-8")}
        return {"X-Cybozu-API-Token": credentials.api_token or ""}

    # ─── 共通処理 ─────────────────────────────────────────────
    def _api_path(self, path: str, preview: bool = False) -> str:
        if preview:
            path = f"preview/{path}"
        if self.guest_space_id:
            return f"/k/guest/{self.guest_space_id}/v1/{path}.json"
        return f"/k/v1/{path}.json"

    def _build_url(self, path: str, preview: bool = False) -> str:
        return f"{self.base_url}{self._api_path(path, preview)}"

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 preview: bool = False, raw: bool = False, **kwargs) -> Any:
        url = self._build_url(path, preview)
        method = method.upper()
        params = {key: value for key, value in (params or {}).items() if value is not None}
        headers = {}

        if method in ("GET", "DELETE"):
            query = urlencode(flatten_params(params))
            if method == "GET" and len(url) + len(query) + 1 > MAX_URL_LENGTH:
                # URL が長すぎる場合は POST + X-HTTP-Method-Override で送信する
                headers["X-HTTP-Method-Override"] = "GET"
                method = "POST"
                kwargs["json"] = params
            elif query:
                url = f"{url}?{query}"
        elif "files" not in kwargs:
            kwargs["json"] = params

        self.logger.debug(f"リクエスト: {method} {url}")
        response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)

        if response.status_code != 200:
            try:
                body = response.json()
            except ValueError:
                body = None
            self.logger.debug(f"エラーレスポンス: {response.status_code} {response.text}")
            raise KintoneRestAPIError(response.status_code, body if isinstance(body, dict) else None,
                                      response.text)

        if raw:
            return response.content
        return response.json()

    def _get_app_setting(self, path: str, app: AppID, preview: bool = False, **params) -> Dict[str, Any]:
        params["app"] = app
        return self._request("GET", path, params, preview=preview)

    def _update_app_setting(self, path: str, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(settings)
        payload["app"] = app
        return self._request("PUT", path, payload, preview=True)

    # ─── アプリ ─────────────────────────────────────────────
    def get_app(self, app_id: AppID) -> Dict[str, Any]:
        """アプリの情報を取得する"""
        return self._request("GET", "app", {"id": app_id})

    def get_apps(self, ids: Optional[List[AppID]] = None, codes: Optional[List[str]] = None,
                 name: Optional[str] = None, space_ids: Optional[List[AppID]] = None,
                 limit: Optional[int] = None, offset: int = 0) -> Dict[str, Any]:
        """
        アプリの一覧を取得する

        limit を省略した場合は 100 件ずつ全件を取得する。
        """
        params = {"ids": ids, "codes": codes, "name": name, "spaceIds": space_ids}
        if limit is not None:
            return self._request("GET", "apps", dict(params, limit=limit, offset=offset))

        apps = []
        size = 100
        while True:
            batch = self._request("GET", "apps", dict(params, limit=size, offset=offset)).get("apps", [])
            apps.extend(batch)
            if len(batch) < size:
                break
            offset += size
        self.logger.info(f"全アプリを取得しました。総数: {len(apps)}")
        return {"apps": apps}

    def add_app(self, name: str, space: Optional[AppID] = None, thread: Optional[AppID] = None) -> Dict[str, Any]:
        """動作テスト環境にアプリを作成する"""
        payload = {"name": name}
        if space is not None:
            payload["space"] = space
            payload["thread"] = thread
        return self._request("POST", "app", payload, preview=True)

    def get_app_settings(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("app/settings", app, preview, lang=lang)

    def update_app_settings(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/settings", app, settings)

    def deploy_app(self, apps: List[Dict[str, Any]], revert: bool = False) -> Dict[str, Any]:
        """動作テスト環境の設定を運用環境へ反映する (revert=True で取り消し)"""
        return self._request("POST", "app/deploy", {"apps": apps, "revert": revert}, preview=True)

    def get_deploy_status(self, apps: List[AppID]) -> Dict[str, Any]:
        """アプリ設定の運用環境への反映状況を取得する"""
        return self._request("GET", "app/deploy", {"apps": list(apps)}, preview=True)

    # ─── フォーム ─────────────────────────────────────────────
    def get_form_fields(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("app/form/fields", app, preview, lang=lang)

    def add_form_fields(self, app: AppID, properties: Dict[str, Any], revision: Optional[str] = None) -> Dict[str, Any]:
        payload = {"app": app, "properties": properties, "revision": revision}
        return self._request("POST", "app/form/fields", payload, preview=True)

    def update_form_fields(self, app: AppID, properties: Dict[str, Any], revision: Optional[str] = None) -> Dict[str, Any]:
        payload = {"app": app, "properties": properties, "revision": revision}
        return self._request("PUT", "app/form/fields", payload, preview=True)

    def delete_form_fields(self, app: AppID, fields: List[str], revision: Optional[str] = None) -> Dict[str, Any]:
        payload = {"app": app, "fields": list(fields), "revision": revision}
        return self._request("DELETE", "app/form/fields", payload, preview=True)

    def get_form_layout(self, app: AppID, preview: bool = False) -> Dict[str, Any]:
        return self._get_app_setting("app/form/layout", app, preview)

    def update_form_layout(self, app: AppID, layout: List[Dict[str, Any]], revision: Optional[str] = None) -> Dict[str, Any]:
        payload = {"app": app, "layout": layout, "revision": revision}
        return self._request("PUT", "app/form/layout", payload, preview=True)

    # ─── 一覧・グラフ・カスタマイズ・プロセス管理 ─────────────────────
    def get_views(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("app/views", app, preview, lang=lang)

    def update_views(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/views", app, settings)

    def get_reports(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("app/reports", app, preview, lang=lang)

    def update_reports(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/reports", app, settings)

    def get_app_customize(self, app: AppID, preview: bool = False) -> Dict[str, Any]:
        return self._get_app_setting("app/customize", app, preview)

    def update_app_customize(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/customize", app, settings)

    def get_process_management(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("app/status", app, preview, lang=lang)

    def update_process_management(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/status", app, settings)

    # ─── アクセス権 ─────────────────────────────────────────────
    def get_app_acl(self, app: AppID, preview: bool = False) -> Dict[str, Any]:
        return self._get_app_setting("app/acl", app, preview)

    def update_app_acl(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/acl", app, settings)

    def get_field_acl(self, app: AppID, preview: bool = False) -> Dict[str, Any]:
        return self._get_app_setting("field/acl", app, preview)

    def update_field_acl(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("field/acl", app, settings)

    def get_record_acl(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("record/acl", app, preview, lang=lang)

    def update_record_acl(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("record/acl", app, settings)

    def evaluate_records_acl(self, app: AppID, ids: List[AppID]) -> Dict[str, Any]:
        """指定したレコードに対するログインユーザーの権限を評価する"""
        return self._request("GET", "records/acl/evaluate", {"app": app, "ids": list(ids)})

    # ─── 通知 ─────────────────────────────────────────────
    def get_general_notifications(self, app: AppID, preview: bool = False) -> Dict[str, Any]:
        return self._get_app_setting("app/notifications/general", app, preview)

    def update_general_notifications(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/notifications/general", app, settings)

    def get_per_record_notifications(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("app/notifications/perRecord", app, preview, lang=lang)

    def update_per_record_notifications(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/notifications/perRecord", app, settings)

    def get_reminder_notifications(self, app: AppID, preview: bool = False, lang: Optional[str] = None) -> Dict[str, Any]:
        return self._get_app_setting("app/notifications/reminder", app, preview, lang=lang)

    def update_reminder_notifications(self, app: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._update_app_setting("app/notifications/reminder", app, settings)

    # ─── レコード ─────────────────────────────────────────────
    def get_record(self, app: AppID, record_id: AppID) -> Dict[str, Any]:
        return self._request("GET", "record", {"app": app, "id": record_id})

    def get_records(self, app: AppID, fields: Optional[List[str]] = None, query: Optional[str] = None,
                    total_count: bool = False) -> Dict[str, Any]:
        """レコードを最大 500 件取得する"""
        params = {"app": app, "fields": fields, "query": query}
        if total_count:
            params["totalCount"] = True
        return self._request("GET", "records", params)

    def add_record(self, app: AppID, record: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("POST", "record", {"app": app, "record": record or {}})

    def add_records(self, app: AppID, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        if len(records) > MAX_WRITE_RECORDS:
            raise ValueError(f"一度に追加できるレコードは {MAX_WRITE_RECORDS} 件までです: {len(records)} 件")
        return self._request("POST", "records", {"app": app, "records": records})

    def update_record(self, app: AppID, record_id: Optional[AppID] = None,
                      update_key: Optional[Dict[str, Any]] = None, record: Optional[Dict[str, Any]] = None,
                      revision: Optional[AppID] = None) -> Dict[str, Any]:
        """レコード番号 または 重複禁止フィールド (update_key) を指定してレコードを更新する"""
        if record_id is None and not update_key:
            raise ValueError("レコード番号 または update_key のどちらかが必要です")
        payload = {"app": app, "record": record, "revision": revision}
        if record_id is not None:
            payload["id"] = record_id
        else:
            payload["updateKey"] = update_key
        return self._request("PUT", "record", payload)

    def upsert_record(self, app: AppID, update_key: Dict[str, Any], record: Optional[Dict[str, Any]] = None,
                      revision: Optional[AppID] = None) -> Dict[str, Any]:
        """
        update_key に一致するレコードがあれば更新し、なければ追加する

        戻り値は {"id": ..., "revision": ...}
        """
        field = update_key["field"]
        value = str(update_key["value"]).replace("\\", "\\\\").replace('"', '\\"')
        found = self.get_records(app, query=f'{field} = "{value}"', fields=["$id"]).get("records", [])

        if found:
            result = self.update_record(app, update_key=update_key, record=record, revision=revision)
            return {"id": found[0]["$id"]["value"], "revision": result["revision"]}

        new_record = dict(record or {})
        new_record[field] = {"value": update_key["value"]}
        return self.add_record(app, new_record)

    def update_records(self, app: AppID, records: List[Dict[str, Any]], upsert: bool = False) -> Dict[str, Any]:
        if len(records) > MAX_WRITE_RECORDS:
            raise ValueError(f"一度に更新できるレコードは {MAX_WRITE_RECORDS} 件までです: {len(records)} 件")
        payload = {"app": app, "records": records}
        if upsert:
            payload["upsert"] = True
        return self._request("PUT", "records", payload)

    def delete_records(self, app: AppID, ids: List[AppID], revisions: Optional[List[AppID]] = None) -> Dict[str, Any]:
        if len(ids) > MAX_WRITE_RECORDS:
            raise ValueError(f"一度に削除できるレコードは {MAX_WRITE_RECORDS} 件までです: {len(ids)} 件")
        return self._request("DELETE", "records", {"app": app, "ids": list(ids), "revisions": revisions})

    def update_record_assignees(self, app: AppID, record_id: AppID, assignees: List[str],
                                revision: Optional[AppID] = None) -> Dict[str, Any]:
        payload = {"app": app, "id": record_id, "assignees": list(assignees), "revision": revision}
        return self._request("PUT", "record/assignees", payload)

    def update_record_status(self, app: AppID, record_id: AppID, action: str, assignee: Optional[str] = None,
                             revision: Optional[AppID] = None) -> Dict[str, Any]:
        payload = {"app": app, "id": record_id, "action": action, "assignee": assignee, "revision": revision}
        return self._request("PUT", "record/status", payload)

    def update_records_status(self, app: AppID, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        if len(records) > MAX_WRITE_RECORDS:
            raise ValueError(f"一度に更新できるレコードは {MAX_WRITE_RECORDS} 件までです: {len(records)} 件")
        return self._request("PUT", "records/status", {"app": app, "records": records})

    # ─── コメント ─────────────────────────────────────────────
    def get_record_comments(self, app: AppID, record_id: AppID, order: Optional[str] = None,
                            offset: Optional[int] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"app": app, "record": record_id, "order": order, "offset": offset, "limit": limit}
        return self._request("GET", "record/comments", params)

    def add_record_comment(self, app: AppID, record_id: AppID, comment: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "record/comment", {"app": app, "record": record_id, "comment": comment})

    def delete_record_comment(self, app: AppID, record_id: AppID, comment_id: AppID) -> Dict[str, Any]:
        return self._request("DELETE", "record/comment", {"app": app, "record": record_id, "comment": comment_id})

    # ─── カーソル ─────────────────────────────────────────────
    def create_cursor(self, app: AppID, fields: Optional[List[str]] = None, query: Optional[str] = None,
                      size: Optional[int] = None) -> Dict[str, Any]:
        payload = {"app": app, "fields": fields, "query": query, "size": size}
        return self._request("POST", "records/cursor", payload)

    def get_records_by_cursor(self, cursor_id: str) -> Dict[str, Any]:
        return self._request("GET", "records/cursor", {"id": cursor_id})

    def delete_cursor(self, cursor_id: str) -> Dict[str, Any]:
        return self._request("DELETE", "records/cursor", {"id": cursor_id})

    # ─── 全件取得 ─────────────────────────────────────────────
    def get_all_records_with_cursor(self, app: AppID, fields: Optional[List[str]] = None,
                                    query: Optional[str] = None) -> List[Dict[str, Any]]:
        """カーソル API で全レコードを取得する。途中で失敗した場合はカーソルを削除してから例外を送出する"""
        cursor_id = self.create_cursor(app, fields=fields, query=query, size=MAX_GET_RECORDS)["id"]
        records = []
        try:
            while True:
                result = self.get_records_by_cursor(cursor_id)
                records.extend(result.get("records", []))
                if not result.get("next"):
                    break
        except Exception:
            self.delete_cursor(cursor_id)
            raise
        self.logger.info(f"カーソルで全レコードを取得しました。総数: {len(records)}")
        return records

    def get_all_records_with_id(self, app: AppID, fields: Optional[List[str]] = None,
                                condition: Optional[str] = None) -> List[Dict[str, Any]]:
        """レコード番号 ($id) の昇順で 500 件ずつ全レコードを取得する"""
        if fields and "$id" not in fields:
            fields = list(fields) + ["$id"]
        condition_query = f"({condition}) and " if condition else ""

        records = []
        last_id = 0
        while True:
            query = f"{condition_query}$id > {last_id} order by $id asc limit {MAX_GET_RECORDS}"
            batch = self.get_records(app, fields=fields, query=query).get("records", [])
            records.extend(batch)
            if len(batch) < MAX_GET_RECORDS:
                break
            last_id = batch[-1]["$id"]["value"]
        self.logger.info(f"全レコードを取得しました。総数: {len(records)}")
        return records

    def get_all_records_with_offset(self, app: AppID, fields: Optional[List[str]] = None,
                                    condition: Optional[str] = None,
                                    order_by: Optional[str] = None) -> List[Dict[str, Any]]:
        base_query = condition or ""
        if order_by:
            base_query = f"{base_query} order by {order_by}".strip()

        records = []
        offset = 0
        while True:
            query = f"{base_query} limit {MAX_GET_RECORDS} offset {offset}".strip()
            batch = self.get_records(app, fields=fields, query=query).get("records", [])
            records.extend(batch)
            if len(batch) < MAX_GET_RECORDS:
                break
            offset += MAX_GET_RECORDS
        self.logger.info(f"全レコードを取得しました。総数: {len(records)}")
        return records

    def get_all_records(self, app: AppID, fields: Optional[List[str]] = None, condition: Optional[str] = None,
                        order_by: Optional[str] = None, with_cursor: bool = True) -> List[Dict[str, Any]]:
        """
        全レコードを取得する

        order_by がなければ $id 順で取得し、あればカーソル (with_cursor=False ならオフセット) で取得する。
        """
        if not order_by:
            return self.get_all_records_with_id(app, fields=fields, condition=condition)
        if with_cursor:
            query = f"{condition or ''} order by {order_by}".strip()
            return self.get_all_records_with_cursor(app, fields=fields, query=query)
        return self.get_all_records_with_offset(app, fields=fields, condition=condition, order_by=order_by)

    # ─── 一括処理 ─────────────────────────────────────────────
    def bulk_request(self, requests_: List[Dict[str, Any]]) -> Dict[str, Any]:
        """複数の API をトランザクションとしてまとめて実行する (最大 20 件)"""
        if not requests_:
            raise ValueError("リクエストが指定されていません")
        if len(requests_) > MAX_BULK_REQUESTS:
            raise ValueError(f"bulkRequest で実行できるリクエストは {MAX_BULK_REQUESTS} 件までです: {len(requests_)} 件")
        return self._request("POST", "bulkRequest", {"requests": requests_})

    def _bulk_records(self, method: str, path: str, payloads: List[Dict[str, Any]], total: int,
                      key: str) -> List[Dict[str, Any]]:
        processed = []
        for bulk_payloads in chunked(payloads, MAX_BULK_REQUESTS):
            requests_ = [{"method": method, "api": self._api_path(path), "payload": p} for p in bulk_payloads]
            try:
                results = self.bulk_request(requests_)["results"]
            except Exception as e:
                raise KintoneAllRecordsError(processed, total, e) from e
            for payload, result in zip(bulk_payloads, results):
                processed.extend(self._bulk_result_records(payload, result, key))
        return processed

    @staticmethod
    def _bulk_result_records(payload: Dict[str, Any], result: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        if key == "ids":
            return [{"id": i, "revision": r} for i, r in zip(result.get("ids", []), result.get("revisions", []))]
        if key == "records":
            return result.get("records", [])
        return [{"id": i} for i in payload.get("ids", [])]

    def add_all_records(self, app: AppID, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """100 件ずつ・bulkRequest 20 件ずつに分割して全レコードを追加する"""
        _require_records(records)
        payloads = [{"app": app, "records": chunk} for chunk in chunked(records, MAX_WRITE_RECORDS)]
        return {"records": self._bulk_records("POST", "records", payloads, len(records), "ids")}

    def update_all_records(self, app: AppID, records: List[Dict[str, Any]], upsert: bool = False) -> Dict[str, Any]:
        _require_records(records)
        payloads = []
        for chunk in chunked(records, MAX_WRITE_RECORDS):
            payload = {"app": app, "records": chunk}
            if upsert:
                payload["upsert"] = True
            payloads.append(payload)
        return {"records": self._bulk_records("PUT", "records", payloads, len(records), "records")}

    def delete_all_records(self, app: AppID, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """records は [{"id": ..., "revision": ...}] の形式 (revision は省略可)"""
        _require_records(records)
        payloads = []
        for chunk in chunked(records, MAX_WRITE_RECORDS):
            payload = {"app": app, "ids": [r["id"] for r in chunk]}
            if any(r.get("revision") is not None for r in chunk):
                payload["revisions"] = [r["revision"] if r.get("revision") is not None else -1 for r in chunk]
            payloads.append(payload)
        self._bulk_records("DELETE", "records", payloads, len(records), "deleted")
        return {}

    # ─── ファイル ─────────────────────────────────────────────
    def upload_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        path = Path(file_path)
        with open(path, "rb") as f:
            return self._request("POST", "file", files={"file": (path.name, f)})

    def download_file(self, file_key: str) -> bytes:
        return self._request("GET", "file", {"fileKey": file_key}, raw=True)

    # ─── スペース ─────────────────────────────────────────────
    def get_space(self, space_id: AppID) -> Dict[str, Any]:
        return self._request("GET", "space", {"id": space_id})

    def update_space(self, space_id: AppID, settings: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(settings)
        payload["id"] = space_id
        return self._request("PUT", "space", payload)

    def delete_space(self, space_id: AppID) -> Dict[str, Any]:
        return self._request("DELETE", "space", {"id": space_id})

    def update_space_body(self, space_id: AppID, body: str) -> Dict[str, Any]:
        return self._request("PUT", "space/body", {"id": space_id, "body": body})

    def get_space_members(self, space_id: AppID) -> Dict[str, Any]:
        return self._request("GET", "space/members", {"id": space_id})

    def update_space_members(self, space_id: AppID, members: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request("PUT", "space/members", {"id": space_id, "members": members})

    def add_thread(self, space_id: AppID, name: str) -> Dict[str, Any]:
        return self._request("POST", "space/thread", {"space": space_id, "name": name})

    def update_thread(self, thread_id: AppID, name: Optional[str] = None, body: Optional[str] = None) -> Dict[str, Any]:
        if name is None and body is None:
            raise ValueError("name または body のどちらかが必要です")
        return self._request("PUT", "space/thread", {"id": thread_id, "name": name, "body": body})

    def add_thread_comment(self, space_id: AppID, thread_id: AppID, comment: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"space": space_id, "thread": thread_id, "comment": comment}
        return self._request("POST", "space/thread/comment", payload)

    def add_guests(self, guests: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request("POST", "guests", {"guests": guests})

    def delete_guests(self, guests: List[str]) -> Dict[str, Any]:
        return self._request("DELETE", "guests", {"guests": list(guests)})

    def update_space_guests(self, space_id: AppID, guests: List[str]) -> Dict[str, Any]:
        return self._request("PUT", "space/guests", {"id": space_id, "guests": list(guests)})

    def add_space_from_template(self, template_id: AppID, name: str, members: List[Dict[str, Any]],
                                is_private: bool = False, is_guest: bool = False,
                                fixed_member: bool = False) -> Dict[str, Any]:
        payload = {
            "id": template_id,
            "name": name,
            "members": members,
            "isPrivate": is_private,
            "isGuest": is_guest,
            "fixedMember": fixed_member,
        }
        return self._request("POST", "template/space", payload)


def create_kintone_client(overrides: Optional[Dict[str, Any]] = None, config_path=None, env_path=None,
                          root_dir=None, logger: Optional[logging.Logger] = None,
                          ) -> Tuple[KintoneRestClient, KintoneCredentials]:
    """接続情報を読み込んで KintoneRestClient を作成する"""
    credentials = resolve_credentials(overrides, config_path=config_path, env_path=env_path, root_dir=root_dir)
    return KintoneRestClient(credentials, logger=logger), credentials
