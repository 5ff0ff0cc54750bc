"""
レコード・コメント・カーソル

  kintone-app records get <appId> <recordId>
  kintone-app records list <appId> [--query "..."] [--fields f1,f2] [--total-count]
  kintone-app records all <appId> [--condition "..."] [--order-by "..."] [--method auto|id|cursor|offset]
  kintone-app records export-excel <appId> [--condition "..."] [--output file.xlsx]
  kintone-app records add / add-many / add-all <appId> <jsonPath>
  kintone-app records update <appId> <jsonPath> (--id <recordId> | --update-key field:value)
  kintone-app records upsert <appId> <field> <value> <jsonPath>
  kintone-app records update-many / update-all <appId> <jsonPath> [--upsert]
  kintone-app records delete <appId> <recordId>... | --json <jsonPath>
  kintone-app records delete-all <appId> <jsonPath>
  kintone-app records assignees <appId> <recordId> <user>... | --clear
  kintone-app records status <appId> <recordId> <action> [--assignee user]
  kintone-app records status-many <appId> <jsonPath>
  kintone-app records comments / add-comment / delete-comment ...
  kintone-app records cursor-create / cursor-get / cursor-delete ...
"""

from datetime import datetime

from lib.kintone_applib.excel import export_records_to_excel
from lib.kintone_applib.files import unwrap
from .common import add_output_arguments


def split_fields(value):
    if not value:
        return None
    return [field.strip() for field in value.split(",") if field.strip()]


def parse_update_key(value):
    """field:value 形式の文字列を updateKey に変換する"""
    if not value or ":" not in value:
        raise ValueError(f"--update-key は field:value 形式で指定してください: {value}")
    field, key_value = value.split(":", 1)
    return {"field": field, "value": key_value}


def load_records(ctx, path):
    records = unwrap(ctx.load(path), 'records')
    if not isinstance(records, list):
        raise ValueError(f"records の配列が見つかりません: {path}")
    return records


def register(subparsers):
    parser = subparsers.add_parser('records', help='レコード・コメント・カーソル')
    rs = parser.add_subparsers(dest='action', required=True)

    # ─── 取得 ─────────────────────────────────────────────
    p = rs.add_parser('get', help='レコードを1件取得 (出力: app_[アプリID]_record_[レコード番号].json)')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('record_id', help='レコード番号')
    add_output_arguments(p)
    p.set_defaults(func=get_record)

    p = rs.add_parser('list', help='クエリに一致するレコードを取得 (最大500件)')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('--query', help='クエリ文字列')
    p.add_argument('--fields', help='取得するフィールドコード (カンマ区切り)')
    p.add_argument('--total-count', action='store_true', help='クエリに一致する総件数を取得します')
    add_output_arguments(p)
    p.set_defaults(func=get_records)

    for name, func, help_text in (('all', get_all_records, '全レコードを取得 (出力: app_[アプリID]_records.json)'),
                                  ('export-excel', export_excel, '全レコードをExcelに出力')):
        p = rs.add_parser(name, help=help_text)
        p.add_argument('app_id', help='アプリID')
        p.add_argument('--condition', help='絞り込み条件 (order by / limit / offset は含めない)')
        p.add_argument('--order-by', help='並び順 (例: "更新日時 desc")')
        p.add_argument('--fields', help='取得するフィールドコード (カンマ区切り)')
        p.add_argument('--method', choices=['auto', 'id', 'cursor', 'offset'], default='auto',
                       help='取得方法 (デフォルト: auto)')
        if name == 'export-excel':
            p.add_argument('--output', help='出力するExcelファイル名')
        else:
            add_output_arguments(p)
        p.set_defaults(func=func)

    # ─── 追加・更新・削除 ─────────────────────────────────────────
    p = rs.add_parser('add', help='レコードを1件追加')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('json_path', help='record を記述した JSON / YAML ファイル')
    p.set_defaults(func=add_record)

    for name, func in (('add-many', add_records), ('add-all', add_all_records)):
        p = rs.add_parser(name, help='複数レコードを追加' + (' (100件まで)' if name == 'add-many' else ' (件数制限なし)'))
        p.add_argument('app_id', help='アプリID')
        p.add_argument('json_path', help='records の配列を記述した JSON / YAML ファイル')
        p.set_defaults(func=func)

    p = rs.add_parser('update', help='レコードを1件更新')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('json_path', help='record を記述した JSON / YAML ファイル')
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument('--id', dest='record_id', help='レコード番号')
    target.add_argument('--update-key', help='重複禁止フィールドと値 (field:value)')
    p.add_argument('--revision', help='想定するリビジョン')
    p.set_defaults(func=update_record)

    p = rs.add_parser('upsert', help='重複禁止フィールドの値が一致すれば更新、なければ追加')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('field', help='重複禁止フィールドのフィールドコード')
    p.add_argument('value', help='重複禁止フィールドの値')
    p.add_argument('json_path', help='record を記述した JSON / YAML ファイル')
    p.set_defaults(func=upsert_record)

    for name, func in (('update-many', update_records), ('update-all', update_all_records)):
        p = rs.add_parser(name, help='複数レコードを更新' + (' (100件まで)' if name == 'update-many' else ' (件数制限なし)'))
        p.add_argument('app_id', help='アプリID')
        p.add_argument('json_path', help='records の配列を記述した JSON / YAML ファイル')
        p.add_argument('--upsert', action='store_true', help='該当レコードがなければ追加します')
        p.set_defaults(func=func)

    p = rs.add_parser('delete', help='レコードを削除 (100件まで)')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('record_ids', nargs='*', help='レコード番号')
    p.add_argument('--json', dest='json_path', help='ids / revisions を記述した JSON / YAML ファイル')
    p.set_defaults(func=delete_records)

    p = rs.add_parser('delete-all', help='レコードを削除 (件数制限なし)')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('json_path', help='[{"id": ..., "revision": ...}] を記述した JSON / YAML ファイル')
    p.set_defaults(func=delete_all_records)

    # ─── プロセス管理 ─────────────────────────────────────────
    p = rs.add_parser('assignees', help='作業者を更新')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('record_id', help='レコード番号')
    p.add_argument('assignees', nargs='*', help='作業者のログイン名')
    p.add_argument('--clear', action='store_true', help='作業者を空にします')
    p.add_argument('--revision', help='想定するリビジョン')
    p.set_defaults(func=update_record_assignees)

    p = rs.add_parser('status', help='ステータスを更新 (アクションを実行)')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('record_id', help='レコード番号')
    p.add_argument('status_action', help='実行するアクション名')
    p.add_argument('--assignee', help='次の作業者のログイン名')
    p.add_argument('--revision', help='想定するリビジョン')
    p.set_defaults(func=update_record_status)

    p = rs.add_parser('status-many', help='複数レコードのステータスを更新 (100件まで)')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('json_path', help='records の配列を記述した JSON / YAML ファイル')
    p.set_defaults(func=update_records_status)

    # ─── コメント ─────────────────────────────────────────────
    p = rs.add_parser('comments', help='コメントを取得')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('record_id', help='レコード番号')
    p.add_argument('--order', choices=['asc', 'desc'], help='並び順')
    p.add_argument('--offset', type=int, help='読み飛ばす件数')
    p.add_argument('--limit', type=int, help='取得する件数 (最大10)')
    add_output_arguments(p)
    p.set_defaults(func=get_record_comments)

    p = rs.add_parser('add-comment', help='コメントを投稿')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('record_id', help='レコード番号')
    p.add_argument('text', nargs='?', help='コメント本文')
    p.add_argument('--json', dest='json_path', help='comment (text / mentions) を記述した JSON / YAML ファイル')
    p.set_defaults(func=add_record_comment)

    p = rs.add_parser('delete-comment', help='コメントを削除')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('record_id', help='レコード番号')
    p.add_argument('comment_id', help='コメントID')
    p.set_defaults(func=delete_record_comment)

    # ─── カーソル ─────────────────────────────────────────────
    p = rs.add_parser('cursor-create', help='カーソルを作成')
    p.add_argument('app_id', help='アプリID')
    p.add_argument('--query', help='クエリ文字列 (limit / offset は指定不可)')
    p.add_argument('--fields', help='取得するフィールドコード (カンマ区切り)')
    p.add_argument('--size', type=int, help='1回に取得する件数 (最大500)')
    p.set_defaults(func=create_cursor)

    p = rs.add_parser('cursor-get', help='カーソルからレコードを取得')
    p.add_argument('cursor_id', help='カーソルID')
    add_output_arguments(p)
    p.set_defaults(func=get_records_by_cursor)

    p = rs.add_parser('cursor-delete', help='カーソルを削除')
    p.add_argument('cursor_id', help='カーソルID')
    p.set_defaults(func=delete_cursor)


# ─── 取得 ─────────────────────────────────────────────
def get_record(ctx, args):
    ctx.logger.info(f"🔄 アプリ {args.app_id} のレコード {args.record_id} を取得しています...")
    result = ctx.client.get_record(args.app_id, args.record_id)
    ctx.logger.info(f"   Fields: {len(result.get('record', {}))}")
    ctx.save(result, f"app_{args.app_id}_record_{args.record_id}.json")
    ctx.dump(result)
    return 0


def get_records(ctx, args):
    ctx.logger.info(f"🔄 アプリ {args.app_id} のレコードを取得しています...")
    if args.query:
        ctx.logger.info(f"   Query: {args.query}")
    result = ctx.client.get_records(args.app_id, fields=split_fields(args.fields), query=args.query,
                                    total_count=args.total_count)
    ctx.logger.info(f"✅ {len(result.get('records', []))} 件のレコードを取得しました")
    if result.get("totalCount") is not None:
        ctx.logger.info(f"   Total matching: {result['totalCount']}")
    ctx.save(result, f"app_{args.app_id}_records_query.json")
    ctx.dump(result)
    return 0


def fetch_all_records(ctx, args):
    client = ctx.client
    fields = split_fields(args.fields)
    ctx.logger.info(f"🔄 アプリ {args.app_id} の全レコードを取得しています...")
    if args.condition:
        ctx.logger.info(f"   Condition: {args.condition}")

    if args.method == 'id':
        if args.order_by:
            raise ValueError("--method id では --order-by を指定できません")
        return client.get_all_records_with_id(args.app_id, fields=fields, condition=args.condition)
    if args.method == 'cursor':
        query = f"{args.condition or ''} order by {args.order_by}".strip() if args.order_by else args.condition
        return client.get_all_records_with_cursor(args.app_id, fields=fields, query=query)
    if args.method == 'offset':
        return client.get_all_records_with_offset(args.app_id, fields=fields, condition=args.condition,
                                                  order_by=args.order_by)
    return client.get_all_records(args.app_id, fields=fields, condition=args.condition, order_by=args.order_by)


def get_all_records(ctx, args):
    records = fetch_all_records(ctx, args)
    ctx.logger.info(f"✅ {len(records)} 件のレコードを取得しました")
    result = {"records": records}
    ctx.save(result, f"app_{args.app_id}_records.json")
    ctx.dump(result)
    return 0


def export_excel(ctx, args):
    records = fetch_all_records(ctx, args)
    output = args.output
    if not output:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = ctx.output_dir / f"app_{args.app_id}_records_{timestamp}.xlsx"
    output_path = export_records_to_excel(records, output, field_codes=split_fields(args.fields),
                                          sheet_title=f"app_{args.app_id}")
    ctx.logger.info(f"✅ {output_path} を出力しました")
    return 0


# ─── 追加・更新・削除 ─────────────────────────────────────────
def add_record(ctx, args):
    record = unwrap(ctx.load(args.json_path), 'record')
    ctx.logger.info(f"🔄 アプリ {args.app_id} にレコードを追加しています...")
    result = ctx.client.add_record(args.app_id, record)
    ctx.logger.info("✅ レコードを追加しました")
    ctx.logger.info(f"   Record ID: {result.get('id')}")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0


def add_records(ctx, args):
    records = load_records(ctx, args.json_path)
    ctx.logger.info(f"🔄 アプリ {args.app_id} に {len(records)} 件のレコードを追加しています...")
    result = ctx.client.add_records(args.app_id, records)
    ctx.logger.info(f"✅ {len(result.get('ids', []))} 件のレコードを追加しました")
    ctx.logger.info(f"   Record IDs: {', '.join(result.get('ids', []))}")
    return 0


def add_all_records(ctx, args):
    records = load_records(ctx, args.json_path)
    ctx.logger.info(f"🔄 アプリ {args.app_id} に {len(records)} 件のレコードを追加しています...")
    result = ctx.client.add_all_records(args.app_id, records)
    ctx.logger.info(f"✅ {len(result['records'])} 件のレコードを追加しました")
    return 0


def update_record(ctx, args):
    record = unwrap(ctx.load(args.json_path), 'record')
    update_key = parse_update_key(args.update_key) if args.update_key else None
    identifier = f"ID: {args.record_id}" if args.record_id else f"Key: {update_key['field']}={update_key['value']}"

    ctx.logger.info(f"🔄 アプリ {args.app_id} のレコードを更新しています...")
    ctx.logger.info(f"   {identifier}")
    result = ctx.client.update_record(args.app_id, record_id=args.record_id, update_key=update_key,
                                      record=record, revision=args.revision)
    ctx.logger.info("✅ レコードを更新しました")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0


def upsert_record(ctx, args):
    record = unwrap(ctx.load(args.json_path), 'record')
    ctx.logger.info(f"🔄 アプリ {args.app_id} のレコードを追加または更新しています...")
    ctx.logger.info(f"   Key: {args.field}={args.value}")
    result = ctx.client.upsert_record(args.app_id, {"field": args.field, "value": args.value}, record)
    ctx.logger.info("✅ レコードを保存しました")
    ctx.logger.info(f"   Record ID: {result.get('id')}")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0


def update_records(ctx, args):
    records = load_records(ctx, args.json_path)
    ctx.logger.info(f"🔄 アプリ {args.app_id} の {len(records)} 件のレコードを更新しています...")
    result = ctx.client.update_records(args.app_id, records, upsert=args.upsert)
    ctx.logger.info(f"✅ {len(result.get('records', []))} 件のレコードを更新しました")
    return 0


def update_all_records(ctx, args):
    records = load_records(ctx, args.json_path)
    ctx.logger.info(f"🔄 アプリ {args.app_id} の {len(records)} 件のレコードを更新しています...")
    result = ctx.client.update_all_records(args.app_id, records, upsert=args.upsert)
    ctx.logger.info(f"✅ {len(result['records'])} 件のレコードを更新しました")
    return 0


def delete_records(ctx, args):
    revisions = None
    if args.json_path:
        payload = ctx.load(args.json_path)
        ids = payload.get("ids", []) if isinstance(payload, dict) else payload
        revisions = payload.get("revisions") if isinstance(payload, dict) else None
    else:
        ids = args.record_ids
    if not ids:
        raise ValueError("削除するレコード番号を指定してください")

    ctx.logger.info(f"🔄 アプリ {args.app_id} のレコードを削除しています...")
    ctx.logger.info(f"   Record IDs: {', '.join(str(i) for i in ids)}")
    ctx.client.delete_records(args.app_id, ids, revisions=revisions)
    ctx.logger.info(f"✅ {len(ids)} 件のレコードを削除しました")
    return 0


def delete_all_records(ctx, args):
    records = load_records(ctx, args.json_path)
    ctx.logger.info(f"🔄 アプリ {args.app_id} の {len(records)} 件のレコードを削除しています...")
    ctx.client.delete_all_records(args.app_id, records)
    ctx.logger.info(f"✅ {len(records)} 件のレコードを削除しました")
    return 0


# ─── プロセス管理 ─────────────────────────────────────────
def update_record_assignees(ctx, args):
    if args.clear and args.assignees:
        raise ValueError("--clear と作業者は同時に指定できません")
    if not args.clear and not args.assignees:
        raise ValueError("作業者を指定するか --clear を指定してください")

    assignees = [] if args.clear else args.assignees
    ctx.logger.info(f"🔄 レコード {args.record_id} の作業者を更新しています...")
    ctx.logger.info(f"   Assignees: {', '.join(assignees) or '(なし)'}")
    result = ctx.client.update_record_assignees(args.app_id, args.record_id, assignees, revision=args.revision)
    ctx.logger.info("✅ 作業者を更新しました")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0


def update_record_status(ctx, args):
    ctx.logger.info(f"🔄 レコード {args.record_id} のアクション「{args.status_action}」を実行しています...")
    result = ctx.client.update_record_status(args.app_id, args.record_id, args.status_action,
                                             assignee=args.assignee, revision=args.revision)
    ctx.logger.info("✅ ステータスを更新しました")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0


def update_records_status(ctx, args):
    records = load_records(ctx, args.json_path)
    ctx.logger.info(f"🔄 {len(records)} 件のレコードのステータスを更新しています...")
    result = ctx.client.update_records_status(args.app_id, records)
    ctx.logger.info(f"✅ {len(result.get('records', []))} 件のステータスを更新しました")
    return 0


# ─── コメント ─────────────────────────────────────────────
def get_record_comments(ctx, args):
    ctx.logger.info(f"🔄 レコード {args.record_id} のコメントを取得しています...")
    result = ctx.client.get_record_comments(args.app_id, args.record_id, order=args.order,
                                            offset=args.offset, limit=args.limit)
    for comment in result.get("comments", []):
        creator = comment.get("creator", {})
        ctx.logger.info(f"   [{comment.get('id')}] {creator.get('name', '')}: {comment.get('text', '').strip()}")
    ctx.logger.info(f"   Older: {result.get('older')} / Newer: {result.get('newer')}")
    ctx.save(result, f"app_{args.app_id}_record_{args.record_id}_comments.json")
    ctx.dump(result)
    return 0


def add_record_comment(ctx, args):
    if args.json_path:
        comment = unwrap(ctx.load(args.json_path), 'comment')
    elif args.text:
        comment = {"text": args.text}
    else:
        raise ValueError("コメント本文 または --json を指定してください")

    ctx.logger.info(f"🔄 レコード {args.record_id} にコメントを投稿しています...")
    result = ctx.client.add_record_comment(args.app_id, args.record_id, comment)
    ctx.logger.info("✅ コメントを投稿しました")
    ctx.logger.info(f"   Comment ID: {result.get('id')}")
    return 0


def delete_record_comment(ctx, args):
    ctx.logger.info(f"🔄 レコード {args.record_id} のコメント {args.comment_id} を削除しています...")
    ctx.client.delete_record_comment(args.app_id, args.record_id, args.comment_id)
    ctx.logger.info("✅ コメントを削除しました")
    return 0


# ─── カーソル ─────────────────────────────────────────────
def create_cursor(ctx, args):
    ctx.logger.info(f"🔄 アプリ {args.app_id} のカーソルを作成しています...")
    result = ctx.client.create_cursor(args.app_id, fields=split_fields(args.fields), query=args.query,
                                      size=args.size)
    ctx.logger.info("✅ カーソルを作成しました")
    ctx.logger.info(f"   Cursor ID: {result.get('id')}")
    ctx.logger.info(f"   Total: {result.get('totalCount')}")
    ctx.logger.info("   ※ カーソルは10分間操作がないと自動で削除されます")
    return 0


def get_records_by_cursor(ctx, args):
    ctx.logger.info(f"🔄 カーソル {args.cursor_id} からレコードを取得しています...")
    result = ctx.client.get_records_by_cursor(args.cursor_id)
    ctx.logger.info(f"✅ {len(result.get('records', []))} 件のレコードを取得しました")
    ctx.logger.info(f"   Next: {result.get('next')}")
    ctx.save(result, f"cursor_{args.cursor_id}_records.json")
    ctx.dump(result)
    return 0


def delete_cursor(ctx, args):
    ctx.logger.info(f"🔄 カーソル {args.cursor_id} を削除しています...")
    ctx.client.delete_cursor(args.cursor_id)
    ctx.logger.info("✅ カーソルを削除しました")
    return 0
