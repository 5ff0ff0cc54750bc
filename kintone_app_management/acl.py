"""
アクセス権の設定

  kintone-app acl get-app / update-app <appId> ...
  kintone-app acl get-field / update-field <appId> ...
  kintone-app acl get-record / update-record <appId> ...
  kintone-app acl evaluate <appId> <recordId> [recordId2] ...
"""

from .common import add_setting_commands

MAX_EVALUATE_IDS = 100


def register(subparsers):
    parser = subparsers.add_parser('acl', help='アクセス権の設定')
    acl_subparsers = parser.add_subparsers(dest='action', required=True)

    add_setting_commands(acl_subparsers, 'appAcl', 'get_app_acl', 'update_app_acl', 'アプリのアクセス権',
                         key='rights', summarize=lambda r: f"Permission entries: {len(r.get('rights', []))}",
                         get_name='get-app', update_name='update-app')
    add_setting_commands(acl_subparsers, 'fieldAcl', 'get_field_acl', 'update_field_acl', 'フィールドのアクセス権',
                         key='rights', summarize=lambda r: f"Field entries: {len(r.get('rights', []))}",
                         get_name='get-field', update_name='update-field')
    add_setting_commands(acl_subparsers, 'recordAcl', 'get_record_acl', 'update_record_acl', 'レコードのアクセス権',
                         key='rights', summarize=lambda r: f"Record entries: {len(r.get('rights', []))}",
                         get_name='get-record', update_name='update-record')

    evaluate_parser = acl_subparsers.add_parser('evaluate', help='レコードに対するアクセス権を評価')
    evaluate_parser.add_argument('app_id', help='アプリID')
    evaluate_parser.add_argument('record_ids', nargs='+', help='レコード番号 (最大100件)')
    evaluate_parser.add_argument('--print', dest='print_json', action='store_true',
                                 help='レスポンスのJSONを標準出力に表示します')
    evaluate_parser.set_defaults(func=evaluate_records_acl)


def evaluate_records_acl(ctx, args):
    if len(args.record_ids) > MAX_EVALUATE_IDS:
        raise ValueError(f"評価できるレコードは {MAX_EVALUATE_IDS} 件までです: {len(args.record_ids)} 件")

    ctx.logger.info(f"🔄 アプリ {args.app_id} のレコードのアクセス権を評価しています...")
    result = ctx.client.evaluate_records_acl(args.app_id, args.record_ids)

    for right in result.get("rights", []):
        record = right.get("record", {})
        flags = [name for name in ("viewable", "editable", "deletable") if record.get(name)]
        ctx.logger.info(f"   Record {right.get('id')}: {', '.join(flags) or '権限なし'}")

    ctx.dump(result)
    return 0
