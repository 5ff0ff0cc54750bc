"""
フォーム (フィールド・レイアウト)

  kintone-app form fields <appId> [--preview]
  kintone-app form add-fields <appId> <fieldsJsonPath>
  kintone-app form update-fields <appId> <fieldsJsonPath>
  kintone-app form delete-fields <appId> <fieldCode> [fieldCode2] ...
  kintone-app form layout <appId> [--preview]
  kintone-app form update-layout <appId> <layoutJsonPath>
"""

from lib.kintone_applib.files import unwrap
from .common import add_setting_commands


def register(subparsers):
    parser = subparsers.add_parser('form', help='フォームのフィールド・レイアウト')
    form_subparsers = parser.add_subparsers(dest='action', required=True)

    add_setting_commands(form_subparsers, 'fields', 'get_form_fields', None, 'フィールド設定',
                         summarize=lambda r: f"Fields: {len(r.get('properties', {}))}",
                         get_name='fields')
    add_setting_commands(form_subparsers, 'layout', 'get_form_layout', None, 'フォームレイアウト',
                         summarize=lambda r: f"Rows: {len(r.get('layout', []))}",
                         get_name='layout')

    for name, method, label in (('add-fields', 'add_form_fields', '追加'),
                                ('update-fields', 'update_form_fields', '更新')):
        fields_parser = form_subparsers.add_parser(name, help=f'フィールドを{label} (動作テスト環境)')
        fields_parser.add_argument('app_id', help='アプリID')
        fields_parser.add_argument('json_path', help='properties を記述した JSON / YAML ファイル')
        fields_parser.add_argument('--revision', help='想定するリビジョン')
        fields_parser.set_defaults(func=write_form_fields, method=method, label=label)

    delete_parser = form_subparsers.add_parser('delete-fields', help='フィールドを削除 (動作テスト環境)')
    delete_parser.add_argument('app_id', help='アプリID')
    delete_parser.add_argument('field_codes', nargs='+', help='削除するフィールドコード')
    delete_parser.add_argument('--revision', help='想定するリビジョン')
    delete_parser.set_defaults(func=delete_form_fields)

    layout_parser = form_subparsers.add_parser('update-layout', help='フォームレイアウトを更新 (動作テスト環境)')
    layout_parser.add_argument('app_id', help='アプリID')
    layout_parser.add_argument('json_path', help='layout を記述した JSON / YAML ファイル')
    layout_parser.add_argument('--revision', help='想定するリビジョン')
    layout_parser.set_defaults(func=update_form_layout)


def write_form_fields(ctx, args):
    properties = unwrap(ctx.load(args.json_path), 'properties')
    if not isinstance(properties, dict) or not properties:
        raise ValueError(f"properties が見つかりません: {args.json_path}")

    ctx.logger.info(f"🔄 アプリ {args.app_id} のフィールドを{args.label}しています...")
    for code, field in properties.items():
        ctx.logger.info(f"   {code}: {field.get('type', '')}")
    result = getattr(ctx.client, args.method)(args.app_id, properties, revision=args.revision)
    ctx.logger.info(f"✅ {len(properties)} 件のフィールドを{args.label}しました")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0


def delete_form_fields(ctx, args):
    ctx.logger.info(f"🔄 アプリ {args.app_id} のフィールドを削除しています...")
    ctx.logger.info(f"   Fields: {', '.join(args.field_codes)}")
    result = ctx.client.delete_form_fields(args.app_id, args.field_codes, revision=args.revision)
    ctx.logger.info(f"✅ {len(args.field_codes)} 件のフィールドを削除しました")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0


def update_form_layout(ctx, args):
    layout = unwrap(ctx.load(args.json_path), 'layout')
    if not isinstance(layout, list):
        raise ValueError(f"layout が見つかりません: {args.json_path}")

    ctx.logger.info(f"🔄 アプリ {args.app_id} のフォームレイアウトを更新しています...")
    result = ctx.client.update_form_layout(args.app_id, layout, revision=args.revision)
    ctx.logger.info(f"✅ フォームレイアウトを更新しました ({len(layout)} 行)")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    return 0
