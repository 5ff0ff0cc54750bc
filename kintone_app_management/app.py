"""
アプリ情報・アプリ設定

  kintone-app app get <appId>
  kintone-app app list [--name ...] [--space ...]
  kintone-app app add <appName> [--space <spaceId> --thread <threadId>]
  kintone-app app settings <appId> [--preview]
  kintone-app app update-settings <appId> <settingsJsonPath>
"""

from lib.kintone_applib.files import structure_filename
from .common import add_output_arguments, add_setting_commands


def register(subparsers):
    parser = subparsers.add_parser('app', help='アプリ情報・アプリ設定')
    app_subparsers = parser.add_subparsers(dest='action', required=True)

    get_parser = app_subparsers.add_parser('get', help='アプリ情報を取得 (出力: app_[アプリID]_info.json)')
    get_parser.add_argument('app_id', help='アプリID')
    add_output_arguments(get_parser)
    get_parser.set_defaults(func=get_app)

    list_parser = app_subparsers.add_parser('list', help='アプリ一覧を取得 (出力: apps.json)')
    list_parser.add_argument('--name', help='アプリ名 (部分一致)')
    list_parser.add_argument('--id', dest='ids', nargs='+', help='アプリID')
    list_parser.add_argument('--code', dest='codes', nargs='+', help='アプリコード')
    list_parser.add_argument('--space', dest='space_ids', nargs='+', help='スペースID')
    add_output_arguments(list_parser)
    list_parser.set_defaults(func=get_apps)

    add_parser = app_subparsers.add_parser('add', help='アプリを作成 (動作テスト環境。反映には deploy app が必要)')
    add_parser.add_argument('name', help='アプリ名')
    add_parser.add_argument('--space', help='作成先のスペースID')
    add_parser.add_argument('--thread', help='作成先のスレッドID (--space 指定時)')
    add_parser.set_defaults(func=add_app)

    add_setting_commands(app_subparsers, 'settings', 'get_app_settings', 'update_app_settings', '一般設定',
                         summarize=lambda r: f"Name: {r.get('name')} / Revision: {r.get('revision')}",
                         get_name='settings', update_name='update-settings')


def get_app(ctx, args):
    ctx.logger.info(f"🔄 アプリ {args.app_id} の情報を取得しています...")
    app = ctx.client.get_app(args.app_id)
    ctx.logger.info(f"   Name: {app.get('name')}")
    ctx.logger.info(f"   Created: {app.get('createdAt')}")
    ctx.save(app, structure_filename(args.app_id, 'info'))
    ctx.dump(app)
    return 0


def get_apps(ctx, args):
    ctx.logger.info("🔄 アプリ一覧を取得しています...")
    result = ctx.client.get_apps(ids=args.ids, codes=args.codes, name=args.name, space_ids=args.space_ids)
    apps = result.get("apps", [])
    for app in apps:
        ctx.logger.info(f"   {app.get('appId')}: {app.get('name')}")
    ctx.logger.info(f"   Total: {len(apps)}")
    ctx.save(result, "apps.json")
    ctx.dump(result)
    return 0


def add_app(ctx, args):
    if args.thread and not args.space:
        raise ValueError("--thread を指定する場合は --space も指定してください")

    ctx.logger.info(f"🔄 アプリ「{args.name}」を作成しています...")
    result = ctx.client.add_app(args.name, space=args.space, thread=args.thread or args.space)
    ctx.logger.info(f"✅ アプリを作成しました (動作テスト環境)")
    ctx.logger.info(f"   App ID: {result.get('app')}")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    ctx.logger.info(f"   ※ 運用環境に反映するには deploy app {result.get('app')} を実行してください")
    return 0
