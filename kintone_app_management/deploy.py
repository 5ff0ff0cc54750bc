"""
アプリ設定の運用環境への反映

  kintone-app deploy app <appId> [--revert] [--no-wait]
  kintone-app deploy status <appId> [appId2] ...
"""

from lib.kintone_applib.deploy import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_MAX_ATTEMPTS,
    UNKNOWN_STATUS_ICON,
    DeployStatus,
    wait_for_deploy,
)


def register(subparsers):
    parser = subparsers.add_parser('deploy', help='アプリ設定の運用環境への反映')
    deploy_subparsers = parser.add_subparsers(dest='action', required=True)

    app_parser = deploy_subparsers.add_parser('app', help='動作テスト環境の設定を運用環境に反映')
    app_parser.add_argument('app_id', help='アプリID')
    app_parser.add_argument('--revision', help='反映するアプリのリビジョン (省略時は最新)')
    app_parser.add_argument('--revert', action='store_true', help='動作テスト環境の変更を取り消して運用環境の設定に戻します')
    app_parser.add_argument('--no-wait', action='store_true', help='反映の完了を待たずに終了します')
    app_parser.add_argument('--max-attempts', type=int, default=DEFAULT_MAX_ATTEMPTS,
                            help=f'反映状況を確認する最大回数 (デフォルト: {DEFAULT_MAX_ATTEMPTS})')
    app_parser.add_argument('--interval-ms', type=int, default=DEFAULT_INTERVAL_MS,
                            help=f'反映状況を確認する間隔 (ミリ秒, デフォルト: {DEFAULT_INTERVAL_MS})')
    app_parser.set_defaults(func=deploy_app)

    status_parser = deploy_subparsers.add_parser('status', help='アプリ設定の反映状況を表示')
    status_parser.add_argument('app_ids', nargs='+', help='アプリID (複数指定可)')
    status_parser.add_argument('--print', dest='print_json', action='store_true', help='レスポンスのJSONを標準出力に表示します')
    status_parser.set_defaults(func=get_deploy_status)


def deploy_app(ctx, args):
    app_id = args.app_id
    client = ctx.client

    if args.revert:
        ctx.logger.info(f"🔄 アプリ {app_id} の動作テスト環境の設定を取り消しています...")
    else:
        ctx.logger.info(f"🔄 アプリ {app_id} の設定を運用環境に反映しています...")

    app = {"app": app_id}
    if args.revision:
        app["revision"] = args.revision
    client.deploy_app([app], revert=args.revert)

    if args.revert:
        ctx.logger.info(f"✅ アプリ {app_id} の動作テスト環境の設定を取り消しました")
        return 0

    if args.no_wait:
        ctx.logger.info(f"✅ アプリ {app_id} の反映を開始しました")
        ctx.logger.info("   反映状況は deploy status で確認できます")
        return 0

    ctx.logger.info("   反映の完了を待っています...")
    outcome = wait_for_deploy(client, app_id, max_attempts=args.max_attempts, interval_ms=args.interval_ms)

    if outcome.success:
        ctx.logger.info(f"✅ アプリ {app_id} の設定を運用環境に反映しました")
        ctx.logger.info(f"   Status: {outcome.status.value}")
        return 0

    if outcome.status is DeployStatus.TIMEOUT:
        ctx.logger.error(f"⌛ アプリ {app_id} の反映が {args.max_attempts} 回の確認で完了しませんでした")
        ctx.logger.error("   反映処理はまだ実行中の可能性があります。しばらくしてから deploy status で確認してください")
    else:
        ctx.logger.error(f"❌ アプリ {app_id} の反映に失敗しました")
    ctx.logger.error(f"   Status: {outcome.status.value}")
    return 1


def get_deploy_status(ctx, args):
    ctx.logger.info("🔄 反映状況を確認しています...")
    ctx.logger.info(f"   Apps: {', '.join(args.app_ids)}")

    result = ctx.client.get_deploy_status(args.app_ids)

    ctx.logger.info("📊 Deploy Status:")
    for app in result.get("apps", []):
        status = DeployStatus.from_remote(app.get("status"))
        icon = status.icon if status else UNKNOWN_STATUS_ICON
        ctx.logger.info(f"   App {app.get('app')}: {icon} {app.get('status')}")

    ctx.dump(result)
    return 0
