"""
一覧の設定

  kintone-app views get <appId> [--preview]
  kintone-app views update <appId> <viewsJsonPath>
"""

from .common import add_setting_commands


def register(subparsers):
    parser = subparsers.add_parser('views', help='一覧の設定')
    views_subparsers = parser.add_subparsers(dest='action', required=True)
    add_setting_commands(views_subparsers, 'views', 'get_views', 'update_views', '一覧の設定', key='views',
                         summarize=lambda r: f"Views: {', '.join(r.get('views', {}).keys()) or '(なし)'}")
