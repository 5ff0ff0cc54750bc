"""
グラフの設定

  kintone-app reports get <appId> [--preview]
  kintone-app reports update <appId> <reportsJsonPath>
"""

from .common import add_setting_commands


def register(subparsers):
    parser = subparsers.add_parser('reports', help='グラフの設定')
    reports_subparsers = parser.add_subparsers(dest='action', required=True)
    add_setting_commands(reports_subparsers, 'reports', 'get_reports', 'update_reports', 'グラフの設定',
                         key='reports', summarize=lambda r: f"Reports: {len(r.get('reports', {}))}")
