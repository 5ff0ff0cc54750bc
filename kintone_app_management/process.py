"""
プロセス管理の設定

  kintone-app process get <appId> [--preview]
  kintone-app process update <appId> <processJsonPath>
"""

from .common import add_setting_commands


def summarize_process(result):
    states = sorted((result.get("states") or {}).values(), key=lambda s: int(s.get("index", 0)))
    enabled = "有効" if result.get("enable") else "無効"
    return f"Enabled: {enabled} / States: {', '.join(s.get('name', '') for s in states) or '(なし)'}"


def register(subparsers):
    parser = subparsers.add_parser('process', help='プロセス管理の設定')
    process_subparsers = parser.add_subparsers(dest='action', required=True)
    add_setting_commands(process_subparsers, 'process', 'get_process_management', 'update_process_management',
                         'プロセス管理の設定', summarize=summarize_process)
