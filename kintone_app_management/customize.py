"""
JavaScript / CSS カスタマイズ

  kintone-app customize get <appId> [--preview]
  kintone-app customize update <appId> <customizeJsonPath>
"""

from .common import add_setting_commands


def summarize_customize(result):
    desktop = result.get("desktop", {})
    mobile = result.get("mobile", {})
    return (f"Scope: {result.get('scope')} / Desktop JS: {len(desktop.get('js', []))}, "
            f"CSS: {len(desktop.get('css', []))} / Mobile JS: {len(mobile.get('js', []))}")


def register(subparsers):
    parser = subparsers.add_parser('customize', help='JavaScript / CSS カスタマイズ')
    customize_subparsers = parser.add_subparsers(dest='action', required=True)
    add_setting_commands(customize_subparsers, 'customize', 'get_app_customize', 'update_app_customize',
                         'カスタマイズ設定', summarize=summarize_customize)
