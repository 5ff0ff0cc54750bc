#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
kintone アプリ管理 CLI

接続情報は以下の優先順位で読み込みます。
  1. コマンドライン引数 (--domain / --username / --password / --api-token)
  2. --config で指定した YAML ファイル
  3. --env で指定した .env ファイル (省略時はプロジェクトルートの .env)
  4. 環境変数 (KINTONE_DOMAIN / KINTONE_USERNAME / KINTONE_PASSWORD)

使用例:
  kintone-app app get 123
  kintone-app form fields 123 --preview
  kintone-app deploy app 123
  kintone-app records all 123 --condition 'ステータス = "完了"'
"""

import sys
import argparse

import requests

from lib.kintone_applib.client import KintoneAllRecordsError, KintoneRestAPIError, create_kintone_client
from lib.kintone_applib.env import KintoneConfigError
from . import acl, app, bulk, customize, deploy, file, form, notifications, process, records, reports, space, views
from .common import CommandContext, report_error, setup_logging

COMMAND_MODULES = (app, form, views, acl, customize, notifications, process, reports, deploy, records, file, space,
                   bulk)

HANDLED_ERRORS = (
    KintoneConfigError,
    KintoneRestAPIError,
    KintoneAllRecordsError,
    FileNotFoundError,
    ValueError,
    requests.RequestException,
)


def build_parser():
    parser = argparse.ArgumentParser(prog='kintone-app', description='kintone アプリの設定・レコードを管理するツール',
                                     formatter_class=argparse.RawDescriptionHelpFormatter, epilog=__doc__)
    parser.add_argument('--domain', help='kintone のドメイン (例: example.cybozu.com。サブドメインのみでも可)')
    parser.add_argument('--username', help='ログイン名')
    parser.add_argument('--password', help='パスワード')
    parser.add_argument('--api-token', help='API トークン (パスワード認証の代わりに使用)')
    parser.add_argument('--guest-space-id', help='ゲストスペースID (ゲストスペース内のアプリを操作する場合)')
    parser.add_argument('--config', help='接続情報を記述した YAML ファイル')
    parser.add_argument('--env', help='.env ファイルのパス')
    parser.add_argument('--output-dir', help='JSON の出力先ディレクトリ (デフォルト: kintone-app-structure)')
    parser.add_argument('--log-dir', help='ログファイルの出力先ディレクトリ')
    parser.add_argument('--silent', action='store_true', help='WARNING 以上のメッセージのみ表示します')

    subparsers = parser.add_subparsers(dest='command', help='実行するコマンド')
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def main(argv=None, client_factory=create_kintone_client):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, 'func', None):
        parser.print_help()
        return 1

    logger = setup_logging(args.silent, args.log_dir)
    ctx = CommandContext(args, logger, client_factory=client_factory)

    try:
        return args.func(ctx, args)
    except HANDLED_ERRORS as e:
        report_error(logger, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
