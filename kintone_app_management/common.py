"""
CLI 共通処理 (ロギング・接続・JSON 保存・エラー表示)
"""

import sys
import json
import logging
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from lib.kintone_applib.client import create_kintone_client
from lib.kintone_applib.env import find_root_dir
from lib.kintone_applib.files import OUTPUT_DIR_NAME, load_payload, save_json, structure_filename, unwrap

LOGGER_NAME = "kintone_app_management"


def setup_logging(silent: bool = False, log_dir: Optional[str] = None) -> logging.Logger:
    """
    ロギングの設定

    silent=True の場合は WARNING 以上のみ表示する。log_dir を指定した場合は
    タイムスタンプ付きのログファイルにも出力する。
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.WARNING if silent else logging.INFO
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_handler = logging.FileHandler(log_path / f"kintone_app_management_{timestamp}.log", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)

    # ライブラリ側のロガーも同じハンドラに流す
    lib_logger = logging.getLogger("lib.kintone_applib")
    lib_logger.setLevel(logging.DEBUG)
    lib_logger.handlers = list(logger.handlers)
    lib_logger.propagate = False

    return logger


class CommandContext:
    """1回のコマンド実行で使う接続・出力先・ロガーをまとめたもの"""

    def __init__(self, args, logger: logging.Logger, client_factory: Callable = create_kintone_client):
        self.args = args
        self.logger = logger
        self.root_dir = find_root_dir()
        self.output_dir = Path(getattr(args, "output_dir", None) or self.root_dir / OUTPUT_DIR_NAME)
        self._client_factory = client_factory
        self._client = None
        self._credentials = None

    def _connect(self):
        overrides = {
            "domain": getattr(self.args, "domain", None),
            "username": getattr(self.args, "username", None),
            "password": getattr(self.args, "password", None),
            "api_token": getattr(self.args, "api_token", None),
            "guest_space_id": getattr(self.args, "guest_space_id", None),
        }
        self._client, self._credentials = self._client_factory(
            overrides,
            config_path=getattr(self.args, "config", None),
            env_path=getattr(self.args, "env", None),
            root_dir=self.root_dir,
            logger=logging.getLogger(f"{LOGGER_NAME}.client"),
        )
        self.logger.info(f"   Domain: {self._credentials.domain}")

    @property
    def client(self):
        if self._client is None:
            self._connect()
        return self._client

    @property
    def credentials(self):
        if self._credentials is None:
            self._connect()
        return self._credentials

    def load(self, path: str) -> Any:
        return load_payload(path, Path.cwd())

    def save(self, data: Any, filename: str) -> Optional[Path]:
        if getattr(self.args, "no_save", False):
            return None
        output_path = save_json(data, filename, self.output_dir)
        self.logger.info(f"✅ {output_path} を出力しました")
        return output_path

    def dump(self, data: Any):
        """--print 指定時にレスポンスを標準出力へ表示する"""
        if getattr(self.args, "print_json", False):
            print(json.dumps(data, ensure_ascii=False, indent=2))


def report_error(logger: logging.Logger, error: Exception):
    """例外の内容をログに出力する。kintone のエラー詳細 (errors) があれば併せて表示する"""
    logger.error(f"❌ {type(error).__name__}: {getattr(error, 'message', None) or error}")
    errors = getattr(error, "errors", None)
    if errors:
        logger.error("Details: " + json.dumps(errors, ensure_ascii=False, indent=2))
    inner = getattr(error, "error", None)
    if isinstance(inner, Exception):
        report_error(logger, inner)


def add_output_arguments(parser):
    parser.add_argument('--no-save', action='store_true', help='JSONファイルに保存しません')
    parser.add_argument('--print', dest='print_json', action='store_true', help='レスポンスのJSONを標準出力に表示します')


def add_setting_commands(subparsers, kind: str, getter: str, updater: Optional[str], label: str,
                         key: Optional[str] = None, summarize: Optional[Callable[[Dict[str, Any]], str]] = None,
                         get_name: str = "get", update_name: str = "update"):
    """アプリ設定の取得 (get) と更新 (update) サブコマンドを登録する"""
    get_parser = subparsers.add_parser(get_name, help=f'{label}を取得 (出力: app_[アプリID]_{kind}.json)')
    get_parser.add_argument('app_id', help='アプリID')
    get_parser.add_argument('--preview', action='store_true', help='動作テスト環境の設定を取得します')
    add_output_arguments(get_parser)
    get_parser.set_defaults(func=partial(run_get_setting, getter=getter, kind=kind, label=label,
                                         summarize=summarize))

    if updater:
        update_parser = subparsers.add_parser(update_name, help=f'{label}を更新 (動作テスト環境)')
        update_parser.add_argument('app_id', help='アプリID')
        update_parser.add_argument('json_path', help='設定を記述した JSON / YAML ファイル')
        update_parser.set_defaults(func=partial(run_update_setting, updater=updater, label=label, key=key))


def run_get_setting(ctx: CommandContext, args, getter: str, kind: str, label: str,
                    summarize: Optional[Callable[[Dict[str, Any]], str]] = None):
    ctx.logger.info(f"🔄 アプリ {args.app_id} の{label}を取得しています...")
    if args.preview:
        ctx.logger.info("   Mode: Preview (pre-live)")
    result = getattr(ctx.client, getter)(args.app_id, preview=args.preview)
    if summarize:
        ctx.logger.info(f"   {summarize(result)}")
    ctx.save(result, structure_filename(args.app_id, kind, args.preview))
    ctx.dump(result)
    return 0


def run_update_setting(ctx: CommandContext, args, updater: str, label: str, key: Optional[str] = None):
    settings = ctx.load(args.json_path)
    if key:
        settings = {key: unwrap(settings, key)}
    if not isinstance(settings, dict):
        raise ValueError(f"設定ファイルの形式が不正です: {args.json_path}")

    ctx.logger.info(f"🔄 アプリ {args.app_id} の{label}を更新しています...")
    result = getattr(ctx.client, updater)(args.app_id, settings)
    ctx.logger.info(f"✅ アプリ {args.app_id} の{label}を更新しました")
    ctx.logger.info(f"   Revision: {result.get('revision')}")
    ctx.logger.info("   ※ 運用環境に反映するには deploy app を実行してください")
    return 0
