"""
kintone 接続情報の読み込み

優先順位:
  1. コマンドライン引数 (--domain / --username / --password)
  2. YAML 設定ファイル (--config)
  3. .env ファイル (--env または プロジェクトルートの .env)
  4. 環境変数 (KINTONE_DOMAIN / KINTONE_USERNAME / KINTONE_PASSWORD)
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_KEYS = {
    "domain": "KINTONE_DOMAIN",
    "username": "KINTONE_USERNAME",
    "password": "KINTONE_PASSWORD",
    "api_token": "KINTONE_API_TOKEN",
    "guest_space_id": "KINTONE_GUEST_SPACE_ID",
}
REQUIRED_KEYS = ["domain", "username", "password"]
DEFAULT_DOMAIN_SUFFIX = ".cybozu.com"
ROOT_MARKER = "pyproject.toml"


class KintoneConfigError(Exception):
    """接続情報が不足している、または読み込めない場合の例外"""


class KintoneCredentials:
    def __init__(self, domain: str, username: str = "", password: str = "",
                 api_token: Optional[str] = None, guest_space_id: Optional[str] = None):
        self.domain = normalize_domain(domain)
        self.username = username or ""
        self.password = password or ""
        self.api_token = api_token or None
        self.guest_space_id = str(guest_space_id) if guest_space_id else None

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}"

    def masked(self) -> Dict[str, str]:
        """ログ出力用にパスワードとトークンを伏せた辞書を返す"""
        return {
            "domain": self.domain,
            "username": self.username,
            "password": mask_secret(self.password),
            "api_token": mask_secret(self.api_token or ""),
        }

    def __repr__(self):
        return f"KintoneCredentials(domain='{self.domain}', username='{self.username}')"


def mask_secret(value: str) -> str:
    """先頭と末尾の2文字だけを残して中間を * に置換する"""
    if len(value) <= 4:
        return "*" * len(value)
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


def normalize_domain(domain: str) -> str:
    """
    ドメインを "xxx.cybozu.com" 形式に揃える

    スキーム付き ("https://xxx.cybozu.com/") はスキームと末尾の / を除去し、
    サブドメインのみ ("xxx") の場合は .cybozu.com を補う。
    """
    value = (domain or "").strip()
    for scheme in ("https://", "http://"):
        if value.startswith(scheme):
            value = value[len(scheme):]
    value = value.rstrip("/")
    if value and "." not in value:
        value += DEFAULT_DOMAIN_SUFFIX
    return value


def find_root_dir(start: Union[str, Path, None] = None, max_depth: int = 10) -> Path:
    """pyproject.toml を目印にプロジェクトルートを探す。見つからなければ開始ディレクトリを返す"""
    start_dir = Path(start or Path.cwd()).resolve()
    if start_dir.is_file():
        start_dir = start_dir.parent

    current = start_dir
    for _ in range(max_depth):
        if (current / ROOT_MARKER).exists():
            return current
        if current.parent == current:
            break
        current = current.parent
    return start_dir


def load_env_file(env_path: Union[str, Path]) -> Dict[str, Any]:
    """.env ファイルを読み込み、接続情報のキーに変換して返す"""
    path = Path(env_path)
    if not path.is_file():
        raise KintoneConfigError(f".env ファイルが見つかりません: {path}")

    values = dotenv_values(path)
    logger.debug(f".env ファイルを読み込みました: {path}")
    return {key: values.get(env_key) for key, env_key in ENV_KEYS.items() if values.get(env_key)}


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """YAML 形式の設定ファイルを読み込む"""
    path = Path(os.path.expanduser(str(config_path))).resolve()
    if not path.is_file():
        raise KintoneConfigError(f"設定ファイルが見つかりません: {path}")
    if path.suffix.lower() not in (".yaml", ".yml"):
        raise KintoneConfigError(f"設定ファイルの拡張子が無効です: {path}. 有効な拡張子は .yaml または .yml です。")

    with open(path, "r", encoding="utf-8") as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise KintoneConfigError(f"設定ファイルの解析に失敗しました: {e}")

    if not isinstance(config, dict):
        raise KintoneConfigError(f"設定ファイルの形式が不正です: {path}")

    # 旧形式の subdomain キーにも対応
    if "domain" not in config and config.get("subdomain"):
        config["domain"] = config["subdomain"]
    return {key: config[key] for key in ENV_KEYS if config.get(key)}


def load_process_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    environ = os.environ if environ is None else environ
    return {key: environ[env_key] for key, env_key in ENV_KEYS.items() if environ.get(env_key)}


def get_kintone_credentials(values: Dict[str, Any]) -> KintoneCredentials:
    """
    接続情報の辞書を検証して KintoneCredentials を返す

    API トークンがある場合はユーザー名・パスワードを省略できる。
    """
    if values.get("api_token"):
        missing_keys = [] if values.get("domain") else ["domain"]
    else:
        missing_keys = [key for key in REQUIRED_KEYS if not values.get(key)]

    if missing_keys:
        env_names = ", ".join(ENV_KEYS[key] for key in missing_keys)
        raise KintoneConfigError(f"接続情報が不足しています: {env_names}")

    return KintoneCredentials(
        domain=str(values["domain"]),
        username=str(values.get("username") or ""),
        password=str(values.get("password") or ""),
        api_token=values.get("api_token"),
        guest_space_id=values.get("guest_space_id"),
    )


def resolve_credentials(overrides: Optional[Dict[str, Any]] = None,
                        config_path: Union[str, Path, None] = None,
                        env_path: Union[str, Path, None] = None,
                        root_dir: Union[str, Path, None] = None,
                        environ: Optional[Dict[str, str]] = None) -> KintoneCredentials:
    """各ソースの接続情報をマージし、検証済みの KintoneCredentials を返す"""
    values = load_process_env(environ)

    if env_path is not None:
        values.update(load_env_file(env_path))
    else:
        default_env = find_root_dir(root_dir) / ".env"
        if default_env.is_file():
            values.update(load_env_file(default_env))

    if config_path is not None:
        values.update(load_yaml_config(config_path))

    if overrides:
        values.update({key: value for key, value in overrides.items() if value})

    return get_kintone_credentials(values)
