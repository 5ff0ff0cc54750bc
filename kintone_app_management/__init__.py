"""kintone アプリ管理 CLI"""

__version__ = "0.1.0"
