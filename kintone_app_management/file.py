"""
ファイルのアップロード・ダウンロード

  kintone-app file upload <filePath>
  kintone-app file download <fileKey> [outputPath]

ダウンロードに使う fileKey はレコードの添付ファイルフィールドから取得する
(record.添付ファイル.value[0].fileKey)。アップロードで得られる fileKey とは別物。
"""

from pathlib import Path


def register(subparsers):
    parser = subparsers.add_parser('file', help='ファイルのアップロード・ダウンロード')
    file_subparsers = parser.add_subparsers(dest='action', required=True)

    upload_parser = file_subparsers.add_parser('upload', help='ファイルをアップロードして fileKey を取得')
    upload_parser.add_argument('file_path', help='アップロードするファイル')
    upload_parser.set_defaults(func=upload_file)

    download_parser = file_subparsers.add_parser('download', help='添付ファイルをダウンロード')
    download_parser.add_argument('file_key', help='レコードの添付ファイルフィールドの fileKey')
    download_parser.add_argument('output_path', nargs='?', help='保存先 (省略時はサイズのみ表示)')
    download_parser.set_defaults(func=download_file)


def upload_file(ctx, args):
    path = Path(args.file_path)
    if not path.is_file():
        raise FileNotFoundError(f"ファイルが存在しません: {path}")

    ctx.logger.info(f"🔄 {path.name} をアップロードしています...")
    result = ctx.client.upload_file(path)
    ctx.logger.info("✅ アップロードしました")
    ctx.logger.info(f"   File Key: {result.get('fileKey')}")
    ctx.logger.info("   ※ fileKey は3日以内にレコードの添付ファイルフィールドに設定してください")
    return 0


def download_file(ctx, args):
    ctx.logger.info("🔄 ファイルをダウンロードしています...")
    ctx.logger.info(f"   File Key: {args.file_key}")
    data = ctx.client.download_file(args.file_key)
    ctx.logger.info("✅ ダウンロードしました")
    ctx.logger.info(f"   Size: {len(data)} bytes")

    if args.output_path:
        output_path = Path(args.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        ctx.logger.info(f"   Saved to: {output_path}")
    return 0
