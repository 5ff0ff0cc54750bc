"""
複数の API をまとめて実行 (bulkRequest)

  kintone-app bulk <requestsJsonPath>

JSON の形式:
  [
    {"method": "POST", "api": "/k/v1/record.json", "payload": {"app": "1", "record": {...}}},
    {"method": "PUT", "api": "/k/v1/record.json", "payload": {"app": "1", "id": "10", "record": {...}}}
  ]

すべてのリクエストは1つのトランザクションとして実行され、どれかが失敗すると全体が取り消される。
"""

from lib.kintone_applib.client import MAX_BULK_REQUESTS
from lib.kintone_applib.files import unwrap


def register(subparsers):
    parser = subparsers.add_parser('bulk', help=f'複数の API をまとめて実行 (最大{MAX_BULK_REQUESTS}件)')
    parser.add_argument('json_path', help='requests の配列を記述した JSON / YAML ファイル')
    parser.add_argument('--print', dest='print_json', action='store_true', help='レスポンスのJSONを標準出力に表示します')
    parser.set_defaults(func=bulk_request)


def bulk_request(ctx, args):
    requests_ = unwrap(ctx.load(args.json_path), 'requests')
    if not isinstance(requests_, list):
        raise ValueError(f"requests の配列が見つかりません: {args.json_path}")

    ctx.logger.info(f"🔄 {len(requests_)} 件のリクエストを実行しています...")
    for index, request in enumerate(requests_, 1):
        ctx.logger.info(f"   {index}. {request.get('method')} {request.get('api')}")

    result = ctx.client.bulk_request(requests_)
    ctx.logger.info(f"✅ {len(result.get('results', []))} 件のリクエストを実行しました")
    ctx.dump(result)
    return 0
