"""
スペース・スレッド・ゲスト

  kintone-app space get <spaceId>
  kintone-app space update <spaceId> <settingsJsonPath>
  kintone-app space delete <spaceId> --confirm
  kintone-app space update-body <spaceId> (<bodyHtmlPath> | --inline "<h1>...</h1>")
  kintone-app space members / update-members <spaceId> ...
  kintone-app space add-from-template <templateId> <name> <membersJsonPath> [--private] [--guest] [--fixed-member]
  kintone-app space add-thread <spaceId> <threadName>
  kintone-app space update-thread <threadId> [--name ...] [--body-file ...]
  kintone-app space add-thread-comment <spaceId> <threadId> (<text> | --json <commentJsonPath>)
  kintone-app space add-guests <guestsJsonPath>
  kintone-app space delete-guests <email>... --confirm
  kintone-app space update-guests <spaceId> (<email>... | --json <guestsJsonPath>)
"""

from pathlib import Path

from lib.kintone_applib.files import unwrap
from .common import add_output_arguments


def read_text(path):
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"ファイルが存在しません: {file_path}")
    return file_path.read_text(encoding="utf-8")


def require_confirm(args, target):
    if not args.confirm:
        raise ValueError(f"{target}は取り消せません。実行する場合は --confirm を指定してください")


def register(subparsers):
    parser = subparsers.add_parser('space', help='スペース・スレッド・ゲスト')
    ss = parser.add_subparsers(dest='action', required=True)

    p = ss.add_parser('get', help='スペース情報を取得 (出力: space_[スペースID]_info.json)')
    p.add_argument('space_id', help='スペースID')
    add_output_arguments(p)
    p.set_defaults(func=get_space)

    p = ss.add_parser('update', help='スペースの設定を更新')
    p.add_argument('space_id', help='スペースID')
    p.add_argument('json_path', help='設定を記述した JSON / YAML ファイル')
    p.set_defaults(func=update_space)

    p = ss.add_parser('delete', help='スペースを削除')
    p.add_argument('space_id', help='スペースID')
    p.add_argument('--confirm', action='store_true', help='削除を確定します')
    p.set_defaults(func=delete_space)

    p = ss.add_parser('update-body', help='スペースの本文を更新')
    p.add_argument('space_id', help='スペースID')
    p.add_argument('body_path', nargs='?', help='本文の HTML ファイル')
    p.add_argument('--inline', help='本文の HTML 文字列')
    p.set_defaults(func=update_space_body)

    p = ss.add_parser('members', help='スペースメンバーを取得 (出力: space_[スペースID]_members.json)')
    p.add_argument('space_id', help='スペースID')
    add_output_arguments(p)
    p.set_defaults(func=get_space_members)

    p = ss.add_parser('update-members', help='スペースメンバーを更新')
    p.add_argument('space_id', help='スペースID')
    p.add_argument('json_path', help='members の配列を記述した JSON / YAML ファイル')
    p.set_defaults(func=update_space_members)

    p = ss.add_parser('add-from-template', help='テンプレートからスペースを作成')
    p.add_argument('template_id', help='テンプレートID')
    p.add_argument('name', help='スペース名')
    p.add_argument('json_path', help='members の配列を記述した JSON / YAML ファイル')
    p.add_argument('--private', action='store_true', help='非公開スペースにします')
    p.add_argument('--guest', action='store_true', help='ゲストスペースにします')
    p.add_argument('--fixed-member', action='store_true', help='メンバーの脱退を禁止します')
    p.set_defaults(func=add_space_from_template)

    p = ss.add_parser('add-thread', help='スレッドを作成')
    p.add_argument('space_id', help='スペースID')
    p.add_argument('name', help='スレッド名')
    p.set_defaults(func=add_thread)

    p = ss.add_parser('update-thread', help='スレッドを更新')
    p.add_argument('thread_id', help='スレッドID')
    p.add_argument('--name', help='新しいスレッド名')
    p.add_argument('--body-file', help='本文の HTML ファイル')
    p.set_defaults(func=update_thread)

    p = ss.add_parser('add-thread-comment', help='スレッドにコメントを投稿')
    p.add_argument('space_id', help='スペースID')
    p.add_argument('thread_id', help='スレッドID')
    p.add_argument('text', nargs='?', help='コメント本文')
    p.add_argument('--json', dest='json_path', help='comment (text / mentions / files) を記述した JSON / YAML ファイル')
    p.set_defaults(func=add_thread_comment)

    p = ss.add_parser('add-guests', help='ゲストユーザーを追加')
    p.add_argument('json_path', help='guests の配列を記述した JSON / YAML ファイル')
    p.set_defaults(func=add_guests)

    p = ss.add_parser('delete-guests', help='ゲストユーザーを削除')
    p.add_argument('emails', nargs='+', help='ゲストのメールアドレス')
    p.add_argument('--confirm', action='store_true', help='削除を確定します')
    p.set_defaults(func=delete_guests)

    p = ss.add_parser('update-guests', help='ゲストスペースのゲストを更新')
    p.add_argument('space_id', help='スペースID')
    p.add_argument('emails', nargs='*', help='ゲストのメールアドレス')
    p.add_argument('--json', dest='json_path', help='guests の配列を記述した JSON / YAML ファイル')
    p.set_defaults(func=update_space_guests)


def get_space(ctx, args):
    ctx.logger.info(f"🔄 スペース {args.space_id} の情報を取得しています...")
    result = ctx.client.get_space(args.space_id)
    ctx.logger.info(f"   Name: {result.get('name')}")
    ctx.logger.info(f"   Members: {result.get('memberCount')}")
    ctx.save(result, f"space_{args.space_id}_info.json")
    ctx.dump(result)
    return 0


def update_space(ctx, args):
    settings = ctx.load(args.json_path)
    if not isinstance(settings, dict):
        raise ValueError(f"設定ファイルの形式が不正です: {args.json_path}")
    ctx.logger.info(f"🔄 スペース {args.space_id} の設定を更新しています...")
    ctx.client.update_space(args.space_id, settings)
    ctx.logger.info("✅ スペースの設定を更新しました")
    return 0


def delete_space(ctx, args):
    require_confirm(args, "スペースの削除")
    ctx.logger.warning(f"スペース {args.space_id} を削除します")
    ctx.client.delete_space(args.space_id)
    ctx.logger.info(f"✅ スペース {args.space_id} を削除しました")
    return 0


def update_space_body(ctx, args):
    if args.inline is not None:
        body = args.inline
    elif args.body_path:
        body = read_text(args.body_path)
    else:
        raise ValueError("本文の HTML ファイル または --inline を指定してください")

    ctx.logger.info(f"🔄 スペース {args.space_id} の本文を更新しています...")
    ctx.client.update_space_body(args.space_id, body)
    ctx.logger.info(f"✅ 本文を更新しました ({len(body)} 文字)")
    return 0


def get_space_members(ctx, args):
    ctx.logger.info(f"🔄 スペース {args.space_id} のメンバーを取得しています...")
    result = ctx.client.get_space_members(args.space_id)
    for member in result.get("members", []):
        entity = member.get("entity", {})
        admin = " (管理者)" if member.get("isAdmin") else ""
        ctx.logger.info(f"   {entity.get('type')}: {entity.get('code')}{admin}")
    ctx.save(result, f"space_{args.space_id}_members.json")
    ctx.dump(result)
    return 0


def update_space_members(ctx, args):
    members = unwrap(ctx.load(args.json_path), 'members')
    if not isinstance(members, list):
        raise ValueError(f"members の配列が見つかりません: {args.json_path}")
    ctx.logger.info(f"🔄 スペース {args.space_id} のメンバーを更新しています...")
    ctx.client.update_space_members(args.space_id, members)
    ctx.logger.info(f"✅ {len(members)} 件のメンバーを設定しました")
    return 0


def add_space_from_template(ctx, args):
    members = unwrap(ctx.load(args.json_path), 'members')
    if not isinstance(members, list):
        raise ValueError(f"members の配列が見つかりません: {args.json_path}")
    ctx.logger.info(f"🔄 テンプレート {args.template_id} からスペース「{args.name}」を作成しています...")
    result = ctx.client.add_space_from_template(args.template_id, args.name, members, is_private=args.private,
                                                is_guest=args.guest, fixed_member=args.fixed_member)
    ctx.logger.info("✅ スペースを作成しました")
    ctx.logger.info(f"   Space ID: {result.get('id')}")
    return 0


def add_thread(ctx, args):
    ctx.logger.info(f"🔄 スペース {args.space_id} にスレッド「{args.name}」を作成しています...")
    result = ctx.client.add_thread(args.space_id, args.name)
    ctx.logger.info("✅ スレッドを作成しました")
    ctx.logger.info(f"   Thread ID: {result.get('id')}")
    return 0


def update_thread(ctx, args):
    body = read_text(args.body_file) if args.body_file else None
    ctx.logger.info(f"🔄 スレッド {args.thread_id} を更新しています...")
    ctx.client.update_thread(args.thread_id, name=args.name, body=body)
    ctx.logger.info("✅ スレッドを更新しました")
    return 0


def add_thread_comment(ctx, args):
    if args.json_path:
        comment = unwrap(ctx.load(args.json_path), 'comment')
    elif args.text:
        comment = {"text": args.text}
    else:
        raise ValueError("コメント本文 または --json を指定してください")

    ctx.logger.info(f"🔄 スレッド {args.thread_id} にコメントを投稿しています...")
    result = ctx.client.add_thread_comment(args.space_id, args.thread_id, comment)
    ctx.logger.info("✅ コメントを投稿しました")
    ctx.logger.info(f"   Comment ID: {result.get('id')}")
    return 0


def add_guests(ctx, args):
    guests = unwrap(ctx.load(args.json_path), 'guests')
    if not isinstance(guests, list):
        raise ValueError(f"guests の配列が見つかりません: {args.json_path}")
    ctx.logger.info(f"🔄 {len(guests)} 件のゲストユーザーを追加しています...")
    ctx.client.add_guests(guests)
    ctx.logger.info("✅ ゲストユーザーを追加しました")
    return 0


def delete_guests(ctx, args):
    require_confirm(args, "ゲストユーザーの削除")
    ctx.logger.warning(f"ゲストユーザーを削除します: {', '.join(args.emails)}")
    ctx.client.delete_guests(args.emails)
    ctx.logger.info(f"✅ {len(args.emails)} 件のゲストユーザーを削除しました")
    return 0


def update_space_guests(ctx, args):
    guests = unwrap(ctx.load(args.json_path), 'guests') if args.json_path else args.emails
    if not isinstance(guests, list):
        raise ValueError(f"guests の配列が見つかりません: {args.json_path}")
    ctx.logger.info(f"🔄 スペース {args.space_id} のゲストを更新しています...")
    ctx.client.update_space_guests(args.space_id, guests)
    ctx.logger.info(f"✅ {len(guests)} 件のゲストを設定しました")
    return 0
