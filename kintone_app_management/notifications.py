"""
通知の設定 (アプリの条件通知・レコードの条件通知・リマインダーの条件通知)

  kintone-app notifications get-general <appId> [--preview]
  kintone-app notifications update-general <appId> <jsonPath>
  kintone-app notifications get-per-record / update-per-record
  kintone-app notifications get-reminder / update-reminder
"""

from .common import add_setting_commands


def register(subparsers):
    parser = subparsers.add_parser('notifications', help='通知の設定')
    notification_subparsers = parser.add_subparsers(dest='action', required=True)

    add_setting_commands(notification_subparsers, 'generalNotifications', 'get_general_notifications',
                         'update_general_notifications', 'アプリの条件通知',
                         summarize=lambda r: f"Notifications: {len(r.get('notifications', []))}",
                         get_name='get-general', update_name='update-general')
    add_setting_commands(notification_subparsers, 'perRecordNotifications', 'get_per_record_notifications',
                         'update_per_record_notifications', 'レコードの条件通知',
                         summarize=lambda r: f"Notifications: {len(r.get('notifications', []))}",
                         get_name='get-per-record', update_name='update-per-record')
    add_setting_commands(notification_subparsers, 'reminderNotifications', 'get_reminder_notifications',
                         'update_reminder_notifications', 'リマインダーの条件通知',
                         summarize=lambda r: f"Notifications: {len(r.get('notifications', []))} / "
                                             f"Timezone: {r.get('timezone')}",
                         get_name='get-reminder', update_name='update-reminder')
