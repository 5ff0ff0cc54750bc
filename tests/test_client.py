import base64
from unittest.mock import MagicMock, Mock

import pytest

from lib.kintone_applib.client import (
    KintoneAllRecordsError,
    KintoneRestAPIError,
    KintoneRestClient,
    chunked,
    flatten_params,
)
from lib.kintone_applib.env import KintoneCredentials


def make_response(body=None, status_code=200, content=b""):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body if body is not None else {}
    response.text = ""
    response.content = content
    return response


def make_client(*bodies, guest_space_id=None, api_token=None):
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = [b if isinstance(b, Mock) else make_response(b) for b in bodies]
    if api_token:
        credentials = KintoneCredentials("example", api_token=api_token, guest_space_id=guest_space_id)
    else:
        credentials = KintoneCredentials("example", "user", "pw", guest_space_id=guest_space_id)
    return KintoneRestClient(credentials, session=session), session


def test_flatten_params():
    pairs = flatten_params({"app": 1, "apps": [1, 2], "totalCount": True, "lang": None,
                            "filter": {"name": "x"}})

    assert pairs == [("app", "1"), ("apps[0]", "1"), ("apps[1]", "2"), ("totalCount", "true"),
                     ("filter.name", "x")]


def test_chunked():
    assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]


def test_password_auth_header():
    _, session = make_client()

    expected = base64.b64encode(b"user:pw").decode("utf-8")
    assert session.headers["X-Cybozu-Authorization"] == expected


def test_api_token_header():
    _, session = make_client(api_token="token")

    assert session.headers["X-Cybozu-API-Token"] == "token"


def test_get_request_builds_query_string():
    client, session = make_client({"apps": [{"app": "1", "status": "SUCCESS"}]})

    result = client.get_deploy_status([1])

    assert result["apps"][0]["status"] == "SUCCESS"
    method, url = session.request.call_args.args
    assert method == "GET"
    assert url == "https://example.cybozu.com/k/v1/preview/app/deploy.json?apps%5B0%5D=1"


def test_guest_space_path():
    client, session = make_client({"properties": {}}, guest_space_id="5")

    client.get_form_fields(10, preview=True)

    url = session.request.call_args.args[1]
    assert url.startswith("https://example.cybozu.com/k/guest/5/v1/preview/app/form/fields.json?")


def test_update_setting_puts_to_preview():
    client, session = make_client({"revision": "3"})

    result = client.update_views(10, {"views": {"一覧": {"type": "LIST"}}})

    assert result == {"revision": "3"}
    method, url = session.request.call_args.args
    assert method == "PUT"
    assert url == "https://example.cybozu.com/k/v1/preview/app/views.json"
    assert session.request.call_args.kwargs["json"] == {"views": {"一覧": {"type": "LIST"}}, "app": 10}


def test_long_get_uses_method_override():
    client, session = make_client({"records": []})

    client.get_records(1, query='title = "' + "x" * 5000 + '"')

    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == "POST"
    assert "?" not in url
    assert kwargs["headers"]["X-HTTP-Method-Override"] == "GET"
    assert kwargs["json"]["app"] == 1


def test_error_response_raises():
    body = {"code": "GAIA_AP01", "id": "abc", "message": "アプリが見つかりません。",
            "errors": {"app": {"messages": ["不正な値です。"]}}}
    client, _ = make_client(make_response(body, status_code=404))

    with pytest.raises(KintoneRestAPIError) as exc_info:
        client.get_app(999)

    error = exc_info.value
    assert error.status == 404
    assert error.code == "GAIA_AP01"
    assert error.errors == {"app": {"messages": ["不正な値です。"]}}


def test_error_response_without_json():
    response = make_response(status_code=502)
    response.json.side_effect = ValueError("no json")
    response.text = "Bad Gateway"
    client, _ = make_client(response)

    with pytest.raises(KintoneRestAPIError) as exc_info:
        client.get_app(1)

    assert exc_info.value.message == "Bad Gateway"


def test_get_apps_pages_until_short_batch():
    first = {"apps": [{"appId": str(i)} for i in range(100)]}
    second = {"apps": [{"appId": "100"}]}
    client, session = make_client(first, second)

    result = client.get_apps()

    assert len(result["apps"]) == 101
    assert session.request.call_count == 2
    assert "offset=100" in session.request.call_args.args[1]


def test_bulk_request_limits():
    client, _ = make_client()

    with pytest.raises(ValueError):
        client.bulk_request([])
    with pytest.raises(ValueError):
        client.bulk_request([{"method": "POST", "api": "/k/v1/record.json", "payload": {}}] * 21)


def test_add_all_records_splits_requests():
    records = [{"title": {"value": str(i)}} for i in range(2101)]
    first = {"results": [{"ids": [str(i)], "revisions": ["1"]} for i in range(20)]}
    second = {"results": [{"ids": ["x"], "revisions": ["1"]}, {"ids": ["y"], "revisions": ["1"]}]}
    client, session = make_client(first, second)

    result = client.add_all_records(1, records)

    assert session.request.call_count == 2
    first_requests = session.request.call_args_list[0].kwargs["json"]["requests"]
    second_requests = session.request.call_args_list[1].kwargs["json"]["requests"]
    assert len(first_requests) == 20
    assert len(second_requests) == 2
    assert first_requests[0]["api"] == "/k/v1/records.json"
    assert len(first_requests[0]["payload"]["records"]) == 100
    assert len(second_requests[1]["payload"]["records"]) == 1
    assert len(result["records"]) == 22


def test_add_all_records_reports_progress_on_failure():
    records = [{"title": {"value": str(i)}} for i in range(2100)]
    first = {"results": [{"ids": [str(i)], "revisions": ["1"]} for i in range(20)]}
    client, _ = make_client(first, make_response({"message": "error"}, status_code=400))

    with pytest.raises(KintoneAllRecordsError) as exc_info:
        client.add_all_records(1, records)

    assert len(exc_info.value.processed) == 20
    assert exc_info.value.total == 2100
    assert isinstance(exc_info.value.error, KintoneRestAPIError)


def test_add_records_limit():
    client, _ = make_client()

    with pytest.raises(ValueError):
        client.add_records(1, [{}] * 101)


def test_get_all_records_with_id_pages_by_id():
    first = {"records": [{"$id": {"value": str(i)}} for i in range(1, 501)]}
    second = {"records": [{"$id": {"value": "501"}}]}
    client, session = make_client(first, second)

    records = client.get_all_records(1, condition='status = "done"')

    assert len(records) == 501
    queries = [call.args[1] for call in session.request.call_args_list]
    assert "%24id+%3E+0" in queries[0]
    assert "%24id+%3E+500" in queries[1]


def test_get_all_records_with_cursor_deletes_cursor_on_error():
    client, session = make_client(
        {"id": "cursor-1", "totalCount": "600"},
        {"records": [{}] * 500, "next": True},
        make_response({"message": "error"}, status_code=500),
        {},
    )

    with pytest.raises(KintoneRestAPIError):
        client.get_all_records(1, order_by="$id desc")

    method, url = session.request.call_args.args
    assert method == "DELETE"
    assert url.endswith("records/cursor.json?id=cursor-1")


def test_upsert_updates_existing_record():
    client, session = make_client({"records": [{"$id": {"value": "12"}}]}, {"revision": "4"})

    result = client.upsert_record(1, {"field": "code", "value": "A-1"}, {"title": {"value": "new"}})

    assert result == {"id": "12", "revision": "4"}
    method, _ = session.request.call_args.args
    payload = session.request.call_args.kwargs["json"]
    assert method == "PUT"
    assert payload["updateKey"] == {"field": "code", "value": "A-1"}


def test_upsert_adds_missing_record():
    client, session = make_client({"records": []}, {"id": "13", "revision": "1"})

    result = client.upsert_record(1, {"field": "code", "value": "A-2"}, {"title": {"value": "new"}})

    assert result == {"id": "13", "revision": "1"}
    payload = session.request.call_args.kwargs["json"]
    assert payload["record"]["code"] == {"value": "A-2"}


def test_download_file_returns_bytes():
    client, _ = make_client(make_response(content=b"binary"))

    assert client.download_file("key") == b"binary"


def test_delete_records_uses_query_string():
    client, session = make_client({})

    client.delete_records(1, [3, 4])

    method, url = session.request.call_args.args
    assert method == "DELETE"
    assert url.endswith("records.json?app=1&ids%5B0%5D=3&ids%5B1%5D=4")
    assert "json" not in session.request.call_args.kwargs


def test_update_all_records_sets_upsert_on_every_chunk():
    records = [{"updateKey": {"field": "code", "value": str(i)}, "record": {}} for i in range(150)]
    results = {"results": [{"records": [{"id": "1", "revision": "2"}] * 100},
                           {"records": [{"id": "2", "revision": "2"}] * 50}]}
    client, session = make_client(results)

    result = client.update_all_records(1, records, upsert=True)

    requests_ = session.request.call_args.kwargs["json"]["requests"]
    assert session.request.call_count == 1
    assert [r["method"] for r in requests_] == ["PUT", "PUT"]
    assert all(r["payload"]["upsert"] is True for r in requests_)
    assert [len(r["payload"]["records"]) for r in requests_] == [100, 50]
    assert len(result["records"]) == 150


@pytest.mark.parametrize("method", ["add_all_records", "update_all_records", "delete_all_records"])
def test_all_records_rejects_empty_list(method):
    client, session = make_client()

    with pytest.raises(ValueError):
        getattr(client, method)(1, [])

    session.request.assert_not_called()


@pytest.mark.parametrize("records, expected", [
    ([{"id": 1}, {"id": 2}], None),
    ([{"id": 1}, {"id": 2, "revision": 5}], [-1, 5]),
    ([{"id": 1, "revision": None}, {"id": 2, "revision": 5}], [-1, 5]),
])
def test_delete_all_records_revisions(records, expected):
    client, session = make_client({"results": [{}]})

    client.delete_all_records(1, records)

    payload = session.request.call_args.kwargs["json"]["requests"][0]["payload"]
    assert payload["ids"] == [1, 2]
    assert payload.get("revisions") == expected
