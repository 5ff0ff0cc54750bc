import pytest

from lib.kintone_applib.env import (
    KintoneConfigError,
    KintoneCredentials,
    find_root_dir,
    load_env_file,
    load_yaml_config,
    mask_secret,
    normalize_domain,
    resolve_credentials,
)


def write_env(path, domain="example.cybozu.com", username="user", password="secret"):
    path.write_text(
        f"KINTONE_DOMAIN={domain}\nKINTONE_USERNAME={username}\nKINTONE_PASSWORD={password}\n",
        encoding="utf-8",
    )
    return path


@pytest.mark.parametrize("value, expected", [
    ("example.cybozu.com", "example.cybozu.com"),
    ("example", "example.cybozu.com"),
    ("https://example.kintone.com/", "example.kintone.com"),
    ("  example.cybozu.com  ", "example.cybozu.com"),
])
def test_normalize_domain(value, expected):
    assert normalize_domain(value) == expected


def test_credentials_base_url_and_mask():
    credentials = KintoneCredentials("example", "user", "password123")

    assert credentials.base_url == "https://example.cybozu.com"
    assert credentials.masked()["password"] == "pa*******23"
    assert "password123" not in repr(credentials)
    assert mask_secret("abc") == "***"


def test_find_root_dir_walks_up_to_marker(tmp_path):
    (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_root_dir(nested) == tmp_path.resolve()


def test_find_root_dir_falls_back_to_start(tmp_path):
    nested = tmp_path / "a"
    nested.mkdir()

    assert find_root_dir(nested, max_depth=1) == nested.resolve()


def test_load_env_file(tmp_path):
    env_file = write_env(tmp_path / ".env")

    values = load_env_file(env_file)

    assert values == {"domain": "example.cybozu.com", "username": "user", "password": "secret"}


def test_load_env_file_missing(tmp_path):
    with pytest.raises(KintoneConfigError):
        load_env_file(tmp_path / "missing.env")


def test_load_yaml_config_accepts_subdomain(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("subdomain: sample\nusername: admin\npassword: pw\n", encoding="utf-8")

    assert load_yaml_config(config) == {"domain": "sample", "username": "admin", "password": "pw"}


def test_load_yaml_config_rejects_extension(tmp_path):
    config = tmp_path / "config.txt"
    config.write_text("domain: sample\n", encoding="utf-8")

    with pytest.raises(KintoneConfigError):
        load_yaml_config(config)


def test_resolve_reads_root_env(tmp_path):
    write_env(tmp_path / ".env")

    credentials = resolve_credentials(root_dir=tmp_path, environ={})

    assert credentials.domain == "example.cybozu.com"
    assert credentials.username == "user"
    assert credentials.password == "secret"


def test_resolve_priority(tmp_path):
    write_env(tmp_path / ".env", domain="from-env", username="env-user", password="env-pw")
    config = tmp_path / "config.yml"
    config.write_text("domain: from-config\nusername: config-user\n", encoding="utf-8")
    environ = {"KINTONE_DOMAIN": "from-process", "KINTONE_USERNAME": "process-user",
               "KINTONE_PASSWORD": "process-pw", "KINTONE_GUEST_SPACE_ID": "8"}

    credentials = resolve_credentials(
        overrides={"domain": "from-cli", "username": None},
        config_path=config,
        root_dir=tmp_path,
        environ=environ,
    )

    assert credentials.domain == "from-cli.cybozu.com"
    assert credentials.username == "config-user"
    assert credentials.password == "env-pw"
    assert credentials.guest_space_id == "8"


def test_resolve_explicit_env_path(tmp_path):
    write_env(tmp_path / ".env", domain="root")
    other = write_env(tmp_path / "other.env", domain="other")

    credentials = resolve_credentials(env_path=other, root_dir=tmp_path, environ={})

    assert credentials.domain == "other.cybozu.com"


def test_resolve_missing_keys(tmp_path):
    with pytest.raises(KintoneConfigError) as exc_info:
        resolve_credentials(overrides={"domain": "example"}, root_dir=tmp_path, environ={})

    assert "KINTONE_USERNAME" in str(exc_info.value)
    assert "KINTONE_PASSWORD" in str(exc_info.value)


def test_resolve_api_token_without_password(tmp_path):
    credentials = resolve_credentials(root_dir=tmp_path,
                                      environ={"KINTONE_DOMAIN": "example", "KINTONE_API_TOKEN": "token"})

    assert credentials.api_token == "token"
    assert credentials.username == ""
