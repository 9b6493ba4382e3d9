import pytest

from core.exceptions import ExternalProcessError
from core.models import ConnectionParams
from db.mysql import MySQLClient
from db.process import ProcessResult


class FakeRunner:
    """Records invocations and replies with canned stdout"""

    def __init__(self, stdout: bytes = b"", error: ExternalProcessError = None):
        self.stdout = stdout
        self.error = error
        self.calls = []

    async def run(self, command, args=(), **kwargs):
        self.calls.append((command, list(args), kwargs))
        if self.error:
            raise self.error
        sink = kwargs.get("stdout")
        if sink is not None:
            sink.write(self.stdout)
            return ProcessResult(command, 0, b"", "")
        return ProcessResult(command, 0, self.stdout, "")


def make_client(runner, **params) -> MySQLClient:
    return MySQLClient(ConnectionParams(**params), runner=runner)


def test_tcp_arguments():
    params = ConnectionParams(host="db", port=3307, user="app", password="pw")
    assert params.to_cli_args() == ["--user=app", "--password=pw", "--host=db", "--port=3307"]
    assert params.describe() == "TCP (db:3307)"


def test_socket_replaces_host_and_port():
    params = ConnectionParams(host="db", port=3307, user="app", socket="/tmp/mysql.sock")
    assert params.to_cli_args() == ["--user=app", "--socket=/tmp/mysql.sock"]
    assert params.describe() == "Socket (/tmp/mysql.sock)"


@pytest.mark.asyncio
async def test_exists_matches_exact_name():
    runner = FakeRunner(stdout=b"shopXtemp\nshop_temp\n")
    client = make_client(runner)

    assert await client.database_exists("shop_temp")
    command, args, _ = runner.calls[0]
    assert command == "mysql"
    assert "SHOW DATABASES LIKE 'shop\\\\_temp'" in args


@pytest.mark.asyncio
async def test_exists_ignores_wildcard_match():
    client = make_client(FakeRunner(stdout=b"shopXtemp\n"))
    assert not await client.database_exists("shop_temp")


@pytest.mark.asyncio
async def test_create_uses_charset_and_collation():
    runner = FakeRunner()
    await make_client(runner).create_database("shop_temp")

    _, args, _ = runner.calls[0]
    assert "CREATE DATABASE `shop_temp` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci" in args


@pytest.mark.asyncio
async def test_drop_quotes_identifier():
    runner = FakeRunner()
    await make_client(runner).drop_database("we`ird")

    _, args, _ = runner.calls[0]
    assert "DROP DATABASE `we``ird`" in args


@pytest.mark.asyncio
async def test_drop_failure_propagates():
    runner = FakeRunner(error=ExternalProcessError("mysql", 1, "ERROR 1008"))
    with pytest.raises(ExternalProcessError):
        await make_client(runner).drop_database("gone")


@pytest.mark.asyncio
async def test_list_databases_filters_system_schemas():
    runner = FakeRunner(stdout=b"sys\nshop\nmysql\nblog\ninformation_schema\nperformance_schema\n")
    assert await make_client(runner).list_databases() == ["blog", "shop"]


@pytest.mark.asyncio
async def test_database_info_parses_row():
    runner = FakeRunner(stdout=b"12\t3.50\n")
    info = await make_client(runner).database_info("shop")
    assert info.table_count == 12
    assert info.size_mb == 3.5


def test_export_arguments():
    client = make_client(FakeRunner(), user="root")
    schema_args = client.export_args("shop_temp", data=False)
    data_args = client.export_args("shop_temp", schema=False, ignore_tables=["sessions", "cache"])

    assert "--no-data" in schema_args
    assert "--no-create-info" not in schema_args
    assert "--no-create-info" in data_args
    assert "--ignore-table=shop_temp.sessions" in data_args
    assert "--ignore-table=shop_temp.cache" in data_args
    assert data_args[-1] == "shop_temp"


@pytest.mark.asyncio
async def test_import_streams_file(tmp_path):
    dump = tmp_path / "shop.sql"
    dump.write_bytes(b"CREATE TABLE t (id int);\n")
    runner = FakeRunner()
    await make_client(runner).import_dump("shop_temp", str(dump))

    command, args, kwargs = runner.calls[0]
    assert command == "mysql"
    assert args[-1] == "shop_temp"
    assert kwargs["stdin"].name == str(dump)


@pytest.mark.asyncio
async def test_export_writes_output(tmp_path):
    out = tmp_path / "out.sql"
    runner = FakeRunner(stdout=b"-- MySQL dump\n")
    await make_client(runner).export_dump("shop", str(out), data=False)

    command, _, _ = runner.calls[0]
    assert command == "mysqldump"
    assert out.read_bytes() == b"-- MySQL dump\n"
