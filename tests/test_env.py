from pathlib import Path

from reqbook.env.manager import EnvironmentManager
from reqbook.env.parser import environment_name, load_env_file, parse_env

FIXTURES = Path(__file__).parent / "fixtures"


class TestParseEnv:
    def test_key_values(self):
        result = parse_env("HOST=localhost\nPORT = 8080\n")
        assert result.success is True
        assert result.environment.variables == {"HOST": "localhost", "PORT": "8080"}
        assert result.environment.name == "default"

    def test_double_and_single_quotes_stripped(self):
        double = parse_env('MESSAGE="Hello World"').environment.variables["MESSAGE"]
        single = parse_env("MESSAGE='Hello World'").environment.variables["MESSAGE"]
        assert double == "Hello World"
        assert single == "Hello World"

    def test_inner_content_unmodified(self):
        result = parse_env("QUERY=\"a='b' # c\"")
        assert result.environment.variables["QUERY"] == "a='b' # c"

    def test_value_may_contain_equals(self):
        result = parse_env("URL=https://x.io/?a=1&b=2")
        assert result.environment.variables["URL"] == "https://x.io/?a=1&b=2"

    def test_comments_and_blank_lines_ignored(self):
        result = parse_env("# comment\n\n   \nA=1\n  # indented comment\n")
        assert result.environment.variables == {"A": "1"}

    def test_duplicate_last_wins(self):
        result = parse_env("A=1\nA=2")
        assert result.environment.variables == {"A": "2"}

    def test_missing_equals_is_error(self):
        result = parse_env("A=1\nJUSTTEXT\n")
        assert result.success is False
        assert result.environment is None
        assert result.errors[0].line == 2
        assert "expected KEY=VALUE" in result.errors[0].message

    def test_invalid_key_is_error(self):
        result = parse_env("1ABC=x\nMY-KEY=y\n_OK=z")
        assert [e.line for e in result.errors] == [1, 2]
        assert "Invalid key" in result.errors[0].message

    def test_file_path_kept(self):
        result = parse_env("A=1", "/work/.env.staging")
        assert result.environment.name == "staging"
        assert result.environment.file_path == "/work/.env.staging"


class TestEnvironmentName:
    def test_names(self):
        assert environment_name(".env") == "default"
        assert environment_name("/a/b/.env") == "default"
        assert environment_name("/a/.env.production") == "production"
        assert environment_name("C:\\proj\\.env.local") == "local"


class TestLoadEnvFile:
    def test_load_fixture(self):
        result = load_env_file(FIXTURES / "envs" / ".env")
        assert result.success is True
        assert result.environment.variables["PASSWORD"] == "s3cret pass"
        assert result.environment.variables["BASE_URL"] == "http://{{HOST}}:{{PORT}}"


class TestEnvironmentManager:
    def test_loads_and_defaults(self):
        manager = EnvironmentManager(FIXTURES / "envs")
        manager.load()
        assert manager.available == ["default", "production"]
        assert manager.current.name == "default"
        assert manager.get_variable("HOST") == "localhost"

    def test_switch(self):
        manager = EnvironmentManager(FIXTURES / "envs")
        manager.load()
        assert manager.switch("production") is True
        assert manager.get_variable("USER") == "prod-user"
        assert manager.switch("missing") is False
        assert manager.current.name == "production"

    def test_first_loaded_when_no_default(self, tmp_path):
        (tmp_path / ".env.test").write_text("A=1\n", encoding="utf-8")
        (tmp_path / ".env.local").write_text("A=2\n", encoding="utf-8")
        manager = EnvironmentManager(tmp_path)
        manager.load()
        assert manager.current.name == "local"

    def test_invalid_file_skipped(self, tmp_path):
        (tmp_path / ".env").write_text("not valid\n", encoding="utf-8")
        (tmp_path / ".env.development").write_text("A=1\n", encoding="utf-8")
        manager = EnvironmentManager(tmp_path)
        manager.load()
        assert manager.available == ["development"]

    def test_empty_workspace(self, tmp_path):
        manager = EnvironmentManager(tmp_path)
        manager.load()
        assert manager.current is None
        assert manager.get_variable("A") is None
        assert manager.all_variables() == {}

    def test_all_variables_is_a_copy(self):
        manager = EnvironmentManager(FIXTURES / "envs")
        manager.load()
        variables = manager.all_variables()
        variables["HOST"] = "changed"
        assert manager.get_variable("HOST") == "localhost"
