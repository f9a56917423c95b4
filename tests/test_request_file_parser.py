from pathlib import Path

from reqbook.parser.request_file import (
    RequestFileParser,
    find_request,
    is_separator,
    is_valid_url,
    parse_request_file,
)

FIXTURES = Path(__file__).parent / "fixtures"


def _parse(text: str):
    return RequestFileParser().parse(text)


class TestSeparators:
    def test_hash_and_dash_separators(self):
        assert is_separator("###")
        assert is_separator("#####   ")
        assert is_separator("  ---")
        assert is_separator("------")

    def test_not_separators(self):
        assert not is_separator("## two")
        assert not is_separator("### Section title")
        assert not is_separator("--")
        assert not is_separator("--boundary")

    def test_requests_joined_with_separators_keep_order(self):
        lines = [f"GET https://example.com/{n}" for n in range(1, 6)]
        result = _parse("\n###\n".join(lines))
        assert [r.id for r in result.requests] == ["req-1", "req-2", "req-3", "req-4", "req-5"]
        assert [r.url for r in result.requests] == [f"https://example.com/{n}" for n in range(1, 6)]
        assert result.errors == []

    def test_consecutive_separators_produce_no_empty_requests(self):
        result = _parse("###\n###\nGET /a\n###\n---\n###\n\nGET /b\n###\n###")
        assert len(result.requests) == 2
        assert [r.url for r in result.requests] == ["/a", "/b"]

    def test_comments_and_separators_only(self):
        result = _parse("# hello\n// world\n###\n---\n\n# bye\n")
        assert result.requests == []
        assert result.errors == []


class TestRequestLine:
    def test_method_is_uppercased(self):
        result = _parse("post https://example.com/items")
        assert result.requests[0].method == "POST"

    def test_all_known_methods(self):
        methods = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
        result = _parse("\n###\n".join(f"{m} /x" for m in methods))
        assert [r.method for r in result.requests] == methods

    def test_inline_comment_stripped(self):
        result = _parse("GET https://example.com/a # fetch a")
        assert result.requests[0].url == "https://example.com/a"

    def test_url_fragment_kept(self):
        result = _parse("GET https://example.com/page#section")
        assert result.requests[0].url == "https://example.com/page#section"

    def test_invalid_method_does_not_stop_parsing(self):
        result = _parse("INVALID https://x\n###\nGET https://y")
        assert len(result.requests) == 1
        assert result.requests[0].url == "https://y"
        assert len(result.errors) == 1
        assert "Invalid HTTP method" in result.errors[0].message
        assert result.errors[0].line_number == 1
        assert result.success is False

    def test_invalid_url(self):
        result = _parse("GET example.com/path")
        assert result.requests == []
        assert "Invalid URL format" in result.errors[0].message

    def test_missing_url(self):
        result = _parse("GET")
        assert "Invalid request line" in result.errors[0].message

    def test_placeholder_url_accepted(self):
        result = _parse("GET {{BASE_URL}}/users")
        assert result.requests[0].url == "{{BASE_URL}}/users"

    def test_line_numbers_are_one_based(self):
        result = _parse("\n\n# comment\nGET /a\n###\nPUT /b")
        assert [r.line_number for r in result.requests] == [4, 6]


class TestValidUrl:
    def test_accepted(self):
        assert is_valid_url("https://example.com")
        assert is_valid_url("http://localhost:8080/a?b=c")
        assert is_valid_url("/relative/path")
        assert is_valid_url("{{HOST}}/x")

    def test_rejected(self):
        assert not is_valid_url("example.com")
        assert not is_valid_url("just-text")

    def test_scheme_without_host_accepted(self):
        assert is_valid_url("localhost:8080/api")
        result = _parse("GET localhost:8080/api")
        assert result.errors == []
        assert result.requests[0].url == "localhost:8080/api"


class TestNames:
    def test_name_from_preceding_comment(self):
        result = _parse("# @name login\nPOST /login")
        assert result.requests[0].name == "login"

    def test_name_with_slash_comment_and_other_comments(self):
        result = _parse("// @name getUser\n# fetches the user\nGET /user")
        assert result.requests[0].name == "getUser"

    def test_blank_line_stops_name_scan(self):
        result = _parse("# @name orphan\n\nGET /x")
        assert result.requests[0].name is None

    def test_name_does_not_leak_across_separator(self):
        result = _parse("# @name first\nGET /a\n###\nGET /b")
        assert result.requests[0].name == "first"
        assert result.requests[1].name is None


class TestHeaders:
    def test_headers_parsed_in_order(self):
        result = _parse("GET /a\nAccept: application/json\nX-Trace:  abc:def  ")
        headers = result.requests[0].headers
        assert list(headers) == ["Accept", "X-Trace"]
        assert headers["X-Trace"] == "abc:def"

    def test_last_duplicate_header_wins(self):
        result = _parse("GET /a\nX-A: 1\nX-A: 2\nx-a: 3")
        assert result.requests[0].headers == {"X-A": "2", "x-a": "3"}

    def test_comment_lines_in_headers_skipped(self):
        result = _parse("GET /a\n# a comment\nAccept: */*")
        assert result.requests[0].headers == {"Accept": "*/*"}

    def test_header_without_colon_is_error(self):
        result = _parse("GET /a\nNotAHeader\nAccept: */*")
        assert len(result.requests) == 1
        assert result.requests[0].headers == {"Accept": "*/*"}
        assert "missing colon" in result.errors[0].message
        assert result.errors[0].line_number == 2

    def test_empty_header_name_is_error(self):
        result = _parse("GET /a\n: value")
        assert "empty header name" in result.errors[0].message

    def test_headers_without_body_is_valid(self):
        result = _parse("POST /a\nContent-Type: text/plain\n\n")
        assert result.requests[0].headers == {"Content-Type": "text/plain"}
        assert result.requests[0].body is None


class TestBody:
    def test_body_collected_verbatim(self):
        text = "POST /a\nContent-Type: text/plain\n\n# not a comment\n// nor this\nplain"
        result = _parse(text)
        assert result.requests[0].body == "# not a comment\n// nor this\nplain"

    def test_trailing_blank_lines_trimmed(self):
        result = _parse("POST /a\n\nLine 1\n\nLine 3\n\n\n   \n###")
        assert result.requests[0].body == "Line 1\n\nLine 3"

    def test_body_at_end_of_input(self):
        result = _parse('PUT /a\n\n{"a": 1}\n')
        assert result.requests[0].body == '{"a": 1}'

    def test_get_never_has_body(self):
        result = _parse("GET https://x\n\nsome content\n###")
        assert result.requests[0].body is None

    def test_get_without_blank_line_has_no_body(self):
        result = _parse("GET https://x\nAccept: */*")
        assert result.requests[0].body is None

    def test_head_never_has_body(self):
        result = _parse("HEAD /a\n\npayload")
        assert result.requests[0].body is None

    def test_crlf_line_endings(self):
        result = _parse("POST /a\r\nContent-Type: text/plain\r\n\r\nhello\r\nworld\r\n")
        req = result.requests[0]
        assert req.headers == {"Content-Type": "text/plain"}
        assert req.body == "hello\nworld"


class TestFixtureFile:
    def test_parse_sample_file(self):
        result = parse_request_file(FIXTURES / "sample.http")
        assert result.errors == []
        assert [r.method for r in result.requests] == ["POST", "GET", "POST", "DELETE"]
        assert [r.name for r in result.requests] == ["login", "profile", None, None]

    def test_login_request(self):
        login = parse_request_file(FIXTURES / "sample.http").requests[0]
        assert login.url == "{{BASE_URL}}/login"
        assert login.line_number == 5
        assert login.body.startswith("{")
        assert login.body.endswith("}")

    def test_multipart_request_keeps_boundaries(self):
        upload = parse_request_file(FIXTURES / "sample.http").requests[2]
        assert upload.body.startswith("--XyZ123")
        assert upload.body.endswith("--XyZ123--")


class TestFindRequest:
    def setup_method(self):
        self.result = parse_request_file(FIXTURES / "sample.http")

    def test_by_id(self):
        assert find_request(self.result, request_id="req-2").name == "profile"

    def test_by_name(self):
        assert find_request(self.result, name="login").id == "req-1"

    def test_by_line_inside_block(self):
        assert find_request(self.result, line=9).id == "req-1"
        assert find_request(self.result, line=30).id == "req-3"

    def test_line_before_first_request(self):
        assert find_request(self.result, line=2) is None

    def test_unknown(self):
        assert find_request(self.result, name="nope") is None
        assert find_request(self.result) is None
