"""Tests for the cURL parser."""

from reqsmith.models.draft import KeyValuePair
from reqsmith.parsers import curl


class TestCurlParser:
    """Tests for curl.parse."""

    def test_post_with_json_body(self) -> None:
        """Test the canonical POST example."""
        result = curl.parse(
            'curl -X POST https://api.example.com/users '
            '-H "Content-Type: application/json" -d \'{"name":"a"}\''
        )

        draft = result.draft
        assert result.dialect == "curl"
        assert draft.protocol == "HTTP"
        assert draft.method == "POST"
        assert draft.url == "https://api.example.com/users"
        assert draft.headers == [KeyValuePair(key="Content-Type", value="application/json")]
        assert draft.body == '{\n  "name": "a"\n}'
        assert draft.params == []

    def test_defaults_to_get(self) -> None:
        """Test a bare URL is a GET with no body."""
        draft = curl.parse("curl https://x.test").draft
        assert draft.method == "GET"
        assert draft.body == ""

    def test_body_upgrades_to_post(self) -> None:
        """Test a data flag without -X makes the request a POST."""
        draft = curl.parse("curl https://x.test --data 'a=1'").draft
        assert draft.method == "POST"
        assert draft.body == "a=1"

    def test_explicit_method_is_kept_with_body(self) -> None:
        """Test an explicit method is not overridden by the body."""
        draft = curl.parse("curl -X PUT https://x.test -d 'a=1'").draft
        assert draft.method == "PUT"

    def test_method_forms(self) -> None:
        """Test -XPOST, quoted and --request spellings."""
        assert curl.parse("curl -XDELETE https://x.test").draft.method == "DELETE"
        assert curl.parse('curl -X "patch" https://x.test').draft.method == "PATCH"
        assert curl.parse("curl --request OPTIONS https://x.test").draft.method == "OPTIONS"

    def test_long_data_flags_not_shadowed(self) -> None:
        """Test --data-binary is read as a whole flag."""
        draft = curl.parse("curl https://x.test --data-binary 'raw bytes'").draft
        assert draft.body == "raw bytes"

    def test_flag_like_text_inside_values_is_ignored(self) -> None:
        """Test '-d' inside a header name does not start a body."""
        draft = curl.parse("curl https://x.test -H 'x-device-id: 7'").draft
        assert draft.method == "GET"
        assert draft.body == ""
        assert draft.headers == [KeyValuePair(key="x-device-id", value="7")]

    def test_double_quoted_body_unescaped(self) -> None:
        """Test escaped quotes inside a double-quoted body."""
        draft = curl.parse('curl https://x.test -d "{\\"a\\":\\"b\\"}"').draft
        assert draft.body == '{\n  "a": "b"\n}'

    def test_unquoted_and_equals_body(self) -> None:
        """Test unquoted bodies and --data=value."""
        assert curl.parse("curl https://x.test -d a=1").draft.body == "a=1"
        assert curl.parse("curl https://x.test --data=b=2").draft.body == "b=2"

    def test_ansi_c_quoted_body(self) -> None:
        """Test bash $'...' bodies as produced by browsers."""
        draft = curl.parse("curl https://x.test --data-raw $'it\\'s'").draft
        assert draft.body == "it's"

    def test_non_json_body_kept_verbatim(self) -> None:
        """Test a body that fails JSON parsing is left alone."""
        draft = curl.parse("curl https://x.test -d '{not json'").draft
        assert draft.body == "{not json"

    def test_header_split_on_first_colon(self) -> None:
        """Test header values may contain colons."""
        draft = curl.parse("curl https://x.test --header 'Referer: https://a.test:8080/'").draft
        assert draft.headers == [KeyValuePair(key="Referer", value="https://a.test:8080/")]

    def test_header_without_colon_skipped(self) -> None:
        """Test malformed headers are dropped."""
        draft = curl.parse("curl https://x.test -H 'nocolon'").draft
        assert draft.headers == []

    def test_bash_snippet(self, read_fixture) -> None:
        """Test a multi-line snippet copied as cURL (bash)."""
        draft = curl.parse(read_fixture("chrome_curl_bash.txt")).draft

        assert draft.url == "https://api.example.com/v1/orders?page=2&sort=desc"
        assert draft.method == "POST"
        assert [h.key for h in draft.headers] == ["accept", "authorization", "x-device-id"]
        assert [(p.key, p.value) for p in draft.params] == [("page", "2"), ("sort", "desc")]
        assert draft.body == '{\n  "item": "book",\n  "qty": 1\n}'

    def test_cmd_snippet(self, read_fixture) -> None:
        """Test a snippet copied as cURL (cmd) with caret escapes."""
        draft = curl.parse(read_fixture("chrome_curl_cmd.txt")).draft

        assert draft.url == "https://api.example.com/v1/orders"
        assert draft.method == "POST"
        assert draft.headers == [
            KeyValuePair(key="accept", value="application/json"),
            KeyValuePair(key="content-type", value="application/json"),
        ]
        assert draft.body == '{\n  "item": "book"\n}'

    def test_normalize_folds_continuations(self) -> None:
        """Test backslash-newline continuations become spaces."""
        normalized = curl.normalize("curl \\\n  https://x.test \\\r\n -I")
        assert normalized == "curl    https://x.test   -I"
