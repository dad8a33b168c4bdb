"""Action-list parsing."""

import pytest

from excel_relay.errors import UnprocessableReplyError
from excel_relay.models import ActionsReply, TextResponse
from excel_relay.relay import parse_actions, strip_code_fence


class TestStripCodeFence:

    def test_plain_content_untouched(self):
        assert strip_code_fence("[1, 2]") == "[1, 2]"

    def test_json_fence(self):
        assert strip_code_fence('```json\n[{"cell": "A1"}]\n```') == '[{"cell": "A1"}]'

    def test_bare_fence(self):
        assert strip_code_fence("```\n[]\n```") == "[]"


class TestParseActions:

    def test_array(self):
        result = parse_actions('[{"cell": "B2", "formula": "=SUM(B1:B10)"}]', strict=True)
        assert result == ActionsReply(actions=[{"cell": "B2", "formula": "=SUM(B1:B10)"}])

    def test_empty_array(self):
        assert parse_actions("[]", strict=True) == ActionsReply(actions=[])

    @pytest.mark.parametrize("content", ['{"cell": "A1"}', "42", '"A1"', "null"])
    def test_non_array_json_rejected(self, content):
        with pytest.raises(UnprocessableReplyError, match="not an array"):
            parse_actions(content, strict=False)

    def test_invalid_json_strict(self):
        with pytest.raises(UnprocessableReplyError, match="invalid JSON") as exc_info:
            parse_actions("Sure! Here are your edits.", strict=True)
        assert exc_info.value.status_code == 422

    def test_invalid_json_lenient(self):
        result = parse_actions("Sure! Here are your edits.", strict=False)
        assert result == TextResponse(response="Sure! Here are your edits.")
