"""Tests for the line classifier."""

import pytest

from lteconsole.core.models.base import LineTag
from lteconsole.parsing.classifier import classify
from lteconsole.parsing.registry import UE_TABLE_DELIMITER


class TestClassify:
    """Tests for classify() against the project registry."""

    @pytest.mark.parametrize("line", ["", "   ", "\t"])
    def test_blank(self, registry, line):
        assert classify(line, registry).tag is LineTag.BLANK

    @pytest.mark.parametrize(
        "line",
        [
            "PRACH: cell=01 seq=23 ta=1 snr=12.3 dB",
            "(enb) t",
            "Unknown command: foo",
            "[ bs-isp4-01:root ~]# ./lteenb enb.cfg",
            "Press return to stop",
        ],
    )
    def test_noise_patterns(self, registry, line):
        ue = registry.get("ue")
        assert classify(line, registry, ue).tag is LineTag.NOISE

    def test_delimiter(self, registry):
        result = classify(UE_TABLE_DELIMITER, registry)
        assert result.tag is LineTag.DELIMITER
        assert result.kind is registry.get("ue")

    def test_delimiter_is_trimmed(self, registry):
        result = classify(f"   {UE_TABLE_DELIMITER}  \n", registry)
        assert result.tag is LineTag.DELIMITER

    def test_delimiter_needs_exact_match(self, registry):
        assert classify(UE_TABLE_DELIMITER + "-", registry).tag is LineTag.NOISE

    def test_header_without_active_kind(self, registry):
        result = classify("UE_ID CL RNTI", registry)
        assert result.tag is LineTag.HEADER
        assert result.kind is registry.get("ue")

    def test_header_token_must_match_whole_token(self, registry):
        assert classify("UE_IDX CL RNTI", registry).tag is LineTag.NOISE

    def test_header_of_other_kind(self, registry):
        result = classify("TOTAL RX TX", registry, registry.get("ue"))
        assert result.tag is LineTag.HEADER
        assert result.kind is registry.get("cpu")

    def test_data_requires_active_kind(self, registry):
        assert classify("1 CONNECTED 10 5", registry).tag is LineTag.NOISE

    def test_data_with_active_kind(self, registry):
        ue = registry.get("ue")
        result = classify("  1 CONNECTED 10 5", registry, ue)
        assert result.tag is LineTag.DATA
        assert result.kind is ue
        assert result.text == "1 CONNECTED 10 5"

    def test_stopped_line_is_data(self, registry):
        assert classify("7 [stopped]", registry, registry.get("ue")).tag is LineTag.DATA

    @pytest.mark.parametrize("line", ["42", "2024-05-01 12:00:00 cell up", "7:"])
    def test_leading_number_alone_is_not_data(self, registry, line):
        assert classify(line, registry, registry.get("ue")).tag is LineTag.NOISE

    def test_data_pattern_depends_on_kind(self, registry):
        line = "45.2% 12.0% 33.2%"
        assert classify(line, registry, registry.get("cpu")).tag is LineTag.DATA
        assert classify(line, registry, registry.get("ue")).tag is LineTag.NOISE

    def test_signed_decimal_data(self, registry):
        audio = registry.get("audio")
        assert classify("-12.5 -3.0", registry, audio).tag is LineTag.DATA
        assert classify("+0.5 1.0", registry, audio).tag is LineTag.DATA

    def test_unrecognized_text_is_noise(self, registry):
        ue = registry.get("ue")
        assert classify("Cell 1 started", registry, ue).tag is LineTag.NOISE
